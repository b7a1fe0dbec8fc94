import logging

from fastapi import APIRouter

from yomiage.config import settings
from yomiage.dependencies import get_redis, get_voicevox
from yomiage.models.voicevox import VoicevoxError
from yomiage.schemas.health import HealthResponse

logger = logging.getLogger("yomiage")
router = APIRouter()

VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    """サーバー、Redis、VOICEVOXエンジンの状態を確認します。

    認証は不要です。
    """
    redis_ok = False
    try:
        r = await get_redis()
        await r.ping()
        redis_ok = True
    except Exception as e:
        logger.debug("Redis ping failed: %s", e)

    voicevox_version = None
    try:
        voicevox = await get_voicevox()
        voicevox_version = await voicevox.version()
    except VoicevoxError as e:
        logger.debug("VOICEVOX unreachable: %s", e)

    return HealthResponse(
        status="healthy" if redis_ok and voicevox_version else "degraded",
        version=VERSION,
        voicevox_connected=voicevox_version is not None,
        voicevox_version=voicevox_version,
        redis_connected=redis_ok,
        readout_policy=settings.readout_busy_policy,
    )
