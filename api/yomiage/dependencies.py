import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, HTTPException

from yomiage.config import settings
from yomiage.models.voicevox import VoicevoxClient, load_voicevox
from yomiage.services.readout import BusyPolicy, ReadoutController
from yomiage.services.session import SessionManager

logger = logging.getLogger("yomiage")

_redis_pool: redis.Redis | None = None
_session_manager: SessionManager | None = None
_voicevox: VoicevoxClient | None = None
_readout: ReadoutController | None = None
_player = None


async def get_redis() -> redis.Redis:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(
            settings.redis_url, decode_responses=True
        )
    return _redis_pool


async def get_session_manager() -> SessionManager:
    global _session_manager
    if _session_manager is None:
        r = await get_redis()
        _session_manager = SessionManager(r)
    return _session_manager


async def get_voicevox() -> VoicevoxClient:
    global _voicevox
    if _voicevox is None:
        _voicevox = load_voicevox()
    return _voicevox


async def get_readout_controller() -> ReadoutController:
    """Server-side playback on the host's default output device."""
    global _readout, _player
    if _readout is None:
        try:
            from yomiage.models.player import PyAudioPlayer
        except ImportError as e:
            raise HTTPException(
                status_code=503,
                detail=f"Server playback unavailable, install the playback extra ({e})",
            )

        _player = PyAudioPlayer()
        _readout = ReadoutController(
            await get_voicevox(),
            _player,
            policy=BusyPolicy(settings.readout_busy_policy),
            reference_duration_s=settings.speech_reference_duration_s,
        )
        logger.info("Readout controller ready (policy=%s)", settings.readout_busy_policy)
    return _readout


async def close_clients():
    global _redis_pool, _session_manager, _voicevox, _readout, _player
    if _readout is not None:
        _readout.stop()
        _readout = None
    if _player is not None:
        _player.shutdown()
        _player = None
    if _voicevox is not None:
        await _voicevox.close()
        _voicevox = None
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
    _session_manager = None


SessionDep = Annotated[SessionManager, Depends(get_session_manager)]
VoicevoxDep = Annotated[VoicevoxClient, Depends(get_voicevox)]
ReadoutDep = Annotated[ReadoutController, Depends(get_readout_controller)]
