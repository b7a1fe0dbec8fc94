import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from yomiage.config import settings
from yomiage.dependencies import ReadoutDep, SessionDep, VoicevoxDep
from yomiage.middleware.metrics import TUNING_TIER
from yomiage.models.voicevox import VoicevoxError
from yomiage.schemas.readout import (
    PlayRequest,
    ReadoutRequest,
    ReadoutStateResponse,
    Speaker,
    TuningResponse,
)
from yomiage.services.audio import AudioValidationError, PlaybackError, wav_duration
from yomiage.services.expression import assemble
from yomiage.services.readout import ReadoutBusyError, ReadoutController
from yomiage.services.session import SessionNotFound
from yomiage.services.tuning import base_parameters, tune
from yomiage.services.verbalize import OutOfRangeError, verbalize_numbers

logger = logging.getLogger("yomiage")
router = APIRouter()


async def _resolve(
    req: ReadoutRequest | PlayRequest, session_mgr
) -> tuple[str, float | None]:
    """Text to read and the duration hint that applies to it."""
    duration = req.speech_duration_s
    if req.session_id is not None:
        try:
            session = await session_mgr.get(req.session_id)
        except SessionNotFound:
            raise HTTPException(status_code=404, detail=f"Unknown session: {req.session_id}")
        if session.calculation is None:
            raise HTTPException(status_code=404, detail="Session has no problem yet")
        return assemble(session.calculation), duration or session.speech_duration_s

    if not req.text or not req.text.strip():
        raise HTTPException(status_code=422, detail="Either session_id or text is required")
    if len(req.text) > settings.readout_max_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Text exceeds {settings.readout_max_chars} character limit",
        )
    try:
        text = verbalize_numbers(req.text)
    except OutOfRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return text, duration


@router.post("/readout/tuning", response_model=TuningResponse, summary="読み上げパラメータ")
async def readout_tuning(req: ReadoutRequest, session_mgr: SessionDep):
    """読み上げ用テキストと調整後の合成パラメータを返します（音声合成なし）。"""
    text, duration = await _resolve(req, session_mgr)
    params = tune(text, base_parameters(duration, settings.speech_reference_duration_s))
    return TuningResponse(
        text=text,
        speed_scale=params.speed_scale,
        intonation_scale=params.intonation_scale,
        pause_floor=params.pause_floor,
        vowel_multiplier=params.vowel_multiplier,
        risky_patterns=list(params.risky_patterns),
        tier=params.tier,
    )


@router.post("/readout", summary="問題の読み上げ音声")
async def readout(req: ReadoutRequest, session_mgr: SessionDep, voicevox: VoicevoxDep):
    """セッションの問題（またはテキスト）をVOICEVOXで合成し、WAVを返します。

    聞き間違えやすい読み（はっせん、いっちょう、よんまん など）を含む場合は
    速度を落とし、イントネーションとポーズを強めます。
    """
    text, duration = await _resolve(req, session_mgr)
    params = tune(text, base_parameters(duration, settings.speech_reference_duration_s))
    TUNING_TIER.labels(tier=str(params.tier)).inc()

    try:
        audio = await voicevox.synthesize(text, params, speaker=req.speaker_id)
    except VoicevoxError as e:
        raise HTTPException(status_code=502, detail=f"VOICEVOX error: {e.kind.value}")

    headers = {
        "X-Speed-Scale": f"{params.speed_scale:.3f}",
        "X-Tuning-Tier": str(params.tier),
    }
    try:
        headers["X-Audio-Duration-S"] = f"{wav_duration(audio):.2f}"
    except AudioValidationError as e:
        logger.warning("Synthesized audio unreadable: %s", e)

    return Response(content=audio, media_type="audio/wav", headers=headers)


@router.get("/speakers", response_model=list[Speaker], summary="話者一覧")
async def speakers(voicevox: VoicevoxDep):
    try:
        return await voicevox.list_speakers()
    except VoicevoxError as e:
        raise HTTPException(status_code=502, detail=f"VOICEVOX error: {e.kind.value}")


def _state(controller: ReadoutController, **extra) -> ReadoutStateResponse:
    return ReadoutStateResponse(
        state=controller.state.value, policy=controller.policy.value, **extra
    )


@router.post("/readout/play", response_model=ReadoutStateResponse, summary="サーバーで再生")
async def readout_play(req: PlayRequest, session_mgr: SessionDep, controller: ReadoutDep):
    """サーバー側のスピーカーで読み上げます。

    再生中に呼ばれた場合、`cancel` ポリシーでは前の読み上げを止めて開始し、
    `reject` ポリシーでは 409 を返します。
    """
    text, duration = await _resolve(req, session_mgr)
    try:
        started = await controller.speak(text, duration)
    except ReadoutBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except VoicevoxError as e:
        raise HTTPException(status_code=502, detail=f"VOICEVOX error: {e.kind.value}")
    except PlaybackError as e:
        logger.warning("Server playback failed: %s", e)
        raise HTTPException(status_code=503, detail=f"Playback error: {e}")
    params = controller.last_parameters
    return _state(controller, started=started, text=text, tier=params.tier)


@router.post("/readout/stop", response_model=ReadoutStateResponse, summary="再生を停止")
async def readout_stop(controller: ReadoutDep):
    controller.stop()
    return _state(controller)


@router.get("/readout/state", response_model=ReadoutStateResponse, summary="再生状態")
async def readout_state(controller: ReadoutDep):
    return _state(controller)
