import logging
import time
from enum import Enum

import httpx

from yomiage.config import settings
from yomiage.middleware.metrics import SYNTHESIS_REQUESTS, SYNTHESIS_STAGE_DURATION
from yomiage.services.tuning import SynthesisParameters, apply_to_query

logger = logging.getLogger("yomiage")


class VoicevoxErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    REQUEST_FAILED = "request_failed"
    INVALID_RESPONSE = "invalid_response"
    ENGINE_NOT_RUNNING = "engine_not_running"


class VoicevoxError(Exception):
    def __init__(self, kind: VoicevoxErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class VoicevoxClient:
    """Async client for a VOICEVOX engine (audio_query → synthesis)."""

    def __init__(
        self,
        base_url: str,
        speaker_id: int = 2,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url.startswith(("http://", "https://")):
            raise VoicevoxError(
                VoicevoxErrorKind.INVALID_URL, f"Invalid VOICEVOX URL: {base_url}"
            )
        self.base_url = base_url.rstrip("/")
        self.speaker_id = speaker_id
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout_s, transport=transport
        )

    def _speaker(self, speaker: int | None) -> int:
        return self.speaker_id if speaker is None else speaker

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            raise VoicevoxError(
                VoicevoxErrorKind.ENGINE_NOT_RUNNING,
                f"Cannot reach VOICEVOX at {self.base_url}: {e}",
            )
        except httpx.HTTPError as e:
            raise VoicevoxError(
                VoicevoxErrorKind.REQUEST_FAILED, f"{method} {path} failed: {e}"
            )
        if response.status_code != 200:
            raise VoicevoxError(
                VoicevoxErrorKind.REQUEST_FAILED,
                f"{method} {path} returned {response.status_code}",
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, expected: type):
        try:
            data = response.json()
        except ValueError as e:
            raise VoicevoxError(VoicevoxErrorKind.INVALID_RESPONSE, f"Bad JSON: {e}")
        if not isinstance(data, expected):
            raise VoicevoxError(
                VoicevoxErrorKind.INVALID_RESPONSE,
                f"Expected {expected.__name__}, got {type(data).__name__}",
            )
        return data

    async def create_query(self, text: str, speaker: int | None = None) -> dict:
        response = await self._request(
            "POST",
            "/audio_query",
            params={"text": text, "speaker": self._speaker(speaker)},
        )
        return self._json(response, dict)

    async def synthesize_audio(self, query: dict, speaker: int | None = None) -> bytes:
        response = await self._request(
            "POST",
            "/synthesis",
            params={"speaker": self._speaker(speaker)},
            json=query,
        )
        return response.content

    async def list_speakers(self) -> list[dict]:
        response = await self._request("GET", "/speakers")
        return self._json(response, list)

    async def version(self) -> str:
        response = await self._request("GET", "/version")
        return response.text.strip('"\n ')

    async def synthesize(
        self,
        text: str,
        params: SynthesisParameters,
        speaker: int | None = None,
    ) -> bytes:
        """Synthesize text to WAV bytes with tuned parameters."""
        try:
            start = time.perf_counter()
            query = await self.create_query(text, speaker)
            SYNTHESIS_STAGE_DURATION.labels(stage="audio_query").observe(
                time.perf_counter() - start
            )

            query = apply_to_query(query, params)

            start = time.perf_counter()
            audio = await self.synthesize_audio(query, speaker)
            SYNTHESIS_STAGE_DURATION.labels(stage="synthesis").observe(
                time.perf_counter() - start
            )
        except VoicevoxError as e:
            SYNTHESIS_REQUESTS.labels(status=e.kind.value).inc()
            logger.warning("VOICEVOX synthesis failed (%s): %s", e.kind.value, e)
            raise

        SYNTHESIS_REQUESTS.labels(status="ok").inc()
        logger.info(
            "VOICEVOX: %d chars -> %d bytes (speed=%.2f, intonation=%.2f)",
            len(text), len(audio), params.speed_scale, params.intonation_scale,
        )
        return audio

    async def close(self):
        await self._client.aclose()


def load_voicevox() -> VoicevoxClient:
    logger.info("Connecting VOICEVOX client: %s", settings.voicevox_url)
    return VoicevoxClient(
        settings.voicevox_url,
        speaker_id=settings.voicevox_speaker_id,
        timeout_s=settings.voicevox_timeout_s,
    )
