import io
import logging

import soundfile as sf

logger = logging.getLogger("yomiage")


class AudioValidationError(Exception):
    pass


class PlaybackError(Exception):
    pass


def wav_duration(audio: bytes) -> float:
    """Length in seconds of WAV bytes returned by the synthesis engine."""
    try:
        info = sf.info(io.BytesIO(audio))
    except Exception as e:
        raise AudioValidationError(f"Cannot read audio: {e}")
    return info.frames / info.samplerate
