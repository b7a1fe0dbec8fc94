from pydantic import BaseModel, Field


class ReadoutRequest(BaseModel):
    session_id: str | None = Field(default=None, description="Read this session's problem")
    text: str | None = Field(default=None, description="Raw text; digits are verbalized")
    speech_duration_s: float | None = Field(default=None, ge=3.0, le=30.0)
    speaker_id: int | None = Field(default=None, description="VOICEVOX style id")


class TuningResponse(BaseModel):
    text: str
    speed_scale: float
    intonation_scale: float
    pause_floor: float
    vowel_multiplier: float
    risky_patterns: list[str]
    tier: int


class SpeakerStyle(BaseModel):
    name: str
    id: int


class Speaker(BaseModel):
    name: str
    speaker_uuid: str
    styles: list[SpeakerStyle] = []


class PlayRequest(BaseModel):
    session_id: str | None = Field(default=None, description="Read this session's problem")
    text: str | None = Field(default=None, description="Raw text; digits are verbalized")
    speech_duration_s: float | None = Field(default=None, ge=3.0, le=30.0)


class ReadoutStateResponse(BaseModel):
    state: str
    policy: str
    started: bool | None = None
    text: str | None = None
    tier: int | None = None
