from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    voicevox_connected: bool
    voicevox_version: str | None = None
    redis_connected: bool
    readout_policy: str
