from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "info"

    # Auth
    api_key: str = "change-me-in-production"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # VOICEVOX engine
    voicevox_url: str = "http://127.0.0.1:50021"
    voicevox_speaker_id: int = 2  # 四国めたん ノーマル
    voicevox_timeout_s: float = 10.0

    # Drill defaults
    default_operand_count: int = 3
    default_min_digits: int = 8
    default_max_digits: int = 16
    default_speech_duration_s: float = 10.0

    # Duration hint read at speedScale 1.0
    speech_reference_duration_s: float = 10.0

    # "cancel" stops the current readout, "reject" refuses the new one
    readout_busy_policy: str = "cancel"

    # Sessions
    session_ttl_s: int = 1800

    # Monitoring
    prometheus_enabled: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Limits
    readout_max_chars: int = 1000

    model_config = {
        "env_file": ["../.env", ".env"],
        "env_file_encoding": "utf-8",
        "env_prefix": "YOMIAGE_",
        "extra": "ignore",
    }


settings = Settings()
