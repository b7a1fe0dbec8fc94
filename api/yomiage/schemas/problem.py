from pydantic import BaseModel, Field

from yomiage.config import settings
from yomiage.services.calculation import Operator


class ProblemRequest(BaseModel):
    operand_count: int = Field(
        default=settings.default_operand_count, ge=2, le=30, description="口数"
    )
    min_digits: int = Field(default=settings.default_min_digits, ge=1, le=16)
    max_digits: int = Field(default=settings.default_max_digits, ge=1, le=16)
    speech_duration_s: float = Field(
        default=settings.default_speech_duration_s,
        ge=3.0,
        le=30.0,
        description="Target total readout duration",
    )


class ProblemResponse(BaseModel):
    session_id: str
    numbers: list[int]
    operators: list[Operator]
    operand_count: int
    speech_text: str
    display_text: str
    operator_words: int
    revealed: bool = False


class AnswerResponse(BaseModel):
    session_id: str
    numbers: list[int]
    operators: list[Operator]
    expression: str
    result: int
    result_text: str
