from pydantic import BaseModel, Field

from yomiage.services.calculation import Operator


class VerbalizeRequest(BaseModel):
    number: int = Field(..., ge=0, description="Non-negative integer, up to 16 digits")


class VerbalizeResponse(BaseModel):
    number: int
    text: str


class ExpressionRequest(BaseModel):
    numbers: list[int] = Field(..., min_length=2)
    operators: list[Operator]


class ExpressionResponse(BaseModel):
    speech_text: str
    display_text: str
    operator_words: int
    result: int
