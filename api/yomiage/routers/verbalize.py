import logging

from fastapi import APIRouter, HTTPException

from yomiage.schemas.verbalize import (
    ExpressionRequest,
    ExpressionResponse,
    VerbalizeRequest,
    VerbalizeResponse,
)
from yomiage.services.calculation import Calculation, InvariantViolation
from yomiage.services.expression import (
    assemble,
    assemble_for_display,
    count_operator_words,
)
from yomiage.services.verbalize import OutOfRangeError, verbalize

logger = logging.getLogger("yomiage")
router = APIRouter()


@router.post("/verbalize", response_model=VerbalizeResponse, summary="数字の読み")
async def verbalize_number(req: VerbalizeRequest):
    """数字をひらがなの読みに変換します（16桁まで）。

    **例:** `{"number": 1000}` → `いっせん`
    """
    try:
        text = verbalize(req.number)
    except OutOfRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return VerbalizeResponse(number=req.number, text=text)


@router.post(
    "/verbalize/expression", response_model=ExpressionResponse, summary="計算式の読み"
)
async def verbalize_expression(req: ExpressionRequest):
    """計算式を読上算の文章に変換します。"""
    calc = Calculation(numbers=tuple(req.numbers), operators=tuple(req.operators))
    try:
        speech = assemble(calc)
        display = assemble_for_display(calc)
    except (InvariantViolation, OutOfRangeError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ExpressionResponse(
        speech_text=speech,
        display_text=display,
        operator_words=count_operator_words(calc),
        result=calc.result,
    )
