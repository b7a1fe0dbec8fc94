import logging

from fastapi import APIRouter, HTTPException

from yomiage.dependencies import SessionDep
from yomiage.middleware.metrics import PROBLEMS_GENERATED
from yomiage.schemas.problem import AnswerResponse, ProblemRequest, ProblemResponse
from yomiage.services.expression import (
    assemble,
    assemble_for_display,
    count_operator_words,
)
from yomiage.services.generator import ConfigurationError, generate
from yomiage.services.session import DrillSession, SessionNotFound
from yomiage.services.verbalize import verbalize_signed

logger = logging.getLogger("yomiage")
router = APIRouter()


def _problem_response(session_id: str, session: DrillSession) -> ProblemResponse:
    calc = session.calculation
    return ProblemResponse(
        session_id=session_id,
        numbers=list(calc.numbers),
        operators=list(calc.operators),
        operand_count=len(calc.numbers),
        speech_text=assemble(calc),
        display_text=assemble_for_display(calc),
        operator_words=count_operator_words(calc),
        revealed=session.revealed,
    )


def _generate(session: DrillSession):
    try:
        calc = generate(session.operand_count, session.min_digits, session.max_digits)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    PROBLEMS_GENERATED.labels(operand_count=str(session.operand_count)).inc()
    return calc


async def _get_session(session_mgr, session_id: str) -> DrillSession:
    try:
        session = await session_mgr.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    if session.calculation is None:
        raise HTTPException(status_code=404, detail="Session has no problem yet")
    return session


@router.post("/problems", response_model=ProblemResponse, summary="問題を生成")
async def create_problem(req: ProblemRequest, session_mgr: SessionDep):
    """口数と桁数範囲から新しい問題を生成し、セッションを作成します。

    最小桁数の数字と最大桁数の数字が必ず一つずつ含まれます。
    """
    session = DrillSession(
        operand_count=req.operand_count,
        min_digits=req.min_digits,
        max_digits=req.max_digits,
        speech_duration_s=req.speech_duration_s,
    )
    session.calculation = _generate(session)
    session_id = await session_mgr.create(session)
    logger.info("Session %s: %s", session_id, session.calculation.expression)
    return _problem_response(session_id, session)


@router.get("/problems/{session_id}", response_model=ProblemResponse, summary="現在の問題")
async def get_problem(session_id: str, session_mgr: SessionDep):
    session = await _get_session(session_mgr, session_id)
    return _problem_response(session_id, session)


@router.post(
    "/problems/{session_id}/next", response_model=ProblemResponse, summary="次の問題"
)
async def next_problem(session_id: str, session_mgr: SessionDep):
    """同じ設定で次の問題を生成します。前の問題は破棄されます。"""
    try:
        session = await session_mgr.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    session = await session_mgr.set_problem(session_id, _generate(session))
    return _problem_response(session_id, session)


@router.post(
    "/problems/{session_id}/reveal", response_model=AnswerResponse, summary="答えを表示"
)
async def reveal_answer(session_id: str, session_mgr: SessionDep):
    await _get_session(session_mgr, session_id)
    session = await session_mgr.reveal(session_id)
    calc = session.calculation
    return AnswerResponse(
        session_id=session_id,
        numbers=list(calc.numbers),
        operators=list(calc.operators),
        expression=calc.expression,
        result=calc.result,
        result_text=verbalize_signed(calc.result),
    )
