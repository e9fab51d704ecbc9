import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.schemas import quiz as quiz_schema, quiz_submission as submission_schema
from app.services import feedback_service, quiz_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quizzes"])


@router.post("/quizzes", response_model=quiz_schema.QuizCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    request: quiz_schema.QuizCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 생성 API"""
    return await quiz_service.create_quiz(db, request)


@router.get("/quizzes/{quiz_id}", response_model=quiz_schema.QuizResponse)
async def get_quiz(
    quiz_id: int,
    include_answers: bool = Query(False, description="정답/해설 포함 여부 (강좌 관리자용)"),
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 조회 API"""
    return await quiz_service.get_quiz(db, quiz_id, include_answers=include_answers)


@router.put("/quizzes/{quiz_id}", response_model=quiz_schema.QuizResponse)
async def update_quiz(
    quiz_id: int,
    request: quiz_schema.QuizUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 메타데이터 수정 API"""
    return await quiz_service.update_quiz(db, quiz_id, request)


@router.delete("/quizzes/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz(
    quiz_id: int,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 삭제 API"""
    await quiz_service.delete_quiz(db, quiz_id)


@router.post("/quizzes/{quiz_id}/submit", response_model=submission_schema.QuizResultResponse)
async def submit_quiz(
    quiz_id: int,
    request: submission_schema.QuizSubmitRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 제출 API

    채점 결과는 바로 반환하고, 오답 AI 피드백은 응답 이후 백그라운드에서 생성한다.
    """
    outcome = await quiz_service.submit_quiz(db, quiz_id, request)
    if outcome.wrong_answer_ids:
        background_tasks.add_task(feedback_service.enrich_wrong_answers, outcome.wrong_answer_ids)
    return outcome.result


@router.get("/quizzes/{quiz_id}/results/{user_id}", response_model=submission_schema.QuizResultListResponse)
async def get_quiz_results(
    quiz_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """사용자 퀴즈 제출 기록 조회 API"""
    return await quiz_service.get_quiz_results(db, quiz_id, user_id)


@router.get("/quizzes/{quiz_id}/stats", response_model=submission_schema.QuizStatsResponse)
async def get_quiz_stats(
    quiz_id: int,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 통계 조회 API"""
    return await quiz_service.get_quiz_stats(db, quiz_id)


@router.get("/users/{user_id}/quiz-history", response_model=submission_schema.QuizHistoryResponse)
async def get_user_quiz_history(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """사용자 응시 이력 조회 API"""
    return await quiz_service.get_user_quiz_history(db, user_id)
