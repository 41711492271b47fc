"""
Questionnaire API endpoints.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from marketing_planner.questionnaire.flow import FlowStateError, QuestionFlowController, SubmissionError
from marketing_planner.questionnaire.questions import SQUARE_TITLES
from marketing_planner.schemas.questionnaire import (
    AnswerRequest,
    FlowSnapshotResponse,
    QuestionListResponse,
    SessionStartRequest,
)
from marketing_planner.services.questionnaire_service import (
    QuestionnaireService,
    SessionOwnerError,
    UnknownQuestionError,
)

router = APIRouter(prefix="/questionnaire", tags=["questionnaire"])


def get_questionnaire_service() -> QuestionnaireService:
    """Dependency to get questionnaire service instance."""
    from marketing_planner.dependencies import get_questionnaire_service as _get_questionnaire_service
    return _get_questionnaire_service()


def _snapshot(session_id: str, controller: QuestionFlowController) -> FlowSnapshotResponse:
    view = controller.snapshot()
    view["plan_id"] = view.pop("artifact_id")
    return FlowSnapshotResponse(session_id=session_id, **view)


@router.get("/questions", response_model=QuestionListResponse)
async def list_questions(
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Get the full ordered question sequence."""
    questions = list(questionnaire_service.questions)
    return QuestionListResponse(total=len(questions), squares=SQUARE_TITLES, questions=questions)


@router.post("/sessions", response_model=FlowSnapshotResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: SessionStartRequest,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """
    Start a questionnaire session, or resume one from its saved draft.

    Args:
        session_id: Optional id of an earlier session to resume
        user_id: Optional owner recorded on the generated plan
    """
    session_id = request.session_id or uuid.uuid4().hex
    try:
        controller = await questionnaire_service.get_session(session_id, user_id=request.user_id)
        return _snapshot(session_id, controller)
    except SessionOwnerError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/sessions/{session_id}", response_model=FlowSnapshotResponse)
async def get_session(
    session_id: str,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Get where a session currently stands."""
    controller = await questionnaire_service.get_session(session_id)
    return _snapshot(session_id, controller)


@router.put("/sessions/{session_id}/answers/{question_id}", response_model=FlowSnapshotResponse)
async def record_answer(
    session_id: str,
    question_id: str,
    answer: AnswerRequest,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Record the answer to one question."""
    try:
        controller = await questionnaire_service.record_answer(session_id, question_id, answer.value)
        return _snapshot(session_id, controller)
    except UnknownQuestionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FlowStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/sessions/{session_id}/advance", response_model=FlowSnapshotResponse)
async def advance(
    session_id: str,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Go to the next question; on the last question this generates the plan."""
    try:
        controller = await questionnaire_service.advance(session_id)
        return _snapshot(session_id, controller)
    except SubmissionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate marketing plan: {e}. Please try again."
        )


@router.post("/sessions/{session_id}/retreat", response_model=FlowSnapshotResponse)
async def retreat(
    session_id: str,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Go back to the previous question."""
    controller = await questionnaire_service.retreat(session_id)
    return _snapshot(session_id, controller)


@router.post("/sessions/{session_id}/retry", response_model=FlowSnapshotResponse)
async def retry(
    session_id: str,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Return to the last question after a failed submission."""
    try:
        controller = await questionnaire_service.retry(session_id)
        return _snapshot(session_id, controller)
    except FlowStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/sessions/{session_id}/restart", response_model=FlowSnapshotResponse)
async def restart(
    session_id: str,
    questionnaire_service: QuestionnaireService = Depends(get_questionnaire_service)
):
    """Discard all answers and start over."""
    try:
        controller = await questionnaire_service.restart(session_id)
        return _snapshot(session_id, controller)
    except FlowStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
