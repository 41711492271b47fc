"""
Questionnaire navigation state machine.

The controller owns the ordered question sequence, the current position,
the answer map and the set of completed squares. Every answer change is
written through to a DraftStore in the background; when the sequence is
exhausted the answers are handed to a submitter exactly once.

States::

    hydrating -> navigating -> submitting
                     ^              |
                     |  retry()     v (submitter raised)
                     +---------- failed
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple

from marketing_planner.models.question import AnswerMap, AnswerValue, Question
from marketing_planner.services.draft_store import DraftStore

logger = logging.getLogger(__name__)


Submitter = Callable[[AnswerMap], Awaitable[str]]


class FlowState(str, Enum):
    HYDRATING = "hydrating"
    NAVIGATING = "navigating"
    SUBMITTING = "submitting"
    FAILED = "failed"


class FlowStateError(Exception):
    """Raised when an operation is not allowed in the controller's current state."""
    pass


class SubmissionError(Exception):
    """Raised when handing the completed answers to the submitter fails."""
    pass


class QuestionFlowController:
    """Drives forward/backward navigation through a fixed question sequence."""

    def __init__(
        self,
        questions: Sequence[Question],
        draft_store: DraftStore,
        session_key: str,
        submitter: Submitter,
    ):
        self.questions: Tuple[Question, ...] = tuple(questions)
        self.draft_store = draft_store
        self.session_key = session_key
        self.submitter = submitter

        self.current_index: int = 0
        self.answers: AnswerMap = {}
        self.completed_squares: Set[int] = set()
        self.state: FlowState = FlowState.HYDRATING
        self.last_error: Optional[str] = None
        self.artifact_id: Optional[str] = None

        self._pending_writes: Set[asyncio.Task] = set()

    @classmethod
    async def start(
        cls,
        questions: Sequence[Question],
        draft_store: DraftStore,
        session_key: str,
        submitter: Submitter,
    ) -> "QuestionFlowController":
        """Build a controller and hydrate its answers from the stored draft."""
        controller = cls(questions, draft_store, session_key, submitter)
        controller.answers = await draft_store.hydrate(session_key)
        controller.state = FlowState.NAVIGATING
        logger.info(
            f"Questionnaire {session_key} started with {len(controller.answers)} saved answers "
            f"and {len(controller.questions)} questions"
        )
        return controller

    @property
    def is_last(self) -> bool:
        return bool(self.questions) and self.current_index == len(self.questions) - 1

    def current_question(self) -> Optional[Question]:
        """The question at the current index, or None for an empty sequence."""
        if not self.questions:
            return None
        return self.questions[self.current_index]

    def record_answer(self, question_id: str, value: AnswerValue) -> None:
        """Store an answer, overwriting any previous one, and write the draft through.

        The draft write runs in the background; its failure is logged by the
        DraftStore and never surfaces here.
        """
        if self.state != FlowState.NAVIGATING:
            raise FlowStateError(f"Cannot record answers while {self.state.value}")

        self.answers[question_id] = value
        self._schedule_persist()

    def _schedule_persist(self) -> None:
        revision = self.draft_store.next_revision(self.session_key)
        snapshot = dict(self.answers)
        task = asyncio.get_running_loop().create_task(
            self.draft_store.persist(self.session_key, snapshot, revision=revision)
        )
        self._pending_writes.add(task)
        task.add_done_callback(self._on_write_done)

    def _on_write_done(self, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Draft write for {self.session_key} failed: {task.exception()}")

    async def flush(self) -> None:
        """Wait for all scheduled draft writes to finish."""
        pending = [t for t in self._pending_writes if not t.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [t for t in self._pending_writes if not t.done()]

    async def advance(self) -> Optional[str]:
        """Move to the next question, or submit when the sequence is exhausted.

        Returns the submitted artifact id when this call performed the
        submission, None otherwise. Calls made while submitting or failed
        have no effect.
        """
        if self.state != FlowState.NAVIGATING:
            logger.debug(f"Ignoring advance on {self.session_key} while {self.state.value}")
            return None

        current = self.current_question()
        if current is None:
            return None

        if not self.is_last:
            following = self.questions[self.current_index + 1]
            if following.square != current.square:
                self.completed_squares.add(current.square)
            self.current_index += 1
            return None

        # End of the sequence closes the final square as well
        self.completed_squares.add(current.square)
        self.state = FlowState.SUBMITTING
        return await self._submit()

    async def _submit(self) -> str:
        answers = dict(self.answers)
        logger.info(f"Submitting questionnaire {self.session_key} with {len(answers)} answers")
        try:
            artifact_id = await self.submitter(answers)
        except Exception as e:
            self.state = FlowState.FAILED
            self.last_error = str(e) or e.__class__.__name__
            logger.error(f"Submission of questionnaire {self.session_key} failed: {self.last_error}")
            raise SubmissionError(self.last_error) from e

        self.artifact_id = artifact_id
        self.last_error = None
        logger.info(f"Questionnaire {self.session_key} submitted as {artifact_id}")
        await self.flush()
        await self.draft_store.clear(self.session_key)
        return artifact_id

    def retreat(self) -> None:
        """Move back one question. No-op at the first question."""
        if self.state != FlowState.NAVIGATING:
            return
        if self.current_index > 0:
            self.current_index -= 1

    def retry(self) -> None:
        """Recover from a failed submission, back at the last question."""
        if self.state != FlowState.FAILED:
            raise FlowStateError(f"Nothing to retry while {self.state.value}")
        self.state = FlowState.NAVIGATING
        self.current_index = max(len(self.questions) - 1, 0)
        logger.info(f"Questionnaire {self.session_key} re-entered navigation for retry")

    def restart(self) -> None:
        """Discard all answers and progress and start from the first question."""
        if self.state not in (FlowState.NAVIGATING, FlowState.FAILED):
            raise FlowStateError(f"Cannot restart while {self.state.value}")
        self.answers = {}
        self.completed_squares = set()
        self.current_index = 0
        self.last_error = None
        self.state = FlowState.NAVIGATING
        self._schedule_persist()
        logger.info(f"Questionnaire {self.session_key} restarted")

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the controller for presentation."""
        question = self.current_question()
        completed: List[int] = sorted(self.completed_squares)
        return {
            "state": self.state.value,
            "current_index": self.current_index,
            "total_questions": len(self.questions),
            "current_square": question.square if question else None,
            "current_question": question,
            "question_visible": question.is_visible(self.answers) if question else False,
            "completed_squares": completed,
            "answers": dict(self.answers),
            "is_first": self.current_index == 0,
            "is_last": self.is_last,
            "artifact_id": self.artifact_id,
            "last_error": self.last_error,
        }
