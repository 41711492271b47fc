"""
Questionnaire session service.

Keeps one QuestionFlowController per live session id. A session that is not
in memory (new id, evicted, or the process restarted) is started again from
its stored draft. Sessions are dropped once their plan is submitted, when
they sit idle past SESSION_IDLE_SECONDS, and least recently used first when
MAX_ACTIVE_SESSIONS is reached.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Sequence

from marketing_planner.core.config import settings
from marketing_planner.models.question import AnswerValue, Question
from marketing_planner.questionnaire.flow import FlowState, QuestionFlowController, Submitter
from marketing_planner.services.draft_store import DraftStore

logger = logging.getLogger(__name__)


class UnknownQuestionError(Exception):
    """Raised when an answer targets a question id that does not exist."""
    pass


class SessionOwnerError(Exception):
    """Raised when a session is opened for a user other than its owner."""
    pass


class QuestionnaireService:
    """Registry and facade for questionnaire sessions."""

    def __init__(
        self,
        questions: Sequence[Question],
        draft_store: DraftStore,
        submitter_factory: Callable[[Optional[str]], Submitter],
        idle_seconds: Optional[int] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.questions = tuple(questions)
        self._question_ids = {q.id for q in self.questions}
        self.draft_store = draft_store
        self.submitter_factory = submitter_factory
        self.idle_seconds = settings.SESSION_IDLE_SECONDS if idle_seconds is None else idle_seconds
        self.max_sessions = settings.MAX_ACTIVE_SESSIONS if max_sessions is None else max_sessions
        self._clock = clock
        self._sessions: Dict[str, QuestionFlowController] = {}
        self._owners: Dict[str, Optional[str]] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    def session_key(self, session_id: str) -> str:
        return self.draft_store.medium.generate_draft_key(settings.DRAFT_KEY_PREFIX, session_id)

    async def get_session(self, session_id: str, user_id: Optional[str] = None) -> QuestionFlowController:
        """Return the controller for a session, starting it from its draft if needed.

        Raises:
            SessionOwnerError: user_id differs from the user the session belongs to
        """
        controller = self._sessions.get(session_id)
        if controller is not None and (user_id is None or self._owners.get(session_id) == user_id):
            self._last_seen[session_id] = self._clock()
            return controller

        async with self._lock:
            controller = self._sessions.get(session_id)
            if controller is None:
                controller = await self._open(session_id, user_id)
            else:
                await self._claim(session_id, controller, user_id)
            self._last_seen[session_id] = self._clock()
        return controller

    async def _open(self, session_id: str, user_id: Optional[str]) -> QuestionFlowController:
        await self._prune()

        key = self.session_key(session_id)
        owner = await self.draft_store.load_owner(key)
        self._check_owner(session_id, owner, user_id)
        if owner is None and user_id is not None:
            owner = user_id
            await self.draft_store.save_owner(key, owner)

        controller = await QuestionFlowController.start(
            self.questions,
            self.draft_store,
            key,
            self.submitter_factory(owner),
        )
        self._sessions[session_id] = controller
        self._owners[session_id] = owner
        logger.info(f"Started questionnaire session {session_id}")
        return controller

    async def _claim(self, session_id: str, controller: QuestionFlowController, user_id: Optional[str]) -> None:
        owner = self._owners.get(session_id)
        self._check_owner(session_id, owner, user_id)
        if owner is None and user_id is not None:
            self._owners[session_id] = user_id
            controller.submitter = self.submitter_factory(user_id)
            await self.draft_store.save_owner(controller.session_key, user_id)
            logger.info(f"Questionnaire session {session_id} claimed by {user_id}")

    @staticmethod
    def _check_owner(session_id: str, owner: Optional[str], user_id: Optional[str]) -> None:
        if owner is not None and user_id is not None and owner != user_id:
            logger.warning(f"Rejected user {user_id} on questionnaire session {session_id}")
            raise SessionOwnerError(f"Session '{session_id}' belongs to another user")

    @staticmethod
    def _in_flight(controller: QuestionFlowController) -> bool:
        return controller.state == FlowState.SUBMITTING and controller.artifact_id is None

    async def _prune(self) -> None:
        """Evict idle sessions, then the least recently used ones over the cap. Caller holds the lock."""
        now = self._clock()
        for session_id in list(self._sessions):
            if self._in_flight(self._sessions[session_id]):
                continue
            if now - self._last_seen.get(session_id, now) > self.idle_seconds:
                await self._evict(session_id)

        while len(self._sessions) >= self.max_sessions:
            candidates = [sid for sid, c in self._sessions.items() if not self._in_flight(c)]
            if not candidates:
                logger.warning(f"All {len(self._sessions)} questionnaire sessions are submitting; none evicted")
                break
            oldest = min(candidates, key=lambda sid: self._last_seen.get(sid, 0.0))
            await self._evict(oldest)

    async def _evict(self, session_id: str) -> None:
        controller = self._sessions.pop(session_id, None)
        self._owners.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if controller is None:
            return
        await controller.flush()
        self.draft_store.forget(controller.session_key)
        logger.debug(f"Evicted questionnaire session {session_id}")

    async def record_answer(self, session_id: str, question_id: str, value: AnswerValue) -> QuestionFlowController:
        if question_id not in self._question_ids:
            raise UnknownQuestionError(f"Unknown question '{question_id}'")
        controller = await self.get_session(session_id)
        controller.record_answer(question_id, value)
        return controller

    async def advance(self, session_id: str) -> QuestionFlowController:
        """Advance a session; a session whose plan was submitted is released."""
        controller = await self.get_session(session_id)
        await controller.advance()
        if controller.artifact_id is not None:
            async with self._lock:
                if self._sessions.get(session_id) is controller:
                    await self._evict(session_id)
        return controller

    async def retreat(self, session_id: str) -> QuestionFlowController:
        controller = await self.get_session(session_id)
        controller.retreat()
        return controller

    async def retry(self, session_id: str) -> QuestionFlowController:
        controller = await self.get_session(session_id)
        controller.retry()
        return controller

    async def restart(self, session_id: str) -> QuestionFlowController:
        controller = await self.get_session(session_id)
        controller.restart()
        return controller

    async def shutdown(self) -> None:
        """Let outstanding draft writes finish."""
        for controller in list(self._sessions.values()):
            await controller.flush()
