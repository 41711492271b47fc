"""
Draft persistence for in-progress questionnaires.

The store mirrors a session's answer map to a DraftMedium so a reload does
not lose progress. It never raises to its callers: a corrupt draft reads as
an empty one and a failed write is only logged.
"""

import asyncio
import json
import logging
from typing import Dict, Optional

from pydantic import TypeAdapter, ValidationError

from marketing_planner.models.question import AnswerMap
from marketing_planner.repositories.base import DraftMedium

logger = logging.getLogger(__name__)

_answer_map_adapter = TypeAdapter(AnswerMap)


def serialize_answers(answers: AnswerMap) -> str:
    """Deterministic JSON form of an answer map."""
    return json.dumps(answers, sort_keys=True, ensure_ascii=False)


class DraftStore:
    """Hydrates and persists answer maps keyed by session."""

    def __init__(self, medium: DraftMedium):
        self.medium = medium
        self._locks: Dict[str, asyncio.Lock] = {}
        self._applied_revisions: Dict[str, int] = {}
        self._known_text: Dict[str, str] = {}
        self._issued_revisions: Dict[str, int] = {}

    def _lock_for(self, session_key: str) -> asyncio.Lock:
        lock = self._locks.get(session_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_key] = lock
        return lock

    @staticmethod
    def owner_key(session_key: str) -> str:
        return f"owner:{session_key}"

    def next_revision(self, session_key: str) -> int:
        """Issue the next write revision for a key.

        Revisions are counted per key rather than per controller, so a
        controller re-created for the same session keeps ordering with any
        write its predecessor left behind.
        """
        revision = self._issued_revisions.get(session_key, 0) + 1
        self._issued_revisions[session_key] = revision
        return revision

    async def hydrate(self, session_key: str) -> AnswerMap:
        """Load the draft for a session, or an empty map if there is none usable."""
        try:
            raw = await self.medium.get(session_key)
        except Exception as e:
            logger.warning(f"Could not read draft {session_key}: {e}")
            return {}

        if raw is None:
            return {}

        try:
            answers = _answer_map_adapter.validate_python(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding corrupt draft {session_key}: {e}")
            return {}

        # Compare later writes against the canonical form, not the stored spelling
        self._known_text[session_key] = serialize_answers(answers)
        logger.info(f"Hydrated draft {session_key} with {len(answers)} answers")
        return answers

    async def persist(self, session_key: str, answers: AnswerMap, revision: Optional[int] = None) -> bool:
        """Write the full answer map for a session.

        Writes carrying a revision older than one already applied for the
        same key are dropped, so the stored draft always reflects the newest
        snapshot no matter in which order concurrent writes finish.
        """
        text = serialize_answers(answers)
        async with self._lock_for(session_key):
            if revision is not None:
                applied = self._applied_revisions.get(session_key)
                if applied is not None and revision < applied:
                    logger.debug(f"Skipping stale draft write {session_key} rev={revision} (applied={applied})")
                    return True
            if self._known_text.get(session_key) == text:
                if revision is not None:
                    self._applied_revisions[session_key] = revision
                return True
            try:
                ok = await self.medium.set(session_key, text)
            except Exception as e:
                logger.warning(f"Failed to persist draft {session_key}: {e}")
                return False
            if not ok:
                logger.warning(f"Draft medium rejected write for {session_key}")
                return False
            self._known_text[session_key] = text
            if revision is not None:
                self._applied_revisions[session_key] = revision
            return True

    async def clear(self, session_key: str) -> bool:
        """Drop the stored draft and owner for a session."""
        async with self._lock_for(session_key):
            self._known_text.pop(session_key, None)
            self._applied_revisions.pop(session_key, None)
            try:
                await self.medium.delete(self.owner_key(session_key))
                return await self.medium.delete(session_key)
            except Exception as e:
                logger.warning(f"Failed to clear draft {session_key}: {e}")
                return False

    def forget(self, session_key: str) -> None:
        """Release the in-memory bookkeeping for a key; the stored draft is kept.

        Callers flush their pending writes first.
        """
        self._known_text.pop(session_key, None)
        self._applied_revisions.pop(session_key, None)
        self._issued_revisions.pop(session_key, None)
        lock = self._locks.get(session_key)
        if lock is not None and not lock.locked():
            del self._locks[session_key]

    async def load_owner(self, session_key: str) -> Optional[str]:
        """User id recorded for a session, or None."""
        try:
            return await self.medium.get(self.owner_key(session_key))
        except Exception as e:
            logger.warning(f"Could not read owner of {session_key}: {e}")
            return None

    async def save_owner(self, session_key: str, user_id: str) -> bool:
        """Record the user a session belongs to."""
        try:
            return await self.medium.set(self.owner_key(session_key), user_id)
        except Exception as e:
            logger.warning(f"Could not record owner of {session_key}: {e}")
            return False
