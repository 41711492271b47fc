"""
Local filesystem implementation of the DraftMedium for development/testing.

Each draft is stored as one JSON file under a configurable root directory.
"""

from __future__ import annotations

import os
import re
import uuid
from typing import Optional

import aiofiles

from marketing_planner.repositories.base import DraftMedium
from marketing_planner.core.config import settings


class LocalDraftMedium(DraftMedium):
    """Simple file-backed draft store. Not suitable for multi-instance deployments.

    Files are written under settings.LOCAL_DRAFT_DIR unless a root is given.
    """

    def __init__(self, root: Optional[str] = None) -> None:
        root = root or settings.LOCAL_DRAFT_DIR or "local_drafts"
        # Normalize to absolute path for stability
        self.root: str = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def _path_for(self, key: str) -> str:
        # Keys contain ':' separators; keep filenames portable
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key).lstrip(".")
        if not safe:
            raise ValueError("Invalid draft key")
        return os.path.join(self.root, f"{safe}.json")

    async def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not os.path.isfile(path):
            return None
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()

    async def set(self, key: str, value: str) -> bool:
        path = self._path_for(key)
        tmp_path = f"{path}.{uuid.uuid4().hex}.tmp"
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(value)
        # Readers never observe a half-written draft
        os.replace(tmp_path, path)
        return True

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if os.path.isfile(path):
            os.remove(path)
            return True
        return False
