"""Process-wide workspace shared by the routers."""

from __future__ import annotations

from typing import Optional

from app.services.store import StateStore
from app.services.workspace import AnswerWorkspace


_workspace: Optional[AnswerWorkspace] = None


def get_workspace() -> AnswerWorkspace:
    """Load persisted state on first use and reuse the workspace afterwards."""
    global _workspace
    if _workspace is None:
        _workspace = AnswerWorkspace(StateStore.open())
    return _workspace
