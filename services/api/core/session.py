# services/api/core/session.py
"""
Application state of one ArchiSheets workspace.

The state that a front end would otherwise keep in scattered globals (current
view, active project, cached Google credential) is a frozen `SessionState`
value. Transitions are plain functions returning a new value and refusing the
ones that make no sense (e.g. opening the placeholder editor with no project).
`Workspace` owns the current state plus everything the routers share: opened
projects, busy flags, export selections and compilation pipelines.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Optional, Set, Tuple

from core.credentials import Credential
from core.errors import BusyError, InvalidTransitionError, NotFoundError
from core.export_pipeline import CompilationPipeline, ExportSelection, substitute_tokens
from models.project import Project

logger = logging.getLogger(__name__)


class View:
    DASHBOARD = "DASHBOARD"
    PROJECT_EDITOR = "PROJECT_EDITOR"
    PLACEHOLDER_EDITOR = "PLACEHOLDER_EDITOR"
    TEMPLATE_LIBRARY = "TEMPLATE_LIBRARY"
    EXPORT_VIEW = "EXPORT_VIEW"

    ALL = (DASHBOARD, PROJECT_EDITOR, PLACEHOLDER_EDITOR, TEMPLATE_LIBRARY, EXPORT_VIEW)


# views that only make sense on top of the project editor
PROJECT_SUBVIEWS = (View.PLACEHOLDER_EDITOR, View.EXPORT_VIEW)


@dataclass(frozen=True)
class SessionState:
    view: str = View.DASHBOARD
    active_project_id: Optional[str] = None
    credential: Optional[Credential] = None

    @property
    def signed_in(self) -> bool:
        return self.credential is not None

    @property
    def session_token(self) -> Optional[str]:
        return self.credential.token if self.credential is not None else None


def navigate(state: SessionState, view: str, project_id: Optional[str] = None) -> SessionState:
    """
    Move to `view`.

    - DASHBOARD / TEMPLATE_LIBRARY: always allowed, the active project is kept
    - PROJECT_EDITOR: needs `project_id` or an already active project
    - PLACEHOLDER_EDITOR / EXPORT_VIEW: only from the project editor (or from
      one another) with an active project

    Raises:
        InvalidTransitionError
    """
    if view not in View.ALL:
        raise InvalidTransitionError(f"Unknown view '{view}'", code="UNKNOWN_VIEW")

    if view in (View.DASHBOARD, View.TEMPLATE_LIBRARY):
        return replace(state, view=view)

    if view == View.PROJECT_EDITOR:
        target = project_id or state.active_project_id
        if not target:
            raise InvalidTransitionError("Open a project first")
        return replace(state, view=view, active_project_id=target)

    if project_id and project_id != state.active_project_id:
        raise InvalidTransitionError(f"{view} is only reachable for the project being edited")
    if not state.active_project_id:
        raise InvalidTransitionError(f"{view} needs an active project")
    if state.view != View.PROJECT_EDITOR and state.view not in PROJECT_SUBVIEWS:
        raise InvalidTransitionError(f"{view} can only be opened from the project editor")
    return replace(state, view=view)


def sign_in(state: SessionState, credential: Credential) -> SessionState:
    return replace(state, credential=credential)


def sign_out(state: SessionState) -> SessionState:
    return replace(state, credential=None)


class Workspace:
    """Process-wide workspace shared by the routers (one user per deployment)."""

    def __init__(self, step_delay_seconds: float = 1.2) -> None:
        self.state = SessionState()
        self.step_delay_seconds = step_delay_seconds
        self.projects: Dict[str, Project] = {}
        self._busy: Set[Tuple[str, str]] = set()
        self._selections: Dict[str, ExportSelection] = {}
        self._pipelines: Dict[str, CompilationPipeline] = {}

    # ---------- state transitions ----------

    def navigate(self, view: str, project_id: Optional[str] = None) -> SessionState:
        self.state = navigate(self.state, view, project_id)
        return self.state

    def sign_in(self, credential: Credential) -> SessionState:
        self.state = sign_in(self.state, credential)
        logger.info("Signed in (%s)", credential.cache_key)
        return self.state

    def sign_out(self) -> SessionState:
        if self.state.signed_in:
            logger.info("Session credential cleared")
        self.state = sign_out(self.state)
        return self.state

    # ---------- projects ----------

    def remember(self, project: Project) -> Project:
        self.projects[project.id] = project
        return project

    def get_project(self, project_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found", code="PROJECT_NOT_FOUND")
        return project

    def merge_listing(self, stubs: List[Project]) -> List[Project]:
        """
        Catalog listing merged with what this workspace already holds: a project
        that was opened (or created here) keeps its loaded content.
        """
        merged: List[Project] = []
        for stub in stubs:
            known = self.projects.get(stub.id)
            if known is None or not known.loaded:
                self.projects[stub.id] = stub
                known = stub
            merged.append(known)
        return merged

    # ---------- busy flags ----------

    def is_busy(self, project_id: str, action: str) -> bool:
        return (project_id, action) in self._busy

    @contextmanager
    def busy(self, project_id: str, action: str) -> Iterator[None]:
        """
        Mark `action` as in progress on `project_id` for the duration of the block.

        Raises:
            BusyError: if the same action is already running for that project
        """
        flag = (project_id, action)
        if flag in self._busy:
            raise BusyError(f"{action} already in progress for project {project_id or '-'}")
        self._busy.add(flag)
        try:
            yield
        finally:
            self._busy.discard(flag)

    # ---------- export ----------

    def selection_for(self, project: Project) -> ExportSelection:
        selection = self._selections.get(project.id)
        if selection is None:
            selection = ExportSelection.for_project(project)
            self._selections[project.id] = selection
        else:
            selection.sync_with(project)
        return selection

    def pipeline_for(self, project_id: str) -> CompilationPipeline:
        pipeline = self._pipelines.get(project_id)
        if pipeline is None:
            pipeline = CompilationPipeline(step_delay_seconds=self.step_delay_seconds)
            pipeline.register("substitute", substitute_tokens)
            self._pipelines[project_id] = pipeline
        return pipeline
