"""
Tests for the session state machine and the workspace.

Run with: pytest tests/test_session.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.credentials import Credential
from core.errors import BusyError, InvalidTransitionError, NotFoundError
from core.session import SessionState, View, Workspace, navigate, sign_in, sign_out
from models.project import Project


class TestNavigate:
    """Pure view transitions."""

    def test_dashboard_and_templates_always(self):
        s = SessionState(view=View.EXPORT_VIEW, active_project_id="p1")
        assert navigate(s, View.DASHBOARD).view == View.DASHBOARD
        assert navigate(s, View.TEMPLATE_LIBRARY).active_project_id == "p1"

    def test_editor_needs_project(self):
        with pytest.raises(InvalidTransitionError):
            navigate(SessionState(), View.PROJECT_EDITOR)
        s = navigate(SessionState(), View.PROJECT_EDITOR, "p1")
        assert (s.view, s.active_project_id) == (View.PROJECT_EDITOR, "p1")

    def test_editor_reopens_active_project(self):
        s = SessionState(view=View.DASHBOARD, active_project_id="p1")
        assert navigate(s, View.PROJECT_EDITOR).active_project_id == "p1"

    def test_subviews_only_from_editor(self):
        editor = SessionState(view=View.PROJECT_EDITOR, active_project_id="p1")
        placeholders = navigate(editor, View.PLACEHOLDER_EDITOR)
        assert placeholders.view == View.PLACEHOLDER_EDITOR
        assert navigate(placeholders, View.EXPORT_VIEW).view == View.EXPORT_VIEW
        assert navigate(placeholders, View.PROJECT_EDITOR).view == View.PROJECT_EDITOR

        dashboard = SessionState(view=View.DASHBOARD, active_project_id="p1")
        with pytest.raises(InvalidTransitionError):
            navigate(dashboard, View.EXPORT_VIEW)

    def test_subview_without_project(self):
        with pytest.raises(InvalidTransitionError):
            navigate(SessionState(view=View.PROJECT_EDITOR), View.PLACEHOLDER_EDITOR)

    def test_subview_for_other_project(self):
        editor = SessionState(view=View.PROJECT_EDITOR, active_project_id="p1")
        with pytest.raises(InvalidTransitionError):
            navigate(editor, View.EXPORT_VIEW, "p2")

    def test_unknown_view(self):
        with pytest.raises(InvalidTransitionError) as exc:
            navigate(SessionState(), "SETTINGS")
        assert exc.value.code == "UNKNOWN_VIEW"

    def test_states_are_values(self):
        s = SessionState()
        navigate(s, View.TEMPLATE_LIBRARY)
        assert s.view == View.DASHBOARD


class TestSignInOut:
    def test_token_cached_and_cleared(self):
        cred = Credential(cache_key="user:abc", token="tok")
        s = sign_in(SessionState(), cred)
        assert s.signed_in and s.session_token == "tok"
        s = sign_out(s)
        assert not s.signed_in and s.session_token is None


class TestWorkspace:
    def test_busy_guard(self):
        ws = Workspace()
        with ws.busy("p1", "sync"):
            assert ws.is_busy("p1", "sync")
            with pytest.raises(BusyError):
                with ws.busy("p1", "sync"):
                    pass
            # other project / other action are independent
            with ws.busy("p2", "sync"):
                pass
            with ws.busy("p1", "create"):
                pass
        assert not ws.is_busy("p1", "sync")

    def test_busy_released_on_error(self):
        ws = Workspace()
        with pytest.raises(RuntimeError):
            with ws.busy("p1", "sync"):
                raise RuntimeError("boom")
        assert not ws.is_busy("p1", "sync")

    def test_get_project(self):
        ws = Workspace()
        p = ws.remember(Project(name="Casa"))
        assert ws.get_project(p.id) is p
        with pytest.raises(NotFoundError):
            ws.get_project("missing")

    def test_merge_listing_keeps_loaded(self):
        ws = Workspace()
        opened = ws.remember(Project(name="Casa", id="p1"))
        opened.add_chapter("Annexos")
        stubs = [Project(name="Casa", id="p1", loaded=False), Project(name="Altre", id="p2", loaded=False)]

        merged = ws.merge_listing(stubs)
        assert merged[0] is opened
        assert merged[1].id == "p2" and not merged[1].loaded

    def test_selection_follows_tree(self):
        ws = Workspace()
        p = ws.remember(Project(name="Casa"))
        c = p.add_chapter("A")
        d1 = p.add_document(c.id, "one")
        sel = ws.selection_for(p)
        sel.toggle(d1.id)

        d2 = p.add_document(c.id, "two")
        sel = ws.selection_for(p)
        assert sel.selected_ids == [d2.id]

        p.remove_document(c.id, d2.id)
        assert ws.selection_for(p).selected_ids == []

    def test_pipeline_per_project(self):
        ws = Workspace(step_delay_seconds=0)
        assert ws.pipeline_for("p1") is ws.pipeline_for("p1")
        assert ws.pipeline_for("p1") is not ws.pipeline_for("p2")
        assert ws.pipeline_for("p1").step_delay_seconds == 0
