# services/api/core/export_pipeline.py
"""
Final-deliverable export: which documents go into the report, and the staged
compilation that turns them into one PDF.

The compilation is simulated. Each step waits `step_delay_seconds` unless a
real handler was registered for it, so the front end gets a believable
progress bar and a place to plug actual processing in later.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from core.errors import BusyError, NotFoundError, ValidationError
from models.project import Project

logger = logging.getLogger(__name__)

FINAL_LABEL = "Memòria generada correctament!"


@dataclass(frozen=True)
class ExportStep:
    key: str
    label: str


DEFAULT_STEPS: List[ExportStep] = [
    ExportStep("substitute", "Substituint claus {{...}} en Google Docs"),
    ExportStep("paginate", "Calculant numeració de pàgines i capítols"),
    ExportStep("sync_tables", "Sincronitzant taules des de Google Sheets"),
    ExportStep("index", "Generant índex general del projecte"),
    ExportStep("merge", "Fusionant capítols en PDF final"),
    ExportStep("compress", "Comprimint memòria per a lliurament"),
]


class ExportSelection:
    """Documents chosen for the final report. Everything is selected at first."""

    def __init__(self, project_id: str, document_ids: Sequence[str]) -> None:
        self.project_id = project_id
        self._known: List[str] = list(document_ids)
        self._selected = set(self._known)

    @classmethod
    def for_project(cls, project: Project) -> "ExportSelection":
        return cls(project.id, project.all_document_ids())

    def sync_with(self, project: Project) -> None:
        """Follow edits of the tree: new documents start selected, removed ones drop out."""
        current = project.all_document_ids()
        for doc_id in current:
            if doc_id not in self._known:
                self._selected.add(doc_id)
        self._known = current
        self._selected &= set(current)

    def toggle(self, doc_id: str) -> bool:
        """Flip `doc_id` in/out of the selection. Returns True if now selected."""
        if doc_id not in self._known:
            raise NotFoundError(f"Document {doc_id} not found", code="DOCUMENT_NOT_FOUND")
        if doc_id in self._selected:
            self._selected.discard(doc_id)
            return False
        self._selected.add(doc_id)
        return True

    def is_selected(self, doc_id: str) -> bool:
        return doc_id in self._selected

    @property
    def selected_ids(self) -> List[str]:
        """Selected ids in document order."""
        return [d for d in self._known if d in self._selected]

    def __len__(self) -> int:
        return len(self._selected)


@dataclass
class ExportContext:
    """What a step handler gets to work on."""
    project: Project
    document_ids: List[str]
    outputs: Dict[str, Any] = field(default_factory=dict)


StepHandler = Callable[[ExportContext], Awaitable[Any]]


async def substitute_tokens(ctx: ExportContext) -> Dict[str, Any]:
    """
    Resolve {{KEY}} tokens in the titles of the selected documents.
    Keys used but not defined are reported, not treated as an error.
    """
    placeholders = ctx.project.placeholders
    wanted = set(ctx.document_ids)
    rendered: List[Dict[str, str]] = []
    missing: List[str] = []
    for doc in ctx.project.iter_documents():
        if doc.id not in wanted:
            continue
        rendered.append({"id": doc.id, "title": placeholders.substitute(doc.title)})
        for key in placeholders.missing_keys(doc.title):
            if key not in missing:
                missing.append(key)
    if missing:
        logger.warning("Project %s: undefined keys %s", ctx.project.id, ", ".join(missing))
    return {"documents": rendered, "missing_keys": missing}


class CompilationPipeline:
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    def __init__(
        self,
        steps: Optional[Sequence[ExportStep]] = None,
        step_delay_seconds: float = 1.2,
    ) -> None:
        self.steps = list(steps or DEFAULT_STEPS)
        self.step_delay_seconds = step_delay_seconds
        self._handlers: Dict[str, StepHandler] = {}
        self.status = self.IDLE
        self.current_label = ""
        self.completed = 0
        self.error: Optional[str] = None
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self._context: Optional[ExportContext] = None

    def register(self, step_key: str, handler: StepHandler) -> None:
        if step_key not in {s.key for s in self.steps}:
            raise ValidationError(f"Unknown export step '{step_key}'")
        self._handlers[step_key] = handler

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def progress(self) -> float:
        return self.completed / self.total if self.total else 1.0

    @property
    def outputs(self) -> Dict[str, Any]:
        return dict(self._context.outputs) if self._context is not None else {}

    def prepare(self, project: Project, selection: ExportSelection) -> None:
        """
        Validate and claim the pipeline. Raising here leaves the previous
        status untouched.

        Raises:
            BusyError: a compilation is already running
            ValidationError: nothing selected
        """
        if self.status == self.RUNNING:
            raise BusyError("A compilation is already running for this project")
        doc_ids = selection.selected_ids
        if not doc_ids:
            raise ValidationError("Select at least one document to export", code="EMPTY_SELECTION")

        self._context = ExportContext(project=project, document_ids=doc_ids)
        self.status = self.RUNNING
        self.completed = 0
        self.current_label = self.steps[0].label if self.steps else ""
        self.error = None
        self.started_at = time.time()
        self.finished_at = None

    async def execute(self) -> str:
        """
        Run every step in order. A failing step stops the run; the failure is
        recorded in `status`/`error` and logged rather than raised, since this
        usually runs as a background task.
        """
        if self.status != self.RUNNING or self._context is None:
            raise ValidationError("prepare() must be called before execute()")
        ctx = self._context
        try:
            for step in self.steps:
                self.current_label = step.label
                handler = self._handlers.get(step.key)
                if handler is not None:
                    ctx.outputs[step.key] = await handler(ctx)
                else:
                    await asyncio.sleep(self.step_delay_seconds)
                self.completed += 1
        except Exception as e:
            self.status = self.FAILED
            self.error = str(e) or e.__class__.__name__
            logger.exception("Export of project %s failed at '%s'", ctx.project.id, self.current_label)
        else:
            self.status = self.DONE
            self.current_label = FINAL_LABEL
            logger.info(
                "Export of project %s done (%d document(s))",
                ctx.project.id,
                len(ctx.document_ids),
            )
        finally:
            self.finished_at = time.time()
        return self.status

    async def run(self, project: Project, selection: ExportSelection) -> str:
        self.prepare(project, selection)
        return await self.execute()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "label": self.current_label,
            "completed": self.completed,
            "total": self.total,
            "progress": round(self.progress, 4),
            "selected_count": len(self._context.document_ids) if self._context is not None else 0,
            "error": self.error,
        }
