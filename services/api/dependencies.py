# services/api/dependencies.py
"""
DI helpers used by routers/*.

Adapters and the workspace are built once per process from the settings and
handed out through FastAPI's Depends, so tests can swap any of them with
`app.dependency_overrides`.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Annotated, Optional

from fastapi import Depends, Header

from adapters.base import ProjectCatalog, SpreadsheetStore
from core.assistant import DraftingAssistant
from core.credentials import Credential, resolve_credential
from core.drive_client import ensure_projects_folder
from core.registry import ProjectRegistry
from core.session import Workspace
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

# local, token-less identity used by the in-memory backend
LOCAL_CREDENTIAL = Credential(cache_key="local:anonymous")

_workspace: Optional[Workspace] = None
_store: Optional[SpreadsheetStore] = None
_catalog: Optional[ProjectCatalog] = None
_assistant: Optional[DraftingAssistant] = None


def _backend(settings: Settings) -> str:
    backend = (settings.storage_backend or "sheets").strip().lower()
    if backend not in ("sheets", "memory"):
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")
    return backend


def get_workspace() -> Workspace:
    global _workspace
    if _workspace is None:
        _workspace = Workspace(step_delay_seconds=get_settings().export_step_delay_seconds)
    return _workspace


def get_store() -> SpreadsheetStore:
    global _store
    if _store is None:
        settings = get_settings()
        if _backend(settings) == "memory":
            from adapters.memory import InMemorySpreadsheetStore
            _store = InMemorySpreadsheetStore()
        else:
            from adapters.sheets import SheetsSpreadsheetStore
            _store = SheetsSpreadsheetStore(client_cache_ttl=settings.client_cache_ttl_seconds)
        logger.info("Spreadsheet store: %s", type(_store).__name__)
    return _store


def get_catalog() -> ProjectCatalog:
    global _catalog
    if _catalog is None:
        settings = get_settings()
        if _backend(settings) == "memory":
            from adapters.memory import InMemoryProjectCatalog
            _catalog = InMemoryProjectCatalog()
        else:
            from adapters.sheets import SheetsProjectCatalog
            if not settings.master_sheet_id:
                logger.warning("MASTER_SHEET_ID is not set: project listing will fail")
            _catalog = SheetsProjectCatalog(
                master_sheet_id=settings.master_sheet_id,
                tab_name=settings.master_tab_name,
                client_cache_ttl=settings.client_cache_ttl_seconds,
            )
    return _catalog


def get_assistant() -> DraftingAssistant:
    global _assistant
    if _assistant is None:
        settings = get_settings()
        _assistant = DraftingAssistant(api_key=settings.gemini_api_key, model=settings.gemini_model)
    return _assistant


def get_registry(
    catalog: Annotated[ProjectCatalog, Depends(get_catalog)],
    store: Annotated[SpreadsheetStore, Depends(get_store)],
) -> ProjectRegistry:
    settings = get_settings()
    folder_resolver = None
    if _backend(settings) == "sheets" and (settings.gdrive_root_folder_id or settings.gdrive_root_folder_name):
        folder_resolver = partial(
            ensure_projects_folder,
            root_folder_id=settings.gdrive_root_folder_id,
            root_folder_name=settings.gdrive_root_folder_name,
        )
    return ProjectRegistry(
        catalog=catalog,
        store=store,
        title_prefix=settings.spreadsheet_title_prefix,
        folder_resolver=folder_resolver,
    )


def get_credential(
    workspace: Annotated[Workspace, Depends(get_workspace)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Credential:
    """
    Authorization header, else the session token, else the service account.
    The in-memory backend needs no Google identity at all.
    """
    settings = get_settings()
    if _backend(settings) == "memory" and not authorization and not workspace.state.signed_in:
        return LOCAL_CREDENTIAL
    return resolve_credential(
        authorization,
        workspace.state.session_token,
        settings.resolved_google_sa_json(),
    )


WorkspaceDep = Annotated[Workspace, Depends(get_workspace)]
StoreDep = Annotated[SpreadsheetStore, Depends(get_store)]
RegistryDep = Annotated[ProjectRegistry, Depends(get_registry)]
AssistantDep = Annotated[DraftingAssistant, Depends(get_assistant)]
CredentialDep = Annotated[Credential, Depends(get_credential)]
