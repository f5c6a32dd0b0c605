# services/api/core/drive_client.py
from __future__ import annotations

import logging
from typing import Optional

from googleapiclient.discovery import build

from core.credentials import Credential

logger = logging.getLogger(__name__)

FOLDER_MIME = "application/vnd.google-apps.folder"


def get_drive_service(credential: Credential):
    """Google Drive v3 client acting with the caller's credential."""
    return build(
        "drive",
        "v3",
        credentials=credential.google,
        cache_discovery=False,
    )


def _safe_segment(value: str, fallback: str = "UNKNOWN") -> str:
    """
    Clean folder/file name segments so Drive accepts them nicely.
    """
    if not value:
        return fallback
    v = value.strip()
    if not v:
        return fallback
    # avoid slashes in folder names
    v = v.replace("/", "_").replace("\\", "_")
    return v[:120]


def _ensure_folder(service, name: str, parent_id: Optional[str] = None) -> str:
    """
    Find (or create) a folder with given name under parent_id (or My Drive root).
    Returns the folder ID.
    """
    folder_name = _safe_segment(name, "UNTITLED")

    safe_name = folder_name.replace("'", "\\'")
    q = f"mimeType = '{FOLDER_MIME}' and name = '{safe_name}' and trashed = false"
    if parent_id:
        q += f" and '{parent_id}' in parents"

    result = service.files().list(
        q=q,
        spaces="drive",
        fields="files(id, name)",
        pageSize=1,
    ).execute()

    files = result.get("files", [])
    if files:
        return files[0]["id"]

    metadata = {"name": folder_name, "mimeType": FOLDER_MIME}
    if parent_id:
        metadata["parents"] = [parent_id]

    created = service.files().create(body=metadata, fields="id").execute()
    logger.info("Created Drive folder '%s' (%s)", folder_name, created["id"])
    return created["id"]


def ensure_projects_folder(
    credential: Credential,
    root_folder_id: str = "",
    root_folder_name: str = "",
    service=None,
) -> Optional[str]:
    """
    Folder new project spreadsheets are created in.

    Priority:
    1) configured folder id (used as-is)
    2) configured folder name (found or created in My Drive)
    3) None: spreadsheets land in the Drive root

    Best-effort: a Drive failure is logged and the spreadsheet is simply
    created in the root.
    """
    if root_folder_id.strip():
        return root_folder_id.strip()
    if not root_folder_name.strip():
        return None
    try:
        service = service or get_drive_service(credential)
        return _ensure_folder(service, root_folder_name, parent_id=None)
    except Exception as e:
        logger.warning("Could not resolve Drive folder '%s': %s", root_folder_name, e)
        return None
