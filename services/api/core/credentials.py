# services/api/core/credentials.py
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from google.oauth2 import service_account
from google.oauth2.credentials import Credentials as UserCredentials

from core.errors import AuthenticationError

logger = logging.getLogger(__name__)

# Sheets for the data, drive.file to create spreadsheets/folders owned by the app
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]


@dataclass(frozen=True)
class Credential:
    """
    What the remote store needs to act on behalf of the user.

    `cache_key` identifies the credential without exposing the token
    (used for client caching and logs).
    """
    cache_key: str
    google: Any = field(compare=False, repr=False, default=None)
    token: Optional[str] = field(compare=False, repr=False, default=None)


def _fingerprint(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


def credential_from_bearer(token: str) -> Credential:
    """Wrap an OAuth access token obtained by the front end."""
    token = (token or "").strip()
    if not token:
        raise AuthenticationError("Empty access token")
    creds = UserCredentials(token=token, scopes=SCOPES)
    return Credential(cache_key=f"user:{_fingerprint(token)}", google=creds, token=token)


def credential_from_service_account(google_sa_json: str) -> Credential:
    """
    Accepts either:
      - absolute/relative path to a service-account JSON file, OR
      - a literal JSON string.
    """
    if not google_sa_json:
        raise AuthenticationError("No service account configured")

    try:
        parsed = json.loads(google_sa_json)
        creds = service_account.Credentials.from_service_account_info(parsed, scopes=SCOPES)
    except json.JSONDecodeError:
        creds = service_account.Credentials.from_service_account_file(google_sa_json, scopes=SCOPES)

    email = getattr(creds, "service_account_email", "") or "service-account"
    return Credential(cache_key=f"sa:{email}", google=creds)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_credential(
    authorization: Optional[str],
    session_token: Optional[str],
    google_sa_json: str = "",
) -> Credential:
    """
    Priority:
    1) Authorization header of the current request
    2) token cached in the session
    3) configured service account

    Raises:
        AuthenticationError: when none is available
    """
    token = parse_bearer(authorization) or session_token
    if token:
        return credential_from_bearer(token)
    if google_sa_json:
        logger.debug("No user token, falling back to service account")
        return credential_from_service_account(google_sa_json)
    raise AuthenticationError("Sign in with Google to continue")
