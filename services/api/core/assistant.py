# services/api/core/assistant.py
"""
Gemini-backed drafting helpers (placeholder values, chapter outlines,
executive summary).

Everything here is best-effort: a missing API key, a transport error or an
answer that is not the JSON we asked for is logged and degrades to
None / [] / a fallback sentence. Nothing raises into the request.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from google import genai
from google.genai import types

from models.project import Project

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
SUMMARY_FALLBACK = "No s'ha pogut generar l'introducció."

CHAPTERS_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "title": types.Schema(type=types.Type.STRING),
            "description": types.Schema(type=types.Type.STRING),
        },
        required=["title"],
    ),
)


def _values_schema(keys: Sequence[str]) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={k: types.Schema(type=types.Type.STRING) for k in keys},
        required=list(keys),
    )


class DraftingAssistant:
    def __init__(self, api_key: str = "", model: str = DEFAULT_MODEL, client: Any = None) -> None:
        self.model = model or DEFAULT_MODEL
        self._client = client
        if self._client is None and api_key:
            self._client = genai.Client(api_key=api_key)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def _generate(self, contents: str, schema: Optional[types.Schema] = None) -> Optional[str]:
        if self._client is None:
            logger.info("Gemini API key not configured, assistant disabled")
            return None
        config = None
        if schema is not None:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.warning("Gemini call failed (%s): %s", self.model, e)
            return None
        return getattr(response, "text", None)

    async def _generate_json(self, contents: str, schema: types.Schema) -> Any:
        text = await self._generate(contents, schema)
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Gemini returned non-JSON output: %.200s", text)
            return None

    async def suggest_values_for_keys(
        self,
        project_name: str,
        description: str,
        keys: Sequence[str],
    ) -> Optional[Dict[str, str]]:
        """{key: suggested value} for the given keys, or None."""
        keys = [k for k in keys if k]
        if not keys:
            return None
        prompt = (
            f'Ets un assistent per a arquitectes. Donat el projecte "{project_name}" '
            f'i la descripció "{description}", inventa o dedueix valors coherents per a '
            f"aquestes claus de dades: {', '.join(keys)}. Respon només amb el JSON "
            "mapejant claus a valors. Respon en català si escau."
        )
        data = await self._generate_json(prompt, _values_schema(keys))
        if not isinstance(data, dict):
            return None
        return {str(k): "" if v is None else str(v) for k, v in data.items()}

    async def suggest_chapters(self, description: str) -> List[Dict[str, str]]:
        """Chapter outline [{"title", "description"}] for a project description."""
        prompt = (
            "Proposa una estructura de capítols per a una memòria d'arquitectura "
            f'basada en aquesta descripció: "{description}". Respon en català.'
        )
        data = await self._generate_json(prompt, CHAPTERS_SCHEMA)
        if not isinstance(data, list):
            return []
        out: List[Dict[str, str]] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            title = str(item.get("title") or "").strip()
            if title:
                out.append({"title": title, "description": str(item.get("description") or "").strip()})
        return out

    async def summarize(self, project: Project) -> str:
        """Formal introduction for the final report, in Catalan."""
        placeholders = ", ".join(f"{p.key}: {p.value}" for p in project.placeholders)
        chapters = ", ".join(c.title for c in project.chapters)
        prompt = (
            "Genera un text d'introducció professional per a una memòria d'arquitectura.\n"
            f"Projecte: {project.name}.\n"
            f"Dades clau: {placeholders}.\n"
            f"Capítols inclosos: {chapters}.\n"
            "El text ha de ser formal, d'estil arquitectònic i estar en català. "
            "Inclou una salutació i un resum de l'objecte del projecte."
        )
        text = await self._generate(prompt)
        return text.strip() if text and text.strip() else SUMMARY_FALLBACK
