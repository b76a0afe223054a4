"""Client for the LLM site generation service."""

from __future__ import annotations

import json
import logging
import os
import re
from typing import List, Optional

import requests

from .core.filetree import file_kind_for
from .core.models import FILE_KINDS, ProjectFile

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You generate static websites. Reply with JSON only, shaped as "
    '{"projectName": str, "files": [{"path": str, "name": str, '
    '"type": "html"|"css"|"js", "content": str}]}. '
    "Put reusable fragments under components/ and reference them in pages "
    "with {{ name }} placeholders."
)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class GenerationError(Exception):
    """Raised when the generation service fails or answers garbage."""


def parse_files_payload(text: str) -> List[ProjectFile]:
    """Turn the model's JSON answer into project files."""

    fenced = _FENCE_RE.search(text or "")
    raw = fenced.group(1) if fenced else (text or "")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Model answer is not valid JSON: {exc}") from exc
    entries = payload.get("files") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise GenerationError("Model answer has no 'files' list")

    files: List[ProjectFile] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("path"):
            continue
        path = str(entry["path"]).lstrip("/")
        kind = entry.get("type") or entry.get("kind")
        if kind not in FILE_KINDS:
            kind = file_kind_for(path)
        files.append(ProjectFile(
            path=path,
            name=str(entry.get("name") or path.rsplit("/", 1)[-1]),
            kind=kind,
            content=str(entry.get("content", "")),
        ))
    if not files:
        raise GenerationError("Model answer contains no files")
    return files


class SiteGenerator:
    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        timeout: int = 120,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    def _key(self) -> str:
        key = self.api_key or os.environ.get("OPENAI_API_KEY", "")
        if not key:
            raise GenerationError("Set OPENAI_API_KEY in your environment.")
        return key

    def generate(self, briefing: str, context: str = "") -> List[ProjectFile]:
        """Send ``briefing`` (plus optional ``context``) and return the files."""

        user_prompt = briefing if not context else f"{briefing}\n\nContext:\n{context}"
        logger.info("Requesting site generation from %s (%s)", self.base_url, self.model)
        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self._key()}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": user_prompt},
                    ],
                    "temperature": 0.2,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GenerationError(f"Request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise GenerationError(f"Unexpected response ({response.status_code})") from exc
        if not isinstance(payload, dict):
            raise GenerationError(f"Unexpected response ({response.status_code})")
        if response.status_code >= 400 or "error" in payload:
            error = payload.get("error") or {}
            message = error.get("message", "Request failed") if isinstance(error, dict) else str(error)
            raise GenerationError(str(message))
        choices = payload.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else {}
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise GenerationError("Response has no message content")
        text = message.get("content") or ""
        if not isinstance(text, str):
            raise GenerationError("Response has no message content")
        files = parse_files_payload(text)
        logger.info("Generation returned %d file(s)", len(files))
        return files
