from __future__ import annotations

import copy
import json
import logging
from datetime import date
from typing import Any

from pydantic import ValidationError

from .errors import MalformedInputError, SerializationError
from .models.draft import CONTENTS, PATTERN_SECTIONS, WARP, WEAVING, WEFT, WIF, Draft

logger = logging.getLogger(__name__)

DEFAULT_VERSION = 1.1
DEVELOPERS = "warpdrive-weaver"
SOURCE_PROGRAM = "WarpDrive Weaver"


def _has_version(sections: dict[str, Any]) -> bool:
    wif = sections.get(WIF)
    if not isinstance(wif, dict):
        return False
    version = wif.get("version")
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        return False
    return version != 0


def validate(payload: Any) -> bool:
    """Whether ``payload`` looks like the JSON produced by the WIF parser."""
    if not isinstance(payload, dict):
        return False
    sections = payload.get("sections")
    if not isinstance(sections, dict):
        return False
    return _has_version(sections)


def ingest(payload: Any, *, copy_payload: bool = True) -> Draft:
    """Build a ``Draft`` from parsed WIF JSON.

    Args:
        payload: Parsed JSON object with a ``sections`` mapping
        copy_payload: Deep-copy the payload first; pass False only when the
            caller hands over ownership of ``payload``

    Returns:
        Draft instance

    Raises:
        MalformedInputError: if ``sections`` or ``sections.wif.version`` is missing or invalid
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("sections"), dict):
        raise MalformedInputError("Invalid WIF JSON structure: missing 'sections' object")
    if not _has_version(payload["sections"]):
        raise MalformedInputError("Invalid WIF JSON structure: missing numeric 'wif.version'")

    sections = copy.deepcopy(payload["sections"]) if copy_payload else payload["sections"]
    try:
        draft = Draft.model_validate({"sections": sections})
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid WIF JSON structure: {exc}") from exc

    logger.info(
        f"Ingested WIF draft version {draft.version}",
        extra={
            "wif_version": draft.version,
            "section_names": sorted(draft.sections),
            "pattern_sections": [name for name in PATTERN_SECTIONS if draft.has_section(name)],
        },
    )
    return draft


def ingest_json(text: str | bytes) -> Draft:
    """Parse JSON text and ingest it; the parsed value is owned by the draft."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Invalid JSON: {exc}") from exc
    return ingest(payload, copy_payload=False)


def create_default(today: date | None = None) -> Draft:
    """An empty draft with only a ``wif`` header and a ``contents`` section."""
    today = today or date.today()
    return Draft(
        sections={
            WIF: {
                "version": DEFAULT_VERSION,
                "date": f"{today:%A}, {today:%B} {today.day}, {today.year}",
                "developers": DEVELOPERS,
                "sourceProgram": SOURCE_PROGRAM,
            },
            CONTENTS: {
                WIF: True,
                WEAVING: False,
                WARP: False,
                WEFT: False,
                **{name: False for name in PATTERN_SECTIONS},
            },
        }
    )


def serialize(draft: Draft) -> str:
    """Pretty-printed JSON for ``draft``, in the shape ``ingest`` accepts."""
    try:
        return json.dumps({"sections": draft.sections}, indent=2, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to serialize draft: {exc}") from exc


__all__ = ["validate", "ingest", "ingest_json", "create_default", "serialize"]
