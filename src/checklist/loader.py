"""Checklist ingestion from JSON exports."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from src.models.checklist import ChecklistItem

logger = logging.getLogger(__name__)


class ChecklistLoadError(ValueError):
    """Raised when a checklist file exists but cannot be turned into items."""


def load_checklist(path: str | Path) -> list[ChecklistItem]:
    """Load checklist items from a JSON file.

    Accepts either a bare list of items or an object with an ``items`` list.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checklist not found: {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ChecklistLoadError(f"Checklist {path} is not valid JSON: {e}") from e

    raw_items = data.get("items") if isinstance(data, dict) else data
    if not isinstance(raw_items, list):
        raise ChecklistLoadError(f"Checklist {path} must contain a list of items")

    try:
        items = [ChecklistItem.model_validate(raw) for raw in raw_items]
    except ValidationError as e:
        raise ChecklistLoadError(f"Invalid checklist item in {path}: {e}") from e

    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise ChecklistLoadError(f"Duplicate checklist id in {path}: {item.id}")
        seen.add(item.id)

    logger.info("Loaded %d checklist items from %s", len(items), path)
    return items
