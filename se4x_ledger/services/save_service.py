"""Save documents: exporting and importing a campaign as portable JSON.

A document is ``{"settings": {...}, "turns": [...]}`` with camelCase keys.
A bare list of turns (the older save layout) is also accepted on import and
gets default settings.
"""

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from se4x_ledger.schemas.campaign import AppSettings, SaveDocument
from se4x_ledger.schemas.turn import Turn
from se4x_ledger.services.turn_engine import recalculate

logger = logging.getLogger(__name__)

SAVE_FILENAME = "4x_manager_save.json"


class SaveDataError(ValueError):
    """Raised when a save document cannot be imported."""


def export_document(settings: AppSettings, turns: Sequence[Turn]) -> dict[str, Any]:
    """Return the JSON-ready document, omitting absent optional fields."""
    document = SaveDocument(settings=settings, turns=list(turns))
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_document(settings: AppSettings, turns: Sequence[Turn]) -> str:
    return json.dumps(export_document(settings, turns), indent=2)


def export_filename(now: datetime | None = None) -> str:
    """Timestamped file name for a "save as" download."""
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
    return f"4x_manager_save_{stamp}.json"


def _parse(raw: str | bytes | dict | list) -> Any:
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SaveDataError(f"Save data is not valid JSON: {exc.msg}") from exc
    return raw


def import_document(raw: str | bytes | dict | list) -> SaveDocument:
    """Validate a save document and return it with every turn recalculated.

    Nothing is returned unless the whole document is valid; any problem
    raises SaveDataError.
    """
    try:
        data = _parse(raw)
        if isinstance(data, list):
            data = {"turns": data}
        if not isinstance(data, dict):
            raise SaveDataError("Save data must be an object with 'settings' and 'turns'")
        try:
            document = SaveDocument.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise SaveDataError(
                f"Save data is malformed at '{location}': {first['msg']}"
            ) from exc

        ids = [turn.id for turn in document.turns]
        if not ids:
            raise SaveDataError("Save data contains no turns")
        if ids != list(range(1, len(ids) + 1)):
            raise SaveDataError("Turn ids must run 1, 2, 3 ... without gaps")
    except SaveDataError as exc:
        logger.warning("Rejected save data: %s", exc)
        raise

    logger.info("Imported save data with %d turns", len(document.turns))
    return document.model_copy(update={"turns": recalculate(document.turns)})
