import json
import logging
import time
from dataclasses import replace
from typing import List, Optional

from opening_drill.data.storage import KeyValueStore
from opening_drill.models import BLACK, WHITE, Study, generate_id

logger = logging.getLogger("opening_drill")

STORAGE_KEY = 'blitzdrill_studies'
EDITABLE_FIELDS = ("name", "pgn", "preferred_color")


def now_ms() -> int:
    return int(time.time() * 1000)


def load_studies(store: KeyValueStore) -> List[Study]:
    """Loads all studies from the store. Unreadable data is treated as an empty collection."""
    try:
        raw = store.get_item(STORAGE_KEY)
    except OSError as e:
        logger.warning(f"Could not read studies: {e}")
        return []
    if not raw:
        return []
    try:
        records = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Failed to decode stored studies. Starting with an empty collection.")
        return []
    if not isinstance(records, list):
        logger.error("Stored studies are not a list. Starting with an empty collection.")
        return []

    studies = []
    for record in records:
        try:
            studies.append(Study.from_dict(record))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed study record: {e}")
    return studies


def save_studies(store: KeyValueStore, studies: List[Study]) -> bool:
    """Saves all studies to the store. Returns False (after logging) when the write fails."""
    payload = json.dumps([study.to_dict() for study in studies])
    try:
        store.set_item(STORAGE_KEY, payload)
    except (OSError, TypeError) as e:
        logger.warning(f"Failed to save studies: {e}")
        return False
    logger.debug(f"Saved {len(studies)} studies")
    return True


def create_study(name: str, pgn: str, preferred_color: str = WHITE,
                 now: Optional[int] = None) -> Study:
    """Creates a new study with a fresh id and matching creation/update timestamps."""
    _check_color(preferred_color)
    timestamp = now if now is not None else now_ms()
    return Study(
        id=generate_id(),
        name=name,
        pgn=pgn,
        preferred_color=preferred_color,
        created_at=timestamp,
        updated_at=timestamp,
    )


def update_study(study: Study, now: Optional[int] = None, **updates) -> Study:
    """
    Returns a copy of study with updates applied and updated_at refreshed.

    Only name, pgn and preferred_color may change; the id and created_at of a
    study are fixed. updated_at always moves forward, even when the clock
    has not.
    """
    invalid = [key for key in updates if key not in EDITABLE_FIELDS]
    if invalid:
        raise ValueError(f"Cannot update study fields: {', '.join(sorted(invalid))}")
    if "preferred_color" in updates:
        _check_color(updates["preferred_color"])
    timestamp = now if now is not None else now_ms()
    return replace(study, updated_at=max(timestamp, study.updated_at + 1), **updates)


def delete_study(studies: List[Study], study_id: str) -> List[Study]:
    return [s for s in studies if s.id != study_id]


def find_study(studies: List[Study], study_id: str) -> Optional[Study]:
    """Finds a study by exact id, or by an id prefix that matches exactly one study."""
    for study in studies:
        if study.id == study_id:
            return study
    matches = [s for s in studies if study_id and s.id.startswith(study_id)]
    if len(matches) == 1:
        return matches[0]
    return None


def _check_color(color: str):
    if color not in (WHITE, BLACK):
        raise ValueError(f"Preferred color must be '{WHITE}' or '{BLACK}', got {color!r}")
