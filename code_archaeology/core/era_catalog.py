"""Read-only lookup of era definitions loaded from JSON content files.

Record format (one file per era, named ``<era id>.json``)::

    {
      "id": "fortran",
      "name": "FORTRAN",
      "year": 1957,
      "description": "...",
      "totalFragments": 6,
      "fragments": [
        {
          "id": "fortran-hello",
          "title": "...",
          "code": "...",
          "description": "...",
          "question": {
            "text": "...",
            "options": ["...", "..."],
            "correct": 1,
            "explanation": "..."
          }
        }
      ]
    }

An era whose file is missing or malformed is replaced by a placeholder era
without fragments, so the board still runs with the default fragment quota.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from code_archaeology.constants.game_constants import DEFAULT_FRAGMENT_COUNT, ERA_ORDER
from code_archaeology.constants.storage_constants import ERA_DATA_DIR
from code_archaeology.core.errors import ContentLoadFailure, UnknownEra
from code_archaeology.core.models import Era, Fragment, Question

logger = logging.getLogger(__name__)

_PLACEHOLDER_NAMES = {
    "fortran": ("FORTRAN", 1957),
    "c": ("C", 1972),
    "python": ("Python", 1991),
}


class EraCatalog:
    """Immutable mapping of era id to ``Era`` in unlock order."""

    def __init__(self, eras: list[Era]) -> None:
        by_id = {era.id: era for era in eras}
        missing = [era_id for era_id in ERA_ORDER if era_id not in by_id]
        if missing:
            raise ValueError(f"Catalog is missing eras: {', '.join(missing)}")
        self._eras = {era_id: by_id[era_id] for era_id in ERA_ORDER}

    @classmethod
    def from_directory(cls, directory: Path) -> "EraCatalog":
        eras: list[Era] = []
        for era_id in ERA_ORDER:
            path = directory / f"{era_id}.json"
            try:
                eras.append(load_era_file(path, expected_id=era_id))
            except ContentLoadFailure as exc:
                logger.warning("Falling back to placeholder content for era '%s': %s", era_id, exc)
                eras.append(placeholder_era(era_id))
        return cls(eras)

    @classmethod
    def from_default_files(cls) -> "EraCatalog":
        return cls.from_directory(ERA_DATA_DIR)

    @classmethod
    def placeholder(cls) -> "EraCatalog":
        """Catalog with no content at all, used when nothing could be loaded."""
        return cls([placeholder_era(era_id) for era_id in ERA_ORDER])

    def get(self, era_id: str) -> Era:
        try:
            return self._eras[era_id]
        except KeyError:
            raise UnknownEra(era_id) from None

    def eras(self) -> list[Era]:
        return list(self._eras.values())

    def fragments(self, era_id: str) -> list[Fragment]:
        return list(self.get(era_id).fragments)

    def fragment_count(self, era_id: str) -> int:
        """Number of fragments the board may place for an era."""
        era = self.get(era_id)
        if era.fragments:
            return len(era.fragments)
        return era.total_fragments if era.total_fragments > 0 else DEFAULT_FRAGMENT_COUNT


def load_era_file(path: Path, expected_id: str | None = None) -> Era:
    try:
        raw = json.loads(path.read_text(encoding="utf-8-sig"))
    except OSError as exc:
        raise ContentLoadFailure(f"Could not read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ContentLoadFailure(f"{path} is not valid JSON: {exc}") from exc
    era = _era_from_dict(raw)
    if expected_id is not None and era.id != expected_id:
        raise ContentLoadFailure(f"{path} defines era '{era.id}', expected '{expected_id}'.")
    return era


def placeholder_era(era_id: str) -> Era:
    name, year = _PLACEHOLDER_NAMES.get(era_id, (era_id, 0))
    return Era(
        id=era_id,
        name=name,
        year=year,
        description="",
        total_fragments=DEFAULT_FRAGMENT_COUNT,
        fragments=(),
    )


def _era_from_dict(raw: Any) -> Era:
    if not isinstance(raw, dict):
        raise ContentLoadFailure("Era record must be a JSON object.")
    try:
        era_id = str(raw["id"])
        fragments = tuple(_fragment_from_dict(item) for item in raw.get("fragments", []))
        total = int(raw.get("totalFragments", len(fragments) or DEFAULT_FRAGMENT_COUNT))
        era = Era(
            id=era_id,
            name=str(raw["name"]),
            year=int(raw["year"]),
            description=str(raw.get("description", "")),
            total_fragments=total,
            fragments=fragments,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ContentLoadFailure(f"Malformed era record: {exc!r}") from exc

    if era_id not in ERA_ORDER:
        raise ContentLoadFailure(f"Unknown era id '{era_id}'.")
    seen: set[str] = set()
    for fragment in fragments:
        if fragment.id in seen:
            raise ContentLoadFailure(f"Duplicate fragment id '{fragment.id}' in era '{era_id}'.")
        seen.add(fragment.id)
    return era


def _fragment_from_dict(raw: dict[str, Any]) -> Fragment:
    return Fragment(
        id=str(raw["id"]),
        title=str(raw["title"]),
        code=str(raw.get("code", "")),
        description=str(raw.get("description", "")),
        question=_question_from_dict(raw["question"]),
    )


def _question_from_dict(raw: dict[str, Any]) -> Question:
    options = tuple(str(option).strip() for option in raw["options"])
    if len(options) < 2:
        raise ContentLoadFailure("A question needs at least two options.")
    if any(not option for option in options):
        raise ContentLoadFailure("Option text cannot be empty.")
    correct = int(raw["correct"])
    if not 0 <= correct < len(options):
        raise ContentLoadFailure(f"Correct option {correct} is out of range.")
    text = str(raw["text"]).strip()
    if not text:
        raise ContentLoadFailure("Question text cannot be empty.")
    return Question(
        text=text,
        options=options,
        correct_index=correct,
        explanation=str(raw.get("explanation", "")),
    )
