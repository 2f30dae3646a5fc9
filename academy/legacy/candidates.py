"""Find Your Legacy candidate dataset — static JSON, loaded once per process.

File shape: array of records

  {"id", "name", "position", "archetype", "primeAge", "heightCm", "weightKg",
   "legacy": {"spark", "breakthrough", "peak", "legacy"}}

Missing or unreadable files yield an empty dataset, never raise.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from academy.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DATASET_PATH = Path(__file__).resolve().parent.parent / "data" / "find_your_legacy_players.json"

LEGACY_STAGES = ("spark", "breakthrough", "peak", "legacy")


@dataclass(frozen=True, slots=True)
class LegacyArc:
    spark: str
    breakthrough: str
    peak: str
    legacy: str


@dataclass(frozen=True, slots=True)
class Candidate:
    id: str
    name: str
    position: str
    archetype: str
    prime_age: int
    height_cm: int
    weight_kg: int
    legacy: LegacyArc


def parse_candidate(record: dict[str, Any]) -> Candidate:
    """Build a Candidate from one dataset record. Raises on missing/invalid fields."""
    arc = record.get("legacy") or {}
    if not isinstance(arc, dict):
        raise ValueError("legacy must be an object")
    archetype = record.get("archetype") or ""
    # Some dataset revisions store archetypes as a list of tags.
    if isinstance(archetype, list):
        archetype = ", ".join(str(a) for a in archetype)
    return Candidate(
        id=str(record["id"]),
        name=str(record["name"]),
        position=str(record.get("position") or ""),
        archetype=str(archetype),
        prime_age=int(record["primeAge"]),
        height_cm=int(record["heightCm"]),
        weight_kg=int(record["weightKg"]),
        legacy=LegacyArc(**{stage: str(arc.get(stage) or "") for stage in LEGACY_STAGES}),
    )


def load_candidates(path: str | Path) -> tuple[Candidate, ...]:
    """Parse the dataset at `path`. Malformed records are skipped."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load legacy player dataset %s: %s", path, exc)
        return ()

    if not isinstance(raw, list):
        logger.warning("Legacy player dataset %s is not an array", path)
        return ()

    candidates: list[Candidate] = []
    for i, record in enumerate(raw):
        if not isinstance(record, dict):
            logger.warning("Skipping legacy player #%d: not an object", i)
            continue
        try:
            candidates.append(parse_candidate(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping legacy player #%d: %s", i, exc)
    return tuple(candidates)


_cache: tuple[Candidate, ...] | None = None


def get_candidates() -> tuple[Candidate, ...]:
    global _cache
    if _cache is None:
        _cache = load_candidates(settings.legacy_players_path or DEFAULT_DATASET_PATH)
        logger.info("Loaded %d legacy players", len(_cache))
    return _cache


def reset_candidates_cache() -> None:
    global _cache
    _cache = None
