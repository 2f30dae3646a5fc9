"""Find Your Legacy matcher — pure functions, no I/O, no state between calls.

A query (age, height, weight) is normalised into buckets and compared
against the candidate dataset:

1. exact match on (prime_age, height_cm, weight_kg), first in order wins
2. otherwise the smallest weighted distance, ties go to the lower index

An empty dataset is reported as an EmptyCandidateSet value, never raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from academy.legacy.candidates import Candidate

AGE_MIN, AGE_MAX = 6, 60
HEIGHT_MIN, HEIGHT_MAX = 150, 205
WEIGHT_MIN, WEIGHT_MAX = 45, 115
BUCKET_STEP = 5

HEIGHT_WEIGHT = 1.2
WEIGHT_WEIGHT = 1.0
AGE_WEIGHT = 0.6


@dataclass(frozen=True, slots=True)
class Query:
    age: float
    height_cm: float
    weight_kg: float


@dataclass(frozen=True, slots=True)
class NormalizedQuery:
    age: float
    height_cm: int
    weight_kg: int


@dataclass(frozen=True, slots=True)
class Match:
    candidate: Candidate
    query: Query
    normalized: NormalizedQuery
    exact: bool
    score: float


@dataclass(frozen=True, slots=True)
class EmptyCandidateSet:
    query: Query
    reason: str = "no_candidates"


MatchResult = Match | EmptyCandidateSet


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def snap_to_bucket(value: float, low: int, high: int, step: int = BUCKET_STEP) -> int:
    """Clamp into [low, high] then round to the nearest multiple of `step`.

    Halves round up (172.5 -> 175); round() would use banker's rounding.
    """
    clamped = clamp(value, low, high)
    return int(math.floor(clamped / step + 0.5)) * step


def normalize_query(query: Query) -> NormalizedQuery:
    age = clamp(query.age, AGE_MIN, AGE_MAX)
    if isinstance(age, float) and age.is_integer():
        age = int(age)
    return NormalizedQuery(
        age=age,
        height_cm=snap_to_bucket(query.height_cm, HEIGHT_MIN, HEIGHT_MAX),
        weight_kg=snap_to_bucket(query.weight_kg, WEIGHT_MIN, WEIGHT_MAX),
    )


def is_exact(candidate: Candidate, normalized: NormalizedQuery) -> bool:
    return (
        candidate.prime_age == normalized.age
        and candidate.height_cm == normalized.height_cm
        and candidate.weight_kg == normalized.weight_kg
    )


def score(candidate: Candidate, normalized: NormalizedQuery) -> float:
    """Weighted distance. Lower is closer; 0.0 only for an exact match."""
    return (
        abs(candidate.height_cm - normalized.height_cm) * HEIGHT_WEIGHT
        + abs(candidate.weight_kg - normalized.weight_kg) * WEIGHT_WEIGHT
        + abs(candidate.prime_age - normalized.age) * AGE_WEIGHT
    )


def find_match(
    candidates: Sequence[Candidate],
    age: float,
    height_cm: float,
    weight_kg: float,
) -> MatchResult:
    """Return the closest candidate for the query, or EmptyCandidateSet."""
    query = Query(age=age, height_cm=height_cm, weight_kg=weight_kg)
    if not candidates:
        return EmptyCandidateSet(query=query)

    normalized = normalize_query(query)

    for candidate in candidates:
        if is_exact(candidate, normalized):
            return Match(
                candidate=candidate,
                query=query,
                normalized=normalized,
                exact=True,
                score=0.0,
            )

    best_index, best_score = min(
        ((i, score(c, normalized)) for i, c in enumerate(candidates)),
        key=lambda pair: (pair[1], pair[0]),
    )
    return Match(
        candidate=candidates[best_index],
        query=query,
        normalized=normalized,
        exact=False,
        score=best_score,
    )
