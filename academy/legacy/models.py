"""Find Your Legacy request/response contracts — Pydantic v2 models."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from academy.legacy.candidates import Candidate
from academy.legacy.matcher import Match

# Accepted at the form boundary; the matcher re-clamps to its own ranges.
AGE_INPUT = dict(ge=6, le=60)
HEIGHT_INPUT = dict(ge=140, le=220)
WEIGHT_INPUT = dict(ge=35, le=140)


class LeadStatus(str, Enum):
    new = "NEW"
    contact_requested = "CONTACT_REQUESTED"
    contacted = "CONTACTED"
    follow_up = "FOLLOW_UP"
    will_join = "WILL_JOIN"
    joined = "JOINED"
    uninterested_no_response = "UNINTERESTED_NO_RESPONSE"


def normalize_phone(phone: str) -> str:
    """Strip everything but digits and '+'."""
    return re.sub(r"[^\d+]", "", phone)


class LegacyArcOut(BaseModel):
    spark: str
    breakthrough: str
    peak: str
    legacy: str


class PlayerOut(BaseModel):
    id: str
    name: str
    position: str
    archetype: str
    prime_age: int
    height_cm: int
    weight_kg: int
    legacy: LegacyArcOut

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> PlayerOut:
        return cls(
            id=candidate.id,
            name=candidate.name,
            position=candidate.position,
            archetype=candidate.archetype,
            prime_age=candidate.prime_age,
            height_cm=candidate.height_cm,
            weight_kg=candidate.weight_kg,
            legacy=LegacyArcOut(
                spark=candidate.legacy.spark,
                breakthrough=candidate.legacy.breakthrough,
                peak=candidate.legacy.peak,
                legacy=candidate.legacy.legacy,
            ),
        )


class MatchRequest(BaseModel):
    age: int = Field(..., **AGE_INPUT)
    height_cm: int = Field(..., **HEIGHT_INPUT)
    weight_kg: int = Field(..., **WEIGHT_INPUT)


class MatchResponse(BaseModel):
    player: PlayerOut
    exact: bool
    score: float
    age: int
    height_cm_input: int
    weight_kg_input: int
    height_cm_bucket: int
    weight_kg_bucket: int

    @classmethod
    def from_match(cls, match: Match) -> MatchResponse:
        return cls(
            player=PlayerOut.from_candidate(match.candidate),
            exact=match.exact,
            score=round(match.score, 4),
            age=int(match.normalized.age),
            height_cm_input=int(match.query.height_cm),
            weight_kg_input=int(match.query.weight_kg),
            height_cm_bucket=match.normalized.height_cm,
            weight_kg_bucket=match.normalized.weight_kg,
        )


class LeadCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=40)
    phone: str
    age: int = Field(..., **AGE_INPUT)
    height_cm_input: int = Field(..., **HEIGHT_INPUT)
    weight_kg_input: int = Field(..., **WEIGHT_INPUT)
    consent: bool

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        return v

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, v: str) -> str:
        v = normalize_phone(v)
        if len(v) < 10:
            raise ValueError("phone must have at least 10 digits")
        return v

    @field_validator("consent")
    @classmethod
    def _require_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("consent is required")
        return v


class LeadUpdate(BaseModel):
    status: LeadStatus | None = None
    notes: str | None = None


class LeadOut(BaseModel):
    id: int
    source: str
    name: str
    phone: str
    age: int
    height_cm_input: int
    weight_kg_input: int
    height_cm_bucket: int
    weight_kg_bucket: int
    matched_player_id: str | None = None
    matched_player_name: str | None = None
    matched_player_position: str | None = None
    matched_player_archetype: str | None = None
    matched_player_legacy: dict[str, Any] | None = None
    consent: bool
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
