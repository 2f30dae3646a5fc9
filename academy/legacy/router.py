"""Find Your Legacy HTTP router (matching, lead capture and the admin lead desk)."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth import verify_admin_key
from academy.crm.sync import CrmLeadInput, CrmSourceType, upsert_crm_lead
from academy.db import get_session
from academy.legacy import repository
from academy.legacy.candidates import get_candidates
from academy.legacy.export import leads_to_csv
from academy.legacy.matcher import EmptyCandidateSet, find_match, normalize_query
from academy.legacy.models import (
    LeadCreate,
    LeadOut,
    LeadStatus,
    LeadUpdate,
    MatchRequest,
    MatchResponse,
    PlayerOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/legacy", tags=["legacy"])


def _parse_date(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


def _crm_input(lead: dict) -> CrmLeadInput:
    return CrmLeadInput(
        source_type=CrmSourceType.legacy,
        source_id=lead["id"],
        primary_name=lead["name"],
        phone=lead["phone"],
        status_hint=lead["status"],
    )


# ---------------------------------------------------------------------------
# Public: dataset + matching
# ---------------------------------------------------------------------------


@router.get("/players", response_model=list[PlayerOut])
async def list_players() -> list[PlayerOut]:
    return [PlayerOut.from_candidate(c) for c in get_candidates()]


@router.post("/match", response_model=MatchResponse)
async def match_player(body: MatchRequest) -> MatchResponse:
    result = find_match(get_candidates(), body.age, body.height_cm, body.weight_kg)
    if isinstance(result, EmptyCandidateSet):
        raise HTTPException(status_code=503, detail="No legacy players available to match")
    return MatchResponse.from_match(result)


# ---------------------------------------------------------------------------
# Public: lead capture
# ---------------------------------------------------------------------------


@router.post("/leads", response_model=LeadOut)
async def create_lead(
    body: LeadCreate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    result = find_match(get_candidates(), body.age, body.height_cm_input, body.weight_kg_input)

    values = {
        "name": body.name,
        "phone": body.phone,
        "age": body.age,
        "height_cm_input": body.height_cm_input,
        "weight_kg_input": body.weight_kg_input,
        "consent": body.consent,
        "matched_player_id": None,
        "matched_player_name": None,
        "matched_player_position": None,
        "matched_player_archetype": None,
        "matched_player_legacy": None,
    }
    if isinstance(result, EmptyCandidateSet):
        logger.warning("Storing legacy lead without a match: %s", result.reason)
        normalized = normalize_query(result.query)
    else:
        normalized = result.normalized
        player = result.candidate
        values.update(
            matched_player_id=player.id,
            matched_player_name=player.name,
            matched_player_position=player.position,
            matched_player_archetype=player.archetype,
            matched_player_legacy=PlayerOut.from_candidate(player).legacy.model_dump(),
        )
    values["height_cm_bucket"] = normalized.height_cm
    values["weight_kg_bucket"] = normalized.weight_kg

    try:
        lead = await repository.insert_lead(session, values)
    except SQLAlchemyError:
        logger.exception("Error saving legacy lead")
        await session.rollback()
        raise HTTPException(status_code=500, detail="Failed to save lead")
    await upsert_crm_lead(session, _crm_input(lead))
    return lead


# ---------------------------------------------------------------------------
# Admin: lead desk
# ---------------------------------------------------------------------------


@router.get("/leads", response_model=list[LeadOut])
async def list_leads(
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_admin_key),
    status: LeadStatus | None = Query(default=None),
    from_date: str | None = Query(default=None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: str | None = Query(default=None, alias="to", description="End date, inclusive (YYYY-MM-DD)"),
    search: str | None = Query(default=None, description="Name, phone or matched player"),
) -> list[dict]:
    filters = repository.LeadFilters(
        status=status.value if status else None,
        from_date=_parse_date(from_date, "from"),
        to_date=_parse_date(to_date, "to"),
        search=search or None,
    )
    return await repository.list_leads(session, filters)


@router.get("/leads/export/csv")
async def export_leads_csv(
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_admin_key),
    status: LeadStatus | None = Query(default=None),
    from_date: str | None = Query(default=None, alias="from"),
    to_date: str | None = Query(default=None, alias="to"),
) -> Response:
    filters = repository.LeadFilters(
        status=status.value if status else None,
        from_date=_parse_date(from_date, "from"),
        to_date=_parse_date(to_date, "to"),
    )
    leads = await repository.list_leads(session, filters)
    return Response(
        content=leads_to_csv(leads),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="legacy_leads.csv"'},
    )


@router.get("/leads/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: int,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_admin_key),
) -> dict:
    lead = await repository.get_lead(session, lead_id)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.put("/leads/{lead_id}", response_model=LeadOut)
async def update_lead(
    lead_id: int,
    body: LeadUpdate,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_admin_key),
) -> dict:
    changes = body.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if body.notes is None and "notes" in body.model_fields_set:
        changes["notes"] = None
    lead = await repository.update_lead(session, lead_id, changes)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    await upsert_crm_lead(session, _crm_input(lead))
    return lead
