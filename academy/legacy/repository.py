"""Database access for legacy_leads.

Table legacy_leads:
  id (serial), source, name, phone, age, height_cm_input, weight_kg_input,
  height_cm_bucket, weight_kg_bucket, matched_player_id, matched_player_name,
  matched_player_position, matched_player_archetype,
  matched_player_legacy (JSONB), consent, status, notes, created_at, updated_at
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

LEAD_SOURCE = "Find Your Legacy"
UPDATABLE_COLUMNS = ("status", "notes")

_COLUMNS = (
    "id, source, name, phone, age, height_cm_input, weight_kg_input, "
    "height_cm_bucket, weight_kg_bucket, matched_player_id, matched_player_name, "
    "matched_player_position, matched_player_archetype, matched_player_legacy, "
    "consent, status, notes, created_at, updated_at"
)


@dataclass(frozen=True, slots=True)
class LeadFilters:
    status: str | None = None
    from_date: date | None = None
    to_date: date | None = None
    search: str | None = None


def escape_like(value: str) -> str:
    """Make % and _ match literally under ESCAPE '\\'."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where(filters: LeadFilters) -> tuple[str, dict[str, Any]]:
    """Build the WHERE clause. Date bounds cover whole days: to_date is inclusive."""
    clauses: list[str] = []
    params: dict[str, Any] = {}
    if filters.status:
        clauses.append("status = :status")
        params["status"] = filters.status
    if filters.from_date is not None:
        clauses.append("created_at >= :from_date")
        params["from_date"] = filters.from_date
    if filters.to_date is not None:
        clauses.append("created_at < :to_date_exclusive")
        params["to_date_exclusive"] = filters.to_date + timedelta(days=1)
    if filters.search:
        clauses.append(
            "(name ILIKE :search ESCAPE '\\' OR phone ILIKE :search ESCAPE '\\' "
            "OR matched_player_name ILIKE :search ESCAPE '\\')"
        )
        params["search"] = f"%{escape_like(filters.search)}%"
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _row_to_dict(result, row) -> dict[str, Any]:
    data = dict(zip(result.keys(), row))
    legacy = data.get("matched_player_legacy")
    # asyncpg returns JSONB as text unless a codec is registered.
    if isinstance(legacy, str):
        data["matched_player_legacy"] = json.loads(legacy)
    return data


async def insert_lead(session: AsyncSession, values: dict[str, Any]) -> dict[str, Any]:
    params = dict(values)
    params.setdefault("source", LEAD_SOURCE)
    params.setdefault("status", "NEW")
    legacy = params.get("matched_player_legacy")
    params["matched_player_legacy"] = json.dumps(legacy) if legacy is not None else None

    query = (
        "INSERT INTO legacy_leads ("
        "source, name, phone, age, height_cm_input, weight_kg_input, "
        "height_cm_bucket, weight_kg_bucket, matched_player_id, matched_player_name, "
        "matched_player_position, matched_player_archetype, matched_player_legacy, "
        "consent, status, created_at, updated_at"
        ") VALUES ("
        ":source, :name, :phone, :age, :height_cm_input, :weight_kg_input, "
        ":height_cm_bucket, :weight_kg_bucket, :matched_player_id, :matched_player_name, "
        ":matched_player_position, :matched_player_archetype, "
        "CAST(:matched_player_legacy AS JSONB), :consent, :status, now(), now()"
        f") RETURNING {_COLUMNS}"
    )
    result = await session.execute(text(query), params)
    row = result.fetchone()
    await session.commit()
    return _row_to_dict(result, row)


async def list_leads(session: AsyncSession, filters: LeadFilters) -> list[dict[str, Any]]:
    where, params = _where(filters)
    query = f"SELECT {_COLUMNS} FROM legacy_leads{where} ORDER BY created_at DESC"
    result = await session.execute(text(query), params)
    return [_row_to_dict(result, r) for r in result.fetchall()]


async def get_lead(session: AsyncSession, lead_id: int) -> dict[str, Any] | None:
    query = f"SELECT {_COLUMNS} FROM legacy_leads WHERE id = :id"
    result = await session.execute(text(query), {"id": lead_id})
    row = result.fetchone()
    if row is None:
        return None
    return _row_to_dict(result, row)


async def update_lead(
    session: AsyncSession,
    lead_id: int,
    changes: dict[str, Any],
) -> dict[str, Any] | None:
    """Apply `changes` (status / notes). Returns the updated row, None if absent."""
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_COLUMNS}
    if not changes:
        return await get_lead(session, lead_id)

    assignments = ", ".join(f"{col} = :{col}" for col in changes)
    query = (
        f"UPDATE legacy_leads SET {assignments}, updated_at = now() "
        f"WHERE id = :id RETURNING {_COLUMNS}"
    )
    result = await session.execute(text(query), {**changes, "id": lead_id})
    row = result.fetchone()
    await session.commit()
    if row is None:
        return None
    return _row_to_dict(result, row)
