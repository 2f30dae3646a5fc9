"""CRM lead sync: mirrors leads from every capture surface into crm_leads.

Table crm_leads is keyed by (source_type, source_id):
  source_type, source_id, primary_name, phone, email, preferred_centre,
  programme_interest, stage, status, converted_student_id, converted_fan_id,
  converted_order_id, updated_at

Sync is best-effort: the originating lead is already stored, so a failure
here is logged and swallowed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class CrmSourceType(str, Enum):
    website = "WEBSITE"
    legacy = "LEGACY"
    checkout = "CHECKOUT"
    fan = "FAN"


_CRM_STAGES: tuple[tuple[tuple[str, ...], tuple[str, str]], ...] = (
    (("CONVERTED", "WON", "JOINED"), ("JOINED", "CLOSED")),
    (
        ("LOST", "DROPPED", "UNINTERESTED_NO_RESPONSE", "UNINTERESTED", "NO_RESPONSE"),
        ("UNINTERESTED_NO_RESPONSE", "CLOSED"),
    ),
    (("QUALIFIED", "FOLLOW_UP", "FOLLOWUP"), ("FOLLOW_UP", "OPEN")),
    (("PROPOSAL", "WILL_JOIN", "WILLJOIN"), ("WILL_JOIN", "OPEN")),
    (("CONTACTED",), ("CONTACTED", "OPEN")),
)

_STAGE_BY_STATUS = {raw: mapped for raws, mapped in _CRM_STAGES for raw in raws}


def map_lead_status_to_crm(status: str | None) -> tuple[str, str]:
    """Map a source lead status (old or new vocabulary) to CRM (stage, status)."""
    raw = (status or "NEW").upper()
    return _STAGE_BY_STATUS.get(raw, ("NEW", "OPEN"))


@dataclass(frozen=True, slots=True)
class CrmLeadInput:
    source_type: CrmSourceType
    source_id: int
    primary_name: str
    phone: str | None = None
    email: str | None = None
    preferred_centre: str | None = None
    programme_interest: str | None = None
    status_hint: str | None = None
    converted_student_id: int | None = None
    converted_fan_id: int | None = None
    converted_order_id: int | None = None


_UPSERT_SQL = (
    "INSERT INTO crm_leads ("
    "source_type, source_id, primary_name, phone, email, preferred_centre, "
    "programme_interest, stage, status, converted_student_id, converted_fan_id, "
    "converted_order_id, updated_at"
    ") VALUES ("
    ":source_type, :source_id, :primary_name, :phone, :email, :preferred_centre, "
    ":programme_interest, :stage, :status, :converted_student_id, :converted_fan_id, "
    ":converted_order_id, now()"
    ") ON CONFLICT (source_type, source_id) DO UPDATE SET "
    "primary_name = EXCLUDED.primary_name, phone = EXCLUDED.phone, "
    "email = EXCLUDED.email, preferred_centre = EXCLUDED.preferred_centre, "
    "programme_interest = EXCLUDED.programme_interest, stage = EXCLUDED.stage, "
    "status = EXCLUDED.status, converted_student_id = EXCLUDED.converted_student_id, "
    "converted_fan_id = EXCLUDED.converted_fan_id, "
    "converted_order_id = EXCLUDED.converted_order_id, updated_at = now() "
    "RETURNING id, source_type, source_id, stage, status"
)


def build_upsert_params(lead: CrmLeadInput) -> dict[str, Any]:
    stage, status = map_lead_status_to_crm(lead.status_hint)
    params = asdict(lead)
    params.pop("status_hint")
    params["source_type"] = lead.source_type.value
    # Empty strings from the capture forms are stored as NULL.
    for key in ("phone", "email", "preferred_centre", "programme_interest"):
        params[key] = params[key] or None
    params["stage"] = stage
    params["status"] = status
    return params


async def upsert_crm_lead(session: AsyncSession, lead: CrmLeadInput) -> dict[str, Any] | None:
    """Insert or update the CRM row for a lead. Returns the row, or None on failure."""
    try:
        result = await session.execute(text(_UPSERT_SQL), build_upsert_params(lead))
        row = result.fetchone()
        await session.commit()
    except SQLAlchemyError as exc:
        logger.warning(
            "CRM sync skipped for %s #%s: %s", lead.source_type.value, lead.source_id, exc
        )
        await session.rollback()
        return None
    if row is None:
        return None
    return dict(zip(result.keys(), row))
