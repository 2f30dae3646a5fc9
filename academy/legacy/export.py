"""CSV export of legacy leads."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable

CSV_HEADERS = [
    "ID",
    "Name",
    "Phone",
    "Age",
    "Height (cm)",
    "Weight (kg)",
    "Matched Player",
    "Position",
    "Archetype",
    "Status",
    "Consent",
    "Created At",
]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def lead_to_row(lead: dict[str, Any]) -> list[str]:
    return [
        _cell(lead.get("id")),
        _cell(lead.get("name")),
        _cell(lead.get("phone")),
        _cell(lead.get("age")),
        _cell(lead.get("height_cm_input")),
        _cell(lead.get("weight_kg_input")),
        _cell(lead.get("matched_player_name")),
        _cell(lead.get("matched_player_position")),
        _cell(lead.get("matched_player_archetype")),
        _cell(lead.get("status")),
        "Yes" if lead.get("consent") else "No",
        _cell(lead.get("created_at")),
    ]


def leads_to_csv(leads: Iterable[dict[str, Any]]) -> str:
    """Header row unquoted, every data cell quoted with embedded quotes doubled."""
    buf = io.StringIO()
    buf.write(",".join(CSV_HEADERS))
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for lead in leads:
        buf.write("\n")
        writer.writerow(lead_to_row(lead))
    return buf.getvalue().rstrip("\n")
