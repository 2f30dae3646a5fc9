"""Tests for Find Your Legacy contracts and CSV export."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from academy.legacy.export import CSV_HEADERS, lead_to_row, leads_to_csv
from academy.legacy.matcher import find_match
from academy.legacy.models import LeadCreate, MatchResponse, PlayerOut, normalize_phone
from tests.conftest import make_candidate, make_lead_row


def _lead(**overrides) -> LeadCreate:
    data = dict(
        name="Asha Rao",
        phone="98765 43210",
        age=25,
        height_cm_input=176,
        weight_kg_input=71,
        consent=True,
    )
    data.update(overrides)
    return LeadCreate(**data)


class TestNormalizePhone:
    def test_strips_formatting(self):
        assert normalize_phone("+91 (987) 654-3210") == "+919876543210"

    def test_digits_untouched(self):
        assert normalize_phone("9876543210") == "9876543210"


class TestLeadCreate:
    def test_valid(self):
        lead = _lead(name="  Asha Rao ")
        assert lead.name == "Asha Rao"
        assert lead.phone == "9876543210"

    def test_short_phone_after_normalizing(self):
        with pytest.raises(ValidationError):
            _lead(phone="98-76-54")

    def test_consent_required(self):
        with pytest.raises(ValidationError):
            _lead(consent=False)

    def test_whitespace_name_rejected(self):
        with pytest.raises(ValidationError):
            _lead(name="  a  ")


class TestMatchResponse:
    def test_from_match(self):
        match = find_match([make_candidate(28, 170, 65, cid="c1")], 30, 172, 68)
        resp = MatchResponse.from_match(match)
        assert resp.player == PlayerOut.from_candidate(match.candidate)
        assert resp.height_cm_input == 172
        assert resp.height_cm_bucket == 170
        assert resp.weight_kg_bucket == 70
        assert resp.age == 30
        assert resp.score == pytest.approx(6.2)
        data = resp.model_dump(mode="json")
        assert data["player"]["legacy"]["breakthrough"] == "c1 breakthrough"


class TestCsvExport:
    def test_header_only(self):
        assert leads_to_csv([]) == ",".join(CSV_HEADERS)

    def test_row_cells(self):
        row = lead_to_row(make_lead_row(7, consent=False, matched_player_name=None))
        assert row[0] == "7"
        assert row[6] == ""
        assert row[10] == "No"
        assert row[11] == datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc).isoformat()

    def test_all_cells_quoted(self):
        csv_text = leads_to_csv([make_lead_row(1), make_lead_row(2)])
        lines = csv_text.split("\n")
        assert len(lines) == 3
        assert lines[1].startswith('"1","Asha Rao","+919876543210","25","176","71"')
        assert lines[2].startswith('"2",')

    def test_embedded_quotes_doubled(self):
        csv_text = leads_to_csv([make_lead_row(1, name='Asha "The Wall" Rao')])
        assert '"Asha ""The Wall"" Rao"' in csv_text.split("\n")[1]
