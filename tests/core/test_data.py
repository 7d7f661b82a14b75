"""
Tests for CSV Fetch and Parse

Covers HTTP retrieval error mapping, header handling, row skipping and
the TicketRecord field mapping.
"""
import pandas as pd
import pytest
import requests

from core.data import fetch_csv_text, load_tickets, parse_tickets, round_half_up
from core.errors import FetchError, ParseError
from tests.helpers import SAMPLE_CSV, FakeResponse, FakeSession


class TestFetchCsvText:
    """Tests for the HTTP fetch step"""

    def test_returns_body_text(self):
        session = FakeSession(FakeResponse(SAMPLE_CSV))
        text = fetch_csv_text("https://example.test/export.csv", session=session, timeout=5)

        assert text == SAMPLE_CSV
        assert session.calls == [{"url": "https://example.test/export.csv", "timeout": 5}]

    def test_forces_utf8_decoding(self):
        response = FakeResponse("a,b\n1,2\n")
        fetch_csv_text("https://example.test", session=FakeSession(response))

        assert response.encoding == "utf-8"

    def test_connection_error_becomes_fetch_error(self):
        session = FakeSession(error=requests.ConnectionError("boom"))

        with pytest.raises(FetchError):
            fetch_csv_text("https://example.test", session=session)

    def test_http_error_status_becomes_fetch_error(self):
        session = FakeSession(FakeResponse("nope", status_code=503))

        with pytest.raises(FetchError):
            fetch_csv_text("https://example.test", session=session)


class TestParseTickets:
    """Tests for CSV parsing into records"""

    def test_parses_all_rows(self):
        records = parse_tickets(SAMPLE_CSV)

        assert [r.ticket_id for r in records] == ["T-001", "T-002", "T-003", "T-004", "T-005"]

    def test_maps_source_columns(self):
        first = parse_tickets(SAMPLE_CSV)[0]

        assert first.created == "2024-01-01T09:00:00Z"
        assert first.customer_email == "ana@example.com"
        assert first.category == "Billing"
        assert first.assigned_team == "Finance"
        assert first.priority == "High"
        assert first.status == "Resolved"
        assert first.resolved == "2024-01-03T09:00:00Z"

    def test_blank_resolution_is_none(self):
        second = parse_tickets(SAMPLE_CSV)[1]

        assert second.resolved is None

    def test_values_stay_strings(self):
        records = parse_tickets("Ticket ID,Priority\n007,1\n")

        assert records[0].ticket_id == "007"
        assert records[0].priority == "1"

    def test_header_keys_are_trimmed(self):
        records = parse_tickets(" Ticket ID , Status \nT-1,Open\n")

        assert records[0].ticket_id == "T-1"
        assert records[0].status == "Open"
        assert list(records[0].to_row()) == ["Ticket ID", "Status"]

    def test_empty_lines_are_skipped(self):
        records = parse_tickets("Ticket ID,Status\nT-1,Open\n\n\nT-2,Resolved\n")

        assert [r.ticket_id for r in records] == ["T-1", "T-2"]

    def test_rows_with_extra_fields_are_skipped(self, caplog):
        text = "Ticket ID,Status\nT-1,Open\nT-2,Open,unexpected,extra\nT-3,Resolved\n"

        with caplog.at_level("WARNING", logger="core.data"):
            records = parse_tickets(text)

        assert [r.ticket_id for r in records] == ["T-1", "T-3"]
        assert [r.status for r in records] == ["Open", "Resolved"]
        assert "skipping row" in caplog.text

    def test_leading_row_with_extra_fields_does_not_shift_columns(self, caplog):
        text = "Ticket ID,Status,Assigned Team\nT-1,Open,Finance,EXTRA\nT-2,Resolved,Support\nT-3,Open,Support\n"

        with caplog.at_level("WARNING", logger="core.data"):
            records = parse_tickets(text)

        assert [(r.ticket_id, r.status, r.assigned_team) for r in records] == [
            ("T-2", "Resolved", "Support"),
            ("T-3", "Open", "Support"),
        ]
        assert "T-1" in caplog.text

    def test_trailing_empty_surplus_field_is_skipped(self):
        records = parse_tickets("Ticket ID,Status\nT-1,Open,\nT-2,Open\n")

        assert [r.ticket_id for r in records] == ["T-2"]

    def test_short_rows_are_kept(self):
        records = parse_tickets("Ticket ID,Status,Assigned Team\nT-1,Open\n")

        assert records[0].ticket_id == "T-1"
        assert records[0].assigned_team == ""

    def test_missing_columns_yield_empty_values(self):
        records = parse_tickets("Ticket ID\nT-1\n")

        assert records[0].status == ""
        assert records[0].assigned_team == ""
        assert records[0].resolved is None

    def test_duplicate_ids_are_retained(self):
        records = parse_tickets("Ticket ID,Status\nT-1,Open\nT-1,Open\n")

        assert len(records) == 2

    def test_extra_columns_kept_for_export(self):
        records = parse_tickets("Ticket ID,Region\nT-1,EMEA\n")

        assert records[0].to_row() == {"Ticket ID": "T-1", "Region": "EMEA"}

    def test_blank_document_gives_no_records(self):
        assert parse_tickets("") == []
        assert parse_tickets("   \n\n") == []

    def test_header_only_gives_no_records(self):
        assert parse_tickets("Ticket ID,Status\n") == []

    def test_tokenizer_failure_raises_parse_error(self, monkeypatch):
        def _broken(*args, **kwargs):
            raise pd.errors.ParserError("cannot tokenize")

        monkeypatch.setattr(pd, "read_csv", _broken)

        with pytest.raises(ParseError):
            parse_tickets("a,b\n1,2\n")


class TestLoadTickets:
    """Tests for fetch + parse together"""

    def test_load_tickets_uses_session(self):
        session = FakeSession(FakeResponse(SAMPLE_CSV))
        records = load_tickets("https://example.test/export.csv", session=session)

        assert len(records) == 5
        assert len(session.calls) == 1


class TestRoundHalfUp:
    """Tests for the rounding helper"""

    def test_rounds_half_away_from_zero(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(2.45, 1) == 2.5

    def test_none_and_nan(self):
        assert round_half_up(None) is None
        assert round_half_up(float("nan")) is None


class TestErrorKinds:
    """Tests for the error hierarchy"""

    def test_network_error_is_fetch_error(self):
        from core.errors import DashboardError, EmptyResultError, NetworkError

        assert NetworkError is FetchError
        assert issubclass(FetchError, DashboardError)
        assert issubclass(ParseError, DashboardError)
        assert issubclass(EmptyResultError, DashboardError)
