"""
Tests for the master ledger.
"""

from attendance.ledger import MasterLedger, sort_master_rows
from attendance.models import EventResult, ParticipantRecord


def _event(applicants, attendees):
    return EventResult(unique_applicants=frozenset(applicants), unique_attendees=frozenset(attendees))


class TestMasterLedger:
    """Tests for MasterLedger.fold and snapshot."""

    def test_empty_ledger(self):
        ledger = MasterLedger()
        assert len(ledger) == 0
        assert ledger.gross_total == 0
        assert ledger.attend_total == 0
        assert ledger.attend_unique == 0
        assert ledger.processed_count == 0
        assert ledger.snapshot() == ()

    def test_fold_single_event(self):
        ledger = MasterLedger()
        ledger.fold(_event({"K1", "K2"}, {"K1"}), {"K1": "Alice", "K2": "Bob"})

        assert ledger.gross_total == 2
        assert ledger.attend_total == 1
        assert ledger.attend_unique == 1
        assert ledger.processed_count == 1
        assert "K2" in ledger
        assert ledger.snapshot() == (
            ParticipantRecord("K1", "Alice", 1),
            ParticipantRecord("K2", "Bob", 0),
        )

    def test_same_key_two_events(self):
        """Test that attending two events counts twice but is unique once."""
        names = {"K1": "Alice"}
        ledger = MasterLedger()
        ledger.fold(_event({"K1"}, {"K1"}), names)
        ledger.fold(_event({"K1"}, {"K1"}), names)

        assert ledger.attend_total == 2
        assert ledger.attend_unique == 1
        assert ledger.snapshot()[0].attendance_count == 2

    def test_name_not_overwritten(self):
        ledger = MasterLedger()
        ledger.fold(_event({"K1"}, {"K1"}), {"K1": "Alice"})
        ledger.fold(_event({"K1"}, {"K1"}), {"K1": "Alicia"})
        assert ledger.snapshot()[0].name == "Alice"

    def test_empty_event_still_processed(self):
        ledger = MasterLedger()
        ledger.fold(_event(set(), set()), {})
        assert ledger.processed_count == 1
        assert ledger.gross_total == 0

    def test_count_sum_matches_attend_total(self):
        names = {k: k.lower() for k in ("A", "B", "C", "D")}
        ledger = MasterLedger()
        ledger.fold(_event({"A", "B", "C"}, {"A", "B"}), names)
        ledger.fold(_event({"B", "C", "D"}, {"B", "C", "D"}), names)
        ledger.fold(_event({"A"}, set()), names)

        rows = ledger.snapshot()
        assert sum(r.attendance_count for r in rows) == ledger.attend_total == 5
        assert ledger.gross_total == 7
        assert ledger.attend_unique == 4


class TestSortMasterRows:
    """Tests for ledger ordering."""

    def test_count_desc_then_key_asc(self):
        rows = [
            ParticipantRecord("b", "x", 1),
            ParticipantRecord("a", "x", 1),
            ParticipantRecord("c", "x", 3),
            ParticipantRecord("d", "x", 0),
        ]
        assert [r.primary_key for r in sort_master_rows(rows)] == ["c", "a", "b", "d"]

    def test_case_insensitive_tie_break(self):
        rows = [ParticipantRecord("b", "", 1), ParticipantRecord("B", "", 1), ParticipantRecord("a", "", 1)]
        assert [r.primary_key for r in sort_master_rows(rows)] == ["a", "B", "b"]

    def test_accented_keys_sort_with_base_letter(self):
        """Test that accented Latin letters sort next to their base letter."""
        rows = [ParticipantRecord("f1", "", 1), ParticipantRecord("é1", "", 1), ParticipantRecord("d1", "", 1)]
        assert [r.primary_key for r in sort_master_rows(rows)] == ["d1", "é1", "f1"]

    def test_cyrillic_yo_sorts_with_ye(self):
        """Test that ё sorts next to е, not after я."""
        rows = [ParticipantRecord("яблоко", "", 2), ParticipantRecord("ёж", "", 2)]
        assert [r.primary_key for r in sort_master_rows(rows)] == ["ёж", "яблоко"]
