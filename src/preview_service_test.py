from datetime import date, timedelta

import pytest

from conftest import MONDAY, add_class, add_rule, add_tutors, slot
from maintenance import maintain_session_window
from models import AssignmentRule
from preview_service import preview_assignments
from session_repo import list_sessions_for_class


def test_preview_then_commit_agree(con, connect):
    add_tutors(con, "A", "B", "C")
    add_class(con, "C1", slot("TS1", "C1"), slot("TS2", "C1", day=3, start="16:30", end="18:00"))
    add_rule(con, "TS1", "ROUND_ROBIN", {"tutors": ["A", "B", "C"]})
    add_rule(con, "TS2", "CONSECUTIVE_DAYS", {"tutors": ["A", "B"], "block_length": 2})

    previews = {
        sid: preview_assignments(con, "C1", sid, 4, today=MONDAY) for sid in ("TS1", "TS2")
    }
    assert list_sessions_for_class(con, "C1") == []

    maintain_session_window(connect, today=MONDAY)

    committed = {
        (s.time_slot_id, s.session_date): s.tutor_id
        for s in list_sessions_for_class(con, "C1")
    }
    previewed = {
        (sid, e.session_date): e.tutor_id
        for sid, entries in previews.items()
        for e in entries
    }
    assert len(committed) == 8
    assert previewed == committed


def test_preview_entries_are_ordered_and_named(con):
    add_tutors(con, "A", "B")
    add_class(con, "C1", slot("TS1", "C1"))
    add_rule(con, "TS1", "ROUND_ROBIN", {"tutors": ["A", "B"]})

    entries = preview_assignments(con, "C1", "TS1", 3, today=MONDAY + timedelta(days=3))

    assert [e.session_date for e in entries] == [
        date(2026, 10, 19),
        date(2026, 10, 26),
        date(2026, 11, 2),
    ]
    assert [e.tutor_id for e in entries] == ["A", "B", "A"]
    assert [e.tutor_name for e in entries] == ["Tutor A", "Tutor B", "Tutor A"]
    assert all(e.week_start == e.session_date for e in entries)
    assert not any(e.materialized for e in entries)


def test_preview_overlapping_materialized_dates(con, connect):
    add_class(con, "C1", slot("TS1", "C1"))
    add_rule(con, "TS1", "ROUND_ROBIN", {"tutors": ["A", "B"]})
    maintain_session_window(connect, today=MONDAY)

    # a prospective rule is shown against the real occurrence indices
    prospective = AssignmentRule(time_slot_id="TS1", pattern="ROUND_ROBIN", config={"tutors": ["X", "Y", "Z"]})
    entries = preview_assignments(con, "C1", "TS1", 6, rule=prospective, today=MONDAY)

    assert [e.materialized for e in entries] == [True, True, True, True, False, False]
    assert [e.current_tutor_id for e in entries] == ["A", "B", "A", "B", None, None]
    assert [e.tutor_id for e in entries] == ["X", "Y", "Z", "X", "Y", "Z"]
    assert len(list_sessions_for_class(con, "C1")) == 4


def test_preview_does_not_persist_unknown_tutor_names(con):
    add_class(con, "C1", slot("TS1", "C1"))
    add_rule(con, "TS1", "MANUAL")

    entries = preview_assignments(con, "C1", "TS1", 2, today=MONDAY)
    assert [(e.tutor_id, e.tutor_name) for e in entries] == [(None, None), (None, None)]


@pytest.mark.parametrize(
    "class_id,slot_id,weeks,code",
    [
        ("NOPE", "TS1", 4, "class_not_found: NOPE"),
        ("C1", "TS-OTHER", 4, "time_slot_not_in_class: TS-OTHER"),
        ("C1", "TS-MISSING", 4, "time_slot_not_in_class: TS-MISSING"),
        ("C1", "TS1", 0, "invalid_weeks_ahead: 0"),
        ("C0", "TS0", 4, "class_inactive: C0"),
        ("C1", "TS-OFF", 4, "time_slot_inactive: TS-OFF"),
    ],
)
def test_preview_rejects_bad_input(con, class_id, slot_id, weeks, code):
    add_class(con, "C1", slot("TS1", "C1"), slot("TS-OFF", "C1", day=2, is_active=False))
    add_class(con, "C2", slot("TS-OTHER", "C2"))
    add_class(con, "C0", slot("TS0", "C0"), active=False)

    with pytest.raises(ValueError) as exc:
        preview_assignments(con, class_id, slot_id, weeks, today=MONDAY)
    assert str(exc.value) == code


def test_deactivated_slot_is_neither_previewed_nor_filled(con, connect):
    add_class(con, "C1", slot("TS1", "C1"), slot("TS2", "C1", day=2, is_active=False))
    add_rule(con, "TS2", "ROUND_ROBIN", {"tutors": ["A", "B"]})

    with pytest.raises(ValueError, match="time_slot_inactive: TS2"):
        preview_assignments(con, "C1", "TS2", 4, today=MONDAY)

    maintain_session_window(connect, today=MONDAY)
    assert {s.time_slot_id for s in list_sessions_for_class(con, "C1")} == {"TS1"}
