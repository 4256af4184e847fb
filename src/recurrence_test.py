from datetime import date

import pytest

from models import AssignmentRule, TimeSlot
from recurrence import UnknownRecurrencePatternError, resolve

SLOT = TimeSlot("TS1", "C1", 0, "14:00", "16:00", "MAT")
D = date(2026, 10, 19)


def rule(pattern, config=None, **kw):
    return AssignmentRule(time_slot_id="TS1", pattern=pattern, config=config or {}, **kw)


def test_round_robin_cycles_through_candidates():
    r = rule("ROUND_ROBIN", {"tutors": ["A", "B", "C"]})
    got = [resolve(r, SLOT, D, i, 1) for i in range(6)]
    assert got == ["A", "B", "C", "A", "B", "C"]


def test_consecutive_days_blocks_of_two():
    r = rule("CONSECUTIVE_DAYS", {"tutors": ["A", "B"], "block_length": 2})
    got = [resolve(r, SLOT, D, i, 1) for i in range(6)]
    assert got == ["A", "A", "B", "B", "A", "A"]


def test_consecutive_days_block_length_as_string_is_accepted():
    r = rule("CONSECUTIVE_DAYS", {"tutors": ["A", "B"], "block_length": "3"})
    assert [resolve(r, SLOT, D, i, 1) for i in range(4)] == ["A", "A", "A", "B"]


def test_weekly_exact_mapping():
    r = rule("WEEKLY", {"weeks": {"1": "A", "3": "B"}})
    assert resolve(r, SLOT, D, 0, 2) is None
    assert resolve(r, SLOT, D, 0, 3) == "B"
    assert resolve(r, SLOT, D, 0, 1) == "A"


def test_weekly_alternating_after_mapping():
    r = rule("WEEKLY", {"weeks": {"1": "A"}, "alternating": {"tutor": "B", "start_week": 2}})
    got = [resolve(r, SLOT, D, 0, w) for w in range(1, 7)]
    assert got == ["A", "B", None, "B", None, "B"]


def test_manual_never_assigns():
    r = rule("MANUAL", {"tutors": ["A", "B"]})
    assert all(resolve(r, SLOT, D, i, i + 1) is None for i in range(10))


def test_no_rule_is_unassigned():
    assert resolve(None, SLOT, D, 3, 1) is None


@pytest.mark.parametrize(
    "pattern,config",
    [
        ("ROUND_ROBIN", {}),
        ("ROUND_ROBIN", {"tutors": []}),
        ("ROUND_ROBIN", {"tutors": "A|B"}),
        ("CONSECUTIVE_DAYS", {"tutors": [], "block_length": 2}),
        ("CONSECUTIVE_DAYS", {"tutors": ["A"], "block_length": 0}),
        ("CONSECUTIVE_DAYS", {"tutors": ["A"], "block_length": "two"}),
        ("WEEKLY", {"weeks": {"one": "A"}}),
        ("WEEKLY", {"weeks": ["A"]}),
    ],
)
def test_configuration_defects_resolve_to_unassigned(pattern, config):
    assert resolve(rule(pattern, config), SLOT, D, 0, 1) is None


def test_unknown_pattern_fails_loudly():
    with pytest.raises(UnknownRecurrencePatternError) as exc:
        resolve(rule("BIWEEKLY", {"tutors": ["A"]}), SLOT, D, 0, 1)
    assert "BIWEEKLY" in str(exc.value)
    assert exc.value.time_slot_id == "TS1"


def test_unknown_pattern_fails_even_outside_effective_range():
    r = rule("LOTTERY", start_date=date(2030, 1, 1))
    with pytest.raises(UnknownRecurrencePatternError):
        resolve(r, SLOT, D, 0, 1)


def test_effective_date_range_limits_assignment():
    r = rule(
        "ROUND_ROBIN",
        {"tutors": ["A"]},
        start_date=date(2026, 10, 26),
        end_date=date(2026, 11, 9),
    )
    assert resolve(r, SLOT, date(2026, 10, 19), 0, 1) is None
    assert resolve(r, SLOT, date(2026, 10, 26), 0, 1) == "A"
    assert resolve(r, SLOT, date(2026, 11, 9), 2, 3) == "A"
    assert resolve(r, SLOT, date(2026, 11, 16), 3, 4) is None
