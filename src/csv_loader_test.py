from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from class_repo import get_class, list_active_classes, tutor_names
from csv_loader import load_validated_frames, rule_config_from_row, seed_from_frames
from csv_parse_helpers import hhmm_to_min, parse_alternating, parse_bool, parse_week_map, split_pipe
from csv_validator import validate_rules, validate_time_slots
from rule_repo import get_rule_for_slot

ASSETS = Path(__file__).resolve().parent.parent / "assets"


def test_seed_from_bundled_assets(con):
    frames = load_validated_frames(ASSETS)
    counts = seed_from_frames(con, frames)
    con.commit()

    assert counts == {"tutors": 4, "classes": 4, "time_slots": 5, "assignment_rules": 4}
    assert tutor_names(con)["T001"] == "Amelia Chen"

    # the archived class is stored but not active
    assert [c.class_id for c in list_active_classes(con)] == [
        "Y10-MAT-A",
        "Y11-MADV-B",
        "Y12-MX1-C",
    ]
    y10 = get_class(con, "Y10-MAT-A")
    assert [(s.slot_id, s.day_of_week) for s in y10.time_slots] == [
        ("TS-Y10A-MON", 0),
        ("TS-Y10A-THU", 3),
    ]

    weekly = get_rule_for_slot(con, "TS-Y11B-WED")
    assert weekly.pattern == "WEEKLY"
    assert weekly.config == {
        "weeks": {"1": "T003", "3": "T004"},
        "alternating": {"tutor": "T001", "start_week": 2},
    }
    assert get_rule_for_slot(con, "TS-Y10A-THU").config == {
        "tutors": ["T002", "T004"],
        "block_length": 2,
    }


def test_seeding_twice_upserts(con):
    frames = load_validated_frames(ASSETS)
    seed_from_frames(con, frames)
    seed_from_frames(con, frames)
    con.commit()

    assert len(tutor_names(con)) == 4
    assert len(list_active_classes(con)) == 3


def test_missing_file_fails(tmp_path):
    with pytest.raises(ValueError, match="File not found"):
        load_validated_frames(tmp_path)


def slots_df(**overrides) -> pd.DataFrame:
    row = {
        "slot_id": "TS1",
        "class_id": "C1",
        "day": "Mon",
        "start_time": "14:00",
        "end_time": "16:00",
        "subject": "MAT",
        "is_active": "1",
    }
    row.update(overrides)
    return pd.DataFrame([row])


CLASSES = pd.DataFrame([{"class_id": "C1", "class_name": "Class 1", "is_active": "1"}])
TUTORS = pd.DataFrame([{"tutor_id": "T001", "full_name": "Amelia Chen"}])


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"day": "Funday"}, "invalid day values"),
        ({"start_time": "9am"}, "start_time must be HH:MM"),
        ({"end_time": "13:00"}, "end_time must be after start_time"),
        ({"class_id": "C9"}, "unknown class_id"),
        ({"is_active": "maybe"}, "invalid is_active"),
    ],
)
def test_time_slot_validation(overrides, message):
    with pytest.raises(ValueError, match=message):
        validate_time_slots(slots_df(**overrides), CLASSES)


def rules_df(**overrides) -> pd.DataFrame:
    row = {
        "time_slot_id": "TS1",
        "pattern": "ROUND_ROBIN",
        "tutors": "T001",
        "block_length": "",
        "weeks": "",
        "alternating": "",
        "start_date": "",
        "end_date": "",
    }
    row.update(overrides)
    return pd.DataFrame([row])


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"pattern": "FORTNIGHTLY"}, "invalid pattern values"),
        ({"time_slot_id": "TS9"}, "unknown slot"),
        ({"block_length": "0"}, "block_length must be an int"),
        ({"weeks": "0:T001"}, "invalid weeks values"),
        ({"start_date": "next week"}, "invalid start_date values"),
        ({"tutors": "T001|T999"}, "unknown tutor_id"),
        ({"pattern": "WEEKLY", "tutors": "", "alternating": "T404:1"}, "unknown tutor_id"),
    ],
)
def test_rule_validation(overrides, message):
    with pytest.raises(ValueError, match=message):
        validate_rules(rules_df(**overrides), slots_df(), TUTORS)


def test_rule_config_per_pattern():
    row = rules_df(pattern="CONSECUTIVE_DAYS", tutors="A|B", block_length="").iloc[0]
    assert rule_config_from_row(row) == {"tutors": ["A", "B"], "block_length": 1}

    row = rules_df(pattern="WEEKLY", tutors="", weeks="2:A").iloc[0]
    assert rule_config_from_row(row) == {"weeks": {"2": "A"}}

    row = rules_df(pattern="MANUAL", tutors="").iloc[0]
    assert rule_config_from_row(row) == {}


def test_parse_helpers():
    assert split_pipe(" A | |B ") == ["A", "B"]
    assert hhmm_to_min("16:30") == 990
    with pytest.raises(ValueError):
        hhmm_to_min("24:00")
    assert parse_bool("") is True
    assert parse_bool("no") is False
    assert parse_week_map("1:T001|3:T002") == {"1": "T001", "3": "T002"}
    assert parse_alternating("T001") == {"tutor": "T001", "start_week": 1}
    assert parse_alternating("") is None


def test_effective_dates_are_parsed(con):
    frames = load_validated_frames(ASSETS)
    frames.rules.loc[0, "start_date"] = "2026-10-19"
    seed_from_frames(con, frames)
    con.commit()

    assert get_rule_for_slot(con, "TS-Y10A-MON").start_date == date(2026, 10, 19)
