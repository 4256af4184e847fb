from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
import pandas as pd

from class_repo import upsert_class, upsert_time_slot, upsert_tutor
from csv_parse_helpers import (
    parse_alternating,
    parse_bool,
    parse_optional_date,
    parse_week_map,
    split_pipe,
)
from csv_validator import (
    read_csv_or_fail,
    validate_classes,
    validate_rules,
    validate_time_slots,
    validate_tutors,
)
from models import AssignmentRule, TimeSlot, Tutor
from rule_repo import upsert_rule
from session_time import day_from_name


@dataclass
class SeedFrames:
    tutors: pd.DataFrame
    classes: pd.DataFrame
    time_slots: pd.DataFrame
    rules: pd.DataFrame


def load_validated_frames(assets_dir: Path) -> SeedFrames:
    tutors = read_csv_or_fail(assets_dir / "tutors.csv")
    classes = read_csv_or_fail(assets_dir / "classes.csv")
    slots = read_csv_or_fail(assets_dir / "time_slots.csv")
    rules = read_csv_or_fail(assets_dir / "assignment_rules.csv")

    validate_tutors(tutors)
    validate_classes(classes)
    validate_time_slots(slots, classes)
    validate_rules(rules, slots, tutors)

    return SeedFrames(tutors=tutors, classes=classes, time_slots=slots, rules=rules)


def tutors_from_df(df: pd.DataFrame) -> dict[str, Tutor]:
    return {
        row["tutor_id"].strip(): Tutor(
            tutor_id=row["tutor_id"].strip(), full_name=row["full_name"].strip()
        )
        for _, row in df.iterrows()
    }


def time_slots_from_df(df: pd.DataFrame) -> dict[str, TimeSlot]:
    slots_by_id: dict[str, TimeSlot] = {}

    for _, row in df.iterrows():
        slot_id = row["slot_id"].strip()
        slots_by_id[slot_id] = TimeSlot(
            slot_id=slot_id,
            class_id=row["class_id"].strip(),
            day_of_week=day_from_name(row["day"]),  # "Mon" -> 0
            start_time=row["start_time"].strip(),
            end_time=row["end_time"].strip(),
            subject=row["subject"].strip(),
            is_active=parse_bool(row["is_active"]),
        )

    return slots_by_id


def rule_config_from_row(row) -> dict[str, object]:
    pattern = row["pattern"].strip()
    tutors = split_pipe(row["tutors"])

    if pattern == "ROUND_ROBIN":
        return {"tutors": tutors}
    if pattern == "CONSECUTIVE_DAYS":
        return {"tutors": tutors, "block_length": int(row["block_length"] or "1")}
    if pattern == "WEEKLY":
        config: dict[str, object] = {"weeks": parse_week_map(row["weeks"])}
        alt = parse_alternating(row["alternating"])
        if alt:
            config["alternating"] = alt
        return config
    return {}


def rules_from_df(df: pd.DataFrame) -> dict[str, AssignmentRule]:
    rules_by_slot: dict[str, AssignmentRule] = {}

    for _, row in df.iterrows():
        slot_id = row["time_slot_id"].strip()
        rules_by_slot[slot_id] = AssignmentRule(
            time_slot_id=slot_id,
            pattern=row["pattern"].strip(),  # validator enforces allowed values
            config=rule_config_from_row(row),
            start_date=parse_optional_date(row["start_date"]),
            end_date=parse_optional_date(row["end_date"]),
        )

    return rules_by_slot


def seed_from_frames(con: sqlite3.Connection, frames: SeedFrames) -> dict[str, int]:
    """Upsert everything. IMPORTANT: does NOT commit. Caller decides."""
    tutors = tutors_from_df(frames.tutors)
    for t in tutors.values():
        upsert_tutor(con, t)

    for _, row in frames.classes.iterrows():
        upsert_class(
            con,
            row["class_id"].strip(),
            row["class_name"].strip(),
            parse_bool(row["is_active"]),
        )

    slots = time_slots_from_df(frames.time_slots)
    for s in slots.values():
        upsert_time_slot(con, s)

    rules = rules_from_df(frames.rules)
    for r in rules.values():
        upsert_rule(con, r)

    return {
        "tutors": len(tutors),
        "classes": len(frames.classes),
        "time_slots": len(slots),
        "assignment_rules": len(rules),
    }


def main() -> None:
    frames = load_validated_frames(Path("assets"))

    tutors = tutors_from_df(frames.tutors)
    slots = time_slots_from_df(frames.time_slots)
    rules = rules_from_df(frames.rules)

    print(f"\nLoaded {len(tutors)} tutors into objects\n")
    print(f"Loaded {len(slots)} time slots into objects\n")
    print(f"Loaded {len(rules)} assignment rules into objects\n")

    sample = next(iter(slots.values()))
    print("Sample TimeSlot object:")
    print(sample)

    sample_rule = next(iter(rules.values()))
    print("\nSample AssignmentRule object:")
    print(sample_rule)


if __name__ == "__main__":
    main()
