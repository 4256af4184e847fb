from __future__ import annotations

from pathlib import Path
import sys
import pandas as pd

from csv_parse_helpers import (
    hhmm_to_min,
    parse_alternating,
    parse_bool,
    parse_optional_date,
    parse_week_map,
    split_pipe,
)
from models import RECURRENCE_PATTERNS
from session_time import DAY_NAMES

# data definitions
TUTORS_COLUMNS = ["tutor_id", "full_name"]

CLASSES_COLUMNS = ["class_id", "class_name", "is_active"]

TIME_SLOTS_COLUMNS = [
    "slot_id",
    "class_id",
    "day",
    "start_time",
    "end_time",
    "subject",
    "is_active",
]

RULES_COLUMNS = [
    "time_slot_id",
    "pattern",
    "tutors",
    "block_length",
    "weeks",
    "alternating",
    "start_date",
    "end_date",
]


def fail(msg: str) -> None:
    raise ValueError(msg)


def read_csv_or_fail(path: Path) -> pd.DataFrame:
    if not path.exists():
        fail(f"File not found: {path}")
    try:
        return pd.read_csv(path, dtype=str).fillna("")
    except Exception as e:
        fail(f"Could not read CSV '{path}': {e}")


def require_columns(df: pd.DataFrame, required: list[str], name: str) -> None:
    missing = [c for c in required if c not in df.columns]
    extra = [c for c in df.columns if c not in required]
    if missing:
        fail(f"{name}: missing required columns: {missing}")
    if extra:
        # fails if there's unexpected columns
        fail(f"{name}: unexpected extra columns: {extra}")


# checks to see if there's blank or duplicate values
def require_unique_nonempty(df: pd.DataFrame, col: str, name: str) -> None:
    if (df[col].str.strip() == "").any():
        bad = df.index[df[col].str.strip() == ""].tolist()[:10]
        fail(f"{name}: '{col}' contains blank values: {bad}")

    dupes = df[col][df[col].duplicated()].unique().tolist()
    if dupes:
        fail(f"{name}: '{col}' has duplicate values: {dupes}")


def _bad_values(series: pd.Series, parse) -> list[str]:
    def ok(x: str) -> bool:
        try:
            parse(x)
            return True
        except Exception:
            return False

    return series[~series.apply(ok)].unique().tolist()


def validate_tutors(df: pd.DataFrame) -> None:
    require_columns(df, TUTORS_COLUMNS, "tutors")
    require_unique_nonempty(df, "tutor_id", "tutors")


def validate_classes(df: pd.DataFrame) -> None:
    require_columns(df, CLASSES_COLUMNS, "classes")
    require_unique_nonempty(df, "class_id", "classes")

    bad_active = _bad_values(df["is_active"], parse_bool)
    if bad_active:
        fail(f"classes: invalid is_active values: {bad_active}")


# checks that every slot is a well-formed weekly template of a known class
def validate_time_slots(df: pd.DataFrame, classes_df: pd.DataFrame) -> None:
    require_columns(df, TIME_SLOTS_COLUMNS, "time_slots")
    require_unique_nonempty(df, "slot_id", "time_slots")

    bad_day = df.loc[~df["day"].str.strip().isin(DAY_NAMES), "day"].unique().tolist()
    if bad_day:
        fail(f"time_slots: invalid day values: {bad_day} (allowed: {list(DAY_NAMES)})")

    for col in ("start_time", "end_time"):
        bad = _bad_values(df[col], hhmm_to_min)
        if bad:
            fail(f"time_slots: {col} must be HH:MM. Bad values: {bad}")

    start = df["start_time"].apply(hhmm_to_min)
    end = df["end_time"].apply(hhmm_to_min)
    if not (end > start).all():
        bad = df.index[~(end > start)].tolist()
        fail(f"time_slots: end_time must be after start_time (bad row idx): {bad[:10]}")

    bad_active = _bad_values(df["is_active"], parse_bool)
    if bad_active:
        fail(f"time_slots: invalid is_active values: {bad_active}")

    class_ids = set(classes_df["class_id"].tolist())
    bad_ref = df.loc[~df["class_id"].isin(class_ids), "class_id"].unique().tolist()
    if bad_ref:
        fail(f"time_slots: class_id references unknown class_id(s): {bad_ref}")


def validate_rules(
    df: pd.DataFrame, slots_df: pd.DataFrame, tutors_df: pd.DataFrame
) -> None:
    require_columns(df, RULES_COLUMNS, "assignment_rules")
    require_unique_nonempty(df, "time_slot_id", "assignment_rules")

    bad_pattern = (
        df.loc[~df["pattern"].isin(RECURRENCE_PATTERNS), "pattern"].unique().tolist()
    )
    if bad_pattern:
        fail(
            f"assignment_rules: invalid pattern values: {bad_pattern} (allowed: {list(RECURRENCE_PATTERNS)})"
        )

    slot_ids = set(slots_df["slot_id"].tolist())
    bad_slot = df.loc[~df["time_slot_id"].isin(slot_ids), "time_slot_id"].unique().tolist()
    if bad_slot:
        fail(f"assignment_rules: time_slot_id references unknown slot(s): {bad_slot}")

    def is_block_length(x: str) -> bool:
        if not str(x).strip():
            return True
        try:
            return int(x) >= 1
        except Exception:
            return False

    bad_block = df.loc[~df["block_length"].apply(is_block_length), "block_length"]
    if len(bad_block):
        fail(
            f"assignment_rules: block_length must be an int >= 1. Bad values: {bad_block.unique().tolist()}"
        )

    for col, parse in (
        ("weeks", parse_week_map),
        ("alternating", parse_alternating),
        ("start_date", parse_optional_date),
        ("end_date", parse_optional_date),
    ):
        bad = _bad_values(df[col], parse)
        if bad:
            fail(f"assignment_rules: invalid {col} values: {bad}")

    # every tutor named anywhere in a rule must exist
    tutor_ids = set(tutors_df["tutor_id"].tolist())
    unknown: set[str] = set()
    for _, row in df.iterrows():
        named = set(split_pipe(row["tutors"]))
        named |= set(parse_week_map(row["weeks"]).values())
        alt = parse_alternating(row["alternating"])
        if alt:
            named.add(str(alt["tutor"]))
        unknown |= named - tutor_ids
    if unknown:
        fail(f"assignment_rules: unknown tutor_id(s): {sorted(unknown)}")


def main() -> None:
    assets = Path("assets")

    tutors = read_csv_or_fail(assets / "tutors.csv")
    classes = read_csv_or_fail(assets / "classes.csv")
    slots = read_csv_or_fail(assets / "time_slots.csv")
    rules = read_csv_or_fail(assets / "assignment_rules.csv")

    validate_tutors(tutors)
    validate_classes(classes)
    validate_time_slots(slots, classes)
    validate_rules(rules, slots, tutors)

    print("\nCSVs loaded and validated\n")

    print(f"Classes: {len(classes)} rows")
    print(classes.head(5).to_string(index=False))

    print("\n---\n")

    print(f"Time slots: {len(slots)} rows")
    print(slots.head(5).to_string(index=False))

    print("\n---\n")

    print(f"Assignment rules: {len(rules)} rows")
    print(rules.head(5).to_string(index=False))


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"\nVALIDATION ERROR: {e}\n", file=sys.stderr)
        sys.exit(1)
