from __future__ import annotations

from datetime import date

import pytest

from class_repo import upsert_class, upsert_time_slot, upsert_tutor
from db import get_con, init_db
from models import AssignmentRule, TimeSlot, Tutor
from rule_repo import upsert_rule

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "state.db"


@pytest.fixture
def connect(db_path):
    con = get_con(db_path)
    init_db(con)
    con.close()

    def _connect():
        return get_con(db_path)

    return _connect


@pytest.fixture
def con(connect):
    c = connect()
    yield c
    c.close()


def add_class(con, class_id: str, *slots: TimeSlot, name: str | None = None, active: bool = True):
    upsert_class(con, class_id, name or class_id, active)
    for s in slots:
        upsert_time_slot(con, s)
    con.commit()


def slot(slot_id: str, class_id: str, day: int = 0, start: str = "14:00", end: str = "16:00", **kw) -> TimeSlot:
    return TimeSlot(
        slot_id=slot_id,
        class_id=class_id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        subject=kw.pop("subject", "MAT"),
        **kw,
    )


def add_rule(con, slot_id: str, pattern: str, config: dict | None = None, **kw) -> AssignmentRule:
    rule = AssignmentRule(
        time_slot_id=slot_id,
        pattern=pattern,
        config=config or {},
        created_on=kw.pop("created_on", MONDAY),
        **kw,
    )
    upsert_rule(con, rule)
    con.commit()
    return rule


def add_tutors(con, *ids: str) -> None:
    for tid in ids:
        upsert_tutor(con, Tutor(tutor_id=tid, full_name=f"Tutor {tid}"))
    con.commit()
