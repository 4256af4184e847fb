from pathlib import Path

from csv_loader import load_validated_frames, seed_from_frames
from db import get_con, init_db
from maintenance import get_maintenance_stats, maintain_session_window
from preview_service import preview_assignments
from sample_output import format_maintenance_run, format_preview, format_stats
from session_repo import get_session, list_sessions_for_class
from time_fmt import fmt_local_range

SMOKE_DB = Path("smoke_state.db")


def main():
    if SMOKE_DB.exists():
        SMOKE_DB.unlink()

    con = get_con(SMOKE_DB)
    init_db(con)
    counts = seed_from_frames(con, load_validated_frames(Path("assets")))
    con.commit()
    print("Seeded:", counts)

    target_class_id, target_slot_id = "Y10-MAT-A", "TS-Y10A-MON"
    print(format_preview(target_class_id, target_slot_id,
                         preview_assignments(con, target_class_id, target_slot_id, 4)))
    print()

    def connect():
        return get_con(SMOKE_DB)

    run1 = maintain_session_window(connect)
    print(format_maintenance_run(run1))
    print()

    # second run should generate nothing
    run2 = maintain_session_window(connect)
    print("Second run generated (should be 0):", run2.sessions_generated)
    print()

    print(f"Sessions for {target_class_id}:")
    for s in list_sessions_for_class(con, target_class_id):
        print(f"  {s.session_id} {s.time_slot_id:<12} {fmt_local_range(s.start_at, s.end_at)}  {s.tutor_id or '-'}")

    first = list_sessions_for_class(con, target_class_id)[0]
    print("Round trip by id:", get_session(con, first.session_id) == first)
    print()

    print(format_stats(get_maintenance_stats(con)))
    con.close()


if __name__ == "__main__":
    main()
