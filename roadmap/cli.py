"""Command-line interface for the roadmap scheduler."""

from __future__ import annotations

import argparse
from datetime import date

from roadmap.config import DEFAULT_CONFIG
from roadmap.domain.db import DEFAULT_DB_URL, get_session, init_database, reset_database
from roadmap.engine.orchestrator import move_block, place_block, recommend_for_initiative, regenerate_schedule
from roadmap.io.config import load_config
from roadmap.io.export_csv import blocks_to_frame, export_blocks_csv, export_risks_csv, summarize_blocks
from roadmap.io.import_csv import (
    import_engineers_csv,
    import_initiatives_csv,
    import_specialties_csv,
    import_unavailability_csv,
)
from roadmap.validator import summarize_risks


def _db_url(args: argparse.Namespace) -> str:
    return args.db or DEFAULT_DB_URL


def _load_config(args: argparse.Namespace):
    return load_config(args.config) if getattr(args, "config", None) else DEFAULT_CONFIG


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database (or drop and recreate it with --reset)."""
    if args.reset:
        reset_database(_db_url(args))
    else:
        init_database(_db_url(args))
    print(f"[OK] Database initialized: {_db_url(args)}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(_db_url(args))

    try:
        # specialties and engineers first so initiative tags resolve by name
        if args.specialties:
            import_specialties_csv(session, args.specialties)
        if args.engineers:
            import_engineers_csv(session, args.engineers)
        if args.initiatives:
            import_initiatives_csv(session, args.initiatives)
        if args.unavailability:
            import_unavailability_csv(session, args.unavailability)

        session.close()
        print("[OK] CSV import complete")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_generate(args: argparse.Namespace) -> None:
    """Regenerate the roadmap schedule."""
    session = get_session(_db_url(args))

    try:
        cfg = _load_config(args)
        result = regenerate_schedule(session, cfg, now=args.now, persist=not args.dry_run, user_id=args.user)

        if args.out:
            export_blocks_csv(session, args.out, blocks=None if not args.dry_run else result.blocks)
        if args.risks_out:
            export_risks_csv(result.risks, args.risks_out)

        for line in summarize_risks(result):
            print(line)

        session.close()
        mode = "dry run" if args.dry_run else "persisted"
        print(f"[OK] Generated {len(result.blocks)} blocks ({mode})")

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Generation failed: {e}")
        raise


def _cmd_recommend(args: argparse.Namespace) -> None:
    """Print ranked engineer recommendations for one initiative."""
    session = get_session(_db_url(args))

    try:
        cfg = _load_config(args)
        recommendations = recommend_for_initiative(session, args.initiative, cfg, now=args.now)
        if not recommendations:
            print("[WARN] No active engineers to recommend")
        for rank, rec in enumerate(recommendations, start=1):
            print(f"{rank}. {rec.engineer_name} ({rec.engineer_id}) score={rec.score:g}")
            for reason in rec.reasons:
                print(f"     - {reason}")
        session.close()

    except Exception as e:
        session.close()
        print(f"[ERROR] Recommendation failed: {e}")
        raise


def _cmd_add_block(args: argparse.Namespace) -> None:
    """Place an initiative on the roadmap by hand."""
    session = get_session(_db_url(args))

    try:
        cfg = _load_config(args)
        place_block(
            session,
            args.initiative,
            args.start,
            end=args.end,
            engineer_id=args.engineer,
            hours_per_day=cfg.hours_per_day,
            user_id=args.user,
        )
        session.close()

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Placement failed: {e}")
        raise


def _cmd_move_block(args: argparse.Namespace) -> None:
    """Move a block, bumping overlapping blocks later."""
    session = get_session(_db_url(args))

    try:
        plan = move_block(session, args.block, args.start, args.end, new_engineer_id=args.engineer, user_id=args.user)
        for update in plan.bumped:
            print(f"[INFO] Bumped {update.block_id} to {update.start_date} - {update.end_date}")
        session.close()

    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Move failed: {e}")
        raise


def _cmd_export(args: argparse.Namespace) -> None:
    """Export stored blocks to CSV."""
    session = get_session(_db_url(args))

    try:
        count = export_blocks_csv(session, args.blocks)
        print(f"[OK] Exported {count} blocks to {args.blocks}")
        session.close()

    except Exception as e:
        session.close()
        print(f"[ERROR] Export failed: {e}")
        raise


def _cmd_summarize(args: argparse.Namespace) -> None:
    """Summarize stored blocks per engineer."""
    session = get_session(_db_url(args))

    try:
        print(summarize_blocks(blocks_to_frame(session)))
        session.close()

    except Exception as e:
        session.close()
        print(f"[ERROR] Summary failed: {e}")
        raise


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="roadmap",
        description="Roadmap scheduling: engineer recommendations and schedule generation",
    )

    # Global options
    parser.add_argument("--db", help=f"Database URL (default: {DEFAULT_DB_URL})")

    sub = parser.add_subparsers(dest="command", required=True)

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop all tables first (deletes all data)")
    init.set_defaults(func=_cmd_init_db)

    # import-csv command
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--specialties", help="Path to specialties CSV")
    imp.add_argument("--engineers", help="Path to engineers CSV")
    imp.add_argument("--initiatives", help="Path to initiatives CSV")
    imp.add_argument("--unavailability", help="Path to unavailability CSV")
    imp.set_defaults(func=_cmd_import_csv)

    # generate command
    gen = sub.add_parser("generate", help="Regenerate the full schedule")
    gen.add_argument("--config", help="Path to config YAML/JSON")
    gen.add_argument("--now", type=date.fromisoformat, help="Reference date (YYYY-MM-DD, default: today)")
    gen.add_argument("--dry-run", action="store_true", help="Do not write blocks to the database")
    gen.add_argument("--out", help="Optional: export blocks to CSV")
    gen.add_argument("--risks-out", help="Optional: export risk flags to CSV")
    gen.add_argument("--user", help="User id recorded in the audit log")
    gen.set_defaults(func=_cmd_generate)

    # recommend command
    rec = sub.add_parser("recommend", help="Rank engineers for an initiative")
    rec.add_argument("--initiative", required=True, help="Initiative ID")
    rec.add_argument("--config", help="Path to config YAML/JSON")
    rec.add_argument("--now", type=date.fromisoformat, help="Reference date (YYYY-MM-DD)")
    rec.set_defaults(func=_cmd_recommend)

    # add-block command
    add = sub.add_parser("add-block", help="Place an initiative on the roadmap")
    add.add_argument("--initiative", required=True, help="Initiative ID")
    add.add_argument("--start", required=True, type=date.fromisoformat, help="Start date (YYYY-MM-DD)")
    add.add_argument("--end", type=date.fromisoformat, help="End date (default: from effort estimate)")
    add.add_argument("--engineer", help="Engineer ID (default: assigned engineer)")
    add.add_argument("--config", help="Path to config YAML/JSON")
    add.add_argument("--user", help="User id recorded in the audit log")
    add.set_defaults(func=_cmd_add_block)

    # move-block command
    mov = sub.add_parser("move-block", help="Move a block, bumping overlapping work")
    mov.add_argument("--block", required=True, help="Scheduled block ID")
    mov.add_argument("--start", required=True, type=date.fromisoformat, help="New start date")
    mov.add_argument("--end", required=True, type=date.fromisoformat, help="New end date")
    mov.add_argument("--engineer", help="Reassign to this engineer ID")
    mov.add_argument("--user", help="User id recorded in the audit log")
    mov.set_defaults(func=_cmd_move_block)

    # export command
    exp = sub.add_parser("export", help="Export scheduled blocks to CSV")
    exp.add_argument("--blocks", required=True, help="Path to blocks CSV")
    exp.set_defaults(func=_cmd_export)

    # summarize command
    summ = sub.add_parser("summarize", help="Summarize scheduled blocks per engineer")
    summ.set_defaults(func=_cmd_summarize)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
