#!/usr/bin/env python
"""Idempotent bootstrap for the maintenance database.

Usage:
    python backend/scripts/init_db.py                # create tables, ensure triage team
    python backend/scripts/init_db.py --dry-run      # run logic then rollback (no DB changes)
    python backend/scripts/init_db.py --show-teams   # print teams and member counts afterwards
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, func

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from gearguard import create_app, get_db  # type: ignore
from gearguard.models.directory import Base, Team, Staff
# Register remaining tables on Base.metadata before create_all
import gearguard.models.equipment  # noqa: F401
import gearguard.models.maintenance_request  # noqa: F401
import gearguard.models.audit  # noqa: F401
from gearguard.services.directory import ensure_triage_team


def print_team_summary(session):
    rows = session.execute(
        select(Team.name, Team.is_triage, func.count(Staff.id))
        .outerjoin(Staff, Staff.team_id == Team.id)
        .group_by(Team.id)
        .order_by(Team.id.asc())
    ).all()
    if not rows:
        print("[INFO] No teams present.")
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Team'.ljust(name_w)} | Triage | Members")
    print('-' * (name_w + 20))
    for name, is_triage, members in rows:
        print(f"{name.ljust(name_w)} | {('yes' if is_triage else 'no').ljust(6)} | {str(members).rjust(7)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Create schema & ensure the triage team exists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  bootstrap: init_db.py\n  dry run: init_db.py --dry-run\n  show teams: init_db.py --show-teams\n""")
    )
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--show-teams', action='store_true', help='Print teams with member counts after bootstrap')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            Base.metadata.create_all(session.get_bind())
            triage = ensure_triage_team(session, app.config['TRIAGE_TEAM_NAME'])
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Triage team would be '{triage.name}'")
            else:
                session.commit()
                print(f"[DONE] Schema ready, triage team '{triage.name}' (id={triage.id})")
            if args.show_teams:
                print('\nTeams:')
                print_team_summary(session)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
