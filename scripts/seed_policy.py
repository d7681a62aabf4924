"""
Seed default leave policies (PAID=20, SICK=10, CASUAL=10, UNPAID=30,
MATERNITY=180, PATERNITY=14) and provision balances for the given year(s).
Existing policies and balance rows are left unchanged. Run from the repo root
with .env loaded.

Usage:
  python scripts/seed_policy.py              # seeds the current year
  python scripts/seed_policy.py 2026 2027   # seeds 2026 and 2027
"""
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.services.policy_service import list_policies


def main():
    setup_logging()
    years = [date.today().year]
    if len(sys.argv) > 1:
        years = [int(y) for y in sys.argv[1:]]

    db = SessionLocal()
    try:
        created = init_db(db, years)
        for policy in list_policies(db):
            print(f"{policy.leave_type.value}: quota={policy.annual_quota}, carry_forward={policy.max_carry_forward or 0}")
        print(f"Balance rows created for {', '.join(str(y) for y in sorted(years))}: {created}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
