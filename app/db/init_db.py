"""
Database initialization helper
Seeds leave policies and provisions balances; never creates users.
"""
import logging
from typing import Iterable
from sqlalchemy.orm import Session
from app.services.leave_balance_service import provision_balances
from app.services.policy_service import seed_default_policies

logger = logging.getLogger(__name__)


def init_db(db: Session, years: Iterable[int]) -> int:
    """
    Seed default leave policies and provision balances for ``years``.

    This is a helper function and should NOT be auto-run on startup.

    Returns:
        Number of balance rows created
    """
    policies = seed_default_policies(db)
    created = 0
    for year in sorted(set(years)):
        created += len(provision_balances(db, year))
    logger.info("init_db: %s policies, %s balance rows created", len(policies), created)
    return created
