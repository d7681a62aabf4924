"""
Leave policy store - per leave type quota and carry-forward rules
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.leave import LeavePolicy, LeaveType

logger = logging.getLogger(__name__)

# Defaults used when seeding an empty policy table
DEFAULT_POLICIES = (
    {
        "leave_type": LeaveType.PAID,
        "annual_quota": 20,
        "carry_forward_allowed": True,
        "max_carry_forward": 5,
        "requires_documentation": False,
        "description": "Paid annual leave",
    },
    {
        "leave_type": LeaveType.SICK,
        "annual_quota": 10,
        "carry_forward_allowed": False,
        "max_carry_forward": None,
        "requires_documentation": True,
        "description": "Sick leave with medical certificate",
    },
    {
        "leave_type": LeaveType.CASUAL,
        "annual_quota": 10,
        "carry_forward_allowed": True,
        "max_carry_forward": 3,
        "requires_documentation": False,
        "description": "Casual leave for personal matters",
    },
    {
        "leave_type": LeaveType.UNPAID,
        "annual_quota": 30,
        "carry_forward_allowed": False,
        "max_carry_forward": None,
        "requires_documentation": False,
        "description": "Unpaid leave",
    },
    {
        "leave_type": LeaveType.MATERNITY,
        "annual_quota": 180,
        "carry_forward_allowed": False,
        "max_carry_forward": None,
        "requires_documentation": True,
        "description": "Maternity leave",
    },
    {
        "leave_type": LeaveType.PATERNITY,
        "annual_quota": 14,
        "carry_forward_allowed": False,
        "max_carry_forward": None,
        "requires_documentation": False,
        "description": "Paternity leave",
    },
)


def get_policy(db: Session, leave_type: LeaveType) -> Optional[LeavePolicy]:
    return db.query(LeavePolicy).filter(LeavePolicy.leave_type == leave_type).first()


def list_policies(db: Session) -> List[LeavePolicy]:
    return db.query(LeavePolicy).order_by(LeavePolicy.id).all()


def get_policy_map(db: Session) -> Dict[LeaveType, LeavePolicy]:
    return {p.leave_type: p for p in list_policies(db)}


def seed_default_policies(db: Session) -> List[LeavePolicy]:
    """
    Insert the default policy for every leave type that has none.
    Existing rows are left unchanged.

    Returns:
        All policies after seeding
    """
    existing = get_policy_map(db)
    created = 0
    for values in DEFAULT_POLICIES:
        if values["leave_type"] in existing:
            continue
        db.add(LeavePolicy(**values))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %s default leave policies", created)
    return list_policies(db)


def carry_forward_days(policy: LeavePolicy, previous_remaining: int) -> int:
    """Days of last year's remaining balance that roll into the new year."""
    if not policy.carry_forward_allowed or previous_remaining <= 0:
        return 0
    if policy.max_carry_forward is None:
        return previous_remaining
    return min(previous_remaining, policy.max_carry_forward)
