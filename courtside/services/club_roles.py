"""Per-club roles.

A user is a ``visitor`` at every club where they have no row, ``member`` or
``club_admin`` where they do. ``super_admin`` is global (``users.role``) and
administers every club.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from courtside.models.user import User
from courtside.models.user_club_role import CLUB_ROLES, UserClubRole

logger = logging.getLogger(__name__)

VISITOR = "visitor"
CLUB_ADMIN = "club_admin"


def get_user_club_role(db: Session, user_id: str, club_id: str) -> str:
    row = db.query(UserClubRole).filter(UserClubRole.user_id == user_id, UserClubRole.club_id == club_id).first()
    return row.role if row else VISITOR


def set_user_club_role(db: Session, user_id: str, club_id: str, role: str) -> str:
    """Upsert the role; ``visitor`` removes the row. Caller commits."""
    if role not in CLUB_ROLES:
        raise ValueError(f"role must be one of {', '.join(CLUB_ROLES)}")
    row = db.query(UserClubRole).filter(UserClubRole.user_id == user_id, UserClubRole.club_id == club_id).first()
    if role == VISITOR:
        if row is not None:
            db.delete(row)
        return VISITOR
    if row is None:
        db.add(UserClubRole(id=str(uuid.uuid4()), user_id=user_id, club_id=club_id, role=role))
    else:
        row.role = role
        row.updated_at = datetime.now(timezone.utc)
    logger.info("User %s is now %s at club %s", user_id, role, club_id)
    return role


def is_club_admin(db: Session, user: User, club_id: str) -> bool:
    if user.is_super_admin:
        return True
    return get_user_club_role(db, user.id, club_id) == CLUB_ADMIN
