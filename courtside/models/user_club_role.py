from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from courtside.db.session import Base

# "visitor" is never stored: no row for (user, club) means visitor
CLUB_ROLES = ("visitor", "member", "club_admin")


class UserClubRole(Base):
    """A user's role at one club. Global super admins need no rows here."""
    __tablename__ = "user_club_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="uq_user_club_role"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    club_id: Mapped[str] = mapped_column(String(36), index=True)
    role: Mapped[str] = mapped_column(String(20))  # member, club_admin
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
