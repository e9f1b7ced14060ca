from sqlalchemy import String, Integer, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from courtside.db.session import Base

SPORT_TYPES = (
    "TENNIS",
    "PICKLEBALL",
    "PADEL",
    "TABLE_TENNIS",
    "SQUASH",
    "BADMINTON",
    "BEACH_TENNIS",
    "RACQUETBALL",
    "REAL_TENNIS",
)

class Court(Base):
    __tablename__ = "courts"
    __table_args__ = (
        UniqueConstraint("club_id", "number", name="uq_court_club_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    club_id: Mapped[str] = mapped_column(String(36), index=True)
    name: Mapped[str] = mapped_column(String(120))
    number: Mapped[int] = mapped_column(Integer)
    sport_type: Mapped[str] = mapped_column(String(20), default="TENNIS")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
