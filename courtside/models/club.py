from sqlalchemy import String, Integer, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from courtside.db.session import Base

class Club(Base):
    __tablename__ = "clubs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    country: Mapped[str] = mapped_column(String(80), default="South Africa")
    timezone: Mapped[str] = mapped_column(String(64), default="Africa/Johannesburg")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Court fees in whole rands
    member_rate: Mapped[int] = mapped_column(Integer, default=60)
    visitor_rate: Mapped[int] = mapped_column(Integer, default=400)
    flood_lights_fee: Mapped[int] = mapped_column(Integer, default=50)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
