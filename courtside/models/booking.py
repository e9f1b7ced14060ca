from sqlalchemy import String, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from courtside.db.session import Base

# Only these statuses hold a court slot
ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_slot_lookup", "club_id", "court_number", "booking_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    club_id: Mapped[str] = mapped_column(String(36), index=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)  # booker

    court_number: Mapped[int] = mapped_column(Integer)
    booking_date: Mapped[str] = mapped_column(String(10))  # YYYY-MM-DD, club-local
    start_time: Mapped[str] = mapped_column(String(5))     # HH:MM
    end_time: Mapped[str] = mapped_column(String(5))       # HH:MM (24:00 = midnight)
    duration: Mapped[int] = mapped_column(Integer)         # minutes

    status: Mapped[str] = mapped_column(String(20), default="pending")        # pending, confirmed, cancelled, failed
    payment_status: Mapped[str] = mapped_column(String(20), default="unpaid")  # unpaid, pending, paid, failed
    booking_type: Mapped[str] = mapped_column(String(20), default="singles")

    player1_id: Mapped[str] = mapped_column(String(36), nullable=True)
    player2_id: Mapped[str] = mapped_column(String(36), nullable=True)
    player3_id: Mapped[str] = mapped_column(String(36), nullable=True)
    player4_id: Mapped[str] = mapped_column(String(36), nullable=True)
    guest_player1_name: Mapped[str] = mapped_column(String(120), nullable=True)
    guest_player2_name: Mapped[str] = mapped_column(String(120), nullable=True)
    guest_player3_name: Mapped[str] = mapped_column(String(120), nullable=True)

    total_amount: Mapped[int] = mapped_column(Integer, default=0)  # ZAR
    payment_id: Mapped[str] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
