from decimal import Decimal
from sqlalchemy import String, Numeric, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from courtside.db.session import Base

class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    club_id: Mapped[str] = mapped_column(String(36), index=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    booking_id: Mapped[str] = mapped_column(String(36), index=True, nullable=True)  # null for test payments

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), default="ZAR")
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, processing, completed, failed, cancelled
    provider: Mapped[str] = mapped_column(String(20), default="payfast")

    item_name: Mapped[str] = mapped_column(String(100))
    item_description: Mapped[str] = mapped_column(String(255), nullable=True)
    payer_email: Mapped[str] = mapped_column(String(320))
    payer_name: Mapped[str] = mapped_column(String(200), nullable=True)
    payer_phone: Mapped[str] = mapped_column(String(40), nullable=True)

    payfast_merchant_id: Mapped[str] = mapped_column(String(40), default="")
    payfast_payment_id: Mapped[str] = mapped_column(String(64), nullable=True)  # pf_payment_id or onsite uuid
    payfast_signature: Mapped[str] = mapped_column(String(32), nullable=True)
    payfast_response_json: Mapped[str] = mapped_column(Text, default="{}")

    return_url: Mapped[str] = mapped_column(String(512), nullable=True)
    cancel_url: Mapped[str] = mapped_column(String(512), nullable=True)
    notify_url: Mapped[str] = mapped_column(String(512), nullable=True)

    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    failed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
