import logging
import uuid
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import select
from courtside.models.user import User
from courtside.models.club import Club
from courtside.models.court import Court
from courtside.models.booking import Booking, ACTIVE_BOOKING_STATUSES
from courtside.services.audit_service import log_audit
from courtside.services.club_roles import is_club_admin
from courtside.services.booking_conflicts import InvalidTimeError, Reservation, find_conflict, minutes_to_time

logger = logging.getLogger(__name__)

MAX_MEMBER_PLAYERS = 4
MAX_GUEST_PLAYERS = 3


class BookingNotFoundError(ValueError):
    pass


class SlotUnavailableError(ValueError):
    pass


class BookingDataError(RuntimeError):
    """A stored booking row has unusable times; never treated as a free slot."""


def parse_booking_date(value: str) -> str:
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValueError("bookingDate must be YYYY-MM-DD")


def quote_booking(club: Club, guest_count: int, member_count: int) -> dict:
    visitor_total = guest_count * club.visitor_rate
    member_total = member_count * club.member_rate
    subtotal = visitor_total + member_total
    return {
        "visitorCount": guest_count,
        "memberCount": member_count,
        "visitorRate": club.visitor_rate,
        "memberRate": club.member_rate,
        "visitorTotal": visitor_total,
        "memberTotal": member_total,
        "floodLights": club.flood_lights_fee,
        "subtotal": subtotal,
        "total": subtotal + club.flood_lights_fee,
        "rateType": "Visitor Rate" if guest_count > 0 else "Members Rate",
    }


def active_bookings_for_slot(db: Session, club_id: str, court_number: int, booking_date: str) -> list[Booking]:
    return db.execute(
        select(Booking).where(
            Booking.club_id == club_id,
            Booking.court_number == court_number,
            Booking.booking_date == booking_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        ).order_by(Booking.start_time)
    ).scalars().all()


def create_booking(
    db: Session,
    club: Club,
    booker: User,
    court_number: int,
    booking_date: str,
    start_time: str,
    duration: int,
    booking_type: str = "singles",
    player_ids: list[str] | None = None,
    guest_names: list[str] | None = None,
) -> Booking:
    booking_date = parse_booking_date(booking_date)
    reservation = Reservation(court_number=court_number, booking_date=booking_date, start_time=start_time, duration_minutes=duration)
    end_time = reservation.end_time

    # Row lock on the court serialises check-then-insert for the same court
    court = db.execute(
        select(Court).where(Court.club_id == club.id, Court.number == court_number).with_for_update()
    ).scalar_one_or_none()
    if not court or not court.is_active:
        raise BookingNotFoundError("court not found")

    existing = active_bookings_for_slot(db, club.id, court_number, booking_date)
    try:
        clash = find_conflict(reservation, existing)
    except InvalidTimeError as e:
        logger.error("Malformed booking row club=%s court=%s date=%s: %s", club.slug, court_number, booking_date, e)
        db.rollback()
        raise BookingDataError(str(e)) from e
    if clash is not None:
        logger.info(
            "Slot taken club=%s court=%s date=%s %s+%smin clashes with booking %s (%s-%s)",
            club.slug, court_number, booking_date, start_time, duration, clash.id, clash.start_time, clash.end_time,
        )
        db.rollback()
        raise SlotUnavailableError("This time slot is already booked. Please select a different time.")

    players = [p for p in (player_ids or []) if p and p != "guest"][:MAX_MEMBER_PLAYERS]
    guests = [g.strip() for g in (guest_names or []) if g and g.strip()][:MAX_GUEST_PLAYERS]
    pricing = quote_booking(club, guest_count=len(guests), member_count=len(players))

    booking = Booking(
        id=str(uuid.uuid4()),
        club_id=club.id,
        user_id=booker.id,
        court_number=court_number,
        booking_date=booking_date,
        start_time=minutes_to_time(reservation.start_minutes),
        end_time=end_time,
        duration=duration,
        status="pending",
        payment_status="unpaid",
        booking_type=booking_type or "singles",
        total_amount=pricing["total"],
    )
    for i, pid in enumerate(players, start=1):
        setattr(booking, f"player{i}_id", pid)
    for i, name in enumerate(guests, start=1):
        setattr(booking, f"guest_player{i}_name", name)
    db.add(booking)

    log_audit(db, actor_user_id=booker.id, action="booking_created", entity_type="booking", entity_id=booking.id,
              details={"club": club.slug, "court": court_number, "date": booking_date, "start": booking.start_time, "end": end_time})
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created club=%s court=%s %s %s-%s", booking.id, club.slug, court_number, booking_date, booking.start_time, end_time)
    return booking


def cancel_booking(db: Session, booking: Booking, actor: User) -> Booking:
    if booking.user_id != actor.id and not is_club_admin(db, actor, booking.club_id):
        raise PermissionError("only the booker or a club admin can cancel this booking")
    if booking.status == "cancelled":
        return booking
    booking.status = "cancelled"
    log_audit(db, actor_user_id=actor.id, action="booking_cancelled", entity_type="booking", entity_id=booking.id)
    db.commit()
    db.refresh(booking)
    return booking
