from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from courtside.db.session import get_db
from courtside.api.deps import get_club, get_current_user
from courtside.models.club import Club
from courtside.models.user import User
from courtside.models.booking import Booking
from courtside.schemas.booking import BookingCreate, BookingOut
from courtside.services.club_roles import is_club_admin
from courtside.services.booking_service import (
    BookingNotFoundError,
    SlotUnavailableError,
    cancel_booking,
    create_booking,
)

router = APIRouter(tags=["bookings"])


def booking_out(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        clubId=b.club_id,
        userId=b.user_id,
        courtNumber=b.court_number,
        bookingDate=b.booking_date,
        startTime=b.start_time,
        endTime=b.end_time,
        duration=b.duration,
        status=b.status,
        paymentStatus=b.payment_status,
        bookingType=b.booking_type or "singles",
        totalAmount=b.total_amount or 0,
        paymentId=b.payment_id,
    )


@router.post("/clubs/{slug}/bookings", response_model=BookingOut, status_code=201)
def create_club_booking(body: BookingCreate, club: Club = Depends(get_club), db: Session = Depends(get_db),
                        me: User = Depends(get_current_user)):
    try:
        booking = create_booking(
            db, club, me,
            court_number=body.courtNumber,
            booking_date=body.bookingDate,
            start_time=body.startTime,
            duration=body.duration,
            booking_type=body.bookingType,
            player_ids=body.playerIds,
            guest_names=body.guestNames,
        )
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return booking_out(booking)


def _load_booking(db: Session, booking_id: str, me: User) -> Booking:
    b = db.get(Booking, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Booking not found")
    if b.user_id != me.id and not is_club_admin(db, me, b.club_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    return b


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return booking_out(_load_booking(db, booking_id, me))


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel(booking_id: str, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = _load_booking(db, booking_id, me)
    try:
        return booking_out(cancel_booking(db, b, me))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
