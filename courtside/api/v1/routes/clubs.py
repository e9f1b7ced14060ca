import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from courtside.db.session import get_db
from courtside.api.deps import get_club, require_club_admin, require_roles
from courtside.models.club import Club
from courtside.models.court import Court, SPORT_TYPES
from courtside.models.user import SUPER_ADMIN, User
from courtside.schemas.club import ClubIn, ClubOut, ClubRoleIn, ClubUpdate, CourtIn, CourtOut
from courtside.services.booking_service import active_bookings_for_slot, parse_booking_date
from courtside.services.audit_service import log_audit
from courtside.services.club_roles import set_user_club_role
from courtside.api.v1.routes.bookings import booking_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clubs"])


def club_out(c: Club) -> ClubOut:
    return ClubOut(
        id=c.id,
        slug=c.slug,
        name=c.name,
        country=c.country or "",
        timezone=c.timezone or "UTC",
        isActive=bool(c.is_active),
        memberRate=c.member_rate or 0,
        visitorRate=c.visitor_rate or 0,
        floodLightsFee=c.flood_lights_fee or 0,
    )


def court_out(c: Court) -> CourtOut:
    return CourtOut(id=c.id, name=c.name, number=c.number, sportType=c.sport_type, isActive=c.is_active)


def _any_club(db: Session, slug: str) -> Club:
    """Club by slug, inactive ones included (super admin views)."""
    club = db.query(Club).filter(Club.slug == slug).first()
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")
    return club


@router.get("/clubs", response_model=list[ClubOut])
def list_clubs(db: Session = Depends(get_db)):
    return [club_out(c) for c in db.query(Club).filter(Club.is_active == True).order_by(Club.name).all()]


@router.post("/clubs", response_model=ClubOut, status_code=201)
def create_club(body: ClubIn, db: Session = Depends(get_db), me: User = Depends(require_roles(SUPER_ADMIN))):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Club name is required")
    if db.query(Club).filter(Club.slug == body.slug).first():
        raise HTTPException(status_code=409, detail="A club with this slug already exists.")
    club = Club(
        id=str(uuid.uuid4()),
        slug=body.slug,
        name=name,
        country=body.country.strip(),
        timezone=body.timezone.strip(),
        is_active=True,
        member_rate=body.memberRate,
        visitor_rate=body.visitorRate,
        flood_lights_fee=body.floodLightsFee,
    )
    db.add(club)
    log_audit(db, actor_user_id=me.id, action="club_created", entity_type="club", entity_id=club.id,
              details={"slug": club.slug})
    db.commit()
    logger.info("Club %s created by %s", club.slug, me.id)
    return club_out(club)


@router.get("/clubs/{slug}", response_model=ClubOut)
def get_club_detail(club: Club = Depends(get_club)):
    return club_out(club)


@router.put("/clubs/{slug}", response_model=ClubOut)
def update_club(slug: str, body: ClubUpdate, db: Session = Depends(get_db),
                me: User = Depends(require_roles(SUPER_ADMIN))):
    club = _any_club(db, slug)
    changes = body.model_dump(exclude_unset=True)
    if "name" in changes:
        if not (body.name or "").strip():
            raise HTTPException(status_code=400, detail="Club name is required")
        club.name = body.name.strip()
    if body.country is not None:
        club.country = body.country.strip()
    if body.timezone is not None:
        club.timezone = body.timezone.strip()
    if body.isActive is not None:
        club.is_active = body.isActive
    if body.memberRate is not None:
        club.member_rate = body.memberRate
    if body.visitorRate is not None:
        club.visitor_rate = body.visitorRate
    if body.floodLightsFee is not None:
        club.flood_lights_fee = body.floodLightsFee
    log_audit(db, actor_user_id=me.id, action="club_updated", entity_type="club", entity_id=club.id, details=changes)
    db.commit()
    return club_out(club)


@router.delete("/clubs/{slug}", response_model=ClubOut)
def deactivate_club(slug: str, db: Session = Depends(get_db), me: User = Depends(require_roles(SUPER_ADMIN))):
    """Soft delete: the club disappears from public listings, its bookings and payments are kept."""
    club = _any_club(db, slug)
    if club.is_active:
        club.is_active = False
        log_audit(db, actor_user_id=me.id, action="club_deactivated", entity_type="club", entity_id=club.id)
        db.commit()
        logger.info("Club %s deactivated by %s", club.slug, me.id)
    return club_out(club)


@router.put("/clubs/{slug}/roles/{user_id}")
def assign_club_role(user_id: str, body: ClubRoleIn, club: Club = Depends(get_club), db: Session = Depends(get_db),
                     me: User = Depends(require_club_admin)):
    if not db.get(User, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    try:
        role = set_user_club_role(db, user_id, club.id, body.role.strip().lower())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    log_audit(db, actor_user_id=me.id, action="club_role_set", entity_type="user", entity_id=user_id,
              details={"club": club.slug, "role": role})
    db.commit()
    return {"userId": user_id, "clubId": club.id, "role": role}


@router.get("/clubs/{slug}/courts", response_model=list[CourtOut])
def list_courts(include_inactive: bool = False, club: Club = Depends(get_club), db: Session = Depends(get_db)):
    q = db.query(Court).filter(Court.club_id == club.id)
    if not include_inactive:
        q = q.filter(Court.is_active == True)
    return [court_out(c) for c in q.order_by(Court.number).all()]


@router.post("/clubs/{slug}/courts", response_model=CourtOut, status_code=201)
def create_court(body: CourtIn, club: Club = Depends(get_club), db: Session = Depends(get_db),
                 me: User = Depends(require_club_admin)):
    sport = body.sportType.strip().upper()
    if sport not in SPORT_TYPES:
        raise HTTPException(status_code=400, detail="invalid sportType")
    if db.query(Court).filter(Court.club_id == club.id, Court.number == body.number).first():
        raise HTTPException(status_code=409, detail="A court with this number already exists for this club.")
    court = Court(id=str(uuid.uuid4()), club_id=club.id, name=body.name.strip(), number=body.number, sport_type=sport, is_active=True)
    db.add(court)
    log_audit(db, actor_user_id=me.id, action="court_created", entity_type="court", entity_id=court.id,
              details={"club": club.slug, "number": body.number})
    db.commit()
    return court_out(court)


@router.get("/clubs/{slug}/bookings")
def list_day_bookings(date: str, court_number: int | None = None, club: Club = Depends(get_club), db: Session = Depends(get_db)):
    """Active bookings for one day, used to render the availability grid."""
    try:
        day = parse_booking_date(date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if court_number is not None:
        courts = [court_number]
    else:
        courts = [c.number for c in db.query(Court).filter(Court.club_id == club.id, Court.is_active == True).order_by(Court.number)]
    return {
        "date": day,
        "bookings": [booking_out(b) for n in courts for b in active_bookings_for_slot(db, club.id, n, day)],
    }
