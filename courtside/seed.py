"""Idempotent demo data for local and staging databases. Never runs when ENV=production."""
import logging
import uuid

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from courtside.core.config import settings
from courtside.core.security import hash_password
from courtside.db.session import SessionLocal
from courtside.models.club import Club
from courtside.models.court import Court
from courtside.models.user import User
from courtside.services.club_roles import get_user_club_role, set_user_club_role

logger = logging.getLogger(__name__)

# (email, password, role, full name)
DEMO_USERS = [
    ("admin@courtside.local", "admin12345", "super_admin", "Admin"),
    ("member@courtside.local", "member12345", "member", "Demo Member"),
]
DEMO_CLUB = {"slug": "demo-tennis-club", "name": "Demo Tennis Club", "court_count": 4}


def ensure_user(db: Session, email: str, password: str, role: str, name: str) -> User:
    existing = db.query(User).filter(User.email == email).first()
    if existing is not None:
        return existing
    created = User(id=str(uuid.uuid4()), email=email, full_name=name, role=role,
                   password_hash=hash_password(password), is_active=True)
    db.add(created)
    db.commit()
    logger.info("Seeded user %s (%s)", email, role)
    return created


def ensure_club(db: Session, slug: str, name: str, court_count: int = 4, sport_type: str = "TENNIS") -> Club:
    """Create the club if missing and top its courts up to ``court_count`` (numbered from 1)."""
    club = db.query(Club).filter(Club.slug == slug).first()
    if club is None:
        club = Club(id=str(uuid.uuid4()), slug=slug, name=name)
        db.add(club)
        db.flush()
        logger.info("Seeded club %s", slug)
    have = {n for (n,) in db.query(Court.number).filter(Court.club_id == club.id)}
    for number in range(1, court_count + 1):
        if number not in have:
            db.add(Court(id=str(uuid.uuid4()), club_id=club.id, name=f"Court {number}",
                         number=number, sport_type=sport_type))
    db.commit()
    return club


def run(db: Session | None = None) -> None:
    if settings.ENV == "production":
        logger.info("ENV=production, skipping demo seed")
        return
    db = db or SessionLocal()
    try:
        # Seeding must not crash the API on a database that has not been migrated yet
        if not inspect(db.get_bind()).has_table("users"):
            logger.warning("users table not found yet. Skipping seeding (run alembic upgrade head).")
            return
        users = [ensure_user(db, email, password, role, name) for email, password, role, name in DEMO_USERS]
        club = ensure_club(db, **DEMO_CLUB)
        for u in users:
            if not u.is_super_admin and get_user_club_role(db, u.id, club.id) == "visitor":
                set_user_club_role(db, u.id, club.id, "member")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
