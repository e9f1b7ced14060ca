import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from courtside.core.security import decode_token
from courtside.db.session import get_db
from courtside.models.club import Club
from courtside.models.user import User
from courtside.services.club_roles import is_club_admin

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer access token to an active user."""
    if creds is None:
        raise _unauthorized("Not authenticated")
    try:
        claims = decode_token(creds.credentials, expected_type="access")
    except (JWTError, ValueError):
        raise _unauthorized("Invalid token")
    user = db.get(User, claims.get("sub"))
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")
    return user


def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.info("User %s with role %s denied, needs one of %s", user.id, user.role, roles)
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard


def get_club(slug: str, db: Session = Depends(get_db)) -> Club:
    club = db.query(Club).filter(Club.slug == slug).first()
    if club is None or not club.is_active:
        raise HTTPException(status_code=404, detail="Club not found")
    return club


def require_club_admin(
    club: Club = Depends(get_club),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """The current user must administer the club named by ``{slug}`` (super admins administer all clubs)."""
    if not is_club_admin(db, user, club.id):
        logger.info("User %s is not an admin of club %s", user.id, club.slug)
        raise HTTPException(status_code=403, detail="Forbidden")
    return user
