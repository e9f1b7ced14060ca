import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from jose import JWTError
from sqlalchemy.orm import Session

from courtside.api.deps import get_current_user
from courtside.core.security import create_access_token, create_refresh_token, decode_token, hash_password, verify_password
from courtside.db.session import get_db
from courtside.models.user import User
from courtside.schemas.auth import LoginRequest, RegisterRequest, TokenPair
from courtside.services.audit_service import log_audit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_tokens(user: User) -> TokenPair:
    return TokenPair(access_token=create_access_token(user.id), refresh_token=create_refresh_token(user.id))


@router.post("/register", status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    email = (body.email or "").strip().lower()
    first_name = (body.firstName or "").strip()
    if not email or not body.password or not first_name:
        raise HTTPException(status_code=400, detail="Missing required fields: email, password, and firstName are required")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="User already exists")

    full_name = " ".join(p for p in (first_name, (body.surname or "").strip()) if p)
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=full_name,
        phone=(body.phone or "").strip(),
        role="member",
        password_hash=hash_password(body.password),
        is_active=True,
    )
    db.add(user)
    log_audit(db, actor_user_id=user.id, action="user_registered", entity_type="user", entity_id=user.id)
    db.commit()
    logger.info("Registered user %s", user.id)
    return {"success": True, "user": {"id": user.id, "email": user.email, "fullName": user.full_name}}


@router.post("/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None or not user.is_active or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenPair)
def refresh(refresh_token: str, db: Session = Depends(get_db)):
    """Trade a refresh token for a new access/refresh pair."""
    try:
        claims = decode_token(refresh_token, expected_type="refresh")
    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = db.get(User, claims.get("sub"))
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return _issue_tokens(user)


@router.get("/me")
def me(current: User = Depends(get_current_user)):
    return {
        "id": current.id,
        "email": current.email,
        "fullName": current.full_name or "",
        "phone": current.phone or "",
        "role": current.role,
    }
