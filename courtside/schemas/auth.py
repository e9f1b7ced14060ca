from pydantic import BaseModel
from typing import Optional

class LoginRequest(BaseModel):
    email: str
    password: str

class RegisterRequest(BaseModel):
    # Optional so missing fields come back as a 400 with one message, not a 422
    email: Optional[str] = None
    password: Optional[str] = None
    firstName: Optional[str] = None
    surname: Optional[str] = None
    phone: Optional[str] = None

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
