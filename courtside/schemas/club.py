from pydantic import BaseModel, Field
from typing import Optional

class ClubOut(BaseModel):
    id: str
    slug: str
    name: str
    country: str = ""
    timezone: str = "UTC"
    isActive: bool = True
    memberRate: int = 0
    visitorRate: int = 0
    floodLightsFee: int = 0

class ClubIn(BaseModel):
    slug: str = Field(pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$", max_length=120)
    name: str
    country: str = "South Africa"
    timezone: str = "Africa/Johannesburg"
    memberRate: int = Field(default=60, ge=0)
    visitorRate: int = Field(default=400, ge=0)
    floodLightsFee: int = Field(default=50, ge=0)

class ClubUpdate(BaseModel):
    # Omitted fields are left unchanged; name, when sent, must not be blank
    name: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    isActive: Optional[bool] = None
    memberRate: Optional[int] = Field(default=None, ge=0)
    visitorRate: Optional[int] = Field(default=None, ge=0)
    floodLightsFee: Optional[int] = Field(default=None, ge=0)

class ClubRoleIn(BaseModel):
    role: str  # visitor, member, club_admin

class CourtIn(BaseModel):
    name: str
    number: int = Field(gt=0)
    sportType: str = "TENNIS"

class CourtOut(BaseModel):
    id: str
    name: str
    number: int
    sportType: str
    isActive: bool = True
