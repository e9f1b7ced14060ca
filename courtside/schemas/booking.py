from pydantic import BaseModel, Field
from typing import List, Optional

class BookingCreate(BaseModel):
    courtNumber: int = Field(gt=0)
    bookingDate: str  # YYYY-MM-DD
    startTime: str    # HH:MM
    duration: int = Field(gt=0)  # minutes
    bookingType: str = "singles"
    playerIds: List[str] = []
    guestNames: List[str] = []

class BookingOut(BaseModel):
    id: str
    clubId: str
    userId: str
    courtNumber: int
    bookingDate: str
    startTime: str
    endTime: str
    duration: int
    status: str
    paymentStatus: str
    bookingType: str = "singles"
    totalAmount: int = 0
    paymentId: Optional[str] = None
