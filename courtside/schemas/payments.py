from pydantic import BaseModel
from typing import Optional, Union

class PayFastInitiateRequest(BaseModel):
    # Required fields are checked in the route so the error lists all of them at once
    bookingId: Optional[str] = None  # omitted for test payments
    clubId: Optional[str] = None
    userId: Optional[str] = None
    amount: Optional[Union[str, float]] = None
    itemName: Optional[str] = None
    itemDescription: Optional[str] = None
    userEmail: Optional[str] = None
    userName: Optional[str] = None
    userPhone: Optional[str] = None
    slug: Optional[str] = None

class PayFastInitiateResponse(BaseModel):
    success: bool = True
    paymentId: str
    paymentFormUrl: str
    embedded: bool = True
    onsite: bool = False
    onsiteUuid: Optional[str] = None
    onsitePaymentUrl: Optional[str] = None
    warning: Optional[str] = None
