from decimal import Decimal
from typing import Annotated, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Decimal in, JSON number out
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

PaymentMethod = Literal["cash", "card", "upi", "bank_transfer"]
PaymentStatus = Literal["pending", "partial", "paid"]
RecordStatus = Literal["active", "inactive"]


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    count: Optional[int] = None
    message: Optional[str] = None


class MessageOut(BaseModel):
    success: bool = True
    message: str
