"""Check-in log models"""
from typing import Optional
from pydantic import BaseModel, ConfigDict


class GeoLocation(BaseModel):
    """Where a check-in happened"""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class CheckInRecord(BaseModel):
    """Immutable entry in the append-only check-in log"""
    model_config = ConfigDict(frozen=True)

    id: str
    habit_id: str
    user_id: str
    timestamp: int  # ms epoch
    date_string: str  # YYYY-MM-DD
    note: Optional[str] = None
    location: Optional[GeoLocation] = None
