"""Pydantic models for API request/response validation"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from habitplanet.models import CheckInRecord


class CreateUserRequest(BaseModel):
    """Request to create a user"""
    user_id: str = Field(..., min_length=1, description="User identifier")
    name: str = Field(default="Traveler", min_length=1, description="Display name")
    starter_habits: bool = Field(
        default=False,
        description="Seed the account with the starter habits"
    )


class CheckInRequest(BaseModel):
    """Optional check-in details"""
    note: Optional[str] = Field(default=None, description="Free-text note")
    lat: Optional[float] = Field(default=None, description="Latitude, paired with lng")
    lng: Optional[float] = Field(default=None, description="Longitude, paired with lat")


class StatsResponse(BaseModel):
    """Check-in history for the stats screen"""
    user_id: str
    total_check_ins: int
    check_ins: List[CheckInRecord]


class AdviceResponse(BaseModel):
    """Coaching advice for the user's habits"""
    user_id: str
    advice: str


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    storage: str = Field(..., description="Storage backend status")
    content_generation: str = Field(..., description="Advice/card-art generator status")
    timestamp: datetime = Field(..., description="Check timestamp")

