from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

def _check_time(value: Optional[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    # Stored values may carry seconds ("09:00:00")
    for time_format in ("%H:%M", "%H:%M:%S"):
        try:
            datetime.strptime(value, time_format)
            return value[:5]
        except ValueError:
            continue
    raise ValueError("Invalid time format. Use HH:MM")

class ClosedDateCreate(BaseModel):
    date: str  # Format: "2025-09-05"
    reason: Optional[str] = None
    startTime: Optional[str] = None  # Format: "14:00"; absent means whole day
    endTime: Optional[str] = None
    stylistId: Optional[str] = None  # Absent means the whole salon is closed

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValueError("Invalid date format. Use YYYY-MM-DD")
        return value

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        return _check_time(value)

    @field_validator("stylistId")
    @classmethod
    def blank_stylist_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def check_window(self):
        if self.startTime and self.endTime and self.startTime >= self.endTime:
            raise ValueError("startTime must be before endTime")
        return self

class ClosedDateResponse(BaseModel):
    id: str
    salon_id: str
    date: str
    reason: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    stylist_id: Optional[str] = None
    has_encoded_stylist: bool = Field(False, alias="_hasEncodedStylist")

    class Config:
        populate_by_name = True
