# File: parkit/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Park-It Parking System

DTOs carry the outcome of the entry and exit use cases from the application
service to the presentation layer.

DTO Principles:
- Validation at creation
- No business logic, only data
- Serialization support
"""

from typing import Dict, Optional, Any
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data


class OperationStatus(str, Enum):
    """Outcome of an entry or exit transition"""
    SUCCESS = "success"
    INVALID_VEHICLE_TYPE = "invalid_vehicle_type"
    INVALID_REGISTRATION = "invalid_registration"
    PARKING_FULL = "parking_full"
    TICKET_NOT_FOUND = "ticket_not_found"
    ERROR = "error"


# ============================================================================
# PARKING OPERATION DTOs
# ============================================================================

class ParkingAllocationDTO(BaseDTO):
    """DTO for vehicle entry result"""
    success: bool = Field(description="Entry success")
    status: OperationStatus = Field(description="Outcome of the entry")
    vehicle_reg_number: Optional[str] = Field(default=None, description="Registration number")
    spot_number: Optional[int] = Field(default=None, description="Allocated spot number")
    vehicle_type: Optional[str] = Field(default=None, description="Vehicle type")
    in_time: Optional[datetime] = Field(default=None, description="Recorded entry time")
    recurring_user: bool = Field(default=False, description="Vehicle has completed a previous visit")
    message: Optional[str] = Field(default=None, description="Result message")


class ParkingExitDTO(BaseDTO):
    """DTO for vehicle exit result"""
    success: bool = Field(description="Exit success")
    status: OperationStatus = Field(description="Outcome of the exit")
    vehicle_reg_number: Optional[str] = Field(default=None, description="Registration number")
    spot_number: Optional[int] = Field(default=None, description="Released spot number")
    in_time: Optional[datetime] = Field(default=None, description="Recorded entry time")
    out_time: Optional[datetime] = Field(default=None, description="Recorded exit time")
    duration_minutes: Optional[int] = Field(default=None, ge=0, description="Billable minutes")
    total_fee: Optional[Decimal] = Field(default=None, ge=0, description="Fare owed")
    recurring_user: bool = Field(default=False, description="Recurring discount applied")
    message: Optional[str] = Field(default=None, description="Result message")
