# File: parkit/domain/models.py
"""
Domain Models for the Park-It Parking System

This module contains:
1. Domain exceptions: Invalid input raised by value objects and fare rules
2. Enums: The closed set of vehicle types handled by the facility
3. Value Objects: Immutable objects with no identity, only values
4. Entities: Parking spots and tickets with their lifecycle rules

All models validate their own invariants.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum


# ============================================================================
# DOMAIN EXCEPTIONS
# ============================================================================

class InvalidInputError(ValueError):
    """Raised when a timestamp, selection or registration number is unusable"""
    pass


class UnsupportedVehicleTypeError(InvalidInputError):
    """Raised when a vehicle type has no parking rate"""
    pass


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class VehicleType(Enum):
    """
    Enumeration of vehicle types accepted by the facility
    Each type has its own spots and its own hourly rate
    """
    CAR = "CAR"
    BIKE = "BIKE"

    @classmethod
    def from_selection(cls, selection: int) -> 'VehicleType':
        """Map a console menu selection (1 CAR, 2 BIKE) to a vehicle type"""
        selections = {
            1: cls.CAR,
            2: cls.BIKE,
        }
        try:
            return selections[selection]
        except KeyError:
            raise InvalidInputError(f"Entered input is invalid: {selection}") from None

    def __str__(self) -> str:
        return self.value


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)  # Value objects are immutable
class TimeRange:
    """
    Value Object: Time range between a vehicle's entry and exit
    A zero-length range is valid; an inverted one is not
    """
    start_time: Optional[datetime]
    end_time: Optional[datetime]

    def __post_init__(self):
        """Validate time range"""
        if self.start_time is None:
            raise InvalidInputError("In time provided is incorrect: None")

        if self.end_time is None or self.end_time < self.start_time:
            raise InvalidInputError(f"Out time provided is incorrect: {self.end_time}")

    @property
    def duration(self) -> timedelta:
        """Calculate duration of time range"""
        return self.end_time - self.start_time

    @property
    def duration_minutes(self) -> int:
        """Whole elapsed minutes; the sub-minute remainder is dropped"""
        return int(self.duration.total_seconds() // 60)

    @property
    def duration_hours(self) -> Decimal:
        """Elapsed whole minutes expressed as fractional hours"""
        return Decimal(self.duration_minutes) / Decimal(60)

    def __str__(self) -> str:
        start_str = self.start_time.strftime("%Y-%m-%d %H:%M")
        end_str = self.end_time.strftime("%Y-%m-%d %H:%M")
        return f"{start_str} to {end_str} ({self.duration_minutes} minutes)"


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

@dataclass
class ParkingSpot:
    """
    Entity: A numbered parking spot for one vehicle type

    Spots compare by value so that a ticket can carry its own copy of the
    spot it was issued for.
    """
    number: int
    vehicle_type: VehicleType
    available: bool = True

    def __post_init__(self):
        if not isinstance(self.number, int) or self.number <= 0:
            raise ValueError(f"Parking spot number must be a positive integer, got: {self.number}")

        if not isinstance(self.vehicle_type, VehicleType):
            raise UnsupportedVehicleTypeError(f"Unknown parking type: {self.vehicle_type}")

    def occupy(self) -> None:
        self.available = False

    def release(self) -> None:
        self.available = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "number": self.number,
            "vehicle_type": self.vehicle_type.value,
            "available": self.available
        }

    def __str__(self) -> str:
        state = "available" if self.available else "occupied"
        return f"Spot {self.number} ({self.vehicle_type}, {state})"


@dataclass
class Ticket:
    """
    Entity: The record of one parking visit

    A ticket is opened at entry with a zero price and no out time, and is
    closed exactly once at exit. Tickets are kept after exit; they form the
    history used to recognise recurring users.
    """
    parking_spot: ParkingSpot
    vehicle_reg_number: str
    in_time: datetime
    out_time: Optional[datetime] = None
    price: Decimal = field(default_factory=lambda: Decimal("0.00"))
    id: Optional[int] = None

    def __post_init__(self):
        if not self.vehicle_reg_number or not self.vehicle_reg_number.strip():
            raise InvalidInputError("Vehicle registration number cannot be empty")

        if self.in_time is None:
            raise InvalidInputError("Ticket in time is required")

        # Spot is held by value, never shared with the caller
        self.parking_spot = replace(self.parking_spot)
        self.price = Decimal(str(self.price))
        self._validate()

    def _validate(self) -> None:
        if self.out_time is not None and self.out_time < self.in_time:
            raise InvalidInputError(
                f"Out time {self.out_time} precedes in time {self.in_time}"
            )

        if self.price < Decimal("0"):
            raise ValueError("Ticket price cannot be negative")

    @property
    def is_open(self) -> bool:
        """A ticket without out time belongs to a vehicle still parked"""
        return self.out_time is None

    def close(self, out_time: datetime, price: Decimal) -> None:
        """Record the exit time and the fare owed"""
        if not self.is_open:
            raise InvalidInputError(f"Ticket {self.id} is already closed")

        if out_time is None:
            raise InvalidInputError("Out time provided is incorrect: None")

        previous = (self.out_time, self.price)
        self.out_time = out_time
        self.price = Decimal(str(price))
        try:
            self._validate()
        except ValueError:
            self.out_time, self.price = previous
            raise

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "parking_spot": self.parking_spot.to_dict(),
            "vehicle_reg_number": self.vehicle_reg_number,
            "in_time": self.in_time.isoformat(),
            "out_time": self.out_time.isoformat() if self.out_time else None,
            "price": str(self.price)
        }

    def __str__(self) -> str:
        return f"Ticket {self.id} [{self.vehicle_reg_number}] spot {self.parking_spot.number}"
