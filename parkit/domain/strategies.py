# File: parkit/domain/strategies.py
"""
Strategy Pattern Implementation for Fare Calculation

This module encapsulates the pricing rule of the facility behind a
PricingStrategy interface, and exposes FareCalculator as the single entry
point the application layer uses to price a visit.

Fare rule:
1. Duration is measured in whole minutes and converted to fractional hours
2. Visits shorter than the free period (30 minutes) cost nothing
3. Longer visits cost duration x hourly rate of the vehicle type
4. Recurring users receive a percentage discount
5. The result is rounded half-up to two decimal places
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
import logging

from .models import (
    Ticket, TimeRange, VehicleType,
    InvalidInputError, UnsupportedVehicleTypeError
)


CENTS = Decimal("0.01")


# ============================================================================
# FARE SETTINGS
# ============================================================================

@dataclass(frozen=True)
class FareSettings:
    """Rates and discount parameters used by the pricing strategies"""
    rates_per_hour: Dict[VehicleType, Decimal] = field(default_factory=lambda: {
        VehicleType.CAR: Decimal("1.5"),
        VehicleType.BIKE: Decimal("1.0"),
    })
    free_minutes: int = 30
    recurring_discount_percent: Decimal = Decimal("5")

    def __post_init__(self):
        if self.free_minutes < 0:
            raise ValueError("Free period cannot be negative")

        for vehicle_type, rate in self.rates_per_hour.items():
            if Decimal(str(rate)) < Decimal("0"):
                raise ValueError(f"Rate for {vehicle_type} cannot be negative")

        discount = Decimal(str(self.recurring_discount_percent))
        if not Decimal("0") <= discount <= Decimal("100"):
            raise ValueError(f"Discount must be between 0 and 100 percent: {discount}")

    def rate_for(self, vehicle_type: VehicleType) -> Decimal:
        if not isinstance(vehicle_type, VehicleType) or vehicle_type not in self.rates_per_hour:
            raise UnsupportedVehicleTypeError(f"Unknown parking type: {vehicle_type}")
        return Decimal(str(self.rates_per_hour[vehicle_type]))


# ============================================================================
# STRATEGY INTERFACES
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self, settings: Optional[FareSettings] = None):
        self.settings = settings or FareSettings()
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_parking_fee(
        self,
        time_range: TimeRange,
        vehicle_type: VehicleType,
        is_recurring: bool = False
    ) -> Decimal:
        """
        Calculate parking fee for a visit
        Returns: Unrounded fee
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Strategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class HourlyPricingStrategy(PricingStrategy):
    """
    Strategy: Per-minute billing at an hourly rate
    - Free below the configured free period
    - Linear price above it
    - Percentage discount for recurring users
    """

    def calculate_parking_fee(
        self,
        time_range: TimeRange,
        vehicle_type: VehicleType,
        is_recurring: bool = False
    ) -> Decimal:
        rate = self.settings.rate_for(vehicle_type)

        if time_range.duration_minutes < self.settings.free_minutes:
            self.logger.debug(f"{time_range.duration_minutes} minutes is within the free period")
            return Decimal("0")

        price = time_range.duration_hours * rate

        if is_recurring:
            discount = Decimal(str(self.settings.recurring_discount_percent)) / Decimal(100)
            price -= price * discount

        return price


# ============================================================================
# FARE CALCULATOR
# ============================================================================

class FareCalculator:
    """
    Computes the amount owed for a parking visit

    The calculator validates its inputs, delegates the pricing rule to a
    PricingStrategy and rounds the outcome to cents.
    """

    def __init__(self, strategy: Optional[PricingStrategy] = None):
        self.strategy = strategy or HourlyPricingStrategy()
        self.logger = logging.getLogger(self.__class__.__name__)

    def compute_fare(
        self,
        in_time: Optional[datetime],
        out_time: Optional[datetime],
        vehicle_type: VehicleType,
        is_recurring: bool = False
    ) -> Decimal:
        """
        Compute the fare for a visit

        Raises:
            InvalidInputError: a time is missing or out_time precedes in_time
            UnsupportedVehicleTypeError: vehicle_type has no rate
        """
        time_range = TimeRange(in_time, out_time)
        price = self.strategy.calculate_parking_fee(time_range, vehicle_type, is_recurring)
        price = max(price, Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)

        self.logger.debug(
            f"Fare for {vehicle_type} over {time_range.duration_minutes} minutes "
            f"(recurring={is_recurring}): {price}"
        )
        return price

    def calculate_fare(self, ticket: Ticket, is_recurring: bool = False) -> Decimal:
        """Price a ticket from its own times and spot type and store the price on it"""
        if ticket is None:
            raise InvalidInputError("Ticket is required")

        price = self.compute_fare(
            ticket.in_time,
            ticket.out_time,
            ticket.parking_spot.vehicle_type,
            is_recurring
        )
        ticket.price = price
        return price
