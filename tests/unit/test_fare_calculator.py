#!/usr/bin/env python3
"""
Unit Tests for fare calculation

Covers the grace period, the linear hourly price, the recurring discount,
rounding and the rejection of unusable timestamps.
"""

import unittest
import sys
from pathlib import Path
from datetime import datetime, timedelta
from decimal import Decimal

sys.path.append(str(Path(__file__).parent.parent.parent))

from parkit.domain.models import (
    ParkingSpot, Ticket, VehicleType,
    InvalidInputError, UnsupportedVehicleTypeError
)
from parkit.domain.strategies import (
    FareCalculator, FareSettings, HourlyPricingStrategy
)


IN_TIME = datetime(2024, 1, 1, 10, 0, 0)


class TestFareCalculator(unittest.TestCase):
    """Tests for FareCalculator.compute_fare"""

    def setUp(self):
        self.calculator = FareCalculator()

    def fare(self, minutes, vehicle_type=VehicleType.CAR, is_recurring=False, seconds=0):
        out_time = IN_TIME + timedelta(minutes=minutes, seconds=seconds)
        return self.calculator.compute_fare(IN_TIME, out_time, vehicle_type, is_recurring)

    def test_one_hour_car(self):
        self.assertEqual(self.fare(60), Decimal("1.50"))

    def test_one_hour_bike(self):
        self.assertEqual(self.fare(60, VehicleType.BIKE), Decimal("1.00"))

    def test_less_than_one_hour_car(self):
        # 45 minutes at 1.5/h is 1.125, rounded half up
        self.assertEqual(self.fare(45), Decimal("1.13"))

    def test_less_than_one_hour_bike(self):
        self.assertEqual(self.fare(45, VehicleType.BIKE), Decimal("0.75"))

    def test_more_than_a_day_car(self):
        self.assertEqual(self.fare(24 * 60), Decimal("36.00"))

    def test_more_than_a_day_bike(self):
        self.assertEqual(self.fare(24 * 60, VehicleType.BIKE), Decimal("24.00"))

    def test_grace_period_is_free_for_every_type(self):
        for vehicle_type in VehicleType:
            for recurring in (False, True):
                with self.subTest(vehicle_type=vehicle_type, recurring=recurring):
                    self.assertEqual(self.fare(29, vehicle_type, recurring), Decimal("0.00"))

    def test_sub_minute_remainder_is_ignored(self):
        self.assertEqual(self.fare(29, seconds=59), Decimal("0.00"))

    def test_grace_period_ends_at_thirty_minutes(self):
        self.assertEqual(self.fare(30), Decimal("0.75"))
        self.assertEqual(self.fare(30, VehicleType.BIKE), Decimal("0.50"))

    def test_zero_duration_is_allowed(self):
        self.assertEqual(self.calculator.compute_fare(IN_TIME, IN_TIME, VehicleType.CAR), Decimal("0.00"))

    def test_recurring_user_car(self):
        # 1.50 - 5% = 1.425, rounded half up
        self.assertEqual(self.fare(60, is_recurring=True), Decimal("1.43"))

    def test_recurring_user_bike(self):
        self.assertEqual(self.fare(60, VehicleType.BIKE, is_recurring=True), Decimal("0.95"))

    def test_result_has_two_decimal_places(self):
        self.assertEqual(self.fare(61).as_tuple().exponent, -2)

    def test_missing_in_time(self):
        for vehicle_type in VehicleType:
            with self.subTest(vehicle_type=vehicle_type):
                with self.assertRaises(InvalidInputError):
                    self.calculator.compute_fare(None, IN_TIME, vehicle_type)

    def test_missing_out_time(self):
        for vehicle_type in VehicleType:
            with self.subTest(vehicle_type=vehicle_type):
                with self.assertRaises(InvalidInputError):
                    self.calculator.compute_fare(IN_TIME, None, vehicle_type)

    def test_out_time_before_in_time(self):
        for vehicle_type in VehicleType:
            with self.subTest(vehicle_type=vehicle_type):
                with self.assertRaises(InvalidInputError):
                    self.calculator.compute_fare(IN_TIME, IN_TIME - timedelta(minutes=1), vehicle_type)

    def test_invalid_input_is_a_value_error(self):
        with self.assertRaises(ValueError):
            self.calculator.compute_fare(None, None, VehicleType.CAR)

    def test_unknown_vehicle_type(self):
        with self.assertRaises(UnsupportedVehicleTypeError):
            self.calculator.compute_fare(IN_TIME, IN_TIME + timedelta(hours=1), "TRUCK")

    def test_unknown_vehicle_type_within_grace_period(self):
        with self.assertRaises(UnsupportedVehicleTypeError):
            self.calculator.compute_fare(IN_TIME, IN_TIME + timedelta(minutes=5), None)


class TestFareCalculatorWithTicket(unittest.TestCase):
    """Tests for FareCalculator.calculate_fare"""

    def setUp(self):
        self.calculator = FareCalculator()

    def test_price_is_stored_on_ticket(self):
        ticket = Ticket(
            parking_spot=ParkingSpot(1, VehicleType.CAR, False),
            vehicle_reg_number="ABCDEF",
            in_time=IN_TIME,
            out_time=IN_TIME + timedelta(hours=2)
        )

        price = self.calculator.calculate_fare(ticket)

        self.assertEqual(price, Decimal("3.00"))
        self.assertEqual(ticket.price, Decimal("3.00"))

    def test_open_ticket_cannot_be_priced(self):
        ticket = Ticket(
            parking_spot=ParkingSpot(1, VehicleType.CAR, False),
            vehicle_reg_number="ABCDEF",
            in_time=IN_TIME
        )

        with self.assertRaises(InvalidInputError):
            self.calculator.calculate_fare(ticket)
        self.assertEqual(ticket.price, Decimal("0"))

    def test_missing_ticket(self):
        with self.assertRaises(InvalidInputError):
            self.calculator.calculate_fare(None)


class TestFareSettings(unittest.TestCase):
    """Tests for configurable rates"""

    def test_custom_rates(self):
        settings = FareSettings(
            rates_per_hour={VehicleType.CAR: Decimal("2"), VehicleType.BIKE: Decimal("0.5")},
            free_minutes=0,
            recurring_discount_percent=Decimal("10")
        )
        calculator = FareCalculator(HourlyPricingStrategy(settings))

        self.assertEqual(
            calculator.compute_fare(IN_TIME, IN_TIME + timedelta(minutes=15), VehicleType.CAR),
            Decimal("0.50")
        )
        self.assertEqual(
            calculator.compute_fare(IN_TIME, IN_TIME + timedelta(hours=1), VehicleType.CAR, True),
            Decimal("1.80")
        )

    def test_type_without_rate_is_unsupported(self):
        settings = FareSettings(rates_per_hour={VehicleType.CAR: Decimal("1.5")})
        calculator = FareCalculator(HourlyPricingStrategy(settings))

        with self.assertRaises(UnsupportedVehicleTypeError):
            calculator.compute_fare(IN_TIME, IN_TIME + timedelta(hours=1), VehicleType.BIKE)

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            FareSettings(free_minutes=-1)
        with self.assertRaises(ValueError):
            FareSettings(recurring_discount_percent=Decimal("150"))
        with self.assertRaises(ValueError):
            FareSettings(rates_per_hour={VehicleType.CAR: Decimal("-1")})

    def test_strategy_name(self):
        self.assertEqual(str(HourlyPricingStrategy()), "HourlyPricing Strategy")


if __name__ == "__main__":
    unittest.main()
