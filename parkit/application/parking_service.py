# File: parkit/application/parking_service.py
"""
Parking Management Application Service

This module implements the application service layer for the parking
system. It orchestrates the entry and exit of vehicles over the injected
collaborators: input reader, fare calculator, user survey service and the
spot and ticket repositories.

Visit lifecycle (per registration number):
    NONE --entry--> PARKED --exit--> COMPLETED

The ticket repository is the only source of truth for which vehicles are
parked; the service keeps no state between calls.

Key Principles:
- Dependency Injection for testability
- Business refusals are results, not exceptions
- Every transition either completes or leaves the stores as they were
"""

from typing import Callable, Optional
from datetime import datetime
from dataclasses import replace
import logging

from ..domain.models import (
    ParkingSpot, Ticket, VehicleType, InvalidInputError
)
from ..domain.strategies import FareCalculator
from ..infrastructure.repositories import ParkingSpotRepository, TicketRepository
from ..presentation.input_reader import InputReader
from .user_survey_service import UserSurveyService
from .dtos import ParkingAllocationDTO, ParkingExitDTO, OperationStatus


VEHICLE_TYPE_PROMPT = "Please select vehicle type from menu\n1 CAR\n2 BIKE"
REGISTRATION_PROMPT = "Please type the vehicle registration number and press enter key"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for parking service errors"""
    pass


class ParkingFullError(ParkingServiceError):
    """Exception when no spot of the requested type is available"""
    pass


class TicketNotFoundError(ParkingServiceError):
    """Exception when a vehicle has no open ticket"""
    pass


class TicketUpdateError(ParkingServiceError):
    """Exception when a ticket or spot write did not take effect"""
    pass


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for parking management

    This service orchestrates the two use cases of the system:
    1. Vehicle entry: allocate a spot and open a ticket
    2. Vehicle exit: close the ticket with its fare and free the spot
    """

    def __init__(
        self,
        input_reader: InputReader,
        fare_calculator: FareCalculator,
        user_survey_service: UserSurveyService,
        parking_spot_repository: ParkingSpotRepository,
        ticket_repository: TicketRepository,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the parking service

        Args:
            input_reader: Source of the vehicle type and registration number
            fare_calculator: Prices a visit at exit
            user_survey_service: Recognises recurring users
            parking_spot_repository: Spot allocation and availability
            ticket_repository: Ticket store
            clock: Returns the current time; replaced in tests
        """
        self.input_reader = input_reader
        self.fare_calculator = fare_calculator
        self.user_survey_service = user_survey_service
        self.parking_spot_repository = parking_spot_repository
        self.ticket_repository = ticket_repository
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------------
    # ENTRY
    # ------------------------------------------------------------------------

    def process_incoming_vehicle(self) -> ParkingAllocationDTO:
        """
        Process an incoming vehicle

        Use Case: Vehicle Entry
        1. Read the vehicle type
        2. Find the next available spot of that type
        3. Read the registration number
        4. Mark the spot unavailable
        5. Open a ticket with the entry time
        6. Check whether the user is a recurring one

        Returns: Parking allocation result
        """
        try:
            vehicle_type = self._read_vehicle_type()
        except InvalidInputError as e:
            self.logger.error(f"Error parsing user input for type of vehicle: {e}")
            return ParkingAllocationDTO(
                success=False,
                status=OperationStatus.INVALID_VEHICLE_TYPE,
                message="Incorrect input provided"
            )

        try:
            spot = self._get_next_parking_spot(vehicle_type)
        except ParkingFullError as e:
            self.logger.warning(str(e))
            return ParkingAllocationDTO(
                success=False,
                status=OperationStatus.PARKING_FULL,
                vehicle_type=vehicle_type.value,
                message=str(e)
            )
        except Exception as e:
            self.logger.error(f"Error fetching next available parking slot: {e}", exc_info=True)
            return self._entry_error(f"Internal error: {str(e)}", vehicle_type=vehicle_type.value)

        try:
            vehicle_reg_number = self._read_vehicle_reg_number()
        except InvalidInputError as e:
            self.logger.error(f"Unable to process incoming vehicle: {e}")
            return ParkingAllocationDTO(
                success=False,
                status=OperationStatus.INVALID_REGISTRATION,
                vehicle_type=vehicle_type.value,
                message="Invalid vehicle registration number"
            )

        self.logger.info(f"Processing incoming vehicle {vehicle_reg_number} ({vehicle_type})")

        try:
            ticket = self._open_ticket(spot, vehicle_reg_number)
        except Exception as e:
            self.logger.error(f"Unable to process incoming vehicle: {e}", exc_info=True)
            return self._entry_error(
                f"Unable to process incoming vehicle: {str(e)}",
                vehicle_reg_number=vehicle_reg_number,
                vehicle_type=vehicle_type.value
            )

        recurring = self._check_recurring_on_entry(vehicle_reg_number)

        self.logger.info(f"{ticket} opened at {ticket.in_time}")
        return ParkingAllocationDTO(
            success=True,
            status=OperationStatus.SUCCESS,
            vehicle_reg_number=vehicle_reg_number,
            spot_number=spot.number,
            vehicle_type=vehicle_type.value,
            in_time=ticket.in_time,
            recurring_user=recurring,
            message=f"Please park your vehicle in spot number: {spot.number}"
        )

    def get_next_parking_number_if_available(self) -> Optional[ParkingSpot]:
        """
        Read the vehicle type and return the next available spot for it

        Returns None when the input is invalid or no spot is available.
        """
        try:
            return self._get_next_parking_spot(self._read_vehicle_type())
        except InvalidInputError as e:
            self.logger.error(f"Error parsing user input for type of vehicle: {e}")
        except ParkingFullError as e:
            self.logger.error(f"Error fetching next available parking slot: {e}")
        return None

    def _read_vehicle_type(self) -> VehicleType:
        selection = self.input_reader.read_selection(VEHICLE_TYPE_PROMPT)
        return VehicleType.from_selection(selection)

    def _read_vehicle_reg_number(self) -> str:
        vehicle_reg_number = self.input_reader.read_vehicle_registration_number(REGISTRATION_PROMPT)
        if not vehicle_reg_number or not vehicle_reg_number.strip():
            raise InvalidInputError("Invalid input provided")
        return vehicle_reg_number

    def _get_next_parking_spot(self, vehicle_type: VehicleType) -> ParkingSpot:
        number = self.parking_spot_repository.get_next_available_slot(vehicle_type)
        if number is None or number <= 0:
            raise ParkingFullError(
                f"No {vehicle_type} spot available. Parking slots might be full"
            )
        return ParkingSpot(number=number, vehicle_type=vehicle_type, available=True)

    def _open_ticket(self, spot: ParkingSpot, vehicle_reg_number: str) -> Ticket:
        spot.occupy()
        if not self.parking_spot_repository.update_parking(spot):
            raise TicketUpdateError(f"Unable to mark spot {spot.number} as occupied")

        ticket = Ticket(
            parking_spot=spot,
            vehicle_reg_number=vehicle_reg_number,
            in_time=self.clock()
        )

        try:
            saved = self.ticket_repository.save_ticket(ticket)
        except Exception:
            self._release_spot_after_failed_entry(spot)
            raise

        if not saved:
            self._release_spot_after_failed_entry(spot)
            raise TicketUpdateError(f"Unable to save ticket for {vehicle_reg_number}")

        return ticket

    def _release_spot_after_failed_entry(self, spot: ParkingSpot) -> None:
        released = replace(spot, available=True)
        try:
            if not self.parking_spot_repository.update_parking(released):
                self.logger.error(f"Could not release spot {spot.number} after failed entry")
        except Exception as e:
            self.logger.error(
                f"Could not release spot {spot.number} after failed entry: {e}", exc_info=True
            )

    def _check_recurring_on_entry(self, vehicle_reg_number: str) -> bool:
        try:
            recurring = self.user_survey_service.is_recurring_user(vehicle_reg_number)
        except Exception as e:
            self.logger.error(f"Recurring user check failed for {vehicle_reg_number}: {e}", exc_info=True)
            return False

        if recurring:
            self.logger.info("Recurring user incoming")
        return recurring

    def _entry_error(self, message: str, **fields) -> ParkingAllocationDTO:
        return ParkingAllocationDTO(
            success=False,
            status=OperationStatus.ERROR,
            message=message,
            **fields
        )

    # ------------------------------------------------------------------------
    # EXIT
    # ------------------------------------------------------------------------

    def process_exiting_vehicle(self) -> ParkingExitDTO:
        """
        Process an exiting vehicle

        Use Case: Vehicle Exit
        1. Read the registration number
        2. Fetch the open ticket
        3. Record the exit time and compute the fare
        4. Store the closed ticket
        5. Free the spot, only once the ticket is stored

        Returns: Exit processing result
        """
        try:
            vehicle_reg_number = self._read_vehicle_reg_number()
        except InvalidInputError as e:
            self.logger.error(f"Unable to process exiting vehicle: {e}")
            return ParkingExitDTO(
                success=False,
                status=OperationStatus.INVALID_REGISTRATION,
                message="Unable to process exiting vehicle"
            )

        self.logger.info(f"Processing exiting vehicle {vehicle_reg_number}")

        try:
            ticket = self._get_open_ticket(vehicle_reg_number)
        except TicketNotFoundError as e:
            self.logger.warning(str(e))
            return ParkingExitDTO(
                success=False,
                status=OperationStatus.TICKET_NOT_FOUND,
                vehicle_reg_number=vehicle_reg_number,
                message=str(e)
            )
        except Exception as e:
            self.logger.error(f"Unable to process exiting vehicle: {e}", exc_info=True)
            return self._exit_error(f"Internal error: {str(e)}", vehicle_reg_number)

        try:
            recurring = self.user_survey_service.is_recurring_user(vehicle_reg_number)
            out_time = self.clock()
            price = self.fare_calculator.compute_fare(
                ticket.in_time, out_time, ticket.parking_spot.vehicle_type, recurring
            )
            ticket.close(out_time, price)

            if not self.ticket_repository.update_ticket(ticket):
                raise TicketUpdateError("Unable to update ticket information. Error occurred")

            spot = ticket.parking_spot
            spot.release()
            if not self.parking_spot_repository.update_parking(spot):
                self.logger.error(f"Ticket {ticket.id} closed but spot {spot.number} was not released")

        except TicketUpdateError as e:
            self.logger.error(str(e))
            return self._exit_error(str(e), vehicle_reg_number, spot_number=ticket.parking_spot.number)
        except Exception as e:
            self.logger.error(f"Unable to process exiting vehicle: {e}", exc_info=True)
            return self._exit_error(
                f"Unable to process exiting vehicle: {str(e)}",
                vehicle_reg_number,
                spot_number=ticket.parking_spot.number
            )

        duration_minutes = int((ticket.out_time - ticket.in_time).total_seconds() // 60)
        self.logger.info(
            f"{ticket} closed at {ticket.out_time} after {duration_minutes} minutes, fare {ticket.price}"
        )
        return ParkingExitDTO(
            success=True,
            status=OperationStatus.SUCCESS,
            vehicle_reg_number=vehicle_reg_number,
            spot_number=ticket.parking_spot.number,
            in_time=ticket.in_time,
            out_time=ticket.out_time,
            duration_minutes=duration_minutes,
            total_fee=ticket.price,
            recurring_user=recurring,
            message=f"Please pay the parking fare: {ticket.price}"
        )

    def _get_open_ticket(self, vehicle_reg_number: str) -> Ticket:
        ticket = self.ticket_repository.get_ticket(vehicle_reg_number)
        if ticket is None:
            raise TicketNotFoundError(f"No vehicle parked with registration number {vehicle_reg_number}")
        return ticket

    def _exit_error(self, message: str, vehicle_reg_number: str, **fields) -> ParkingExitDTO:
        return ParkingExitDTO(
            success=False,
            status=OperationStatus.ERROR,
            vehicle_reg_number=vehicle_reg_number,
            message=message,
            **fields
        )
