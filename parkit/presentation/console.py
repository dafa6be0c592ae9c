# File: parkit/presentation/console.py
"""
Interactive console for the Park-It Parking System

The shell shows the operator menu, turns each choice into a command and
prints the outcome. It is the presentation layer only: all business rules
live in ParkingService.

Menu:
    1 New Vehicle Entering - Allocate Parking Space
    2 Vehicle Exiting - Generate Ticket Price
    3 Shutdown System
"""

from typing import Optional, TextIO
import logging
import sys

from ..application.commands import (
    CommandProcessor, CommandResult,
    ProcessIncomingVehicleCommand, ProcessExitingVehicleCommand
)
from ..application.dtos import ParkingAllocationDTO, ParkingExitDTO
from .input_reader import InputReader


MENU = (
    "Please select an option. Simply enter the number to choose an action\n"
    "1 New Vehicle Entering - Allocate Parking Space\n"
    "2 Vehicle Exiting - Generate Ticket Price\n"
    "3 Shutdown System"
)

RECURRING_WELCOME = (
    "Welcome back! As a recurring user of our parking lot, "
    "you'll benefit from a {discount}% discount."
)


class InteractiveShell:
    """Menu loop driving the parking service through commands"""

    def __init__(
        self,
        command_processor: CommandProcessor,
        input_reader: InputReader,
        stdout: Optional[TextIO] = None,
        recurring_discount_percent=5
    ):
        self.command_processor = command_processor
        self.input_reader = input_reader
        self.stdout = stdout or sys.stdout
        self.recurring_discount_percent = recurring_discount_percent
        self.logger = logging.getLogger(self.__class__.__name__)

    def _print(self, message: str) -> None:
        print(message, file=self.stdout)

    def run(self) -> None:
        """Show the menu until the operator shuts the system down"""
        self.logger.info("App initialized!!!")
        self._print("Welcome to Parking System!")

        while True:
            option = self.input_reader.read_selection(MENU)

            if option == 1:
                self.handle_incoming()
            elif option == 2:
                self.handle_exiting()
            elif option == 3:
                self._print("Exiting from the system!")
                break
            elif self.input_reader.exhausted:
                self.logger.info("Input closed, shutting down")
                break
            else:
                self._print("Unsupported option. Please enter a number corresponding to the provided menu")

        self.logger.info("Shell stopped")

    def handle_incoming(self) -> CommandResult:
        result = self.command_processor.process(ProcessIncomingVehicleCommand())
        self._report_entry(result)
        return result

    def handle_exiting(self) -> CommandResult:
        result = self.command_processor.process(ProcessExitingVehicleCommand())
        self._report_exit(result)
        return result

    def _report_entry(self, result: CommandResult) -> None:
        dto: Optional[ParkingAllocationDTO] = result.data
        if dto is None or not dto.success:
            self._print(result.error_message or "Unable to process incoming vehicle")
            return

        self._print("Generated Ticket and saved in DB")
        if dto.recurring_user:
            self._print(RECURRING_WELCOME.format(discount=self.recurring_discount_percent))
        self._print(dto.message)
        self._print(f"Recorded in-time for vehicle number: {dto.vehicle_reg_number} is: {dto.in_time}")

    def _report_exit(self, result: CommandResult) -> None:
        dto: Optional[ParkingExitDTO] = result.data
        if dto is None or not dto.success:
            self._print(result.error_message or "Unable to process exiting vehicle")
            return

        self._print(dto.message)
        self._print(f"Recorded out-time for vehicle number: {dto.vehicle_reg_number} is: {dto.out_time}")
