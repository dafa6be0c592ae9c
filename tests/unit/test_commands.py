#!/usr/bin/env python3
"""
Unit Tests for the command layer and the interactive shell
"""

import io
import unittest
import sys
from pathlib import Path
from unittest.mock import Mock, create_autospec
from datetime import datetime
from decimal import Decimal

sys.path.append(str(Path(__file__).parent.parent.parent))

from parkit.application.parking_service import ParkingService
from parkit.application.dtos import ParkingAllocationDTO, ParkingExitDTO, OperationStatus
from parkit.application.commands import (
    CommandProcessor, CommandResult,
    ProcessIncomingVehicleCommand, ProcessExitingVehicleCommand
)
from parkit.presentation.input_reader import ConsoleInputReader
from parkit.presentation.console import InteractiveShell


IN_TIME = datetime(2024, 1, 1, 10, 0, 0)


def entry_result(success=True, recurring=False) -> ParkingAllocationDTO:
    if not success:
        return ParkingAllocationDTO(
            success=False,
            status=OperationStatus.PARKING_FULL,
            message="No CAR spot available. Parking slots might be full"
        )
    return ParkingAllocationDTO(
        success=True,
        status=OperationStatus.SUCCESS,
        vehicle_reg_number="ABCDEF",
        spot_number=1,
        vehicle_type="CAR",
        in_time=IN_TIME,
        recurring_user=recurring,
        message="Please park your vehicle in spot number: 1"
    )


def exit_result() -> ParkingExitDTO:
    return ParkingExitDTO(
        success=True,
        status=OperationStatus.SUCCESS,
        vehicle_reg_number="ABCDEF",
        spot_number=1,
        in_time=IN_TIME,
        out_time=IN_TIME,
        duration_minutes=60,
        total_fee=Decimal("1.50"),
        message="Please pay the parking fare: 1.50"
    )


class TestCommands(unittest.TestCase):

    def setUp(self):
        self.service = create_autospec(ParkingService, instance=True)
        self.processor = CommandProcessor(self.service)

    def test_incoming_vehicle_command(self):
        self.service.process_incoming_vehicle.return_value = entry_result()

        result = self.processor.process(ProcessIncomingVehicleCommand())

        self.assertIsInstance(result, CommandResult)
        self.assertTrue(result.success)
        self.assertEqual(result.data.spot_number, 1)
        self.assertEqual(result.metadata["status"], "success")
        self.assertEqual(len(self.processor.command_history), 1)

    def test_exiting_vehicle_command(self):
        self.service.process_exiting_vehicle.return_value = exit_result()

        result = self.processor.process(ProcessExitingVehicleCommand())

        self.assertTrue(result.success)
        self.assertEqual(result.data.total_fee, Decimal("1.50"))
        self.service.process_exiting_vehicle.assert_called_once_with()

    def test_refused_command_is_not_recorded(self):
        self.service.process_incoming_vehicle.return_value = entry_result(success=False)

        result = self.processor.process(ProcessIncomingVehicleCommand())

        self.assertFalse(result.success)
        self.assertIn("might be full", result.error_message)
        self.assertEqual(self.processor.command_history, [])

    def test_command_exception_becomes_failed_result(self):
        self.service.process_exiting_vehicle.side_effect = RuntimeError("boom")

        result = self.processor.process(ProcessExitingVehicleCommand())

        self.assertFalse(result.success)
        self.assertEqual(result.error_message, "boom")
        self.assertIsNone(result.data)

    def test_history(self):
        self.service.process_incoming_vehicle.return_value = entry_result()
        command = ProcessIncomingVehicleCommand(command_id="cmd-1")
        self.processor.process(command)

        history = self.processor.get_history()

        self.assertEqual(history[0]["command_id"], "cmd-1")
        self.assertEqual(history[0]["command_type"], "ProcessIncomingVehicleCommand")
        self.assertIsNotNone(history[0]["executed_at"])

    def test_history_is_bounded(self):
        self.service.process_incoming_vehicle.return_value = entry_result()
        processor = CommandProcessor(self.service, max_history_size=2)

        for _ in range(3):
            processor.process(ProcessIncomingVehicleCommand())

        self.assertEqual(len(processor.command_history), 2)

    def test_result_to_dict(self):
        self.service.process_incoming_vehicle.return_value = entry_result()

        data = self.processor.process(ProcessIncomingVehicleCommand()).to_dict()

        self.assertEqual(data["data"]["spot_number"], 1)
        self.assertTrue(data["success"])


class TestInteractiveShell(unittest.TestCase):

    def run_shell(self, script: str) -> str:
        output = io.StringIO()
        reader = ConsoleInputReader(stdin=io.StringIO(script), stdout=output)
        shell = InteractiveShell(self.processor, reader, stdout=output)
        shell.run()
        return output.getvalue()

    def setUp(self):
        self.processor = Mock(spec=CommandProcessor)

    def command_result(self, dto) -> CommandResult:
        return CommandResult(
            success=dto.success,
            command_id="cmd",
            command_type="Command",
            executed_at=IN_TIME,
            data=dto,
            error_message=None if dto.success else dto.message
        )

    def test_shutdown(self):
        output = self.run_shell("3\n")

        self.assertIn("Welcome to Parking System!", output)
        self.assertIn("Exiting from the system!", output)
        self.processor.process.assert_not_called()

    def test_incoming_vehicle(self):
        self.processor.process.return_value = self.command_result(entry_result())

        output = self.run_shell("1\n3\n")

        command = self.processor.process.call_args[0][0]
        self.assertIsInstance(command, ProcessIncomingVehicleCommand)
        self.assertIn("Generated Ticket and saved in DB", output)
        self.assertIn("Please park your vehicle in spot number: 1", output)
        self.assertNotIn("Welcome back!", output)

    def test_recurring_welcome(self):
        self.processor.process.return_value = self.command_result(entry_result(recurring=True))

        output = self.run_shell("1\n3\n")

        self.assertIn(
            "Welcome back! As a recurring user of our parking lot, you'll benefit from a 5% discount.",
            output
        )

    def test_refused_entry(self):
        self.processor.process.return_value = self.command_result(entry_result(success=False))

        output = self.run_shell("1\n3\n")

        self.assertIn("Parking slots might be full", output)
        self.assertNotIn("Generated Ticket", output)

    def test_exiting_vehicle(self):
        self.processor.process.return_value = self.command_result(exit_result())

        output = self.run_shell("2\n3\n")

        command = self.processor.process.call_args[0][0]
        self.assertIsInstance(command, ProcessExitingVehicleCommand)
        self.assertIn("Please pay the parking fare: 1.50", output)

    def test_unsupported_option(self):
        output = self.run_shell("7\n3\n")

        self.assertIn("Unsupported option", output)
        self.processor.process.assert_not_called()

    def test_end_of_input_stops_shell(self):
        output = self.run_shell("")

        self.assertNotIn("Unsupported option", output)


if __name__ == "__main__":
    unittest.main()
