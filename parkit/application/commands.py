# File: parkit/application/commands.py
"""
Command Pattern Implementation for the Park-It Parking System

Operator actions are wrapped into command objects so that the console can
invoke them uniformly and keep an audit trail of what was executed.

Command Types:
1. ProcessIncomingVehicleCommand - Vehicle entry
2. ProcessExitingVehicleCommand - Vehicle exit

Entry and exit read their parameters from the operator through the service's
input reader, so commands carry no request payload. Undo is not supported:
a completed visit is part of the user's history and is never removed.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from datetime import datetime
from dataclasses import dataclass, field
import logging
import uuid

from .parking_service import ParkingService
from .dtos import ParkingAllocationDTO, ParkingExitDTO


# ============================================================================
# COMMAND RESULT
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one command execution"""
    success: bool
    command_id: str
    command_type: str
    executed_at: datetime
    data: Optional[Union[ParkingAllocationDTO, ParkingExitDTO]] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "command_id": self.command_id,
            "command_type": self.command_type,
            "executed_at": self.executed_at.isoformat(),
            "data": self.data.to_dict() if self.data is not None else None,
            "error_message": self.error_message,
            "metadata": self.metadata
        }


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents an intent to change the system state.
    Commands are named in the imperative (e.g., ProcessIncomingVehicleCommand).
    """

    def __init__(self, command_id: Optional[str] = None, executed_by: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.executed_by = executed_by or "console"
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, service: ParkingService) -> CommandResult:
        """
        Execute the command using the provided service

        Returns: Execution result
        """
        pass

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")

    def _result(self, dto: Union[ParkingAllocationDTO, ParkingExitDTO]) -> CommandResult:
        self.executed_at = datetime.now()
        return CommandResult(
            success=dto.success,
            command_id=self.command_id,
            command_type=self.__class__.__name__,
            executed_at=self.executed_at,
            data=dto,
            error_message=None if dto.success else dto.message,
            metadata={"executed_by": self.executed_by, "status": dto.status.value}
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert command to dictionary for serialization"""
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "executed_by": self.executed_by
        }


# ============================================================================
# PARKING COMMANDS
# ============================================================================

class ProcessIncomingVehicleCommand(Command):
    """Command: Register an incoming vehicle and allocate a spot"""

    def execute(self, service: ParkingService) -> CommandResult:
        self.logger.info("Executing ProcessIncomingVehicleCommand")
        return self._result(service.process_incoming_vehicle())


class ProcessExitingVehicleCommand(Command):
    """Command: Close the visit of an exiting vehicle and compute its fare"""

    def execute(self, service: ParkingService) -> CommandResult:
        self.logger.info("Executing ProcessExitingVehicleCommand")
        return self._result(service.process_exiting_vehicle())


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes commands with features like:
    - Uniform error handling
    - Command history for auditing
    """

    def __init__(self, service: ParkingService, max_history_size: int = 1000):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)

        self.command_history: List[Command] = []
        self.max_history_size = max_history_size

    def process(self, command: Command) -> CommandResult:
        """
        Process a command

        Args:
            command: Command to execute

        Returns: Execution result
        """
        self.logger.info(f"Processing command: {command.get_description()}")

        try:
            result = command.execute(self.service)
        except Exception as e:
            self.logger.error(f"Error processing command: {e}", exc_info=True)
            return CommandResult(
                success=False,
                command_id=command.command_id,
                command_type=command.__class__.__name__,
                executed_at=datetime.now(),
                error_message=str(e)
            )

        if result.success:
            self._add_to_history(command)
        return result

    def _add_to_history(self, command: Command):
        self.command_history.append(command)
        if len(self.command_history) > self.max_history_size:
            self.command_history.pop(0)

    def get_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent successfully executed commands"""
        recent = self.command_history[-limit:] if limit > 0 else []
        return [command.to_dict() for command in recent]
