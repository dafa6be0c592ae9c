# File: parkit/presentation/input_reader.py
"""
Operator input for the Park-It console

InputReader is the interface the application service reads the vehicle
type and registration number through. ConsoleInputReader implements it over
text streams so that tests can drive it with io.StringIO.
"""

from abc import ABC, abstractmethod
from typing import Optional, TextIO
import logging
import sys

from ..domain.models import InvalidInputError


INVALID_SELECTION = -1


class InputReader(ABC):
    """Interface for reading operator input"""

    @abstractmethod
    def read_selection(self, prompt: Optional[str] = None) -> int:
        """Read a menu option; return -1 when it is not a number"""
        pass

    @abstractmethod
    def read_vehicle_registration_number(self, prompt: Optional[str] = None) -> str:
        """Read a registration number; raise InvalidInputError when blank"""
        pass

    @property
    def exhausted(self) -> bool:
        """True once the input source has no more lines to give"""
        return False


class ConsoleInputReader(InputReader):
    """Reads operator input line by line from a text stream"""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._exhausted = False
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _prompt(self, prompt: Optional[str]) -> None:
        if prompt:
            print(prompt, file=self.stdout)

    def _read_line(self) -> str:
        line = self.stdin.readline()
        if line == "":
            self._exhausted = True
            raise EOFError("No more input")
        return line.rstrip("\r\n")

    def read_selection(self, prompt: Optional[str] = None) -> int:
        self._prompt(prompt)
        try:
            return int(self._read_line().strip())
        except (ValueError, EOFError) as e:
            self.logger.error(f"Error while reading user input from Shell: {e}")
            print("Error reading input. Please enter valid number for proceeding further",
                  file=self.stdout)
            return INVALID_SELECTION

    def read_vehicle_registration_number(self, prompt: Optional[str] = None) -> str:
        self._prompt(prompt)
        try:
            vehicle_reg_number = self._read_line()
        except EOFError as e:
            self.logger.error(f"Error while reading user input from Shell: {e}")
            raise InvalidInputError("Invalid input provided") from e

        if not vehicle_reg_number.strip():
            self.logger.error("Error while reading user input from Shell: blank registration number")
            print("Error reading input. Please enter a valid string for vehicle registration number",
                  file=self.stdout)
            raise InvalidInputError("Invalid input provided")

        return vehicle_reg_number
