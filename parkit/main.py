# File: parkit/main.py
"""
Main application entry point for the Park-It Parking System

Builds the object graph by dependency injection and runs the interactive
console. Storage is either a SQL database reached through SQLAlchemy or, with
--in-memory, plain in-memory repositories.
"""

from typing import List, Optional, TextIO
import argparse
import logging
import sys
import os

from .config import AppConfig
from .domain.models import ParkingSpot, VehicleType
from .domain.strategies import FareCalculator, HourlyPricingStrategy
from .infrastructure.database import DatabaseConfig
from .infrastructure.repositories import (
    InMemoryParkingSpotRepository, InMemoryTicketRepository
)
from .application.user_survey_service import UserSurveyService
from .application.parking_service import ParkingService
from .application.commands import CommandProcessor
from .presentation.input_reader import ConsoleInputReader
from .presentation.console import InteractiveShell


def setup_logging(log_dir: str = "logs", level: str = "INFO"):
    """Setup application logging configuration"""
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(log_dir, 'parkit.log')),
            logging.StreamHandler(sys.stdout)
        ]
    )
    return logging.getLogger(__name__)


class ParkingApplication:
    """Main application controller that sets up all components"""

    def __init__(
        self,
        config: AppConfig,
        in_memory: bool = False,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None
    ):
        self.config = config
        self.in_memory = in_memory
        self.logger = logging.getLogger(self.__class__.__name__)
        self.database: Optional[DatabaseConfig] = None

        self.input_reader = ConsoleInputReader(stdin=stdin, stdout=stdout)
        self.setup_components()
        self.shell = InteractiveShell(
            self.command_processor,
            self.input_reader,
            stdout=stdout,
            recurring_discount_percent=config.fares.recurring_discount_percent
        )

    def setup_components(self):
        """Initialize repositories and services (Dependency Injection)"""
        spots = self.config.spots

        if self.in_memory:
            layout = [VehicleType.CAR] * spots.car + [VehicleType.BIKE] * spots.bike
            self.parking_spot_repository = InMemoryParkingSpotRepository(
                ParkingSpot(number, vehicle_type) for number, vehicle_type in enumerate(layout, start=1)
            )
            self.ticket_repository = InMemoryTicketRepository()
            self.logger.info("Using in-memory storage")
        else:
            self.database = DatabaseConfig(self.config.database_url)
            self.database.create_schema()
            self.database.provision_spots(spots.car, spots.bike)
            self.parking_spot_repository = self.database.create_parking_spot_repository()
            self.ticket_repository = self.database.create_ticket_repository()

        self.user_survey_service = UserSurveyService(self.ticket_repository)
        self.fare_calculator = FareCalculator(HourlyPricingStrategy(self.config.fares.to_settings()))
        self.parking_service = ParkingService(
            input_reader=self.input_reader,
            fare_calculator=self.fare_calculator,
            user_survey_service=self.user_survey_service,
            parking_spot_repository=self.parking_spot_repository,
            ticket_repository=self.ticket_repository
        )
        self.command_processor = CommandProcessor(self.parking_service)

    def run(self):
        """Run the application"""
        try:
            self.logger.info("Application starting...")
            self.shell.run()
        finally:
            if self.database is not None:
                self.database.dispose()
            self.logger.info("Application shutting down...")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parkit", description="Park-It parking system console")
    parser.add_argument("--config", help="YAML configuration file (default: $PARKIT_CONFIG)")
    parser.add_argument("--database-url", help="SQLAlchemy database URL (overrides configuration)")
    parser.add_argument("--in-memory", action="store_true", help="Keep data in memory only")
    parser.add_argument("--init-db", action="store_true",
                        help="Create the schema, provision spots and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.load(args.config)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {str(e)}", file=sys.stderr)
        return 2

    if args.database_url:
        config.database_url = args.database_url

    logger = setup_logging(config.log_dir, config.log_level)

    try:
        if args.init_db:
            database = DatabaseConfig(config.database_url)
            database.create_schema()
            database.provision_spots(config.spots.car, config.spots.bike)
            database.dispose()
            return 0

        app = ParkingApplication(config, in_memory=args.in_memory)
        app.run()
    except Exception as e:
        print(f"Fatal error: {str(e)}")
        logger.error(f"Fatal error in main: {str(e)}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
