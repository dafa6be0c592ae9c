# File: parkit/infrastructure/database.py
"""
Database setup for the SQLAlchemy repositories

DatabaseConfig owns the engine and the session factory, creates the schema,
provisions the parking spots of the facility and can reset the stored state
between integration test runs.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.models import VehicleType
from .repositories import (
    Base, ParkingSpotModel, TicketModel,
    SQLAlchemyParkingSpotRepository, SQLAlchemyTicketRepository,
    session_scope
)


class DatabaseConfig:
    """Engine, sessions and schema management"""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.logger = logging.getLogger(self.__class__.__name__)

        engine_options = {"echo": echo}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # All sessions must share the single in-memory connection
            engine_options.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False}
            )

        self.engine = create_engine(database_url, **engine_options)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.logger.info(f"Database engine created for {self.engine.url.render_as_string(hide_password=True)}")

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)
        self.logger.info("Database schema created")

    def provision_spots(self, car: int, bike: int) -> int:
        """
        Make sure spots 1..car exist for cars followed by bike spots

        Existing spots are left untouched. Returns the number of spots added.
        """
        layout = [VehicleType.CAR] * car + [VehicleType.BIKE] * bike
        added = 0

        with session_scope(self.session_factory) as session:
            for number, vehicle_type in enumerate(layout, start=1):
                if session.get(ParkingSpotModel, number) is None:
                    session.add(ParkingSpotModel(
                        parking_number=number,
                        type=vehicle_type.value,
                        available=True
                    ))
                    added += 1

        self.logger.info(f"Provisioned {added} new spot(s) ({car} car, {bike} bike expected)")
        return added

    def clear_database_entries(self) -> None:
        """Delete every ticket and mark every spot available"""
        with session_scope(self.session_factory) as session:
            session.query(TicketModel).delete(synchronize_session=False)
            session.query(ParkingSpotModel).update({"available": True}, synchronize_session=False)
        self.logger.info("Database entries cleared")

    def create_parking_spot_repository(self) -> SQLAlchemyParkingSpotRepository:
        return SQLAlchemyParkingSpotRepository(self.session_factory)

    def create_ticket_repository(self) -> SQLAlchemyTicketRepository:
        return SQLAlchemyTicketRepository(self.session_factory)

    def dispose(self) -> None:
        self.engine.dispose()
