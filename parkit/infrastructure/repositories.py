# File: parkit/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Park-It Parking System

Repositories give the application layer a collection-like interface to
parking spots and tickets while hiding the storage technology.

Repository Types:
1. ParkingSpotRepository - Spot allocation and availability updates
2. TicketRepository - Ticket creation, lookup and closing

Storage Implementations:
- InMemory*Repository - For testing and demos
- SQLAlchemy*Repository - For relational databases (SQLite, MySQL, PostgreSQL)

Write operations answer with a boolean: True only when exactly the expected
row was inserted or changed. Callers use this to detect lost updates.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Iterable, Iterator, Callable
from datetime import datetime
from decimal import Decimal
from dataclasses import replace
from contextlib import contextmanager
import logging

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, func
)
from sqlalchemy.orm import declarative_base, relationship, joinedload, Session
from sqlalchemy.exc import SQLAlchemyError

from ..domain.models import ParkingSpot, Ticket, VehicleType


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class ParkingSpotRepository(ABC):
    """Spot store used to allocate and release parking spots"""

    @abstractmethod
    def get_next_available_slot(self, vehicle_type: VehicleType) -> Optional[int]:
        """Return the lowest available spot number for the type, or None when full"""
        pass

    @abstractmethod
    def update_parking(self, parking_spot: ParkingSpot) -> bool:
        """Persist the availability of a spot"""
        pass

    @abstractmethod
    def get_spot(self, number: int) -> Optional[ParkingSpot]:
        """Get a spot by number"""
        pass

    @abstractmethod
    def add_spot(self, parking_spot: ParkingSpot) -> ParkingSpot:
        """Provision a new spot"""
        pass


class TicketRepository(ABC):
    """Ticket store; the source of truth for which vehicles are parked"""

    @abstractmethod
    def save_ticket(self, ticket: Ticket) -> bool:
        """Insert a new ticket and assign its id"""
        pass

    @abstractmethod
    def get_ticket(self, vehicle_reg_number: str) -> Optional[Ticket]:
        """Get the open ticket of a vehicle, or None if it is not parked"""
        pass

    @abstractmethod
    def update_ticket(self, ticket: Ticket) -> bool:
        """Store price and out time of a ticket that is still open"""
        pass

    @abstractmethod
    def get_all_tickets(self, vehicle_reg_number: str) -> List[Ticket]:
        """Get every ticket ever issued to a vehicle"""
        pass


# ============================================================================
# SQLALCHEMY ORM MODELS
# ============================================================================

Base = declarative_base()


class ParkingSpotModel(Base):
    """SQLAlchemy model for ParkingSpot"""
    __tablename__ = 'parking'

    parking_number = Column(Integer, primary_key=True, autoincrement=False)
    type = Column(String(10), nullable=False, index=True)
    available = Column(Boolean, nullable=False, default=True)

    tickets = relationship('TicketModel', back_populates='parking_spot')


class TicketModel(Base):
    """SQLAlchemy model for Ticket"""
    __tablename__ = 'ticket'

    id = Column(Integer, primary_key=True, autoincrement=True)
    parking_number = Column(Integer, ForeignKey('parking.parking_number'), nullable=False)
    vehicle_reg_number = Column(String(10), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    in_time = Column(DateTime, nullable=False)
    out_time = Column(DateTime, nullable=True)

    parking_spot = relationship('ParkingSpotModel', back_populates='tickets')


# ============================================================================
# DOMAIN <-> ORM MAPPERS
# ============================================================================

def _truncate_to_seconds(value: Optional[datetime]) -> Optional[datetime]:
    return value.replace(microsecond=0) if value is not None else None


class Mapper:
    """Maps between domain models and ORM models"""

    @staticmethod
    def parking_spot_to_orm(spot: ParkingSpot) -> ParkingSpotModel:
        return ParkingSpotModel(
            parking_number=spot.number,
            type=spot.vehicle_type.value,
            available=spot.available
        )

    @staticmethod
    def parking_spot_to_domain(model: ParkingSpotModel) -> ParkingSpot:
        return ParkingSpot(
            number=model.parking_number,
            vehicle_type=VehicleType(model.type),
            available=bool(model.available)
        )

    @staticmethod
    def ticket_to_orm(ticket: Ticket) -> TicketModel:
        return TicketModel(
            id=ticket.id,
            parking_number=ticket.parking_spot.number,
            vehicle_reg_number=ticket.vehicle_reg_number,
            price=ticket.price,
            in_time=_truncate_to_seconds(ticket.in_time),
            out_time=_truncate_to_seconds(ticket.out_time)
        )

    @staticmethod
    def ticket_to_domain(model: TicketModel) -> Ticket:
        # The spot of a stored ticket is reported as taken, as it was at issue time
        spot = ParkingSpot(
            number=model.parking_number,
            vehicle_type=VehicleType(model.parking_spot.type),
            available=False
        )
        return Ticket(
            id=model.id,
            parking_spot=spot,
            vehicle_reg_number=model.vehicle_reg_number,
            price=Decimal(str(model.price)),
            in_time=model.in_time,
            out_time=model.out_time
        )


# ============================================================================
# IN-MEMORY REPOSITORIES (For Testing)
# ============================================================================

class InMemoryParkingSpotRepository(ParkingSpotRepository):
    """In-memory spot store"""

    def __init__(self, spots: Optional[Iterable[ParkingSpot]] = None):
        self._storage: Dict[int, ParkingSpot] = {}
        self._logger = logging.getLogger(self.__class__.__name__)
        for spot in spots or []:
            self.add_spot(spot)

    def get_next_available_slot(self, vehicle_type: VehicleType) -> Optional[int]:
        numbers = [
            spot.number for spot in self._storage.values()
            if spot.vehicle_type == vehicle_type and spot.available
        ]
        return min(numbers) if numbers else None

    def update_parking(self, parking_spot: ParkingSpot) -> bool:
        if parking_spot.number not in self._storage:
            self._logger.warning(f"Spot {parking_spot.number} not found")
            return False

        self._storage[parking_spot.number].available = parking_spot.available
        self._logger.debug(f"Updated {parking_spot}")
        return True

    def get_spot(self, number: int) -> Optional[ParkingSpot]:
        spot = self._storage.get(number)
        return replace(spot) if spot else None

    def add_spot(self, parking_spot: ParkingSpot) -> ParkingSpot:
        if parking_spot.number in self._storage:
            raise ValueError(f"Spot {parking_spot.number} already exists")

        self._storage[parking_spot.number] = replace(parking_spot)
        return parking_spot


class InMemoryTicketRepository(TicketRepository):
    """In-memory ticket store"""

    def __init__(self):
        self._storage: Dict[int, Ticket] = {}
        self._next_id = 1
        self._logger = logging.getLogger(self.__class__.__name__)

    def save_ticket(self, ticket: Ticket) -> bool:
        ticket.id = self._next_id
        self._next_id += 1
        self._storage[ticket.id] = replace(ticket)
        self._logger.debug(f"Saved {ticket}")
        return True

    def get_ticket(self, vehicle_reg_number: str) -> Optional[Ticket]:
        open_tickets = [
            ticket for ticket in self._storage.values()
            if ticket.vehicle_reg_number == vehicle_reg_number and ticket.is_open
        ]
        if not open_tickets:
            return None

        latest = max(open_tickets, key=lambda t: (t.in_time, t.id))
        return replace(latest)

    def update_ticket(self, ticket: Ticket) -> bool:
        stored = self._storage.get(ticket.id)
        if stored is None or not stored.is_open:
            self._logger.warning(f"No open ticket with id {ticket.id}")
            return False

        self._storage[ticket.id] = replace(ticket)
        self._logger.debug(f"Updated {ticket}")
        return True

    def get_all_tickets(self, vehicle_reg_number: str) -> List[Ticket]:
        return [
            replace(ticket) for ticket in sorted(self._storage.values(), key=lambda t: t.id)
            if ticket.vehicle_reg_number == vehicle_reg_number
        ]


# ============================================================================
# SQLALCHEMY REPOSITORIES
# ============================================================================

@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations"""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class SQLAlchemyRepository(ABC):
    """Base SQLAlchemy repository; every call runs in its own session"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self._logger = logging.getLogger(self.__class__.__name__)

    def _session(self):
        return session_scope(self.session_factory)


class SQLAlchemyParkingSpotRepository(SQLAlchemyRepository, ParkingSpotRepository):
    """Repository for parking spots"""

    def get_next_available_slot(self, vehicle_type: VehicleType) -> Optional[int]:
        try:
            with self._session() as session:
                return session.query(func.min(ParkingSpotModel.parking_number)).filter(
                    ParkingSpotModel.type == vehicle_type.value,
                    ParkingSpotModel.available == True
                ).scalar()
        except SQLAlchemyError as e:
            self._logger.error(f"Error fetching next available slot: {e}", exc_info=True)
            raise

    def update_parking(self, parking_spot: ParkingSpot) -> bool:
        try:
            with self._session() as session:
                result = session.query(ParkingSpotModel).filter(
                    ParkingSpotModel.parking_number == parking_spot.number
                ).update({'available': parking_spot.available}, synchronize_session=False)
            return result == 1
        except SQLAlchemyError as e:
            self._logger.error(f"Error updating parking info: {e}", exc_info=True)
            return False

    def get_spot(self, number: int) -> Optional[ParkingSpot]:
        try:
            with self._session() as session:
                model = session.get(ParkingSpotModel, number)
                return Mapper.parking_spot_to_domain(model) if model else None
        except SQLAlchemyError as e:
            self._logger.error(f"Error fetching spot {number}: {e}", exc_info=True)
            raise

    def add_spot(self, parking_spot: ParkingSpot) -> ParkingSpot:
        try:
            with self._session() as session:
                session.add(Mapper.parking_spot_to_orm(parking_spot))
            self._logger.debug(f"Added {parking_spot}")
            return parking_spot
        except SQLAlchemyError as e:
            self._logger.error(f"Error adding spot: {e}", exc_info=True)
            raise


class SQLAlchemyTicketRepository(SQLAlchemyRepository, TicketRepository):
    """Repository for tickets"""

    def save_ticket(self, ticket: Ticket) -> bool:
        try:
            with self._session() as session:
                model = Mapper.ticket_to_orm(ticket)
                session.add(model)
                session.flush()
                ticket.id = model.id
            self._logger.debug(f"Saved {ticket}")
            return True
        except SQLAlchemyError as e:
            self._logger.error(f"Error saving ticket info: {e}", exc_info=True)
            return False

    def get_ticket(self, vehicle_reg_number: str) -> Optional[Ticket]:
        try:
            with self._session() as session:
                model = session.query(TicketModel).options(
                    joinedload(TicketModel.parking_spot)
                ).filter(
                    TicketModel.vehicle_reg_number == vehicle_reg_number,
                    TicketModel.out_time.is_(None)
                ).order_by(
                    TicketModel.in_time.desc(), TicketModel.id.desc()
                ).first()
                return Mapper.ticket_to_domain(model) if model else None
        except SQLAlchemyError as e:
            self._logger.error(f"Error fetching ticket info: {e}", exc_info=True)
            raise

    def update_ticket(self, ticket: Ticket) -> bool:
        if ticket.id is None or ticket.out_time is None:
            self._logger.error(f"Cannot update {ticket}: missing id or out time")
            return False

        try:
            with self._session() as session:
                result = session.query(TicketModel).filter(
                    TicketModel.id == ticket.id,
                    TicketModel.out_time.is_(None)
                ).update({
                    'price': ticket.price,
                    'out_time': _truncate_to_seconds(ticket.out_time)
                }, synchronize_session=False)
            return result == 1
        except SQLAlchemyError as e:
            self._logger.error(f"Error updating ticket info: {e}", exc_info=True)
            return False

    def get_all_tickets(self, vehicle_reg_number: str) -> List[Ticket]:
        try:
            with self._session() as session:
                models = session.query(TicketModel).options(
                    joinedload(TicketModel.parking_spot)
                ).filter(
                    TicketModel.vehicle_reg_number == vehicle_reg_number
                ).order_by(TicketModel.in_time, TicketModel.id).all()
                return [Mapper.ticket_to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Error fetching tickets: {e}", exc_info=True)
            raise
