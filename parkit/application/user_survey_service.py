# File: parkit/application/user_survey_service.py
"""
User Survey Service

Answers questions about a vehicle's history at the facility. Currently the
only question asked is whether the vehicle belongs to a recurring user, i.e.
one that has completed at least one visit before.
"""

import logging

from ..infrastructure.repositories import TicketRepository


class UserSurveyService:
    """Service handling the lookup of data on users"""

    def __init__(self, ticket_repository: TicketRepository):
        self.ticket_repository = ticket_repository
        self.logger = logging.getLogger(self.__class__.__name__)

    def is_recurring_user(self, vehicle_reg_number: str) -> bool:
        """
        Check whether the vehicle has at least one completed visit

        A ticket without out time belongs to a vehicle that is still parked
        and does not count. An empty or missing history is a plain "no".
        """
        tickets = self.ticket_repository.get_all_tickets(vehicle_reg_number) or []

        recurring = any(ticket.out_time is not None for ticket in tickets)
        self.logger.debug(
            f"{vehicle_reg_number}: {len(tickets)} ticket(s), recurring={recurring}"
        )
        return recurring
