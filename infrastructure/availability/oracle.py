# infrastructure/availability/oracle.py
from typing import Protocol

from domain.models.recommendation import Availability

class AvailabilityOracle(Protocol):
    """Real-time agent status source"""

    async def get(self, agent_id: str) -> Availability:
        ...

class StaticAvailabilityOracle:
    """Reports every agent as available; no live status feed is wired in yet"""

    def __init__(self, status: Availability = Availability.AVAILABLE):
        self.status = status

    async def get(self, agent_id: str) -> Availability:
        return self.status
