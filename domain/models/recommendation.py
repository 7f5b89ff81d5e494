# domain/models/recommendation.py
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
from enum import Enum

class SortKey(str, Enum):
    REPUTATION = "reputation"
    PRICE = "price"
    SPEED = "speed"

class Availability(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"

@dataclass(frozen=True)
class AgentRecord:
    """Read projection of a row in agent_profiles"""
    id: str
    name: str
    address: str
    capabilities: Tuple[str, ...]
    reputation_score: Optional[int] = None
    total_missions: Optional[int] = None
    pricing_per_task: Optional[float] = None
    avatar_url: Optional[str] = None

@dataclass(frozen=True)
class AgentReputation:
    score: int
    stars: float
    review_count: int
    success_rate: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "stars": self.stars,
            "reviewCount": self.review_count,
            "successRate": self.success_rate,
        }

@dataclass(frozen=True)
class AgentPricing:
    per_task: Optional[float] = None
    per_message: Optional[float] = None
    hourly_rate: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "perTask": self.per_task,
            "perMessage": self.per_message,
            "hourlyRate": self.hourly_rate,
        }

@dataclass(frozen=True)
class RecommendedAgent:
    """Immutable recommendation view of an agent record"""
    agent_id: str
    name: str
    address: str
    capabilities: Tuple[str, ...]
    reputation: AgentReputation
    availability: Availability
    pricing: Optional[AgentPricing] = None
    estimated_completion_time: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def task_price(self) -> Optional[float]:
        return self.pricing.per_task if self.pricing else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "name": self.name,
            "address": self.address,
            "capabilities": list(self.capabilities),
            "reputation": self.reputation.to_dict(),
            "pricing": self.pricing.to_dict() if self.pricing else None,
            "availability": self.availability.value,
            "estimatedCompletionTime": self.estimated_completion_time,
            "avatarUrl": self.avatar_url,
        }

@dataclass(frozen=True)
class FilterCriteria:
    min_score: int
    sort_by: SortKey

    def to_dict(self) -> Dict[str, Any]:
        return {"minScore": self.min_score, "sortBy": self.sort_by.value}

@dataclass(frozen=True)
class AgentRecommendation:
    """Ranked result set for one capability, recomputed per query"""
    capability: str
    agents: Tuple[RecommendedAgent, ...]
    total_found: int
    filter_criteria: FilterCriteria

    @classmethod
    def empty(cls, capability: str, min_score: int, sort_by: SortKey) -> "AgentRecommendation":
        return cls(
            capability=capability,
            agents=(),
            total_found=0,
            filter_criteria=FilterCriteria(min_score=min_score, sort_by=sort_by),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capability": self.capability,
            "agents": [agent.to_dict() for agent in self.agents],
            "totalFound": self.total_found,
            "filterCriteria": self.filter_criteria.to_dict(),
        }

@dataclass(frozen=True)
class CostLine:
    agent: str
    cost: float

@dataclass(frozen=True)
class CostEstimate:
    min: float
    max: float
    breakdown: Tuple[CostLine, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "breakdown": [{"agent": line.agent, "cost": line.cost} for line in self.breakdown],
        }
