# domain/models/intent.py
from dataclasses import dataclass
from typing import Dict, Any, Optional, List, Tuple
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from domain.models.capabilities import Capability

class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"

    @classmethod
    def for_capability_count(cls, count: int) -> "Complexity":
        if count <= 1:
            return cls.SIMPLE
        if count == 2:
            return cls.MODERATE
        return cls.COMPLEX

class AnalysisSource(str, Enum):
    MODEL = "model"
    KEYWORDS = "keywords"

@dataclass(frozen=True)
class BudgetRange:
    """Immutable cost range in USD"""
    min: float
    max: float

    def normalized(self) -> "BudgetRange":
        low = max(float(self.min), 0.0)
        high = max(float(self.max), 0.0)
        if low > high:
            low, high = high, low
        return BudgetRange(min=low, max=high)

    def __add__(self, other: "BudgetRange") -> "BudgetRange":
        return BudgetRange(min=self.min + other.min, max=self.max + other.max)

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.min, "max": self.max}

@dataclass(frozen=True)
class DetectedIntent:
    """One unit of work implied by a user message"""
    capabilities: Tuple[Capability, ...]
    complexity: Complexity
    estimated_agents: int
    suggested_budget: BudgetRange
    description: str
    requires_orchestration: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capabilities": [c.value for c in self.capabilities],
            "complexity": self.complexity.value,
            "estimatedAgents": self.estimated_agents,
            "suggestedBudget": self.suggested_budget.to_dict(),
            "description": self.description,
            "requiresOrchestration": self.requires_orchestration,
        }

@dataclass(frozen=True)
class CapabilityBreakdown:
    capability: Capability
    reasoning: str
    alternatives: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capability": self.capability.value,
            "reasoning": self.reasoning,
            "alternatives": list(self.alternatives),
        }

@dataclass(frozen=True)
class IntentAnalysis:
    """Immutable classification result for one message"""
    intents: Tuple[DetectedIntent, ...]
    total_estimated_cost: BudgetRange
    recommended_approach: str
    breakdown: Tuple[CapabilityBreakdown, ...]
    source: AnalysisSource = AnalysisSource.MODEL

    def unique_capabilities(self) -> List[Capability]:
        seen: List[Capability] = []
        for intent in self.intents:
            for capability in intent.capabilities:
                if capability not in seen:
                    seen.append(capability)
        return seen

    @property
    def requires_orchestration(self) -> bool:
        return any(intent.requires_orchestration for intent in self.intents)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intents": [intent.to_dict() for intent in self.intents],
            "totalEstimatedCost": self.total_estimated_cost.to_dict(),
            "recommendedApproach": self.recommended_approach,
            "breakdown": [item.to_dict() for item in self.breakdown],
            "source": self.source.value,
        }

# Pydantic models for validating text-generation output.
# Capabilities stay plain strings here; unknown values are filtered during conversion.
class BudgetPayload(BaseModel):
    min: float = Field(..., allow_inf_nan=False, description="Lower bound in USD")
    max: float = Field(..., allow_inf_nan=False, description="Upper bound in USD")

class DetectedIntentPayload(BaseModel):
    capabilities: List[str] = Field(default_factory=list)
    complexity: Complexity
    estimatedAgents: int = Field(default=1, ge=0)
    suggestedBudget: BudgetPayload
    description: str = ""
    requiresOrchestration: bool = False

    @field_validator("complexity", mode="before")
    @classmethod
    def _lowercase_complexity(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

class BreakdownPayload(BaseModel):
    capability: str
    reasoning: str = ""
    alternatives: Optional[List[str]] = None

class IntentResponsePayload(BaseModel):
    intents: List[DetectedIntentPayload] = Field(..., min_length=1)
    totalEstimatedCost: Optional[BudgetPayload] = None
    recommendedApproach: str = ""
    breakdown: List[BreakdownPayload] = Field(default_factory=list)
