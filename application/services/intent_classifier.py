# application/services/intent_classifier.py
"""
Intent classification for free-text work requests.

Two strategies, exactly one of which produces each result:

1. Model path: the text-generation service returns JSON in the
   IntentResponsePayload shape; anything outside the capability
   vocabulary is dropped on the way in.
2. Keyword path: deterministic substring matching against
   KEYWORD_TRIGGERS, used whenever the model path raises.
"""

import json
from datetime import datetime
from typing import Dict, Any, Optional, List, Protocol

from pydantic import ValidationError

from domain.errors import InvalidInputError, MalformedUpstreamResponseError
from domain.models.capabilities import (
    ALL_CAPABILITIES,
    DEFAULT_CAPABILITY,
    KEYWORD_TRIGGERS,
    Capability,
    parse_capability,
)
from domain.models.intent import (
    AnalysisSource,
    BudgetRange,
    CapabilityBreakdown,
    Complexity,
    DetectedIntent,
    IntentAnalysis,
    IntentResponsePayload,
)
from domain.models.recommendation import SortKey
from application.services.cost_estimator import keyword_budget, sum_budgets
from infrastructure.resilience.circuit_breaker import CircuitBreaker
from shared.logging import logger, log_intent_classification

CLASSIFIER_TEMPERATURE = 0.3

SYSTEM_PROMPT = f"""You are an expert at analyzing requests for the QUICKGIG autonomous agent platform.

Your task: Analyze user requests and identify what autonomous agents/capabilities are needed.

Available Capabilities:
{', '.join(c.value for c in ALL_CAPABILITIES)}

Response Format (JSON):
{{
  "intents": [{{
    "capabilities": ["capability1", "capability2"],
    "complexity": "simple|moderate|complex",
    "estimatedAgents": 1-5,
    "suggestedBudget": {{ "min": 5, "max": 50 }},
    "description": "Brief description",
    "requiresOrchestration": true/false
  }}],
  "totalEstimatedCost": {{ "min": 5, "max": 50 }},
  "recommendedApproach": "Sequential: logo first, then copy, then voice | Parallel: all at once",
  "breakdown": [{{
    "capability": "logo-design",
    "reasoning": "Why this capability is needed",
    "alternatives": ["other options if any"]
  }}]
}}

Examples:
- "Design a logo" -> {{"capabilities": ["logo-design"], "complexity": "simple", "estimatedAgents": 1}}
- "Create logo + tagline" -> {{"capabilities": ["logo-design", "copywriting"], "complexity": "moderate", "estimatedAgents": 2, "requiresOrchestration": true}}
- "Full brand package: logo, website, social media" -> {{"capabilities": ["logo-design", "web-development", "graphic-design", "copywriting"], "complexity": "complex", "estimatedAgents": 4, "requiresOrchestration": true}}

Only use capabilities from the list above.
Be specific, realistic with pricing, and identify if multiple agents need coordination."""


class TextGenerator(Protocol):
    async def complete(self, system_prompt: str, user_message: str,
                       response_format: Optional[str] = "json",
                       temperature: float = CLASSIFIER_TEMPERATURE) -> str:
        ...


class IntentClassifier:
    """Turns a user message into an IntentAnalysis"""

    def __init__(self, llm_client: TextGenerator, circuit_breaker: Optional[CircuitBreaker] = None):
        self.llm_client = llm_client
        self.circuit_breaker = circuit_breaker

    async def classify(self, message: str) -> IntentAnalysis:
        if not isinstance(message, str) or not message.strip():
            raise InvalidInputError("Message is required")

        start_time = datetime.utcnow()

        try:
            analysis = await self._classify_with_model(message)
        except Exception as e:
            analysis = classify_by_keywords(message)
            log_intent_classification(
                source=analysis.source.value,
                capabilities=[c.value for c in analysis.unique_capabilities()],
                complexity=analysis.intents[0].complexity.value,
                execution_time_ms=_elapsed_ms(start_time),
                fallback_reason=f"{type(e).__name__}: {e}"
            )
            return analysis

        log_intent_classification(
            source=analysis.source.value,
            capabilities=[c.value for c in analysis.unique_capabilities()],
            complexity=analysis.intents[0].complexity.value,
            execution_time_ms=_elapsed_ms(start_time)
        )
        return analysis

    async def _classify_with_model(self, message: str) -> IntentAnalysis:
        if self.circuit_breaker:
            raw = await self.circuit_breaker.call(self._complete, message)
        else:
            raw = await self._complete(message)
        return parse_model_analysis(raw)

    async def _complete(self, message: str) -> str:
        return await self.llm_client.complete(
            SYSTEM_PROMPT,
            message,
            response_format="json",
            temperature=CLASSIFIER_TEMPERATURE,
        )


def parse_model_analysis(raw: str) -> IntentAnalysis:
    """Validate model output and strip capabilities outside the vocabulary"""
    try:
        payload = IntentResponsePayload.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        raise MalformedUpstreamResponseError(f"Model output failed schema validation: {e}") from e

    intents: List[DetectedIntent] = []
    for item in payload.intents:
        capabilities = _known_capabilities(item.capabilities)
        if not capabilities:
            continue
        intents.append(DetectedIntent(
            capabilities=tuple(capabilities),
            complexity=item.complexity,
            estimated_agents=max(item.estimatedAgents, 1),
            suggested_budget=BudgetRange(min=item.suggestedBudget.min, max=item.suggestedBudget.max).normalized(),
            description=item.description,
            requires_orchestration=len(capabilities) > 1,
        ))

    if not intents:
        raise MalformedUpstreamResponseError("Model returned no capability from the vocabulary")

    breakdown = []
    for entry in payload.breakdown:
        capability = parse_capability(entry.capability)
        if capability is None:
            continue
        breakdown.append(CapabilityBreakdown(
            capability=capability,
            reasoning=entry.reasoning,
            alternatives=tuple(entry.alternatives or ()),
        ))

    dropped = sum(len(item.capabilities) for item in payload.intents) - sum(len(i.capabilities) for i in intents)
    if dropped:
        logger.warning("Dropped capabilities outside the vocabulary", dropped=dropped)

    return IntentAnalysis(
        intents=tuple(intents),
        # Recomputed so the aggregate always equals the sum of the intents
        total_estimated_cost=sum_budgets(i.suggested_budget for i in intents),
        recommended_approach=payload.recommendedApproach,
        breakdown=tuple(breakdown),
        source=AnalysisSource.MODEL,
    )


def classify_by_keywords(message: str) -> IntentAnalysis:
    """Deterministic keyword classification; never returns zero capabilities"""
    text = message.lower()
    detected: List[Capability] = [
        capability for capability, terms in KEYWORD_TRIGGERS.items()
        if any(term in text for term in terms)
    ]

    if not detected:
        detected.append(DEFAULT_CAPABILITY)

    count = len(detected)
    budget = keyword_budget(count)
    names = [c.value for c in detected]

    intent = DetectedIntent(
        capabilities=tuple(detected),
        complexity=Complexity.for_capability_count(count),
        estimated_agents=count,
        suggested_budget=budget,
        description=f"Requires {', '.join(names)} capabilities",
        requires_orchestration=count > 1,
    )

    return IntentAnalysis(
        intents=(intent,),
        total_estimated_cost=budget,
        recommended_approach="Sequential execution recommended" if count > 1 else "Single agent execution",
        breakdown=tuple(
            CapabilityBreakdown(capability=c, reasoning="Detected from keywords in request")
            for c in detected
        ),
        source=AnalysisSource.KEYWORDS,
    )


def build_agent_queries(capabilities: List[Capability], min_score: int = 70) -> List[Dict[str, Any]]:
    """Per-capability agent query a caller can hand to the recommender"""
    return [
        {
            "capability": capability.value,
            "agentQuery": {
                "capabilities": [capability.value],
                "minTrustScore": min_score,
                "sortBy": SortKey.REPUTATION.value,
            },
        }
        for capability in capabilities
    ]


def _known_capabilities(values: List[str]) -> List[Capability]:
    result: List[Capability] = []
    for value in values:
        capability = parse_capability(value)
        if capability is not None and capability not in result:
            result.append(capability)
    return result


def _elapsed_ms(start_time: datetime) -> int:
    return int((datetime.utcnow() - start_time).total_seconds() * 1000)
