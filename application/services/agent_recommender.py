# application/services/agent_recommender.py
import asyncio
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from domain.models.capabilities import (
    completion_time_minutes,
    estimate_completion_time,
    parse_capability,
)
from domain.models.recommendation import (
    AgentPricing,
    AgentRecommendation,
    AgentRecord,
    AgentReputation,
    FilterCriteria,
    RecommendedAgent,
    SortKey,
)
from application.services.cost_estimator import round_half_up
from infrastructure.availability.oracle import AvailabilityOracle, StaticAvailabilityOracle
from infrastructure.storage.agent_store import AgentStore
from shared.logging import logger, log_recommendation

DEFAULT_MIN_SCORE = 70
DEFAULT_LIMIT = 10
DEFAULT_REPUTATION_SCORE = 50
DEFAULT_QUERY_TIMEOUT = 10.0

# Agents without a task price sort after every priced agent
MISSING_PRICE_SENTINEL = float("inf")

def star_rating(score: float) -> float:
    """Reputation 0-100 to stars 0-5, one decimal"""
    return round_half_up(score / 100 * 5, 1)

def success_rate(stars: float) -> int:
    return int(round_half_up(stars / 5 * 100))

def sort_agents(agents: Iterable[RecommendedAgent], sort_by: SortKey) -> List[RecommendedAgent]:
    """Stable ordering; ties keep store order"""
    if sort_by == SortKey.PRICE:
        return sorted(agents, key=lambda a: a.task_price if a.task_price is not None else MISSING_PRICE_SENTINEL)
    if sort_by == SortKey.SPEED:
        return sorted(agents, key=lambda a: completion_time_minutes(a.estimated_completion_time))
    return sorted(agents, key=lambda a: a.reputation.score, reverse=True)

class AgentRecommender:
    """Ranks agents from the store for a capability"""

    def __init__(self, store: AgentStore,
                 availability: Optional[AvailabilityOracle] = None,
                 query_timeout: float = DEFAULT_QUERY_TIMEOUT):
        self.store = store
        self.availability = availability or StaticAvailabilityOracle()
        self.query_timeout = query_timeout

    async def recommend(self, capability: str,
                        min_score: int = DEFAULT_MIN_SCORE,
                        limit: int = DEFAULT_LIMIT,
                        sort_by: SortKey = SortKey.REPUTATION) -> AgentRecommendation:
        """Recommendation for one capability; degrades to an empty result on any failure"""
        sort_by = SortKey(sort_by)
        raw_name = capability.value if hasattr(capability, "value") else str(capability)
        start_time = datetime.utcnow()

        parsed = parse_capability(raw_name)
        if parsed is None:
            logger.warning("Unknown capability requested", capability=raw_name)
            return AgentRecommendation.empty(raw_name, min_score, sort_by)
        capability_name = parsed.value

        try:
            records = await self.store.query_by_capability(
                capability_name, min_reputation=min_score, limit=limit
            )
            agents = [await self._to_recommended(record, capability_name) for record in records]
        except Exception as e:
            log_recommendation(
                capability=capability_name,
                min_score=min_score,
                limit=limit,
                sort_by=sort_by.value,
                total_found=0,
                execution_time_ms=_elapsed_ms(start_time),
                error_message=f"{type(e).__name__}: {e}"
            )
            return AgentRecommendation.empty(capability_name, min_score, sort_by)

        ranked = tuple(sort_agents(agents, sort_by))

        log_recommendation(
            capability=capability_name,
            min_score=min_score,
            limit=limit,
            sort_by=sort_by.value,
            total_found=len(ranked),
            execution_time_ms=_elapsed_ms(start_time)
        )

        return AgentRecommendation(
            capability=capability_name,
            agents=ranked,
            total_found=len(ranked),
            filter_criteria=FilterCriteria(min_score=min_score, sort_by=sort_by),
        )

    async def recommend_multiple(self, capabilities: Sequence[str],
                                 min_score: int = DEFAULT_MIN_SCORE,
                                 limit: int = DEFAULT_LIMIT,
                                 sort_by: SortKey = SortKey.REPUTATION) -> Dict[str, AgentRecommendation]:
        """One bounded recommend() per distinct capability, run concurrently"""
        sort_by = SortKey(sort_by)
        distinct: List[str] = []
        for capability in capabilities:
            raw_name = capability.value if hasattr(capability, "value") else str(capability)
            parsed = parse_capability(raw_name)
            # Case and whitespace variants collapse onto one vocabulary tag
            name = parsed.value if parsed else raw_name
            if name not in distinct:
                distinct.append(name)

        results = await asyncio.gather(*[
            self._recommend_with_timeout(name, min_score, limit, sort_by)
            for name in distinct
        ])
        return dict(zip(distinct, results))

    async def _recommend_with_timeout(self, capability: str, min_score: int,
                                      limit: int, sort_by: SortKey) -> AgentRecommendation:
        try:
            # wait_for cancels the pending query when the deadline passes
            return await asyncio.wait_for(
                self.recommend(capability, min_score=min_score, limit=limit, sort_by=sort_by),
                timeout=self.query_timeout
            )
        except asyncio.TimeoutError:
            logger.error("Agent recommendation timed out",
                         capability=capability,
                         timeout_seconds=self.query_timeout)
            return AgentRecommendation.empty(capability, min_score, sort_by)

    async def _to_recommended(self, record: AgentRecord, capability: str) -> RecommendedAgent:
        score = record.reputation_score if record.reputation_score is not None else DEFAULT_REPUTATION_SCORE
        stars = star_rating(score)

        return RecommendedAgent(
            agent_id=record.id,
            name=record.name,
            address=record.address,
            capabilities=tuple(record.capabilities),
            reputation=AgentReputation(
                score=score,
                stars=stars,
                review_count=record.total_missions or 0,
                success_rate=success_rate(stars),
            ),
            availability=await self.availability.get(record.id),
            pricing=AgentPricing(per_task=record.pricing_per_task) if record.pricing_per_task is not None else None,
            estimated_completion_time=estimate_completion_time(capability),
            avatar_url=record.avatar_url,
        )

def _elapsed_ms(start_time: datetime) -> int:
    return int((datetime.utcnow() - start_time).total_seconds() * 1000)
