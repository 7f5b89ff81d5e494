# application/orchestrators/matching_pipeline.py
from dataclasses import dataclass
from typing import Dict, Any

from domain.models.intent import IntentAnalysis
from domain.models.recommendation import AgentRecommendation, CostEstimate, SortKey
from application.services.intent_classifier import IntentClassifier
from application.services.agent_recommender import AgentRecommender, DEFAULT_LIMIT, DEFAULT_MIN_SCORE
from application.services.cost_estimator import total_cost
from shared.logging import logger

@dataclass(frozen=True)
class MatchResult:
    """Classification plus per-capability recommendations for one message"""
    analysis: IntentAnalysis
    recommendations: Dict[str, AgentRecommendation]
    estimated_cost: CostEstimate

    @property
    def total_agents_found(self) -> int:
        return sum(r.total_found for r in self.recommendations.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "recommendations": {k: v.to_dict() for k, v in self.recommendations.items()},
            "summary": {
                "totalCapabilities": len(self.recommendations),
                "totalAgentsFound": self.total_agents_found,
                "estimatedCost": self.estimated_cost.to_dict(),
                "requiresOrchestration": self.analysis.requires_orchestration,
            },
        }

class MatchingPipeline:
    """Message -> capabilities -> ranked agents -> cost estimate"""

    def __init__(self, classifier: IntentClassifier, recommender: AgentRecommender):
        self.classifier = classifier
        self.recommender = recommender

    async def match(self, message: str,
                    min_score: int = DEFAULT_MIN_SCORE,
                    limit: int = DEFAULT_LIMIT,
                    sort_by: SortKey = SortKey.REPUTATION) -> MatchResult:
        analysis = await self.classifier.classify(message)
        capabilities = [c.value for c in analysis.unique_capabilities()]

        recommendations = await self.recommender.recommend_multiple(
            capabilities, min_score=min_score, limit=limit, sort_by=sort_by
        )

        all_agents = [agent for rec in recommendations.values() for agent in rec.agents]
        result = MatchResult(
            analysis=analysis,
            recommendations=recommendations,
            estimated_cost=total_cost(all_agents),
        )

        logger.info("Matching completed",
                    capabilities=capabilities,
                    source=analysis.source.value,
                    agents_found=result.total_agents_found)
        return result
