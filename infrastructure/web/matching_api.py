# infrastructure/web/matching_api.py
from fastapi import APIRouter, HTTPException, Depends, Query, Request
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field

from domain.errors import InvalidInputError
from domain.models.recommendation import SortKey
from application.services.intent_classifier import IntentClassifier, build_agent_queries
from application.services.agent_recommender import AgentRecommender
from application.services.cost_estimator import total_cost
from application.orchestrators.matching_pipeline import MatchingPipeline
from shared.logging import logger

router = APIRouter(tags=["matching"])

# Dependency injection: components are attached to app.state during lifespan startup
def get_classifier(request: Request) -> IntentClassifier:
    return request.app.state.classifier

def get_recommender(request: Request) -> AgentRecommender:
    return request.app.state.recommender

def get_pipeline(request: Request) -> MatchingPipeline:
    return request.app.state.pipeline

class DetectIntentRequest(BaseModel):
    message: str = Field(..., max_length=5000)

class RecommendRequest(BaseModel):
    capabilities: List[str] = Field(..., description="Capabilities to find agents for")
    minScore: int = Field(default=70, ge=0, le=100)
    limit: int = Field(default=5, ge=1, le=50)
    sortBy: SortKey = Field(default=SortKey.REPUTATION)

class MatchRequest(BaseModel):
    message: str = Field(..., max_length=5000)
    minScore: int = Field(default=70, ge=0, le=100)
    limit: int = Field(default=5, ge=1, le=50)
    sortBy: SortKey = Field(default=SortKey.REPUTATION)

@router.post("/ai/detect-intent")
async def detect_intent(
    request: DetectIntentRequest,
    classifier: IntentClassifier = Depends(get_classifier)
):
    """Analyze a message to determine required agent capabilities"""

    try:
        analysis = await classifier.classify(request.message)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Failed to detect intent", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to detect intent: {str(e)}")

    capabilities = analysis.unique_capabilities()

    return {
        "success": True,
        "analysis": analysis.to_dict(),
        "recommendedAgents": build_agent_queries(capabilities),
        "summary": {
            "totalCapabilities": len(capabilities),
            "estimatedCost": analysis.total_estimated_cost.to_dict(),
            "complexity": analysis.intents[0].complexity.value,
            "requiresOrchestration": analysis.requires_orchestration,
        },
    }

@router.post("/agents/recommend")
async def recommend_agents(
    request: RecommendRequest,
    recommender: AgentRecommender = Depends(get_recommender)
):
    """Recommended agents for several capabilities"""

    if not request.capabilities:
        raise HTTPException(status_code=400, detail="capabilities array is required")

    try:
        recommendations = await recommender.recommend_multiple(
            request.capabilities,
            min_score=request.minScore,
            limit=request.limit,
            sort_by=request.sortBy
        )
    except Exception as e:
        logger.error("Failed to get agent recommendations", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to get agent recommendations: {str(e)}")

    all_agents = [agent for rec in recommendations.values() for agent in rec.agents]

    return {
        "success": True,
        "capabilities": request.capabilities,
        "recommendations": {k: v.to_dict() for k, v in recommendations.items()},
        "summary": {
            "totalCapabilities": len(recommendations),
            "totalAgentsFound": len(all_agents),
            "estimatedCost": total_cost(all_agents).to_dict(),
            "filterCriteria": {
                "minScore": request.minScore,
                "sortBy": request.sortBy.value,
                "limit": request.limit,
            },
        },
    }

@router.get("/agents/recommend")
async def recommend_single(
    capability: Optional[str] = None,
    minScore: int = Query(70, ge=0, le=100),
    limit: int = Query(5, ge=1, le=50),
    sortBy: SortKey = SortKey.REPUTATION,
    recommender: AgentRecommender = Depends(get_recommender)
) -> Dict[str, Any]:
    """Recommended agents for one capability; usage help without one"""

    if not capability:
        return {
            "endpoint": "/agents/recommend",
            "methods": {
                "POST": "Get recommendations for multiple capabilities",
                "GET": "Get recommendations for single capability (add ?capability=xxx)",
            },
            "usage": {
                "POST": {
                    "body": {
                        "capabilities": ["logo-design", "copywriting"],
                        "minScore": 70,
                        "limit": 5,
                        "sortBy": "reputation | price | speed",
                    },
                },
                "GET": "?capability=logo-design&minScore=80&limit=3",
            },
        }

    recommendation = await recommender.recommend(
        capability, min_score=minScore, limit=limit, sort_by=sortBy
    )
    return {"success": True, **recommendation.to_dict()}

@router.post("/match")
async def match_message(
    request: MatchRequest,
    pipeline: MatchingPipeline = Depends(get_pipeline)
):
    """Classify a message and recommend agents for every detected capability"""

    try:
        result = await pipeline.match(
            request.message,
            min_score=request.minScore,
            limit=request.limit,
            sort_by=request.sortBy
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Matching failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Matching failed: {str(e)}")

    return {"success": True, **result.to_dict()}
