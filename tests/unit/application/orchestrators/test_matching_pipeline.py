# tests/unit/application/orchestrators/test_matching_pipeline.py
import pytest
from unittest.mock import AsyncMock

from domain.errors import InvalidInputError, UpstreamUnavailableError
from domain.models.intent import AnalysisSource
from domain.models.recommendation import AgentRecord
from application.services.intent_classifier import IntentClassifier
from application.services.agent_recommender import AgentRecommender
from application.orchestrators.matching_pipeline import MatchingPipeline
from infrastructure.storage.agent_store import InMemoryAgentStore

@pytest.fixture
def store():
    return InMemoryAgentStore([
        AgentRecord(id="logo-1", name="LogoMaster AI", address="0x1",
                    capabilities=("logo-design", "graphic-design"),
                    reputation_score=85, pricing_per_task=10.0),
        AgentRecord(id="copy-1", name="CopyWriter AI", address="0x2",
                    capabilities=("copywriting", "content-writing"),
                    reputation_score=80, pricing_per_task=20.0),
        AgentRecord(id="copy-2", name="Budget Copy", address="0x3",
                    capabilities=("copywriting",),
                    reputation_score=60, pricing_per_task=2.0),
    ])

@pytest.fixture
def offline_classifier():
    llm_client = AsyncMock()
    llm_client.complete.side_effect = UpstreamUnavailableError("offline")
    return IntentClassifier(llm_client)

class TestMatchingPipeline:
    """Test message -> recommendations flow"""

    @pytest.mark.asyncio
    async def test_logo_and_tagline_end_to_end(self, store, offline_classifier):
        pipeline = MatchingPipeline(offline_classifier, AgentRecommender(store))

        result = await pipeline.match("Design a logo and tagline for my tech startup")

        assert result.analysis.source == AnalysisSource.KEYWORDS
        assert list(result.recommendations.keys()) == ["logo-design", "copywriting"]
        assert [a.name for a in result.recommendations["logo-design"].agents] == ["LogoMaster AI"]
        # Budget Copy is below the default minimum score
        assert [a.name for a in result.recommendations["copywriting"].agents] == ["CopyWriter AI"]
        assert result.estimated_cost.min == pytest.approx(24)
        assert result.estimated_cost.max == pytest.approx(36)

    @pytest.mark.asyncio
    async def test_options_flow_to_recommender(self, store, offline_classifier):
        pipeline = MatchingPipeline(offline_classifier, AgentRecommender(store))

        result = await pipeline.match("Write a slogan", min_score=50, sort_by="price")

        copy = result.recommendations["copywriting"]
        assert [a.name for a in copy.agents] == ["Budget Copy", "CopyWriter AI"]
        assert result.total_agents_found == 2

    @pytest.mark.asyncio
    async def test_invalid_message_propagates(self, store, offline_classifier):
        pipeline = MatchingPipeline(offline_classifier, AgentRecommender(store))

        with pytest.raises(InvalidInputError):
            await pipeline.match("   ")

    @pytest.mark.asyncio
    async def test_result_serialization(self, store, offline_classifier):
        pipeline = MatchingPipeline(offline_classifier, AgentRecommender(store))

        data = (await pipeline.match("Design a logo")).to_dict()

        assert data["summary"]["totalCapabilities"] == 1
        assert data["summary"]["totalAgentsFound"] == 1
        assert data["summary"]["requiresOrchestration"] is False
        assert data["recommendations"]["logo-design"]["agents"][0]["agentId"] == "logo-1"
