# tests/unit/infrastructure/web/test_matching_api.py
import json
import pytest
from unittest.mock import AsyncMock
from fastapi import FastAPI
from fastapi.testclient import TestClient

from domain.errors import UpstreamUnavailableError
from application.services.intent_classifier import IntentClassifier
from application.services.agent_recommender import AgentRecommender
from application.orchestrators.matching_pipeline import MatchingPipeline
from infrastructure.storage.agent_store import InMemoryAgentStore, seed_records
from infrastructure.web.matching_api import router

@pytest.fixture
def llm_client():
    client = AsyncMock()
    client.complete.side_effect = UpstreamUnavailableError("offline")
    return client

@pytest.fixture
def client(llm_client):
    app = FastAPI()
    app.include_router(router)
    app.state.classifier = IntentClassifier(llm_client)
    app.state.recommender = AgentRecommender(InMemoryAgentStore(seed_records()))
    app.state.pipeline = MatchingPipeline(app.state.classifier, app.state.recommender)
    return TestClient(app)

class TestDetectIntentEndpoint:

    def test_keyword_fallback_response(self, client):
        response = client.post("/ai/detect-intent", json={
            "message": "Design a logo and tagline for my tech startup"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["analysis"]["intents"][0]["capabilities"] == ["logo-design", "copywriting"]
        assert data["summary"] == {
            "totalCapabilities": 2,
            "estimatedCost": {"min": 20.0, "max": 60.0},
            "complexity": "moderate",
            "requiresOrchestration": True,
        }
        assert [q["capability"] for q in data["recommendedAgents"]] == ["logo-design", "copywriting"]

    def test_model_response(self, client, llm_client):
        llm_client.complete.side_effect = None
        llm_client.complete.return_value = json.dumps({
            "intents": [{
                "capabilities": ["ui-ux-design"],
                "complexity": "simple",
                "estimatedAgents": 1,
                "suggestedBudget": {"min": 15, "max": 40},
                "description": "App mockups",
                "requiresOrchestration": False
            }],
            "recommendedApproach": "Single agent",
            "breakdown": []
        })

        response = client.post("/ai/detect-intent", json={"message": "Mock up my app screens"})

        assert response.status_code == 200
        assert response.json()["analysis"]["source"] == "model"
        assert response.json()["summary"]["estimatedCost"] == {"min": 15.0, "max": 40.0}

    def test_non_finite_model_budget_uses_keywords(self, client, llm_client):
        llm_client.complete.side_effect = None
        llm_client.complete.return_value = json.dumps({
            "intents": [{
                "capabilities": ["copywriting"],
                "complexity": "simple",
                "suggestedBudget": {"min": float("nan"), "max": float("inf")}
            }],
            "recommendedApproach": "Single agent",
            "breakdown": []
        })

        response = client.post("/ai/detect-intent", json={"message": "Write a slogan"})

        assert response.status_code == 200
        assert response.json()["analysis"]["source"] == "keywords"
        assert response.json()["summary"]["estimatedCost"] == {"min": 10, "max": 30}

    def test_blank_message_is_bad_request(self, client):
        response = client.post("/ai/detect-intent", json={"message": "   "})

        assert response.status_code == 400

    def test_missing_message_is_rejected(self, client):
        response = client.post("/ai/detect-intent", json={})

        assert response.status_code == 422

class TestRecommendEndpoints:

    def test_post_recommendations(self, client):
        response = client.post("/agents/recommend", json={
            "capabilities": ["logo-design", "copywriting"],
            "minScore": 70
        })

        assert response.status_code == 200
        data = response.json()
        assert set(data["recommendations"].keys()) == {"logo-design", "copywriting"}
        assert data["recommendations"]["logo-design"]["agents"][0]["name"] == "LogoMaster AI"
        assert data["summary"]["totalAgentsFound"] == 2
        assert data["summary"]["filterCriteria"] == {"minScore": 70, "sortBy": "reputation", "limit": 5}

    def test_empty_capabilities_is_bad_request(self, client):
        response = client.post("/agents/recommend", json={"capabilities": []})

        assert response.status_code == 400

    def test_invalid_sort_key_is_rejected(self, client):
        response = client.post("/agents/recommend", json={
            "capabilities": ["logo-design"], "sortBy": "alphabetical"
        })

        assert response.status_code == 422

    def test_get_single_capability(self, client):
        response = client.get("/agents/recommend", params={
            "capability": "content-writing", "minScore": 70, "limit": 5
        })

        assert response.status_code == 200
        data = response.json()
        assert data["capability"] == "content-writing"
        assert [a["name"] for a in data["agents"]] == ["CopyWriter AI", "SocialMedia AI"]
        assert data["totalFound"] == 2
        assert data["agents"][0]["reputation"] == {
            "score": 80, "stars": 4.0, "reviewCount": 0, "successRate": 80
        }

    @pytest.mark.parametrize("params", [
        {"limit": -1},
        {"limit": 0},
        {"limit": 51},
        {"minScore": -5},
        {"minScore": 101},
    ])
    def test_get_rejects_out_of_range_options(self, client, params):
        response = client.get("/agents/recommend", params={"capability": "content-writing", **params})

        assert response.status_code == 422

    def test_get_canonicalizes_capability(self, client):
        response = client.get("/agents/recommend", params={"capability": "Content-Writing"})

        assert response.status_code == 200
        assert response.json()["capability"] == "content-writing"
        assert response.json()["totalFound"] == 2

    def test_get_without_capability_returns_usage(self, client):
        response = client.get("/agents/recommend")

        assert response.status_code == 200
        assert response.json()["endpoint"] == "/agents/recommend"

class TestMatchEndpoint:

    def test_match(self, client):
        response = client.post("/match", json={"message": "Write a slogan"})

        assert response.status_code == 200
        data = response.json()
        assert list(data["recommendations"].keys()) == ["copywriting"]
        assert data["summary"]["totalAgentsFound"] == 1

    def test_blank_message_is_bad_request(self, client):
        response = client.post("/match", json={"message": ""})

        assert response.status_code == 400
