# main.py
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from fastapi import FastAPI, Request

# Internal imports
from application.services.intent_classifier import IntentClassifier
from application.services.agent_recommender import AgentRecommender
from application.orchestrators.matching_pipeline import MatchingPipeline
from infrastructure.availability.oracle import StaticAvailabilityOracle
from infrastructure.llm.openrouter_client import OpenRouterClient
from infrastructure.resilience.circuit_breaker import CircuitBreakerRegistry, CircuitBreakerConfig
from infrastructure.storage.agent_store import InMemoryAgentStore, PostgresAgentStore, seed_records
from infrastructure.web.matching_api import router as matching_router
from shared.config import Settings
from shared.logging import logger, setup_logging

VERSION = "1.0.0"

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""

    settings = Settings.from_env()

    # Setup logging
    setup_logging(level=settings.log_level, json_logs=settings.json_logs)
    logger.info("Starting QUICKGIG matching service", version=VERSION)

    try:
        if settings.database_url:
            store = PostgresAgentStore(settings.database_url)
            await store.initialize()
        else:
            logger.warning("DATABASE_URL not set, serving house agents from memory")
            store = InMemoryAgentStore(seed_records())
        app.state.store = store

        circuit_breaker_registry = CircuitBreakerRegistry()
        app.state.circuit_breaker_registry = circuit_breaker_registry

        llm_breaker = circuit_breaker_registry.get_breaker(
            "openrouter",
            CircuitBreakerConfig(
                failure_threshold=3,
                recovery_timeout=timedelta(minutes=1),
                timeout_seconds=settings.llm_timeout_seconds
            )
        )

        llm_client = OpenRouterClient(
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
            timeout=settings.llm_timeout_seconds
        )

        app.state.classifier = IntentClassifier(llm_client, llm_breaker)
        app.state.recommender = AgentRecommender(
            store,
            availability=StaticAvailabilityOracle(),
            query_timeout=settings.recommend_query_timeout
        )
        app.state.pipeline = MatchingPipeline(app.state.classifier, app.state.recommender)

        logger.info("Application initialized successfully")

    except Exception as e:
        logger.error("Failed to initialize application", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down QUICKGIG matching service")
    await app.state.store.close()

# Create FastAPI app
app = FastAPI(
    title="QUICKGIG Matching Service",
    description="Intent detection and agent recommendation for QUICKGIG bounties",
    version=VERSION,
    lifespan=lifespan
)

app.include_router(matching_router)

@app.get("/health")
async def health_check(request: Request):
    """System health check"""

    try:
        await request.app.state.store.ping()

        circuit_status = request.app.state.circuit_breaker_registry.get_all_status()
        open_circuits = [name for name, status in circuit_status.items()
                         if status["state"] == "open"]

        # An open LLM circuit still serves keyword classification
        health_status = "healthy" if not open_circuits else "degraded"

        return {
            "status": health_status,
            "database": "connected",
            "circuit_breakers": circuit_status,
            "open_circuits": open_circuits,
            "version": VERSION,
            "timestamp": datetime.utcnow().isoformat()
        }

    except Exception as e:
        logger.error("Health check failed", error=str(e))
        return {
            "status": "unhealthy",
            "error": str(e),
            "timestamp": datetime.utcnow().isoformat()
        }

@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "service": "QUICKGIG Matching Service",
        "description": "Turns work requests into capabilities and ranked agents",
        "features": [
            "LLM intent detection with keyword fallback",
            "Reputation, price and speed ranking",
            "Concurrent per-capability recommendation with timeouts",
            "Cost estimation"
        ],
        "endpoints": {
            "detect_intent": "POST /ai/detect-intent",
            "recommend": "POST /agents/recommend",
            "recommend_single": "GET /agents/recommend?capability=...",
            "match": "POST /match",
            "health_check": "GET /health"
        }
    }

if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload
    )
