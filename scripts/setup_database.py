# scripts/setup_database.py
"""
Database setup script for the QUICKGIG matching service.
Creates the agent_profiles table and seeds the house agents.
"""

import asyncio
import os
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from infrastructure.storage.agent_store import PostgresAgentStore, SEED_AGENTS
from shared.logging import logger, setup_logging

async def seed_agents(store: PostgresAgentStore) -> int:
    """Upsert every house agent; returns how many succeeded"""
    seeded = 0
    for agent in SEED_AGENTS:
        try:
            await store.upsert_agent(**agent)
            seeded += 1
        except Exception as e:
            logger.error("Failed to seed agent", name=agent["name"], error=str(e))
    return seeded

async def main():
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), json_logs=False)

    database_url = os.getenv("DATABASE_URL", "postgresql://localhost:5432/quickgig")
    store = PostgresAgentStore(database_url)

    try:
        await store.initialize()
        logger.info("agent_profiles table ready")

        seeded = await seed_agents(store)
        logger.info("Seeding complete", seeded=seeded, total=len(SEED_AGENTS))
    finally:
        await store.close()

if __name__ == "__main__":
    asyncio.run(main())
