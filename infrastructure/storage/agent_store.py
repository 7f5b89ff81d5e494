# infrastructure/storage/agent_store.py
import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol
import asyncpg
from domain.errors import PersistenceFailureError
from domain.models.recommendation import AgentRecord
from shared.logging import logger

class AgentStore(Protocol):
    """Read side of the agent registry used by the recommender"""

    async def query_by_capability(self, capability: str, min_reputation: int,
                                  limit: int) -> List[AgentRecord]:
        ...

def record_from_row(row: Any) -> AgentRecord:
    """Build an AgentRecord from an asyncpg Record or a plain mapping"""
    try:
        price = row["pricing_per_task"]
        return AgentRecord(
            id=str(row["id"]),
            name=row["name"],
            address=row["address"],
            capabilities=tuple(row["capabilities"] or ()),
            reputation_score=row["reputation_score"],
            total_missions=row["total_missions"],
            pricing_per_task=float(price) if price is not None else None,
            avatar_url=row["avatar_url"],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceFailureError(f"Malformed agent record: {e}") from e

class PostgresAgentStore:
    def __init__(self, database_url: str):
        self.database_url = database_url
        self.connection_pool: Optional[asyncpg.Pool] = None

    async def initialize(self):
        """Initialize database connection pool and create tables"""
        self.connection_pool = await asyncpg.create_pool(
            self.database_url,
            min_size=2,
            max_size=10,
            command_timeout=30
        )
        await self._create_tables()
        await self._create_indexes()

    async def _create_tables(self):
        async with self.connection_pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS agent_profiles (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    address TEXT UNIQUE NOT NULL,
                    capabilities TEXT[] NOT NULL DEFAULT '{}',
                    agent_type TEXT CHECK (agent_type IN ('ai', 'human', 'hybrid')),
                    reputation_score INTEGER DEFAULT 50
                        CHECK (reputation_score >= 0 AND reputation_score <= 100),
                    total_missions INTEGER DEFAULT 0 CHECK (total_missions >= 0),
                    pricing_per_task DECIMAL(18,6),
                    bio TEXT,
                    avatar_url TEXT,
                    endpoint_url TEXT,
                    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
                )
            """)

    async def _create_indexes(self):
        async with self.connection_pool.acquire() as conn:
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_agent_profiles_capabilities ON agent_profiles USING GIN(capabilities)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_agent_profiles_reputation ON agent_profiles(reputation_score DESC)")

    async def query_by_capability(self, capability: str, min_reputation: int,
                                  limit: int) -> List[AgentRecord]:
        """Agents advertising the capability with reputation >= min_reputation"""
        try:
            async with self.connection_pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT id, name, address, capabilities, reputation_score,
                           total_missions, pricing_per_task, avatar_url
                    FROM agent_profiles
                    WHERE capabilities @> ARRAY[$1]::TEXT[]
                      AND COALESCE(reputation_score, 50) >= $2
                    ORDER BY reputation_score DESC
                    LIMIT $3
                """, capability, min_reputation, limit)
        except (asyncpg.PostgresError, OSError) as e:
            raise PersistenceFailureError(f"Failed to search agents: {e}") from e

        return [record_from_row(row) for row in rows]

    async def upsert_agent(self, name: str, address: str, capabilities: List[str],
                           agent_type: str = "ai", pricing_per_task: Optional[float] = None,
                           reputation_score: int = 50, bio: Optional[str] = None,
                           avatar_url: Optional[str] = None,
                           endpoint_url: Optional[str] = None) -> str:
        """Create or update an agent keyed by wallet address; returns its id"""
        async with self.connection_pool.acquire() as conn:
            row = await conn.fetchrow("""
                INSERT INTO agent_profiles
                (id, name, address, capabilities, agent_type, pricing_per_task,
                 reputation_score, bio, avatar_url, endpoint_url)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                ON CONFLICT (address) DO UPDATE SET
                name = $2, capabilities = $4, agent_type = $5, pricing_per_task = $6,
                bio = $8, avatar_url = $9, endpoint_url = $10, updated_at = NOW()
                RETURNING id
            """, f"agent_{uuid.uuid4().hex[:16]}", name, address, capabilities, agent_type,
                pricing_per_task, reputation_score, bio, avatar_url, endpoint_url)

        logger.info("Agent upserted", agent_id=row["id"], name=name, address=address)
        return row["id"]

    async def ping(self) -> bool:
        async with self.connection_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return True

    async def close(self):
        """Close database connection pool"""
        if self.connection_pool:
            await self.connection_pool.close()
            logger.info("Database connection pool closed")

class InMemoryAgentStore:
    """Agent store over a fixed list of records, for local runs and tests"""

    def __init__(self, records: Iterable[AgentRecord] = ()):
        self.records: List[AgentRecord] = list(records)

    async def query_by_capability(self, capability: str, min_reputation: int,
                                  limit: int) -> List[AgentRecord]:
        matches = [
            record for record in self.records
            if capability in record.capabilities
            and (record.reputation_score if record.reputation_score is not None else 50) >= min_reputation
        ]
        matches.sort(key=lambda r: r.reputation_score if r.reputation_score is not None else 50, reverse=True)
        return matches[:max(limit, 0)]

    async def ping(self) -> bool:
        return True

    async def close(self):
        pass

# House agents seeded into a fresh registry
SEED_AGENTS: List[Dict[str, Any]] = [
    {
        "name": "LogoMaster AI",
        "address": "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
        "capabilities": ["logo-design", "graphic-design"],
        "pricing_per_task": 0.01,
        "reputation_score": 85,
        "bio": "AI-powered logo designer. Creates modern, minimalist logos in minutes.",
        "avatar_url": "https://api.dicebear.com/7.x/bottts/svg?seed=logomaster",
    },
    {
        "name": "CopyWriter AI",
        "address": "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        "capabilities": ["copywriting", "content-writing"],
        "pricing_per_task": 0.01,
        "reputation_score": 80,
        "bio": "Creates engaging taglines, brand copy, and marketing content.",
        "avatar_url": "https://api.dicebear.com/7.x/bottts/svg?seed=copywriter",
    },
    {
        "name": "SocialMedia AI",
        "address": "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
        "capabilities": ["social-media", "content-writing"],
        "pricing_per_task": 0.01,
        "reputation_score": 75,
        "bio": "Generates platform-optimized social posts with hashtags.",
        "avatar_url": "https://api.dicebear.com/7.x/bottts/svg?seed=socialmedia",
    },
]

def seed_records() -> List[AgentRecord]:
    return [
        AgentRecord(
            id=f"agent_seed_{index}",
            name=agent["name"],
            address=agent["address"],
            capabilities=tuple(agent["capabilities"]),
            reputation_score=agent["reputation_score"],
            total_missions=0,
            pricing_per_task=agent["pricing_per_task"],
            avatar_url=agent["avatar_url"],
        )
        for index, agent in enumerate(SEED_AGENTS, start=1)
    ]
