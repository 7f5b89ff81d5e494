# shared/config.py
import os
from dataclasses import dataclass
from typing import Optional

def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"

@dataclass(frozen=True)
class Settings:
    """Process configuration read from the environment"""
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    llm_timeout_seconds: float = 30.0
    database_url: Optional[str] = None
    recommend_query_timeout: float = 10.0
    log_level: str = "INFO"
    json_logs: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
            openrouter_model=os.getenv("OPENROUTER_MODEL", cls.openrouter_model),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", cls.openrouter_base_url),
            llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
            # Unset means the in-memory store with the house agents
            database_url=os.getenv("DATABASE_URL") or None,
            recommend_query_timeout=float(os.getenv("RECOMMEND_QUERY_TIMEOUT", "10")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=_env_flag("JSON_LOGS", "true"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            reload=_env_flag("RELOAD", "false"),
        )
