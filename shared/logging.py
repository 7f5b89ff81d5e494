# shared/logging.py
import structlog
import logging
import sys
from typing import Any, Dict, List, Optional

_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

# Configure structured logging
structlog.configure(
    processors=_SHARED_PROCESSORS + [structlog.processors.JSONRenderer()],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Get logger instance
logger = structlog.get_logger()

# Configure standard library logging
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=logging.INFO,
)

def setup_logging(level: str = "INFO", json_logs: bool = True):
    """Setup logging configuration"""
    log_level = getattr(logging, level.upper())
    logging.getLogger().setLevel(log_level)

    if not json_logs:
        # Use human-readable format for development
        structlog.configure(
            processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer()],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

def log_intent_classification(
    source: str,
    capabilities: List[str],
    complexity: str,
    execution_time_ms: int,
    fallback_reason: Optional[str] = None
):
    """Log the outcome of one classification call"""
    extra_data = {
        "source": source,
        "capabilities": capabilities,
        "complexity": complexity,
        "execution_time_ms": execution_time_ms,
    }

    if fallback_reason:
        extra_data["fallback_reason"] = fallback_reason
        logger.warning("Intent classified by keyword fallback", **extra_data)
    else:
        logger.info("Intent classified", **extra_data)

def log_recommendation(
    capability: str,
    min_score: int,
    limit: int,
    sort_by: str,
    total_found: int,
    execution_time_ms: int,
    error_message: Optional[str] = None
):
    """Log agent recommendation query results"""
    extra_data = {
        "capability": capability,
        "min_score": min_score,
        "limit": limit,
        "sort_by": sort_by,
        "total_found": total_found,
        "execution_time_ms": execution_time_ms,
    }

    if error_message:
        extra_data["error_message"] = error_message
        logger.error("Agent recommendation failed", **extra_data)
    else:
        logger.info("Agent recommendation completed", **extra_data)

def log_circuit_breaker_event(
    service_name: str,
    event_type: str,
    state: str,
    failure_count: int,
    additional_context: Optional[Dict[str, Any]] = None
):
    """Log circuit breaker state changes"""
    extra_data = {
        "service_name": service_name,
        "event_type": event_type,
        "circuit_state": state,
        "failure_count": failure_count
    }

    if additional_context:
        extra_data.update(additional_context)

    logger.info("Circuit breaker event", **extra_data)
