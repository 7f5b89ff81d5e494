# infrastructure/resilience/circuit_breaker.py
from enum import Enum
from datetime import datetime, timedelta
from typing import Callable, Any, Optional, Dict
import asyncio
from dataclasses import dataclass
from domain.errors import UpstreamUnavailableError
from shared.logging import log_circuit_breaker_event

class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5
    recovery_timeout: timedelta = timedelta(minutes=1)
    success_threshold: int = 2
    timeout_seconds: float = 30.0

class CircuitBreakerRegistry:
    """Process-wide registry handing out one breaker per upstream service"""

    def __init__(self):
        self.breakers: Dict[str, 'CircuitBreaker'] = {}

    def get_breaker(self, service_name: str, config: CircuitBreakerConfig) -> 'CircuitBreaker':
        if service_name not in self.breakers:
            self.breakers[service_name] = CircuitBreaker(service_name, config)
        return self.breakers[service_name]

    def get_all_status(self) -> Dict[str, Dict[str, Any]]:
        return {name: breaker.get_status() for name, breaker in self.breakers.items()}

class CircuitBreaker:
    def __init__(self, service_name: str, config: CircuitBreakerConfig):
        self.service_name = service_name
        self.config = config
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.success_count = 0

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._transition(CircuitState.HALF_OPEN, "half_open_probe")
                self.success_count = 0
            else:
                raise CircuitOpenError(f"Circuit breaker for {self.service_name} is OPEN")

        try:
            result = await asyncio.wait_for(
                func(*args, **kwargs),
                timeout=self.config.timeout_seconds
            )
        except Exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _should_attempt_reset(self) -> bool:
        if not self.last_failure_time:
            return False
        return datetime.utcnow() - self.last_failure_time > self.config.recovery_timeout

    def _on_success(self):
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.config.success_threshold:
                self.failure_count = 0
                self._transition(CircuitState.CLOSED, "recovered")
        elif self.state == CircuitState.CLOSED and self.failure_count > 0:
            self.failure_count = 0

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.utcnow()

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.config.failure_threshold:
            if self.state != CircuitState.OPEN:
                self._transition(CircuitState.OPEN, "tripped")

    def _transition(self, state: CircuitState, event_type: str):
        self.state = state
        log_circuit_breaker_event(
            service_name=self.service_name,
            event_type=event_type,
            state=state.value,
            failure_count=self.failure_count
        )

    def get_status(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None,
            "success_count": self.success_count
        }

    def force_open(self):
        """Manually open circuit breaker for testing or emergency"""
        self.last_failure_time = datetime.utcnow()
        self._transition(CircuitState.OPEN, "forced_open")

    def force_close(self):
        """Manually close circuit breaker for testing or recovery"""
        self.failure_count = 0
        self.success_count = 0
        self._transition(CircuitState.CLOSED, "forced_closed")

class CircuitOpenError(UpstreamUnavailableError):
    pass
