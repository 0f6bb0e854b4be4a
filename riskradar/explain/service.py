"""Explanation with graceful degradation.

The generative explainer is optional. Whatever happens to it (disabled,
slow, erroring, circuit open) the caller still gets an Explanation.
"""

import asyncio
import time
from enum import Enum

from loguru import logger

from config.settings import settings
from riskradar.errors import ExplainerError
from riskradar.explain.fallback import Explanation, TokenSummary, explain_result
from riskradar.explain.llm_client import LLMExplainerClient
from riskradar.models.risk import RiskResult


class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class ExplainerCircuitBreaker:
    """Skips the LLM explainer after repeated failures.

    CLOSED trips to OPEN after `threshold` consecutive failures. Once the
    cooldown has passed the breaker is HALF_OPEN: the next call is a trial,
    and that one outcome decides between CLOSED and OPEN again.
    """

    def __init__(
        self,
        *,
        threshold: int = 3,
        cooldown_sec: int = 300,
    ) -> None:
        self._threshold = threshold
        self._cooldown_sec = cooldown_sec
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: float | None = None
        self._total_failures = 0

    @classmethod
    def from_settings(cls) -> "ExplainerCircuitBreaker":
        return cls(
            threshold=settings.explainer_circuit_threshold,
            cooldown_sec=settings.explainer_circuit_cooldown_sec,
        )

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self.seconds_until_reset == 0.0:
            self._state = CircuitState.HALF_OPEN
            logger.info("[CIRCUIT] Cooldown over, next explanation is a trial LLM call")
        return self._state

    @property
    def is_open(self) -> bool:
        """True while LLM calls should be skipped."""
        return self.state == CircuitState.OPEN

    @property
    def seconds_until_reset(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(self._cooldown_sec - (time.monotonic() - self._opened_at), 0.0)

    @property
    def total_failures(self) -> int:
        return self._total_failures

    def record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("[CIRCUIT] Trial LLM call succeeded, circuit closed")
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = None

    def record_failure(self, error: str = "") -> None:
        self._consecutive_failures += 1
        self._total_failures += 1
        logger.warning(
            f"[CIRCUIT] Explainer failure #{self._consecutive_failures}/{self._threshold}: {error}"
        )
        if self._state == CircuitState.HALF_OPEN:
            self._trip("trial call failed")
        elif self._state == CircuitState.CLOSED and self._consecutive_failures >= self._threshold:
            self._trip(f"{self._consecutive_failures} consecutive failures")

    def _trip(self, why: str) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()
        logger.warning(
            f"[CIRCUIT] OPEN ({why}): template explanations for {self._cooldown_sec}s, "
            f"{self._total_failures} failures so far"
        )


def create_explainer_client() -> LLMExplainerClient | None:
    """Client from settings, or None when the LLM explainer is disabled."""
    if not settings.enable_llm_explainer:
        return None
    if not settings.openrouter_api_key:
        logger.warning("[EXPLAIN] LLM explainer enabled but OPENROUTER_API_KEY is empty")
        return None
    return LLMExplainerClient(
        api_key=settings.openrouter_api_key,
        model=settings.llm_model,
        max_rps=settings.llm_max_rps,
        timeout=settings.llm_timeout_sec,
    )


async def explain_with_fallback(
    result: RiskResult,
    summary: TokenSummary,
    client: LLMExplainerClient | None = None,
    breaker: ExplainerCircuitBreaker | None = None,
    timeout_sec: float | None = None,
) -> Explanation:
    """LLM explanation when available, deterministic template otherwise. Never raises."""
    fallback = explain_result(result, summary)
    if client is None:
        return fallback
    if breaker is not None and breaker.is_open:
        logger.debug(
            f"[EXPLAIN] Circuit open ({breaker.seconds_until_reset:.0f}s left), using template"
        )
        return fallback

    timeout = timeout_sec if timeout_sec is not None else settings.llm_timeout_sec
    try:
        explanation = await asyncio.wait_for(client.explain(result, summary), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"[EXPLAIN] LLM explainer exceeded {timeout}s, using template")
        if breaker is not None:
            breaker.record_failure(f"timeout after {timeout}s")
        return fallback
    except ExplainerError as e:
        logger.warning(f"[EXPLAIN] LLM explainer failed ({type(e).__name__}: {e}), using template")
        if breaker is not None:
            breaker.record_failure(str(e))
        return fallback
    except Exception as e:
        logger.warning(f"[EXPLAIN] Unexpected explainer error: {e}, using template")
        if breaker is not None:
            breaker.record_failure(f"{type(e).__name__}: {e}")
        return fallback

    if breaker is not None:
        breaker.record_success()
    return explanation
