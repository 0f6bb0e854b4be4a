"""Tests for explain_with_fallback and the explainer circuit breaker."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from riskradar.engine.scorer import analyze_token
from riskradar.errors import ExplainerError, ExplainerTimeoutError
from riskradar.explain.fallback import Explanation, TokenSummary
from riskradar.explain.service import CircuitState, ExplainerCircuitBreaker, explain_with_fallback

LLM_EXPLANATION = Explanation(
    overview="llm overview",
    key_insights=("a",),
    risk_analysis="llm analysis",
    recommendation="llm recommendation",
    technical_details="",
    calculation_breakdown="",
    generated_by="llm",
)


def _make_client(**explain_kwargs) -> MagicMock:
    client = MagicMock()
    client.explain = AsyncMock(**explain_kwargs)
    return client


@pytest.fixture
def scored(risky_new_token, now):
    return analyze_token(risky_new_token, now=now), TokenSummary.from_token(risky_new_token)


class TestExplainWithFallback:
    @pytest.mark.asyncio
    async def test_no_client_uses_template(self, scored) -> None:
        result, summary = scored
        e = await explain_with_fallback(result, summary)
        assert e.generated_by == "fallback"

    @pytest.mark.asyncio
    async def test_llm_success(self, scored) -> None:
        result, summary = scored
        breaker = ExplainerCircuitBreaker(threshold=2)
        client = _make_client(return_value=LLM_EXPLANATION)

        e = await explain_with_fallback(result, summary, client=client, breaker=breaker)

        assert e is LLM_EXPLANATION
        client.explain.assert_awaited_once_with(result, summary)
        assert breaker.total_failures == 0

    @pytest.mark.asyncio
    async def test_explainer_error_falls_back(self, scored) -> None:
        result, summary = scored
        breaker = ExplainerCircuitBreaker(threshold=3)
        client = _make_client(side_effect=ExplainerError("HTTP 500"))

        e = await explain_with_fallback(result, summary, client=client, breaker=breaker)

        assert e.generated_by == "fallback"
        assert breaker.total_failures == 1

    @pytest.mark.asyncio
    async def test_client_timeout_error_falls_back(self, scored) -> None:
        result, summary = scored
        client = _make_client(side_effect=ExplainerTimeoutError("slow"))
        e = await explain_with_fallback(result, summary, client=client)
        assert e.generated_by == "fallback"

    @pytest.mark.asyncio
    async def test_slow_client_cut_off(self, scored) -> None:
        result, summary = scored

        async def _hang(*args):
            await asyncio.sleep(10)
            return LLM_EXPLANATION

        client = MagicMock()
        client.explain = _hang
        breaker = ExplainerCircuitBreaker(threshold=3)

        e = await explain_with_fallback(result, summary, client=client, breaker=breaker, timeout_sec=0.01)

        assert e.generated_by == "fallback"
        assert breaker.total_failures == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self, scored) -> None:
        result, summary = scored
        client = _make_client(side_effect=RuntimeError("boom"))
        e = await explain_with_fallback(result, summary, client=client)
        assert e.generated_by == "fallback"

    @pytest.mark.asyncio
    async def test_open_breaker_skips_client(self, scored) -> None:
        result, summary = scored
        breaker = ExplainerCircuitBreaker(threshold=1, cooldown_sec=60)
        breaker.record_failure("earlier")
        client = _make_client(return_value=LLM_EXPLANATION)

        e = await explain_with_fallback(result, summary, client=client, breaker=breaker)

        assert e.generated_by == "fallback"
        client.explain.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repeated_failures_open_breaker(self, scored) -> None:
        result, summary = scored
        breaker = ExplainerCircuitBreaker(threshold=2, cooldown_sec=60)
        client = _make_client(side_effect=ExplainerError("down"))

        for _ in range(4):
            await explain_with_fallback(result, summary, client=client, breaker=breaker)

        assert breaker.is_open is True
        assert client.explain.await_count == 2


class TestExplainerCircuitBreaker:
    def test_closed_initially(self) -> None:
        cb = ExplainerCircuitBreaker()
        assert cb.is_open is False
        assert cb.seconds_until_reset == 0.0
        assert cb.total_failures == 0

    def test_opens_after_threshold(self) -> None:
        cb = ExplainerCircuitBreaker(threshold=3, cooldown_sec=60)
        cb.record_failure("e1")
        cb.record_failure("e2")
        assert cb.is_open is False
        cb.record_failure("e3")
        assert cb.is_open is True
        assert 0 < cb.seconds_until_reset <= 60

    def test_success_resets_consecutive_count(self) -> None:
        cb = ExplainerCircuitBreaker(threshold=2)
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.is_open is False
        assert cb.total_failures == 2

    def test_closes_after_cooldown(self) -> None:
        cb = ExplainerCircuitBreaker(threshold=1, cooldown_sec=10)
        cb.record_failure("trip")
        assert cb.is_open is True

        opened_at = cb._opened_at
        with patch("riskradar.explain.service.time") as mock_time:
            mock_time.monotonic.return_value = opened_at + 11
            assert cb.is_open is False
            assert cb.seconds_until_reset == 0.0

    def test_from_settings(self) -> None:
        cb = ExplainerCircuitBreaker.from_settings()
        assert cb.is_open is False

    def test_failed_trial_reopens_immediately(self) -> None:
        cb = ExplainerCircuitBreaker(threshold=3, cooldown_sec=10)
        for _ in range(3):
            cb.record_failure("down")
        opened_at = cb._opened_at

        with patch("riskradar.explain.service.time") as mock_time:
            mock_time.monotonic.return_value = opened_at + 11
            assert cb.state == CircuitState.HALF_OPEN
            cb.record_failure("still down")
            assert cb.state == CircuitState.OPEN
            assert cb.seconds_until_reset == 10

    def test_successful_trial_closes(self) -> None:
        cb = ExplainerCircuitBreaker(threshold=1, cooldown_sec=10)
        cb.record_failure("down")
        opened_at = cb._opened_at

        with patch("riskradar.explain.service.time") as mock_time:
            mock_time.monotonic.return_value = opened_at + 11
            assert cb.state == CircuitState.HALF_OPEN
            cb.record_success()

        assert cb.state == CircuitState.CLOSED
        assert cb.seconds_until_reset == 0.0
        cb.record_failure("blip")
        assert cb.is_open is True
