"""Generative risk explanation via OpenRouter.

Uses Gemini 2.5 Flash Lite by default: cheap and ~1s latency, fine for
turning an already-computed score into prose. The model never sees raw
provider data and never changes the score; the calculation breakdown is
always the deterministic one.

No retries here. The caller bounds the call with a timeout and falls
back to the template explanation on any ExplainerError.
"""

import json

import httpx
from loguru import logger

from riskradar.errors import ExplainerError, ExplainerTimeoutError
from riskradar.explain.fallback import Explanation, TokenSummary, explain_result
from riskradar.explain.rate_limiter import RateLimiter
from riskradar.models.risk import RiskResult

MAX_PROMPT_FLAGS = 5


class LLMExplainerClient:
    """Risk explanation via OpenRouter chat completions."""

    BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: str,
        model: str = "google/gemini-2.5-flash-lite",
        max_rps: float = 2.0,
        timeout: float = 10.0,
    ) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._model = model
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    async def explain(self, result: RiskResult, summary: TokenSummary) -> Explanation:
        """Ask the model to narrate a finished RiskResult.

        Raises ExplainerTimeoutError on transport timeouts and
        ExplainerError on any other HTTP or parse failure.
        """
        prompt = self._build_prompt(result, summary)
        await self._rate_limiter.acquire()
        try:
            resp = await self._client.post(
                "/chat/completions",
                json={
                    "model": self._model,
                    "messages": [{"role": "user", "content": prompt}],
                    "max_tokens": 600,
                    "temperature": 0.2,
                },
            )
        except httpx.TimeoutException as e:
            raise ExplainerTimeoutError(f"OpenRouter timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ExplainerError(f"OpenRouter request failed: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            logger.debug(f"[LLM] API error: {resp.status_code} {resp.text[:200]}")
            raise ExplainerError(f"OpenRouter returned HTTP {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExplainerError(f"Unexpected OpenRouter response shape: {e}") from e

        breakdown = explain_result(result, summary).calculation_breakdown
        return self._parse_response(content or "", breakdown)

    def _build_prompt(self, result: RiskResult, summary: TokenSummary) -> str:
        context = [
            f"Token: {summary.name} ({summary.symbol}) on {summary.chain}",
            f"Risk score: {result.overall_risk_score}/100 ({result.risk_level.value})",
            f"Base score before overrides: {result.calculated_score}",
            f"Confidence: {result.confidence_score}% (data tier {result.data_tier.value})",
        ]
        if summary.market_cap is not None:
            context.append(f"Market cap: ${summary.market_cap:,.0f}")
        if summary.liquidity_usd is not None:
            context.append(f"Liquidity: ${summary.liquidity_usd:,.0f}")
        if summary.holder_count is not None:
            context.append(f"Holders: {summary.holder_count:,}")
        if summary.age_days is not None:
            context.append(f"Age: {summary.age_days:g} days")
        context.append("Factor scores (0 safe - 100 risky), weight, contribution:")
        context += [
            f"- {c.name.label}: {c.score}, {c.weight:.0%}, {c.contribution:.1f}" for c in result.contributions
        ]
        if result.critical_flags:
            context.append("Critical flags: " + "; ".join(result.critical_flags[:MAX_PROMPT_FLAGS]))
        if result.warning_flags:
            context.append("Warnings: " + "; ".join(result.warning_flags[:MAX_PROMPT_FLAGS]))
        if result.override_reason:
            context.append(f"Overrides: {result.override_reason}")

        token_context = "\n".join(context)
        return f"""Explain this crypto token risk assessment to a retail investor. Be concise and factual.
Do not change or recompute the score.

ASSESSMENT:
{token_context}

Respond in this EXACT JSON format (no markdown):
{{"overview": "2 sentences", "key_insights": ["insight1", ...], "risk_analysis": "3-4 sentences", "recommendation": "1-2 sentences", "technical_details": "1-2 sentences"}}

Rules:
- At most 4 key insights, highest-risk factors first
- Mention every critical flag in risk_analysis
- Never promise future price behaviour"""

    def _parse_response(self, content: str, calculation_breakdown: str) -> Explanation:
        # Strip markdown code fences if present
        content = content.strip()
        if content.startswith("```"):
            content = content.split("\n", 1)[-1]
        if content.endswith("```"):
            content = content.rsplit("```", 1)[0]
        content = content.strip()

        try:
            data = json.loads(content)
            explanation = Explanation(
                overview=str(data["overview"]),
                key_insights=tuple(str(i) for i in data.get("key_insights", []))[:4],
                risk_analysis=str(data["risk_analysis"]),
                recommendation=str(data["recommendation"]),
                technical_details=str(data.get("technical_details", "")),
                calculation_breakdown=calculation_breakdown,
                generated_by="llm",
            )
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[LLM] Parse failed: {e}, content: {content[:200]}")
            raise ExplainerError(f"Unparseable explanation: {e}") from e

        return explanation

    async def close(self) -> None:
        await self._client.aclose()
