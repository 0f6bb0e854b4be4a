"""Score one token from a JSON payload.

Reads a provider payload (file or stdin), converts declared provider
units, prints the RiskResult as JSON and optionally an explanation.

Usage:
    python scripts/score_token.py token.json
    cat token.json | python scripts/score_token.py - --unit top10_holders_pct=percent
    python scripts/score_token.py token.json --explain [--llm]

Exit codes: 0 ok, 2 invalid payload or unit declaration.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings  # noqa: E402
from riskradar.engine.scorer import analyze_token  # noqa: E402
from riskradar.errors import TokenDataValidationError  # noqa: E402
from riskradar.explain.fallback import TokenSummary, explain_result  # noqa: E402
from riskradar.explain.service import (  # noqa: E402
    ExplainerCircuitBreaker,
    create_explainer_client,
    explain_with_fallback,
)
from riskradar.ingest import parse_token_data  # noqa: E402
from riskradar.utils.logger import setup_logger  # noqa: E402

EXIT_INVALID = 2


def _parse_units(pairs: list[str]) -> dict[str, str]:
    units: dict[str, str] = {}
    for pair in pairs:
        field, sep, unit = pair.partition("=")
        if not sep:
            raise TokenDataValidationError(pair, "unit declarations look like field=fraction|percent")
        units[field.strip()] = unit.strip()
    return units


def _read_payload(source: str) -> dict:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TokenDataValidationError("payload", f"cannot read {source}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise TokenDataValidationError("payload", f"invalid JSON: {e}") from e


async def _llm_explanation(result, summary):
    client = create_explainer_client()
    try:
        return await explain_with_fallback(
            result, summary, client=client, breaker=ExplainerCircuitBreaker.from_settings()
        )
    finally:
        if client is not None:
            await client.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score a token's risk from a JSON payload")
    parser.add_argument("payload", help="Path to JSON payload, or - for stdin")
    parser.add_argument(
        "--unit",
        action="append",
        default=[],
        metavar="FIELD=UNIT",
        help="Provider unit for a ratio field (fraction or percent); repeatable",
    )
    parser.add_argument("--explain", action="store_true", help="Also print a text explanation")
    parser.add_argument("--llm", action="store_true", help="Try the LLM explainer (needs ENABLE_LLM_EXPLAINER)")
    parser.add_argument("--json-logs", action="store_true", help="Serialize logs as JSON")
    args = parser.parse_args(argv)

    setup_logger(json_logs=args.json_logs or settings.log_json, level=settings.log_level)

    try:
        data = parse_token_data(_read_payload(args.payload), units=_parse_units(args.unit))
    except TokenDataValidationError as e:
        print(f"invalid token data: {e.field}: {e.message}", file=sys.stderr)
        return EXIT_INVALID

    result = analyze_token(data)
    output: dict = {"result": result.model_dump(mode="json")}

    if args.explain:
        summary = TokenSummary.from_token(data)
        if args.llm:
            explanation = asyncio.run(_llm_explanation(result, summary))
        else:
            explanation = explain_result(result, summary)
        output["explanation"] = asdict(explanation)

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
