"""Provider payload -> TokenData.

Providers disagree on whether "top 10 holders" is 0.42 or 42. The caller
declares the unit each provider uses; values are converted here, once,
and never guessed from magnitude.
"""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from riskradar.errors import TokenDataValidationError, UnitConversionError
from riskradar.models.token import TokenData, input_aliases

FRACTION = "fraction"
PERCENT = "percent"

# Field -> canonical unit
CANONICAL_UNITS: dict[str, str] = {
    "top10_holders_pct": FRACTION,
    "next_unlock_30d_pct": FRACTION,
    "buy_tax_pct": PERCENT,
    "sell_tax_pct": PERCENT,
    "deployer_holding_pct": PERCENT,
}

_ALIAS_TO_FIELD = {
    alias: name for name in TokenData.model_fields for alias in input_aliases(name)
}


def parse_token_data(
    payload: Mapping[str, Any],
    *,
    units: Mapping[str, str] | None = None,
) -> TokenData:
    """Validate a provider payload, converting declared units to canonical ones.

    Raises TokenDataValidationError naming the first offending field.
    """
    if not isinstance(payload, Mapping):
        raise TokenDataValidationError("payload", f"expected an object, got {type(payload).__name__}")

    converted = dict(payload)
    for key, unit in (units or {}).items():
        field = _ALIAS_TO_FIELD.get(key, key)
        canonical = CANONICAL_UNITS.get(field)
        if canonical is None:
            raise UnitConversionError(field, "no unit conversion defined for this field")
        if unit not in (FRACTION, PERCENT):
            raise UnitConversionError(field, f"unknown unit {unit!r}, expected 'fraction' or 'percent'")
        if unit == canonical:
            continue
        for alias in input_aliases(field):
            if converted.get(alias) is not None:
                converted[alias] = _convert(field, converted[alias], unit, canonical)

    try:
        data = TokenData.model_validate(converted)
    except ValidationError as e:
        err = e.errors()[0]
        field = _field_name(err.get("loc", ()))
        logger.debug(f"[INGEST] Rejected payload: {field}: {err['msg']} ({e.error_count()} errors)")
        raise TokenDataValidationError(field, err["msg"]) from e

    logger.debug(
        f"[INGEST] {data.address[:12]} chain={data.chain.value} sources={','.join(data.data_sources)}"
    )
    return data


def _convert(field: str, value: Any, unit: str, canonical: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UnitConversionError(field, f"expected a number, got {value!r}")
    if unit == PERCENT and canonical == FRACTION:
        return value / 100
    return value * 100


def _field_name(loc: tuple) -> str:
    if not loc:
        return "payload"
    first = str(loc[0])
    return _ALIAS_TO_FIELD.get(first, first)
