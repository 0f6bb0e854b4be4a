"""Tests for per-factor risk scoring."""

import pytest

from riskradar.engine.factors import (
    NEUTRAL_SCORE,
    score_activity,
    score_burn_deflation,
    score_contract_control,
    score_factors,
    score_holder_concentration,
    score_liquidity_depth,
    score_supply_dilution,
    score_tax_fee,
    score_token_age,
)
from riskradar.models.risk import FactorName, FactorQuality
from riskradar.models.token import ChainType, TokenData


def _make_token(**kwargs) -> TokenData:
    defaults = {
        "address": "0xabc0000000000000000000000000000000000001",
        "chain": ChainType.EVM,
        "data_sources": ("test",),
    }
    defaults.update(kwargs)
    return TokenData(**defaults)


class TestScoreFactors:
    def test_returns_every_factor_once(self) -> None:
        factors = score_factors(_make_token())
        assert [f.name for f in factors] == list(FactorName)

    def test_empty_token_is_neutral_not_error(self) -> None:
        """No data at all: every factor still has a score in range."""
        for f in score_factors(_make_token()):
            assert 0 <= f.score <= 100
            assert f.rationale

    def test_full_data_is_full_quality(self, established_token) -> None:
        factors = score_factors(established_token)
        assert all(f.quality == FactorQuality.FULL for f in factors)


class TestSupplyDilution:
    def test_locked_share(self) -> None:
        f = score_supply_dilution(
            _make_token(total_supply=1000, circulating_supply=400, max_supply=1000)
        )
        assert f.score == 42  # 0.6 * 70
        assert f.quality == FactorQuality.FULL

    def test_fully_circulating_capped_supply_is_zero(self) -> None:
        f = score_supply_dilution(
            _make_token(total_supply=1000, circulating_supply=1000, max_supply=1000)
        )
        assert f.score == 0

    def test_uncapped_penalty(self) -> None:
        f = score_supply_dilution(_make_token(total_supply=1000, circulating_supply=400))
        assert f.score == 62

    def test_uncapped_penalty_halved_when_burning(self) -> None:
        f = score_supply_dilution(
            _make_token(total_supply=1000, circulating_supply=400, burned_supply=10)
        )
        assert f.score == 52

    def test_fdv_fallback_is_partial(self) -> None:
        f = score_supply_dilution(
            _make_token(market_cap=40, fully_diluted_value=100, max_supply=1000)
        )
        assert f.score == 42
        assert f.quality == FactorQuality.PARTIAL

    def test_unknown_is_estimated(self) -> None:
        f = score_supply_dilution(_make_token(max_supply=1000))
        assert f.score == 30
        assert f.quality == FactorQuality.ESTIMATED


class TestHolderConcentration:
    @pytest.mark.parametrize(
        ("top10", "expected"),
        [(0.0, 0), (0.12, 12), (0.3, 30), (0.575, 65), (0.85, 100), (1.0, 100)],
    )
    def test_curve(self, top10: float, expected: int) -> None:
        assert score_holder_concentration(_make_token(top10_holders_pct=top10)).score == expected

    def test_monotonic(self) -> None:
        scores = [
            score_holder_concentration(_make_token(top10_holders_pct=i / 100)).score
            for i in range(101)
        ]
        assert scores == sorted(scores)

    def test_missing_is_neutral(self) -> None:
        f = score_holder_concentration(_make_token())
        assert f.score == NEUTRAL_SCORE
        assert f.quality == FactorQuality.MISSING


class TestLiquidityDepth:
    @pytest.mark.parametrize(
        ("liquidity", "expected"),
        [(500, 100), (1_000, 100), (10_000, 90), (100_000, 10), (1_000_000, 0)],
    )
    def test_ratio_curve(self, liquidity: float, expected: int) -> None:
        f = score_liquidity_depth(_make_token(market_cap=1_000_000, liquidity_usd=liquidity))
        assert f.score == expected
        assert f.quality == FactorQuality.FULL

    def test_thin_ratio_scores_above_deep_ratio(self) -> None:
        thin = score_liquidity_depth(_make_token(market_cap=1_000_000, liquidity_usd=5_000))
        deep = score_liquidity_depth(_make_token(market_cap=1_000_000, liquidity_usd=50_000))
        assert thin.score > deep.score

    def test_deep_pool_capped(self) -> None:
        f = score_liquidity_depth(_make_token(market_cap=1_000_000_000, liquidity_usd=6_000_000))
        assert f.score == 50
        assert "capped" in f.rationale

    @pytest.mark.parametrize(("liquidity", "expected"), [(500, 90), (50_000, 50), (2_000_000, 15)])
    def test_absolute_fallback(self, liquidity: float, expected: int) -> None:
        f = score_liquidity_depth(_make_token(liquidity_usd=liquidity))
        assert f.score == expected
        assert f.quality == FactorQuality.ESTIMATED

    def test_missing(self) -> None:
        f = score_liquidity_depth(_make_token(market_cap=1_000_000))
        assert f.quality == FactorQuality.MISSING
        assert f.score == NEUTRAL_SCORE


class TestContractControl:
    def test_honeypot_maxes_out(self) -> None:
        f = score_contract_control(_make_token(is_honeypot=True, owner_renounced=True))
        assert f.score == 100

    def test_clean_evm(self) -> None:
        f = score_contract_control(
            _make_token(is_mintable=False, owner_renounced=True, is_open_source=True, is_proxy=False)
        )
        assert f.score == 0
        assert f.quality == FactorQuality.FULL

    def test_evm_penalties_sum(self) -> None:
        f = score_contract_control(
            _make_token(is_mintable=True, owner_renounced=False, is_open_source=False, is_proxy=True)
        )
        assert f.score == 80  # 30 + 20 + 15 + 15

    def test_partial_inputs(self) -> None:
        f = score_contract_control(_make_token(is_mintable=True))
        assert f.score == 30
        assert f.quality == FactorQuality.PARTIAL

    def test_no_inputs_is_neutral(self) -> None:
        f = score_contract_control(_make_token())
        assert f.score == NEUTRAL_SCORE
        assert f.quality == FactorQuality.MISSING

    def test_solana_freeze_authority(self) -> None:
        f = score_contract_control(
            _make_token(chain=ChainType.SOLANA, freeze_authority=True, is_mintable=False)
        )
        assert f.score == 35
        assert f.quality == FactorQuality.FULL

    def test_solana_ignores_evm_only_inputs(self) -> None:
        f = score_contract_control(
            _make_token(
                chain=ChainType.SOLANA,
                freeze_authority=False,
                is_mintable=False,
                is_open_source=False,
                is_proxy=True,
            )
        )
        assert f.score == 0

    def test_cardano_unlocked_policy(self) -> None:
        f = score_contract_control(_make_token(chain=ChainType.CARDANO, policy_locked=False))
        assert f.score == 40
        assert f.quality == FactorQuality.FULL

    def test_cardano_locked_but_open(self) -> None:
        f = score_contract_control(
            _make_token(chain=ChainType.CARDANO, policy_locked=True, policy_expired=False)
        )
        assert f.score == 10

    def test_cardano_locked_expiry_unknown(self) -> None:
        f = score_contract_control(_make_token(chain=ChainType.CARDANO, policy_locked=True))
        assert f.score == 0
        assert f.quality == FactorQuality.PARTIAL


class TestTaxFee:
    def test_linear_plus_step(self) -> None:
        f = score_tax_fee(_make_token(buy_tax_pct=5, sell_tax_pct=25))
        assert f.score == 80  # (5 + 25) * 2 + 20
        assert f.quality == FactorQuality.FULL

    def test_low_taxes_no_step(self) -> None:
        assert score_tax_fee(_make_token(buy_tax_pct=3, sell_tax_pct=3)).score == 12

    def test_modifiable_tax(self) -> None:
        f = score_tax_fee(_make_token(buy_tax_pct=3, sell_tax_pct=3, tax_modifiable=True))
        assert f.score == 27

    def test_one_side_known(self) -> None:
        f = score_tax_fee(_make_token(buy_tax_pct=2))
        assert f.score == 4
        assert f.quality == FactorQuality.PARTIAL

    def test_missing(self) -> None:
        assert score_tax_fee(_make_token()).quality == FactorQuality.MISSING

    def test_clamped(self) -> None:
        assert score_tax_fee(_make_token(buy_tax_pct=90, sell_tax_pct=90)).score == 100

    @pytest.mark.parametrize("chain", [ChainType.SOLANA, ChainType.CARDANO])
    def test_no_tax_mechanism(self, chain: ChainType) -> None:
        f = score_tax_fee(_make_token(chain=chain, sell_tax_pct=25))
        assert f.score == 0
        assert f.quality == FactorQuality.FULL


class TestActivity:
    def test_busy_token(self) -> None:
        f = score_activity(_make_token(holder_count=99_999, tx_count_24h=9_999))
        assert f.score == 0
        assert f.quality == FactorQuality.FULL

    def test_new_token_bump(self) -> None:
        f = score_activity(_make_token(holder_count=99_999, tx_count_24h=9_999, age_days=3))
        assert f.score == 15

    def test_no_holders_partial(self) -> None:
        f = score_activity(_make_token(holder_count=0))
        assert f.score == 100
        assert f.quality == FactorQuality.PARTIAL

    def test_missing(self) -> None:
        f = score_activity(_make_token(age_days=1))
        assert f.score == NEUTRAL_SCORE
        assert f.quality == FactorQuality.MISSING

    @pytest.mark.parametrize(
        ("volume", "expected"),
        [
            (1_000, 30),  # dead market
            (500_000, 20),
            (3_000_000, 10),
            (100_000_000, 0),  # healthy turnover
            (3_000_000_000, 12),  # churn
            (6_000_000_000, 25),
        ],
    )
    def test_volume_to_market_cap(self, volume: float, expected: int) -> None:
        f = score_activity(
            _make_token(holder_count=99_999, tx_count_24h=9_999, market_cap=1_000_000_000, volume_24h=volume)
        )
        assert f.score == expected

    def test_dead_market_noted(self) -> None:
        f = score_activity(
            _make_token(holder_count=99_999, tx_count_24h=9_999, market_cap=1_000_000_000, volume_24h=0)
        )
        assert f.score == 30
        assert "volume" in f.rationale

    def test_volume_without_market_cap_ignored(self) -> None:
        f = score_activity(_make_token(holder_count=99_999, tx_count_24h=9_999, volume_24h=10))
        assert f.score == 0


class TestBurnDeflation:
    def test_capped_no_burn(self) -> None:
        f = score_burn_deflation(_make_token(max_supply=1000, total_supply=1000, burned_supply=0))
        assert f.score == 50
        assert f.quality == FactorQuality.FULL

    def test_burn_lowers_risk(self) -> None:
        f = score_burn_deflation(_make_token(max_supply=1000, total_supply=1000, burned_supply=250))
        assert f.score == 15  # 50 - 0.25 * 140

    def test_heavy_burn_floors_at_zero(self) -> None:
        f = score_burn_deflation(_make_token(max_supply=1000, total_supply=1000, burned_supply=500))
        assert f.score == 0

    def test_uncapped_unknown_burn(self) -> None:
        f = score_burn_deflation(_make_token())
        assert f.score == 80
        assert f.quality == FactorQuality.ESTIMATED


class TestTokenAge:
    @pytest.mark.parametrize(("age", "expected"), [(0, 100), (40, 40), (245, 5), (3650, 5)])
    def test_decay(self, age: float, expected: int) -> None:
        assert score_token_age(_make_token(age_days=age)).score == expected

    def test_older_never_riskier(self) -> None:
        scores = [score_token_age(_make_token(age_days=d)).score for d in range(0, 400, 5)]
        assert scores == sorted(scores, reverse=True)

    def test_missing(self) -> None:
        f = score_token_age(_make_token())
        assert f.score == NEUTRAL_SCORE
        assert f.quality == FactorQuality.MISSING
