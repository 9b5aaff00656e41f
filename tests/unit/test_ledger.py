"""Unit tests for the collateral ledger — bookkeeping and USD valuation."""
from __future__ import annotations

import pytest

from stablecoin_engine.constants import PRECISION
from stablecoin_engine.engine.ledger import CollateralLedger
from stablecoin_engine.errors import InsufficientBalanceError, UnsupportedAssetError
from stablecoin_engine.models import (
    AccountInformation,
    CollateralAsset,
    CollateralDeposited,
    CollateralRedeemed,
)
from stablecoin_engine.oracles import StaticPriceFeed


@pytest.fixture()
def ledger(
    collateral: tuple[CollateralAsset, ...], oracle: StaticPriceFeed
) -> CollateralLedger:
    return CollateralLedger(collateral, oracle)


class TestRegistry:
    def test_registration_order(self, ledger: CollateralLedger) -> None:
        assert ledger.collateral_tokens == ("WETH", "WBTC")

    def test_price_feed_binding(self, ledger: CollateralLedger) -> None:
        assert ledger.price_feed("WETH") == "ETH/USD"

    def test_unknown_asset(self, ledger: CollateralLedger) -> None:
        assert not ledger.is_accepted("DOGE")
        with pytest.raises(UnsupportedAssetError) as exc:
            ledger.require_accepted("DOGE")
        assert exc.value.asset == "DOGE"

    def test_duplicate_asset_rejected(self, oracle: StaticPriceFeed) -> None:
        asset = CollateralAsset(symbol="WETH", price_feed="ETH/USD")
        with pytest.raises(ValueError, match="registered twice"):
            CollateralLedger((asset, asset), oracle)


class TestValuation:
    def test_usd_value(self, ledger: CollateralLedger) -> None:
        assert ledger.usd_value("WETH", 15 * PRECISION) == 60000 * PRECISION

    def test_asset_amount_from_usd(self, ledger: CollateralLedger) -> None:
        assert ledger.asset_amount_from_usd("WETH", 100 * PRECISION) == PRECISION // 40

    @pytest.mark.parametrize("amount", [1, 10**9, 7 * PRECISION // 3, 123456 * PRECISION])
    def test_round_trip_within_one_wei(
        self, ledger: CollateralLedger, oracle: StaticPriceFeed, amount: int
    ) -> None:
        oracle.set_price("ETH/USD", 123456789000)  # $1234.56789
        usd = ledger.usd_value("WETH", amount)
        assert abs(ledger.asset_amount_from_usd("WETH", usd) - amount) <= 1

    def test_follows_price_updates(
        self, ledger: CollateralLedger, oracle: StaticPriceFeed
    ) -> None:
        ledger.record_deposit("alice", "WETH", 10 * PRECISION)
        oracle.set_price("ETH/USD", 1900 * 10**8)
        assert ledger.total_collateral_value("alice") == 19000 * PRECISION

    def test_feed_decimals_respected(self, collateral: tuple[CollateralAsset, ...]) -> None:
        oracle = StaticPriceFeed({"ETH/USD": 4000 * 10**18, "BTC/USD": 1}, decimals=18)
        ledger = CollateralLedger(collateral, oracle)
        assert ledger.usd_value("WETH", 2 * PRECISION) == 8000 * PRECISION


class TestAccounts:
    def test_unknown_user_reads_zero(self, ledger: CollateralLedger) -> None:
        assert ledger.total_collateral_value("nobody") == 0
        assert ledger.account_info("nobody") == AccountInformation(0, 0)
        assert ledger.collateral_balance("nobody", "WETH") == 0

    def test_total_sums_all_assets(self, ledger: CollateralLedger) -> None:
        ledger.record_deposit("alice", "WETH", 1 * PRECISION)
        ledger.record_deposit("alice", "WBTC", 1 * PRECISION)
        assert ledger.total_collateral_value("alice") == 64000 * PRECISION

    def test_withdrawal_beyond_deposit_fails(self, ledger: CollateralLedger) -> None:
        ledger.record_deposit("alice", "WETH", 5)
        with pytest.raises(InsufficientBalanceError) as exc:
            ledger.record_withdrawal("alice", "WETH", 6)
        assert exc.value.available == 5
        assert exc.value.requested == 6
        assert ledger.collateral_balance("alice", "WETH") == 5

    def test_withdrawal_without_deposit_fails(self, ledger: CollateralLedger) -> None:
        with pytest.raises(InsufficientBalanceError):
            ledger.record_withdrawal("alice", "WETH", 1)

    def test_burn_beyond_debt_fails(self, ledger: CollateralLedger) -> None:
        ledger.record_mint("alice", 10)
        with pytest.raises(InsufficientBalanceError):
            ledger.record_burn("alice", 11)
        ledger.record_burn("alice", 10)
        assert ledger.debt_of("alice") == 0

    def test_deposit_of_unknown_asset_fails(self, ledger: CollateralLedger) -> None:
        with pytest.raises(UnsupportedAssetError):
            ledger.record_deposit("alice", "DOGE", 1)
        assert ledger.events == ()


class TestEvents:
    def test_deposit_and_withdrawal_events(self, ledger: CollateralLedger) -> None:
        ledger.record_deposit("alice", "WETH", 10)
        ledger.record_withdrawal("alice", "WETH", 4)
        ledger.record_withdrawal("alice", "WETH", 3, to="bob")
        assert ledger.events == (
            CollateralDeposited(user="alice", asset="WETH", amount=10),
            CollateralRedeemed(redeemed_from="alice", redeemed_to="alice", asset="WETH", amount=4),
            CollateralRedeemed(redeemed_from="alice", redeemed_to="bob", asset="WETH", amount=3),
        )


class TestStaging:
    def test_rollback_discards_changes(self, ledger: CollateralLedger) -> None:
        ledger.record_deposit("alice", "WETH", 10)
        ledger.record_mint("alice", 40)
        mark = ledger.begin()

        ledger.record_deposit("alice", "WETH", 5)
        ledger.record_withdrawal("alice", "WETH", 15)
        ledger.record_deposit("bob", "WBTC", 1)
        ledger.record_mint("alice", 100)
        ledger.record_burn("alice", 140)
        ledger.rollback_to(mark)

        assert ledger.collateral_balance("alice", "WETH") == 10
        assert ledger.debt_of("alice") == 40
        assert ledger.users() == ("alice",)
        assert len(ledger.events) == 1

    def test_commit_keeps_changes(self, ledger: CollateralLedger) -> None:
        ledger.begin()
        ledger.record_deposit("alice", "WETH", 10)
        ledger.commit()
        assert ledger.collateral_balance("alice", "WETH") == 10

    def test_rollback_touches_only_written_accounts(
        self, ledger: CollateralLedger
    ) -> None:
        for i in range(1000):
            ledger.record_deposit(f"user{i}", "WETH", i + 1)
        mark = ledger.begin()
        ledger.record_deposit("user7", "WETH", 100)
        assert len(ledger._journal) == 1
        ledger.rollback_to(mark)

        assert ledger.collateral_balance("user7", "WETH") == 8
        assert ledger.collateral_balance("user999", "WETH") == 1000
        assert ledger._journal == []

    def test_writes_outside_scope_not_journaled(self, ledger: CollateralLedger) -> None:
        ledger.record_deposit("alice", "WETH", 10)
        ledger.record_mint("alice", 1)
        assert ledger._journal == []

    def test_inner_commit_still_undone_by_outer_rollback(
        self, ledger: CollateralLedger
    ) -> None:
        outer = ledger.begin()
        ledger.begin()
        ledger.record_deposit("alice", "WETH", 10)
        ledger.commit()
        ledger.rollback_to(outer)
        assert ledger.collateral_balance("alice", "WETH") == 0
