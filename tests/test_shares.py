"""
Liquidity share ledger.
"""

import pytest

from simpleswap.exceptions import InsufficientSharesError, ZeroSharesError
from simpleswap.exchange.shares import LiquidityShareLedger

from tests.helpers import ALICE, BOB, CAROL

POOL = "0x" + "ab" * 32
OTHER_POOL = "0x" + "cd" * 32


class TestIssue:

    def test_issue_credits_position_and_total(self):
        ledger = LiquidityShareLedger()
        assert ledger.issue(POOL, ALICE, 100) == 100
        assert ledger.issue(POOL, ALICE, 50) == 150
        assert ledger.balance_of(POOL, ALICE) == 150
        assert ledger.total_shares(POOL) == 150

    def test_issue_zero(self):
        ledger = LiquidityShareLedger()
        with pytest.raises(ZeroSharesError):
            ledger.issue(POOL, ALICE, 0)
        assert ledger.total_shares(POOL) == 0

    def test_pools_are_separate(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 10)
        ledger.issue(OTHER_POOL, ALICE, 20)
        assert ledger.balance_of(POOL, ALICE) == 10
        assert ledger.total_shares(OTHER_POOL) == 20

    def test_sum_of_positions_is_total(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 10)
        ledger.issue(POOL, BOB, 25)
        ledger.issue(POOL, CAROL, 7)
        ledger.redeem(POOL, BOB, 5)
        total = sum(ledger.balance_of(POOL, p) for p in ledger.providers(POOL))
        assert total == ledger.total_shares(POOL) == 37


class TestRedeem:

    def test_redeem(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 100)
        assert ledger.redeem(POOL, ALICE, 40) == 60
        assert ledger.total_shares(POOL) == 60

    def test_redeem_all_removes_position(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 100)
        ledger.issue(POOL, BOB, 1)
        ledger.redeem(POOL, ALICE, 100)
        assert ledger.providers(POOL) == [BOB]
        assert ledger.balance_of(POOL, ALICE) == 0

    def test_redeem_more_than_held(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 10)
        with pytest.raises(InsufficientSharesError, match="Insufficient liquidity"):
            ledger.redeem(POOL, ALICE, 11)
        assert ledger.balance_of(POOL, ALICE) == 10

    def test_redeem_without_position(self):
        ledger = LiquidityShareLedger()
        with pytest.raises(InsufficientSharesError):
            ledger.redeem(POOL, BOB, 1)

    def test_redeem_zero(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 10)
        with pytest.raises(ZeroSharesError):
            ledger.redeem(POOL, ALICE, 0)


class TestShareCheckpoint:

    def test_restore(self):
        ledger = LiquidityShareLedger()
        ledger.issue(POOL, ALICE, 10)
        saved = ledger.checkpoint(POOL)
        ledger.issue(POOL, BOB, 5)
        ledger.redeem(POOL, ALICE, 10)
        ledger.restore(POOL, saved)
        assert ledger.balance_of(POOL, ALICE) == 10
        assert ledger.balance_of(POOL, BOB) == 0
        assert ledger.total_shares(POOL) == 10

    def test_restore_empty(self):
        ledger = LiquidityShareLedger()
        saved = ledger.checkpoint(POOL)
        ledger.issue(POOL, ALICE, 3)
        ledger.restore(POOL, saved)
        assert ledger.total_shares(POOL) == 0
        assert ledger.providers(POOL) == []
