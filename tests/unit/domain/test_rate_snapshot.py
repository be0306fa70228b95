"""Unit tests for RateSnapshot defaults"""

from decimal import Decimal

from src.domain.rate_snapshot import (
    DEFAULT_EARN_RATE,
    DEFAULT_RATE_VERSION,
    DEFAULT_REDEEM_RATE,
    RateSnapshot,
)


class TestRateSnapshotDefault:

    def test_default_rates(self):
        snapshot = RateSnapshot.default()

        assert snapshot.earn_rate == Decimal("1")
        assert snapshot.redeem_rate == Decimal("0.01")
        assert snapshot.version == DEFAULT_RATE_VERSION
        assert snapshot.is_default

    def test_constants_match_default(self):
        assert DEFAULT_EARN_RATE == Decimal("1")
        assert DEFAULT_REDEEM_RATE == Decimal("0.01")

    def test_configured_snapshot_is_not_default(self):
        snapshot = RateSnapshot(version=1, earn_rate=Decimal("2"), redeem_rate=Decimal("0.02"))
        assert not snapshot.is_default
