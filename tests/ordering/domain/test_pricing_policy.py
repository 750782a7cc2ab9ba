from decimal import Decimal

import pytest
from ordering.pricing.policy import PricingPolicy, get_policy, reset_policy, set_policy


class TestPricingPolicy:
    def test_defaults(self):
        policy = PricingPolicy()
        assert policy.tax_rate == Decimal("0.18")
        assert policy.free_shipping_threshold == 50000
        assert policy.shipping_fee == 5000
        assert policy.currency == "INR"

    def test_rejects_negative_tax_rate(self):
        with pytest.raises(ValueError):
            PricingPolicy(tax_rate=Decimal("-0.01"))

    def test_rejects_negative_shipping_fee(self):
        with pytest.raises(ValueError):
            PricingPolicy(shipping_fee=-1)

    def test_rejects_unknown_currency(self):
        with pytest.raises(ValueError):
            PricingPolicy(currency="XYZ")


class TestPolicyFromEnvironment:
    def test_reads_major_unit_amounts(self, monkeypatch):
        monkeypatch.setenv("ORDERING_TAX_RATE", "0.2")
        monkeypatch.setenv("ORDERING_FREE_SHIPPING_THRESHOLD", "1000")
        monkeypatch.setenv("ORDERING_SHIPPING_FEE", "7.5")
        monkeypatch.setenv("ORDERING_CURRENCY", "usd")

        policy = PricingPolicy.from_env()

        assert policy.tax_rate == Decimal("0.2")
        assert policy.free_shipping_threshold == 100000
        assert policy.shipping_fee == 750
        assert policy.currency == "USD"

    def test_falls_back_to_defaults(self, monkeypatch):
        for name in (
            "ORDERING_TAX_RATE",
            "ORDERING_FREE_SHIPPING_THRESHOLD",
            "ORDERING_SHIPPING_FEE",
            "ORDERING_CURRENCY",
        ):
            monkeypatch.delenv(name, raising=False)

        assert PricingPolicy.from_env() == PricingPolicy()


class TestPolicyFactory:
    def test_set_and_reset(self):
        custom = PricingPolicy(shipping_fee=0)
        set_policy(custom)
        assert get_policy() is custom

        reset_policy()
        assert get_policy() is not custom

    def test_get_policy_is_cached(self):
        reset_policy()
        assert get_policy() is get_policy()
