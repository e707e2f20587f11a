# tests/test_pricing.py
import pytest

from app.services.pricing import PricingProvider, pricing_provider

PRICES = {"Web Development": 150000, "Data Science": 180000}


def test_known_course_price():
    provider = PricingProvider(PRICES, default_price=100000)

    assert provider.get_course_price("Web Development") == 150000


def test_unknown_course_uses_default_price():
    provider = PricingProvider(PRICES, default_price=100000)

    assert provider.get_course_price("Underwater Basket Weaving") == 100000


@pytest.mark.parametrize(
    "price, percentage, expected",
    [(150000, 10, 15000), (180000, 10, 18000), (99999, 10, 9999), (100000, 15, 15000)],
)
def test_percentage_commission(price, percentage, expected):
    provider = PricingProvider(PRICES, 100000, commission_mode="percentage", commission_percentage=percentage)

    assert provider.compute_commission(price) == expected


def test_flat_commission():
    provider = PricingProvider(PRICES, 100000, commission_mode="flat", commission_flat_amount=10000)

    assert provider.compute_commission(150000) == 10000
    assert provider.compute_commission(180000) == 10000


def test_direct_signup_earns_nothing():
    provider = PricingProvider(PRICES, 100000)

    assert provider.compute_commission(150000, referred=False) == 0


def test_configured_price_list_is_loaded():
    assert pricing_provider.get_course_price("Web Development") == 150000
    assert pricing_provider.get_course_price("Cybersecurity") == 200000
