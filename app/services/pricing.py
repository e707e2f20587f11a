# app/services/pricing.py
"""
Цены курсов и расчет комиссии пригласившего.

Прайс-лист не зашит в код: он приходит из настроек (`COURSE_PRICES_JSON`),
а формула комиссии выбирается одной настройкой `COMMISSION_MODE`.
"""
from typing import Dict

from app.core.config import settings


class PricingProvider:
    def __init__(
        self,
        prices: Dict[str, int],
        default_price: int,
        commission_mode: str = "percentage",
        commission_percentage: int = 10,
        commission_flat_amount: int = 10000,
    ):
        self.prices = dict(prices)
        self.default_price = default_price
        self.commission_mode = commission_mode
        self.commission_percentage = commission_percentage
        self.commission_flat_amount = commission_flat_amount

    def get_course_price(self, course: str) -> int:
        """Цена курса; для курса не из прайса - цена по умолчанию."""
        return self.prices.get(course, self.default_price)

    def compute_commission(self, course_price: int, referred: bool = True) -> int:
        if not referred:
            return 0
        if self.commission_mode == "flat":
            return self.commission_flat_amount
        return course_price * self.commission_percentage // 100


pricing_provider = PricingProvider(
    prices=settings.COURSE_PRICES,
    default_price=settings.DEFAULT_COURSE_PRICE,
    commission_mode=settings.COMMISSION_MODE,
    commission_percentage=settings.COMMISSION_PERCENTAGE,
    commission_flat_amount=settings.COMMISSION_FLAT_AMOUNT,
)


def get_pricing_provider() -> PricingProvider:
    return pricing_provider
