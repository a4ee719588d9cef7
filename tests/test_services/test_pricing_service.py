"""
Unit tests for PricingService

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal

import pytest

from zylos.domain.errors import InvalidAmount, InvalidDiscount
from zylos.domain.value_objects import Money, SaleLineItem
from zylos.services.pricing_service import PricingService


class TestPricingService:
    """Test price arithmetic"""

    def test_price_with_default_tax(self):
        assert PricingService.calculate_price_with_tax(100) == Money(116)

    def test_price_with_custom_tax(self):
        assert PricingService.calculate_price_with_tax(Money(50), Decimal("0.08")) == Money(54)

    def test_negative_tax_rate_raises(self):
        with pytest.raises(InvalidAmount):
            PricingService.calculate_price_with_tax(100, -0.1)

    def test_apply_discount(self):
        assert PricingService.apply_discount(80, 25) == Money(60)
        with pytest.raises(InvalidDiscount):
            PricingService.apply_discount(80, -5)

    def test_margin_and_markup(self):
        assert PricingService.calculate_margin(80, 120) == Decimal("33.33")
        assert PricingService.calculate_markup(80, 120) == Decimal("50.00")

    def test_zero_price_and_cost(self):
        assert PricingService.calculate_margin(10, 0) == Decimal("0.00")
        assert PricingService.calculate_markup(0, 10) == Decimal("0.00")

    def test_price_sale_discount_before_tax(self):
        # Arrange
        items = [
            SaleLineItem(product_id="p-1", quantity=2, unit_price=50),
            SaleLineItem(product_id="p-2", quantity=1, unit_price=100),
        ]

        # Act
        result = PricingService.price_sale(items, tax_rate=Decimal("0.16"), discount_percentage=10)

        # Assert
        assert result["subtotal"] == Money(200)
        assert result["discount"] == Money(20)
        assert result["tax"] == Money("28.80")
        assert result["total"] == Money("208.80")

    def test_price_sale_rejects_bad_discount(self):
        items = [SaleLineItem(product_id="p-1", quantity=1, unit_price=1)]
        with pytest.raises(InvalidDiscount):
            PricingService.price_sale(items, discount_percentage=150)
