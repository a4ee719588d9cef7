"""
Unit tests for product and customer specifications

Author: TM3
Date: 2025-10-17
"""
from datetime import timedelta

from zylos.domain.clock import utcnow
from zylos.domain.enums import ProductStatus
from zylos.domain.specifications import (
    CustomerHasSufficientBalanceSpecification,
    CustomerHasValidContactInfoSpecification,
    CustomerHasValidEmailSpecification,
    CustomerIsInGoodStandingSpecification,
    CustomerWithinCreditLimitSpecification,
    ProductHasSufficientStockSpecification,
    ProductHasValidSkuSpecification,
    ProductIsActiveSpecification,
    ProductIsInStockSpecification,
    ProductIsLowStockSpecification,
    ProductPriceWithinRangeSpecification,
)
from zylos.domain.value_objects import Money


class TestProductSpecifications:

    def test_low_stock(self):
        spec = ProductIsLowStockSpecification()
        assert spec.is_satisfied_by({"current_stock": 5, "low_stock_threshold": 10})
        assert spec.is_satisfied_by({"current_stock": 10, "low_stock_threshold": 10})
        assert not spec.is_satisfied_by({"current_stock": 15, "low_stock_threshold": 10})

    def test_sufficient_stock(self):
        spec = ProductHasSufficientStockSpecification()
        assert spec.is_satisfied_by({"current_stock": 5, "required_quantity": 5})
        assert not spec.is_satisfied_by({"current_stock": 4, "required_quantity": 5})

    def test_in_stock_reads_model_attributes(self, sample_product):
        assert ProductIsInStockSpecification().is_satisfied_by(sample_product)
        assert ProductIsActiveSpecification().is_satisfied_by(sample_product)

    def test_price_range_is_inclusive(self):
        spec = ProductPriceWithinRangeSpecification(Money(10), Money(20))
        assert spec.is_satisfied_by({"unit_price": Money(10)})
        assert spec.is_satisfied_by({"unit_price": 20})
        assert not spec.is_satisfied_by({"unit_price": 20.01})
        assert not spec.is_satisfied_by({})

    def test_valid_sku(self):
        spec = ProductHasValidSkuSpecification()
        assert spec.is_satisfied_by({"sku": "CAFE_001-A"})
        assert not spec.is_satisfied_by({"sku": "cafe 001"})
        assert not spec.is_satisfied_by({"sku": ""})

    def test_composition(self):
        sellable = ProductIsActiveSpecification() & ProductIsInStockSpecification()
        assert sellable.is_satisfied_by({"status": ProductStatus.ACTIVE, "current_stock": 1})
        assert not sellable.is_satisfied_by({"status": ProductStatus.INACTIVE, "current_stock": 1})

        either = ProductIsInStockSpecification().or_(ProductIsActiveSpecification())
        assert either.is_satisfied_by({"status": ProductStatus.INACTIVE, "current_stock": 3})

        out_of_stock = ~ProductIsInStockSpecification()
        assert out_of_stock.is_satisfied_by({"current_stock": 0})
        assert ProductIsInStockSpecification().not_().is_satisfied_by({"current_stock": -2})


class TestCustomerSpecifications:

    def test_good_standing_without_outstanding_balance(self):
        spec = CustomerIsInGoodStandingSpecification()
        assert spec.is_satisfied_by({"has_outstanding_balance": False, "last_payment_date": None})

    def test_outstanding_balance_without_payment_is_not_good_standing(self):
        spec = CustomerIsInGoodStandingSpecification()
        assert not spec.is_satisfied_by({"has_outstanding_balance": True, "last_payment_date": None})

    def test_good_standing_depends_on_days_since_last_payment(self):
        spec = CustomerIsInGoodStandingSpecification(max_days_outstanding=30)
        recent = {"has_outstanding_balance": True, "last_payment_date": utcnow() - timedelta(days=10)}
        stale = {"has_outstanding_balance": True, "last_payment_date": utcnow() - timedelta(days=45)}
        assert spec.is_satisfied_by(recent)
        assert not spec.is_satisfied_by(stale)

    def test_naive_payment_date_is_treated_as_utc(self):
        naive = (utcnow() - timedelta(days=2)).replace(tzinfo=None)
        spec = CustomerIsInGoodStandingSpecification()
        assert spec.is_satisfied_by({"has_outstanding_balance": True, "last_payment_date": naive})

    def test_sufficient_balance(self):
        spec = CustomerHasSufficientBalanceSpecification(Money(100))
        assert spec.is_satisfied_by({"balance": 100})
        assert not spec.is_satisfied_by({"balance": 99.99})

    def test_credit_limit(self):
        spec = CustomerWithinCreditLimitSpecification()
        assert spec.is_satisfied_by({"balance": 500, "credit_limit": 500})
        assert not spec.is_satisfied_by({"balance": 501, "credit_limit": 500})
        assert spec.is_satisfied_by({"balance": 10_000, "credit_limit": None})

    def test_email_and_contact_info(self):
        assert CustomerHasValidEmailSpecification().is_satisfied_by({"email": "ana@example.com"})
        assert not CustomerHasValidEmailSpecification().is_satisfied_by({"email": "ana"})
        assert not CustomerHasValidEmailSpecification().is_satisfied_by({})

        contact = CustomerHasValidContactInfoSpecification()
        assert contact.is_satisfied_by({"email": None, "phone": "555-0101"})
        assert not contact.is_satisfied_by({"email": " ", "phone": None})
