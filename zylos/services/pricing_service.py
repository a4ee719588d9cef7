"""
Pricing Service

Stateless price arithmetic: tax, discounts, margins and full sale pricing.
All results are Money (rounded to cents) except margins, which are
percentages.

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Union

from zylos.domain.errors import InvalidAmount, InvalidDiscount
from zylos.domain.value_objects import Money, SaleLineItem, to_decimal

Number = Union[int, float, Decimal, str]


def as_money(value: Union[Money, Number]) -> Money:
    return value if isinstance(value, Money) else Money(value)


class PricingService:
    """Price calculations shared by the sales flow and the products API"""

    @staticmethod
    def calculate_price_with_tax(price: Union[Money, Number], tax_rate: Number = Decimal("0.16")) -> Money:
        """
        price + price * tax_rate

        Raises:
            InvalidAmount: tax_rate is negative
        """
        tax_rate = to_decimal(tax_rate)
        if tax_rate < 0:
            raise InvalidAmount(f"Tax rate cannot be negative: {tax_rate}")
        price = as_money(price)
        return price.add(price.multiply(tax_rate))

    @staticmethod
    def apply_discount(price: Union[Money, Number], discount_percentage: Number) -> Money:
        """
        Price after a percentage discount (0-100)

        Raises:
            InvalidDiscount: percentage outside [0, 100]
        """
        return as_money(price).discount(discount_percentage)

    @staticmethod
    def calculate_margin(cost: Union[Money, Number], price: Union[Money, Number]) -> Decimal:
        """
        Gross margin as a percentage of price, rounded to 2 decimals.
        A zero price has a zero margin.
        """
        cost = as_money(cost)
        price = as_money(price)
        if price.is_zero():
            return Decimal("0.00")
        margin = (price.amount - cost.amount) / price.amount * 100
        return margin.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def calculate_markup(cost: Union[Money, Number], price: Union[Money, Number]) -> Decimal:
        """Markup as a percentage of cost. A zero cost has a zero markup."""
        cost = as_money(cost)
        price = as_money(price)
        if cost.is_zero():
            return Decimal("0.00")
        markup = (price.amount - cost.amount) / cost.amount * 100
        return markup.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def price_sale(items: Iterable[SaleLineItem], tax_rate: Number = Decimal("0.16"),
                   discount_percentage: Number = 0) -> Dict[str, Any]:
        """
        Full pricing of a sale: the discount applies to the subtotal and tax
        is charged on the discounted amount.

        Returns:
            {"subtotal", "discount", "tax", "total"} as Money
        """
        discount_percentage = to_decimal(discount_percentage)
        if discount_percentage < 0 or discount_percentage > 100:
            raise InvalidDiscount(f"Discount must be between 0 and 100: {discount_percentage}")

        subtotal = Money.sum([item.total_price for item in items])
        discount = subtotal.percentage(discount_percentage)
        taxable = subtotal.subtract(discount)
        tax = taxable.multiply(to_decimal(tax_rate))

        return {
            "subtotal": subtotal,
            "discount": discount,
            "tax": tax,
            "total": taxable.add(tax),
        }
