"""
Sales Service - stateless sale arithmetic and reporting

Items can be dicts, SaleItemInput requests or SaleLineItem value objects.
Nothing here touches the database.

Author: TM3
Date: 2025-10-17
"""
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from zylos.domain.clock import ensure_utc
from zylos.domain.errors import InvalidCommissionRate
from zylos.domain.value_objects import Money, to_decimal

TOP_RESULTS = 10


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _unit_price(item: Any) -> Decimal:
    price = _field(item, "unit_price", 0)
    if isinstance(price, Money):
        return price.amount
    return to_decimal(price if price is not None else 0)


class SalesService:
    """Sale totals, validation, commissions and metrics"""

    @staticmethod
    def calculate_sale_total(items: Iterable[Any], tax_rate: Union[float, Decimal] = Decimal("0.16")) -> Dict[str, Money]:
        """
        subtotal = sum(quantity * unit_price)
        tax = subtotal * tax_rate
        total = subtotal + tax
        """
        subtotal = Money.sum([
            Money(_unit_price(item)).multiply(_field(item, "quantity", 0))
            for item in items
        ])
        tax = subtotal.multiply(to_decimal(tax_rate))
        return {
            "subtotal": subtotal,
            "tax": tax,
            "total": subtotal.add(tax),
        }

    @staticmethod
    def validate_sale(items: List[Any]) -> Dict[str, Any]:
        """
        Check sale items and collect every problem found

        Returns:
            {"is_valid": bool, "errors": [str, ...]}
        """
        errors: List[str] = []

        if not items:
            errors.append("Sale must have at least one item")

        for index, item in enumerate(items or [], start=1):
            quantity = _field(item, "quantity", 0) or 0
            if quantity <= 0:
                errors.append(f"Item {index}: quantity must be greater than 0")

            if _unit_price(item) < 0:
                errors.append(f"Item {index}: unit price cannot be negative")

            product_id = _field(item, "product_id")
            if not product_id or not str(product_id).strip():
                errors.append(f"Item {index}: product is required")

        return {"is_valid": not errors, "errors": errors}

    @staticmethod
    def calculate_commission(sale_total: Union[Money, float, Decimal], commission_rate: Union[float, Decimal]) -> Money:
        """
        Commission on a sale total

        Raises:
            InvalidCommissionRate: rate outside [0, 1]
        """
        rate = to_decimal(commission_rate)
        if rate < 0 or rate > 1:
            raise InvalidCommissionRate(f"Commission rate must be between 0 and 1: {rate}")

        total = sale_total if isinstance(sale_total, Money) else Money(sale_total)
        return total.multiply(rate)

    @staticmethod
    def calculate_sales_metrics(sales: Iterable[Any], start_date: Optional[datetime] = None,
                                end_date: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Aggregate metrics for the sales inside [start_date, end_date].
        Cancelled sales are left out.
        """
        start = ensure_utc(start_date) if start_date else None
        end = ensure_utc(end_date) if end_date else None

        selected = []
        for sale in sales:
            if sale.is_cancelled():
                continue
            created_at = ensure_utc(sale.created_at)
            if start and created_at < start:
                continue
            if end and created_at > end:
                continue
            selected.append(sale)

        totals = [sale.total for sale in selected]
        total_revenue = Money.sum(totals)
        average = Money.average(totals)

        products: Dict[str, Dict[str, Any]] = {}
        for sale in selected:
            for item in sale.items:
                entry = products.setdefault(item.product_id, {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity_sold": 0,
                    "revenue": Money.zero(),
                })
                entry["quantity_sold"] += item.quantity
                entry["revenue"] = entry["revenue"].add(item.total_price)

        customers: Dict[str, Dict[str, Any]] = {}
        for sale in selected:
            if not sale.customer_id:
                continue
            entry = customers.setdefault(sale.customer_id, {
                "customer_id": sale.customer_id,
                "total_purchases": 0,
                "total_spent": Money.zero(),
            })
            entry["total_purchases"] += 1
            entry["total_spent"] = entry["total_spent"].add(sale.total)

        top_products = sorted(products.values(), key=lambda p: p["revenue"].amount, reverse=True)[:TOP_RESULTS]
        top_customers = sorted(customers.values(), key=lambda c: c["total_spent"].amount, reverse=True)[:TOP_RESULTS]

        return {
            "period": {
                "start": start.isoformat() if start else None,
                "end": end.isoformat() if end else None,
            },
            "total_sales": len(selected),
            "total_revenue": float(total_revenue.amount),
            "average_transaction_value": float(average.amount),
            "top_products": [
                {**p, "revenue": float(p["revenue"].amount)} for p in top_products
            ],
            "top_customers": [
                {**c, "total_spent": float(c["total_spent"].amount)} for c in top_customers
            ],
        }

    @staticmethod
    def daily_breakdown(sales: Iterable[Any]) -> List[Dict[str, Any]]:
        """Sales count, revenue and average ticket per UTC day, oldest first"""
        days: Dict[str, List[Money]] = defaultdict(list)
        for sale in sales:
            if sale.is_cancelled():
                continue
            days[ensure_utc(sale.created_at).date().isoformat()].append(sale.total)

        breakdown = []
        for day in sorted(days):
            revenue = Money.sum(days[day])
            breakdown.append({
                "date": day,
                "sales": len(days[day]),
                "revenue": float(revenue.amount),
                "average_transaction_value": float(Money.average(days[day]).amount),
            })
        return breakdown
