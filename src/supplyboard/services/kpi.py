"""Dashboard metrics derived from the business store."""

from datetime import date, timedelta

from supplyboard.api.schemas import InventoryLevel, KPISummary
from supplyboard.models import (
    Activity,
    InventoryTransaction,
    OrderStatus,
    Product,
    SupplierWithStatus,
    TransactionType,
)
from supplyboard.services.store import BusinessStore

GROWTH_WINDOW_DAYS = 30


def format_millions(amount: float) -> str:
    """Format an amount as ``$X.YM``."""
    return f"${amount / 1_000_000:.1f}M"


def inventory_value(products: list[Product]) -> float:
    return sum(product.unit_price * product.current_stock for product in products)


def supplier_initials(name: str) -> str:
    """Two-letter badge: first letters of the first two words, else the first two letters."""
    # Uppercase before slicing: some letters grow when uppercased (ß -> SS)
    words = [word.upper() for word in name.split() if word[0].isalnum()]
    if len(words) >= 2:
        return words[0][0] + words[1][0]
    if words:
        return words[0][:2]
    return name.strip().upper()[:2] or "?"


class KPIAggregator:
    """Recomputes dashboard figures from the live collections on every call."""

    def __init__(self, store: BusinessStore) -> None:
        self._store = store

    def _stock_delta(self, transaction: InventoryTransaction, prices: dict[int, float]) -> float:
        """Signed inventory value change of one transaction."""
        price = prices.get(transaction.product_id)
        if price is None:
            return 0.0
        quantity = transaction.quantity
        if transaction.type == TransactionType.OUT:
            quantity = -abs(quantity)
        elif transaction.type == TransactionType.IN:
            quantity = abs(quantity)
        return quantity * price

    def _prices(self) -> dict[int, float]:
        return {product.id: product.unit_price for product in self._store.list_products()}

    def dashboard_kpis(self) -> KPISummary:
        products = self._store.list_products()
        total_value = inventory_value(products)

        active_orders = self._store.get_active_orders()
        pending = [order for order in active_orders if order.status == OrderStatus.PENDING]

        low_stock = self._store.get_products_below_threshold()
        critical = [p for p in products if p.current_stock * 2 <= p.minimum_threshold]

        return KPISummary(
            total_inventory_value=format_millions(total_value),
            inventory_growth=self._inventory_growth(total_value),
            active_orders=len(active_orders),
            pending_orders=len(pending),
            supplier_performance=self._supplier_performance(),
            on_time_delivery=self._on_time_delivery(),
            stock_alerts=len(low_stock),
            critical_items=f"{len(critical)} critical",
        )

    def _inventory_growth(self, total_value: float) -> str:
        since = self._store.now() - timedelta(days=GROWTH_WINDOW_DAYS)
        prices = self._prices()
        net = sum(
            self._stock_delta(t, prices)
            for t in self._store.list_inventory_transactions()
            if t.created_at >= since
        )
        base = total_value - net
        growth = net / base * 100 if base > 0 else 0.0
        return f"{growth:+.1f}%"

    def _supplier_performance(self) -> str:
        scores = [
            s.performance_score
            for s in self._store.list_suppliers()
            if s.performance_score is not None
        ]
        average = sum(scores) / len(scores) if scores else 0.0
        return f"{average:.1f}%"

    def _on_time_delivery(self) -> str:
        delivered = [
            order
            for order in self._store.list_orders()
            if order.status == OrderStatus.COMPLETED
            and order.expected_delivery is not None
            and order.actual_delivery is not None
        ]
        if not delivered:
            return "0% on time"
        on_time = sum(1 for o in delivered if o.actual_delivery <= o.expected_delivery)
        return f"{on_time / len(delivered) * 100:.0f}% on time"

    def inventory_levels(self, days: int = 30) -> list[InventoryLevel]:
        """Daily closing inventory value for the last ``days`` days, oldest first.

        The current value is walked backwards by undoing every transaction
        recorded after each day.
        """
        today: date = self._store.now().date()
        prices = self._prices()
        current = inventory_value(self._store.list_products())
        deltas = [
            (t.created_at.date(), self._stock_delta(t, prices))
            for t in self._store.list_inventory_transactions()
        ]

        levels = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            later = sum(delta for when, delta in deltas if when > day)
            levels.append(InventoryLevel(date=day.isoformat(), value=round(current - later, 2)))
        return levels

    def suppliers_with_status(self) -> list[SupplierWithStatus]:
        return [
            SupplierWithStatus(**supplier.model_dump(), initial=supplier_initials(supplier.name))
            for supplier in self._store.list_suppliers()
        ]

    def recent_activities(self, limit: int = 20) -> list[Activity]:
        return self._store.get_recent_activities(limit)
