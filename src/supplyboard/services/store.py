"""In-memory business store."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from typing import Generic, TypeVar

import structlog

from supplyboard.models import (
    ORDER_TRANSITIONS,
    Activity,
    ActivityCreate,
    InventoryTransaction,
    InventoryTransactionCreate,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    Product,
    ProductCreate,
    Supplier,
    SupplierCreate,
)

logger = structlog.get_logger()

E = TypeVar("E", Supplier, Product, Order, OrderItem, Activity, InventoryTransaction)


def utc_now() -> datetime:
    return datetime.now(UTC)


class InvalidStatusTransitionError(Exception):
    """Raised when an order status change is not allowed."""

    def __init__(self, current: OrderStatus, requested: OrderStatus) -> None:
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class DuplicateKeyError(Exception):
    """Raised when a create would repeat a value that must be unique."""

    def __init__(self, entity: str, field: str, value: str) -> None:
        super().__init__(f"{entity} with {field} '{value}' already exists")
        self.entity = entity
        self.field = field
        self.value = value


class Collection(Generic[E]):
    """Entities of one type keyed by an auto-incrementing id."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._items: dict[int, E] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, entity: E) -> E:
        self._items[entity.id] = entity
        return entity

    def replace(self, entity: E) -> E:
        self._items[entity.id] = entity
        return entity

    def get(self, entity_id: int) -> E | None:
        return self._items.get(entity_id)

    def all(self) -> list[E]:
        return list(self._items.values())

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)


class BusinessStore:
    """Suppliers, products, orders, order items, activities and inventory transactions.

    Each create assigns the next id of its collection and a creation
    timestamp. Ids start at 1 and are never reused; nothing is deleted.
    References between entities are not checked.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self.suppliers: Collection[Supplier] = Collection("suppliers")
        self.products: Collection[Product] = Collection("products")
        self.orders: Collection[Order] = Collection("orders")
        self.order_items: Collection[OrderItem] = Collection("order_items")
        self.activities: Collection[Activity] = Collection("activities")
        self.inventory_transactions: Collection[InventoryTransaction] = Collection(
            "inventory_transactions"
        )

    def now(self) -> datetime:
        return self._clock()

    # Suppliers

    def create_supplier(self, data: SupplierCreate) -> Supplier:
        supplier = Supplier(
            id=self.suppliers.next_id(), created_at=self.now(), **data.model_dump()
        )
        logger.debug("Supplier created", supplier_id=supplier.id)
        return self.suppliers.add(supplier)

    def get_supplier(self, supplier_id: int) -> Supplier | None:
        return self.suppliers.get(supplier_id)

    def list_suppliers(self) -> list[Supplier]:
        return self.suppliers.all()

    # Products

    def create_product(self, data: ProductCreate) -> Product:
        """Insert a product.

        Raises:
            DuplicateKeyError: If another product already has this SKU
        """
        if any(existing.sku == data.sku for existing in self.products):
            raise DuplicateKeyError("Product", "sku", data.sku)
        product = Product(id=self.products.next_id(), created_at=self.now(), **data.model_dump())
        logger.debug("Product created", product_id=product.id, sku=product.sku)
        return self.products.add(product)

    def get_product(self, product_id: int) -> Product | None:
        return self.products.get(product_id)

    def list_products(self) -> list[Product]:
        return self.products.all()

    def get_products_below_threshold(self) -> list[Product]:
        """Products whose stock is at or below their minimum threshold."""
        return [product for product in self.products if product.is_low_stock]

    # Orders

    def create_order(self, data: OrderCreate, *, order_date: datetime | None = None) -> Order:
        """Insert an order.

        ``order_date`` defaults to now; pass it only when importing
        historical records.

        Raises:
            DuplicateKeyError: If another order already has this order number
        """
        if any(existing.order_number == data.order_number for existing in self.orders):
            raise DuplicateKeyError("Order", "order number", data.order_number)
        order = Order(
            id=self.orders.next_id(),
            order_date=order_date or self.now(),
            **data.model_dump(),
        )
        logger.debug("Order created", order_id=order.id, status=str(order.status))
        return self.orders.add(order)

    def get_order(self, order_id: int) -> Order | None:
        return self.orders.get(order_id)

    def list_orders(self) -> list[Order]:
        return self.orders.all()

    def get_active_orders(self) -> list[Order]:
        """Orders that are pending or in progress."""
        return [order for order in self.orders if order.is_active]

    def update_order_status(self, order_id: int, status: OrderStatus) -> Order | None:
        """Move an order along ``Pending -> In Progress -> Completed``.

        Pending and in-progress orders may also be cancelled. Completing an
        order without an actual delivery date stamps it with now.

        Returns:
            The updated order, or None if no order has this id

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed
        """
        order = self.orders.get(order_id)
        if order is None:
            return None

        if status not in ORDER_TRANSITIONS[order.status]:
            raise InvalidStatusTransitionError(order.status, status)

        changes: dict[str, object] = {"status": status}
        if status == OrderStatus.COMPLETED and order.actual_delivery is None:
            changes["actual_delivery"] = self.now()

        updated = self.orders.replace(order.model_copy(update=changes))
        logger.info(
            "Order status changed",
            order_id=order_id,
            previous=str(order.status),
            status=str(status),
        )
        return updated

    # Order items

    def create_order_item(self, order_id: int, data: OrderItemCreate) -> OrderItem:
        item = OrderItem(
            id=self.order_items.next_id(),
            order_id=order_id,
            created_at=self.now(),
            **data.model_dump(),
        )
        return self.order_items.add(item)

    def list_order_items(self, order_id: int) -> list[OrderItem]:
        return [item for item in self.order_items if item.order_id == order_id]

    # Activities

    def create_activity(
        self, data: ActivityCreate, *, created_at: datetime | None = None
    ) -> Activity:
        activity = Activity(
            id=self.activities.next_id(),
            created_at=created_at or self.now(),
            **data.model_dump(),
        )
        return self.activities.add(activity)

    def list_activities(self) -> list[Activity]:
        return self.activities.all()

    def get_recent_activities(self, limit: int = 20) -> list[Activity]:
        """Newest activities first."""
        ordered = sorted(self.activities, key=lambda a: (a.created_at, a.id), reverse=True)
        return ordered[:limit]

    # Inventory transactions

    def create_inventory_transaction(
        self, data: InventoryTransactionCreate, *, created_at: datetime | None = None
    ) -> InventoryTransaction:
        transaction = InventoryTransaction(
            id=self.inventory_transactions.next_id(),
            created_at=created_at or self.now(),
            **data.model_dump(),
        )
        return self.inventory_transactions.add(transaction)

    def list_inventory_transactions(
        self, product_id: int | None = None
    ) -> list[InventoryTransaction]:
        return [
            transaction
            for transaction in self.inventory_transactions
            if product_id is None or transaction.product_id == product_id
        ]

    def counts(self) -> dict[str, int]:
        return {
            collection.name: len(collection)
            for collection in (
                self.suppliers,
                self.products,
                self.orders,
                self.order_items,
                self.activities,
                self.inventory_transactions,
            )
        }
