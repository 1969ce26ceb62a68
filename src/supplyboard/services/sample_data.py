"""Fabricated sample dataset for the in-memory store."""

from datetime import timedelta

import structlog

from supplyboard.models import (
    ActivityCreate,
    ActivityStatus,
    ActivityType,
    InventoryTransactionCreate,
    OrderCreate,
    OrderItemCreate,
    OrderStatus,
    ProductCreate,
    SupplierCreate,
    SupplierStatus,
    TransactionType,
)
from supplyboard.services.store import BusinessStore

logger = structlog.get_logger()

SUPPLIERS = [
    SupplierCreate(
        name="Acme Components",
        category="Electronics",
        status=SupplierStatus.ACTIVE,
        contact_email="orders@acme.example",
        performance_score=96.5,
    ),
    SupplierCreate(
        name="Northwind Packaging",
        category="Packaging",
        status=SupplierStatus.DELAYED,
        contact_email="supply@northwind.example",
        performance_score=82.0,
    ),
    SupplierCreate(
        name="Globex",
        category="Raw Materials",
        status=SupplierStatus.ON_TRACK,
        contact_phone="+1-555-0142",
        performance_score=91.3,
    ),
    SupplierCreate(
        name="Initech Logistics",
        category="Freight",
        status=SupplierStatus.ACTIVE,
        performance_score=88.7,
    ),
]

PRODUCTS = [
    ProductCreate(sku="EL-1001", name="Control Board", category="Electronics",
                  current_stock=18500, minimum_threshold=2000, unit_price=45.00, supplier_id=1),
    ProductCreate(sku="EL-1002", name="Sensor Module", category="Electronics",
                  current_stock=15, minimum_threshold=50, unit_price=129.99, supplier_id=1),
    ProductCreate(sku="PK-2001", name="Shipping Carton", category="Packaging",
                  current_stock=52000, minimum_threshold=10000, unit_price=1.25, supplier_id=2),
    ProductCreate(sku="PK-2002", name="Foam Insert", category="Packaging",
                  current_stock=800, minimum_threshold=1000, unit_price=0.85, supplier_id=2),
    ProductCreate(sku="RM-3001", name="Aluminium Sheet", category="Raw Materials",
                  current_stock=6400, minimum_threshold=500, unit_price=25.50, supplier_id=3),
    ProductCreate(sku="RM-3002", name="Copper Wire Spool", category="Raw Materials",
                  current_stock=90, minimum_threshold=100, unit_price=310.00, supplier_id=3),
]


def seed_sample_data(store: BusinessStore) -> None:
    """Populate an empty store with a small, consistent dataset."""
    now = store.now()

    for supplier in SUPPLIERS:
        store.create_supplier(supplier)
    for product in PRODUCTS:
        store.create_product(product)

    orders = [
        (OrderCreate(order_number="PO-2024-001", supplier_id=1, status=OrderStatus.COMPLETED,
                     total_value=22500.00, expected_delivery=now - timedelta(days=20),
                     actual_delivery=now - timedelta(days=21)), 35),
        (OrderCreate(order_number="PO-2024-002", supplier_id=2, status=OrderStatus.COMPLETED,
                     total_value=6250.00, expected_delivery=now - timedelta(days=10),
                     actual_delivery=now - timedelta(days=7)), 24),
        (OrderCreate(order_number="PO-2024-003", supplier_id=3, status=OrderStatus.IN_PROGRESS,
                     total_value=38250.00, expected_delivery=now + timedelta(days=4)), 6),
        (OrderCreate(order_number="PO-2024-004", supplier_id=1, status=OrderStatus.PENDING,
                     total_value=6499.50, expected_delivery=now + timedelta(days=12)), 2),
        (OrderCreate(order_number="PO-2024-005", supplier_id=4, status=OrderStatus.PENDING,
                     total_value=1200.00, expected_delivery=now + timedelta(days=9)), 1),
        (OrderCreate(order_number="PO-2024-006", supplier_id=2, status=OrderStatus.CANCELLED,
                     total_value=850.00), 15),
    ]
    for order, age_days in orders:
        store.create_order(order, order_date=now - timedelta(days=age_days))

    store.create_order_item(1, OrderItemCreate(product_id=1, quantity=500, unit_price=45.00))
    store.create_order_item(2, OrderItemCreate(product_id=3, quantity=5000, unit_price=1.25))
    store.create_order_item(3, OrderItemCreate(product_id=5, quantity=1500, unit_price=25.50))
    store.create_order_item(4, OrderItemCreate(product_id=2, quantity=50, unit_price=129.99))

    transactions = [
        (InventoryTransactionCreate(product_id=1, type=TransactionType.IN, quantity=500,
                                    reason="PO-2024-001 received"), 21),
        (InventoryTransactionCreate(product_id=3, type=TransactionType.IN, quantity=5000,
                                    reason="PO-2024-002 received"), 7),
        (InventoryTransactionCreate(product_id=2, type=TransactionType.OUT, quantity=35,
                                    reason="Assembly line draw"), 3),
        (InventoryTransactionCreate(product_id=4, type=TransactionType.ADJUSTMENT, quantity=-40,
                                    reason="Cycle count correction"), 1),
    ]
    for transaction, age_days in transactions:
        store.create_inventory_transaction(transaction, created_at=now - timedelta(days=age_days))

    activities = [
        (ActivityCreate(type=ActivityType.ORDER, description="Purchase order PO-2024-004 created",
                        status=ActivityStatus.IN_PROGRESS, related_entity_type="order",
                        related_entity_id=4), timedelta(days=2)),
        (ActivityCreate(type=ActivityType.ALERT, description="Sensor Module below minimum stock",
                        details="15 units on hand, threshold 50",
                        status=ActivityStatus.REQUIRES_ACTION, related_entity_type="product",
                        related_entity_id=2), timedelta(hours=5)),
        (ActivityCreate(type=ActivityType.SHIPPING, description="PO-2024-003 shipped by Globex",
                        status=ActivityStatus.IN_PROGRESS, related_entity_type="order",
                        related_entity_id=3), timedelta(hours=2)),
        (ActivityCreate(type=ActivityType.INVENTORY, description="Cycle count completed",
                        details="Foam Insert adjusted by -40",
                        status=ActivityStatus.COMPLETED, related_entity_type="product",
                        related_entity_id=4), timedelta(minutes=30)),
    ]
    for activity, age in activities:
        store.create_activity(activity, created_at=now - age)

    logger.info("Sample data loaded", **store.counts())
