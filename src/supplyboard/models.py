"""Business entity schemas.

Each entity has a ``*Create`` payload accepted by the API and a stored form
that adds the identifier and creation timestamp assigned by the store.
JSON uses camelCase keys.
"""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SupplierStatus(StrEnum):
    ACTIVE = "Active"
    DELAYED = "Delayed"
    ON_TRACK = "On Track"


class OrderStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


ACTIVE_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.IN_PROGRESS})

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class ActivityType(StrEnum):
    INVENTORY = "Inventory"
    SHIPPING = "Shipping"
    ALERT = "Alert"
    ORDER = "Order"


class ActivityStatus(StrEnum):
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    REQUIRES_ACTION = "Requires Action"


class TransactionType(StrEnum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"


class EntityModel(BaseModel):
    """Base for business entities serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SupplierCreate(EntityModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1)
    status: SupplierStatus
    contact_email: str | None = None
    contact_phone: str | None = None
    performance_score: float | None = Field(default=None, ge=0, le=100)


class Supplier(SupplierCreate):
    id: int
    created_at: datetime


class ProductCreate(EntityModel):
    sku: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    current_stock: int = Field(default=0, ge=0)
    minimum_threshold: int = Field(default=10, ge=0)
    unit_price: float = Field(..., ge=0)
    supplier_id: int | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_threshold


class Product(ProductCreate):
    id: int
    created_at: datetime


class OrderCreate(EntityModel):
    order_number: str = Field(..., min_length=1, max_length=50)
    supplier_id: int | None = None
    status: OrderStatus = OrderStatus.PENDING
    total_value: float = Field(..., ge=0)
    expected_delivery: datetime | None = None
    actual_delivery: datetime | None = None

    @field_validator("expected_delivery", "actual_delivery")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Order(OrderCreate):
    id: int
    order_date: datetime

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ORDER_STATUSES


class OrderStatusUpdate(EntityModel):
    status: OrderStatus


class OrderItemCreate(EntityModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)


class OrderItem(OrderItemCreate):
    id: int
    order_id: int
    created_at: datetime


class ActivityCreate(EntityModel):
    type: ActivityType
    description: str = Field(..., min_length=1)
    details: str | None = None
    status: ActivityStatus
    related_entity_type: str | None = None
    related_entity_id: int | None = None


class Activity(ActivityCreate):
    id: int
    created_at: datetime


class InventoryTransactionCreate(EntityModel):
    product_id: int
    type: TransactionType
    quantity: int
    reason: str | None = None


class InventoryTransaction(InventoryTransactionCreate):
    id: int
    created_at: datetime


class SupplierWithStatus(Supplier):
    """Supplier plus the two-letter badge shown on the dashboard."""

    initial: str = Field(..., min_length=1, max_length=2)
