"""Dashboard, business entity and export routes."""

from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, status

from supplyboard.api.dependencies import ExportServiceDep, KPIDep, StoreDep
from supplyboard.api.schemas import (
    ErrorResponse,
    ExportRequest,
    ExportResult,
    InventoryLevel,
    KPISummary,
)
from supplyboard.models import (
    Activity,
    ActivityCreate,
    InventoryTransaction,
    InventoryTransactionCreate,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatusUpdate,
    Product,
    ProductCreate,
    Supplier,
    SupplierCreate,
    SupplierWithStatus,
)
from supplyboard.services.store import DuplicateKeyError, InvalidStatusTransitionError

logger = structlog.get_logger()

dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])
business_router = APIRouter(prefix="/api", tags=["business"])

NOT_FOUND: dict[int | str, dict[str, object]] = {
    404: {"model": ErrorResponse, "description": "Entity not found"},
}
INVALID: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Validation error"},
}
CONFLICT: dict[int | str, dict[str, object]] = {
    409: {"model": ErrorResponse, "description": "Unique value already taken"},
}


def _not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def _conflict(exc: DuplicateKeyError) -> HTTPException:
    logger.warning("Rejected duplicate", entity=exc.entity, field=exc.field, value=exc.value)
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


# Dashboard


@dashboard_router.get("/kpis", response_model=KPISummary)
async def get_dashboard_kpis(kpi: KPIDep) -> KPISummary:
    """Headline KPIs, recomputed from the store on every request."""
    return kpi.dashboard_kpis()


@dashboard_router.get(
    "/inventory-levels", response_model=list[InventoryLevel], responses=INVALID
)
async def get_inventory_levels(
    kpi: KPIDep,
    days: Annotated[int, Query(ge=1, le=365, description="Number of days")] = 30,
) -> list[InventoryLevel]:
    return kpi.inventory_levels(days)


@dashboard_router.get("/suppliers", response_model=list[SupplierWithStatus])
async def get_supplier_status(kpi: KPIDep) -> list[SupplierWithStatus]:
    return kpi.suppliers_with_status()


@dashboard_router.get("/activities", response_model=list[Activity], responses=INVALID)
async def get_recent_activities(
    kpi: KPIDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum activities")] = 20,
) -> list[Activity]:
    """Most recent activities, newest first."""
    return kpi.recent_activities(limit)


# Suppliers


@business_router.get("/suppliers", response_model=list[Supplier])
async def list_suppliers(store: StoreDep) -> list[Supplier]:
    return store.list_suppliers()


@business_router.post(
    "/suppliers",
    response_model=Supplier,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID,
)
async def create_supplier(store: StoreDep, payload: SupplierCreate) -> Supplier:
    supplier = store.create_supplier(payload)
    logger.info("Supplier created", supplier_id=supplier.id)
    return supplier


@business_router.get("/suppliers/{supplier_id}", response_model=Supplier, responses=NOT_FOUND)
async def get_supplier(store: StoreDep, supplier_id: int) -> Supplier:
    supplier = store.get_supplier(supplier_id)
    if supplier is None:
        raise _not_found("Supplier")
    return supplier


# Products


@business_router.get("/products", response_model=list[Product])
async def list_products(store: StoreDep) -> list[Product]:
    return store.list_products()


@business_router.get("/products/low-stock", response_model=list[Product])
async def list_low_stock_products(store: StoreDep) -> list[Product]:
    """Products at or below their minimum threshold."""
    return store.get_products_below_threshold()


@business_router.post(
    "/products",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    responses={**INVALID, **CONFLICT},
)
async def create_product(store: StoreDep, payload: ProductCreate) -> Product:
    try:
        product = store.create_product(payload)
    except DuplicateKeyError as e:
        raise _conflict(e) from e
    logger.info("Product created", product_id=product.id, sku=product.sku)
    return product


@business_router.get("/products/{product_id}", response_model=Product, responses=NOT_FOUND)
async def get_product(store: StoreDep, product_id: int) -> Product:
    product = store.get_product(product_id)
    if product is None:
        raise _not_found("Product")
    return product


# Orders


@business_router.get("/orders", response_model=list[Order])
async def list_orders(
    store: StoreDep,
    active: Annotated[bool, Query(description="Only pending or in-progress orders")] = False,
) -> list[Order]:
    return store.get_active_orders() if active else store.list_orders()


@business_router.post(
    "/orders",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    responses={**INVALID, **CONFLICT},
)
async def create_order(store: StoreDep, payload: OrderCreate) -> Order:
    try:
        order = store.create_order(payload)
    except DuplicateKeyError as e:
        raise _conflict(e) from e
    logger.info("Order created", order_id=order.id, order_number=order.order_number)
    return order


@business_router.get("/orders/{order_id}", response_model=Order, responses=NOT_FOUND)
async def get_order(store: StoreDep, order_id: int) -> Order:
    order = store.get_order(order_id)
    if order is None:
        raise _not_found("Order")
    return order


@business_router.patch(
    "/orders/{order_id}/status",
    response_model=Order,
    responses={**NOT_FOUND, **INVALID},
)
async def update_order_status(
    store: StoreDep, order_id: int, payload: OrderStatusUpdate
) -> Order:
    """Advance an order through its status lifecycle."""
    try:
        order = store.update_order_status(order_id, payload.status)
    except InvalidStatusTransitionError as e:
        logger.warning(
            "Rejected order status change",
            order_id=order_id,
            current=str(e.current),
            requested=str(e.requested),
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if order is None:
        raise _not_found("Order")
    return order


@business_router.get(
    "/orders/{order_id}/items", response_model=list[OrderItem], responses=NOT_FOUND
)
async def list_order_items(store: StoreDep, order_id: int) -> list[OrderItem]:
    if store.get_order(order_id) is None:
        raise _not_found("Order")
    return store.list_order_items(order_id)


@business_router.post(
    "/orders/{order_id}/items",
    response_model=OrderItem,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **INVALID},
)
async def create_order_item(
    store: StoreDep, order_id: int, payload: OrderItemCreate
) -> OrderItem:
    if store.get_order(order_id) is None:
        raise _not_found("Order")
    return store.create_order_item(order_id, payload)


# Activities and inventory transactions


@business_router.get("/activities", response_model=list[Activity])
async def list_activities(store: StoreDep) -> list[Activity]:
    return store.list_activities()


@business_router.post(
    "/activities",
    response_model=Activity,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID,
)
async def create_activity(store: StoreDep, payload: ActivityCreate) -> Activity:
    return store.create_activity(payload)


@business_router.get("/inventory-transactions", response_model=list[InventoryTransaction])
async def list_inventory_transactions(
    store: StoreDep,
    product_id: Annotated[int | None, Query(alias="productId")] = None,
) -> list[InventoryTransaction]:
    return store.list_inventory_transactions(product_id)


@business_router.post(
    "/inventory-transactions",
    response_model=InventoryTransaction,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID,
)
async def create_inventory_transaction(
    store: StoreDep, payload: InventoryTransactionCreate
) -> InventoryTransaction:
    return store.create_inventory_transaction(payload)


# Export


@business_router.post("/export", response_model=ExportResult, responses=INVALID)
async def export_data(exporter: ExportServiceDep, payload: ExportRequest) -> ExportResult:
    """Generate a data export (simulated)."""
    return await exporter.export(payload)
