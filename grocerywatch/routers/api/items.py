"""Grocery items CRUD and expiry endpoints."""

import typing as t

from fastapi import APIRouter, Depends, Query, status

from grocerywatch.core.dependencies import (
    get_content_service,
    get_item_service,
    get_label_extractor,
    to_http_exception,
)
from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.schemas.grocery_item import (
    ExpiringItemsResponse,
    ExpiryCheckResponse,
    GroceryItemCreate,
    GroceryItemListResponse,
    GroceryItemResponse,
    GroceryItemUpdate,
    LabelGuess,
    LabelScanRequest,
    WastedValueResponse,
)
from grocerywatch.services import (
    ContentService,
    ItemNotFoundError,
    ItemService,
    ItemValidationError,
    LabelExtractor,
    PersistenceError,
)
from grocerywatch.services.expiration_checker import (
    SweepReport,
    sweep_expiring_items,
)

ROUTER = APIRouter(prefix="/items", tags=["Grocery Items"])

ITEM_ERRORS: t.Tuple[t.Type[Exception], ...] = (
    ItemNotFoundError,
    ItemValidationError,
    PersistenceError,
)


@ROUTER.get("", response_model=GroceryItemListResponse)
async def list_items(
    service: t.Annotated[ItemService, Depends(get_item_service)],
    item_status: ItemStatus | None = Query(
        None, alias="status", description="Filter by status"
    ),
    category: ItemCategory | None = Query(
        None, description="Filter by category"
    ),
) -> GroceryItemListResponse:
    """List all grocery items, newest first, with up-to-date statuses.

    Args:
        service (ItemService):
            The item service.
        item_status (ItemStatus | None):
            Filter by status.
        category (ItemCategory | None):
            Filter by category.

    Returns:
        GroceryItemListResponse: The reconciled items.
    """
    try:
        return await service.list_items(status=item_status, category=category)
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc


@ROUTER.get("/expiring", response_model=ExpiringItemsResponse)
async def get_expiring_items(
    service: t.Annotated[ItemService, Depends(get_item_service)],
    days: int | None = Query(
        None, ge=0, le=365, description="Lookahead window in days"
    ),
) -> ExpiringItemsResponse:
    """Get active items expiring within the window, soonest first.

    Args:
        service (ItemService): The item service.
        days (int | None): Lookahead window in days.

    Returns:
        ExpiringItemsResponse: The expiring-soon view.
    """
    try:
        return await service.expiring_items(window_days=days)
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc


@ROUTER.post("/scan", response_model=LabelGuess)
async def scan_label(
    scan: LabelScanRequest,
    extractor: t.Annotated[LabelExtractor, Depends(get_label_extractor)],
) -> LabelGuess:
    """Extract item fields from recognised label text.

    Args:
        scan (LabelScanRequest): The label text.
        extractor (LabelExtractor): The label extractor.

    Returns:
        LabelGuess: Whatever fields could be recognised.
    """
    return extractor.extract(scan.text)


@ROUTER.post("/wasted-value", response_model=WastedValueResponse)
async def get_wasted_value(
    service: t.Annotated[ItemService, Depends(get_item_service)],
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> WastedValueResponse:
    """Estimate the market value of expired items.

    Args:
        service (ItemService): The item service.
        content (ContentService): The content service.

    Returns:
        WastedValueResponse: Per-item values and their total.
    """
    try:
        expired: GroceryItemListResponse = await service.list_items(
            status=ItemStatus.EXPIRED
        )
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc
    return await content.wasted_value(expired.items)


@ROUTER.post("/expiry-check", response_model=ExpiryCheckResponse)
async def run_expiry_check(
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> ExpiryCheckResponse:
    """Reconcile every item now and broadcast the ones expiring soon.

    Args:
        service (ItemService): The item service.

    Returns:
        ExpiryCheckResponse: Counts of changed and expiring items.
    """
    try:
        report: SweepReport = await sweep_expiring_items(service)
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc

    return ExpiryCheckResponse(
        message="Expiry check completed",
        changed_items=len(report.changed),
        expiring_items=len(report.expiring),
    )


@ROUTER.get("/{item_id}", response_model=GroceryItemResponse)
async def get_item(
    item_id: str,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> GroceryItemResponse:
    """Get a specific grocery item by ID.

    Args:
        item_id (str): The ID of the grocery item.
        service (ItemService): The item service.

    Returns:
        GroceryItemResponse: The grocery item data.
    """
    try:
        return await service.get_item(item_id)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc


@ROUTER.post(
    "", response_model=GroceryItemResponse, status_code=status.HTTP_201_CREATED
)
async def create_item(
    item_data: GroceryItemCreate,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> GroceryItemResponse:
    """Create a new grocery item.

    Args:
        item_data (GroceryItemCreate): The grocery item data.
        service (ItemService): The item service.

    Returns:
        GroceryItemResponse: The created grocery item data.
    """
    try:
        return await service.create_item(item_data)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc


@ROUTER.put("/{item_id}", response_model=GroceryItemResponse)
async def update_item(
    item_id: str,
    item_data: GroceryItemUpdate,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> GroceryItemResponse:
    """Update an existing grocery item.

    Args:
        item_id (str): The ID of the grocery item.
        item_data (GroceryItemUpdate): The fields to change.
        service (ItemService): The item service.

    Returns:
        GroceryItemResponse: The updated grocery item data.
    """
    try:
        return await service.update_item(item_id, item_data)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc


@ROUTER.post("/{item_id}/consume", response_model=GroceryItemResponse)
async def consume_item(
    item_id: str,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> GroceryItemResponse:
    """Mark a grocery item as used up.

    Args:
        item_id (str): The ID of the grocery item.
        service (ItemService): The item service.

    Returns:
        GroceryItemResponse: The completed grocery item.
    """
    try:
        return await service.consume_item(item_id)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc


@ROUTER.post("/{item_id}/reactivate", response_model=GroceryItemResponse)
async def reactivate_item(
    item_id: str,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> GroceryItemResponse:
    """Return a used-up grocery item to the inventory.

    Args:
        item_id (str): The ID of the grocery item.
        service (ItemService): The item service.

    Returns:
        GroceryItemResponse: The reactivated grocery item.
    """
    try:
        return await service.reactivate_item(item_id)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc


@ROUTER.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> None:
    """Delete a grocery item.

    Args:
        item_id (str): The ID of the grocery item.
        service (ItemService): The item service.
    """
    try:
        await service.delete_item(item_id)
    except ITEM_ERRORS as exc:
        raise to_http_exception(exc) from exc

