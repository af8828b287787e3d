"""Shared FastAPI dependencies."""

import typing as t

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.database import get_db
from grocerywatch.services import (
    ChangeNotifier,
    ContentService,
    ItemNotFoundError,
    ItemService,
    ItemValidationError,
    LabelExtractor,
    PersistenceError,
)


def get_notifier(request: Request) -> ChangeNotifier:
    """Get the application's change notifier.

    Args:
        request (Request): The incoming request.

    Returns:
        ChangeNotifier: The notifier created at startup.
    """
    return request.app.state.notifier


def get_content_service(request: Request) -> ContentService:
    """Get the application's content service."""
    return request.app.state.content_service


def get_label_extractor(request: Request) -> LabelExtractor:
    """Get the application's label extractor."""
    return request.app.state.label_extractor


def get_item_service(
    db: t.Annotated[AsyncSession, Depends(get_db)],
    notifier: t.Annotated[ChangeNotifier, Depends(get_notifier)],
) -> ItemService:
    """Build an item service bound to the request's session.

    Args:
        db (AsyncSession): The database session.
        notifier (ChangeNotifier): The change notifier.

    Returns:
        ItemService: The item service.
    """
    return ItemService(db, notifier)


def to_http_exception(exc: Exception) -> HTTPException:
    """Map an item service error to an HTTP error response.

    Args:
        exc (Exception): The raised service error.

    Returns:
        HTTPException: The matching HTTP error.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ItemNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ItemValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, PersistenceError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=str(exc))
