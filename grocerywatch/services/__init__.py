"""Services package."""

from grocerywatch.services.content_generator import (
    ContentGenerator,
    ContentKind,
    GenerationUnavailableError,
    NullContentGenerator,
    OpenAIContentGenerator,
    build_content_generator,
)
from grocerywatch.services.content_service import (
    ContentService,
    GeneratedContent,
)
from grocerywatch.services.health_service import HealthService
from grocerywatch.services.item_service import ItemService
from grocerywatch.services.item_store import (
    ItemNotFoundError,
    ItemStore,
    ItemValidationError,
    PersistenceError,
)
from grocerywatch.services.label_parser import (
    LabelExtractor,
    TextLabelExtractor,
)
from grocerywatch.services.notifier import ChangeNotifier, Subscription
from grocerywatch.services.reconciler import (
    LifecycleReconciler,
    ReconcileResult,
)
from grocerywatch.services.reconnect import (
    ConnectionState,
    ReconnectPolicy,
    ReconnectStateMachine,
)
from grocerywatch.utils.dates import InvalidDateError

__all__ = [
    "ChangeNotifier",
    "ConnectionState",
    "ContentGenerator",
    "ContentKind",
    "ContentService",
    "GeneratedContent",
    "GenerationUnavailableError",
    "HealthService",
    "InvalidDateError",
    "ItemNotFoundError",
    "ItemService",
    "ItemStore",
    "ItemValidationError",
    "LabelExtractor",
    "LifecycleReconciler",
    "NullContentGenerator",
    "OpenAIContentGenerator",
    "PersistenceError",
    "ReconcileResult",
    "ReconnectPolicy",
    "ReconnectStateMachine",
    "Subscription",
    "TextLabelExtractor",
    "build_content_generator",
]
