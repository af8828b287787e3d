"""Background service for reconciling expiry states and broadcasting alerts."""

import logging
import typing as t
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from grocerywatch.core.config import SETTINGS
from grocerywatch.core.database import ASYNC_SESSION_MAKER
from grocerywatch.core.models import ItemStatus
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.schemas.notifications import items_expiring
from grocerywatch.services.email_notifications import send_expiration_digest
from grocerywatch.services.expiry_classifier import expiring_soon
from grocerywatch.services.item_service import ItemService
from grocerywatch.services.notifier import ChangeNotifier
from grocerywatch.services.reconciler import ReconcileResult
from grocerywatch.utils.dates import today

LOGGER = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """What a single expiry sweep found."""

    checked_at: datetime
    window_days: int
    changed: t.List[GroceryItemRecord] = field(default_factory=list)
    expired: t.List[GroceryItemRecord] = field(default_factory=list)
    expiring: t.List[GroceryItemRecord] = field(default_factory=list)

    @property
    def has_alerts(self) -> bool:
        """Whether anything is expired or about to expire."""
        return bool(self.expired or self.expiring)


async def sweep_expiring_items(
    service: ItemService,
    on_day: date | None = None,
    window_days: int | None = None,
) -> SweepReport:
    """Reconcile every item and broadcast the ones expiring soon.

    Args:
        service (ItemService):
            Service bound to the session used for the sweep.
        on_day (date | None):
            The reference day, defaults to today.
        window_days (int | None):
            Lookahead window, defaults to the configured sweep window.

    Returns:
        SweepReport: Changed, expired and expiring items.
    """
    reference: date = on_day or today()
    window: int = (
        SETTINGS.expiring_window_days if window_days is None else window_days
    )

    reconciled: ReconcileResult = await service.reconcile_all(reference)
    expiring: t.List[GroceryItemRecord] = expiring_soon(
        reversed(reconciled.items), reference, window
    )

    if expiring:
        async with service.notifier.ordering_lock:
            service.notifier.publish(items_expiring(expiring, window))

    return SweepReport(
        checked_at=datetime.now(timezone.utc),
        window_days=window,
        changed=reconciled.changed,
        expired=[
            item
            for item in reconciled.items
            if item.status == ItemStatus.EXPIRED
        ],
        expiring=expiring,
    )


def format_expiration_report(report: SweepReport) -> str:
    """Format a sweep report into a readable log block.

    Args:
        report (SweepReport): The sweep results.

    Returns:
        str: The formatted expiration report.
    """
    lines: t.List[str] = [
        "=" * 50,
        "GROCERYWATCH EXPIRATION REPORT",
        f"Generated: {report.checked_at.isoformat()}",
        "=" * 50,
        "",
    ]

    if report.changed:
        lines.append(f"Status changes this sweep: {len(report.changed)}")
        lines.append("")

    if report.expired:
        lines.append("🚨 EXPIRED ITEMS:")
        lines.append("-" * 30)
        for item in report.expired:
            lines.append(
                f"  • {item.product_name} (x{item.quantity}) - "
                f"Expired: {item.expiry_date.isoformat()}"
            )
        lines.append("")

    if report.expiring:
        lines.append(f"⚠️ Expiring within {report.window_days} days:")
        lines.append("-" * 30)
        for item in report.expiring:
            lines.append(
                f"  • {item.product_name} (x{item.quantity}) - "
                f"Expires: {item.expiry_date.isoformat()}"
            )
        lines.append("")

    if not report.has_alerts:
        lines.append("✅ All items are fresh! No expiration alerts.")

    return "\n".join(lines)


async def check_expiring_items_task(notifier: ChangeNotifier) -> None:
    """Background task to reconcile the inventory and send alerts.

    Args:
        notifier (ChangeNotifier): Where status changes and alerts go.
    """
    LOGGER.info("Running expiration check...")

    try:
        async with ASYNC_SESSION_MAKER() as session:
            report: SweepReport = await sweep_expiring_items(
                ItemService(session, notifier)
            )

        LOGGER.info("\n%s", format_expiration_report(report))

        if report.has_alerts and SETTINGS.smtp_enabled:
            if await send_expiration_digest(report.expired, report.expiring):
                LOGGER.info("Sent expiration digest email")

    except Exception:  # pylint: disable=broad-except
        LOGGER.exception("Error in expiration check task")
