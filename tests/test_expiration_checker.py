"""Tests for the periodic expiry sweep and the e-mail digest."""

from datetime import timedelta
from unittest.mock import AsyncMock

from grocerywatch.core.config import SETTINGS
from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.schemas.notifications import EventType
from grocerywatch.services import ItemService, ItemStore
from grocerywatch.services import email_notifications, expiration_checker
from grocerywatch.services.expiration_checker import (
    check_expiring_items_task,
    format_expiration_report,
    sweep_expiring_items,
)


async def _seed(session, day):
    store = ItemStore(session)
    earlier = day - timedelta(days=3)
    stale = await store.create(
        "Ham", ItemCategory.MEAT, 1, day - timedelta(days=1), on_day=earlier
    )
    soon = await store.create(
        "Lettuce", ItemCategory.VEGETABLES, 1, day + timedelta(days=2), day
    )
    await store.create(
        "Rice", ItemCategory.GRAINS, 1, day + timedelta(days=60), day
    )
    return stale, soon


def _drain(subscription):
    events = []
    while not subscription.queue.empty():
        events.append(subscription.queue.get_nowait())
    return events


async def test_sweep_reconciles_and_broadcasts(session, notifier, day):
    stale, soon = await _seed(session, day)
    subscription = notifier.subscribe()

    report = await sweep_expiring_items(
        ItemService(session, notifier), on_day=day
    )

    assert [item.id for item in report.changed] == [stale.id]
    assert [item.id for item in report.expired] == [stale.id]
    assert [item.id for item in report.expiring] == [soon.id]
    assert report.window_days == 3
    assert report.has_alerts

    events = _drain(subscription)
    assert [event.type for event in events] == [
        EventType.ITEM_UPDATED,
        EventType.ITEMS_EXPIRING,
    ]
    assert events[0].item.status == ItemStatus.EXPIRED
    assert [item.id for item in events[1].items] == [soon.id]


async def test_quiet_sweep_publishes_nothing(session, notifier, day):
    await ItemStore(session).create(
        "Rice", ItemCategory.GRAINS, 1, day + timedelta(days=60), day
    )
    subscription = notifier.subscribe()

    report = await sweep_expiring_items(
        ItemService(session, notifier), on_day=day
    )

    assert not report.has_alerts
    assert _drain(subscription) == []
    assert "All items are fresh" in format_expiration_report(report)


async def test_report_lists_items(session, notifier, day):
    await _seed(session, day)
    report = await sweep_expiring_items(
        ItemService(session, notifier), on_day=day
    )

    text = format_expiration_report(report)

    assert "EXPIRED ITEMS" in text
    assert "Ham (x1)" in text
    assert "Expiring within 3 days" in text
    assert "Lettuce (x1)" in text


async def test_task_sends_digest_when_enabled(
    session, session_maker, notifier, day, monkeypatch
):
    await ItemStore(session).create(
        "Ham", ItemCategory.MEAT, 1, day - timedelta(days=1), on_day=day
    )
    send = AsyncMock(return_value=True)
    monkeypatch.setattr(
        expiration_checker, "ASYNC_SESSION_MAKER", session_maker
    )
    monkeypatch.setattr(expiration_checker, "send_expiration_digest", send)
    monkeypatch.setattr(SETTINGS, "smtp_enabled", True)

    await check_expiring_items_task(notifier)

    send.assert_awaited_once()
    expired, expiring = send.await_args.args
    assert [item.product_name for item in expired] == ["Ham"]
    assert expiring == []


async def test_task_swallows_errors(notifier, monkeypatch, caplog):
    broken = AsyncMock(side_effect=RuntimeError("database gone"))
    monkeypatch.setattr(expiration_checker, "sweep_expiring_items", broken)

    await check_expiring_items_task(notifier)

    assert "Error in expiration check task" in caplog.text


class TestEmailDigest:
    """Rendering and sending the digest."""

    async def test_nothing_to_send(self):
        assert not await email_notifications.send_expiration_digest([], [])

    async def test_disabled_smtp_skips(self, day, make_record, monkeypatch):
        send = AsyncMock()
        monkeypatch.setattr(email_notifications.aiosmtplib, "send", send)
        monkeypatch.setattr(SETTINGS, "smtp_enabled", False)

        sent = await email_notifications.send_expiration_digest(
            [], [make_record(day)], to_email="me@example.com"
        )

        assert not sent
        send.assert_not_awaited()

    async def test_sends_rendered_digest(self, day, make_record, monkeypatch):
        send = AsyncMock()
        monkeypatch.setattr(email_notifications.aiosmtplib, "send", send)
        monkeypatch.setattr(SETTINGS, "smtp_enabled", True)
        monkeypatch.setattr(SETTINGS, "smtp_port", 587)

        expired = [
            make_record(
                day - timedelta(days=1),
                status=ItemStatus.EXPIRED,
                product_name="Sour Cream",
            )
        ]
        expiring = [make_record(day + timedelta(days=1), product_name="Kale")]
        sent = await email_notifications.send_expiration_digest(
            expired, expiring, to_email="me@example.com"
        )

        assert sent
        message = send.await_args.args[0]
        assert message["To"] == "me@example.com"
        assert "expired" in message["Subject"]
        assert send.await_args.kwargs["start_tls"] is True
        text_part, html_part = message.get_payload()
        assert "Sour Cream" in text_part.get_payload(decode=True).decode()
        assert "Kale" in html_part.get_payload(decode=True).decode()

    async def test_smtp_failure_returns_false(
        self, day, make_record, monkeypatch
    ):
        monkeypatch.setattr(
            email_notifications.aiosmtplib,
            "send",
            AsyncMock(side_effect=OSError("connection refused")),
        )
        monkeypatch.setattr(SETTINGS, "smtp_enabled", True)

        assert not await email_notifications.send_expiration_digest(
            [make_record(day)], [], to_email="me@example.com"
        )

    def test_text_digest_lists_expiring_items(self, day, make_record):
        text = email_notifications.format_expiration_text_email(
            [], [make_record(day, product_name="Kale")]
        )
        assert "Kale" in text


async def test_task_without_smtp_does_not_send(
    session, session_maker, notifier, day, monkeypatch
):
    await ItemStore(session).create(
        "Ham", ItemCategory.MEAT, 1, day - timedelta(days=1), on_day=day
    )
    send = AsyncMock()
    monkeypatch.setattr(
        expiration_checker, "ASYNC_SESSION_MAKER", session_maker
    )
    monkeypatch.setattr(expiration_checker, "send_expiration_digest", send)
    monkeypatch.setattr(SETTINGS, "smtp_enabled", False)

    await check_expiring_items_task(notifier)

    send.assert_not_awaited()
