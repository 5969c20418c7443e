from __future__ import annotations

from pipeline_crm.core.enums import NotificationVariant
from pipeline_crm.services.notifications import Notification, NotificationCenter


def test_history_is_bounded_and_newest_first():
    center = NotificationCenter(history_size=2)
    for idx in range(3):
        center.notify(Notification(title="Success", description=f"n{idx}"))

    assert [n.description for n in center.recent()] == ["n2", "n1"]


def test_error_notifications_are_flagged():
    center = NotificationCenter()
    center.notify(Notification(title="Error", description="boom", variant=NotificationVariant.DESTRUCTIVE))

    assert center.recent()[0].is_error
    center.clear()
    assert center.recent() == []
