# tests/test_api.py

import pytest

from Dojodesk import api
from Dojodesk.core.errors import NotFound, SubscriptionUnpaid


def test_every_channel_is_callable():
    assert all(callable(h) for h in api.HANDLERS.values())
    for channel in ("clients:getAll", "subscriptions:assign",
                    "attendance:updateStatus", "lessons:generateFromSchedule", "auth:login"):
        assert channel in api.HANDLERS


def test_unknown_channel():
    with pytest.raises(NotFound):
        api.dispatch("clients:explode")


def test_dispatch_end_to_end(db):
    c = api.dispatch("clients:create", "Oleg")
    p = api.dispatch("subscriptions:create", "Trial", 0, 7, 1)
    g = api.dispatch("groups:create", "Open mat", schedule=[
        {"day_of_week": 0, "start_time": "12:00", "end_time": "13:00"},
    ])
    api.dispatch("groups:addMember", g.id, c.id, joined_at="2025-03-01")
    (lesson,) = api.dispatch("lessons:generateFromSchedule", g.id, "2025-03-10", "2025-03-10")
    cs = api.dispatch("subscriptions:assign", c.id, p.id, "2025-03-10")

    with pytest.raises(SubscriptionUnpaid):
        api.dispatch("attendance:updateStatus", lesson.id, c.id, "present")
    api.dispatch("subscriptions:markPaid", cs.id)
    mark = api.dispatch("attendance:updateStatus", lesson.id, c.id, "present")
    assert mark.status == "present"
    status, _ = api.dispatch("subscriptions:getClientStatus", c.id)
    assert status == "expired"
    assert api.dispatch("auth:login", "admin", "s3cret") is not None
