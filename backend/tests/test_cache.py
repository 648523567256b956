"""
Tests for the facility calendar cache and its post-commit invalidation.
"""

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY

from facility_booking.services.approval_service import decide_booking
from facility_booking.services.booking_state import Event
from facility_booking.services.cache_service import (
    discard_stale_calendars, invalidate_stale_calendars, mark_calendar_stale,
)
from facility_booking.services.identity_service import resolve_identity

CALENDAR_KEY = "calendar:auditorium"


def cache_ops(operation: str, result: str) -> float:
    value = REGISTRY.get_sample_value("cache_operations_total", {"operation": operation, "result": result})
    return value or 0.0


@pytest.mark.asyncio
async def test_calendar_is_cached_and_refreshed_after_transitions(
    client: AsyncClient, headers_for, create_booking, calendar_cache,
    employee, group_director, facility_manager, auditorium,
):
    employee_headers = await headers_for(employee)
    gd_headers = await headers_for(group_director)
    fm_headers = await headers_for(facility_manager)

    booking = await create_booking(employee, "auditorium")
    await client.post(f"/api/v1/approvals/gd/{booking['id']}/approve", headers=gd_headers)
    await client.post(f"/api/v1/approvals/fm/{booking['id']}/approve", headers=fm_headers)

    first = await client.get("/api/v1/facility/auditorium", headers=employee_headers)
    assert [b["id"] for b in first.json()] == [booking["id"]]
    assert CALENDAR_KEY in calendar_cache.store

    sets_before = calendar_cache.calls.count(("setex", CALENDAR_KEY))
    second = await client.get("/api/v1/facility/auditorium", headers=employee_headers)
    assert second.json() == first.json()
    assert calendar_cache.calls.count(("setex", CALENDAR_KEY)) == sets_before  # served from cache

    await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=employee_headers)
    await client.post(f"/api/v1/cancellations/gd/{booking['id']}/approve", headers=gd_headers)
    await client.post(f"/api/v1/cancellations/fm/{booking['id']}/approve", headers=fm_headers)

    after = await client.get("/api/v1/facility/auditorium", headers=employee_headers)
    assert after.json() == []


@pytest.mark.asyncio
async def test_invalidation_waits_for_commit(
    client: AsyncClient, db_session, headers_for, create_booking, calendar_cache,
    employee, group_director, facility_manager, auditorium,
):
    booking = await create_booking(employee, "auditorium")
    await client.post(f"/api/v1/approvals/gd/{booking['id']}/approve", headers=await headers_for(group_director))
    calendar_cache.store[CALENDAR_KEY] = "[]"
    calendar_cache.calls.clear()
    deletes_before = cache_ops("delete", "ok")

    identity = await resolve_identity(db_session, facility_manager.employee_id)
    await decide_booking(db_session, identity, booking["id"], Event.APPROVE)

    # Nothing is dropped before the commit
    assert CALENDAR_KEY in calendar_cache.store
    assert ("delete", CALENDAR_KEY) not in calendar_cache.calls

    await db_session.commit()
    await invalidate_stale_calendars(db_session)

    assert CALENDAR_KEY not in calendar_cache.store
    assert cache_ops("delete", "ok") == deletes_before + 1


@pytest.mark.asyncio
async def test_rolled_back_marks_are_discarded(db_session, calendar_cache):
    calendar_cache.store[CALENDAR_KEY] = "[]"

    mark_calendar_stale(db_session, "auditorium")
    discard_stale_calendars(db_session)
    await invalidate_stale_calendars(db_session)

    assert CALENDAR_KEY in calendar_cache.store
    assert calendar_cache.calls == []


@pytest.mark.asyncio
async def test_new_request_invalidates_after_commit(
    client: AsyncClient, create_booking, calendar_cache, employee, auditorium
):
    calendar_cache.store[CALENDAR_KEY] = "[]"
    await create_booking(employee, "auditorium")
    assert calendar_cache.calls[-1] == ("delete", CALENDAR_KEY)
    assert CALENDAR_KEY not in calendar_cache.store
