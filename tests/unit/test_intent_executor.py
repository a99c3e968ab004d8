from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from fakes import FakeScheduleStore, make_event
from schedule_assistant.core.enums import ScheduleCategory, ScheduleIntent, SchedulePriority
from schedule_assistant.core.exceptions import NotFoundError, ValidationAppError
from schedule_assistant.schemas.ai_schedule import ExecuteScheduleRequest
from schedule_assistant.schemas.schedule import SchedulePayload
from schedule_assistant.services.ai.executor import IntentExecutor

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _executor(store: FakeScheduleStore) -> IntentExecutor:
    return IntentExecutor(store, clock=lambda: NOW)


def _request(intent: str, **kwargs) -> ExecuteScheduleRequest:
    return ExecuteScheduleRequest(intent=intent, **kwargs)


@pytest.mark.asyncio
async def test_create_applies_defaults(store, owner_id):
    result = await _executor(store).execute(
        owner_id,
        _request("create", data=SchedulePayload(title="会议", start_time="2024-01-01T00:00:00.000Z")),
    )

    assert result.intent == ScheduleIntent.CREATE
    assert result.message == "Schedule created"
    event = result.event
    assert event.owner_id == owner_id
    assert event.title == "会议"
    assert event.start_time == datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert event.end_time == datetime(2024, 1, 1, 1, 0, tzinfo=timezone.utc)
    assert event.category == ScheduleCategory.WORK
    assert event.priority == SchedulePriority.MEDIUM
    assert event.is_important is False
    assert event.is_urgent is False
    assert event.extra_data is None


@pytest.mark.asyncio
async def test_create_keeps_valid_fields_and_records_completed(store, owner_id):
    data = SchedulePayload(
        title="  Dentist ",
        start_time="2024-01-01T10:00:00Z",
        end_time="2024-01-01T10:00:00Z",
        category="personal",
        priority="HIGH",
        is_urgent=True,
        location="Clinic",
        timezone="Europe/Paris",
        completed=False,
        metadata={"source": "chat"},
    )

    result = await _executor(store).create(owner_id, data)

    event = result.event
    assert event.title == "Dentist"
    assert event.end_time - event.start_time == timedelta(minutes=30)
    assert event.category == ScheduleCategory.PERSONAL
    assert event.priority == SchedulePriority.HIGH
    assert event.is_urgent is True
    assert event.location == "Clinic"
    assert event.timezone == "Europe/Paris"
    assert event.extra_data == {"source": "chat", "completed": False}


@pytest.mark.asyncio
async def test_create_with_unknown_category_falls_back_to_default(store, owner_id):
    data = SchedulePayload(title="Gym", start_time="2024-01-01T07:00:00Z", category="sport", priority="urgent")

    result = await _executor(store).create(owner_id, data)

    assert result.event.category == ScheduleCategory.WORK
    assert result.event.priority == SchedulePriority.MEDIUM


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        None,
        SchedulePayload(start_time="2024-01-01T00:00:00Z"),
        SchedulePayload(title="   ", start_time="2024-01-01T00:00:00Z"),
        SchedulePayload(title="Lunch"),
    ],
)
async def test_create_requires_title_and_start(store, owner_id, data):
    with pytest.raises(ValidationAppError):
        await _executor(store).execute(owner_id, _request("create", data=data))

    assert not store.called("create_event")


@pytest.mark.asyncio
async def test_create_with_unparseable_start_is_rejected(store, owner_id):
    with pytest.raises(ValidationAppError):
        await _executor(store).create(owner_id, SchedulePayload(title="Lunch", start_time="tomorrow noon"))

    assert not store.called("create_event")


@pytest.mark.asyncio
async def test_update_requires_id_and_changes(store, owner_id):
    executor = _executor(store)

    with pytest.raises(ValidationAppError):
        await executor.execute(owner_id, _request("update", data=SchedulePayload(title="x")))
    with pytest.raises(ValidationAppError):
        await executor.execute(owner_id, _request("update", schedule_id=uuid4(), data=SchedulePayload()))
    with pytest.raises(ValidationAppError):
        await executor.execute(owner_id, _request("update", schedule_id=uuid4()))

    assert store.calls == []


@pytest.mark.asyncio
async def test_update_of_foreign_schedule_is_not_found(owner_id):
    foreign = make_event(owner_id=uuid4())
    store = FakeScheduleStore([foreign])

    with pytest.raises(NotFoundError):
        await _executor(store).update(owner_id, foreign.id, SchedulePayload(title="Mine now"))

    assert not store.called("update_event")
    assert foreign.title == "Standup"


@pytest.mark.asyncio
async def test_update_of_deleted_schedule_is_not_found(owner_id):
    event = make_event(owner_id=owner_id, deleted_at=NOW)
    store = FakeScheduleStore([event])

    with pytest.raises(NotFoundError):
        await _executor(store).update(owner_id, event.id, SchedulePayload(title="Back"))

    assert not store.called("update_event")


@pytest.mark.asyncio
async def test_partial_update_only_touches_given_fields(owner_id):
    event = make_event(owner_id=owner_id, location="Room 1", description="daily")
    store = FakeScheduleStore([event])

    result = await _executor(store).execute(
        owner_id,
        _request("update", schedule_id=event.id, data=SchedulePayload(location="Room 2", priority="low")),
    )

    _, _, fields = store.call_args("update_event")
    assert fields == {"location": "Room 2", "priority": SchedulePriority.LOW}
    assert result.message == "Schedule updated"
    assert result.event.description == "daily"
    assert result.event.start_time == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_update_moving_start_past_end_repairs_range(owner_id):
    event = make_event(owner_id=owner_id)
    store = FakeScheduleStore([event])

    result = await _executor(store).update(owner_id, event.id, SchedulePayload(start_time="2024-01-01T11:00:00Z"))

    assert result.event.start_time == datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc)
    assert result.event.end_time == datetime(2024, 1, 1, 11, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_update_end_only_keeps_start(owner_id):
    event = make_event(owner_id=owner_id)
    store = FakeScheduleStore([event])

    result = await _executor(store).update(owner_id, event.id, SchedulePayload(end_time="2024-01-01T12:00:00Z"))

    _, _, fields = store.call_args("update_event")
    assert fields["start_time"] == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    assert result.event.end_time == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_update_merges_metadata(owner_id):
    event = make_event(owner_id=owner_id, extra_data={"source": "import", "color": "red"})
    store = FakeScheduleStore([event])

    result = await _executor(store).update(
        owner_id,
        event.id,
        SchedulePayload(metadata={"color": "blue"}, completed=True),
    )

    assert result.event.extra_data == {"source": "import", "color": "blue", "completed": True}


@pytest.mark.asyncio
async def test_delete_requires_id(store, owner_id):
    with pytest.raises(ValidationAppError):
        await _executor(store).execute(owner_id, _request("delete"))


@pytest.mark.asyncio
async def test_delete_unknown_schedule_never_mutates(store, owner_id):
    with pytest.raises(NotFoundError):
        await _executor(store).execute(owner_id, _request("delete", schedule_id=uuid4()))

    assert not store.called("soft_delete")


@pytest.mark.asyncio
async def test_delete_soft_deletes_and_returns_snapshot(owner_id):
    event = make_event(owner_id=owner_id, title="Retro")
    store = FakeScheduleStore([event])

    result = await _executor(store).execute(owner_id, _request("delete", schedule_id=event.id))

    assert result.intent == ScheduleIntent.DELETE
    assert result.message == 'Deleted "Retro"'
    assert result.event is event
    assert store.call_args("soft_delete") == (event,)
    assert event.deleted_at is not None
    assert await store.find_in_range(owner_id) == []


@pytest.mark.asyncio
async def test_query_defaults_to_next_seven_days(owner_id):
    later = make_event(owner_id=owner_id, title="Later", start_time=NOW + timedelta(days=3))
    sooner = make_event(owner_id=owner_id, title="Sooner", start_time=NOW + timedelta(hours=2))
    past = make_event(owner_id=owner_id, title="Past", start_time=NOW - timedelta(days=1))
    too_far = make_event(owner_id=owner_id, title="Too far", start_time=NOW + timedelta(days=7))
    store = FakeScheduleStore([later, sooner, past, too_far])

    result = await _executor(store).execute(owner_id, _request("query"))

    assert store.call_args("find_in_range") == (owner_id, NOW, NOW + timedelta(days=7))
    assert [item.title for item in result.events] == ["Sooner", "Later"]
    assert result.message == "Here are your schedules"


@pytest.mark.asyncio
async def test_query_with_explicit_window(owner_id):
    store = FakeScheduleStore()

    await _executor(store).query(
        owner_id,
        SchedulePayload(start_time="2024-02-01T00:00:00Z", end_time="2024-02-02T00:00:00Z"),
    )

    _, start, end = store.call_args("find_in_range")
    assert start == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert end == datetime(2024, 2, 2, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_query_start_only_extends_seven_days(owner_id):
    store = FakeScheduleStore()

    await _executor(store).query(owner_id, SchedulePayload(start_time="2024-02-01T00:00:00Z"))

    _, start, end = store.call_args("find_in_range")
    assert end - start == timedelta(days=7)


@pytest.mark.asyncio
async def test_query_with_invalid_start_is_rejected(store, owner_id):
    with pytest.raises(ValidationAppError):
        await _executor(store).query(owner_id, SchedulePayload(start_time="last week"))


@pytest.mark.asyncio
async def test_unsupported_intent_is_rejected(store, owner_id):
    with pytest.raises(ValidationAppError) as exc_info:
        await _executor(store).execute(owner_id, _request("archive", data=SchedulePayload(title="x")))

    assert exc_info.value.message == "Unsupported intent"
    assert store.calls == []


@pytest.mark.asyncio
async def test_intent_is_case_insensitive(store, owner_id):
    result = await _executor(store).execute(owner_id, _request(" QUERY "))

    assert result.intent == ScheduleIntent.QUERY


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [SchedulePayload(title="   "), SchedulePayload(category="party"), SchedulePayload(priority="urgent")],
)
async def test_update_without_effective_changes_is_rejected(owner_id, data):
    event = make_event(owner_id=owner_id)
    store = FakeScheduleStore([event])

    with pytest.raises(ValidationAppError) as exc_info:
        await _executor(store).update(owner_id, event.id, data)

    assert exc_info.value.message == "Nothing to update"
    assert not store.called("update_event")
    assert event.title == "Standup"
