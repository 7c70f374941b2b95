import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.client import ClientSettings, FieldClient
from app.client.errors import NotAuthenticatedError, SyncAuthError, SyncTransportError
from app.core.config import settings
from app.main import app
from app.models.response import SurveyResponse
from app.schemas.response import SyncStatus

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

ANSWERS = {
    "problems": {"type": "ranking", "ratings": {"A": 5, "B": 5, "C": 3, "D": 5}},
    "satisfaction": {"type": "rating", "value": 4},
    "interested_in_trying": {"type": "multiple-choice", "value": "yes"},
}


def make_field_client(tmp_path, transport, online=True, **overrides):
    options = {"BASE_URL": "http://test", "DATA_DIR": tmp_path / "client", "SYNC_INTERVAL_SECONDS": 3600}
    options.update(overrides)
    return FieldClient(settings=ClientSettings(**options), transport=transport, online=online)


def sync_reply(items):
    created = [item["server_id"] for item in items if item["status"] == "created"]
    failed = [{"device_id": "d", "client_id": item.get("client_id"), "reason": item["reason"]}
              for item in items if item["status"] != "created"]
    return httpx.Response(200, json={
        "successful_ids": created, "failed": failed, "items": items,
        "message": f"Sync completed: {len(created)} successful, {len(failed)} failed",
    })


class LostAckTransport(httpx.AsyncBaseTransport):
    """Forwards to the app but loses the answer to the first sync request."""

    def __init__(self, inner):
        self.inner = inner
        self.drop_next_ack = True

    async def handle_async_request(self, request):
        response = await self.inner.handle_async_request(request)
        if self.drop_next_ack and request.url.path.endswith("/sync"):
            self.drop_next_ack = False
            await response.aread()
            raise httpx.ReadTimeout("acknowledgement lost", request=request)
        return response


async def offline_submissions(field, count, template_id=1):
    field.set_online(False)
    for i in range(count):
        await field.submit_survey(ANSWERS, started_at=START + timedelta(minutes=i), template_id=template_id)


@pytest.mark.asyncio
async def test_offline_then_online_replay(tmp_path, db, admin, active_template):
    async with make_field_client(tmp_path, httpx.ASGITransport(app=app)) as field:
        await field.login(admin["email"], admin["password"])
        template = await field.load_template(active_template["id"])
        assert template["id"] == active_template["id"]

        await offline_submissions(field, 2, template_id=active_template["id"])
        assert field.pending_count() == 2
        assert db.query(SurveyResponse).count() == 0

        field.set_online(True)
        result = await field.sync_now()

    assert len(result.successful) == 2
    assert result.failed == []
    assert field.pending_count() == 0
    assert [r.sync_status for r in field.store.list_all()] == [SyncStatus.SYNCED, SyncStatus.SYNCED]
    assert all(r.server_id for r in field.store.list_all())
    assert field.store.last_sync_timestamp is not None

    stored = db.query(SurveyResponse).all()
    assert len(stored) == 2
    assert {r.sync_status for r in stored} == {SyncStatus.SYNCED}


@pytest.mark.asyncio
async def test_lost_acknowledgement_is_resolved_as_duplicate(tmp_path, db, admin, active_template):
    transport = LostAckTransport(httpx.ASGITransport(app=app))
    async with make_field_client(tmp_path, transport) as field:
        await field.login(admin["email"], admin["password"])
        await offline_submissions(field, 1, template_id=active_template["id"])
        field.set_online(True)

        with pytest.raises(SyncTransportError):
            await field.sync_now()
        assert field.pending_count() == 1

        result = await field.sync_now()

    local = field.store.list_all()[0]
    assert result.duplicates == [local.id]
    assert result.failed == [local.id]
    assert local.sync_status == SyncStatus.SYNCED
    assert local.sync_history[-1].message == "Response already synced"
    assert field.pending_count() == 0
    assert db.query(SurveyResponse).count() == 1


@pytest.mark.asyncio
async def test_online_submission_is_delivered_immediately(tmp_path, db, admin, active_template):
    async with make_field_client(tmp_path, httpx.ASGITransport(app=app)) as field:
        await field.login(admin["email"], admin["password"])
        await field.load_template(active_template["id"])
        response = await field.submit_survey(ANSWERS, started_at=START)

    assert response.sync_status == SyncStatus.SYNCED
    assert response.server_id is not None
    assert [(item.category, item.rating) for item in response.top_ranked] == [("A", 5), ("B", 5), ("D", 5)]
    assert field.pending_count() == 0
    assert db.query(SurveyResponse).count() == 1


@pytest.mark.asyncio
async def test_transport_failure_leaves_queue_untouched(tmp_path):
    def handler(request):
        raise httpx.ConnectError("network unreachable", request=request)

    async with make_field_client(tmp_path, httpx.MockTransport(handler)) as field:
        field.session.token = "token"
        response = await field.submit_survey(ANSWERS, started_at=START, template_id=1)
        assert response.sync_status == SyncStatus.PENDING
        assert field.pending_count() == 1

        with pytest.raises(SyncTransportError):
            await field.sync_now()

    assert field.pending_count() == 1
    assert field.store.list_all()[0].sync_status == SyncStatus.PENDING
    assert field.store.last_sync_timestamp is None


@pytest.mark.asyncio
async def test_server_error_is_a_transport_failure(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"detail": "down"}))
    async with make_field_client(tmp_path, transport) as field:
        field.session.token = "token"
        await offline_submissions(field, 1)
        field.set_online(True)
        with pytest.raises(SyncTransportError):
            await field.sync_now()
    assert field.pending_count() == 1


@pytest.mark.asyncio
async def test_auth_failure_leaves_queue_untouched(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"detail": "Could not validate credentials"}))
    async with make_field_client(tmp_path, transport) as field:
        field.session.token = "expired"
        await offline_submissions(field, 2)
        field.set_online(True)
        with pytest.raises(SyncAuthError):
            await field.sync_now()
    assert field.pending_count() == 2


@pytest.mark.asyncio
async def test_sync_needs_a_session(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    async with make_field_client(tmp_path, transport) as field:
        await offline_submissions(field, 1)
        field.set_online(True)
        with pytest.raises(NotAuthenticatedError):
            await field.sync_now()
    assert field.pending_count() == 1


@pytest.mark.asyncio
async def test_empty_queue_or_offline_is_a_noop(tmp_path):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    async with make_field_client(tmp_path, httpx.MockTransport(handler)) as field:
        field.session.token = "token"
        result = await field.sync_now()
        assert not result.skipped and result.submitted == 0

        await offline_submissions(field, 1)
        result = await field.sync_now()
        assert result.submitted == 0

    assert calls == []
    assert field.pending_count() == 1


@pytest.mark.asyncio
async def test_rejected_items_are_failed_and_not_requeued(tmp_path):
    def handler(request):
        batch = json.loads(request.content)["responses"]
        return sync_reply([
            {"index": 0, "client_id": batch[0]["client_id"], "status": "created", "server_id": 11},
            {"index": 1, "client_id": batch[1]["client_id"], "status": "rejected",
             "reason": "Survey template not found"},
        ])

    async with make_field_client(tmp_path, httpx.MockTransport(handler)) as field:
        field.session.token = "token"
        await offline_submissions(field, 2)
        field.set_online(True)
        result = await field.sync_now()

    first, second = field.store.list_all()
    assert result.successful == [first.id]
    assert result.server_ids == {first.id: 11}
    assert [(r.local_id, r.reason) for r in result.rejected] == [(second.id, "Survey template not found")]
    assert second.sync_status == SyncStatus.FAILED
    assert second.sync_history[-1].message == "Survey template not found"
    assert field.pending_count() == 0
    assert [r.id for r in field.failed_responses()] == [second.id]


@pytest.mark.asyncio
async def test_concurrent_sync_is_dropped(tmp_path):
    release = asyncio.Event()
    requests = []

    async def handler(request):
        requests.append(request)
        await release.wait()
        batch = json.loads(request.content)["responses"]
        return sync_reply([
            {"index": i, "client_id": item["client_id"], "status": "created", "server_id": i + 1}
            for i, item in enumerate(batch)
        ])

    async with make_field_client(tmp_path, httpx.MockTransport(handler)) as field:
        field.session.token = "token"
        await offline_submissions(field, 1)
        field.set_online(True)

        first = asyncio.create_task(field.sync_now())
        while not requests:
            await asyncio.sleep(0)
        assert field.sync_client.in_progress

        second = await field.sync_now()
        assert second.skipped

        release.set()
        result = await first

    assert len(requests) == 1
    assert len(result.successful) == 1
    assert field.pending_count() == 0


@pytest.mark.asyncio
async def test_reconnect_triggers_background_sync(tmp_path):
    def handler(request):
        batch = json.loads(request.content)["responses"]
        return sync_reply([
            {"index": i, "client_id": item["client_id"], "status": "created", "server_id": i + 1}
            for i, item in enumerate(batch)
        ])

    async with make_field_client(tmp_path, httpx.MockTransport(handler)) as field:
        field.session.token = "token"
        field.scheduler.start()
        await offline_submissions(field, 2)

        field.set_online(True)
        for _ in range(200):
            if field.pending_count() == 0:
                break
            await asyncio.sleep(0.01)

    assert field.pending_count() == 0
    assert not field.scheduler.running


@pytest.mark.asyncio
async def test_local_dashboard(tmp_path):
    async with make_field_client(tmp_path, httpx.MockTransport(lambda request: httpx.Response(500))) as field:
        assert field.dashboard().total_responses == 0
        await offline_submissions(field, 3)
        summary = field.dashboard()

    assert summary.total_responses == 3
    assert summary.top_problem == "A"
    assert summary.satisfaction == {1: 0, 2: 0, 3: 0, 4: 3, 5: 0}
    assert summary.early_adopter.rate == "100%"
    assert summary.unique_devices == 1


def created_reply(request):
    batch = json.loads(request.content)["responses"]
    return sync_reply([
        {"index": i, "client_id": item["client_id"], "status": "created", "server_id": i + 1}
        for i, item in enumerate(batch)
    ])


async def wait_until_drained(field, attempts=300):
    for _ in range(attempts):
        if field.pending_count() == 0:
            return
        await asyncio.sleep(0.01)


class BatchRecorder(httpx.AsyncBaseTransport):
    """Forwards to the app and records the size of every sync batch."""

    def __init__(self, inner):
        self.inner = inner
        self.sizes = []

    async def handle_async_request(self, request):
        if request.url.path.endswith("/sync"):
            self.sizes.append(len(json.loads(request.content)["responses"]))
        return await self.inner.handle_async_request(request)


@pytest.mark.asyncio
async def test_large_queue_is_sent_in_server_sized_batches(tmp_path, db, admin, active_template, monkeypatch):
    monkeypatch.setattr(settings, "SYNC_MAX_BATCH_SIZE", 3)
    transport = BatchRecorder(httpx.ASGITransport(app=app))
    async with make_field_client(tmp_path, transport, SYNC_BATCH_SIZE=3) as field:
        await field.login(admin["email"], admin["password"])
        await offline_submissions(field, 7, template_id=active_template["id"])
        field.set_online(True)
        result = await field.sync_now()

    assert transport.sizes == [3, 3, 1]
    assert result.submitted == 7
    assert len(result.successful) == 7
    assert len(result.server_ids) == 7
    assert field.pending_count() == 0
    assert db.query(SurveyResponse).count() == 7


@pytest.mark.asyncio
async def test_failed_batch_keeps_only_unsent_responses_queued(tmp_path):
    def handler(request):
        if handler.calls:
            raise httpx.ConnectError("network unreachable", request=request)
        handler.calls += 1
        return created_reply(request)
    handler.calls = 0

    async with make_field_client(tmp_path, httpx.MockTransport(handler), SYNC_BATCH_SIZE=2) as field:
        field.session.token = "token"
        await offline_submissions(field, 3)
        field.set_online(True)
        with pytest.raises(SyncTransportError):
            await field.sync_now()

    first, second, third = field.store.list_all()
    assert [first.sync_status, second.sync_status] == [SyncStatus.SYNCED, SyncStatus.SYNCED]
    assert third.sync_status == SyncStatus.PENDING
    assert [r.id for r in field.store.pending()] == [third.id]


@pytest.mark.asyncio
async def test_non_api_reply_is_a_transport_failure(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>captive portal</html>"))
    async with make_field_client(tmp_path, transport) as field:
        field.session.token = "token"
        response = await field.submit_survey(ANSWERS, started_at=START, template_id=1)
        assert response.sync_status == SyncStatus.PENDING

        with pytest.raises(SyncTransportError):
            await field.sync_now()

    assert field.pending_count() == 1


@pytest.mark.asyncio
async def test_unexpected_sync_reply_shape_is_a_transport_failure(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"items": "nope"}))
    async with make_field_client(tmp_path, transport) as field:
        field.session.token = "token"
        await offline_submissions(field, 1)
        field.set_online(True)
        with pytest.raises(SyncTransportError):
            await field.sync_now()
    assert field.pending_count() == 1


@pytest.mark.asyncio
async def test_interval_trigger_drains_queue(tmp_path):
    calls = []

    def handler(request):
        calls.append(request)
        return created_reply(request)

    async with make_field_client(tmp_path, httpx.MockTransport(handler), SYNC_INTERVAL_SECONDS=0.01) as field:
        # Queued because there is no session yet, while the device stays online
        await field.submit_survey(ANSWERS, started_at=START, template_id=1)
        assert calls == []
        assert field.pending_count() == 1

        field.session.token = "token"
        field.scheduler.start()
        await wait_until_drained(field)
        assert field.scheduler.running

    assert field.pending_count() == 0
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_interval_trigger_survives_a_captive_portal(tmp_path):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(200, text="<html>captive portal</html>")
        return created_reply(request)

    async with make_field_client(tmp_path, httpx.MockTransport(handler), SYNC_INTERVAL_SECONDS=0.01) as field:
        await field.submit_survey(ANSWERS, started_at=START, template_id=1)
        field.session.token = "token"
        field.scheduler.start()
        await wait_until_drained(field)
        assert field.scheduler.running

    assert len(calls) == 2
    assert field.pending_count() == 0
    assert field.store.list_all()[0].sync_status == SyncStatus.SYNCED
