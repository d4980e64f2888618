"""HTTP tests for the identity provider webhook endpoint."""

import time

import pytest

from usersync.dependencies import get_sync_gateway
from usersync.repositories.user_repo import UserRepository

from conftest import RecordingGateway

URL = "/api/v1/webhooks/clerk"

CREATED = {
    "type": "user.created",
    "object": "event",
    "data": {
        "id": "u1",
        "email_addresses": [{"email_address": "a@b.com"}],
        "first_name": "A",
        "last_name": "B",
    },
}


@pytest.fixture
def recording(app):
    """Swap the SQL gateway for a recording one."""
    gateway = RecordingGateway()

    async def _override():
        yield gateway

    app.dependency_overrides[get_sync_gateway] = _override
    yield gateway
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_created_end_to_end(client, recording, sign):
    body, headers = sign(CREATED)
    response = await client.post(URL, content=body, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "processed successfully"
    assert data["action"] == "upserted"
    assert len(recording.calls) == 1
    op, command = recording.calls[0]
    assert op == "create_or_sync_user"
    assert command.model_dump() == {
        "external_id": "u1",
        "email": "a@b.com",
        "display_name": "A B",
        "avatar_url": None,
    }


@pytest.mark.asyncio
async def test_lifecycle_against_user_store(client, db_session, sign):
    body, headers = sign(CREATED)
    assert (await client.post(URL, content=body, headers=headers)).status_code == 200

    body, headers = sign({"type": "user.updated", "data": {"id": "u1", "image_url": "https://img/u1.png"}})
    response = await client.post(URL, content=body, headers=headers)
    assert response.json()["action"] == "patched"

    row = await UserRepository(db_session).get("u1")
    assert row.display_name == "A B"
    assert row.email == "a@b.com"
    assert row.avatar_url == "https://img/u1.png"

    body, headers = sign({"type": "user.deleted", "data": {"object": "user", "id": "u1", "deleted": True}})
    response = await client.post(URL, content=body, headers=headers)
    assert response.json()["action"] == "deleted"
    db_session.expire_all()
    assert await UserRepository(db_session).get("u1") is None


@pytest.mark.asyncio
async def test_secret_not_configured(app, client, recording, sign):
    app.state.webhook_secret = ""
    body, headers = sign(CREATED)
    response = await client.post(URL, content=body, headers=headers)

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "MISCONFIGURED"
    assert error["message"] == "webhook secret not configured"
    assert recording.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["svix-id", "svix-timestamp", "svix-signature"])
async def test_missing_header_rejected_without_dispatch(client, recording, sign, header):
    body, headers = sign(CREATED)
    del headers[header]
    response = await client.post(URL, content=body, headers=headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "MISSING_HEADERS"
    assert error["message"] == "missing signature headers"
    assert recording.calls == []


@pytest.mark.asyncio
async def test_unbranded_headers_are_accepted(client, recording, sign):
    body, headers = sign(CREATED)
    unbranded = {name.replace("svix-", "webhook-"): value for name, value in headers.items()}
    response = await client.post(URL, content=body, headers=unbranded)
    assert response.status_code == 200
    assert len(recording.calls) == 1


@pytest.mark.asyncio
async def test_bad_signature_rejected(client, recording, sign):
    body, headers = sign(CREATED)
    response = await client.post(URL, content=body.replace(b"a@b.com", b"evil@b.com"), headers=headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_SIGNATURE"
    assert error["message"] == "verification failed"
    assert "details" not in error
    assert recording.calls == []


@pytest.mark.asyncio
async def test_stale_delivery_rejected(client, recording, sign):
    body, headers = sign(CREATED, timestamp=int(time.time()) - 3600)
    response = await client.post(URL, content=body, headers=headers)
    assert response.status_code == 400
    assert recording.calls == []


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_server_fault(client, recording, sign):
    body, headers = sign({"type": "user.created", "data": {"email_addresses": []}})
    response = await client.post(URL, content=body, headers=headers)
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "PARSE_ERROR"
    assert recording.calls == []


@pytest.mark.asyncio
async def test_downstream_failure_is_server_fault(app, client, sign):
    failing = RecordingGateway(fail_with=RuntimeError("constraint violation"))

    async def _override():
        yield failing

    app.dependency_overrides[get_sync_gateway] = _override
    body, headers = sign({"type": "user.updated", "data": {"id": "u1", "username": "ab"}})
    response = await client.post(URL, content=body, headers=headers)
    app.dependency_overrides.clear()

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "DISPATCH_ERROR"
    assert error["message"] == "error processing event: user.updated"
    assert len(failing.calls) == 1


@pytest.mark.asyncio
async def test_unknown_event_type_succeeds(client, recording, sign):
    body, headers = sign({"type": "session.created", "data": {"id": "sess_1"}})
    response = await client.post(URL, content=body, headers=headers)
    assert response.status_code == 200
    assert response.json()["action"] == "ignored"
    assert recording.calls == []


@pytest.mark.asyncio
async def test_unconfirmed_delete_succeeds_without_mutation(client, recording, sign):
    body, headers = sign({"type": "user.deleted", "data": {"object": "organization", "id": "org_1", "deleted": True}})
    response = await client.post(URL, content=body, headers=headers)
    assert response.status_code == 200
    assert response.json()["action"] == "skipped"
    assert recording.calls == []


@pytest.mark.asyncio
async def test_redelivered_envelope_replays_same_command(client, recording, sign):
    body, headers = sign(CREATED, msg_id="msg_redelivered")
    first = await client.post(URL, content=body, headers=headers)
    second = await client.post(URL, content=body, headers=headers)

    assert first.status_code == second.status_code == 200
    assert len(recording.calls) == 2
    assert recording.calls[0] == recording.calls[1]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"object": "user", "id": "u1", "deleted": "true"},
        {"object": "user", "id": "u1", "deleted": 1},
        {"object": "user", "id": 5, "deleted": True},
        {"object": 7, "id": "u1", "deleted": True},
        None,
    ],
)
async def test_malformed_delete_is_skipped(client, recording, sign, data):
    body, headers = sign({"type": "user.deleted", "data": data})
    response = await client.post(URL, content=body, headers=headers)
    assert response.status_code == 200
    assert response.json()["action"] == "skipped"
    assert recording.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("trace_id", ["abc", "t" * 200])
async def test_out_of_range_trace_id_still_gets_rejection(client, recording, sign, trace_id):
    body, headers = sign(CREATED)
    del headers["svix-signature"]
    headers["X-Trace-Id"] = trace_id
    response = await client.post(URL, content=body, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_HEADERS"
    assert response.headers["X-Trace-Id"] != trace_id
    assert response.headers["X-Trace-Id"].startswith("trc_")
