"""Tests for the Dapr event publisher."""

import json

import httpx
import pytest

from ministry.dapr.client import DaprEventPublisher


def recording_transport(requests, status_code=204):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code)
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_dev_mode_only_logs():
    requests = []
    publisher = DaprEventPublisher(enabled=False, transport=recording_transport(requests))

    result = await publisher.publish("recurrence.created", {"rule_id": "r-1"})

    assert result == {"success": True, "message": "Event logged in dev mode"}
    assert requests == []


@pytest.mark.asyncio
async def test_posts_envelope_to_sidecar():
    requests = []
    publisher = DaprEventPublisher(
        endpoint="http://sidecar:3500/", pubsub_name="pubsub", topic="recurrences",
        enabled=True, transport=recording_transport(requests),
    )

    result = await publisher.publish("recurrence.deleted", {"rule_id": "r-1", "instances_deleted": 3})

    assert result["success"] is True
    [request] = requests
    assert str(request.url) == "http://sidecar:3500/v1.0/publish/pubsub/recurrences"
    envelope = json.loads(request.content)
    assert envelope["type"] == "recurrence.deleted"
    assert envelope["source"] == "ministry-events"
    assert envelope["data"] == {"rule_id": "r-1", "instances_deleted": 3}
    assert envelope["event_id"] == result["event_id"]


@pytest.mark.asyncio
async def test_sidecar_error_is_raised():
    publisher = DaprEventPublisher(enabled=True, transport=recording_transport([], status_code=500))
    with pytest.raises(httpx.HTTPStatusError):
        await publisher.publish("recurrence.created", {"rule_id": "r-1"})
