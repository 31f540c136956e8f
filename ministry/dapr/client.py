"""Dapr client for broadcasting recurrence lifecycle events."""
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, Optional
import logging

import httpx

from ministry.config import DAPR_HTTP_ENDPOINT, DAPR_PUBSUB_NAME, ENVIRONMENT, RECURRENCE_TOPIC

logger = logging.getLogger(__name__)


class DaprEventPublisher:
    """Publishes events to the message broker via the Dapr sidecar's HTTP API."""

    def __init__(
        self,
        endpoint: str = DAPR_HTTP_ENDPOINT,
        pubsub_name: str = DAPR_PUBSUB_NAME,
        topic: str = RECURRENCE_TOPIC,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 5.0,
    ):
        """Initialize Dapr event publisher."""
        self.endpoint = endpoint.rstrip("/")
        self.pubsub_name = pubsub_name
        self.topic = topic
        self.enabled = ENVIRONMENT == "production" if enabled is None else enabled
        self.transport = transport
        self.timeout = timeout
        if not self.enabled:
            logger.warning("Dapr publishing disabled. Running in development mode without Dapr integration.")

    async def publish_event(self, topic: str, event_type: str, data: Dict[str, Any],
                            source: str = "ministry-events") -> Dict[str, Any]:
        """Publish an event to a topic via Dapr pub/sub."""
        if not self.enabled:
            # Development mode: log the event instead of publishing
            logger.info(f"[DEV MODE] Would publish to topic '{topic}': {event_type} from {source} with data {data}")
            return {"success": True, "message": "Event logged in dev mode"}

        event_envelope = {
            "event_id": str(uuid.uuid4()),
            "type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "data": data
        }

        url = f"{self.endpoint}/v1.0/publish/{self.pubsub_name}/{topic}"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(url, json=event_envelope)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to publish event to topic {topic}: {str(e)}")
            raise

        logger.info(f"Published event {event_type} to topic {topic}")
        return {"success": True, "event_id": event_envelope["event_id"]}

    async def publish(self, event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Publish a recurrence lifecycle event on the recurrence topic."""
        return await self.publish_event(topic=self.topic, event_type=event_type, data=data)
