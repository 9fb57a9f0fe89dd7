"""
backend/booking_engine/services/events.py

Domain event emitter: pushes booking lifecycle events to a Redis queue
for the notification consumer.

Queue:
- events:p2p: booking_confirmed / booking_cancelled, instant delivery

Emission is fire-and-forget: a failing queue is logged and never undoes
the state transition that produced the event.
"""

import json
import logging
from typing import Callable, Optional

from redis import Redis
from redis.exceptions import RedisError

from ..models import Bookings
from .timezones import now_ms

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_CANCELLED = "booking_cancelled"


class EventEmitter:
    QUEUE = "events:p2p"

    def __init__(self, redis: Optional[Redis], clock: Callable[[], int] = now_ms):
        self.redis = redis
        self.clock = clock

    def emit(self, event_type: str, payload: dict) -> None:
        event = {
            "type": event_type,
            **payload,
            "ts": self.clock(),
        }
        if self.redis is None:
            logger.info(f"Event dropped (no queue configured): {event_type}")
            return
        try:
            self.redis.rpush(self.QUEUE, json.dumps(event))
            logger.info(f"Event emitted: {event_type} -> {self.QUEUE}")
        except RedisError as e:
            logger.error(f"Failed to emit event {event_type}: {e}")

    def booking_event(self, event_type: str, booking: Bookings) -> None:
        self.emit(event_type, booking_payload(booking))


def booking_payload(booking: Bookings) -> dict:
    return {
        "booking_id": booking.id,
        "confirmation_number": booking.confirmation_number,
        "tenant_id": booking.tenant_id,
        "session_type_id": booking.session_type_id,
        "customer_id": booking.customer_id,
        "start_ms": booking.start_ms,
        "end_ms": booking.end_ms,
        "participants": booking.participants,
        "status": booking.status.value,
        "cancel_reason": booking.cancel_reason,
    }
