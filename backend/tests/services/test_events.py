from redis.exceptions import ConnectionError as RedisConnectionError

from booking_engine.services.events import EventEmitter


class BrokenRedis:
    def rpush(self, name, *values):
        raise RedisConnectionError("Connection refused")


def test__emit_pushes_json_with_timestamp(events, redis, clock) -> None:
    events.emit("booking_confirmed", {"booking_id": "b-1"})

    assert redis.events() == [{"type": "booking_confirmed", "booking_id": "b-1", "ts": clock.now}]


def test__emit_survives_queue_failure(clock) -> None:
    EventEmitter(BrokenRedis(), clock).emit("booking_cancelled", {"booking_id": "b-1"})


def test__emit_without_queue_is_dropped(clock, caplog) -> None:
    with caplog.at_level("INFO"):
        EventEmitter(None, clock).emit("booking_cancelled", {"booking_id": "b-1"})
    assert "dropped" in caplog.text
