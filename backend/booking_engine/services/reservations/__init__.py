# backend/booking_engine/services/reservations/__init__.py
"""
Reservation module.

Coordinator: reserve + booking lifecycle
Locks: keyed reservation guards (in-process / Redis)
Reaper: sweep for abandoned PENDING_PAYMENT bookings
"""

from .coordinator import SYSTEM_ACTOR, Actor, ActorKind, ReservationCoordinator
from .locks import (
    InProcessReservationLock,
    RedisReservationLock,
    ReservationBusyError,
    ReservationLock,
    lock_keys,
)
from .reaper import pending_reaper_loop, run_reaper_once

__all__ = [
    "SYSTEM_ACTOR",
    "Actor",
    "ActorKind",
    "ReservationCoordinator",
    "InProcessReservationLock",
    "RedisReservationLock",
    "ReservationBusyError",
    "ReservationLock",
    "lock_keys",
    "pending_reaper_loop",
    "run_reaper_once",
]
