# backend/booking_engine/services/slots/__init__.py
"""
Slots calculation module.

Generator: pure per-day evaluation of trial slots over a snapshot
Availability: snapshot loading, calendar summary, single-start re-check
"""

from .config import SlotConfig
from .generator import Slot, SlotReason, generate_slots
from .availability import DaySummary, SlotService

__all__ = [
    "SlotConfig",
    "Slot",
    "SlotReason",
    "generate_slots",
    "DaySummary",
    "SlotService",
]
