"""Versioned (v1) API routers."""

from . import availability, bookings, event_types, health, hosts

__all__ = ["availability", "bookings", "event_types", "health", "hosts"]
