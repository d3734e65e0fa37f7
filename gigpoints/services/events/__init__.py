"""
Process-local event bus used to fan out points updates.
"""

from gigpoints.services.events.event_bus import EventBus, Subscription

__all__ = ["EventBus", "Subscription"]
