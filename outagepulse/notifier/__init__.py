# OutagePulse Notifier
"""Notification state machine and delivery."""

from .messages import RenderedMessage, render_outage_message
from .state_machine import Action, ActionKind, decide
from .coordinator import DeliveryCoordinator, DeliveryOutcome, OutcomeKind

__all__ = [
    "RenderedMessage",
    "render_outage_message",
    "Action",
    "ActionKind",
    "decide",
    "DeliveryCoordinator",
    "DeliveryOutcome",
    "OutcomeKind",
]
