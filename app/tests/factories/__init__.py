"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    FIXED_NOW,
    make_channel,
    make_delivery_settings,
    make_endpoint,
    make_notification,
    make_outbound,
    make_preference,
    make_push_token,
    make_template,
)

__all__ = [
    "FIXED_NOW",
    "make_channel",
    "make_delivery_settings",
    "make_endpoint",
    "make_notification",
    "make_outbound",
    "make_preference",
    "make_push_token",
    "make_template",
]
