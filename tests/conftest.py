"""Pytest configuration and shared fixtures for attribution tests."""

import logging
import os
from datetime import datetime, timedelta, timezone

import pytest

from attributeai.attribution.attributor import coerce_journey
from attributeai.core.config import Settings
from attributeai.models import Conversion, Journey, Touchpoint

UTC = timezone.utc


def make_journey(
    customer_id: str,
    days_before: list[float],
    value: float = 100.0,
    conversion_at: datetime = datetime(2024, 5, 20, 12, 0, tzinfo=UTC),
    channels: list[str] | None = None,
    costs: list[float] | None = None,
) -> Journey:
    """Build a journey whose touches happen the given days before conversion."""
    channels = channels or [f"Channel {i}" for i in range(len(days_before))]
    costs = costs or [1.0] * len(days_before)
    return Journey(
        customer_id=customer_id,
        touchpoints=tuple(
            Touchpoint(
                timestamp=conversion_at - timedelta(days=days),
                channel=channel,
                cost=cost,
            )
            for days, channel, cost in zip(days_before, channels, costs)
        ),
        conversion=Conversion(value=value, timestamp=conversion_at),
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove ATTR_ variables so settings come from defaults."""
    for key in list(os.environ):
        if key.upper().startswith("ATTR_"):
            monkeypatch.delenv(key)
    yield
    for key in list(os.environ):
        if key.upper().startswith("ATTR_"):
            del os.environ[key]


@pytest.fixture
def settings(clean_env):
    """Settings with defaults, independent of the environment."""
    return Settings()


@pytest.fixture
def journey_factory():
    """Factory for journeys with touches a given number of days before conversion."""
    return make_journey


@pytest.fixture
def t0():
    """Reference timestamp for journeys."""
    return datetime(2024, 5, 15, 9, 0, tzinfo=UTC)


@pytest.fixture
def two_touch_journey(t0):
    """Paid Search then Email, converting for 100 at the time of the email."""
    t1 = t0 + timedelta(days=1)
    return Journey(
        customer_id="S001",
        touchpoints=(
            Touchpoint(timestamp=t0, channel="Paid Search", cost=10.0),
            Touchpoint(timestamp=t1, channel="Email", cost=5.0),
        ),
        conversion=Conversion(value=100.0, timestamp=t1),
    )


@pytest.fixture
def dashboard_records():
    """Raw journey records in the shape the dashboard receives them."""
    return [
        {
            "customerId": "C001",
            "touchpoints": [
                {"timestamp": "2024-05-15T09:00:00Z", "channel": "Google Ads", "campaign": "Emergency Plumbing", "cost": 12.50, "weather": "Heavy Rain"},
                {"timestamp": "2024-05-15T14:30:00Z", "channel": "Facebook", "campaign": "Brand Awareness", "cost": 8.20, "weather": "Heavy Rain"},
                {"timestamp": "2024-05-16T10:15:00Z", "channel": "Email", "campaign": "Follow-up", "cost": 2.00, "weather": "Cloudy"},
                {"timestamp": "2024-05-16T16:45:00Z", "channel": "Direct", "campaign": "Website Visit", "cost": 0, "weather": "Sunny"},
            ],
            "conversion": {"value": 850, "timestamp": "2024-05-16T17:00:00Z"},
        },
        {
            "customerId": "C002",
            "touchpoints": [
                {"timestamp": "2024-05-14T11:00:00Z", "channel": "Google Ads", "campaign": "Drain Cleaning", "cost": 15.80, "weather": "Stormy"},
                {"timestamp": "2024-05-15T16:20:00Z", "channel": "Organic Search", "campaign": "SEO", "cost": 0, "weather": "Heavy Rain"},
            ],
            "conversion": {"value": 1200, "timestamp": "2024-05-15T17:30:00Z"},
        },
        {
            "customerId": "C003",
            "touchpoints": [
                {"timestamp": "2024-05-13T08:30:00Z", "channel": "Facebook", "campaign": "Storm Prep", "cost": 18.50, "weather": "Sunny"},
                {"timestamp": "2024-05-14T12:15:00Z", "channel": "Google Ads", "campaign": "Emergency Plumbing", "cost": 22.30, "weather": "Heavy Rain"},
                {"timestamp": "2024-05-14T19:45:00Z", "channel": "Email", "campaign": "Weather Alert", "cost": 1.50, "weather": "Heavy Rain"},
                {"timestamp": "2024-05-15T09:30:00Z", "channel": "Direct", "campaign": "Phone Call", "cost": 0, "weather": "Cloudy"},
            ],
            "conversion": {"value": 950, "timestamp": "2024-05-15T10:00:00Z"},
        },
    ]


@pytest.fixture
def dashboard_journeys(dashboard_records):
    """The dashboard records parsed into journeys."""
    return [coerce_journey(record) for record in dashboard_records]


@pytest.fixture(autouse=True)
def reset_logging():
    """Keep handlers added by setup_logging from leaking between tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
