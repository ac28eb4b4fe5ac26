"""Shared fixtures for the Pando hood tests."""
from __future__ import annotations

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.pando_hood.models import PandoThing
from custom_components.pando_hood.reconciler import HoodReconciler

# Small real delays keep timer tests fast but ordered
DEBOUNCE = 0.01
COMPENSATION = 0.02
SETTLE = 0.08


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_thing(uid: str = "PAN-00001234", **capabilities: int) -> PandoThing:
    """Build a thing; keyword names use underscores for the dots in PGA keys."""
    caps = {f"device.{key.replace('__', '.')}": value for key, value in capabilities.items()}
    return PandoThing(
        uid=uid,
        online=True,
        metadata={"property.device_name": {"value": "Kitchen Hood"}, "model": "pga-hood-0"},
        capabilities=caps,
    )


def sent_commands(client: MagicMock) -> list[Dict[str, int]]:
    return [call.args[1] for call in client.send_command.await_args_list]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.send_command = AsyncMock(return_value=None)
    client.get_things = AsyncMock(return_value=[])
    return client


@pytest.fixture
def pushes() -> list[Dict[str, Any]]:
    return []


@pytest.fixture
def build_reconciler(client, clock, pushes):
    def _build(options: Dict[str, Any] | None = None, **capabilities: int) -> HoodReconciler:
        kwargs = {
            "debounce_delay": DEBOUNCE,
            "cooldown_duration": 5.0,
            "compensation_delay": COMPENSATION,
            "clock": clock,
        }
        kwargs.update(options or {})
        reconciler = HoodReconciler(client, make_thing(**capabilities), **kwargs)
        reconciler.add_listener(pushes.append)
        return reconciler

    return _build
