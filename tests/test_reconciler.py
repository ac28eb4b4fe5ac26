"""Reconciler behaviour: intents, polls, quirks and connectivity together."""
from __future__ import annotations

import asyncio

import pytest

from custom_components.pando_hood.api import PandoApiError
from custom_components.pando_hood.const import (
    KEY_FAN_SPEED,
    KEY_LIGHT_BRIGHTNESS,
    KEY_LIGHT_POWER,
    KEY_POWER,
    KEY_TIMER_ACTIVE,
    KEY_TIMER_ENABLE,
    KEY_TIMER_VALUE,
    PROP_CLEAN_AIR_STATE,
    PROP_FAN_ON,
    PROP_FAN_PERCENTAGE,
    PROP_FAULT,
    PROP_FILTER_LIFE,
    PROP_LIGHT_BRIGHTNESS,
    PROP_LIGHT_COLOR_TEMP,
    PROP_LIGHT_ON,
    PROP_TIMER_DURATION,
    PROP_TIMER_ON,
    PROP_TIMER_REMAINING,
    QUIRK_AUTO_LIGHT,
    QUIRK_AUTO_TIMER,
)
from custom_components.pando_hood.quirks import QuirkState

from conftest import SETTLE, make_thing, sent_commands


@pytest.mark.asyncio
async def test_fan_on_at_half_speed_sends_one_command_then_compensates(build_reconciler, client):
    reconciler = build_reconciler(onOff=0, fanSpeed=0, lightOnOff=0)

    reconciler.write(PROP_FAN_PERCENTAGE, 50)

    assert reconciler.shadow.get(KEY_POWER) == 1
    assert reconciler.shadow.get(KEY_FAN_SPEED) == 2
    assert client.send_command.await_count == 0

    await asyncio.sleep(SETTLE)

    sent = sent_commands(client)
    assert sent[0] == {KEY_POWER: 1, KEY_FAN_SPEED: 2}
    assert sent.count({KEY_LIGHT_POWER: 0}) == 1
    assert sent.count({KEY_TIMER_ENABLE: 0}) == 1
    assert all(call.args[0] == "PAN-00001234" for call in client.send_command.await_args_list)
    assert reconciler.compensator.state(QUIRK_AUTO_LIGHT) is QuirkState.IDLE
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.COMPENSATED


@pytest.mark.asyncio
async def test_rapid_writes_coalesce_into_last_value(build_reconciler, client):
    reconciler = build_reconciler(onOff=1, fanSpeed=1, lightOnOff=1, timer__enable=1)

    for percent in (25, 50, 75, 100):
        reconciler.write(PROP_FAN_PERCENTAGE, percent)
    reconciler.write(PROP_LIGHT_BRIGHTNESS, 40)
    reconciler.write(PROP_LIGHT_BRIGHTNESS, 60)

    await asyncio.sleep(SETTLE)

    assert sent_commands(client) == [{KEY_FAN_SPEED: 4, KEY_LIGHT_BRIGHTNESS: 60}]


@pytest.mark.asyncio
async def test_light_on_before_dispatch_prevents_compensation(build_reconciler, client):
    reconciler = build_reconciler(onOff=0, fanSpeed=0, lightOnOff=0, timer__enable=1)

    reconciler.write(PROP_FAN_ON, True)
    reconciler.write(PROP_LIGHT_ON, True)
    await asyncio.sleep(SETTLE)

    assert sent_commands(client) == [{KEY_POWER: 1, KEY_FAN_SPEED: 2, KEY_LIGHT_POWER: 1}]
    assert reconciler.compensator.state(QUIRK_AUTO_LIGHT) is QuirkState.IDLE


@pytest.mark.asyncio
async def test_light_on_after_dispatch_cancels_pending_compensation(build_reconciler, client):
    reconciler = build_reconciler(
        {"compensation_delay": 0.3}, onOff=0, fanSpeed=3, lightOnOff=0, timer__enable=1
    )

    reconciler.write(PROP_FAN_ON, True)
    await asyncio.sleep(SETTLE)
    assert sent_commands(client) == [{KEY_POWER: 1, KEY_FAN_SPEED: 3}]

    reconciler.write(PROP_LIGHT_ON, True)
    await asyncio.sleep(0.4)

    assert sent_commands(client) == [{KEY_POWER: 1, KEY_FAN_SPEED: 3}, {KEY_LIGHT_POWER: 1}]


@pytest.mark.asyncio
async def test_no_quirk_when_fan_already_running(build_reconciler, client):
    reconciler = build_reconciler(onOff=1, fanSpeed=1, lightOnOff=0, timer__enable=0)

    reconciler.write(PROP_FAN_PERCENTAGE, 100)
    await asyncio.sleep(SETTLE)

    assert sent_commands(client) == [{KEY_FAN_SPEED: 4}]
    assert reconciler.compensator.state(QUIRK_AUTO_LIGHT) is QuirkState.IDLE


@pytest.mark.asyncio
async def test_poll_during_cooldown_updates_shadow_without_push(build_reconciler, client, clock, pushes):
    reconciler = build_reconciler(onOff=1, fanSpeed=2, lightOnOff=1, timer__enable=1)
    reconciler.write(PROP_LIGHT_ON, False)
    await asyncio.sleep(SETTLE)
    pushes.clear()

    clock.advance(4.9)
    stale = make_thing(onOff=1, fanSpeed=2, lightOnOff=1, timer__enable=1)
    assert reconciler.apply_poll(stale) is False
    assert pushes == []
    assert reconciler.shadow.get(KEY_LIGHT_POWER) == 1

    clock.advance(0.2)
    fresh = make_thing(onOff=1, fanSpeed=2, lightOnOff=0, timer__enable=1)
    assert reconciler.apply_poll(fresh) is True
    assert len(pushes) == 1
    assert pushes[0][PROP_LIGHT_ON] is False


def test_same_poll_twice_gives_same_values(build_reconciler, pushes):
    reconciler = build_reconciler()
    thing = make_thing(
        onOff=1, fanSpeed=3, lightOnOff=1, lightBrightness=55, lightColorTemperature=4000,
        filter1Value=180000, filter1__worn=0, cleanAirEnabled=1, timer__enable=0,
    )

    reconciler.apply_poll(thing)
    first = reconciler.snapshot()
    reconciler.apply_poll(thing)

    assert reconciler.snapshot() == first
    assert pushes[-1] == pushes[-2] == first
    assert first[PROP_FAN_PERCENTAGE] == 75
    assert first[PROP_LIGHT_BRIGHTNESS] == 55
    assert first[PROP_LIGHT_COLOR_TEMP] == 4000
    assert first[PROP_FILTER_LIFE] == 50
    assert first[PROP_CLEAN_AIR_STATE] == "purifying"


@pytest.mark.asyncio
async def test_session_scoped_timer_quirk_hides_reasserted_timer(build_reconciler, client, clock):
    reconciler = build_reconciler(onOff=0, fanSpeed=2, lightOnOff=1, timer__enable=0)

    reconciler.write(PROP_FAN_ON, True)
    await asyncio.sleep(SETTLE)
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.COMPENSATED

    # Firmware keeps reporting the timer on for the whole fan session
    clock.advance(10)
    reconciler.apply_poll(make_thing(onOff=1, fanSpeed=2, lightOnOff=1, timer__enable=1, timerValue=900))
    assert reconciler.read(PROP_TIMER_ON) is False
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.COMPENSATED

    # Only one compensation for the whole session
    clock.advance(10)
    reconciler.apply_poll(make_thing(onOff=1, fanSpeed=2, lightOnOff=1, timer__enable=1, timerValue=900))
    await asyncio.sleep(SETTLE)
    assert sent_commands(client).count({KEY_TIMER_ENABLE: 0}) == 1

    # The user's own wish wins
    reconciler.write(PROP_TIMER_ON, True)
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.IDLE
    assert reconciler.read(PROP_TIMER_ON) is True


@pytest.mark.asyncio
async def test_fan_off_zeroes_timer_and_clears_flags(build_reconciler, client):
    reconciler = build_reconciler(
        onOff=1, fanSpeed=3, timer__enable=1, timer__active=1, timerValue=600
    )
    reconciler.compensator.arm(QUIRK_AUTO_TIMER)

    reconciler.write(PROP_FAN_ON, False)

    assert reconciler.shadow.get(KEY_TIMER_ENABLE) == 0
    assert reconciler.shadow.get(KEY_TIMER_ACTIVE) == 0
    assert reconciler.read(PROP_TIMER_ON) is False
    assert reconciler.read(PROP_TIMER_REMAINING) == 0
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.IDLE

    await asyncio.sleep(SETTLE)
    assert sent_commands(client) == [{KEY_POWER: 0}]


@pytest.mark.asyncio
async def test_fan_percentage_reads_zero_when_off_and_restores_level(build_reconciler, client):
    reconciler = build_reconciler(onOff=1, fanSpeed=3)
    assert reconciler.read(PROP_FAN_PERCENTAGE) == 75

    reconciler.write(PROP_FAN_ON, False)
    assert reconciler.read(PROP_FAN_PERCENTAGE) == 0
    assert reconciler.shadow.last_nonzero == 3

    patch = reconciler.write(PROP_FAN_ON, True)
    assert patch == {KEY_POWER: 1, KEY_FAN_SPEED: 3}
    assert reconciler.read(PROP_FAN_PERCENTAGE) == 75


@pytest.mark.asyncio
async def test_zero_percentage_turns_fan_off(build_reconciler):
    reconciler = build_reconciler(onOff=1, fanSpeed=2)

    patch = reconciler.write(PROP_FAN_PERCENTAGE, 0)

    assert patch == {KEY_POWER: 0}
    assert reconciler.read(PROP_FAN_ON) is False


@pytest.mark.asyncio
async def test_poll_inside_debounce_window_keeps_pending_intent(build_reconciler, client, pushes):
    reconciler = build_reconciler(onOff=1, fanSpeed=2, lightOnOff=0)

    reconciler.write(PROP_LIGHT_ON, True)
    reconciler.apply_poll(make_thing(onOff=1, fanSpeed=2, lightOnOff=0))

    assert reconciler.read(PROP_LIGHT_ON) is True
    assert pushes[-1][PROP_LIGHT_ON] is True
    await asyncio.sleep(SETTLE)
    assert sent_commands(client) == [{KEY_LIGHT_POWER: 1}]


@pytest.mark.asyncio
async def test_poll_reporting_fan_off_ends_session_only_after_cooldown(build_reconciler, clock):
    reconciler = build_reconciler(onOff=0, fanSpeed=2, lightOnOff=1, timer__enable=0)
    reconciler.write(PROP_FAN_ON, True)
    await asyncio.sleep(SETTLE)

    # Cached pre-write state from the cloud
    reconciler.apply_poll(make_thing(onOff=0, fanSpeed=2, lightOnOff=1, timer__enable=0))
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.COMPENSATED

    clock.advance(6)
    reconciler.apply_poll(make_thing(onOff=0, fanSpeed=2, lightOnOff=1, timer__enable=0))
    assert reconciler.compensator.state(QUIRK_AUTO_TIMER) is QuirkState.IDLE


@pytest.mark.asyncio
async def test_offline_commands_are_not_sent(build_reconciler, client, pushes):
    reconciler = build_reconciler(onOff=1, fanSpeed=2, lightOnOff=0)

    reconciler.set_online(False)
    assert pushes[-1][PROP_FAULT] is True

    reconciler.write(PROP_LIGHT_ON, True)
    await asyncio.sleep(SETTLE)

    assert client.send_command.await_count == 0
    assert reconciler.read(PROP_LIGHT_ON) is True
    assert not reconciler.cooldown.is_active()

    reconciler.set_online(True)
    assert pushes[-1][PROP_FAULT] is False


@pytest.mark.asyncio
async def test_compensation_skipped_when_offline_at_fire_time(build_reconciler, client):
    reconciler = build_reconciler(
        {"compensation_delay": 0.2}, onOff=0, fanSpeed=2, lightOnOff=0, timer__enable=1
    )

    reconciler.write(PROP_FAN_ON, True)
    await asyncio.sleep(SETTLE)
    reconciler.set_online(False)
    await asyncio.sleep(0.3)

    assert sent_commands(client) == [{KEY_POWER: 1, KEY_FAN_SPEED: 2}]
    # No retry loop: the flag simply stays armed
    assert reconciler.compensator.state(QUIRK_AUTO_LIGHT) is QuirkState.ARMED


@pytest.mark.asyncio
async def test_dispatch_failure_keeps_optimistic_state(build_reconciler, client):
    client.send_command.side_effect = PandoApiError("boom", 500)
    reconciler = build_reconciler(onOff=0, fanSpeed=2, lightOnOff=0, timer__enable=1)

    reconciler.write(PROP_FAN_ON, True)
    await asyncio.sleep(SETTLE)

    assert client.send_command.await_count == 1
    assert reconciler.read(PROP_FAN_ON) is True
    assert reconciler.compensator.state(QUIRK_AUTO_LIGHT) is QuirkState.ARMED


@pytest.mark.asyncio
async def test_timer_on_sends_default_duration(build_reconciler, client):
    reconciler = build_reconciler(onOff=1, fanSpeed=2, timer__enable=0, timerValue=0)

    reconciler.write(PROP_TIMER_ON, True)
    await asyncio.sleep(SETTLE)

    assert sent_commands(client) == [{KEY_TIMER_ENABLE: 1, KEY_TIMER_VALUE: 900}]
    assert reconciler.read(PROP_TIMER_DURATION) == 900


def test_timer_remaining_only_while_active(build_reconciler):
    reconciler = build_reconciler(onOff=1, timer__enable=1, timer__active=1, timerValue=420)
    assert reconciler.read(PROP_TIMER_REMAINING) == 420

    reconciler.apply_poll(make_thing(onOff=1, timer__enable=1, timer__active=0, timerValue=420))
    assert reconciler.read(PROP_TIMER_REMAINING) == 0


def test_read_only_property_rejects_write(build_reconciler):
    reconciler = build_reconciler()

    with pytest.raises(ValueError):
        reconciler.write(PROP_FILTER_LIFE, 10)


def test_shutdown_clears_cooldown_and_listeners(build_reconciler, pushes):
    reconciler = build_reconciler(onOff=1, fanSpeed=2)
    reconciler.cooldown.arm(5.0)

    reconciler.shutdown()

    assert not reconciler.cooldown.is_active()
    reconciler.set_online(False)
    assert pushes == []
