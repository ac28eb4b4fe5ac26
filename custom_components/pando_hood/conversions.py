"""Stateless unit conversions between PGA capability values and HA units."""

from .const import (
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    COLOR_TEMP_KELVIN_MAX,
    COLOR_TEMP_KELVIN_MIN,
    DEFAULT_TIMER_DURATION,
    FAN_SPEED_MAX,
    FILTER_LIFE_MAX,
    TIMER_MAX,
    TIMER_MIN,
)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def fan_speed_to_percent(speed: int) -> int:
    """Map a fan level (0-4) to a percentage: 1 -> 25, 2 -> 50, ..."""
    return int(round(clamp(speed, 0, FAN_SPEED_MAX) / FAN_SPEED_MAX * 100))


def percent_to_fan_speed(percent: int) -> int:
    """Map a percentage to the nearest fan level.

    Any nonzero percentage lands on at least level 1 so a small slider value
    never reads back as "off".
    """
    if percent <= 0:
        return 0
    return clamp(round(percent / (100 / FAN_SPEED_MAX)), 1, FAN_SPEED_MAX)


def clamp_brightness(value: int) -> int:
    return clamp(value, BRIGHTNESS_MIN, BRIGHTNESS_MAX)


def clamp_color_temp(kelvin: int) -> int:
    return clamp(kelvin, COLOR_TEMP_KELVIN_MIN, COLOR_TEMP_KELVIN_MAX)


def clamp_timer_duration(seconds: int) -> int:
    # The hood reports 0 while the timer is idle
    if not seconds:
        seconds = DEFAULT_TIMER_DURATION
    return clamp(seconds, TIMER_MIN, TIMER_MAX)


def filter_life_percent(remaining: int) -> int:
    return clamp(round(remaining / FILTER_LIFE_MAX * 100), 0, 100)
