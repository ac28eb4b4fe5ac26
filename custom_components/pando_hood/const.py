"""Constants for the Pando hood integration."""

DOMAIN = "pando_hood"
MANUFACTURER = "Pando"

CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_POLLING_INTERVAL = "polling_interval"

# Polling interval (seconds); anything below the floor is raised to it
DEFAULT_POLLING_INTERVAL = 30
MIN_POLLING_INTERVAL = 10

# Consecutive failed polls before the whole account is declared offline
OFFLINE_THRESHOLD = 3

# Reconciliation timing (seconds)
DEBOUNCE_DELAY = 0.5
COOLDOWN_DURATION = 5.0
COMPENSATION_DELAY = 1.5

# PGA IoT capability keys
KEY_POWER = "device.onOff"
KEY_FAN_SPEED = "device.fanSpeed"
KEY_LIGHT_POWER = "device.lightOnOff"
KEY_LIGHT_BRIGHTNESS = "device.lightBrightness"
KEY_LIGHT_COLOR_TEMP = "device.lightColorTemperature"
KEY_FILTER_REMAINING = "device.filter1Value"
KEY_FILTER_WORN = "device.filter1.worn"
KEY_CLEAN_AIR = "device.cleanAirEnabled"
KEY_TIMER_ENABLE = "device.timer.enable"
KEY_TIMER_ACTIVE = "device.timer.active"
KEY_TIMER_VALUE = "device.timerValue"

# Fan levels reported by the hood (0 = stopped)
FAN_SPEED_MAX = 4
FAN_SPEED_COUNT = 4
# Level restored on power-on when no running level has been seen yet
DEFAULT_FAN_SPEED = 2

# Light ranges
BRIGHTNESS_MIN = 10
BRIGHTNESS_MAX = 100
COLOR_TEMP_KELVIN_MIN = 2700
COLOR_TEMP_KELVIN_MAX = 6000

# Filter remaining life is reported in seconds (100 hours when new)
FILTER_LIFE_MAX = 360000

# Timer duration (seconds)
TIMER_MIN = 60
TIMER_MAX = 7200
DEFAULT_TIMER_DURATION = 900

# Read defaults for keys whose zero value only means something while off
CAPABILITY_DEFAULTS = {
    KEY_LIGHT_BRIGHTNESS: BRIGHTNESS_MAX,
    KEY_LIGHT_COLOR_TEMP: COLOR_TEMP_KELVIN_MIN,
    KEY_TIMER_VALUE: DEFAULT_TIMER_DURATION,
}

# Quirk flags
QUIRK_AUTO_LIGHT = "auto_light"
QUIRK_AUTO_TIMER = "auto_timer"

# Exposed properties
PROP_FAN_ON = "fan_on"
PROP_FAN_PERCENTAGE = "fan_percentage"
PROP_LIGHT_ON = "light_on"
PROP_LIGHT_BRIGHTNESS = "light_brightness"
PROP_LIGHT_COLOR_TEMP = "light_color_temp"
PROP_FILTER_WORN = "filter_worn"
PROP_FILTER_LIFE = "filter_life"
PROP_CLEAN_AIR_ON = "clean_air_on"
PROP_CLEAN_AIR_STATE = "clean_air_state"
PROP_TIMER_ON = "timer_on"
PROP_TIMER_DURATION = "timer_duration"
PROP_TIMER_REMAINING = "timer_remaining"
PROP_FAULT = "fault"

CLEAN_AIR_INACTIVE = "inactive"
CLEAN_AIR_PURIFYING = "purifying"

PLATFORMS: list[str] = ["fan", "light", "switch", "sensor", "binary_sensor", "number"]
