"""Constants for the Luxor integration."""
from datetime import timedelta

DOMAIN = "luxor"

PLATFORMS = ["light"]  # Supported Home Assistant platforms

CONF_GROUP_NAME = "group_name"
CONF_GROUP_NUMBER = "group_number"
CONF_SERVICE = "service"

DEFAULT_GROUP_NUMBER = 1  # Luxor group numbers start at 1
DEFAULT_SERVICE = "Lights"

UPDATE_INTERVAL = timedelta(seconds=30)  # How often to poll the controller

# List fetches are served from cache for this long after a request goes out
LIST_CACHE_WINDOW = 5.0
# First-call race: wait this long for an in-flight fetch before answering
LIST_CACHE_SETTLE = 1.0

REQUEST_TIMEOUT = 10

# Intensity used when a group is switched on without a brightness
DEFAULT_ON_INTENSITY = 50

# Color codes. 0-250 are presets, 251-260 color wheels, 65535 external DMX.
COLOR_PRESET_MAX = 250
COLOR_WHEEL_MIN = 251
COLOR_WHEEL_MAX = 260
COLOR_DMX = 65535

# Hue/saturation used when a color code is missing from the controller's list
DEFAULT_HUE = 360
DEFAULT_SATURATION = 100

# Device endpoints
ENDPOINT_CONTROLLER_NAME = "ControllerName.json"
ENDPOINT_ILLUMINATE_ALL = "IlluminateAll.json"
ENDPOINT_EXTINGUISH_ALL = "ExtinguishAll.json"
ENDPOINT_GROUP_LIST_GET = "GroupListGet.json"
ENDPOINT_GROUP_LIST_EDIT = "GroupListEdit.json"
ENDPOINT_ILLUMINATE_GROUP = "IlluminateGroup.json"
ENDPOINT_COLOR_LIST_GET = "ColorListGet.json"
ENDPOINT_COLOR_LIST_SET = "ColorListSet.json"
ENDPOINT_THEME_LIST_GET = "ThemeListGet.json"
ENDPOINT_ILLUMINATE_THEME = "IlluminateTheme.json"

SERVICE_ILLUMINATE_ALL = "illuminate_all"
SERVICE_EXTINGUISH_ALL = "extinguish_all"
SERVICE_EDIT_GROUP = "edit_group"
SERVICE_ILLUMINATE_THEME = "illuminate_theme"

ATTR_NAME = "name"
ATTR_GROUP_NUMBER = "group_number"
ATTR_COLOR = "color"
ATTR_THEME_INDEX = "theme_index"
ATTR_ON = "on"
