"""Data types exchanged with a Luxor controller."""
import errno
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

from .const import COLOR_DMX, COLOR_PRESET_MAX, COLOR_WHEEL_MAX, COLOR_WHEEL_MIN


class LuxorStatus(IntEnum):
    """Status codes returned in the ``Status`` field of every response."""

    OK = 0
    UNKNOWN_METHOD = 1
    UNPARSEABLE_REQUEST = 101
    INVALID_REQUEST = 102
    COLOR_VALUE_OUT_OF_RANGE = 151
    PRECONDITION_FAILED = 201
    GROUP_NAME_IN_USE = 202
    GROUP_NUMBER_IN_USE = 205
    ITEM_DOES_NOT_EXIST = 241
    BAD_GROUP_NUMBER = 242
    THEME_INDEX_OUT_OF_RANGE = 243
    BAD_THEME_INDEX = 251
    THEME_CHANGES_RESTRICTED = 252
    UNKNOWN = -1

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

    @property
    def text(self) -> str:
        return _STATUS_TEXT[self]


_STATUS_TEXT = {
    LuxorStatus.OK: "Ok",
    LuxorStatus.UNKNOWN_METHOD: "Unknown Method",
    LuxorStatus.UNPARSEABLE_REQUEST: "Unparseable Request",
    LuxorStatus.INVALID_REQUEST: "Invalid Request",
    LuxorStatus.COLOR_VALUE_OUT_OF_RANGE: "Color Value Out of Range",
    LuxorStatus.PRECONDITION_FAILED: "Precondition Failed",
    LuxorStatus.GROUP_NAME_IN_USE: "Group Name In Use",
    LuxorStatus.GROUP_NUMBER_IN_USE: "Group Number In Use",
    LuxorStatus.ITEM_DOES_NOT_EXIST: "Item Does Not Exist",
    LuxorStatus.BAD_GROUP_NUMBER: "Bad Group Number",
    LuxorStatus.THEME_INDEX_OUT_OF_RANGE: "Theme Index Out Of Range",
    LuxorStatus.BAD_THEME_INDEX: "Bad Theme Index",
    LuxorStatus.THEME_CHANGES_RESTRICTED: "Theme Changes Restricted",
    LuxorStatus.UNKNOWN: "Unknown status",
}


def get_status(code: Any) -> str:
    """Translate a raw ``Status`` value into its human readable text."""
    try:
        return LuxorStatus(int(code)).text
    except (TypeError, ValueError):
        return LuxorStatus.UNKNOWN.text


@dataclass
class LuxorResult:
    """Outcome of a single controller request.

    ``status`` is None when no response was decoded, in which case ``error``
    holds the transport or parse failure.
    """

    status: Optional[LuxorStatus] = None
    data: Any = None
    error: Optional[BaseException] = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is LuxorStatus.OK

    @property
    def connection_reset(self) -> bool:
        if isinstance(self.error, ConnectionResetError):
            return True
        return isinstance(self.error, OSError) and self.error.errno == errno.ECONNRESET

    @property
    def message(self) -> str:
        if self.error is not None:
            return str(self.error) or type(self.error).__name__
        if self.status is None:
            return "No response"
        return self.status.text


@dataclass
class GroupEntry:
    """A numbered set of lights dimmed together."""

    number: int
    name: str
    intensity: int
    color: int = 0

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "GroupEntry":
        # ZDTWO controllers report abbreviated keys
        number = item.get("GroupNumber", item.get("Grp"))
        intensity = item.get("Intensity", item.get("Inten", 0))
        color = item.get("Color", item.get("Colr", 0))
        return cls(
            number=int(number),
            name=item.get("Name") or f"Group {number}",
            intensity=int(intensity),
            color=int(color),
        )

    @property
    def is_on(self) -> bool:
        return self.intensity > 0

    @property
    def is_color_wheel(self) -> bool:
        return COLOR_WHEEL_MIN <= self.color <= COLOR_WHEEL_MAX

    @property
    def is_dmx(self) -> bool:
        return self.color == COLOR_DMX

    @property
    def has_preset_color(self) -> bool:
        return 0 < self.color <= COLOR_PRESET_MAX


@dataclass
class ColorEntry:
    color: int
    hue: float
    saturation: float

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "ColorEntry":
        return cls(color=int(item["C"]), hue=item.get("Hue", 0), saturation=item.get("Sat", 0))


@dataclass
class ThemeEntry:
    index: int
    name: str
    on: bool = False

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "ThemeEntry":
        index = int(item["ThemeIndex"])
        return cls(
            index=index,
            name=item.get("Name") or f"Theme {index}",
            on=bool(item.get("OnOff", 0)),
        )
