"""
Runtime values for logic flows.

A value travelling along a flow is one of: absent (``None``), a boolean,
a number, text, a 2-vector or a 3-vector. The helpers here convert
between those kinds the same lenient way the host environment does and
produce the text form used in flow files.
"""

from dataclasses import dataclass
from typing import Optional, Union
import math
import re


@dataclass(frozen=True)
class Vec2:
    """An immutable 2-component vector."""
    x: float
    y: float

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def scale(self, factor: float) -> "Vec2":
        return Vec2(self.x * factor, self.y * factor)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> "Vec2":
        length = self.length()
        if length == 0:
            return Vec2(0.0, 0.0)
        return self.scale(1.0 / length)

    def __str__(self) -> str:
        return f"({_format_number(self.x)}, {_format_number(self.y)})"


@dataclass(frozen=True)
class Vec3:
    """An immutable 3-component vector."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def scale(self, factor: float) -> "Vec3":
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> "Vec3":
        length = self.length()
        if length == 0:
            return Vec3(0.0, 0.0, 0.0)
        return self.scale(1.0 / length)

    def __str__(self) -> str:
        return f"({_format_number(self.x)}, {_format_number(self.y)}, {_format_number(self.z)})"


Value = Union[None, bool, int, float, str, Vec2, Vec3]

_TRUE_WORDS = {"yes", "true", "on", "enable", "open"}
_FALSE_WORDS = {"no", "false", "off", "disable", "close"}

# Decimal notation only: no "inf"/"nan" words and no digit underscores
_NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_SPECIAL_NUMBERS = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}


def _parse_number(text: str) -> Optional[float]:
    text = text.strip()
    if text in _SPECIAL_NUMBERS:
        return _SPECIAL_NUMBERS[text]
    if _NUMBER_PATTERN.fullmatch(text):
        return float(text)
    return None


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(float(value))


def is_number(value: Value) -> bool:
    """Check for a number, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_string(value: Value) -> str:
    """Text form of a value; absent values become the empty string."""
    if value is None:
        return ""
    return format_value(value)


def as_boolean(value: Value) -> Optional[bool]:
    """
    Interpret a value as a boolean.

    Booleans pass through. Text is matched case-insensitively against
    the usual yes/no words. Anything else is not a boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def as_number(value: Value) -> Optional[float]:
    """Interpret a value as a float, or ``None`` if it is not numeric."""
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        return _parse_number(value)
    return None


def _split_tuple(text: str, size: int) -> Optional[list]:
    text = text.strip()
    if not (text.startswith("(") and text.endswith(")")):
        return None
    parts = text[1:-1].split(",")
    if len(parts) != size:
        return None
    numbers = [_parse_number(part) for part in parts]
    if any(number is None for number in numbers):
        return None
    return numbers


def as_vec3(value: Value) -> Optional[Vec3]:
    """Interpret a value as a 3-vector written ``(x, y, z)``."""
    if isinstance(value, Vec3):
        return value
    if isinstance(value, str):
        parts = _split_tuple(value, 3)
        if parts is not None:
            return Vec3(*parts)
    return None


def as_vec2(value: Value) -> Optional[Vec2]:
    """Interpret a value as a 2-vector written ``(x, y)``."""
    if isinstance(value, Vec2):
        return value
    if isinstance(value, str):
        parts = _split_tuple(value, 2)
        if parts is not None:
            return Vec2(*parts)
    return None


def format_value(value: Value) -> str:
    """Wire form of a value, readable back by :func:`auto_cast`."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    return str(value)


def auto_cast(text: Optional[str]) -> Value:
    """
    Parse wire text back into a value.

    The first successful interpretation wins, in this order: 3-vector,
    2-vector, number, boolean, text. Text that looks like another kind
    (``"1.0"``, ``"yes"``) therefore does not come back as text.
    """
    if text is None or text == "null":
        return None
    for parse in (as_vec3, as_vec2, as_number, as_boolean):
        parsed = parse(text)
        if parsed is not None:
            return parsed
    return text


def type_name(value: Value) -> str:
    """Short kind name of a value, used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, Vec2):
        return "vec2"
    if isinstance(value, Vec3):
        return "vec3"
    return type(value).__name__


def to_json_value(value: Value):
    """JSON-safe form of a value; vectors and non-finite numbers become their text form."""
    if isinstance(value, float) and not math.isfinite(value):
        return _format_number(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
