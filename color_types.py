"""
Color - Value Type

Immutable RGB color with merged-integer and HTML (#rrggbb) views,
plus the sixteen basic HTML colors as module constants.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from problems import InvalidArgumentError, check_in_range


@dataclass(frozen=True)
class Color:
    """RGB color, each channel an integer in [0, 255]

    Attributes:
        red: Red channel
        green: Green channel
        blue: Blue channel

    Raises:
        InvalidArgumentError: If any channel is not an integer
        OutOfRangeError: If any channel is outside [0, 255]
    """
    red: int
    green: int
    blue: int

    def __post_init__(self):
        for name, value in (('red', self.red), ('green', self.green), ('blue', self.blue)):
            # bool is an int subclass but not a channel value
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(
                    f"{name} component must be an integer, got {value!r}."
                )
            check_in_range(f"{name} component", value, 0, 256)

    @classmethod
    def from_merged_rgb(cls, rgb: int) -> 'Color':
        """Create color from a merged integer (0xRRGGBB)

        Only the low 24 bits are used, so any integer is accepted
        (including ARGB values with an alpha byte on top).

        Args:
            rgb: Merged integer, one byte per channel

        Returns:
            Constructed color
        """
        return cls(
            (rgb >> 16) & 0xFF,
            (rgb >> 8) & 0xFF,
            rgb & 0xFF
        )

    def to_merged_rgb(self) -> int:
        """Pack channels into one integer (0xRRGGBB)"""
        return (self.red << 16) | (self.green << 8) | self.blue

    def to_hex(self) -> str:
        """HTML notation, lowercase, e.g. '#ff8000'"""
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    def to_tuple(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def inverted(self) -> 'Color':
        """Negative of this color (255 - channel)"""
        return Color(255 - self.red, 255 - self.green, 255 - self.blue)

    def blend(self, other: 'Color', weight: int, other_weight: int) -> 'Color':
        """Weighted integer average of two colors

        Args:
            other: Second color
            weight: Weight of this color (non-negative)
            other_weight: Weight of the other color (non-negative)

        Returns:
            Blended color; channels are truncated toward zero

        Raises:
            ValueError: If both weights are zero
        """
        total = weight + other_weight
        if total <= 0:
            raise ValueError("Blend weights must not both be zero")
        return Color(
            (self.red * weight + other.red * other_weight) // total,
            (self.green * weight + other.green * other_weight) // total,
            (self.blue * weight + other.blue * other_weight) // total
        )


# ============================================================================
# HTML Basic Colors
# ============================================================================

AQUA = Color(0x00, 0xFF, 0xFF)
BLACK = Color(0x00, 0x00, 0x00)
BLUE = Color(0x00, 0x00, 0xFF)
FUCHSIA = Color(0xFF, 0x00, 0xFF)
GRAY = Color(0x80, 0x80, 0x80)
GREEN = Color(0x00, 0x80, 0x00)
LIME = Color(0x00, 0xFF, 0x00)
MAROON = Color(0x80, 0x00, 0x00)
NAVY = Color(0x00, 0x00, 0x80)
OLIVE = Color(0x80, 0x80, 0x00)
PURPLE = Color(0x80, 0x00, 0x80)
RED = Color(0xFF, 0x00, 0x00)
SILVER = Color(0xC0, 0xC0, 0xC0)
TEAL = Color(0x00, 0x80, 0x80)
WHITE = Color(0xFF, 0xFF, 0xFF)
YELLOW = Color(0xFF, 0xFF, 0x00)

HTML_COLORS: Dict[str, Color] = {
    "aqua": AQUA,
    "black": BLACK,
    "blue": BLUE,
    "fuchsia": FUCHSIA,
    "gray": GRAY,
    "green": GREEN,
    "lime": LIME,
    "maroon": MAROON,
    "navy": NAVY,
    "olive": OLIVE,
    "purple": PURPLE,
    "red": RED,
    "silver": SILVER,
    "teal": TEAL,
    "white": WHITE,
    "yellow": YELLOW,
}
