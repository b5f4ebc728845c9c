"""Per-operator route color rules.

Operators whose routes.txt carries missing or misleading colors get an entry
in ``ROUTE_COLOR_RULES``. Adding an operator means adding a rule function and
one dict entry; the parser never branches on operator keys itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

DEFAULT_COLOR = "#0ea5e9"
DEFAULT_TEXT_COLOR = "#ffffff"

WHITE = "#ffffff"
BLACK = "#000000"


@dataclass(frozen=True, slots=True)
class RouteColors:
    color: str
    text_color: str


@dataclass(frozen=True, slots=True)
class RouteStyleInput:
    """The routes.txt fields color rules may look at."""

    short_name: str
    route_type: int
    color: str | None  # normalized '#rrggbb' or None when the feed left it empty
    text_color: str | None


ColorRule = Callable[[RouteStyleInput], RouteColors]


def normalize_hex(raw: str | None) -> str | None:
    value = (raw or "").strip().lstrip("#")
    if not value:
        return None
    return f"#{value.lower()}"


def _leading_int(text: str) -> int | None:
    digits = ""
    for ch in text.strip():
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else None


def feed_colors(route: RouteStyleInput) -> RouteColors:
    return RouteColors(
        color=route.color or DEFAULT_COLOR,
        text_color=route.text_color or DEFAULT_TEXT_COLOR,
    )


# Jönköpings Länstrafik: city lines 1-4 have fixed brand colors,
# 11-37 are purple, everything else uses the default.
_JLT_LINE_COLORS: dict[str, RouteColors] = {
    "1": RouteColors("#e61c24", WHITE),
    "2": RouteColors("#fbb040", BLACK),
    "3": RouteColors("#00a651", WHITE),
    "4": RouteColors("#00aeef", WHITE),
}
_JLT_NUMBER_RANGES: tuple[tuple[int, int, RouteColors], ...] = (
    (11, 37, RouteColors("#662d91", WHITE)),
)


def jlt_colors(route: RouteStyleInput) -> RouteColors:
    short_name = route.short_name.strip()
    fixed = _JLT_LINE_COLORS.get(short_name)
    if fixed is not None:
        return fixed
    number = _leading_int(short_name)
    if number is not None:
        for low, high, colors in _JLT_NUMBER_RANGES:
            if low <= number <= high:
                return colors
    return RouteColors(DEFAULT_COLOR, DEFAULT_TEXT_COLOR)


# Skånetrafiken: trains purple, Lund tram green, buses green (city) or
# yellow (regional, line >= 100). Yellow backgrounds get black text.
_SKANE_FALLBACK_BY_ROUTE_TYPE: dict[int, str] = {
    2: "#7e3089",
    109: "#7e3089",
    0: "#80b331",
}
_SKANE_CITY_BUS = RouteColors("#80b331", WHITE)
_SKANE_REGIONAL_BUS = RouteColors("#f6c321", BLACK)
_SKANE_REGIONAL_MIN_LINE = 100
_SKANE_YELLOWS: frozenset[str] = frozenset(
    {"#f6c321", "#fde100", "#f8d000", "#fac800", "#f1c40f"}
)


def skane_colors(route: RouteStyleInput) -> RouteColors:
    rail_or_tram = _SKANE_FALLBACK_BY_ROUTE_TYPE.get(route.route_type)
    if rail_or_tram is not None:
        return RouteColors(route.color or rail_or_tram, WHITE)

    if route.color is None:
        number = _leading_int(route.short_name)
        if number is not None and number >= _SKANE_REGIONAL_MIN_LINE:
            return _SKANE_REGIONAL_BUS
        return _SKANE_CITY_BUS

    text = BLACK if route.color in _SKANE_YELLOWS else WHITE
    return RouteColors(route.color, text)


ROUTE_COLOR_RULES: dict[str, ColorRule] = {
    "jlt": jlt_colors,
    "skane": skane_colors,
}


def resolve_route_colors(operator_key: str, route: RouteStyleInput) -> RouteColors:
    rule = ROUTE_COLOR_RULES.get(operator_key, feed_colors)
    return rule(route)
