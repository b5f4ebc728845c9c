"""Operator lookup tables for Swedish regional GTFS feeds.

Both tables are priority ordered: the first matching rule wins, so more
specific prefixes and smaller, denser regions come first.
"""

from __future__ import annotations

from dataclasses import dataclass

from transit_resolver.domain.models.geo import BoundingBox

DEFAULT_OPERATOR = "sl"

# Operators with a static GTFS archive on the regional endpoint.
STATIC_OPERATORS: frozenset[str] = frozenset(
    {
        "sl",
        "ul",
        "skane",
        "otraf",
        "jlt",
        "krono",
        "klt",
        "gotland",
        "varm",
        "orebro",
        "vastmanland",
        "dt",
        "xt",
        "dintur",
        "halland",
        "blekinge",
        "sormland",
        "jamtland",
        "vasterbotten",
        "norrbotten",
    }
)


@dataclass(frozen=True, slots=True)
class IdPrefixRule:
    prefix: str
    operator_key: str


@dataclass(frozen=True, slots=True)
class RegionRule:
    bbox: BoundingBox
    operator_key: str


def _prefixes(operator_key: str, *prefixes: str) -> tuple[IdPrefixRule, ...]:
    return tuple(IdPrefixRule(prefix=p, operator_key=operator_key) for p in prefixes)


def _region(
    operator_key: str, min_lat: float, max_lat: float, min_lon: float, max_lon: float
) -> RegionRule:
    return RegionRule(
        bbox=BoundingBox(
            min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon
        ),
        operator_key=operator_key,
    )


ID_PREFIX_RULES: tuple[IdPrefixRule, ...] = (
    # National identifiers: 9011 + three-digit authority code.
    *_prefixes("sl", "9011001"),
    *_prefixes("ul", "9011003"),
    *_prefixes("sormland", "9011004"),
    *_prefixes("otraf", "9011005"),
    *_prefixes("jlt", "9011006"),
    *_prefixes("krono", "9011007"),
    *_prefixes("klt", "9011008"),
    *_prefixes("gotland", "9011009"),
    *_prefixes("blekinge", "9011010"),
    *_prefixes("skane", "9011012"),
    *_prefixes("halland", "9011013"),
    *_prefixes("vasttrafik", "9011014"),
    *_prefixes("varm", "9011017"),
    *_prefixes("orebro", "9011018"),
    *_prefixes("vastmanland", "9011019"),
    *_prefixes("dt", "9011020"),
    *_prefixes("xt", "9011021"),
    *_prefixes("dintur", "9011022"),
    *_prefixes("jamtland", "9011023"),
    *_prefixes("vasterbotten", "9011024"),
    *_prefixes("norrbotten", "9011025"),
    # Older, operator-specific numbering.
    *_prefixes("sl", "1082", "1065", "9031001"),
    *_prefixes("skane", "9024", "9031002", "9031003"),
    *_prefixes("vasttrafik", "9025"),
    *_prefixes("orebro", "9027"),
    *_prefixes("vastmanland", "9013"),
    *_prefixes("otraf", "9021"),
    *_prefixes("ul", "9012"),
    *_prefixes("dt", "9023"),
    *_prefixes("varm", "9022"),
    *_prefixes("sormland", "9016"),
    *_prefixes("krono", "9032"),
    *_prefixes("jlt", "9020"),
    *_prefixes("klt", "9019"),
    *_prefixes("halland", "9026", "9018"),
    *_prefixes("blekinge", "9017"),
    *_prefixes("xt", "9014"),
    *_prefixes("sl", "9011"),
)

REGION_RULES: tuple[RegionRule, ...] = (
    _region("sl", 58.7, 60.3, 17.0, 19.5),
    _region("skane", 55.3, 56.5, 12.4, 14.6),
    _region("halland", 56.3, 57.6, 11.8, 13.5),
    _region("ul", 59.2, 60.7, 16.9, 18.2),
    _region("orebro", 58.7, 60.0, 14.3, 15.6),
    _region("varm", 59.0, 61.0, 12.0, 14.3),
    _region("otraf", 57.7, 58.9, 14.5, 16.9),
    _region("jlt", 57.1, 58.2, 13.5, 15.6),
    _region("krono", 56.4, 57.2, 13.5, 15.6),
    _region("klt", 56.2, 58.0, 15.5, 17.2),
    _region("dt", 60.0, 62.3, 13.0, 16.8),
    _region("xt", 60.2, 62.3, 16.0, 17.8),
    _region("vastmanland", 59.2, 60.2, 15.5, 17.0),
    _region("sormland", 58.6, 59.6, 15.8, 17.6),
    _region("blekinge", 56.0, 56.5, 14.5, 16.0),
    _region("dintur", 62.0, 64.0, 16.0, 19.5),
    _region("jamtland", 61.5, 65.0, 12.0, 16.0),
    _region("vasterbotten", 63.5, 65.5, 15.0, 21.0),
    _region("norrbotten", 65.0, 69.1, 16.0, 24.2),
    _region("gotland", 56.8, 58.0, 18.0, 19.5),
)
