# -*- coding: utf-8 -*-
"""
Swatch: Perceptual color distance and nearest-color matching
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color catalog & nearest-color matching
======================================
A ``ColorCatalog`` is an immutable mapping ``identifier -> CatalogEntry``
that converts every reference color to CIELAB once, at construction, into a
read-only (N, 3) array.  Queries convert the probe color once and run a
single 1-vs-N CIEDE2000 kernel call against that array.

Ordering contract
-----------------
Entries are iterated, stored and scanned by ascending identifier.  Integer
identifiers sort before string identifiers, so mixed catalogs still have a
total order.  Matching keeps the first minimum of that scan, i.e. on a tie
the smallest identifier wins, on every run and on every thread.

An empty catalog is a valid input: queries return ``NO_MATCH``.
"""

from __future__ import annotations

import functools
import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final, List, Optional, Tuple, TypeAlias, Union

import numpy as np

from swatch_colorengine import ArrayFloat, ColorMetrics, ColorSpaceEngine
from swatch_color import (
    DEFAULT_WEIGHTS,
    Color,
    ColorLike,
    DeltaEWeights,
    Lab,
    extract_channels,
    extract_channels_batch,
    to_lab,
)

__all__ = [
    "Identifier",
    "CatalogEntry",
    "MatchResult",
    "NO_MATCH",
    "ColorCatalog",
    "nearest_match",
    "nearest_matches",
    "system_palette",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------
Identifier: TypeAlias = Union[int, str]


def _identifier_sort_key(identifier: Identifier) -> Tuple[int, Identifier]:
    # bool is an int subclass but True == 1 would collide with a real key
    if isinstance(identifier, bool) or not isinstance(identifier, (int, str)):
        raise TypeError(
            f"Catalog identifiers must be int or str, got {type(identifier).__name__}"
        )
    return (0, identifier) if isinstance(identifier, int) else (1, identifier)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class CatalogEntry:
    """One reference color.  ``label`` defaults to ``str(identifier)``."""
    identifier: Identifier
    color:      Color
    label:      str = ""

    def __post_init__(self) -> None:
        _identifier_sort_key(self.identifier)
        if not isinstance(self.color, Color):
            object.__setattr__(self, "color", Color(*extract_channels(self.color)))
        if not self.label:
            object.__setattr__(self, "label", str(self.identifier))


@dataclass(slots=True, frozen=True)
class MatchResult:
    """Closest catalog entry and its CIEDE2000 distance.

    ``identifier`` is None (and ``delta_e`` is inf) when nothing matched.
    """
    identifier: Optional[Identifier]
    delta_e:    float

    @property
    def matched(self) -> bool:
        return self.identifier is not None


NO_MATCH: Final[MatchResult] = MatchResult(None, math.inf)


# =============================================================================
# ColorCatalog
# =============================================================================
class ColorCatalog(Mapping[Identifier, CatalogEntry]):
    """
    Immutable, Lab-precomputed catalog of reference colors.

    Build with the constructor (iterable of ``CatalogEntry``),
    ``from_colors`` ({identifier: color}) or ``from_mapping``
    ({identifier: CatalogEntry}).  Reading is lock-free; the object is never
    mutated after ``__init__``.
    """

    __slots__ = ("_entries", "_order", "_lab")

    def __init__(self, entries: Iterable[CatalogEntry] = (), *, clip: Optional[bool] = None) -> None:
        by_id: dict[Identifier, CatalogEntry] = {}
        for entry in entries:
            if not isinstance(entry, CatalogEntry):
                raise TypeError(f"Expected CatalogEntry, got {type(entry).__name__}")
            if entry.identifier in by_id:
                raise ValueError(f"Duplicate catalog identifier: {entry.identifier!r}")
            by_id[entry.identifier] = entry

        order = tuple(sorted(by_id, key=_identifier_sort_key))
        if order:
            rgba = extract_channels_batch((by_id[i].color for i in order), clip=clip)
            lab = ColorSpaceEngine.srgb_to_lab(rgba[:, :3])
        else:
            lab = np.empty((0, 3), dtype=np.float64)
        lab.flags.writeable = False

        self._entries = by_id
        self._order: Tuple[Identifier, ...] = order
        self._lab: ArrayFloat = lab
        logger.debug("Built color catalog with %d entries", len(order))

    # -- constructors ------------------------------------------------------
    @classmethod
    def from_entries(cls, entries: Iterable[CatalogEntry], *, clip: Optional[bool] = None) -> ColorCatalog:
        """Catalog from ``CatalogEntry`` objects; duplicate identifiers raise ``ValueError``."""
        return cls(entries, clip=clip)

    @classmethod
    def from_colors(
        cls,
        colors: Mapping[Identifier, ColorLike],
        labels: Optional[Mapping[Identifier, str]] = None,
        *,
        clip: Optional[bool] = None,
    ) -> ColorCatalog:
        """Catalog from ``{identifier: color}``; labels are optional."""
        labels = labels or {}
        entries = []
        for ident, value in colors.items():
            color = value if isinstance(value, Color) else Color(*extract_channels(value, clip=clip))
            entries.append(CatalogEntry(ident, color, labels.get(ident, "")))
        return cls(entries, clip=clip)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Identifier, CatalogEntry], *, clip: Optional[bool] = None) -> ColorCatalog:
        """Catalog from ``{identifier: CatalogEntry}``; keys must match entries."""
        for key, entry in mapping.items():
            if not isinstance(entry, CatalogEntry):
                raise TypeError(f"Expected CatalogEntry for key {key!r}, got {type(entry).__name__}")
            if key != entry.identifier or type(key) is not type(entry.identifier):
                raise ValueError(
                    f"Catalog key {key!r} does not match entry identifier {entry.identifier!r}"
                )
        return cls(mapping.values(), clip=clip)

    # -- mapping interface ---------------------------------------------------
    def __getitem__(self, identifier: Identifier) -> CatalogEntry:
        return self._entries[identifier]

    def __iter__(self) -> Iterator[Identifier]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return f"ColorCatalog(entries={len(self._order)})"

    # -- Lab access ---------------------------------------------------------
    @property
    def identifiers(self) -> Tuple[Identifier, ...]:
        """Identifiers in scan order (ascending)."""
        return self._order

    @property
    def lab_values(self) -> ArrayFloat:
        """Read-only (N, 3) Lab array, rows in ``identifiers`` order."""
        return self._lab

    def lab(self, identifier: Identifier) -> Lab:
        """Precomputed Lab of one entry."""
        if identifier not in self._entries:
            raise KeyError(identifier)
        row = self._lab[self._order.index(identifier)]
        return Lab(float(row[0]), float(row[1]), float(row[2]))

    # -- matching ----------------------------------------------------------
    def _match_lab(self, query_lab: ArrayFloat, weights: DeltaEWeights) -> MatchResult:
        distances = ColorMetrics.delta_E_2000(
            query_lab[np.newaxis, :], self._lab, weights.k_L, weights.k_C, weights.k_H
        )
        # argmin keeps the first minimum: ties go to the smallest identifier
        idx = int(np.argmin(distances))
        return MatchResult(self._order[idx], float(distances[idx]))

    def nearest(self, query: ColorLike, weights: DeltaEWeights = DEFAULT_WEIGHTS,
                *, clip: Optional[bool] = None) -> MatchResult:
        """
        Closest entry to *query* by CIEDE2000.

        Args:
            query: Probe color (``Color``, hex string or 3/4 floats).
            weights: CIEDE2000 parametric factors.
            clip: Per-call channel policy override for the query.

        Returns:
            ``MatchResult``; ``NO_MATCH`` when the catalog is empty.
        """
        if not self._order:
            return NO_MATCH
        return self._match_lab(to_lab(query, clip=clip).as_array(), weights)

    def nearest_many(self, queries: Iterable[ColorLike], weights: DeltaEWeights = DEFAULT_WEIGHTS,
                     *, clip: Optional[bool] = None) -> List[MatchResult]:
        """Batch form of ``nearest``: one result per query, in query order."""
        queries = list(queries)
        if not queries:
            return []
        if not self._order:
            return [NO_MATCH] * len(queries)
        rgba = extract_channels_batch(queries, clip=clip)
        labs = ColorSpaceEngine.srgb_to_lab(rgba[:, :3])
        return [self._match_lab(row, weights) for row in labs]


# =============================================================================
# Module-level helpers
# =============================================================================
CatalogLike: TypeAlias = Union[ColorCatalog, Mapping[Identifier, CatalogEntry]]


def _as_catalog(catalog: CatalogLike) -> ColorCatalog:
    if isinstance(catalog, ColorCatalog):
        return catalog
    if isinstance(catalog, Mapping):
        return ColorCatalog.from_mapping(catalog)
    raise TypeError(f"Expected a ColorCatalog or Mapping, got {type(catalog).__name__}")


def nearest_match(query: ColorLike, catalog: CatalogLike,
                  weights: DeltaEWeights = DEFAULT_WEIGHTS,
                  *, clip: Optional[bool] = None) -> MatchResult:
    """
    Closest catalog entry to *query*.

    A plain mapping is wrapped in a temporary ``ColorCatalog``; build the
    catalog once and reuse it when matching repeatedly.
    """
    return _as_catalog(catalog).nearest(query, weights, clip=clip)


def nearest_matches(queries: Iterable[ColorLike], catalog: CatalogLike,
                    weights: DeltaEWeights = DEFAULT_WEIGHTS,
                    *, clip: Optional[bool] = None) -> List[MatchResult]:
    """``nearest_match`` for many queries against one catalog."""
    return _as_catalog(catalog).nearest_many(queries, weights, clip=clip)


# ---------------------------------------------------------------------------
# Built-in palette
# ---------------------------------------------------------------------------
def _rgba255(red: int, green: int, blue: int, alpha: float = 1.0) -> Color:
    return Color(red / 255.0, green / 255.0, blue / 255.0, alpha)


# Light-appearance sRGB values of the system colors shown on the
# comparison screen.  The label variants share one RGB and differ in alpha
# only, so for matching they tie and the lowest identifier wins.
_SYSTEM_PALETTE: Final[Tuple[Tuple[int, str, Color], ...]] = (
    (1,  "label",            _rgba255(0, 0, 0)),
    (2,  "secondary label",  _rgba255(60, 60, 67, 0.6)),
    (3,  "tertiary label",   _rgba255(60, 60, 67, 0.3)),
    (4,  "quaternary label", _rgba255(60, 60, 67, 0.18)),
    (5,  "red",              _rgba255(255, 59, 48)),
    (6,  "green",            _rgba255(52, 199, 89)),
    (7,  "blue",             _rgba255(0, 122, 255)),
    (8,  "yellow",           _rgba255(255, 204, 0)),
    (9,  "orange",           _rgba255(255, 149, 0)),
    (10, "white",            _rgba255(255, 255, 255)),
    (11, "purple",           _rgba255(175, 82, 222)),
    (12, "black",            _rgba255(0, 0, 0)),
)


@functools.lru_cache(maxsize=1)
def system_palette() -> ColorCatalog:
    """The twelve-entry system color catalog (identifiers 1..12)."""
    return ColorCatalog(CatalogEntry(i, color, label) for i, label, color in _SYSTEM_PALETTE)
