# tests/test_catalog.py

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

import swatch_catalog as cat
from swatch_catalog import NO_MATCH, CatalogEntry, ColorCatalog
from swatch_color import TEXTILE_WEIGHTS, Color, InvalidChannelError, to_lab

"""
Catalog & matcher tests
=======================

Does: Check catalog construction and ordering, the empty / single-entry / tie
      behaviour of nearest-color matching, batch matching and the built-in
      system palette.
"""


def _entries(*items):
    return [CatalogEntry(ident, Color.from_hex(hx), label) for ident, hx, label in items]


# ──────────────────────────────────────────────────────────────────────────────
# Construction & mapping interface
# ──────────────────────────────────────────────────────────────────────────────
def test_iteration_is_by_ascending_identifier():
    catalog = ColorCatalog(_entries((9, "#000000", "k"), (2, "#ffffff", "w"), (5, "#ff0000", "r")))
    assert list(catalog) == [2, 5, 9]
    assert catalog.identifiers == (2, 5, 9)
    assert len(catalog) == 3
    assert catalog[5].label == "r"
    assert 9 in catalog and 4 not in catalog


def test_mixed_identifiers_sort_ints_before_strings():
    catalog = ColorCatalog(_entries(("b", "#000000", ""), (10, "#000000", ""), ("a", "#000000", ""), (3, "#000000", "")))
    assert list(catalog) == [3, 10, "a", "b"]


def test_lab_values_follow_identifier_order_and_are_read_only():
    catalog = ColorCatalog(_entries((2, "#000000", "black"), (1, "#ffffff", "white")))
    labs = catalog.lab_values
    assert labs.shape == (2, 3)
    assert labs[0, 0] == pytest.approx(100.0, abs=0.01)
    assert labs[1, 0] == pytest.approx(0.0, abs=0.01)
    with pytest.raises(ValueError):
        labs[0, 0] = 1.0
    black = catalog.lab(2)
    assert (black.L, black.a, black.b) == pytest.approx(to_lab("#000000").as_array().tolist(), abs=1e-9)
    with pytest.raises(KeyError):
        catalog.lab(3)


def test_entry_defaults_and_coercion():
    entry = CatalogEntry(7, (0.5, 0.5, 0.5))
    assert entry.label == "7"
    assert isinstance(entry.color, Color)
    assert entry.color.alpha == 1.0


@pytest.mark.parametrize("ident", [True, 1.5, None, (1, 2)])
def test_entry_rejects_bad_identifiers(ident):
    with pytest.raises(TypeError):
        CatalogEntry(ident, Color(0.0, 0.0, 0.0))


def test_duplicate_identifiers_rejected():
    with pytest.raises(ValueError):
        ColorCatalog(_entries((1, "#000000", "a"), (1, "#ffffff", "b")))


def test_constructor_rejects_non_entries():
    with pytest.raises(TypeError):
        ColorCatalog([(1, Color(0.0, 0.0, 0.0), "black")])


def test_from_entries():
    catalog = ColorCatalog.from_entries(iter(_entries((3, "#ffffff", "white"), (1, "#000000", ""))))
    assert list(catalog) == [1, 3]
    assert catalog[1].label == "1"
    with pytest.raises(ValueError):
        ColorCatalog.from_entries(_entries((1, "#000000", "a"), (1, "#ffffff", "b")))
    with pytest.raises(InvalidChannelError):
        ColorCatalog.from_entries([CatalogEntry(1, Color(0.0, 0.0, 2.0))])
    assert ColorCatalog.from_entries([CatalogEntry(1, Color(0.0, 0.0, 2.0))], clip=True).nearest("#0000ff").delta_e == pytest.approx(0.0, abs=1e-9)


def test_from_colors_with_labels():
    catalog = ColorCatalog.from_colors({1: "#ff0000", 2: (0.0, 0.0, 1.0)}, labels={1: "red"})
    assert catalog[1].label == "red"
    assert catalog[2].label == "2"
    assert catalog[2].color == Color(0.0, 0.0, 1.0)


def test_from_mapping_validates_keys():
    entry = CatalogEntry(1, Color(0.0, 0.0, 0.0), "black")
    assert list(ColorCatalog.from_mapping({1: entry})) == [1]
    with pytest.raises(ValueError):
        ColorCatalog.from_mapping({2: entry})
    with pytest.raises(ValueError):
        ColorCatalog.from_mapping({"1": entry})
    with pytest.raises(TypeError):
        ColorCatalog.from_mapping({1: Color(0.0, 0.0, 0.0)})


def test_catalog_colors_follow_channel_policy():
    entries = [CatalogEntry(1, Color(1.2, 0.0, 0.0), "too red")]
    with pytest.raises(InvalidChannelError):
        ColorCatalog(entries)
    catalog = ColorCatalog(entries, clip=True)
    np.testing.assert_allclose(catalog.lab_values[0], to_lab((1.0, 0.0, 0.0)).as_array())


# ──────────────────────────────────────────────────────────────────────────────
# Matching
# ──────────────────────────────────────────────────────────────────────────────
def test_empty_catalog_returns_no_match():
    empty = ColorCatalog()
    result = empty.nearest("#123456")
    assert result is NO_MATCH
    assert result.matched is False
    assert result.identifier is None
    assert math.isinf(result.delta_e)
    assert cat.nearest_match(Color(0.5, 0.5, 0.5), {}) is NO_MATCH


@pytest.mark.parametrize("query", ["#000000", "#ffffff", "#00ff00", (0.3, 0.1, 0.9)])
def test_single_entry_catalog_always_matches(query):
    catalog = ColorCatalog(_entries(("only", "#ff8800", "orange")))
    result = catalog.nearest(query)
    assert result.identifier == "only"
    assert result.matched
    assert result.delta_e >= 0.0


def test_exact_color_matches_with_zero_distance():
    catalog = ColorCatalog(_entries((1, "#000000", ""), (2, "#ff0000", ""), (3, "#0000ff", "")))
    result = catalog.nearest("#ff0000")
    assert result.identifier == 2
    assert result.delta_e == pytest.approx(0.0, abs=1e-9)


def test_nearest_picks_closest():
    catalog = ColorCatalog(_entries((1, "#000000", "black"), (2, "#ffffff", "white"), (3, "#808080", "gray")))
    assert catalog.nearest("#0a0a0a").identifier == 1
    assert catalog.nearest("#f0f0f0").identifier == 2
    assert catalog.nearest("#7a7a7a").identifier == 3


def test_ties_go_to_smallest_identifier():
    catalog = ColorCatalog(_entries((7, "#3366cc", "seven"), (3, "#3366cc", "three"), (5, "#000000", "five")))
    results = {catalog.nearest("#3366cc").identifier for _ in range(20)}
    assert results == {3}

    named = ColorCatalog(_entries(("beta", "#3366cc", ""), ("alpha", "#3366cc", "")))
    assert named.nearest("#3366cc").identifier == "alpha"

    mixed = ColorCatalog(_entries(("a", "#3366cc", ""), (99, "#3366cc", "")))
    assert mixed.nearest("#3366cc").identifier == 99


def test_ties_ignore_insertion_order():
    items = [(4, "#3366cc", ""), (8, "#3366cc", ""), (6, "#3366cc", "")]
    forward = ColorCatalog(_entries(*items)).nearest("#3366cc")
    backward = ColorCatalog(_entries(*reversed(items))).nearest("#3366cc")
    assert forward.identifier == backward.identifier == 4


def test_nearest_match_accepts_plain_mapping():
    mapping = {e.identifier: e for e in _entries((1, "#000000", ""), (2, "#ffffff", ""))}
    assert cat.nearest_match("#eeeeee", mapping).identifier == 2
    with pytest.raises(TypeError):
        cat.nearest_match("#eeeeee", [1, 2])


def test_weights_change_distance_not_ordering_for_grays():
    catalog = ColorCatalog(_entries((1, "#404040", ""), (2, "#c0c0c0", "")))
    default = catalog.nearest("#505050")
    textile = catalog.nearest("#505050", TEXTILE_WEIGHTS)
    assert default.identifier == textile.identifier == 1
    # achromatic pair: only the lightness term, halved by k_L = 2
    assert textile.delta_e == pytest.approx(default.delta_e / 2.0, rel=1e-6)


def test_query_channel_policy():
    catalog = ColorCatalog(_entries((1, "#ff0000", "")))
    with pytest.raises(InvalidChannelError):
        catalog.nearest((1.5, 0.0, 0.0))
    assert catalog.nearest((1.5, 0.0, 0.0), clip=True).delta_e == pytest.approx(0.0, abs=1e-9)


# ──────────────────────────────────────────────────────────────────────────────
# Batch matching & concurrency
# ──────────────────────────────────────────────────────────────────────────────
def test_nearest_many_matches_single_queries():
    catalog = cat.system_palette()
    rng = np.random.default_rng(5)
    queries = [tuple(rng.random(3)) for _ in range(40)]
    batch = catalog.nearest_many(queries)
    single = [catalog.nearest(q) for q in queries]
    assert [r.identifier for r in batch] == [r.identifier for r in single]
    np.testing.assert_allclose([r.delta_e for r in batch], [r.delta_e for r in single], atol=1e-12)
    assert cat.nearest_matches(queries[:3], catalog) == batch[:3]


def test_nearest_many_edge_cases():
    assert cat.system_palette().nearest_many([]) == []
    assert ColorCatalog().nearest_many(["#000000", "#ffffff"]) == [NO_MATCH, NO_MATCH]


def test_concurrent_queries_agree():
    catalog = cat.system_palette()
    rng = np.random.default_rng(9)
    queries = [tuple(rng.random(3)) for _ in range(64)]
    expected = [catalog.nearest(q).identifier for q in queries]
    with ThreadPoolExecutor(max_workers=8) as pool:
        got = list(pool.map(lambda q: catalog.nearest(q).identifier, queries))
    assert got == expected


# ──────────────────────────────────────────────────────────────────────────────
# System palette
# ──────────────────────────────────────────────────────────────────────────────
def test_system_palette_layout():
    palette = cat.system_palette()
    assert list(palette) == list(range(1, 13))
    assert palette[10].label == "white"
    assert palette[11].label == "purple"
    assert palette is cat.system_palette()


@pytest.mark.parametrize(
    "query, expected",
    [("#FF3B30", 5), ("#34C759", 6), ("#007AFF", 7), ("#FFCC00", 8), ("#FF9500", 9),
     ("#FFFFFF", 10), ("#AF52DE", 11), ("#FA3C32", 5)],
)
def test_system_palette_matches(query, expected):
    assert cat.system_palette().nearest(query).identifier == expected


def test_system_palette_black_ties_resolve_to_label():
    # "label" (1) and "black" (12) share RGB; the label variants 2..4 differ only in alpha
    palette = cat.system_palette()
    assert palette.nearest("#000000").identifier == 1
    assert palette.nearest("#3C3C43").identifier == 2
