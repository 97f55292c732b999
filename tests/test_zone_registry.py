# tests/test_zone_registry.py
import pytest

from tzcore.core.errors import UnknownZone
from tzcore.services.zone_registry import ZoneRegistry


def test_resolve_canonical_name(registry):
    handle = registry.resolve("America/New_York")

    assert handle.name == "America/New_York"
    assert handle.region == "America"
    assert "EST" in handle.abbreviations
    assert "EDT" in handle.abbreviations


def test_resolve_strips_whitespace(registry):
    assert registry.resolve("  Asia/Tokyo ").name == "Asia/Tokyo"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("PST", "America/Los_Angeles"),
        ("pst", "America/Los_Angeles"),
        ("EST", "America/New_York"),
        ("cst", "America/Chicago"),
        ("IST", "Asia/Kolkata"),
        ("JST", "Asia/Tokyo"),
        ("GMT", "Europe/London"),
        ("utc", "UTC"),
    ],
)
def test_resolve_abbreviations_case_insensitive(registry, raw, expected):
    assert registry.resolve(raw).name == expected


def test_canonical_names_are_case_sensitive(registry):
    """
    Only abbreviations are matched case-insensitively.
    """
    with pytest.raises(UnknownZone):
        registry.resolve("america/new_york")


@pytest.mark.parametrize("raw", ["", "   ", "Mars/Olympus_Mons", "XYZT"])
def test_resolve_unknown_raises(registry, raw):
    with pytest.raises(UnknownZone) as exc_info:
        registry.resolve(raw)
    assert exc_info.value.raw == raw


def test_abbreviation_pointing_outside_catalog_is_ignored():
    """
    An abbreviation whose zone is not in the injected catalog does not resolve.
    """
    registry = ZoneRegistry(zone_names=["UTC"], reference_year=2025)

    with pytest.raises(UnknownZone):
        registry.resolve("PST")


def test_handles_compare_by_name(registry):
    """
    An abbreviation and its canonical name resolve to the same handle.
    """
    assert registry.resolve("PST") == registry.resolve("America/Los_Angeles")
    assert registry.resolve("PST") is registry.resolve("America/Los_Angeles")


def test_contains(registry):
    assert "EST" in registry
    assert "Europe/Paris" in registry
    assert "Nowhere/Special" not in registry
    assert 42 not in registry


def test_list_is_ordered_by_region_then_name(registry):
    """
    Listing is sorted by region, then by zone name.
    """
    names = [handle.name for handle in registry.list()]

    assert names == sorted(names, key=lambda n: (n.split("/", 1)[0] if "/" in n else "Other", n))
    assert names[0] == "America/Chicago"
    assert names[-1] == "Pacific/Auckland"
    assert len(names) == len(set(names))


def test_list_filter_is_case_insensitive_substring(registry):
    assert [h.name for h in registry.list("york")] == ["America/New_York"]
    assert [h.name for h in registry.list("AUSTRALIA/")] == ["Australia/Lord_Howe", "Australia/Sydney"]
    assert list(registry.list("no-such-zone")) == []


def test_list_is_restartable(registry):
    """
    A listing can be iterated more than once.
    """
    listing = registry.list("asia")

    first = [h.name for h in listing]
    second = [h.name for h in listing]

    assert first == second
    assert first == ["Asia/Dubai", "Asia/Kathmandu", "Asia/Kolkata", "Asia/Tokyo"]


def test_listing_grouped_by_region(registry):
    """
    Zones without a region prefix are grouped under Other.
    """
    grouped = registry.list().grouped()

    assert [h.name for h in grouped["Europe"]] == ["Europe/London", "Europe/Paris"]
    assert [h.name for h in grouped["Other"]] == ["UTC"]
