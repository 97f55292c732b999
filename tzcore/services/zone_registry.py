# tzcore/services/zone_registry.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from tzcore.core.errors import UnknownZone
from tzcore.schemas.zone import ZoneHandle

logger = logging.getLogger(__name__)


# Many-to-one: each abbreviation resolves to exactly one canonical zone.
# Real-world clashes are settled here once (CST is US Central, not China;
# IST is India, not Ireland or Israel; GMT is London, not UTC).
COMMON_ABBREVIATIONS: Mapping[str, str] = {
    "UTC": "UTC",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "AKST": "America/Anchorage",
    "AKDT": "America/Anchorage",
    "HST": "Pacific/Honolulu",
    "BRT": "America/Sao_Paulo",
    "ART": "America/Argentina/Buenos_Aires",
    "GMT": "Europe/London",
    "BST": "Europe/London",
    "WET": "Europe/Lisbon",
    "WEST": "Europe/Lisbon",
    "CET": "Europe/Paris",
    "CEST": "Europe/Paris",
    "EET": "Europe/Athens",
    "EEST": "Europe/Athens",
    "MSK": "Europe/Moscow",
    "GST": "Asia/Dubai",
    "PKT": "Asia/Karachi",
    "IST": "Asia/Kolkata",
    "SGT": "Asia/Singapore",
    "HKT": "Asia/Hong_Kong",
    "JST": "Asia/Tokyo",
    "KST": "Asia/Seoul",
    "AWST": "Australia/Perth",
    "ACST": "Australia/Adelaide",
    "AEST": "Australia/Sydney",
    "AEDT": "Australia/Sydney",
    "NZST": "Pacific/Auckland",
    "NZDT": "Pacific/Auckland",
}


class ZoneListing:
    """
    Lazy, restartable view over the zone catalog.

    Every iteration walks the catalog again, ordered by region and then by
    canonical name, so the same listing can be consumed several times.
    """

    def __init__(self, registry: "ZoneRegistry", name_filter: str | None = None) -> None:
        self._registry = registry
        self._needle = (name_filter or "").strip().lower()

    def __iter__(self) -> Iterator[ZoneHandle]:
        for name in self._registry.sorted_names():
            if self._needle and self._needle not in name.lower():
                continue
            yield self._registry.handle_for(name)

    def grouped(self) -> dict[str, list[ZoneHandle]]:
        """
        Group the listed zones by region (continent prefix) for display.
        """
        groups: dict[str, list[ZoneHandle]] = {}
        for handle in self:
            groups.setdefault(handle.region, []).append(handle)
        return groups


class ZoneRegistry:
    """
    Resolves raw zone identifiers to ZoneHandle objects.

    The registry is an explicit instance rather than ambient global state so
    tests can inject a frozen catalog and get reproducible results across
    OS/tzdata versions.

    Parameters
    ----------
    zone_names:
        Canonical IANA names in the catalog. Defaults to every zone known to
        `zoneinfo` (system database or the `tzdata` package).
    abbreviations:
        Abbreviation -> canonical name table. Defaults to COMMON_ABBREVIATIONS.
        Entries whose target is not in the catalog are ignored.
    loader:
        Callable building a `tzinfo` from a canonical name.
    reference_year:
        Year sampled (January and July) to collect each zone's observed
        abbreviations. Defaults to the current UTC year.
    """

    def __init__(
        self,
        zone_names: Iterable[str] | None = None,
        abbreviations: Mapping[str, str] | None = None,
        loader: Callable[[str], tzinfo] = ZoneInfo,
        reference_year: int | None = None,
    ) -> None:
        names = available_timezones() if zone_names is None else zone_names
        self._names: frozenset[str] = frozenset(names)
        table = COMMON_ABBREVIATIONS if abbreviations is None else abbreviations
        self._abbreviations: dict[str, str] = {
            abbr.upper(): target for abbr, target in table.items() if target in self._names
        }
        self._loader = loader
        self._reference_year = reference_year or datetime.now(tz=timezone.utc).year
        self._handles: dict[str, ZoneHandle] = {}

    def resolve(self, raw: str) -> ZoneHandle:
        """
        Resolve an IANA name (case-sensitive) or a common abbreviation
        (case-insensitive) to a ZoneHandle.

        Raises UnknownZone for anything else, including empty input.
        """
        candidate = (raw or "").strip()
        if not candidate:
            raise UnknownZone(raw)

        target = self._abbreviations.get(candidate.upper())
        if target is not None:
            return self.handle_for(target)

        if candidate in self._names:
            return self.handle_for(candidate)

        raise UnknownZone(raw)

    def list(self, name_filter: str | None = None) -> ZoneListing:
        """
        List the catalog, optionally filtered by a case-insensitive substring
        of the canonical name.
        """
        return ZoneListing(self, name_filter)

    def __contains__(self, raw: object) -> bool:
        if not isinstance(raw, str):
            return False
        try:
            self.resolve(raw)
        except UnknownZone:
            return False
        return True

    def sorted_names(self) -> tuple[str, ...]:
        return _sort_by_region(self._names)

    def handle_for(self, name: str) -> ZoneHandle:
        """
        Build (once) the handle of a canonical name known to the catalog.
        """
        handle = self._handles.get(name)
        if handle is not None:
            return handle

        if name not in self._names:
            raise UnknownZone(name)

        try:
            tz = self._loader(name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            logger.warning("Zone %s listed in catalog but not loadable: %s", name, exc)
            raise UnknownZone(name) from exc

        handle = ZoneHandle(
            name=name,
            abbreviations=self._abbreviations_of(name, tz),
            tz=tz,
        )
        self._handles[name] = handle
        return handle

    def _abbreviations_of(self, name: str, tz: tzinfo) -> tuple[str, ...]:
        found: list[str] = [abbr for abbr, target in self._abbreviations.items() if target == name]
        for month in (1, 7):
            label = datetime(self._reference_year, month, 15, 12, tzinfo=tz).tzname()
            # Zones without a letter abbreviation report numeric labels like "+09".
            if label and label.isalpha() and label not in found:
                found.append(label)
        return tuple(sorted(found))


@lru_cache(maxsize=8)
def _sort_by_region(names: frozenset[str]) -> tuple[str, ...]:
    def key(name: str) -> tuple[str, str]:
        region = name.split("/", 1)[0] if "/" in name else "Other"
        return region, name

    return tuple(sorted(names, key=key))


_default_registry: ZoneRegistry | None = None


def get_zone_registry() -> ZoneRegistry:
    """
    Lazily construct the process-wide registry backed by the system catalog.

    Intended for dependency injection in the HTTP layer; library callers
    can build their own ZoneRegistry instead.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = ZoneRegistry()
    return _default_registry
