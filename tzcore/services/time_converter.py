# tzcore/services/time_converter.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from tzcore.core.errors import AmbiguousLocalTime, NonExistentLocalTime
from tzcore.schemas.dst import ClassificationKind
from tzcore.schemas.zone import ConvertedTime, ZoneHandle
from tzcore.services.dst_analyzer import DSTAnalyzer


class Disambiguation(str, Enum):
    """
    Caller's choice for a wall-clock time that maps to two candidate
    instants (inside a DST gap or overlap).
    """

    EARLIER = "earlier"
    LATER = "later"


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class TimeConverter:
    """
    Converts instants and wall-clock times between zones.

    Wall-clock input is never normalized silently: a time inside a DST gap
    or overlap raises unless the caller picks the earlier or later of the
    two candidate instants.
    """

    def __init__(
        self,
        analyzer: DSTAnalyzer | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.analyzer = analyzer or DSTAnalyzer()
        self._clock = clock

    def convert(
        self,
        value: datetime,
        from_zone: ZoneHandle,
        to_zone: ZoneHandle,
        disambiguation: Disambiguation | None = None,
    ) -> ConvertedTime:
        """
        Convert `value` into `to_zone`.

        Parameters
        ----------
        value:
            An aware datetime is taken as an absolute instant (its own offset
            wins over `from_zone`). A naive datetime is a wall-clock time in
            `from_zone`.
        from_zone, to_zone:
            Resolved zone handles.
        disambiguation:
            Required when a naive `value` is nonexistent or ambiguous.

        Raises
        ------
        NonExistentLocalTime, AmbiguousLocalTime
            For naive input inside a gap/overlap without a disambiguation.
        """
        if value.tzinfo is None:
            instant = self.to_instant(value, from_zone, disambiguation)
        else:
            instant = value.astimezone(timezone.utc)
        return self.at(instant, to_zone)

    def to_instant(
        self,
        wall_clock: datetime,
        zone: ZoneHandle,
        disambiguation: Disambiguation | None = None,
    ) -> datetime:
        """
        Resolve a naive wall-clock time in `zone` to a UTC instant.
        """
        classification = self.analyzer.classify(zone, wall_clock)
        wall = classification.local_time

        if classification.kind is ClassificationKind.UNAMBIGUOUS:
            return wall.replace(tzinfo=zone.tz).astimezone(timezone.utc)

        if disambiguation is None:
            if classification.kind is ClassificationKind.NONEXISTENT:
                transition = classification.transition
                raise NonExistentLocalTime(
                    zone.name,
                    wall,
                    transition.wall_clock_start if transition else wall,
                    transition.wall_clock_end if transition else wall,
                )
            first, second = classification.offsets_seconds
            raise AmbiguousLocalTime(zone.name, wall, (first, second))

        candidates = sorted(
            wall.replace(tzinfo=zone.tz, fold=fold).astimezone(timezone.utc) for fold in (0, 1)
        )
        return candidates[0] if disambiguation is Disambiguation.EARLIER else candidates[1]

    def at(self, instant: datetime, zone: ZoneHandle) -> ConvertedTime:
        """
        Express an aware instant in `zone`.
        """
        instant_utc = instant.astimezone(timezone.utc)
        local = instant_utc.astimezone(zone.tz)
        offset = local.utcoffset()
        return ConvertedTime(
            zone=zone.name,
            local_time=local,
            utc_offset_seconds=int(offset.total_seconds()) if offset is not None else 0,
            is_dst=bool(local.dst()),
            abbreviation=local.tzname() or zone.name,
            instant=instant_utc,
        )

    def now(self, zone: ZoneHandle) -> ConvertedTime:
        """
        Current instant expressed in `zone`.
        """
        return self.at(self._clock(), zone)
