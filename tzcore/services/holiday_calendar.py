# tzcore/services/holiday_calendar.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from functools import lru_cache

import holidays

from tzcore.schemas.zone import ZoneHandle

logger = logging.getLogger(__name__)


# Zone -> ISO 3166 country whose public holidays apply. Zones that are not
# listed have no holiday calendar and never count as affected.
ZONE_COUNTRIES: Mapping[str, str] = {
    "America/New_York": "US",
    "America/Chicago": "US",
    "America/Denver": "US",
    "America/Phoenix": "US",
    "America/Los_Angeles": "US",
    "America/Anchorage": "US",
    "Pacific/Honolulu": "US",
    "America/Toronto": "CA",
    "America/Vancouver": "CA",
    "America/Mexico_City": "MX",
    "America/Sao_Paulo": "BR",
    "America/Argentina/Buenos_Aires": "AR",
    "Europe/London": "GB",
    "Europe/Dublin": "IE",
    "Europe/Lisbon": "PT",
    "Europe/Madrid": "ES",
    "Europe/Paris": "FR",
    "Europe/Brussels": "BE",
    "Europe/Amsterdam": "NL",
    "Europe/Berlin": "DE",
    "Europe/Zurich": "CH",
    "Europe/Rome": "IT",
    "Europe/Vienna": "AT",
    "Europe/Stockholm": "SE",
    "Europe/Oslo": "NO",
    "Europe/Copenhagen": "DK",
    "Europe/Warsaw": "PL",
    "Europe/Athens": "GR",
    "Europe/Helsinki": "FI",
    "Europe/Istanbul": "TR",
    "Europe/Moscow": "RU",
    "Asia/Jerusalem": "IL",
    "Asia/Dubai": "AE",
    "Asia/Riyadh": "SA",
    "Asia/Karachi": "PK",
    "Asia/Kolkata": "IN",
    "Asia/Singapore": "SG",
    "Asia/Hong_Kong": "HK",
    "Asia/Shanghai": "CN",
    "Asia/Seoul": "KR",
    "Asia/Tokyo": "JP",
    "Australia/Perth": "AU",
    "Australia/Adelaide": "AU",
    "Australia/Sydney": "AU",
    "Australia/Melbourne": "AU",
    "Pacific/Auckland": "NZ",
    "Africa/Johannesburg": "ZA",
    "Africa/Lagos": "NG",
    "Africa/Cairo": "EG",
}


@lru_cache(maxsize=256)
def _country_holidays(country_code: str, year: int) -> Mapping[date, str]:
    try:
        return dict(holidays.country_holidays(country_code, years=year))
    except NotImplementedError:
        logger.warning("No holiday data for country %s", country_code)
        return {}


class HolidayCalendar:
    """
    Answers "is this local date a public holiday in this zone?" using the
    `holidays` package.

    Parameters
    ----------
    zone_countries:
        Zone name -> country code table. Defaults to ZONE_COUNTRIES.
    """

    def __init__(self, zone_countries: Mapping[str, str] | None = None) -> None:
        self._zone_countries = dict(ZONE_COUNTRIES if zone_countries is None else zone_countries)

    def country_for(self, zone: ZoneHandle) -> str | None:
        return self._zone_countries.get(zone.name)

    def holiday_name(self, zone: ZoneHandle, day: date) -> str | None:
        country = self.country_for(zone)
        if country is None:
            return None
        return _country_holidays(country, day.year).get(day)

    def is_holiday(self, zone: ZoneHandle, day: date) -> bool:
        return self.holiday_name(zone, day) is not None
