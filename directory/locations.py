"""
Picks which location (and so which kitchens) a public URL shows.

Resolution order, over active locations only:
  1. nick_name equal to the requested nickname
  2. the default location id
  3. not found
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_SORT_ORDER = 100

MATCHED_NICKNAME = "nickname"
MATCHED_DEFAULT = "default"
NOT_FOUND = "not_found"


@dataclass(frozen=True)
class LocationResolution:
    location: Optional[dict]
    matched_by: str

    @property
    def found(self) -> bool:
        return self.location is not None


def is_active(record, flag):
    # a missing flag counts as active
    return record.get(flag) is not False


def sort_locations(locations):
    return sorted(
        locations,
        key=lambda l: (
            DEFAULT_SORT_ORDER if l.get("sort_order") is None else l["sort_order"],
            l.get("name") or "",
        ),
    )


def active_locations(locations):
    return sort_locations(l for l in locations if is_active(l, "active_location"))


def default_location_id(locations, configured_id=None):
    """
    The configured default id when set, otherwise the first active
    location flagged is_default.
    """
    if configured_id:
        return configured_id
    for location in active_locations(locations):
        if location.get("is_default"):
            return location["id"]
    return None


def resolve_location(locations, nickname=None, default_id=None) -> LocationResolution:
    candidates = active_locations(locations)

    if nickname:
        for location in candidates:
            if location.get("nick_name") == nickname:
                return LocationResolution(location, MATCHED_NICKNAME)

    if default_id:
        for location in candidates:
            if location.get("id") == default_id:
                return LocationResolution(location, MATCHED_DEFAULT)

    return LocationResolution(None, NOT_FOUND)


def kitchens_for_location(kitchens, location_id):
    """Active kitchens at a location, by sort_order (unset last) then name."""
    return sorted(
        (
            k for k in kitchens
            if k.get("location_id") == location_id and is_active(k, "active_kitchen")
        ),
        key=lambda k: (k.get("sort_order") is None, k.get("sort_order") or 0, k.get("name") or ""),
    )
