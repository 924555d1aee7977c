"""Post targeting and request completion stats.

A post's ``targeting`` says which locations receive it: every location of
the tenant (``global``) or an explicit list (``specific_locations``, also
spelled ``locations``). A request attached to the post derives its
``completion_stats`` from that targeting once, at creation, and then only
moves units between counters:

    pending --record_submission--> submitted
    pending --mark_overdue-------> overdue --record_submission--> submitted

``submitted + pending + overdue <= total_locations`` holds for every
``CompletionStats`` value; constructing one that breaks it raises
``CompletionStatsError``.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple
import logging

from core.exceptions import BadRequestError, ForbiddenError

logger = logging.getLogger(__name__)

GLOBAL = "global"
SPECIFIC_LOCATIONS = "specific_locations"

TARGETING_TYPES = (GLOBAL, SPECIFIC_LOCATIONS)
TARGETING_ALIASES = {"locations": SPECIFIC_LOCATIONS}


@dataclass(frozen=True)
class Targeting:
    """Normalized targeting descriptor."""

    type: str = GLOBAL
    location_ids: Tuple[str, ...] = ()

    @property
    def is_global(self) -> bool:
        return self.type == GLOBAL

    def to_dict(self) -> Dict[str, Any]:
        if self.is_global:
            return {"type": GLOBAL}
        return {"type": SPECIFIC_LOCATIONS, "location_ids": list(self.location_ids)}

    def targets(self, location_id: str) -> bool:
        """Whether a location of the tenant receives the post."""
        return self.is_global or location_id.lower() in self.location_ids

    def reaches_any(self, location_ids: Iterable[str]) -> bool:
        if self.is_global:
            return True
        return any(loc.lower() in self.location_ids for loc in location_ids)

    @classmethod
    def from_stored(cls, data: Optional[Dict[str, Any]]) -> "Targeting":
        """Read a descriptor already accepted by ``parse_targeting``.

        Rows written before normalization may use the ``locations`` spelling
        or omit ``type``; an empty or missing id list means global.
        """
        if not data:
            return cls()
        kind = TARGETING_ALIASES.get(data.get("type"), data.get("type"))
        ids = data.get("location_ids")
        if ids is None:
            ids = data.get("locations")
        if kind == GLOBAL or not ids:
            return cls()
        return cls(SPECIFIC_LOCATIONS, tuple(str(i).lower() for i in ids))


def parse_targeting(raw: Any, field: str = "targeting") -> Targeting:
    """Validate a client-supplied targeting descriptor.

    Raises:
        BadRequestError: on a non-object descriptor, an unknown ``type``, or
            a specific-locations descriptor without a non-empty list of
            strings. Ids that are not UUIDs are kept; they never resolve to
            a location, so the access gate refuses them.
    """
    if raw is None:
        return Targeting()
    if not isinstance(raw, dict):
        raise BadRequestError(f"{field} must be an object")

    kind = raw.get("type")
    if kind is None:
        kind = GLOBAL
    if isinstance(kind, str):
        kind = TARGETING_ALIASES.get(kind, kind)
    if kind not in TARGETING_TYPES:
        raise BadRequestError(f"{field}.type must be one of: {', '.join(TARGETING_TYPES)}")
    if kind == GLOBAL:
        return Targeting()

    location_ids = raw.get("location_ids")
    if not isinstance(location_ids, list) or not location_ids:
        raise BadRequestError(f"{field}.location_ids must be a non-empty array")

    seen = []
    for location_id in location_ids:
        if not isinstance(location_id, str) or not location_id:
            raise BadRequestError(f"{field}.location_ids must be an array of strings")
        location_id = location_id.lower()
        if location_id not in seen:
            seen.append(location_id)
    return Targeting(SPECIFIC_LOCATIONS, tuple(seen))


def check_location_access(targeting: Targeting, resolved_ids: Iterable[str]) -> Tuple[str, ...]:
    """Gate for specific-location targeting.

    ``resolved_ids`` are the listed ids that resolved to locations of the
    author's tenant. One resolved location is enough; none at all means
    the author may not target that list.
    """
    if targeting.is_global:
        return ()
    resolved = tuple(resolved_ids)
    if not resolved:
        logger.warning(f"Targeting denied: none of {len(targeting.location_ids)} locations resolved")
        raise ForbiddenError("You do not have access to the targeted locations")
    return resolved


def total_locations_for(targeting: Targeting, active_location_count: int) -> int:
    """Number of locations a request attached to the post expects answers from."""
    if targeting.is_global:
        return active_location_count
    return len(targeting.location_ids)


class CompletionStatsError(ValueError):
    """Raised when a counter update would break the stats invariant."""


@dataclass(frozen=True)
class CompletionStats:
    total_locations: int
    submitted: int = 0
    pending: int = 0
    overdue: int = 0

    def __post_init__(self):
        counters = (self.total_locations, self.submitted, self.pending, self.overdue)
        if any(value < 0 for value in counters):
            raise CompletionStatsError(f"Negative completion counter in {counters}")
        if self.submitted + self.pending + self.overdue > self.total_locations:
            raise CompletionStatsError(
                f"submitted + pending + overdue exceeds total_locations in {counters}"
            )

    @classmethod
    def initial(cls, total_locations: int) -> "CompletionStats":
        return cls(total_locations=total_locations, submitted=0, pending=total_locations, overdue=0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompletionStats":
        return cls(
            total_locations=int(data.get("total_locations", 0)),
            submitted=int(data.get("submitted", 0)),
            pending=int(data.get("pending", 0)),
            overdue=int(data.get("overdue", 0)),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_locations": self.total_locations,
            "submitted": self.submitted,
            "pending": self.pending,
            "overdue": self.overdue,
        }

    @property
    def outstanding(self) -> int:
        return self.pending + self.overdue

    def record_submission(self) -> "CompletionStats":
        """Count one location's response, taking it from pending first."""
        if self.pending > 0:
            return replace(self, submitted=self.submitted + 1, pending=self.pending - 1)
        if self.overdue > 0:
            return replace(self, submitted=self.submitted + 1, overdue=self.overdue - 1)
        raise CompletionStatsError("No outstanding locations left to submit")

    def mark_overdue(self) -> "CompletionStats":
        """Move every pending location to overdue."""
        if self.pending == 0:
            return self
        return replace(self, overdue=self.overdue + self.pending, pending=0)


__all__ = [
    "GLOBAL",
    "SPECIFIC_LOCATIONS",
    "TARGETING_TYPES",
    "Targeting",
    "parse_targeting",
    "check_location_access",
    "total_locations_for",
    "CompletionStats",
    "CompletionStatsError",
]
