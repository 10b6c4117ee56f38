from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from fossilmind.models.compat.dataclass_model import DataclassModelMixin, coerce_datetime, get_field_names

MIN_QUALITY = 1
MAX_QUALITY = 5
DEFAULT_QUALITY = 2

# Exported vaults use camelCase keys; map them onto the dataclass fields.
_CAMEL_TO_FIELD = {
    "probeIntent": "probe_intent",
    "modelShift": "model_shift",
    "artifactType": "artifact_type",
    "createdAt": "created_at",
    "dayKey": "day_key",
    "lastRevisitedAt": "last_revisited_at",
    "reuseCount": "reuse_count",
    "reinforceCount": "reinforce_count",
    "dismissCount": "dismiss_count",
    "skipCount": "skip_count",
    "dismissedUntil": "dismissed_until",
    "supersededBy": "superseded_by",
    "reentryOf": "reentry_of",
    "coexistsWith": "coexists_with",
}

_COUNTERS = ("reuse_count", "reinforce_count", "dismiss_count", "skip_count")


@dataclass
class Fossil(DataclassModelMixin):
    """
    A single compressed knowledge capture.

    The engine never owns fossils: callers pass the full collection on every call
    and the engine treats it as the source of truth for that invocation.
    ``deleted`` is a tombstone and ``superseded_by`` marks a replaced fossil;
    both hide the fossil from every similarity, scoring and graph operation.
    """
    id: str
    invariant: str = ""
    probe_intent: str = ""
    primitives: List[str] = field(default_factory=list)
    payload: str = ""
    model_shift: str = ""
    artifact_type: str = "Note"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    day_key: str = ""
    last_revisited_at: Optional[datetime] = None
    quality: int = DEFAULT_QUALITY
    deleted: bool = False
    reuse_count: int = 0
    reinforce_count: int = 0
    dismiss_count: int = 0
    skip_count: int = 0
    dismissed_until: Optional[datetime] = None
    superseded_by: Optional[str] = None
    supersedes: Optional[str] = None
    reentry_of: Optional[str] = None
    coexists_with: List[str] = field(default_factory=list)
    duration: float = 0.0

    def __post_init__(self):
        self.created_at = coerce_datetime(self.created_at) or datetime.now(timezone.utc)
        self.last_revisited_at = coerce_datetime(self.last_revisited_at)
        self.dismissed_until = coerce_datetime(self.dismissed_until)
        if not self.day_key:
            self.day_key = self.created_at.date().isoformat()
        self.quality = min(max(int(self.quality or DEFAULT_QUALITY), MIN_QUALITY), MAX_QUALITY)
        for name in _COUNTERS:
            setattr(self, name, int(getattr(self, name) or 0))
        # Empty strings from form state mean "no link"
        self.reentry_of = self.reentry_of or None
        self.superseded_by = self.superseded_by or None
        self.invariant = self.invariant or ""
        self.probe_intent = self.probe_intent or ""

    @property
    def is_visible(self) -> bool:
        """True when the fossil takes part in similarity, scoring and graph operations."""
        return not self.deleted and self.superseded_by is None

    @property
    def composite_text(self) -> str:
        """Text the token index is built from: probe intent followed by the invariant."""
        return f"{self.probe_intent} {self.invariant}"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Fossil":
        """Build a fossil from an exported record, accepting camelCase or snake_case keys.

        Unknown keys are dropped and missing fields take their defaults.
        """
        if not d.get("id"):
            raise ValueError("Fossil record requires a non-empty 'id'")
        data = {_CAMEL_TO_FIELD.get(k, k): v for k, v in d.items()}
        names = get_field_names(cls)
        # Free text may look like a timestamp; __post_init__ coerces the datetime fields itself
        return cls(**{k: v for k, v in data.items() if k in names and v is not None})


FossilLike = Union[Fossil, Mapping[str, Any]]


def normalize_fossils(records: Iterable[FossilLike]) -> List[Fossil]:
    """Normalize an input sequence of records into Fossil instances, preserving order.

    Fossil instances pass through untouched, mappings go through ``Fossil.from_dict``.
    """
    out: List[Fossil] = []
    for record in records or []:
        if isinstance(record, Fossil):
            out.append(record)
        else:
            out.append(Fossil.from_dict(dict(record)))
    return out


def visible_fossils(fossils: Iterable[Fossil]) -> List[Fossil]:
    """Fossils that are neither deleted nor superseded, in input order."""
    return [f for f in fossils if f.is_visible]
