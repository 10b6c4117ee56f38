import json
import logging
from dataclasses import dataclass, fields, is_dataclass, replace
from typing import Any, Dict, Optional, Type, TypeVar

from fossilmind.models.compat.dataclass_model import DataclassModelMixin

logger = logging.getLogger(__name__)


@dataclass
class EngineBaseModel(DataclassModelMixin):
    """
    Base model for typed engine configuration sections.

    Adds merge helpers so a partial override (e.g. loaded from a config file)
    can be layered over the defaults without losing unset fields.
    """

    T = TypeVar("T", bound="EngineBaseModel")

    @staticmethod
    def _merge_values(base: Any, override: Any) -> Any:
        """Merge two values with sensible defaults:
        - If override is None, keep base
        - If base is None, use override
        - If both are dataclasses of the same type, merge recursively
        - If both are dicts, perform shallow merge (base | override)
        - Otherwise, use override
        """
        if override is None:
            return base
        if base is None:
            return override
        if is_dataclass(base) and is_dataclass(override) and type(base) is type(override):
            return EngineBaseModel._merge_dataclasses(type(base), base, override)
        if isinstance(base, dict) and isinstance(override, dict):
            out = dict(base)
            out.update(override)
            return out
        return override

    @staticmethod
    def _merge_dataclasses(cls: Type[T], base: T, override: T) -> T:
        """Field-wise merge two instances of the same dataclass type.
        Non-None override fields replace base; nested dataclasses are merged recursively.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            b_val = getattr(base, f.name)
            o_val = getattr(override, f.name)
            values[f.name] = EngineBaseModel._merge_values(b_val, o_val)
        return replace(base, **values)

    def merged_with(self: T, override: Optional[T]) -> T:
        """Return a new instance with override non-None fields applied.
        If override is None, returns a copy of self.
        """
        if override is None:
            return replace(self)
        return self._merge_dataclasses(type(self), self, override)

    @classmethod
    def from_section(cls: Type[T], section: Optional[Dict[str, Any]]) -> T:
        """Build a section from a raw config mapping, ignoring unknown keys."""
        if not section:
            return cls()
        names = {f.name for f in fields(cls)}
        unknown = set(section) - names
        defaults = cls()
        values = {}
        for f in fields(cls):
            if f.name not in section:
                continue
            default = getattr(defaults, f.name)
            raw = section[f.name]
            if is_dataclass(default) and isinstance(raw, dict):
                values[f.name] = type(default).from_section(raw)
            elif isinstance(default, list) and isinstance(raw, str):
                values[f.name] = json.loads(raw)
            elif isinstance(default, bool) and isinstance(raw, str):
                values[f.name] = raw.lower() in ("true", "1", "yes", "on")
            elif isinstance(default, (int, float)) and not isinstance(default, bool) and isinstance(raw, str):
                # Values overridden from the environment arrive as strings
                values[f.name] = int(float(raw)) if isinstance(default, int) else float(raw)
            else:
                values[f.name] = raw
        instance = cls(**values)
        if unknown:
            logger.debug(f"Ignoring unknown keys for {cls.__name__}: {sorted(unknown)}")
        return instance
