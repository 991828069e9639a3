"""Schema definitions for the command reference.

A feature document is loaded into one FeatureSpec. Each property holds a
base RuleLayer plus an ordered tuple of PlatformVariant overrides; the
reserved ``_template`` block is a PropertySpec of its own that every
property inherits from. Resolution flattens these layers into a
ResolvedRule for one platform string.
"""
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class _Unset:
    """Sentinel for "not given", distinct from None, "" and False."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()


class ValueKind(str, Enum):
    """Type tag governing how extracted text is coerced."""
    BOOLEAN = "boolean"
    INT = "int"
    STRING = "string"
    ARRAY = "array"   # list of strings


# Spellings accepted in documents
KIND_NAMES = {
    "boolean": ValueKind.BOOLEAN,
    "int": ValueKind.INT,
    "integer": ValueKind.INT,
    "string": ValueKind.STRING,
    "array": ValueKind.ARRAY,
}


def infer_kind(default_value: Any) -> ValueKind:
    """Infer a value kind from a declared default value."""
    # bool first: bool is a subclass of int
    if isinstance(default_value, bool):
        return ValueKind.BOOLEAN
    if isinstance(default_value, int):
        return ValueKind.INT
    if isinstance(default_value, (list, tuple)):
        return ValueKind.ARRAY
    return ValueKind.STRING


@dataclass(frozen=True)
class RuleLayer:
    """One partial layer of a property rule.

    Every field is UNSET unless the document gave it at this layer.
    """
    config_get: Any = UNSET               # tuple[str, ...]
    config_get_token: Any = UNSET         # tuple[str, ...]
    config_get_token_append: Any = UNSET  # tuple[str, ...]
    config_set: Any = UNSET               # tuple[str, ...]
    config_set_append: Any = UNSET        # tuple[str, ...]
    kind: Any = UNSET                     # ValueKind
    default_value: Any = UNSET
    multiple: Any = UNSET                 # bool

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is UNSET for f in fields(self))


# Field names a document may use inside a property or variant block
LAYER_FIELDS = tuple(f.name for f in fields(RuleLayer))


@dataclass(frozen=True)
class PlatformPattern:
    """A /regex/ key as written plus its compiled form."""
    source: str
    pattern: re.Pattern


@dataclass(frozen=True)
class PlatformVariant:
    """A regex-keyed override block."""
    source: str              # key as written, e.g. "/N(3|9)/"
    pattern: re.Pattern
    layer: RuleLayer


@dataclass(frozen=True)
class PropertySpec:
    """Unresolved description of one property."""
    name: str
    base: RuleLayer = field(default_factory=RuleLayer)
    variants: tuple[PlatformVariant, ...] = ()


@dataclass(frozen=True)
class FeatureSpec:
    """All properties of one feature, as loaded from its document."""
    name: str
    properties: Mapping[str, PropertySpec] = field(
        default_factory=lambda: MappingProxyType({})
    )
    template: PropertySpec = field(
        default_factory=lambda: PropertySpec(name="_template")
    )
    exclude: tuple[PlatformPattern, ...] = ()

    def __contains__(self, prop: str) -> bool:
        return prop in self.properties

    def property_names(self) -> list[str]:
        return list(self.properties)


@dataclass(frozen=True)
class ResolvedRule:
    """Effective rule for one (feature, property, platform)."""
    feature: str
    name: str
    platform: str
    variant: Optional[str] = None
    query_command: tuple[str, ...] = ()
    # None means no pattern at all, which is not the same as an empty one
    query_pattern: Optional[tuple[str, ...]] = None
    set_commands: tuple[str, ...] = ()
    kind: ValueKind = ValueKind.STRING
    default_value: Any = UNSET
    multiple: bool = False

    @property
    def has_default(self) -> bool:
        return self.default_value is not UNSET

    def default(self) -> Any:
        """Declared default, with list defaults returned as a fresh list."""
        if isinstance(self.default_value, tuple):
            return list(self.default_value)
        return self.default_value

    @property
    def settable(self) -> bool:
        return bool(self.set_commands)

    @property
    def queryable(self) -> bool:
        return bool(self.query_command) and self.query_pattern is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "feature": self.feature,
            "property": self.name,
            "platform": self.platform,
            "variant": self.variant,
            "query_command": list(self.query_command),
            "query_pattern": (
                list(self.query_pattern) if self.query_pattern is not None else None
            ),
            "set_commands": list(self.set_commands),
            "kind": self.kind.value,
            "default_value": self.default() if self.has_default else None,
            "has_default": self.has_default,
            "multiple": self.multiple,
        }
