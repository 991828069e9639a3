"""Loader for command reference documents.

Converts one YAML document per feature into an immutable FeatureSpec.
All structural problems are reported here, at load time, as SpecLoadError:

    # vni
    ---
    _exclude: [/N5K/, /N6K/]
    _template:
      config_get: 'show running vlan'
    feature:
      config_get: 'show running | i ^feature'
      /N7/:
        config_get_token: '/^feature vni$/'
        config_set: 'feature vni'
"""
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Union

import yaml

from .errors import SpecLoadError
from .platform import is_platform_key, parse_pattern, split_regex_literal
from .schema import (
    FeatureSpec,
    KIND_NAMES,
    LAYER_FIELDS,
    PlatformPattern,
    PlatformVariant,
    PropertySpec,
    RuleLayer,
)
from .synthesizer import OPTIONAL_PREFIX, PLACEHOLDER, PRINTF_SLOT

logger = logging.getLogger(__name__)

TEMPLATE_KEY = "_template"
EXCLUDE_KEY = "_exclude"

# Fields holding an ordered list of strings
LIST_FIELDS = (
    "config_get",
    "config_get_token",
    "config_get_token_append",
    "config_set",
    "config_set_append",
)
TOKEN_FIELDS = ("config_get_token", "config_get_token_append")
MERGE_TAG = "tag:yaml.org,2002:merge"


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys.

    Keys brought in by a ``<<`` merge may be overridden; only keys written
    in the mapping itself must be unique.
    """

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # Unhashable keys are reported by the base implementation
                break
            if duplicate:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key {key!r}", key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def read_document(text: str, feature: str = "<document>") -> Any:
    """Parse YAML text, rejecting duplicate keys."""
    try:
        return yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise SpecLoadError(feature, f"YAML error: {e}") from e


class FeatureLoader:
    """Build FeatureSpec objects from parsed documents."""

    def load(self, name: str, document: Any) -> FeatureSpec:
        """
        Load a parsed document into a FeatureSpec.

        Args:
            name: Feature name (usually the document's file stem)
            document: Parsed YAML mapping

        Returns:
            Immutable FeatureSpec

        Raises:
            SpecLoadError: If the document is malformed
        """
        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise SpecLoadError(
                name, f"document must be a mapping, got {type(document).__name__}"
            )

        exclude = self._parse_exclude(name, document.get(EXCLUDE_KEY))

        template = PropertySpec(name=TEMPLATE_KEY)
        if TEMPLATE_KEY in document:
            template = self._parse_property(name, TEMPLATE_KEY, document[TEMPLATE_KEY])

        properties: dict[str, PropertySpec] = {}
        for key, value in document.items():
            if key in (TEMPLATE_KEY, EXCLUDE_KEY):
                continue
            if not isinstance(key, str) or not key:
                raise SpecLoadError(name, f"invalid property name: {key!r}")
            if is_platform_key(key):
                raise SpecLoadError(
                    name, f"platform block {key} must be nested under a property"
                )
            if key.startswith("_"):
                raise SpecLoadError(name, f"unknown reserved key: {key}")
            properties[key] = self._parse_property(name, key, value)

        logger.debug(
            f"Loaded feature {name}: {len(properties)} properties, "
            f"{len(exclude)} exclusions"
        )
        return FeatureSpec(
            name=name,
            properties=MappingProxyType(properties),
            template=template,
            exclude=exclude,
        )

    def _parse_exclude(self, feature: str, value: Any) -> tuple[PlatformPattern, ...]:
        """Parse the _exclude list of platform patterns."""
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise SpecLoadError(feature, f"{EXCLUDE_KEY} must be a list of /regex/ patterns")

        patterns = []
        for item in value:
            if not is_platform_key(item):
                raise SpecLoadError(feature, f"{EXCLUDE_KEY} entry is not a /regex/: {item!r}")
            patterns.append(PlatformPattern(item, self._compile_key(feature, None, item)))
        return tuple(patterns)

    def _parse_property(self, feature: str, prop: str, value: Any) -> PropertySpec:
        """Parse one property block: base fields plus platform variants."""
        if value is None:
            return PropertySpec(name=prop)
        if not isinstance(value, dict):
            raise SpecLoadError(
                feature, f"must be a mapping, got {type(value).__name__}", prop
            )

        base_fields = {}
        variants = []
        for key, field_value in value.items():
            if is_platform_key(key):
                variants.append(PlatformVariant(
                    source=key,
                    pattern=self._compile_key(feature, prop, key),
                    layer=self._parse_variant(feature, prop, key, field_value),
                ))
            else:
                base_fields[key] = field_value

        return PropertySpec(
            name=prop,
            base=self._parse_layer(feature, prop, base_fields),
            variants=tuple(variants),
        )

    def _parse_variant(self, feature: str, prop: str, key: str, value: Any) -> RuleLayer:
        """Parse a /regex/-keyed override block."""
        if value is None:
            return RuleLayer()
        if not isinstance(value, dict):
            raise SpecLoadError(feature, f"platform block {key} must be a mapping", prop)
        for inner in value:
            if is_platform_key(inner):
                raise SpecLoadError(
                    feature, f"platform block {inner} nested inside {key}", prop
                )
        return self._parse_layer(feature, prop, value)

    def _parse_layer(self, feature: str, prop: str, values: dict) -> RuleLayer:
        """Validate and normalize the fields of one layer."""
        parsed: dict[str, Any] = {}

        for key, value in values.items():
            if key not in LAYER_FIELDS:
                raise SpecLoadError(feature, f"unknown field: {key}", prop)

            if key in LIST_FIELDS:
                parsed[key] = self._parse_string_list(feature, prop, key, value)
                if key in TOKEN_FIELDS:
                    for token in parsed[key]:
                        self._check_token(feature, prop, token)
            elif key == "kind":
                if value not in KIND_NAMES:
                    raise SpecLoadError(
                        feature,
                        f"unknown kind {value!r}, expected one of {sorted(KIND_NAMES)}",
                        prop,
                    )
                parsed[key] = KIND_NAMES[value]
            elif key == "multiple":
                if value is None:
                    value = True
                if not isinstance(value, bool):
                    raise SpecLoadError(feature, "multiple must be empty or a boolean", prop)
                parsed[key] = value
            else:
                parsed[key] = self._freeze(value)

        return RuleLayer(**parsed)

    def _parse_string_list(
        self,
        feature: str,
        prop: str,
        key: str,
        value: Any
    ) -> tuple[str, ...]:
        """Normalize a string or list of strings to a tuple."""
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return tuple(value)
        raise SpecLoadError(feature, f"{key} must be a string or a list of strings", prop)

    def _check_token(self, feature: str, prop: str, token: str) -> None:
        """Make sure a token compiles once its placeholders are filled."""
        if token.startswith(OPTIONAL_PREFIX):
            token = token[len(OPTIONAL_PREFIX):]
        if not is_platform_key(token):
            # Plain strings are matched literally
            return
        sample = PRINTF_SLOT.sub("0", PLACEHOLDER.sub("0", token))
        try:
            body, flags = split_regex_literal(sample)
            re.compile(body, flags)
        except re.error as e:
            raise SpecLoadError(feature, f"invalid pattern {token}: {e}", prop) from e

    def _compile_key(self, feature: str, prop: Optional[str], key: str) -> re.Pattern:
        try:
            return parse_pattern(key)
        except re.error as e:
            raise SpecLoadError(feature, f"invalid platform pattern {key}: {e}", prop) from e

    def _freeze(self, value: Any) -> Any:
        """Make list defaults immutable so specs can be shared."""
        if isinstance(value, list):
            return tuple(self._freeze(v) for v in value)
        return value


def load_feature(name: str, document: Union[str, dict, None]) -> FeatureSpec:
    """Load a feature from YAML text or an already-parsed mapping."""
    if isinstance(document, str):
        document = read_document(document, name)
    return FeatureLoader().load(name, document)


def load_feature_file(path: Union[str, Path], name: Optional[str] = None) -> FeatureSpec:
    """Load a feature document from a file; the name defaults to the file stem."""
    path = Path(path)
    name = name or path.stem
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(name, f"cannot read {path}: {e}") from e
    return load_feature(name, text)
