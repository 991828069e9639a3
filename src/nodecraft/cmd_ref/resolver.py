"""Rule resolver: cascades layers into one effective rule.

Precedence, least to most specific:

1. ``_template`` base fields
2. ``_template`` platform variant (first match)
3. property base fields
4. property platform variant (first match)

Each layer overrides fields one by one. ``config_set_append`` and
``config_get_token_append`` instead extend whatever list the earlier layers
produced, which is how a property adds a step to a shared sequence.
"""
import logging
from typing import Optional

from .errors import PlatformExcludedError, UnknownPropertyError
from .platform import match_variant
from .schema import (
    FeatureSpec,
    LAYER_FIELDS,
    PlatformVariant,
    PropertySpec,
    ResolvedRule,
    RuleLayer,
    UNSET,
    ValueKind,
    infer_kind,
)

logger = logging.getLogger(__name__)

# (target field, append field)
APPEND_FIELDS = (
    ("config_set", "config_set_append"),
    ("config_get_token", "config_get_token_append"),
)
_APPEND_NAMES = {append for _, append in APPEND_FIELDS}


def merge_layers(base: RuleLayer, overlay: RuleLayer) -> RuleLayer:
    """
    Overlay one layer onto another.

    Fields set in overlay replace those in base; append fields are
    concatenated after the (possibly replaced) target list. The result
    carries no pending append fields.
    """
    merged = {}
    for name in LAYER_FIELDS:
        if name in _APPEND_NAMES:
            continue
        value = getattr(overlay, name)
        merged[name] = value if value is not UNSET else getattr(base, name)

    for target, append in APPEND_FIELDS:
        extra = getattr(overlay, append)
        if extra is UNSET:
            continue
        current = merged[target]
        merged[target] = (() if current is UNSET else current) + extra

    return RuleLayer(**merged)


def select_variant(spec: PropertySpec, platform: str) -> Optional[PlatformVariant]:
    """Return the first variant whose pattern matches platform."""
    index = match_variant(platform, [v.pattern for v in spec.variants])
    if index is None:
        return None
    return spec.variants[index]


def check_excluded(spec: FeatureSpec, platform: str) -> None:
    """
    Raises:
        PlatformExcludedError: If the feature is excluded on platform
    """
    index = match_variant(platform, [p.pattern for p in spec.exclude])
    if index is not None:
        raise PlatformExcludedError(spec.name, platform, spec.exclude[index].source)


def resolve(spec: FeatureSpec, prop: str, platform: str) -> ResolvedRule:
    """
    Compose the effective rule for a property on a platform.

    Args:
        spec: Loaded feature
        prop: Property name
        platform: Platform identifier, e.g. "N7K-C7010"

    Returns:
        ResolvedRule (not cached; resolve again per call)

    Raises:
        PlatformExcludedError: If the whole feature is excluded on platform
        UnknownPropertyError: If prop is not defined for the feature
    """
    check_excluded(spec, platform)

    prop_spec = spec.properties.get(prop)
    if prop_spec is None:
        raise UnknownPropertyError(spec.name, prop)

    layer = RuleLayer()
    variant_source = None
    for source_spec in (spec.template, prop_spec):
        layer = merge_layers(layer, source_spec.base)
        variant = select_variant(source_spec, platform)
        if variant is not None:
            layer = merge_layers(layer, variant.layer)
            variant_source = variant.source

    rule = _to_rule(spec.name, prop, platform, variant_source, layer)
    logger.debug(
        f"Resolved {spec.name}.{prop} on {platform!r} "
        f"(variant {variant_source or 'base'})"
    )
    return rule


def _to_rule(
    feature: str,
    prop: str,
    platform: str,
    variant: Optional[str],
    layer: RuleLayer
) -> ResolvedRule:
    """Turn a fully merged layer into a ResolvedRule."""
    tokens = layer.config_get_token
    query_pattern = tuple(tokens) if tokens is not UNSET and tokens else None

    if layer.kind is not UNSET:
        kind = layer.kind
    elif layer.default_value is not UNSET and layer.default_value is not None:
        kind = infer_kind(layer.default_value)
    else:
        kind = ValueKind.STRING

    return ResolvedRule(
        feature=feature,
        name=prop,
        platform=platform,
        variant=variant,
        query_command=layer.config_get or (),
        query_pattern=query_pattern,
        set_commands=layer.config_set or (),
        kind=kind,
        default_value=layer.default_value,
        multiple=bool(layer.multiple),
    )
