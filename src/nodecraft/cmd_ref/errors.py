"""Error taxonomy for the command reference.

SpecLoadError, UnknownFeatureError, UnknownPropertyError and
MissingArgumentError point at a defect in a YAML document or in the
calling code and are never retried.

PlatformExcludedError is expected: callers catch it to treat a feature as
absent on the current platform.

ValueUnavailableError is raised only when a query found nothing and the
property declares no default value to fall back on.
"""
from typing import Optional


class CmdRefError(Exception):
    """Base class for all command reference errors."""


class SpecLoadError(CmdRefError):
    """Raised when a command reference document is malformed."""

    def __init__(self, feature: str, message: str, prop: Optional[str] = None):
        self.feature = feature
        self.prop = prop
        self.message = message
        where = f"{feature}.{prop}" if prop else feature
        super().__init__(f"Invalid command reference [{where}]: {message}")


class UnknownFeatureError(CmdRefError):
    """Raised when no document has been loaded for a feature."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Unknown feature: {feature}")


class UnknownPropertyError(CmdRefError):
    """Raised when a property is not defined for a feature."""

    def __init__(self, feature: str, prop: str):
        self.feature = feature
        self.prop = prop
        super().__init__(f"Unknown property '{prop}' for feature '{feature}'")


class PlatformExcludedError(CmdRefError):
    """Raised when a feature does not exist on the current platform."""

    def __init__(self, feature: str, platform: str, pattern: str = ""):
        self.feature = feature
        self.platform = platform
        self.pattern = pattern
        super().__init__(
            f"Feature '{feature}' is unsupported on platform '{platform}'"
            + (f" (excluded by {pattern})" if pattern else "")
        )


class MissingArgumentError(CmdRefError):
    """Raised when a template placeholder has no value."""

    def __init__(self, placeholder: str, template: str):
        self.placeholder = placeholder
        self.template = template
        super().__init__(
            f"Missing argument '{placeholder}' for template: {template}"
        )


class ValueUnavailableError(CmdRefError):
    """Raised when a query found no value and no default is declared."""

    def __init__(self, feature: str, prop: str, reason: str = "no match"):
        self.feature = feature
        self.prop = prop
        self.reason = reason
        super().__init__(f"Value unavailable for {feature}.{prop}: {reason}")


class UnsupportedOperationError(CmdRefError):
    """Raised when a property has no command for the requested operation."""

    def __init__(self, feature: str, prop: str, operation: str, platform: str):
        self.feature = feature
        self.prop = prop
        self.operation = operation
        self.platform = platform
        super().__init__(
            f"{feature}.{prop} does not support '{operation}' on platform '{platform}'"
        )
