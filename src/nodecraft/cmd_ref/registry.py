"""Process-wide registry of loaded feature specs.

The registry is an explicit object: build it once at startup and pass it to
every Node. Loading is serialized by a lock (single writer); FeatureSpec
objects are immutable, so lookups and resolution need no locking.
"""
import logging
import threading
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from ..utils.logging_config import timed_section_sync
from .errors import SpecLoadError, UnknownFeatureError
from .loader import load_feature, load_feature_file
from .resolver import resolve
from .schema import FeatureSpec, ResolvedRule

if TYPE_CHECKING:
    from ..config.settings import Settings

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".yaml", ".yml")


def packaged_data():
    """Directory holding the bundled feature documents."""
    return resources.files("nodecraft.cmd_ref") / "data"


class CommandRegistry:
    """Holds one FeatureSpec per feature name."""

    def __init__(self, features: Optional[Iterable[FeatureSpec]] = None):
        self._features: dict[str, FeatureSpec] = {}
        self._lock = threading.Lock()
        for spec in features or ():
            self.add(spec)

    @classmethod
    def default(cls) -> "CommandRegistry":
        """Registry with the bundled feature documents."""
        registry = cls()
        registry.load_directory(packaged_data())
        return registry

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CommandRegistry":
        """Bundled documents plus every directory in settings.cmd_ref_paths.

        Later directories replace features of the same name.
        """
        registry = cls.default()
        for path in settings.cmd_ref_paths:
            registry.load_directory(path)
        return registry

    # === Loading (single writer) ===

    def add(self, spec: FeatureSpec) -> None:
        """Register a loaded feature, replacing any previous one."""
        with self._lock:
            if spec.name in self._features:
                logger.warning(f"Replacing command reference for feature '{spec.name}'")
            self._features[spec.name] = spec

    def load_document(self, name: str, document: Union[str, dict]) -> FeatureSpec:
        """Load a feature from YAML text or a parsed mapping."""
        spec = load_feature(name, document)
        self.add(spec)
        return spec

    def load_file(self, path: Union[str, Path]) -> FeatureSpec:
        """Load one feature document; the feature is named after the file stem."""
        spec = load_feature_file(path)
        self.add(spec)
        return spec

    def load_directory(self, directory: Any) -> list[FeatureSpec]:
        """
        Load every *.yaml document in a directory.

        Args:
            directory: Path, string, or importlib.resources Traversable

        Returns:
            Loaded specs, in file name order
        """
        if isinstance(directory, str):
            directory = Path(directory)
        if not directory.is_dir():
            raise SpecLoadError(str(directory), "command reference directory not found")

        entries = sorted(
            (e for e in directory.iterdir() if e.name.endswith(DOCUMENT_SUFFIXES)),
            key=lambda e: e.name,
        )

        specs = []
        with timed_section_sync("cmd_ref_load", directory=str(directory), files=len(entries)):
            for entry in entries:
                name = entry.name.rsplit(".", 1)[0]
                specs.append(self.load_document(name, entry.read_text(encoding="utf-8")))

        logger.info(f"Loaded {len(specs)} command reference documents from {directory}")
        return specs

    # === Lookup (lock-free) ===

    def __contains__(self, feature: str) -> bool:
        return feature in self._features

    def features(self) -> list[str]:
        """Names of all loaded features."""
        return sorted(self._features)

    def feature(self, name: str) -> FeatureSpec:
        """
        Raises:
            UnknownFeatureError: If no document was loaded for name
        """
        try:
            return self._features[name]
        except KeyError:
            raise UnknownFeatureError(name) from None

    def resolve(self, feature: str, prop: str, platform: str) -> ResolvedRule:
        """Resolve feature.prop for a platform (see resolver.resolve)."""
        return resolve(self.feature(feature), prop, platform)
