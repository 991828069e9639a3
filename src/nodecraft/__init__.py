"""nodecraft - platform-aware CLI configuration for network nodes."""

__version__ = "0.1.0"
