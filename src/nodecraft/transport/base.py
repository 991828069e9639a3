"""Base transport abstraction for talking to a node's CLI."""
from abc import ABC, abstractmethod
from typing import Sequence

# Substrings the CLI uses when it rejects a command outright
SYNTAX_ERROR_MARKERS = ("Syntax error", "Invalid command")


class CliError(Exception):
    """Raised when the device rejects a command."""

    def __init__(self, command: str, clierror: str):
        self.command = command
        self.clierror = clierror
        super().__init__(f"CLI error for '{command}': {clierror.strip()}")

    @property
    def is_syntax_error(self) -> bool:
        """True for syntax rejections, e.g. a command of a disabled feature."""
        return any(marker in self.clierror for marker in SYNTAX_ERROR_MARKERS)


class Transport(ABC):
    """Abstract base class for node transports.

    A transport knows the node's platform identifier and can run show
    commands and push configuration. It does not interpret output.
    """

    def __init__(self, name: str, platform: str):
        self.name = name
        self.platform = platform
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    # Connection management
    def connect(self) -> None:
        """Open the session; transports without sessions need not override."""
        self._connected = True

    def disconnect(self) -> None:
        """Close the session."""
        self._connected = False

    # Command execution
    @abstractmethod
    def query(self, command: str) -> str:
        """Run a show command and return its raw text output.

        Raises:
            CliError: If the device rejects the command
        """

    @abstractmethod
    def send_config(self, commands: Sequence[str]) -> bool:
        """Apply configuration commands in order.

        Returns:
            True if every command was accepted

        Raises:
            CliError: If the device rejects a command
        """

    # Context manager support
    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
