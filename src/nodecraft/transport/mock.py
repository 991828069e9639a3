"""
In memory transport.

Used by tests and local simulations. Show commands return canned output
keyed by the exact command text; configuration pushes are recorded.

Features
- Canned output per show command (missing commands return "")
- Rejection of chosen commands with a CLI error message, to simulate a
  disabled feature answering "Syntax error"
- Full log of queries and configuration batches
"""
from typing import Optional, Sequence

from .base import CliError, Transport

DEFAULT_REJECTION = "% Invalid command at '^' marker.\nSyntax error while parsing"


class InMemoryTransport(Transport):
    """
    In memory transport.

    outputs
    Mapping of show command to the text it returns.

    rejected
    Mapping of command (show or config) to the CLI error it raises.
    """

    def __init__(
        self,
        platform: str = "N9K-C9396PX",
        name: str = "mock",
        outputs: Optional[dict[str, str]] = None,
        rejected: Optional[dict[str, str]] = None,
    ):
        super().__init__(name, platform)
        self.outputs: dict[str, str] = dict(outputs or {})
        self.rejected: dict[str, str] = dict(rejected or {})
        self.queries: list[str] = []
        self.config_log: list[list[str]] = []

    def set_output(self, command: str, text: str) -> None:
        """Make command return text."""
        self.outputs[command] = text

    def reject(self, command: str, message: str = DEFAULT_REJECTION) -> None:
        """Make command fail with a CLI error."""
        self.rejected[command] = message

    @property
    def sent(self) -> list[str]:
        """All configuration commands pushed so far, flattened."""
        return [cmd for batch in self.config_log for cmd in batch]

    def query(self, command: str) -> str:
        self.queries.append(command)
        if command in self.rejected:
            raise CliError(command, self.rejected[command])
        return self.outputs.get(command, "")

    def send_config(self, commands: Sequence[str]) -> bool:
        batch = list(commands)
        self.config_log.append(batch)
        for command in batch:
            if command in self.rejected:
                raise CliError(command, self.rejected[command])
        return True
