"""Runtime settings.

Environment variables:
- NODECRAFT_CMD_REF_PATH: Extra command reference directories, separated
  by os.pathsep; documents there replace bundled features of the same name
- NODECRAFT_PLATFORM: Platform identifier to use instead of the one the
  transport reports
- NODECRAFT_TRANSPORT_RETRIES: Attempts per transport call (default: 3)
- NODECRAFT_RETRY_MIN_WAIT / NODECRAFT_RETRY_MAX_WAIT: Backoff bounds in
  seconds (default: 1 / 10)
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DEFAULT_RETRY_MIN_WAIT = 1.0
DEFAULT_RETRY_MAX_WAIT = 10.0


def _or_default(value, default):
    return default if value is None else value


@dataclass
class Settings:
    """nodecraft settings."""
    cmd_ref_paths: list[Path] = field(default_factory=list)
    platform: Optional[str] = None
    retries: int = DEFAULT_RETRIES
    retry_min_wait: float = DEFAULT_RETRY_MIN_WAIT
    retry_max_wait: float = DEFAULT_RETRY_MAX_WAIT

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        paths_str = os.environ.get("NODECRAFT_CMD_REF_PATH", "")
        cmd_ref_paths = [Path(p) for p in paths_str.split(os.pathsep) if p.strip()]

        return cls(
            cmd_ref_paths=cmd_ref_paths,
            platform=os.environ.get("NODECRAFT_PLATFORM") or None,
            retries=int(os.environ.get("NODECRAFT_TRANSPORT_RETRIES", str(DEFAULT_RETRIES))),
            retry_min_wait=float(
                os.environ.get("NODECRAFT_RETRY_MIN_WAIT", str(DEFAULT_RETRY_MIN_WAIT))
            ),
            retry_max_wait=float(
                os.environ.get("NODECRAFT_RETRY_MAX_WAIT", str(DEFAULT_RETRY_MAX_WAIT))
            ),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Settings":
        """Load settings from a YAML file.

        ```yaml
        cmd_ref_paths:
          - /etc/nodecraft/cmd_ref
        platform: N7K-C7010
        transport:
          retries: 5
          min_wait: 0.5
          max_wait: 5
        ```

        Relative cmd_ref_paths are taken relative to the file.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Settings file not found: {path}")
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # Keys present with no value mean the default
        transport = data.get("transport") or {}
        cmd_ref_paths = [
            p if p.is_absolute() else path.parent / p
            for p in (Path(str(entry)) for entry in data.get("cmd_ref_paths") or [])
        ]

        return cls(
            cmd_ref_paths=cmd_ref_paths,
            platform=data.get("platform"),
            retries=int(_or_default(transport.get("retries"), DEFAULT_RETRIES)),
            retry_min_wait=float(_or_default(transport.get("min_wait"), DEFAULT_RETRY_MIN_WAIT)),
            retry_max_wait=float(_or_default(transport.get("max_wait"), DEFAULT_RETRY_MAX_WAIT)),
        )
