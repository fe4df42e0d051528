"""
File store infrastructure for repofarm.

Provides YAML persistence for the configuration document with:
- Duplicate mapping keys rejected on read
- Atomic writes (write to temp, then rename)
- Automatic parent directory creation
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict
import logging

import yaml

from ..exit_codes import ConfigError, DuplicateKeyError

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses a key appearing twice in one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError as e:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found unhashable key ({e})", key_node.start_mark)
            if duplicate:
                mark = key_node.start_mark
                raise DuplicateKeyError(str(key), f"line {mark.line + 1}, column {mark.column + 1}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class YamlFileStore:
    """
    YAML document persistence with atomic writes.

    Example:
        store = YamlFileStore(Path("~/.config/repofarm/config.yaml"))
        document = store.read()
        store.write(document)
    """

    def __init__(self, path: Path):
        """
        Initialize YamlFileStore.

        Args:
            path: Path to the YAML file
        """
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Dict[str, Any]:
        """
        Read the whole document.

        Returns:
            Parsed mapping (empty for an empty file)

        Raises:
            ConfigError: Missing, unreadable or malformed file
            DuplicateKeyError: A mapping declares the same key twice
        """
        with self._lock:
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = yaml.load(f, Loader=UniqueKeyLoader)
            except FileNotFoundError:
                raise ConfigError(f"Configuration file not found: {self.path}")
            except OSError as e:
                raise ConfigError(f"Cannot read {self.path}: {e}")
            except yaml.YAMLError as e:
                raise ConfigError(f"Malformed YAML in {self.path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} must contain a mapping at the top level")
        return data

    def write(self, data: Dict[str, Any]) -> None:
        """
        Write the whole document.

        Args:
            data: Mapping to write
        """
        with self._lock:
            self._write_atomic(data)

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file in same directory
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

            # Atomic rename
            os.replace(temp_path, self.path)
            logger.debug(f"Wrote {self.path}")

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
