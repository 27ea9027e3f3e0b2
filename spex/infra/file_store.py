"""
File store infrastructure for spex.

Provides YAML file persistence with:
- Atomic writes (write to temp, then rename)
- Key order preserved as written
- Automatic parent directory creation
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from ..exit_codes import CatalogFormatError

logger = logging.getLogger(__name__)


class YamlStore:
    """
    YAML document persistence with atomic writes.

    Example:
        store = YamlStore(Path(".spex/spex.yml"))
        data = store.read()
        data["packages"].append("myorg/adr-node")
        store.write(data)
    """

    def __init__(self, path: Path):
        """
        Initialize YamlStore.

        Args:
            path: Path to the YAML file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def _write_atomic(self, data: Any) -> None:
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
                yaml.safe_dump(
                    data, f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )

            # Atomic rename
            os.replace(temp_path, self.path)
            logger.debug(f"Wrote {self.path}")

        except BaseException:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def read_raw(self) -> Any:
        """
        Parse the file as YAML.

        Raises:
            FileNotFoundError: If the file does not exist
            CatalogFormatError: If the content is not UTF-8 or not valid YAML
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f.read())
        except UnicodeDecodeError as e:
            raise CatalogFormatError(f"Invalid YAML in {self.path}: not UTF-8 ({e})")
        except yaml.YAMLError as e:
            raise CatalogFormatError(f"Invalid YAML in {self.path}: {e}")

    def read(self, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Read the document as a mapping.

        A missing or empty file yields ``default`` (an empty dict unless
        given).

        Raises:
            CatalogFormatError: If the top level is not a mapping
        """
        if not self.exists():
            return dict(default or {})
        document = self.read_raw()
        if document is None:
            return dict(default or {})
        if not isinstance(document, dict):
            raise CatalogFormatError(
                f"Expected a YAML mapping in {self.path}, got {type(document).__name__}"
            )
        return document

    def write(self, data: Any) -> None:
        """
        Write the whole document.

        Args:
            data: YAML-serializable document
        """
        self._write_atomic(data)
