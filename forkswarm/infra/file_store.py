"""
File store infrastructure for forkswarm.

Provides JSON document persistence with:
- Atomic writes (write to temp, then rename)
- Automatic parent directory creation
- Tolerant reads (missing or corrupt file reads as None)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    Single JSON document on disk.

    Example:
        store = FileStore(Path(".swarm/manifest.json"))
        previous = store.read()
        store.write_text(manifest.to_json())
    """

    def __init__(self, path: Path):
        """
        Initialize FileStore.

        Args:
            path: Path to JSON file
        """
        self.path = Path(path).expanduser()

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Read the stored document.

        Returns:
            Parsed JSON object, or None if missing or unreadable
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return None

        return data if isinstance(data, dict) else None

    def write_text(self, content: str) -> None:
        """
        Write content atomically using temp file and rename.

        Raises:
            OSError: If the directory or file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file in same directory
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)

            # Atomic rename
            os.replace(temp_path, self.path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

