"""
Output writers for rendered artifacts.

Paths handed to a writer are relative to the output root and always use
forward slashes; writers resolve them for their own storage.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List

from .exceptions import OutputWriteError

logger = logging.getLogger(__name__)


class FileSystemOutput:
    """
    Writes artifacts below an output folder.

    Parent folders are created as needed, existing files are overwritten,
    and text is written as UTF-8 exactly as rendered (no newline translation).
    """

    def __init__(self, output_folder: str):
        self.output_folder = Path(output_folder)

    def resolve(self, path: str) -> Path:
        return self.output_folder.joinpath(*path.split("/"))

    def write(self, path: str, text: str) -> None:
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise OutputWriteError(f"Could not write {target}: {e}", path=str(target)) from e
        logger.debug(f"Generated file: {target}")


class InMemoryOutput:
    """Collects artifacts in memory (dry runs and tests)."""

    def __init__(self):
        self.files: Dict[str, str] = {}
        self._lock = threading.Lock()

    def write(self, path: str, text: str) -> None:
        with self._lock:
            self.files[path] = text

    @property
    def paths(self) -> List[str]:
        return sorted(self.files)
