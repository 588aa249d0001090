"""Local filesystem storage for uploaded documents."""

import asyncio
import logging
from pathlib import Path

from study_assistant.core.exceptions import NotFoundError
from .base import FileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Reads files below a base directory. Absolute handles are used as-is."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.base_path / candidate

    async def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def read(self, path: str) -> bytes:
        resolved = self._resolve(path)
        if not resolved.is_file():
            raise NotFoundError("File", path)
        data = await asyncio.get_event_loop().run_in_executor(None, resolved.read_bytes)
        logger.debug(f"Read {len(data)} bytes from {resolved}")
        return data
