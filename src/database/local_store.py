# src/database/local_store.py
import asyncio
import json
import logging
import os
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
import aiofiles
import aiofiles.os
from ..config import Config
from ..utils.parsing import json_number

def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return json_number(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

def dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2, default=_default)

class LocalStore:
    """Key-value JSON file backing demo mode"""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or Config.STORE_FILE)
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    async def read_all(self) -> Dict[str, Any]:
        """Whole document; missing or unreadable files read as empty"""
        if not self.path.exists():
            return {}
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read() or "{}")
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    async def get(self, key: str, default: Any = None) -> Any:
        data = await self.read_all()
        return data.get(key, default)

    async def set(self, key: str, value: Any):
        """Replace one key; the file is swapped in atomically"""
        async with self._lock:
            data = await self.read_all()
            data[key] = value
            await self._write(data)

    async def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Read-modify-write one key under the store lock.

        `fn` gets the current value (or `default`) and returns the new one.
        If it raises, nothing is written.
        """
        async with self._lock:
            data = await self.read_all()
            value = fn(data.get(key, default))
            data[key] = value
            await self._write(data)
            return value

    async def _write(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(dumps(data))
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError:
            if tmp_path.exists():
                tmp_path.unlink()
            raise
