# src/database/cart_storage.py
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union
from ..config import Config

logger = logging.getLogger(__name__)

class CartStorage(Protocol):
    """Where the cart ledger keeps its entries between runs"""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def save(self, items: List[Dict[str, Any]]) -> None:
        ...

class MemoryCartStorage:
    """In-process storage, used by tests and throwaway carts"""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None):
        self.items = list(items or [])
        self.saves = 0

    def load(self) -> List[Dict[str, Any]]:
        return [dict(item) for item in self.items]

    def save(self, items: List[Dict[str, Any]]) -> None:
        self.items = [dict(item) for item in items]
        self.saves += 1

class JsonFileCartStorage:
    """Cart persisted to a JSON file.

    Every save writes the whole collection to a temp file next to the target
    and renames it over the old one, so an interrupted write leaves the
    previous cart intact.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or Config.CART_FILE)

    def load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cart file {self.path}: {e}")
            return []
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def save(self, items: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
