# tools/storage.py
import asyncio
import json
import logging
import re
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def safe_name(value: str) -> str:
    """Replace anything but ASCII letters and digits with underscores."""
    return re.sub(r"[^a-zA-Z0-9]", "_", value)


def timestamp_ms() -> int:
    return int(time.time() * 1000)


class PlanStorage:
    """
    JSON artifact store for tool outputs, rooted at an explicitly configured
    directory. The directory is created on first write.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _write(self, path: Path, payload: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")

    async def save_json(self, filename: str, payload: Any) -> Path:
        path = self.root / filename
        await asyncio.to_thread(self._write, path, payload)
        logger.info("Artifact saved", extra={"path": str(path)})
        return path
