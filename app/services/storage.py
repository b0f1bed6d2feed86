"""Object storage for uploaded reports (local directory, one file per object path)."""
import logging
import time
from pathlib import Path

from app.services.errors import ContentNotFound

logger = logging.getLogger(__name__)


def object_path(user_id: str, file_name: str) -> str:
    """<user_id>/<epoch_ms>-<file name>; directories in the client's file name are dropped."""
    name = Path(file_name or "upload").name or "upload"
    return f"{user_id}/{int(time.time() * 1000)}-{name}"


class LocalStorage:
    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target == self.root or self.root not in target.parents:
            raise ContentNotFound()
        return target

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(self, path: str, content: bytes) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return path

    def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except OSError as e:
            logger.warning("Storage download failed for %s: %s", path, e)
            raise ContentNotFound() from e

    def delete(self, path: str) -> bool:
        try:
            target = self._resolve(path)
            target.unlink()
        except (ContentNotFound, OSError) as e:
            logger.warning("Storage delete failed for %s: %s", path, e)
            return False
        return True
