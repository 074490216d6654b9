import asyncio
import logging
from pathlib import Path

from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.store_errors import StoreUnavailable

logger = logging.getLogger(__name__)


class LocalBlobStore(IBlobStore):
    """Blob store backed by a directory on the local filesystem"""

    def __init__(self, root: str):
        self.root = Path(root).resolve()

    def _path(self, handle: str) -> Path:
        path = (self.root / handle).resolve()
        # Handles must stay inside the storage root
        if path == self.root or self.root not in path.parents:
            raise ValueError(f"Invalid blob handle: {handle}")
        return path

    async def put(self, handle: str, data: bytes) -> None:
        path = self._path(handle)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write blob {handle}: {exc}", store="blob") from exc

    async def get(self, handle: str) -> bytes:
        path = self._path(handle)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            # Subclass of OSError; a missing blob is not an outage
            raise
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read blob {handle}: {exc}", store="blob") from exc

    async def delete(self, handle: str) -> bool:
        path = self._path(handle)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.warning(f"Blob {handle} already absent")
            return False
        except OSError as exc:
            raise StoreUnavailable(f"Cannot delete blob {handle}: {exc}", store="blob") from exc
        return True

    async def exists(self, handle: str) -> bool:
        path = self._path(handle)
        return await asyncio.to_thread(path.is_file)
