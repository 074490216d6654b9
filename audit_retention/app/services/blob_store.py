from abc import ABC, abstractmethod


class IBlobStore(ABC):
    """
    Blob store interface - opaque handle to bytes.

    Implementations raise StoreUnavailable when the store cannot be reached.
    """

    @abstractmethod
    async def put(self, handle: str, data: bytes) -> None:
        pass

    @abstractmethod
    async def get(self, handle: str) -> bytes:
        """
        Raises:
            FileNotFoundError: no blob under this handle
        """
        pass

    @abstractmethod
    async def delete(self, handle: str) -> bool:
        """
        Delete a blob. A missing handle is not an error.

        Returns:
            True if a blob was removed, False if none existed
        """
        pass

    @abstractmethod
    async def exists(self, handle: str) -> bool:
        pass
