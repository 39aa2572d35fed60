from abc import ABC, abstractmethod


class BlobStore(ABC):
    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def presign_get(self, key: str, expires_in: int) -> str: ...

    @abstractmethod
    def list_keys(self, prefix: str) -> list[str]: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def delete_keys(self, keys: list[str]) -> list[str]:
        """Delete keys, returning the ones that could not be deleted."""
