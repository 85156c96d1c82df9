from __future__ import annotations

from typing import Optional, Protocol


class StorageSlot(Protocol):
    """Opaque key -> bytes store holding the registry snapshot.

    Implementations raise ``PersistenceError`` when the medium fails; a key that
    was never written reads as ``None``.
    """

    def read(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
