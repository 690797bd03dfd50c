from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class StoredBlob:
    url: str
    storage_id: str


class BlobStorage(ABC):
    """Base class for external blob stores holding uploaded documents"""

    provider: str = "unknown"

    @abstractmethod
    async def upload(self, data: bytes, filename: str, kind: str = "raw") -> StoredBlob:
        """Store data and return where it landed. Raises ExternalServiceError."""
        pass

    @abstractmethod
    async def delete(self, storage_id: str, kind: str = "raw") -> bool:
        """Delete a stored blob. Returns False if the store did not remove it."""
        pass

    @abstractmethod
    def storage_id_from_url(self, url: str) -> Optional[str]:
        """Map a public URL back to its storage id, or None for foreign URLs"""
        pass
