from findx.services.storage.base import BlobStorage, StoredBlob
from findx.services.storage.cloudinary import CloudinaryStorage, get_blob_storage

__all__ = ["BlobStorage", "StoredBlob", "CloudinaryStorage", "get_blob_storage"]
