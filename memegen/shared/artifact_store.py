"""
Content-addressed storage for rendered caption images.
"""
import os
import tempfile
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from memegen.shared.config import ServiceSettings, get_settings
from memegen.shared.fingerprint import is_fingerprint
from memegen.shared.logging_utils import info as log_info, warning as log_warning
from memegen.specs.common.errors import ConfigurationError, StoreWriteFailure

PNG_CONTENT_TYPE = "image/png"


def _check_key(key: str) -> None:
    if not is_fingerprint(key):
        raise ValueError(f"Invalid artifact key: {key!r}")


class ArtifactStore(ABC):
    """Maps a fingerprint to previously rendered image bytes."""

    @abstractmethod
    def exists_and_read(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None on a miss."""

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Persist bytes under key. Raises StoreWriteFailure on failure."""


class FileArtifactStore(ArtifactStore):
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        _check_key(key)
        return self.directory / key

    def exists_and_read(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            log_warning(key, "store:read_failed", backend="file", error=str(exc))
            return None

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write aside then rename so readers never observe a partial file.
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", dir=str(self.directory))
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StoreWriteFailure(key, details={"backend": "file", "error": str(exc)}) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass


class BlobArtifactStore(ArtifactStore):
    """Azure Blob Storage backing; blob name is the fingerprint."""

    def __init__(self, container_client: Any) -> None:
        self._container = container_client

    @classmethod
    def from_connection_string(cls, conn: Optional[str], container: str) -> "BlobArtifactStore":
        if not conn:
            raise ConfigurationError("MEMEGEN_BLOB_CONNECTION_STRING is required for the blob store")
        service = BlobServiceClient.from_connection_string(conn)
        container_client = service.get_container_client(container)
        try:
            container_client.create_container()
            log_info(None, "store:container_created", container=container)
        except ResourceExistsError:
            pass
        return cls(container_client)

    def exists_and_read(self, key: str) -> Optional[bytes]:
        _check_key(key)
        blob = self._container.get_blob_client(key)
        try:
            return blob.download_blob().readall()
        except ResourceNotFoundError:
            return None
        except AzureError as exc:
            log_warning(key, "store:read_failed", backend="blob", error=str(exc))
            return None

    def write(self, key: str, data: bytes) -> None:
        _check_key(key)
        blob = self._container.get_blob_client(key)
        try:
            blob.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=PNG_CONTENT_TYPE),
            )
        except AzureError as exc:
            raise StoreWriteFailure(key, details={"backend": "blob", "error": str(exc)}) from exc


def build_artifact_store(settings: ServiceSettings) -> ArtifactStore:
    if settings.store_backend == "blob":
        return BlobArtifactStore.from_connection_string(
            settings.blob_connection_string, settings.blob_container
        )
    return FileArtifactStore(Path(settings.cache_dir))


@lru_cache(maxsize=1)
def get_artifact_store() -> ArtifactStore:
    return build_artifact_store(get_settings())
