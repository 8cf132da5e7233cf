"""
Image storage on Azure Blob Storage.

A bucket maps to a blob container and a folder to a name prefix inside it,
so `images/packages/123.jpg` is blob `packages/123.jpg` in container `images`.
"""
import logging
from typing import List, Optional

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings

from .config import Settings

logger = logging.getLogger(__name__)


class StorageNotConfigured(RuntimeError):
    pass


class BlobStorage:
    def __init__(self, settings: Settings):
        self.client: Optional[BlobServiceClient] = None
        self._ready_containers = set()

        if settings.AZURE_STORAGE_CONNECTION_STRING:
            self.client = BlobServiceClient.from_connection_string(
                settings.AZURE_STORAGE_CONNECTION_STRING
            )
        else:
            logger.warning("AZURE_STORAGE_CONNECTION_STRING is not set, uploads disabled")

    def _container(self, bucket: str) -> ContainerClient:
        if self.client is None:
            raise StorageNotConfigured("Storage is not configured")

        container = self.client.get_container_client(bucket)
        if bucket not in self._ready_containers:
            try:
                container.create_container(public_access="blob")
                logger.info("Created storage container %s", bucket)
            except ResourceExistsError:
                pass
            self._ready_containers.add(bucket)
        return container

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> dict:
        """Store bytes at path and return {url, path}"""
        blob = self._container(bucket).get_blob_client(path)
        blob.upload_blob(
            data,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type or "image/jpeg"),
        )
        logger.info("Uploaded %s/%s (%d bytes)", bucket, path, len(data))
        return {"url": blob.url, "path": path}

    def list(self, bucket: str, folder: str = "") -> List[dict]:
        """Files directly inside a folder, sub-folders excluded"""
        container = self._container(bucket)
        prefix = f"{folder.strip('/')}/" if folder else ""

        files = []
        for props in container.list_blobs(name_starts_with=prefix):
            name = props.name[len(prefix):]
            if not name or "/" in name:
                continue
            files.append(
                {
                    "name": name,
                    "url": container.get_blob_client(props.name).url,
                    "size": props.size or 0,
                    "updated": props.last_modified,
                }
            )
        return files

    def delete(self, bucket: str, path: str) -> None:
        self._container(bucket).delete_blob(path)
        logger.info("Deleted %s/%s", bucket, path)
