"""Photo storage - local storage with optional Azure Blob Storage"""

from datetime import datetime
from typing import Optional
from pathlib import Path
import logging

from src.config import settings

logger = logging.getLogger(__name__)


class FileHandler:
    """Stores uploaded binaries and returns their public URL"""

    def __init__(
        self,
        storage_path: Optional[str] = None,
        use_azure: Optional[bool] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Initialize file handler

        Args:
            storage_path: Local storage path (defaults to settings.LOCAL_STORAGE_PATH)
            use_azure: Whether to use Azure Blob Storage (defaults to settings.USE_AZURE_STORAGE)
            public_base_url: Base URL that serves the local storage directory
        """
        self.use_azure = settings.USE_AZURE_STORAGE if use_azure is None else use_azure
        self.storage_path = Path(storage_path or settings.LOCAL_STORAGE_PATH)
        self.public_base_url = (public_base_url or settings.PUBLIC_MEDIA_URL).rstrip("/")

        if self.use_azure:
            from azure.storage.blob import BlobServiceClient
            from azure.identity import DefaultAzureCredential

            connection_string = settings.AZURE_STORAGE_CONNECTION_STRING
            if connection_string:
                self.blob_service_client = BlobServiceClient.from_connection_string(
                    connection_string
                )
            elif settings.AZURE_STORAGE_ACCOUNT_NAME:
                account_url = f"https://{settings.AZURE_STORAGE_ACCOUNT_NAME}.blob.core.windows.net"
                self.blob_service_client = BlobServiceClient(
                    account_url=account_url,
                    credential=DefaultAzureCredential()
                )
            else:
                raise ValueError("Azure storage credentials not configured")

            self.container_client = self.blob_service_client.get_container_client(
                settings.AZURE_STORAGE_CONTAINER_IMAGES
            )
            self._ensure_container_exists()
            logger.info("Using Azure Blob Storage")
        else:
            self.images_path = self.storage_path / "images"
            self.images_path.mkdir(parents=True, exist_ok=True)
            logger.info(f"Using local storage at: {self.storage_path}")

    def _ensure_container_exists(self):
        """Ensure Azure container exists"""
        from azure.core.exceptions import ResourceNotFoundError

        try:
            self.container_client.get_container_properties()
        except ResourceNotFoundError:
            self.container_client.create_container(public_access="blob")
            logger.info(f"Created container '{settings.AZURE_STORAGE_CONTAINER_IMAGES}'")

    def upload_file(self, file_content: bytes, stored_name: str) -> str:
        """
        Upload a file under the given name

        Args:
            file_content: File content as bytes
            stored_name: Name to store the file under (must not exist yet)

        Returns:
            Public URL of the stored file
        """
        if not stored_name or "/" in stored_name or "\\" in stored_name or stored_name.startswith("."):
            raise ValueError(f"Invalid stored file name: {stored_name!r}")

        if self.use_azure:
            return self._upload_to_azure(file_content, stored_name)
        return self._upload_to_local(file_content, stored_name)

    def _upload_to_local(self, file_content: bytes, stored_name: str) -> str:
        """Upload file to local storage"""
        file_path = self.images_path / stored_name
        # "xb" refuses to overwrite an existing upload
        with open(file_path, "xb") as fh:
            fh.write(file_content)

        url = f"{self.public_base_url}/images/{stored_name}"
        logger.info(f"Stored '{stored_name}' ({len(file_content)} bytes) at {file_path}")
        return url

    def _upload_to_azure(self, file_content: bytes, stored_name: str) -> str:
        """Upload file to Azure Blob Storage"""
        blob_client = self.container_client.get_blob_client(stored_name)
        blob_client.upload_blob(
            data=file_content,
            metadata={"upload_timestamp": datetime.utcnow().isoformat()},
            overwrite=False
        )

        logger.info(f"Uploaded '{stored_name}' ({len(file_content)} bytes) to Azure Blob Storage")
        return blob_client.url

    def download_file(self, stored_name: str) -> bytes:
        """Read back a stored file by name"""
        if self.use_azure:
            blob_client = self.container_client.get_blob_client(stored_name)
            return blob_client.download_blob().readall()
        return (self.images_path / stored_name).read_bytes()
