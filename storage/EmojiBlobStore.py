# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: storage/EmojiBlobStore.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import mimetypes
import time
import uuid
from typing import Any, Dict, Optional

from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

from config.Config import Config
from utility.errors import UpstreamError
from utility.logging_utils import get_class_logger


def _norm_meta(meta: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Azure Blob metadata must be a dict[str, str].
    """
    if not meta:
        return {}
    return {str(k).lower(): str(v) for k, v in meta.items() if v is not None}


class EmojiBlobStore:
    """
    Stores generated sticker PNGs in Azure Blob Storage and hands back their public URL.
    The container is created on first use with anonymous blob-level read access.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            blob_service: BlobServiceClient | None = None,
            logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.container = cfg.storage_container
        self.logger = logger or get_class_logger(self.__class__)
        self._container_ready = False

        if blob_service is not None:
            self.blob_service = blob_service
            return

        start_time = time.time()
        try:
            self.blob_service = BlobServiceClient(
                account_url=f"https://{cfg.storage_account}.blob.core.windows.net",
                credential=AzureNamedKeyCredential(cfg.storage_account, cfg.storage_key),
            )
            self.logger.info(
                "Initialised BlobServiceClient for account '%s' (%.1f ms)",
                cfg.storage_account,
                (time.time() - start_time) * 1000.0,
            )
        except Exception as e:
            self.logger.exception("Failed to initialise BlobServiceClient: %s", e)
            raise

    def _ensure_container(self) -> Any:
        cc = self.blob_service.get_container_client(self.container)
        if not self._container_ready:
            try:
                cc.create_container(public_access="blob")
                self.logger.info("Created container '%s' (public blob access)", self.container)
            except ResourceExistsError:
                self.logger.debug("Container '%s' already exists.", self.container)
            self._container_ready = True
        return cc

    def upload_bytes(
            self,
            data: bytes,
            content_type: str = "image/png",
            *,
            metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Upload under a fresh uuid name; returns the blob's public URL."""
        if not data:
            raise ValueError("data must not be empty")

        ext = mimetypes.guess_extension(content_type) or ".bin"
        blob_name = f"{uuid.uuid4().hex}{ext}"
        norm = _norm_meta(metadata)

        self.logger.info(
            "upload_bytes: container='%s' blob='%s' bytes=%d (start)",
            self.container, blob_name, len(data),
        )
        try:
            cc = self._ensure_container()
            bc = cc.get_blob_client(blob_name)
            bc.upload_blob(
                data,
                overwrite=False,
                metadata=norm,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            self.logger.exception("upload_bytes failed: container='%s' blob='%s': %s", self.container, blob_name, e)
            raise UpstreamError(f"Blob upload failed: {e}") from e

        url = bc.url
        self.logger.info("upload_bytes: container='%s' blob='%s' url=%s (done)", self.container, blob_name, url)
        return url

    def test_connection(self) -> bool:
        try:
            self.blob_service.get_container_client(self.container).exists()
            return True
        except Exception as e:
            self.logger.error("Blob connection failed: %s", e)
            return False
