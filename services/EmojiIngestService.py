# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: EmojiIngestService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from api.schemas.emoji import UploadRequest
from config.Config import VISUAL_MODE_GLYPH, VISUAL_MODE_IMAGE
from embedding.EmojiEmbedder import EmojiEmbedder
from generation.EmojiGenerator import EmojiGenerator
from record.EmojiRecord import EmojiRecord
from settings import MAX_UPLOAD_BYTES
from storage.EmojiBlobStore import EmojiBlobStore
from utility.errors import EmojiValidationError, PersistenceError, UpstreamError
from utility.logging_utils import get_class_logger
from vectorstore.EmojiStore import EmojiStore


class EmojiIngestService:
    """
    Owns the upload -> record pipeline:
      - validate payload (type, base64, size) before any external call
      - generate visual + description
      - embed description
      - upload sticker PNG (image-asset mode only)
      - insert into the record store
    Strictly sequential; any failure aborts with nothing persisted.
    """

    def __init__(
        self,
        *,
        generator: EmojiGenerator,
        embedder: EmojiEmbedder,
        store: EmojiStore,
        blob_store: Optional[EmojiBlobStore] = None,
        visual_mode: str = VISUAL_MODE_GLYPH,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        logger: logging.Logger | None = None,
    ) -> None:
        self.generator = generator
        self.embedder = embedder
        self.store = store
        self.blob_store = blob_store
        self.visual_mode = visual_mode
        self.max_upload_bytes = max_upload_bytes
        self.logger = logger or get_class_logger(self.__class__)

    @property
    def response_key(self) -> str:
        """'sticker' in image-asset mode, 'emoji' otherwise."""
        return "sticker" if self.visual_mode == VISUAL_MODE_IMAGE else "emoji"

    def validate_upload(self, file: Any, mime_type: Any) -> bytes:
        """Returns the decoded image bytes or raises EmojiValidationError."""
        try:
            req = UploadRequest(file=file, mimeType=mime_type)
        except PydanticValidationError as e:
            raise EmojiValidationError(
                "Invalid request data",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

        try:
            image_bytes = base64.b64decode("".join(req.file.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise EmojiValidationError(
                "Invalid request data",
                details=[{"loc": ["file"], "msg": "File must be base64 encoded", "type": "value_error"}],
            ) from e

        if not image_bytes:
            raise EmojiValidationError(
                "Invalid request data",
                details=[{"loc": ["file"], "msg": "File is required", "type": "value_error"}],
            )

        if len(image_bytes) > self.max_upload_bytes:
            raise EmojiValidationError("File size must be less than 5MB")

        return image_bytes

    def ingest(self, file: Any, mime_type: Any) -> EmojiRecord:
        image_bytes = self.validate_upload(file, mime_type)
        start = time.time()

        self.logger.info("ingest: bytes=%d mime=%s (start)", len(image_bytes), mime_type)

        # 1) image -> visual + description
        try:
            generated = self.generator.generate(image_bytes, mime_type)
        except UpstreamError:
            raise
        except Exception as e:
            self.logger.exception("ingest: generator failed: %s", e)
            raise UpstreamError(f"Visual generation failed: {e}") from e

        # 2) description -> vector
        try:
            embedding = self.embedder.embed_text(generated.description)
        except UpstreamError:
            raise
        except Exception as e:
            self.logger.exception("ingest: embedding failed: %s", e)
            raise UpstreamError(f"Embedding failed: {e}") from e

        # 3) sticker bytes -> public URL
        if generated.is_image:
            if self.blob_store is None:
                raise UpstreamError("Generator produced an image but no blob store is configured")
            try:
                visual = self.blob_store.upload_bytes(
                    generated.image_bytes,
                    generated.content_type,
                    metadata={"source": "emojify", "description": generated.description},
                )
            except UpstreamError:
                raise
            except Exception as e:
                self.logger.exception("ingest: blob upload failed: %s", e)
                raise UpstreamError(f"Blob upload failed: {e}") from e
        else:
            visual = generated.glyph

        # 4) persist
        try:
            record = self.store.insert_record(
                visual=visual,
                description=generated.description,
                embedding=embedding,
            )
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.exception("ingest: insert failed: %s", e)
            raise PersistenceError(f"Failed to save record: {e}") from e

        self.logger.info(
            "ingest: record id=%s created in %.1f ms (done)",
            record.id,
            (time.time() - start) * 1000.0,
        )
        return record
