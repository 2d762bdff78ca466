# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-09-25
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from config.Config import Config
from embedding.EmojiEmbedder import EmojiEmbedder
from feed.InsertBroadcaster import InsertBroadcaster
from generation.EmojiGenerator import EmojiGenerator
from services.EmojiFeedService import EmojiFeedService
from services.EmojiHealthService import EmojiHealthService
from services.EmojiIngestService import EmojiIngestService
from services.EmojiSearchService import EmojiSearchService
from storage.EmojiBlobStore import EmojiBlobStore
from utility.logging_utils import get_class_logger
from vectorstore.ChromaEmojiStore import ChromaEmojiStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    Singleton instances are provided via FastAPI dependencies.
    """

    def __init__(self, cfg: Config | None = None) -> None:
        self.logger = get_class_logger(self.__class__)

        # Configuration
        self.cfg = cfg or Config.from_env()
        self.logger.info("Building app container: %s", self.cfg.summary())

        # Core infrastructure
        self.broadcaster = InsertBroadcaster()
        self.embedder = EmojiEmbedder(cfg=self.cfg)
        self.generator = EmojiGenerator(cfg=self.cfg)
        self.store = ChromaEmojiStore(cfg=self.cfg, broadcaster=self.broadcaster)

        # Sticker PNGs only exist in image-asset mode
        self.blob_store = EmojiBlobStore(cfg=self.cfg) if self.cfg.is_image_mode else None

        # Return a singleton EmojiIngestService instance
        self.ingest_service = EmojiIngestService(
            generator=self.generator,
            embedder=self.embedder,
            store=self.store,
            blob_store=self.blob_store,
            visual_mode=self.cfg.visual_mode,
        )

        # Return a singleton EmojiSearchService instance
        self.search_service = EmojiSearchService(store=self.store, embedder=self.embedder)

        # Return a singleton EmojiFeedService instance
        self.feed_service = EmojiFeedService(store=self.store)

        # Return a singleton EmojiHealthService instance
        self.health_service = EmojiHealthService(
            store=self.store,
            embedder=self.embedder,
            generator=self.generator,
            blob_store=self.blob_store,
            visual_mode=self.cfg.visual_mode,
        )
