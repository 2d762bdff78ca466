# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-09-25
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from config.Config import Config
from services.EmojiFeedService import EmojiFeedService
from services.EmojiHealthService import EmojiHealthService
from services.EmojiIngestService import EmojiIngestService
from services.EmojiSearchService import EmojiSearchService


@lru_cache
def get_container() -> AppContainer:
    # built on first request, not at import
    return AppContainer()

def get_cfg() -> Config:
    return get_container().cfg

def get_ingest_service() -> EmojiIngestService:
    # use the singleton service from the container
    return get_container().ingest_service

def get_search_service() -> EmojiSearchService:
    # use the singleton service from the container
    return get_container().search_service

def get_feed_service() -> EmojiFeedService:
    # use the singleton service from the container
    return get_container().feed_service

def get_health_service() -> EmojiHealthService:
    # use the singleton service from the container
    return get_container().health_service
