# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass, fields
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=True)

VISUAL_MODE_GLYPH = "glyph"
VISUAL_MODE_IMAGE = "image-asset"
VISUAL_MODES = (VISUAL_MODE_GLYPH, VISUAL_MODE_IMAGE)


@dataclass(frozen=True)
class Config:
    # OpenAI (direct, for image understanding / sticker generation)
    openai_api_key: str

    # Azure OpenAI (for embeddings)
    openai_azure_api_key: str
    openai_azure_endpoint: str
    openai_azure_embed_deployment: str

    # Chroma Vector Database
    chroma_api_key: str
    chroma_tenant: str
    chroma_database: str

    # "glyph" -> single emoji character, "image-asset" -> generated PNG sticker
    visual_mode: str = VISUAL_MODE_GLYPH

    # Azure Storage (only needed in image-asset mode)
    storage_account: str = ""
    storage_key: str = ""
    storage_container: str = "stickers"

    openai_base_url: str = "https://api.openai.com/v1"
    openai_vision_model: str = "gpt-4o-mini"
    openai_image_model: str = "gpt-image-1"

    # text-embedding-3-small -> 1536, text-embedding-3-large -> 3072
    embedding_dim: int = 1536

    chroma_collection: str = "emoji"

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        "visual_mode": "EMOJIFY_VISUAL_MODE",

        # OpenAI direct
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",
        "openai_vision_model": "OPENAI_VISION_MODEL",
        "openai_image_model": "OPENAI_IMAGE_MODEL",

        # Azure OpenAI
        "openai_azure_api_key": "AZURE_OPENAI_API_KEY",
        "openai_azure_endpoint": "AZURE_OPENAI_ENDPOINT",
        "openai_azure_embed_deployment": "AZURE_OPENAI_EMBED_DEPLOYMENT",
        "embedding_dim": "EMOJIFY_EMBEDDING_DIM",

        # Chroma
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "chroma_collection": "CHROMA_COLLECTION",

        # Storage
        "storage_account": "AZURE_STORAGE_ACCOUNT",
        "storage_key": "AZURE_STORAGE_KEY",
        "storage_container": "AZURE_STORAGE_CONTAINER",
    }

    REQUIRED_FIELDS = (
        "openai_api_key",
        "openai_azure_api_key",
        "openai_azure_endpoint",
        "openai_azure_embed_deployment",
        "chroma_api_key",
        "chroma_tenant",
        "chroma_database",
    )

    IMAGE_MODE_FIELDS = (
        "storage_account",
        "storage_key",
        "storage_container",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables (blank -> dataclass default)."""
        types = {f.name: f.type for f in fields(Config)}
        kwargs = {}
        for field_name, env_name in Config.ENV_VARS.items():
            raw = (os.getenv(env_name) or "").strip()
            if not raw and field_name not in Config.REQUIRED_FIELDS:
                continue
            if types.get(field_name) in (int, "int"):
                try:
                    kwargs[field_name] = int(raw)
                except ValueError as e:
                    raise ValueError(f"Env var {env_name} must be an int, got {raw!r}") from e
            else:
                kwargs[field_name] = raw
        return Config(**kwargs)

    def __post_init__(self):
        """
        Fail fast if any required config is missing.
        Storage settings only become required once stickers are uploaded as blobs.
        """
        required = list(self.REQUIRED_FIELDS)
        if self.visual_mode == VISUAL_MODE_IMAGE:
            required.extend(self.IMAGE_MODE_FIELDS)

        missing_fields = [f for f in required if not getattr(self, f)]
        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

        if self.visual_mode not in VISUAL_MODES:
            raise ValueError(
                f"{self.ENV_VARS['visual_mode']} must be one of {VISUAL_MODES}, got {self.visual_mode!r}"
            )

        if self.embedding_dim <= 0:
            raise ValueError(f"embedding_dim must be positive, got {self.embedding_dim}")

    @property
    def is_image_mode(self) -> bool:
        return self.visual_mode == VISUAL_MODE_IMAGE

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "visual_mode": self.visual_mode,
            "openai_base_url": self.openai_base_url,
            "openai_vision_model": self.openai_vision_model,
            "openai_image_model": self.openai_image_model,
            "openai_azure_endpoint": self.openai_azure_endpoint,
            "openai_azure_embed_deployment": self.openai_azure_embed_deployment,
            "embedding_dim": self.embedding_dim,
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "chroma_collection": self.chroma_collection,
            "storage_account": self.storage_account,
            "storage_container": self.storage_container,
        }
