# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-17
# Description: EmojiGenerator
# -----------------------------------------------------------------------------
import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import OpenAI

from config.Config import VISUAL_MODE_GLYPH, VISUAL_MODE_IMAGE
from settings import DESCRIPTION_MAX_CHARS
from utility.errors import UpstreamError
from utility.logging_utils import get_class_logger

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
MAX_GLYPH_CHARS = 16  # ZWJ sequences / skin tones span several code points

GLYPH_PROMPT = """Analyze this image and choose the single emoji that best represents the main subject, activity, outfit, and emotion in the image.
Don't add anything that's not in the image.

Return your response in this exact JSON format:
{
  "emoji": "the emoji character here",
  "description": "A description here that only contains text (50 characters or less)"
}"""

STICKER_PROMPT = """Analyze this image and create a social media sticker concept that best represents the main subject, activity, outfit, and emotion in the image.
Don't add anything that's not in the image.

Return your response in this exact JSON format:
{
  "sticker_prompt": "An image-generation prompt for the sticker: PNG, transparent background, in the style of Apple emojis",
  "description": "A description here that only contains text (50 characters or less)"
}"""


@dataclass
class GeneratedVisual:
    """Output of the generator: either a glyph or PNG bytes, plus a description."""
    description: str
    glyph: Optional[str] = None
    image_bytes: Optional[bytes] = None
    content_type: str = "image/png"

    @property
    def is_image(self) -> bool:
        return self.image_bytes is not None


def truncate_description(text: str, limit: int = DESCRIPTION_MAX_CHARS) -> str:
    text = " ".join((text or "").split())
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Pull the first {...} block out of a model reply (models like to wrap JSON in prose/fences)."""
    match = re.search(r"\{[\s\S]*\}", text or "")
    if not match:
        raise UpstreamError("No valid JSON found in generator response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise UpstreamError(f"Generator returned malformed JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise UpstreamError("Generator JSON is not an object")
    return parsed


@dataclass
class EmojiGenerator:
    """
        OpenAI wrapper that turns a photo into an emoji glyph or a PNG sticker.

        Expected Config fields:
          cfg.openai_api_key: str
          cfg.openai_base_url: str
          cfg.openai_vision_model: str  (chat model with image input, e.g. "gpt-4o-mini")
          cfg.openai_image_model: str   (e.g. "gpt-image-1"; image-asset mode only)
          cfg.visual_mode: "glyph" | "image-asset"
    """

    cfg: Any
    client: Any = None
    temperature: float = 0.4
    max_tokens: int = 300
    sticker_size: str = "1024x1024"
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        self.mode = getattr(self.cfg, "visual_mode", VISUAL_MODE_GLYPH)
        self.model = getattr(self.cfg, "openai_vision_model", None)
        if not self.model:
            raise ValueError("Config missing openai_vision_model.")
        self.image_model = getattr(self.cfg, "openai_image_model", None)

        if self.client is None:
            if not getattr(self.cfg, "openai_api_key", None):
                raise ValueError("Config is missing openai_api_key")
            self.client = OpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=getattr(self.cfg, "openai_base_url", None) or None,
            )

        self.logger.info(
            "EmojiGenerator initialised (mode=%s, model=%s, image_model=%s)",
            self.mode, self.model, self.image_model,
        )

    def generate(self, image_bytes: bytes, mime_type: str) -> GeneratedVisual:
        if not image_bytes:
            raise ValueError("image_bytes must be non-empty.")

        if self.mode == VISUAL_MODE_IMAGE:
            parsed = self._describe(image_bytes, mime_type, STICKER_PROMPT)
            sticker_prompt = str(parsed.get("sticker_prompt") or "").strip()
            description = str(parsed.get("description") or "").strip()
            if not sticker_prompt or not description:
                raise UpstreamError("Invalid response format from generator (sticker_prompt/description)")

            png = self._render_sticker(sticker_prompt)
            return GeneratedVisual(description=truncate_description(description), image_bytes=png)

        parsed = self._describe(image_bytes, mime_type, GLYPH_PROMPT)
        glyph = str(parsed.get("emoji") or "").strip()
        description = str(parsed.get("description") or "").strip()
        if not glyph or not description:
            raise UpstreamError("Invalid response format from generator (emoji/description)")
        if len(glyph) > MAX_GLYPH_CHARS or any(ch.isspace() for ch in glyph):
            raise UpstreamError(f"Generator returned something that is not a single emoji: {glyph!r}")

        return GeneratedVisual(description=truncate_description(description), glyph=glyph)

    def _describe(self, image_bytes: bytes, mime_type: str, prompt: str) -> Dict[str, Any]:
        # data URLs want the canonical jpeg subtype
        media_type = "image/jpeg" if mime_type == "image/jpg" else mime_type
        data_url = f"data:{media_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"

        messages: List[Dict[str, Any]] = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": data_url}},
            ],
        }]

        self.logger.debug(
            "Vision request: model=%s bytes=%d mime=%s", self.model, len(image_bytes), mime_type
        )

        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            self.logger.exception("Vision call failed (model=%s): %s", self.model, e)
            raise UpstreamError(f"Generator request failed: {e}") from e

        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise UpstreamError(f"Unexpected generator response format: {e}") from e

        self.logger.debug("Generator response: %s", content)
        return extract_json_object(content)

    def _render_sticker(self, prompt: str) -> bytes:
        if not self.image_model:
            raise UpstreamError("Config missing openai_image_model for image-asset mode")

        params: Dict[str, Any] = {
            "model": self.image_model,
            "prompt": prompt,
            "size": self.sticker_size,
            "n": 1,
        }
        if self.image_model.startswith("dall-e"):
            params["response_format"] = "b64_json"
        elif self.image_model.startswith("gpt-image"):
            params["background"] = "transparent"
            params["output_format"] = "png"

        try:
            resp = self.client.images.generate(**params)
        except Exception as e:
            self.logger.exception("Sticker generation failed (model=%s): %s", self.image_model, e)
            raise UpstreamError(f"Sticker generation failed: {e}") from e

        try:
            b64 = resp.data[0].b64_json
        except (AttributeError, IndexError, TypeError) as e:
            raise UpstreamError(f"Unexpected image response format: {e}") from e
        if not b64:
            raise UpstreamError("Image response did not include base64 data")

        try:
            png = base64.b64decode(b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamError(f"Image response is not valid base64: {e}") from e

        if not png.startswith(PNG_SIGNATURE):
            raise UpstreamError("Response must contain valid PNG image data")

        self.logger.info("Sticker rendered (model=%s, bytes=%d)", self.image_model, len(png))
        return png

    def healthcheck(self) -> bool:
        try:
            self.client.models.retrieve(self.model)
            return True
        except Exception as e:
            self.logger.warning("Generator healthcheck failed: %s", e)
            return False
