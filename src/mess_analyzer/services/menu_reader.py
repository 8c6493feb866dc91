"""Reads menu text from photos with a vision-capable model."""

import base64
from dataclasses import dataclass
from typing import Protocol

from mess_analyzer.domain.menu import MenuText

MAX_IMAGE_BYTES = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})

MENU_TEXT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    },
    "required": ["text", "confidence"],
    "additionalProperties": False,
}

MENU_PROMPT = (
    "Transcribe the text of this canteen menu exactly as printed, one line per "
    "menu entry. Report how confident you are in the transcription (0-1)."
)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(
        self,
        *,
        model: str,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass
class MenuReader:
    """Validates menu photos and extracts their text."""

    client: VisionClient
    model: str
    store: bool

    async def read_menu(self, image_bytes: bytes) -> MenuText:
        """Extract the printed menu text from an image."""
        raw = await self.client.extract(
            model=self.model,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=MENU_TEXT_SCHEMA,
            prompt=MENU_PROMPT,
        )
        return MenuText.model_validate(raw)


def validate_image(content_type: str | None, size: int) -> None:
    """Reject unsupported image types and files over 10 MB."""
    if (content_type or "").split(";")[0].strip().lower() not in ALLOWED_IMAGE_TYPES:
        raise ValueError("Invalid file type. Please upload a JPG, PNG, or WEBP image.")
    if size > MAX_IMAGE_BYTES:
        raise ValueError("File too large. Please upload an image smaller than 10MB.")
    if size == 0:
        raise ValueError("Image is empty.")


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
