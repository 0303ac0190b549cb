from __future__ import annotations

import logging
import re
from typing import BinaryIO, Optional
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from ..client.context import ClientContext
from ..core.constants import PIN_LENGTH
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_JOIN_PATH_RE = re.compile(r"^/join/(?P<pin>\d{%d})/?$" % PIN_LENGTH)
_BARE_PIN_RE = re.compile(r"^\d{%d}$" % PIN_LENGTH)


class DeepLinkResolver:
    """Turns ``/join/<pin>`` links (typed, clicked or scanned) into a staged PIN.

    It never signs anyone in; it only seeds the PIN input for the next
    authenticated check-in.
    """

    def __init__(self, base_url: str = ""):
        self._base_url = (base_url or "").rstrip("/")

    def build_join_url(self, pin: str) -> str:
        return f"{self._base_url}/join/{pin}"

    def extract_pin(self, path_or_url: str) -> Optional[str]:
        value = (path_or_url or "").strip()
        if not value:
            return None
        path = urlparse(value).path if "://" in value else value.split("?", 1)[0]
        match = _JOIN_PATH_RE.match(path)
        return match.group("pin") if match else None

    def resolve(self, path_or_url: str, context: ClientContext) -> Optional[str]:
        pin = self.extract_pin(path_or_url)
        if pin:
            context.stage_pin(pin)
        return pin

    def decode_qr_image(self, stream: BinaryIO) -> str:
        """Decode a photographed join QR code and return its PIN."""

        # pyzbar loads the native zbar library on import
        from pyzbar.pyzbar import decode as pyzbar_decode

        try:
            img = Image.open(stream).convert("RGB")
        except (UnidentifiedImageError, OSError):
            raise ValidationError("The uploaded file is not an image")

        decoded = pyzbar_decode(img)
        if not decoded:
            raise ValidationError("No QR code found in the image")

        for symbol in decoded:
            text = symbol.data.decode("utf-8", errors="replace").strip()
            pin = self.extract_pin(text) or (text if _BARE_PIN_RE.match(text) else None)
            if pin:
                return pin

        logger.info("Scanned QR code is not a join link")
        raise ValidationError("This QR code is not an attendance join link")
