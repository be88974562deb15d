# src/otpvault/importer/scanner.py

import logging
from pathlib import Path
from typing import Set

from PIL import Image
from pyzbar.pyzbar import decode

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".webp", ".gif"}
URI_PREFIXES = ("otpauth://", "otpauth-migration://")


def extract_uris_from_path(path_str: str) -> Set[str]:
    """
    Scans an image file or a directory of images for authenticator QR codes.

    :param path_str: Path to an image file or a directory of images.
    :return: The unique `otpauth://` and `otpauth-migration://` payloads found.
    """
    found_uris = set()
    path = Path(path_str)

    if not path.exists():
        logger.debug("Skipping missing path %s", path)
        return found_uris

    files = [path] if path.is_file() else list(path.iterdir())

    for f in files:
        if f.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        try:
            with Image.open(f) as img:
                # Grayscale improves recognition on low-contrast screenshots
                decoded_objects = decode(img.convert("L"))
        except (OSError, ValueError) as e:
            logger.debug("Could not read image %s: %s", f, e)
            continue

        for obj in decoded_objects:
            content = obj.data.decode("utf-8", errors="replace").strip()
            if content.startswith(URI_PREFIXES):
                found_uris.add(content)

    return found_uris
