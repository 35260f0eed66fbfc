"""
Module: output.assets

Purpose:
    Image loading for the exporter. A photo that cannot be read is
    replaced by a generated placeholder so one bad asset never aborts an
    export. Also crops photos to their frame honouring the user's focal
    point and zoom.

Key Functions:
    - crop_to_frame(): Crop an image to a frame aspect ratio
    - placeholder_image(): Grey "image unavailable" tile

Key Classes:
    - ImageLoader: Cached loader with placeholder fallback

Dependencies:
    - PIL: Image decoding and drawing

Used By:
    - output.renderer: Cover and photo grid drawing
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

from print_studio.core.models import ImagePosition

logger = logging.getLogger(__name__)

PLACEHOLDER_SIZE = (400, 300)
PLACEHOLDER_BACKGROUND = (226, 232, 240)
PLACEHOLDER_FOREGROUND = (100, 116, 139)
PLACEHOLDER_TEXT = "Image unavailable"


def placeholder_image(size: Tuple[int, int] = PLACEHOLDER_SIZE) -> Image.Image:
    """
    Create a placeholder tile.

    Example:
        >>> placeholder_image((40, 30)).size
        (40, 30)
    """
    image = Image.new("RGB", size, PLACEHOLDER_BACKGROUND)
    draw = ImageDraw.Draw(image)
    w, h = size
    draw.rectangle((0, 0, w - 1, h - 1), outline=PLACEHOLDER_FOREGROUND)
    draw.line((0, 0, w - 1, h - 1), fill=PLACEHOLDER_FOREGROUND)
    draw.line((0, h - 1, w - 1, 0), fill=PLACEHOLDER_FOREGROUND)
    if w >= 120 and h >= 20:
        draw.text((8, h // 2 - 6), PLACEHOLDER_TEXT, fill=PLACEHOLDER_FOREGROUND)
    return image


def crop_to_frame(
    image: Image.Image,
    frame_width: float,
    frame_height: float,
    position: ImagePosition = ImagePosition(),
) -> Image.Image:
    """
    Crop an image to the frame's aspect ratio (CSS object-fit: cover).

    The crop window is centred on the focal point (x/y percent) and
    shrunk by ``zoom``.
    """
    if frame_width <= 0 or frame_height <= 0:
        return image
    src_w, src_h = image.size
    frame_ratio = frame_width / frame_height

    # Largest window with the frame aspect that fits the source
    if src_w / src_h > frame_ratio:
        win_h = src_h
        win_w = src_h * frame_ratio
    else:
        win_w = src_w
        win_h = src_w / frame_ratio
    win_w /= position.zoom
    win_h /= position.zoom

    left = (src_w - win_w) * position.x / 100.0
    top = (src_h - win_h) * position.y / 100.0
    box = (int(round(left)), int(round(top)),
           int(round(left + win_w)), int(round(top + win_h)))
    return image.crop(box)


class ImageLoader:
    """
    Loads report photos from disk with placeholder fallback.

    Sources are file paths, resolved against ``base_dir`` when relative.
    Decoded images are cached per source for the lifetime of the loader
    (one export).

    Example:
        >>> loader = ImageLoader(Path("report_assets"))
        >>> image, ok = loader.load("site/day1.jpg")
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir
        self.placeholder_count = 0
        self._cache: Dict[str, Image.Image] = {}

    def load(self, source: str) -> Tuple[Image.Image, bool]:
        """
        Load an image.

        Returns:
            (image, loaded) where ``loaded`` is False for a placeholder
        """
        if source in self._cache:
            return self._cache[source], True

        path = self._resolve(source)
        if path is None:
            logger.warning(f"Unsupported image source {source!r}, using placeholder")
            self.placeholder_count += 1
            return placeholder_image(), False

        try:
            with Image.open(path) as img:
                img.load()
                image = img.convert("RGB")
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.warning(f"Failed to load image {source!r}, using placeholder: {e}")
            self.placeholder_count += 1
            return placeholder_image(), False

        self._cache[source] = image
        return image, True

    def _resolve(self, source: str) -> Optional[Path]:
        if not source or "://" in source or source.startswith("data:"):
            return None
        path = Path(source)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path
