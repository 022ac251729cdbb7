"""Favicon variant generation from a source image."""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image, ImageOps, PngImagePlugin, UnidentifiedImageError

from aicon.exceptions import DecodeError
from aicon.schemas.favicon import MULTI_DIMENSION, AssetType

logger = logging.getLogger(__name__)

# EXIF tag 0x010E
EXIF_IMAGE_DESCRIPTION = 270


@dataclass(frozen=True)
class GeneratedVariant:
    """One generated favicon asset."""

    asset_type: str  # PNG or ICO
    dimension: str  # "32x32" or MULTI
    format: str  # extension with leading dot
    mime_type: str
    content: bytes


class FaviconGeneratorService:
    """Derive the standard set of favicon variants from one source image.

    Output order is fixed: standard PNG sizes ascending, Apple touch sizes
    ascending, then the ICO container. The service keeps no state, so a
    single instance can be shared across concurrent generations.
    """

    STANDARD_SIZES = (16, 32, 48, 64, 96, 128, 192, 256, 512)
    APPLE_TOUCH_SIZES = (120, 152, 167, 180)
    ICO_SIZES = ((16, 16), (32, 32), (48, 48))

    # Reserved for a future pixel-level embedding; metadata is only written
    # to PNG text chunks and EXIF today.
    USES_STEGANOGRAPHY = False

    def generate(
        self,
        source: bytes,
        embedded_metadata: Optional[str] = None,
    ) -> List[GeneratedVariant]:
        """Generate all favicon variants for a source image.

        Args:
            source: Source image bytes (PNG, JPEG, GIF, WebP, ...)
            embedded_metadata: Optional text embedded into every PNG variant

        Returns:
            Ordered list of 14 variants

        Raises:
            DecodeError: If source is not a decodable image
        """
        image = self._decode(source)
        metadata = (embedded_metadata or "").strip() or None

        variants = []
        for size in self.STANDARD_SIZES + self.APPLE_TOUCH_SIZES:
            variants.append(self._render_png(image, size, metadata))

        variants.append(self._render_ico(image))

        logger.debug(
            f"Generated {len(variants)} variants from {image.width}x{image.height} source"
        )
        return variants

    def _decode(self, source: bytes) -> Image.Image:
        """Open source bytes and normalize to RGBA."""
        if not source:
            raise DecodeError("Source image is empty")

        try:
            with Image.open(io.BytesIO(source)) as img:
                img.load()
                return img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            logger.warning(f"Rejected source image: {e}")
            raise DecodeError("Unsupported image format")
        except (OSError, ValueError, SyntaxError) as e:
            logger.warning(f"Source image is corrupt: {e}")
            raise DecodeError("Image data is corrupt or truncated")

    def _cover(self, image: Image.Image, size: int) -> Image.Image:
        """Resize to a square, cropping the overflow around the center."""
        return ImageOps.fit(
            image,
            (size, size),
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )

    def _render_png(
        self, image: Image.Image, size: int, metadata: Optional[str]
    ) -> GeneratedVariant:
        resized = self._cover(image, size)

        save_kwargs = {"format": "PNG"}
        if metadata:
            pnginfo, exif = self._metadata_blocks(metadata)
            save_kwargs["pnginfo"] = pnginfo
            if exif:
                save_kwargs["exif"] = exif

        buffer = io.BytesIO()
        resized.save(buffer, **save_kwargs)

        return GeneratedVariant(
            asset_type=AssetType.PNG,
            dimension=f"{size}x{size}",
            format=".png",
            mime_type="image/png",
            content=buffer.getvalue(),
        )

    def _render_ico(self, image: Image.Image) -> GeneratedVariant:
        """Pack 16, 32 and 48 pixel frames into one ICO container."""
        largest = max(width for width, _ in self.ICO_SIZES)
        base = self._cover(image, largest)

        buffer = io.BytesIO()
        base.save(buffer, format="ICO", sizes=list(self.ICO_SIZES))

        return GeneratedVariant(
            asset_type=AssetType.ICO,
            dimension=MULTI_DIMENSION,
            format=".ico",
            mime_type="image/x-icon",
            content=buffer.getvalue(),
        )

    def _metadata_blocks(
        self, metadata: str
    ) -> Tuple[PngImagePlugin.PngInfo, Optional[bytes]]:
        pnginfo = PngImagePlugin.PngInfo()
        pnginfo.add_text("Description", metadata)

        # EXIF ImageDescription is ASCII only; the text chunk carries everything else
        if not metadata.isascii():
            return pnginfo, None

        exif = Image.Exif()
        exif[EXIF_IMAGE_DESCRIPTION] = metadata
        return pnginfo, exif.tobytes()
