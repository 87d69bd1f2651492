"""Raster decode, compression and thumbnail generation using Pillow."""

import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from photo_report.config import THUMBNAIL_SIZE
from photo_report.domain.errors import ErrorCode, PhotoAppError
from photo_report.domain.photos import ImageAsset

OUTPUT_MEDIA_TYPE = "image/jpeg"
THUMBNAIL_QUALITY = 0.7
THUMBNAIL_FILL = (243, 244, 246)


@dataclass(frozen=True)
class QualityProfile:
    """Maximum dimension and re-encode quality for compression."""

    max_dimension: int
    quality: float

    @property
    def jpeg_quality(self) -> int:
        return round(self.quality * 100)


QUALITY_PROFILES: dict[str, QualityProfile] = {
    "high": QualityProfile(max_dimension=1920, quality=0.90),
    "highest": QualityProfile(max_dimension=2560, quality=0.92),
}


def scaled_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Fit the longer side within max_dimension, preserving aspect ratio.

    Images already within the limit keep their size.
    """
    if width >= height:
        if width <= max_dimension:
            return width, height
        return max_dimension, max(1, round(height * max_dimension / width))
    if height <= max_dimension:
        return width, height
    return max(1, round(width * max_dimension / height)), max_dimension


@dataclass
class ImageCodec:
    """Decodes input images and re-encodes them as JPEG assets."""

    thumbnail_size: int = THUMBNAIL_SIZE

    def decode(self, data: bytes) -> Image.Image:
        """Decode raw bytes into an RGB image honouring EXIF orientation."""
        try:
            with Image.open(io.BytesIO(data)) as source:
                source.load()
                image = ImageOps.exif_transpose(source)
                return image.convert("RGB")
        except Image.DecompressionBombError as exc:
            raise PhotoAppError(
                "Image has too many pixels to decode",
                ErrorCode.MEMORY_LIMIT,
                {"original_error": repr(exc)},
            ) from exc
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise PhotoAppError(
                "Failed to decode image",
                ErrorCode.COMPRESSION_FAILED,
                {"original_error": repr(exc)},
            ) from exc

    def compress(self, image: Image.Image, profile: QualityProfile) -> ImageAsset:
        """Downscale to the profile's max dimension and encode as JPEG."""
        width, height = image.size
        if width == 0 or height == 0:
            raise PhotoAppError(
                "Image has no pixels",
                ErrorCode.INVALID_IMAGE_DATA,
                {"width": width, "height": height},
            )
        target = scaled_size(width, height, profile.max_dimension)
        if target != image.size:
            image = image.resize(target, Image.Resampling.LANCZOS)
        return self._encode(image, profile.jpeg_quality)

    def thumbnail(self, asset: ImageAsset, size: int | None = None) -> ImageAsset:
        """Fit the asset into a square canvas centred on a neutral fill."""
        square = size or self.thumbnail_size
        image = self.decode(asset.data)
        if image.width == 0 or image.height == 0:
            raise PhotoAppError("Image has no pixels", ErrorCode.INVALID_IMAGE_DATA)
        fitted = ImageOps.contain(image, (square, square), Image.Resampling.LANCZOS)
        canvas = Image.new("RGB", (square, square), THUMBNAIL_FILL)
        offset = ((square - fitted.width) // 2, (square - fitted.height) // 2)
        canvas.paste(fitted, offset)
        return self._encode(canvas, round(THUMBNAIL_QUALITY * 100))

    def _encode(self, image: Image.Image, quality: int) -> ImageAsset:
        buffer = io.BytesIO()
        try:
            image.convert("RGB").save(buffer, format="JPEG", quality=quality)
        except (OSError, ValueError) as exc:
            raise PhotoAppError(
                "Failed to encode image",
                ErrorCode.COMPRESSION_FAILED,
                {"original_error": repr(exc)},
            ) from exc
        return ImageAsset(media_type=OUTPUT_MEDIA_TYPE, data=buffer.getvalue())
