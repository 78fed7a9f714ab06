"""Image decoding, resizing and encoding utilities for the images resizer."""

import io
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

from PIL import Image, ImageOps

from .exceptions import (
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    UnsupportedFormatError,
)
from .models import FitStrategy, ImageFormat, ResizeSpec

SUPPORTED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})

# Smooth filter for every strategy; nearest-neighbour aliases badly when shrinking
RESAMPLE = Image.Resampling.BILINEAR

# Pillow reports multi-picture camera JPEGs as MPO
_PIL_FORMATS: Dict[str, ImageFormat] = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "GIF": ImageFormat.GIF,
    "WEBP": ImageFormat.WEBP,
}


@dataclass(frozen=True)
class DecodedImage:
    """A decoded source raster and the container format it came from."""

    raster: Image.Image
    source_format: ImageFormat

    @property
    def size(self) -> Tuple[int, int]:
        return self.raster.size


@dataclass(frozen=True)
class EncodedImage:
    """Encoded derivative bytes ready for upload."""

    data: bytes
    content_type: str
    format: str


@dataclass(frozen=True)
class _Encoder:
    pil_format: str
    content_type: str
    options: Dict[str, Any] = field(default_factory=dict)


# No native webp output: webp sources are re-emitted as high quality JPEG
_ENCODERS: Dict[ImageFormat, _Encoder] = {
    ImageFormat.JPEG: _Encoder("JPEG", "image/jpeg", {"quality": 85}),
    ImageFormat.WEBP: _Encoder("JPEG", "image/jpeg", {"quality": 90}),
    ImageFormat.PNG: _Encoder("PNG", "image/png"),
    ImageFormat.GIF: _Encoder("GIF", "image/gif"),
}


def _split_ext(filename: str) -> Tuple[str, str]:
    # Extension starts at the last dot, even a leading one (".jpg" -> ("", ".jpg"))
    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


def is_supported_key(key: str) -> bool:
    """Check whether an object key has one of the supported image extensions."""
    return _split_ext(posixpath.basename(key))[1].lower() in SUPPORTED_EXTENSIONS


def derive_dest_key(original_key: str, spec_name: str) -> str:
    """
    Calculate the destination key of one derivative.

    ``photos/beach.jpg`` with spec ``small`` becomes ``photos/beach_small.jpg``.
    The original extension string is kept as-is, including for webp sources
    that are re-encoded as JPEG.

    Args:
        original_key: Key of the uploaded source object
        spec_name: Name of the ResizeSpec

    Returns:
        Destination key
    """
    directory, filename = posixpath.split(original_key)
    base_name, ext = _split_ext(filename)
    derived = f"{base_name}_{spec_name}{ext}"
    if directory:
        return f"{directory}/{derived}"
    return derived


def decode_image(data: bytes) -> DecodedImage:
    """
    Decode a byte stream into a raster.

    Args:
        data: Raw object bytes

    Returns:
        DecodedImage with the detected source format

    Raises:
        ImageDecodeError: If the bytes are not a supported, intact image
    """
    try:
        image = Image.open(io.BytesIO(data))
        pil_format = image.format
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"failed to decode image: {exc}") from exc

    source_format = _PIL_FORMATS.get(pil_format or "")
    if source_format is None:
        raise ImageDecodeError(f"unsupported image container: {pil_format}")

    # Palette and bilevel rasters would force nearest-neighbour resampling
    if image.mode in ("1", "P", "PA", "LA"):
        has_alpha = image.mode in ("PA", "LA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")

    return DecodedImage(raster=image, source_format=source_format)


def resize_image(raster: Image.Image, spec: ResizeSpec) -> Image.Image:
    """
    Apply a ResizeSpec's strategy to a raster.

    The input raster is never modified; a new image is always returned.

    Args:
        raster: Source raster
        spec: Target size and fit strategy

    Returns:
        Resized raster

    Raises:
        ImageProcessingError: If the strategy is unknown
    """
    src_width, src_height = raster.size

    if spec.strategy is FitStrategy.FIT:
        if src_width <= spec.width and src_height <= spec.height:
            return raster.copy()
        ratio = min(spec.width / src_width, spec.height / src_height)
        return raster.resize(
            (max(1, round(src_width * ratio)), max(1, round(src_height * ratio))),
            resample=RESAMPLE,
        )
    elif spec.strategy is FitStrategy.FILL:
        return ImageOps.fit(
            raster, (spec.width, spec.height), method=RESAMPLE, centering=(0.5, 0.5)
        )
    elif spec.strategy is FitStrategy.RESIZE_BY_WIDTH:
        height = max(1, round(src_height * spec.width / src_width))
        return raster.resize((spec.width, height), resample=RESAMPLE)
    elif spec.strategy is FitStrategy.RESIZE_BY_HEIGHT:
        width = max(1, round(src_width * spec.height / src_height))
        return raster.resize((width, spec.height), resample=RESAMPLE)
    else:
        raise ImageProcessingError(f"Unknown resize strategy: {spec.strategy}")


def encode_image(
    raster: Image.Image, source_format: Union[ImageFormat, str]
) -> EncodedImage:
    """
    Encode a raster for upload, choosing the encoder from the source format.

    Args:
        raster: Raster to encode
        source_format: Format the source object was decoded from

    Returns:
        EncodedImage with bytes and content type

    Raises:
        UnsupportedFormatError: If no encoder exists for the format
        ImageEncodeError: If the encoder fails
    """
    try:
        encoder = _ENCODERS[ImageFormat(source_format)]
    except (ValueError, KeyError):
        raise UnsupportedFormatError(f"unsupported format: {source_format}")

    image = raster
    if encoder.pil_format == "JPEG" and image.mode not in ("RGB", "L", "CMYK"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=encoder.pil_format, **encoder.options)
    except (OSError, ValueError) as exc:
        raise ImageEncodeError(
            f"failed to encode {encoder.pil_format} image: {exc}"
        ) from exc

    return EncodedImage(
        data=buffer.getvalue(),
        content_type=encoder.content_type,
        format=encoder.pil_format,
    )
