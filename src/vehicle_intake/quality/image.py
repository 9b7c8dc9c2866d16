"""
Capture Image Buffers
=====================

Immutable pixel buffer wrapper plus the decode/encode helpers that sit at
the edge of the quality pipeline.

Decoding goes through OpenCV, which applies EXIF orientation for
IMREAD_COLOR, so every RawImage produced here is already upright.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union
import logging

from ..exceptions import ImageLoadError, ConfigurationError

logger = logging.getLogger(__name__)


class ImageEncoding(str, Enum):
    """Output encodings for processed captures."""
    JPEG = 'jpeg'
    PNG = 'png'


_EXTENSIONS = {
    ImageEncoding.JPEG: 'jpg',
    ImageEncoding.PNG: 'png',
}

_MIME_TYPES = {
    ImageEncoding.JPEG: 'image/jpeg',
    ImageEncoding.PNG: 'image/png',
}

_JPEG_MAGIC = b'\xff\xd8\xff'
_PNG_MAGIC = b'\x89PNG\r\n\x1a\n'

CHANNEL_ORDERS = ('BGR', 'RGB')


def parse_encoding(value: Union[str, ImageEncoding]) -> ImageEncoding:
    """
    Coerce a string or enum to an ImageEncoding.

    Raises:
        ConfigurationError: If the encoding is not supported
    """
    if isinstance(value, ImageEncoding):
        return value
    try:
        return ImageEncoding(str(value).lower())
    except ValueError:
        valid = [e.value for e in ImageEncoding]
        raise ConfigurationError(
            f"Invalid image encoding: '{value}'. Valid encodings: {valid}"
        )


@dataclass(frozen=True, eq=False)
class RawImage:
    """
    Decoded, orientation-normalized pixel buffer.

    Attributes:
        pixels: uint8 array shaped (H, W), (H, W, 3) or (H, W, 4);
            a fourth channel is alpha and is ignored by the analysis
        channel_order: 'BGR' (OpenCV decode order) or 'RGB'
        source_format: Encoding the buffer was decoded from, if known
    """
    pixels: np.ndarray
    channel_order: str = 'BGR'
    source_format: Optional[ImageEncoding] = None

    def __post_init__(self):
        pixels = self.pixels
        if pixels is None or not isinstance(pixels, np.ndarray) or pixels.size == 0:
            raise ValueError("Input image is empty or None")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Pixel buffer must be uint8, got {pixels.dtype}")
        if pixels.ndim not in (2, 3) or (pixels.ndim == 3 and pixels.shape[2] not in (3, 4)):
            raise ValueError(f"Unsupported pixel buffer shape: {pixels.shape}")
        if self.channel_order not in CHANNEL_ORDERS:
            raise ValueError(
                f"Invalid channel order: '{self.channel_order}'. "
                f"Valid orders: {list(CHANNEL_ORDERS)}"
            )

        frozen = np.array(pixels, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, 'pixels', frozen)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(width, height) of the buffer."""
        return self.width, self.height

    def luminance(self, step: int = 1) -> np.ndarray:
        """
        Per-pixel Rec. 709 luminance as float64.

        lum = 0.2126 R + 0.7152 G + 0.0722 B

        Args:
            step: Keep every step-th row and column. Only the kept pixels
                are converted, so the cost scales with the sample count.
        """
        data = self.pixels[::step, ::step].astype(np.float64)
        if data.ndim == 2:
            r = g = b = data
        elif self.channel_order == 'BGR':
            b, g, r = data[..., 0], data[..., 1], data[..., 2]
        else:
            r, g, b = data[..., 0], data[..., 1], data[..., 2]
        return 0.2126 * r + 0.7152 * g + 0.0722 * b

    def region(self, x: int, y: int, width: int, height: int) -> 'RawImage':
        """Return the sub-image at the given bounds."""
        return RawImage(
            pixels=self.pixels[y:y + height, x:x + width],
            channel_order=self.channel_order,
            source_format=self.source_format,
        )


def _sniff_format(data: bytes) -> Optional[ImageEncoding]:
    """Identify JPEG/PNG payloads from their magic bytes."""
    if data.startswith(_JPEG_MAGIC):
        return ImageEncoding.JPEG
    if data.startswith(_PNG_MAGIC):
        return ImageEncoding.PNG
    return None


def load_image(source: Union[bytes, bytearray, str, Path]) -> RawImage:
    """
    Decode a capture into a RawImage.

    Args:
        source: Encoded image bytes or a path to an image file

    Returns:
        BGR RawImage with EXIF orientation applied

    Raises:
        ImageLoadError: If the file cannot be read or is not a decodable image
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ImageLoadError(f"Failed to read image: {path}") from e
    elif isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        raise ImageLoadError(f"Unsupported image source type: {type(source).__name__}")

    if not data:
        raise ImageLoadError("Image payload is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    pixels = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if pixels is None or pixels.size == 0:
        raise ImageLoadError("File must be an image")

    image = RawImage(pixels=pixels, channel_order='BGR', source_format=_sniff_format(data))
    logger.debug(f"Decoded {image.width}x{image.height} image (format={image.source_format})")
    return image


def encode_image(
    image: RawImage,
    encoding: Union[str, ImageEncoding] = ImageEncoding.JPEG,
    jpeg_quality: int = 95,
) -> bytes:
    """
    Encode a RawImage for upload.

    Args:
        image: Image to encode
        encoding: 'jpeg' or 'png'
        jpeg_quality: JPEG quality (0-100), ignored for PNG

    Returns:
        Encoded image bytes

    Raises:
        ImageLoadError: If OpenCV fails to encode the buffer
    """
    encoding = parse_encoding(encoding)

    pixels = image.pixels
    if pixels.ndim == 3 and image.channel_order == 'RGB':
        code = cv2.COLOR_RGBA2BGRA if pixels.shape[2] == 4 else cv2.COLOR_RGB2BGR
        pixels = cv2.cvtColor(pixels, code)

    if encoding == ImageEncoding.JPEG:
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            pixels = cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
        params = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]
    else:
        params = []

    ok, encoded = cv2.imencode('.' + _EXTENSIONS[encoding], pixels, params)
    if not ok:
        raise ImageLoadError(f"Failed to encode image as {encoding.value}")
    return encoded.tobytes()


def mime_type(encoding: Union[str, ImageEncoding]) -> str:
    """MIME type for an encoding."""
    return _MIME_TYPES[parse_encoding(encoding)]


def processed_filename(original_name: Optional[str], encoding: Union[str, ImageEncoding]) -> str:
    """
    Derive the upload filename of a processed capture.

    "IMG_001.heic" + jpeg -> "IMG_001-crop.jpg"
    """
    encoding = parse_encoding(encoding)
    name = Path(original_name).name if original_name else ''
    stem = name.rsplit('.', 1)[0] if '.' in name else name
    return f"{stem or 'capture'}-crop.{_EXTENSIONS[encoding]}"
