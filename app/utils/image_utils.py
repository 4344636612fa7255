import base64
from io import BytesIO
from typing import Optional, Union, BinaryIO

from PIL import Image, UnidentifiedImageError

from app.config import PHOTO_MAX_SIZE

# -----------------------------
# PHOTO UTILITIES
# -----------------------------

def image_to_data_uri(source: Union[bytes, BinaryIO], max_size: int = PHOTO_MAX_SIZE, quality: int = 85) -> str:
    """
    Converts an uploaded/captured photo into a JPEG data URI small enough to
    live in the students table.

    The image is converted to RGB and shrunk so its longest edge is at most
    `max_size` pixels (aspect ratio kept, never enlarged).
    Raises ValueError if the bytes are not an image.
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)

    try:
        img = Image.open(source).convert("RGB")
    except UnidentifiedImageError as e:
        raise ValueError(f"Not a valid image: {e}") from e

    img.thumbnail((max_size, max_size))

    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def data_uri_to_image(uri: str) -> Image.Image:
    """Decodes a data URI produced by image_to_data_uri."""
    _, _, payload = uri.partition(",")
    return Image.open(BytesIO(base64.b64decode(payload)))


def photo_to_data_uri(*sources: Optional[Union[bytes, BinaryIO]], max_size: int = PHOTO_MAX_SIZE) -> str:
    """Data URI of the first source given (camera capture or upload), "" when none is."""
    for source in sources:
        if source is not None:
            return image_to_data_uri(source, max_size=max_size)
    return ""
