"""Upload validation and image decoding helpers."""
from io import BytesIO
from typing import Optional

from PIL import Image
from starlette.datastructures import UploadFile

from errors import ProcessingError, ValidationError


ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp")
REQUIRED_FIELDS = ["person", "dress"]


def check_content_type(field: str, content_type: Optional[str]) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            f"Invalid file type for '{field}'. Only JPEG, PNG and WebP are allowed.",
            field=field,
        )


def check_size(field: str, size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise ValidationError(
            f"File '{field}' is too large ({size} bytes, limit {max_bytes} bytes)",
            field=field,
        )


def validate_upload(field: str, content_type: Optional[str], data: bytes, max_bytes: int) -> None:
    """Reject uploads with a disallowed MIME type, no content or too many bytes.

    Args:
        field: Form field name, used in the error message
        content_type: MIME type declared by the client
        data: Raw file contents
        max_bytes: Per-file size cap

    Raises:
        ValidationError: If the upload is not acceptable
    """
    check_content_type(field, content_type)
    if not data:
        raise ValidationError(f"Uploaded file '{field}' is empty", field=field)
    check_size(field, len(data), max_bytes)


async def read_upload(field: str, upload: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded file without buffering more than the size cap.

    The declared type and, when known, the spooled size are checked before
    anything is read. At most ``max_bytes + 1`` bytes are ever read.

    Raises:
        ValidationError: If the upload is not acceptable
    """
    check_content_type(field, upload.content_type)
    if upload.size is not None:
        check_size(field, upload.size, max_bytes)
    data = await upload.read(max_bytes + 1)
    validate_upload(field, upload.content_type, data, max_bytes)
    return data


def decode_image(image_bytes: bytes, label: str = "image") -> Image.Image:
    """Decode image bytes into a fully loaded PIL image.

    Raises:
        ProcessingError: If the bytes are not a readable image
    """
    try:
        img = Image.open(BytesIO(image_bytes))
        # Image.open is lazy; force the decode so truncated data fails here
        img.load()
    except Exception as e:
        raise ProcessingError(f"Could not decode {label} image: {e}", cause=e) from e
    return img
