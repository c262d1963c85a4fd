"""Image processing: JPEG encoding of captured frames, decoding pushed frames."""

from io import BytesIO

from PIL import Image


def decode_image(data: bytes) -> Image.Image:
    """Open image bytes and force a full decode. Raises OSError on bad data."""
    img = Image.open(BytesIO(data))
    img.load()
    return img


def encode_jpeg(img: Image.Image, quality: int = 90) -> bytes:
    """Encode an image as JPEG bytes at the given quality (1-95)."""
    # JPEG has no alpha or palette
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = BytesIO()
    img.save(buf, "JPEG", quality=quality)
    return buf.getvalue()
