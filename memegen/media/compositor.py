"""
Caption compositing: fetch, validate, draw the top and bottom captions, encode.
"""
from io import BytesIO
from typing import Callable, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from memegen.media.source_fetch import fetch_source
from memegen.media.text_layout import TextPlacement, center_draw
from memegen.shared.config import RenderContext
from memegen.shared.logging_utils import error as log_error
from memegen.specs.common.errors import DecodeError, TooLargeError
from memegen.specs.models.caption import CaptionRequest

OUTPUT_FORMAT = "PNG"


def decode_source(data: bytes, context: RenderContext, key: Optional[str] = None) -> Image.Image:
    """Decode fetched bytes, rejecting oversized images before pixel data is loaded."""
    try:
        source = Image.open(BytesIO(data))
    except Image.DecompressionBombError as exc:
        log_error(key, "decode:bomb", error=str(exc))
        raise TooLargeError(details={"error": str(exc)}) from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        log_error(key, "decode:failed", error=str(exc))
        raise DecodeError(details={"error": str(exc)}) from exc

    width, height = source.size
    if width > context.max_width or height > context.max_height:
        log_error(key, "decode:too_large", width=width, height=height)
        raise TooLargeError(width, height)

    try:
        source.load()
    except (OSError, ValueError, SyntaxError, EOFError) as exc:
        log_error(key, "decode:failed", error=str(exc))
        raise DecodeError(details={"error": str(exc)}) from exc
    return source


def caption_baselines(height: int, context: RenderContext) -> Tuple[int, int]:
    h1 = int(height * context.height_factor)
    return h1, height - h1


def render(
    source: Image.Image,
    req: CaptionRequest,
    context: RenderContext,
    key: Optional[str] = None,
) -> Tuple[Image.Image, TextPlacement, TextPlacement]:
    """Draw both captions onto a fresh copy of ``source``."""
    canvas = Image.new("RGBA", source.size, (0, 0, 0, 0))
    canvas.alpha_composite(source.convert("RGBA"))

    h1, h2 = caption_baselines(canvas.height, context)
    font = context.font(context.font_size_for(canvas.width))
    fill = req.color.rgba
    top = center_draw(canvas, req.top, h1, font, fill, key=key)
    bottom = center_draw(canvas, req.bottom, h2, font, fill, key=key)
    return canvas, top, bottom


def encode_png(canvas: Image.Image) -> bytes:
    buf = BytesIO()
    canvas.save(buf, format=OUTPUT_FORMAT)
    return buf.getvalue()


def generate(
    req: CaptionRequest,
    context: RenderContext,
    fetch: Callable[[str], bytes] = fetch_source,
    key: Optional[str] = None,
) -> bytes:
    """Produce the encoded captioned image for ``req``.

    Raises FetchError, DecodeError or TooLargeError; nothing partial is returned.
    """
    data = fetch(req.source_url)
    source = decode_source(data, context, key=key)
    canvas, _, _ = render(source, req, context, key=key)
    return encode_png(canvas)
