from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from memegen.shared.logging_utils import warning as log_warning


@dataclass(frozen=True)
class TextPlacement:
    x: int
    baseline: int
    measured_width: int
    degraded: bool


def single_line(text: str) -> str:
    """Collapse line breaks so a caption is always one centered line."""
    return " ".join(text.splitlines())


def measure_text(text: str, font: ImageFont.FreeTypeFont) -> int:
    """Advance width of ``text`` in whole pixels.

    Measured on a 1x1 scratch surface so the real canvas is never touched.
    """
    scratch = Image.new("RGBA", (1, 1))
    return int(ImageDraw.Draw(scratch).textlength(single_line(text), font=font))


def center_draw(
    surface: Image.Image,
    text: str,
    baseline: int,
    font: ImageFont.FreeTypeFont,
    color: Tuple[int, int, int, int],
    key: Optional[str] = None,
) -> TextPlacement:
    """Draw ``text`` horizontally centered with its baseline at ``baseline``.

    A caption wider than the surface is still drawn (and clipped); the
    placement is flagged as degraded and a warning is logged.
    """
    text = single_line(text)
    width = surface.width
    measured = measure_text(text, font)
    # int() truncates toward zero, also when the caption overflows
    x = int((width - measured) / 2)
    degraded = measured > width
    if degraded:
        log_warning(key, "layout:degraded", surfaceWidth=width, measuredWidth=measured, text=text)

    if text:
        ImageDraw.Draw(surface).text((x, baseline), text, font=font, fill=color, anchor="ls")
    return TextPlacement(x=x, baseline=baseline, measured_width=measured, degraded=degraded)
