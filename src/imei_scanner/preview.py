"""
Preview image generator: draws detected regions and found IMEIs on a frame.
"""

from pathlib import Path
from typing import Dict, Iterable, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .frame import Frame, Region


# ---------------------------------------------------------------------------
# Colour palette  (R, G, B)
# ---------------------------------------------------------------------------
_LABEL_COLORS: Dict[str, Tuple[int, int, int]] = {
    "text":  (56, 142, 60),    # green
    "table": (239, 108, 0),    # orange
    "title": (41, 98, 255),    # blue
}
_DEFAULT_COLOR = (100, 100, 100)
_IMEI_COLOR = (211, 47, 47)     # red

# Fill opacity (0-255)
_FILL_ALPHA = 40
_BORDER_WIDTH = 3


def _get_color(label: str) -> Tuple[int, int, int]:
    return _LABEL_COLORS.get((label or "").lower(), _DEFAULT_COLOR)


def _load_font(size: int) -> ImageFont.ImageFont:
    """Try to load a reasonable font; fall back to the default bitmap font."""
    candidates = [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default()


def annotate_frame(
    frame: Frame,
    regions: Sequence[Region],
    imeis: Iterable[str] = (),
) -> Image.Image:
    """Draw region boxes with "label (confidence%)" tags, and list ``imeis`` at the top.

    Returns a new RGB image; the frame itself is untouched.
    """
    base = frame.to_image().convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = _load_font(18)

    for region in regions:
        x1, y1, x2, y2 = region.bbox
        color = _get_color(region.label)
        draw.rectangle([x1, y1, x2 - 1, y2 - 1], fill=(*color, _FILL_ALPHA))
        for i in range(_BORDER_WIDTH):
            draw.rectangle([x1 + i, y1 + i, x2 - 1 - i, y2 - 1 - i], outline=(*color, 200))

        tag = f"{region.label} ({region.confidence:.0%})"
        tbox = draw.textbbox((0, 0), tag, font=font)
        tw, th = tbox[2] - tbox[0], tbox[3] - tbox[1]
        draw.rectangle([x1, y1, x1 + tw + 8, y1 + th + 6], fill=(*color, 180))
        draw.text((x1 + 4, y1 + 2), tag, fill=(255, 255, 255, 240), font=font)

    text_y = 4
    for imei in imeis:
        tbox = draw.textbbox((0, 0), imei, font=font)
        draw.rectangle([4, text_y, 12 + tbox[2] - tbox[0], text_y + tbox[3] - tbox[1] + 6],
                       fill=(*_IMEI_COLOR, 200))
        draw.text((8, text_y + 2), imei, fill=(255, 255, 255, 255), font=font)
        text_y += tbox[3] - tbox[1] + 10

    return Image.alpha_composite(base, overlay).convert("RGB")


def save_preview(
    frame: Frame,
    regions: Sequence[Region],
    output_path: Union[str, Path],
    imeis: Iterable[str] = (),
) -> Path:
    """Annotate ``frame`` and write it to ``output_path`` (format from suffix)."""
    output_path = Path(output_path)
    annotate_frame(frame, regions, imeis).save(output_path)
    return output_path
