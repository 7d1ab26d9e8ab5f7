"""PIL-based icon renderer for the score overlay."""

from PIL import Image, ImageDraw, ImageFont

FONT_PATHS = [
    "/usr/share/fonts/cantarell/Cantarell-VF.otf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
]

SCORE_FONT_SIZE = 22


def _font(size: int) -> ImageFont.ImageFont:
    for path in FONT_PATHS:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size)


def render_score(
    score: int,
    color: tuple[int, int, int, int] = (255, 255, 255, 255),
    size: tuple[int, int] = (96, 96),
    bg_color: str = "#000000",
) -> Image.Image:
    """Render the score centered on the key in the overlay color."""
    img = Image.new("RGB", size, bg_color)
    # Draw on an RGBA layer so the color's alpha blends with the background
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    draw.text(
        (size[0] // 2, size[1] // 2),
        str(score), font=_font(SCORE_FONT_SIZE), fill=tuple(color), anchor="mm",
    )
    img.paste(layer, (0, 0), layer)
    return img


def render_blank(size: tuple[int, int] = (96, 96), bg_color: str = "#111111") -> Image.Image:
    """Render an unassigned key."""
    return Image.new("RGB", size, bg_color)
