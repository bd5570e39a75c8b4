"""Campus Wrapped share card — the outro summary as a single image.

Layout (1080×1920, phone screen):
- Header with label and college name
- Tile grid: favourite dish full width, then six half-width metric tiles
- Footer
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from campus_wrapped.models import StatRecord
from campus_wrapped.story import format_inr

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"


def _font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    path = _FONT_BOLD if bold else _FONT_REGULAR
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        # DejaVu missing (minimal containers): Pillow's bundled font
        return ImageFont.load_default(size)


# --- Colors ---

BG = (252, 128, 25)        # swiggy orange
CARD_BG = (255, 255, 255)
TILE_BG = (255, 243, 232)
TEXT = (40, 44, 63)
TEXT_DIM = (125, 126, 139)
ACCENT = (252, 128, 25)

W, H = 1080, 1920
PAD = 60


def card_tiles(record: StatRecord) -> list[tuple[str, str]]:
    """(label, value) pairs in card order; first tile spans both columns."""
    s = record.stats
    return [
        ("FAVOURITE DISH", s.favourite_dish.upper()),
        ("12 AM CRAVING", s.official_12am_craving.upper()),
        ("CAMPUS FAVOURITE RESTAURANT", s.unofficial_favorite_restaurant),
        ("HIGHEST SPEND ORDER", format_inr(s.largest_order_value)),
        ("MAX ORDERS BY A STUDENT (WEEK)", str(s.max_orders_in_a_week)),
        ("MAX PIZZAS IN A DAY", str(s.max_pizzas_single_day)),
        ("MAX BIRYANI-S IN A DAY", str(s.max_biryanis_single_day)),
    ]


def _fit(draw: ImageDraw.ImageDraw, text: str, font, max_w: int) -> str:
    """Truncate text with an ellipsis until it fits max_w pixels."""
    if draw.textlength(text, font=font) <= max_w:
        return text
    while text and draw.textlength(text + "…", font=font) > max_w:
        text = text[:-1]
    return text + "…"


def _draw_tile(
    draw: ImageDraw.ImageDraw,
    label: str, value: str,
    x0: int, y0: int, w: int, h: int,
    centered: bool = False,
) -> None:
    draw.rounded_rectangle((x0, y0, x0 + w, y0 + h), radius=18, fill=TILE_BG)

    label_font = _font(18, bold=True)
    value_font = _font(38 if centered else 32, bold=True)
    label = _fit(draw, label, label_font, w - 32)
    value = _fit(draw, value, value_font, w - 32)

    if centered:
        lw = draw.textlength(label, font=label_font)
        vw = draw.textlength(value, font=value_font)
        draw.text((x0 + (w - lw) / 2, y0 + 24), label, font=label_font, fill=TEXT_DIM)
        draw.text((x0 + (w - vw) / 2, y0 + 60), value, font=value_font, fill=ACCENT)
    else:
        draw.text((x0 + 16, y0 + 20), label, font=label_font, fill=TEXT_DIM)
        draw.text((x0 + 16, y0 + h - 62), value, font=value_font, fill=TEXT)


def render_share_card(record: StatRecord, output_path: Path) -> Path:
    """Render the outro summary card for record to output_path (PNG)."""
    img = Image.new("RGB", (W, H), BG)
    draw = ImageDraw.Draw(img)

    card_x0, card_y0 = PAD, 160
    card_x1, card_y1 = W - PAD, H - 260
    draw.rounded_rectangle((card_x0, card_y0, card_x1, card_y1), radius=36, fill=CARD_BG)

    inner = 40
    x = card_x0 + inner
    y = card_y0 + inner
    inner_w = (card_x1 - card_x0) - 2 * inner

    # === HEADER ===
    draw.text((x, y), "SWIGGY CAMPUS WRAPPED", font=_font(22, bold=True), fill=ACCENT)
    y += 44
    title_font = _font(56, bold=True)
    draw.text((x, y), _fit(draw, record.college_name.upper(), title_font, inner_w), font=title_font, fill=TEXT)
    y += 100

    # === TILES ===
    tiles = card_tiles(record)
    gap = 20
    col_w = (inner_w - gap) // 2
    tile_h = 170

    label, value = tiles[0]
    _draw_tile(draw, label, value, x, y, inner_w, tile_h, centered=True)
    y += tile_h + gap

    for i, (label, value) in enumerate(tiles[1:]):
        col = i % 2
        tx = x + col * (col_w + gap)
        _draw_tile(draw, label, value, tx, y, col_w, tile_h)
        if col == 1:
            y += tile_h + gap

    # === FOOTER ===
    footer = "Swiggy • Campus Wrapped 2025"
    footer_font = _font(22)
    fw = draw.textlength(footer, font=footer_font)
    draw.text(((W - fw) / 2, card_y1 - inner - 24), footer, font=footer_font, fill=TEXT_DIM)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(output_path))
    logger.info("Share card for %s: %s", record.poi_id, output_path)
    return output_path
