"""Paints laid-out pages with Pillow and saves them as one multi-page PDF."""

import logging
from io import BytesIO
from typing import List, Sequence

from PIL import Image, ImageDraw

from .fonts import FontBook
from .layout import LineBox, Page, RectBox, TextRun

logger = logging.getLogger(__name__)


def paint_page(page: Page, fonts: FontBook) -> Image.Image:
    scale = fonts.scale
    image = Image.new("RGB", (round(page.width * scale), round(page.height * scale)), "white")
    draw = ImageDraw.Draw(image)

    for box in page.boxes:
        if isinstance(box, RectBox):
            draw.rectangle(
                [box.x * scale, box.y * scale, (box.x + box.width) * scale, (box.y + box.height) * scale],
                outline=box.color,
                fill=box.fill,
                width=max(1, round(box.border * scale)),
            )

    for box in page.boxes:
        if isinstance(box, LineBox):
            draw.line(
                [box.x1 * scale, box.y1 * scale, box.x2 * scale, box.y2 * scale],
                fill=box.color,
                width=max(1, round(box.width * scale)),
            )
        elif isinstance(box, TextRun):
            font, synthetic_bold = fonts.font(box.size, box.bold, box.italic)
            draw.text(
                (box.x * scale, box.y * scale),
                box.text,
                font=font,
                fill=box.color,
                stroke_width=1 if synthetic_bold else 0,
                stroke_fill=box.color,
            )

    return image


def pages_to_pdf(pages: Sequence[Page], fonts: FontBook) -> bytes:
    images: List[Image.Image] = [paint_page(page, fonts) for page in pages]
    buffer = BytesIO()
    try:
        images[0].save(
            buffer,
            format="PDF",
            save_all=True,
            append_images=images[1:],
            resolution=72 * fonts.scale,
        )
    finally:
        for image in images:
            image.close()
    data = buffer.getvalue()
    logger.info(f"Rendered {len(pages)} page(s), {len(data)} bytes")
    return data
