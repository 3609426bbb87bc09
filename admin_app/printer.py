"""Receipt reprinting on the USB thermal printer."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from admin_app.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from admin_app.models import Order
from admin_app.rendering import format_money, format_order_type, order_number_label

logger = logging.getLogger(__name__)

# Extra vertical headroom so descenders are not clipped on thermal output.
_LINE_EXTRA_PX = 14
_RULE_HEIGHT_PX = 12
_RULE_THICKNESS_PX = 3
_RULE_TOKEN = "__RULE__"
_FONT_OVERRIDE_ENV = "RECEIPT_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path.

    Resolution order:
    1. RECEIPT_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether the printer driver and a font are usable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont
        font_path = resolve_printer_font_path()
        ImageFont.truetype(font_path, max(10, PRINTER_FONT_SIZE // 2))
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def receipt_lines(order: Order, branch_name: str) -> list[str]:
    """Text lines of a customer receipt, rules marked with a token."""
    lines = [branch_name, order_number_label(order)]
    if order.timestamp is not None:
        lines.append(f"{order.timestamp.astimezone():%Y-%m-%d %H:%M}")
    lines.append(format_order_type(order.order_type))
    lines.append(_RULE_TOKEN)

    for item in order.items:
        lines.append(f"{item.quantity} x {item.name}")
        lines.append(f"    {format_money(item.line_total)}")

    lines.append(_RULE_TOKEN)
    if order.delivery_fee:
        lines.append(f"Delivery {format_money(order.delivery_fee)}")
    lines.append(f"TOTAL {format_money(order.total_amount)}")
    return lines


def _render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    text = _fit_text_to_px(text, font, PRINTER_WIDTH_PX - 2 * PRINTER_LEFT_INDENT_PX)

    bbox = draw.textbbox((0, 0), text, font=font)
    text_height = bbox[3] - bbox[1]

    x = PRINTER_LEFT_INDENT_PX
    # Offset by bbox top so descenders (g, y, p, etc.) are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((x, y), text, font=font, fill=0)
    return img


def _render_rule() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _RULE_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = (_RULE_HEIGHT_PX - _RULE_THICKNESS_PX) // 2
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _RULE_THICKNESS_PX - 1), fill=0)
    return img


def _fit_text_to_px(text: str, font: object, max_width_px: int) -> str:
    from PIL import Image, ImageDraw

    probe = Image.new("1", (1, 1), color=1)
    draw = ImageDraw.Draw(probe)
    if draw.textbbox((0, 0), text, font=font)[2] <= max_width_px:
        return text
    ellipsis = "..."
    trimmed = text
    while trimmed:
        candidate = f"{trimmed}{ellipsis}"
        if draw.textbbox((0, 0), candidate, font=font)[2] <= max_width_px:
            return candidate
        trimmed = trimmed[:-1]
    return ellipsis


def print_receipt(order: Order, branch_name: str) -> None:
    """Print the order receipt and cut the ticket at the end."""
    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    font_path = resolve_printer_font_path()
    font = ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    title_font = ImageFont.truetype(font_path, PRINTER_FONT_SIZE + 8)

    for idx, line in enumerate(receipt_lines(order, branch_name)):
        if line == _RULE_TOKEN:
            printer.image(_render_rule())
            continue
        printer.image(_render_line(line, title_font if idx < 2 else font))

    printer.cut()
    logger.info("receipt printed order=%s", order.order_id)
