"""Terminal rendering of pairing QR codes."""

from __future__ import annotations

import qrcode

_FULL = "█"
_UPPER = "▀"
_LOWER = "▄"
_BLANK = " "


def _qr_matrix(text: str, border: int = 2) -> list[list[bool]]:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=1,
        border=max(0, border),
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr.get_matrix()


def render_qr_ascii(text: str) -> str:
    """Render ``text`` as a QR code using half-block characters.

    Two matrix rows share one terminal line, which keeps the code square
    in most fonts.
    """
    matrix = _qr_matrix(text)
    if not matrix:
        return text
    width = len(matrix[0])
    lines: list[str] = []
    for y in range(0, len(matrix), 2):
        top = matrix[y]
        bottom = matrix[y + 1] if y + 1 < len(matrix) else [False] * width
        row: list[str] = []
        for x in range(width):
            if top[x] and bottom[x]:
                row.append(_FULL)
            elif top[x]:
                row.append(_UPPER)
            elif bottom[x]:
                row.append(_LOWER)
            else:
                row.append(_BLANK)
        lines.append("".join(row))
    return "\n".join(lines)
