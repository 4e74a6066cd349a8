"""Two-line, sixteen-column character LCD."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Sequence

TEXTLCD_DRIVER_NAME = "/dev/peritextlcd"
LINE_NUM = 2
COLUMN_NUM = 16
LINE_BUFF_NUM = COLUMN_NUM + 4

CMD_WRITE_STRING = 0x20
CMD_DATA_WRITE_LINE_1 = 1
CMD_DATA_WRITE_LINE_2 = 2

MAX_LIVES = 3


def _line_bytes(text: str) -> bytes:
    data = text.encode("ascii", errors="replace")[:COLUMN_NUM]
    return data + bytes(LINE_BUFF_NUM - len(data))


def _frame(line: int, rows: Sequence[str]) -> bytes:
    if line not in (CMD_DATA_WRITE_LINE_1, CMD_DATA_WRITE_LINE_2):
        raise ValueError(f"line must be 1 or 2, not {line}")
    header = bytes([CMD_WRITE_STRING, line, 0, 0])
    return header + b"".join(_line_bytes(row) for row in rows)


def encode_line(line: int, text: str) -> bytes:
    """Build the driver frame that writes ``text`` to ``line`` (1 or 2)."""
    rows = ["", ""]
    if line in (CMD_DATA_WRITE_LINE_1, CMD_DATA_WRITE_LINE_2):
        rows[line - 1] = text
    return _frame(line, rows)


def lives_banner(lives: int) -> str:
    """Show remaining lives as '@' marks on a blank sixteen-column row."""
    marks = "@" * min(max(lives, 0), COLUMN_NUM)
    return marks.ljust(COLUMN_NUM)


class TextLcd:
    """Writes two lines of text to the LCD driver."""

    def __init__(self, path: str | Path = TEXTLCD_DRIVER_NAME) -> None:
        self.path = Path(path)

    def write(self, line1: str, line2: str) -> None:
        """Show ``line1`` on the top row and ``line2`` on the bottom row."""
        with open(self.path, "r+b", buffering=0) as device:
            device.write(_frame(CMD_DATA_WRITE_LINE_1, [line1, ""]))
            device.write(_frame(CMD_DATA_WRITE_LINE_2, [line1, line2]))


def run_lives_demo(
    lcd: TextLcd,
    lives: int = MAX_LIVES,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Count the lives down on the LCD, then show GAME OVER."""
    while lives > 0:
        lcd.write("life", lives_banner(lives))
        sleep(2)
        lives -= 1
    lcd.write("life", lives_banner(0))
    sleep(1)
    lcd.write("GAME", "OVER")
    sleep(2)