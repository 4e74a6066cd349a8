"""Six-digit seven-segment (FND) display."""

from __future__ import annotations

from pathlib import Path

FND_DRIVER_NAME = "/dev/perifnd"
MAX_FND_NUM = 6
FND_DATA_BUFF_LEN = MAX_FND_NUM + 2
TIME_DOT_MASK = 1 << 3


def digits_of(num: int) -> tuple[int, ...]:
    """Return the six least significant decimal digits of ``num``, most significant first."""
    if num < 0:
        raise ValueError("FND cannot show negative numbers")
    return tuple((num // 10 ** power) % 10 for power in range(MAX_FND_NUM - 1, -1, -1))


def _pad(values) -> bytes:
    data = bytes(values)
    return data + bytes(FND_DATA_BUFF_LEN - len(data))


def encode_frame(num: int, dot_mask: int = 0) -> bytes:
    """Build the driver frame: numeric digits, dot flags and valid flags."""
    numeric = _pad(digits_of(num))
    dots = _pad(1 if dot_mask & (1 << i) else 0 for i in range(MAX_FND_NUM))
    valid = _pad([1] * MAX_FND_NUM)
    return numeric + dots + valid


def time_to_fnd_number(ms: int) -> int:
    """Turn milliseconds into an MMSScc number for the display."""
    minutes = (ms // 60000) % 60
    seconds = (ms % 60000) // 1000
    centis = (ms % 1000) // 10
    return minutes * 10000 + seconds * 100 + centis


class FndDisplay:
    """Writes frames to the FND driver, opening it for each update."""

    def __init__(self, path: str | Path = FND_DRIVER_NAME) -> None:
        self.path = Path(path)

    def _write(self, frame: bytes) -> None:
        with open(self.path, "wb", buffering=0) as device:
            device.write(frame)

    def show(self, num: int, dot_mask: int = 0) -> None:
        """Display ``num`` with the dots in ``dot_mask`` lit."""
        self._write(encode_frame(num, dot_mask))

    def show_time(self, ms: int) -> None:
        """Display a running time as minutes.seconds and centiseconds."""
        self.show(time_to_fnd_number(ms), TIME_DOT_MASK)

    def clear(self) -> None:
        """Blank every digit."""
        self._write(bytes(FND_DATA_BUFF_LEN * 3))