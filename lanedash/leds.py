"""Bank of eight on-board LEDs driven through a character device."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO

LED_DRIVER_NAME = "/dev/periled"
LED_COUNT = 8

_WORD = struct.Struct("<I")


class LedBank:
    """Keeps the LED bit mask and writes it to the driver on every change."""

    def __init__(self, path: str | Path = LED_DRIVER_NAME) -> None:
        self.path = Path(path)
        self._value = 0
        self._device: BinaryIO | None = None

    def open(self) -> "LedBank":
        """Open the driver and reset the mask to all LEDs off."""
        self._device = open(self.path, "wb", buffering=0)
        self._value = 0
        return self

    def set(self, index: int, on: bool) -> None:
        """Switch LED ``index`` on or off and push the new mask."""
        if self._device is None:
            raise RuntimeError("LED device is not open")
        mask = 1 << index
        self._value = (self._value & ~mask) & 0xFFFFFFFF
        if on:
            self._value |= mask
        self._device.write(_WORD.pack(self._value & 0xFFFFFFFF))

    def status(self) -> int:
        """Return the current LED bit mask."""
        return self._value

    def close(self) -> None:
        """Turn every LED off and release the driver."""
        if self._device is None:
            return
        self._value = 0
        self.set(0, False)
        self._device.close()
        self._device = None

    def __enter__(self) -> "LedBank":
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()