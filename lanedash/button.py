"""Push buttons read from a Linux input event device."""

from __future__ import annotations

import enum
import queue
import struct
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable

INPUT_DEVICE_LIST = "/dev/input/event"
PROBE_FILE = "/proc/bus/input/devices"
DEVICE_NAME_LINE = 'N: Name="ecube-button"'
HANDLERS_PREFIX = "H: Handlers=kbd event"

EV_KEY = 1
EVENT_STRUCT = struct.Struct("@llHHi")


class Key(enum.IntEnum):
    """Key codes sent by the board's buttons."""

    HOME = 102
    VOLUMEDOWN = 114
    VOLUMEUP = 115
    MENU = 139
    BACK = 158
    SEARCH = 217


@dataclass(frozen=True)
class ButtonEvent:
    """A key press taken from the input device."""

    key: int
    pressed: bool = True


def _as_key(code: int) -> int:
    try:
        return Key(code)
    except ValueError:
        return code


def probe_button_device(lines: Iterable[str]) -> str | None:
    """Find the button's event device path in the input device listing."""
    found = False
    number = 0
    for line in lines:
        if line.rstrip("\n") == DEVICE_NAME_LINE:
            found = True
        if found and line.lower().startswith(HANDLERS_PREFIX.lower()):
            digit = line[-3] if len(line) >= 3 else ""
            if not digit.isdigit():
                raise ValueError(f"cannot read event number from {line!r}")
            number = int(digit)
            break
    if not found:
        return None
    return f"{INPUT_DEVICE_LIST}{number}"


def decode_event(data: bytes) -> ButtonEvent | None:
    """Decode one raw input event; return it only if it is a key press."""
    if len(data) != EVENT_STRUCT.size:
        raise ValueError(
            f"input event must be {EVENT_STRUCT.size} bytes, got {len(data)}"
        )
    _sec, _usec, ev_type, code, value = EVENT_STRUCT.unpack(data)
    if ev_type != EV_KEY or value != 1:
        return None
    return ButtonEvent(_as_key(code), True)


class ButtonReader:
    """Reads key presses in a background thread and queues them for polling."""

    def __init__(
        self,
        device_path: str | Path | None = None,
        probe_file: str | Path = PROBE_FILE,
    ) -> None:
        self.device_path = Path(device_path) if device_path is not None else None
        self.probe_file = Path(probe_file)
        self._events: queue.Queue[ButtonEvent] = queue.Queue()
        self._device: BinaryIO | None = None
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    def _resolve_path(self) -> Path:
        if self.device_path is not None:
            return self.device_path
        with open(self.probe_file) as listing:
            found = probe_button_device(listing)
        if found is None:
            raise FileNotFoundError("button device not found; is the driver loaded?")
        self.device_path = Path(found)
        return self.device_path

    def _run(self, device: BinaryIO) -> None:
        while not self._stop.is_set():
            try:
                data = device.read(EVENT_STRUCT.size)
            except (OSError, ValueError):
                return
            if len(data) < EVENT_STRUCT.size:
                return
            event = decode_event(data)
            if event is not None:
                self._events.put(event)

    def start(self) -> None:
        """Open the button device and start reading events."""
        if self._thread is not None:
            raise RuntimeError("button reader is already running")
        path = self._resolve_path()
        self._device = open(path, "rb", buffering=0)
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, args=(self._device,), name="buttons", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop reading and close the device."""
        self._stop.set()
        if self._device is not None:
            self._device.close()
            self._device = None
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

    def poll(self) -> ButtonEvent | None:
        """Return the oldest pending key press, or None if there is none."""
        try:
            return self._events.get_nowait()
        except queue.Empty:
            return None