"""Three-axis accelerometer exposed through sysfs."""

from __future__ import annotations

import os
import re
import threading
import time
from pathlib import Path
from typing import Iterator, NamedTuple

ACCELPATH = "/sys/class/misc/FreescaleAccelerometer/"
ENABLE_NAME = "enable"
DATA_NAME = "data"
DEFAULT_INTERVAL = 0.1

_SAMPLE_RE = re.compile(r"\s*([+-]?\d+)\s*,\s*([+-]?\d+)\s*,\s*([+-]?\d+)")


class AccelSample(NamedTuple):
    """One reading of the X, Y and Z axes."""

    x: int
    y: int
    z: int

    def describe(self) -> str:
        """Return the reading as a one-line report."""
        return f"Accelerometer Data: X={self.x}, Y={self.y}, Z={self.z}"


def parse_sample(text: str) -> AccelSample:
    """Parse an ``x, y, z`` line from the sensor's data file."""
    match = _SAMPLE_RE.match(text)
    if match is None:
        raise ValueError(f"not an accelerometer sample: {text!r}")
    return AccelSample(*(int(group) for group in match.groups()))


class Accelerometer:
    """Reads the sensor once on demand or continuously in a background thread."""

    def __init__(
        self,
        path: str | Path = ACCELPATH,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.path = Path(path)
        self.interval = interval
        self._latest = AccelSample(0, 0, 0)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def enable(self, on: bool) -> None:
        """Switch the sensor on or off; the enable file must already exist."""
        fd = os.open(self.path / ENABLE_NAME, os.O_WRONLY)
        try:
            os.write(fd, b"1" if on else b"0")
        finally:
            os.close(fd)

    def read_once(self) -> AccelSample:
        """Read one sample from the data file and remember it as the latest."""
        sample = parse_sample((self.path / DATA_NAME).read_text())
        with self._lock:
            self._latest = sample
        return sample

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.read_once()
            except (OSError, ValueError):
                pass
            self._stop.wait(self.interval)

    def start(self) -> None:
        """Enable the sensor and start sampling in the background."""
        if self._thread is not None:
            raise RuntimeError("accelerometer is already running")
        self.enable(True)
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="accelerometer", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop sampling and disable the sensor."""
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
        try:
            self.enable(False)
        except OSError:
            pass

    def latest(self) -> AccelSample:
        """Return the most recent sample (all zeros before the first read)."""
        with self._lock:
            return self._latest


def monitor(
    accelerometer: Accelerometer,
    count: int | None = None,
    interval: float = DEFAULT_INTERVAL,
) -> Iterator[str]:
    """Enable the sensor and yield a report line per reading, ``count`` times or forever."""
    accelerometer.enable(True)
    taken = 0
    while count is None or taken < count:
        yield accelerometer.read_once().describe()
        taken += 1
        if interval > 0 and (count is None or taken < count):
            time.sleep(interval)