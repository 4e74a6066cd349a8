"""Piezo buzzer controlled through sysfs attribute files."""

from __future__ import annotations

from pathlib import Path

BUZZER_BASE_SYS_PATH = "/sys/bus/platform/devices/"
BUZZER_FILENAME = "peribuzzer"
BUZZER_ENABLE_NAME = "enable"
BUZZER_FREQUENCY_NAME = "frequency"

MUSIC_SCALE = (262, 294, 330, 349, 392, 440, 494, 523)
MAX_SCALE_STEP = len(MUSIC_SCALE)


class BuzzerNotFoundError(FileNotFoundError):
    """No buzzer device directory was found."""


def note_frequency(scale: int) -> int:
    """Return the frequency of note ``scale`` (1 to 8, do to high do)."""
    if not 1 <= scale <= MAX_SCALE_STEP:
        raise ValueError(f"Invalid scale. It should be 1~{MAX_SCALE_STEP}")
    return MUSIC_SCALE[scale - 1]


def find_buzzer_dir(base: str | Path = BUZZER_BASE_SYS_PATH) -> Path | None:
    """Return the first entry of ``base`` whose name starts with the buzzer name."""
    base = Path(base)
    try:
        names = sorted(entry.name for entry in base.iterdir())
    except FileNotFoundError:
        return None
    for name in names:
        if name.lower().startswith(BUZZER_FILENAME):
            return base / name
    return None


class Buzzer:
    """Plays single notes on the buzzer."""

    def __init__(
        self,
        directory: str | Path | None = None,
        *,
        base: str | Path = BUZZER_BASE_SYS_PATH,
    ) -> None:
        if directory is None:
            directory = find_buzzer_dir(base)
            if directory is None:
                raise BuzzerNotFoundError("Buzzer device not found in sysfs")
        self.directory = Path(directory)

    def enable(self, on: bool) -> None:
        """Switch the buzzer output on or off."""
        (self.directory / BUZZER_ENABLE_NAME).write_text("1" if on else "0")

    def set_frequency(self, frequency: int) -> None:
        """Set the tone frequency in hertz."""
        (self.directory / BUZZER_FREQUENCY_NAME).write_text(str(frequency))

    def play(self, scale: int) -> None:
        """Start sounding note ``scale``."""
        frequency = note_frequency(scale)
        self.set_frequency(frequency)
        self.enable(True)

    def stop(self) -> None:
        """Silence the buzzer."""
        self.enable(False)

    def close(self) -> None:
        """Silence the buzzer before shutting down."""
        self.stop()