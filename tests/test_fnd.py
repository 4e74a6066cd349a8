import pytest

from lanedash.fnd import (
    FndDisplay,
    digits_of,
    encode_frame,
    time_to_fnd_number,
)


def test_digits_of_six_digits():
    assert digits_of(123456) == (1, 2, 3, 4, 5, 6)


def test_digits_of_keeps_low_six_digits():
    assert digits_of(1234567) == (2, 3, 4, 5, 6, 7)


def test_digits_of_negative_raises():
    with pytest.raises(ValueError):
        digits_of(-1)


def test_encode_frame_layout():
    frame = encode_frame(123456, 1 << 3)
    assert len(frame) == 24
    assert frame[0:6] == bytes(digits_of(123456))
    assert list(frame[8:14]) == [0, 0, 0, 1, 0, 0]
    assert frame[16:22] == b"\x01" * 6
    assert frame[6:8] == frame[14:16] == frame[22:24] == b"\x00\x00"


def test_time_to_fnd_number_example():
    assert time_to_fnd_number(61_230) == 10123
    assert time_to_fnd_number(0) == 0


@pytest.mark.parametrize("ms", [0, 999, 59_999, 3_599_999, 7_200_000])
def test_time_number_fits_display(ms):
    number = time_to_fnd_number(ms)
    minutes, seconds, centis = number // 10000, (number // 100) % 100, number % 100
    assert minutes < 60 and seconds < 60 and centis < 100


def test_show_writes_frame(tmp_path):
    path = tmp_path / "fnd"
    FndDisplay(path).show(42, 1)
    assert path.read_bytes() == encode_frame(42, 1)


def test_show_time_uses_time_dot(tmp_path):
    path = tmp_path / "fnd"
    FndDisplay(path).show_time(61_230)
    assert path.read_bytes() == encode_frame(time_to_fnd_number(61_230), 1 << 3)


def test_clear_writes_zero_frame(tmp_path):
    path = tmp_path / "fnd"
    display = FndDisplay(path)
    display.show(1)
    display.clear()
    assert path.read_bytes() == bytes(24)


def test_missing_device_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FndDisplay(tmp_path / "missing" / "fnd").show(1)