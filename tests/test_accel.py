import time

import pytest

from lanedash.accel import AccelSample, Accelerometer, monitor, parse_sample


@pytest.fixture
def sensor_dir(tmp_path):
    (tmp_path / "enable").write_text("")
    (tmp_path / "data").write_text("5, -6, 7\n")
    return tmp_path


def test_parse_sample_reads_three_axes():
    assert parse_sample("12, -34, 56\n") == (12, -34, 56)


def test_parse_sample_allows_missing_spaces():
    assert parse_sample("1,2,3") == AccelSample(1, 2, 3)


def test_parse_sample_rejects_garbage():
    with pytest.raises(ValueError):
        parse_sample("no data here")


def test_read_once_updates_latest(sensor_dir):
    accel = Accelerometer(sensor_dir)
    assert accel.latest() == (0, 0, 0)
    sample = accel.read_once()
    assert sample == (5, -6, 7)
    assert accel.latest() == sample


def test_read_once_without_data_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Accelerometer(tmp_path).read_once()


def test_start_without_enable_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        Accelerometer(tmp_path).start()


def test_start_and_stop_toggle_enable(sensor_dir):
    accel = Accelerometer(sensor_dir, interval=0.01)
    accel.start()
    try:
        assert (sensor_dir / "enable").read_text() == "1"
        (sensor_dir / "data").write_text("100, 200, 300\n")
        deadline = time.monotonic() + 5
        while accel.latest() != (100, 200, 300) and time.monotonic() < deadline:
            time.sleep(0.01)
        assert accel.latest() == (100, 200, 300)
    finally:
        accel.stop()
    assert (sensor_dir / "enable").read_text() == "0"


def test_start_twice_is_an_error(sensor_dir):
    accel = Accelerometer(sensor_dir, interval=0.01)
    accel.start()
    try:
        with pytest.raises(RuntimeError):
            accel.start()
    finally:
        accel.stop()


def test_monitor_yields_reports(sensor_dir):
    lines = list(monitor(Accelerometer(sensor_dir), count=2, interval=0))
    assert lines == ["Accelerometer Data: X=5, Y=-6, Z=7"] * 2
    assert (sensor_dir / "enable").read_text() == "1"