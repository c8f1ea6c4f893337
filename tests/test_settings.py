import pytest

from rgbdlog.settings import (
    CalibrationError,
    Intrinsics,
    Settings,
    load_calibration,
    parse_settings,
)


def test_defaults_match_source_constants():
    settings = parse_settings([])
    assert settings.confidence == 10.0
    assert settings.depth == 3.0
    assert settings.icp == 10.0
    assert settings.icp_err_thresh == 5e-05
    assert settings.cov_thresh == 1e-05
    assert settings.photo_thresh == 115
    assert settings.fern_thresh == pytest.approx(0.3095)
    assert settings.time_delta == 200
    assert settings.icp_count_thresh == 40000
    assert settings.start == 1
    assert settings.end == 65535
    assert settings.so3 is True
    assert settings.live is True


def test_default_intrinsics():
    settings = parse_settings([])
    assert settings.intrinsics == Intrinsics(528, 528, 320, 240)


def test_numeric_values_are_parsed():
    settings = parse_settings(["-c", "5.5", "-t", "300", "-ic", "1234", "-e", "77"])
    assert settings.confidence == 5.5
    assert settings.time_delta == 300
    assert settings.icp_count_thresh == 1234
    assert settings.end == 77


def test_flags_switch_options():
    settings = parse_settings(["-nso", "-rl", "-fs", "-q", "-fo", "-r", "-ftf", "-f", "-icl"])
    assert settings.so3 is False
    assert settings.reloc and settings.frameskip and settings.quiet
    assert settings.fast_odom and settings.rewind and settings.frame_to_frame_rgb
    assert settings.flip_colors and settings.iclnuim


def test_flags_absent_by_default():
    settings = parse_settings([])
    assert settings.reloc is False
    assert settings.quiet is False
    assert settings.flip_colors is False
    assert settings.open_loop is False


def test_log_file_disables_live():
    settings = parse_settings(["-l", "capture.klg"])
    assert settings.log_file == "capture.klg"
    assert settings.live is False


def test_open_loop_without_pose_file():
    settings = parse_settings(["-o"])
    assert settings.open_loop is True
    assert settings.fusion_time_delta() == (2**31 - 1) // 2


def test_pose_file_prevents_open_loop():
    settings = parse_settings(["-o", "-p", "poses.txt"])
    assert settings.pose_file == "poses.txt"
    assert settings.open_loop is False
    assert settings.fusion_time_delta() == settings.time_delta


def test_fusion_time_delta_closed_loop():
    assert Settings(time_delta=250).fusion_time_delta() == 250


def test_bad_number_raises():
    with pytest.raises(ValueError):
        parse_settings(["-t", "abc"])


def test_missing_value_keeps_default():
    assert parse_settings(["-d"]).depth == 3.0


def test_load_calibration(tmp_path):
    path = tmp_path / "cal.txt"
    path.write_text("500 510 319.5 239.5\n")
    assert load_calibration(path) == Intrinsics(500, 510, 319.5, 239.5)


def test_parse_settings_reads_calibration(tmp_path):
    path = tmp_path / "cal.txt"
    path.write_text("600 601 300 200")
    settings = parse_settings(["-cal", str(path)])
    assert settings.intrinsics == Intrinsics(600, 601, 300, 200)


def test_short_calibration_raises(tmp_path):
    path = tmp_path / "cal.txt"
    path.write_text("500 510\n")
    with pytest.raises(CalibrationError):
        load_calibration(path)


def test_non_numeric_calibration_raises(tmp_path):
    path = tmp_path / "cal.txt"
    path.write_text("a b c d\n")
    with pytest.raises(CalibrationError):
        load_calibration(path)


def test_missing_calibration_file_raises(tmp_path):
    with pytest.raises(OSError):
        load_calibration(tmp_path / "missing.txt")