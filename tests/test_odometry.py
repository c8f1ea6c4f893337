import math

import numpy as np
import pytest

from rgbdlog.odometry import GroundTruthOdometry, load_trajectory


def _write(tmp_path, lines):
    path = tmp_path / "poses.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_load_identity_rotation_with_translation(tmp_path):
    path = _write(tmp_path, ["100,1,2,3,0,0,0,1"])
    trajectory = load_trajectory(path)
    assert list(trajectory) == [100]
    pose = trajectory[100]
    assert np.allclose(pose[:3, :3], np.identity(3))
    assert np.allclose(pose[:3, 3], [1, 2, 3])
    assert np.allclose(pose[3], [0, 0, 0, 1])


def test_load_quarter_turn_about_z(tmp_path):
    s = math.sin(math.pi / 4)
    path = _write(tmp_path, [f"5,0,0,0,0,0,{s},{s}"])
    pose = load_trajectory(path)[5]
    assert np.allclose(pose[:3, :3], [[0, -1, 0], [1, 0, 0], [0, 0, 1]])


def test_rotation_is_orthonormal(tmp_path):
    q = np.array([0.1, 0.2, 0.3, 0.9])
    q /= np.linalg.norm(q)
    path = _write(tmp_path, ["7,0,0,0," + ",".join(str(v) for v in q)])
    rotation = load_trajectory(path)[7][:3, :3]
    assert np.allclose(rotation @ rotation.T, np.identity(3))
    assert np.isclose(np.linalg.det(rotation), 1.0)


def test_blank_lines_are_skipped(tmp_path):
    path = _write(tmp_path, ["1,0,0,0,0,0,0,1", "", "2,0,0,0,0,0,0,1"])
    assert sorted(load_trajectory(path)) == [1, 2]


def test_malformed_line_raises(tmp_path):
    path = _write(tmp_path, ["1,0,0,0,0,0,0"])
    with pytest.raises(ValueError):
        load_trajectory(path)


def test_non_numeric_field_raises(tmp_path):
    path = _write(tmp_path, ["1,a,0,0,0,0,0,1"])
    with pytest.raises(ValueError):
        load_trajectory(path)


def test_first_call_returns_identity(tmp_path):
    path = _write(tmp_path, ["100,1,2,3,0,0,0,1"])
    odometry = GroundTruthOdometry(path)
    assert np.allclose(odometry.get_transformation(100), np.identity(4))


def test_later_call_converts_basis(tmp_path):
    path = _write(tmp_path, ["100,0,0,0,0,0,0,1", "200,1,2,3,0,0,0,1"])
    odometry = GroundTruthOdometry(path)
    odometry.get_transformation(100)
    pose = odometry.get_transformation(200)
    assert np.allclose(pose[:3, :3], np.identity(3))
    assert np.isclose(np.linalg.norm(pose[:3, 3]), math.sqrt(14))
    assert np.allclose(pose[:3, 3], [-2, -3, 1])


def test_missing_first_timestamp_raises(tmp_path):
    path = _write(tmp_path, ["100,0,0,0,0,0,0,1"])
    odometry = GroundTruthOdometry(path)
    with pytest.raises(KeyError):
        odometry.get_transformation(999)


def test_missing_later_timestamp_raises(tmp_path):
    path = _write(tmp_path, ["100,0,0,0,0,0,0,1"])
    odometry = GroundTruthOdometry(path)
    odometry.get_transformation(100)
    with pytest.raises(KeyError):
        odometry.get_transformation(999)


def test_covariance(tmp_path):
    path = _write(tmp_path, ["1,0,0,0,0,0,0,1"])
    covariance = GroundTruthOdometry(path).get_covariance()
    assert covariance.shape == (6, 6)
    assert np.allclose(np.diag(covariance), [0.1, 0.1, 0.1, 0.5, 0.5, 0.5])
    assert np.count_nonzero(covariance - np.diag(np.diag(covariance))) == 0