"""Define unit tests for the Pose3D class."""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from pick_place.kinematics import DEFAULT_FRAME, Point3D, Pose3D, UnitQuaternion


@st.composite
def draw_pose(draw: st.DrawFn) -> Pose3D:
    """Generate a pose with bounded translation and arbitrary orientation."""
    xyz = [draw(st.floats(min_value=-5.0, max_value=5.0)) for _ in range(3)]
    rpy = [draw(st.floats(min_value=-np.pi, max_value=np.pi)) for _ in range(3)]
    return Pose3D.from_list(xyz + rpy)


def test_pose3d_from_yaml() -> None:
    """Verify that Pose3D instances can be imported from both supported YAML structures."""
    # Arrange: Pose data as it would be imported from YAML
    poses_yaml_data = {
        "pose_a": [3, 2, 1, 0, 0.7854, 0],
        "pose_b": {"xyz_rpy": [0, 2, 1, 0, 0, 0]},
        "pose_c": {"xyz_rpy": [4, 5, 6, 0, 0, 0], "frame": "frame_c"},
    }
    expected_poses: dict[str, Pose3D] = {
        "pose_a": Pose3D.from_list([3, 2, 1, 0, 0.7854, 0], ref_frame=DEFAULT_FRAME),
        "pose_b": Pose3D.from_list([0, 2, 1, 0, 0, 0], ref_frame=DEFAULT_FRAME),
        "pose_c": Pose3D.from_list([4, 5, 6, 0, 0, 0], ref_frame="frame_c"),
    }

    # Act: Convert each pose from YAML data into a Pose3D instance
    loaded_poses = {
        name: Pose3D.from_yaml(pose_data, default_frame=DEFAULT_FRAME)
        for name, pose_data in poses_yaml_data.items()
    }

    # Assert: Verify that the loaded Pose3D instances match the expected values
    for pose_name, expected_pose in expected_poses.items():
        result_pose = loaded_poses[pose_name]
        assert result_pose.approx_equal(expected_pose)
        assert result_pose.ref_frame == expected_pose.ref_frame


def test_pose3d_from_invalid_yaml() -> None:
    with pytest.raises(ValueError):
        Pose3D.from_yaml({"position": [1, 2, 3]}, default_frame=DEFAULT_FRAME)


@given(pose=draw_pose())
def test_compose_with_inverse_is_identity(pose: Pose3D) -> None:
    """Verify that composing a pose with its inverse yields the identity transform."""
    result = pose @ pose.inverse(ref_frame=pose.ref_frame)

    assert result.approx_equal(Pose3D.identity(), atol=1e-9)


@given(pose_a=draw_pose(), pose_b=draw_pose())
def test_composition_matches_homogeneous_matrices(pose_a: Pose3D, pose_b: Pose3D) -> None:
    """Verify that pose composition agrees with multiplying homogeneous matrices."""
    expected = pose_a.to_homogeneous_matrix() @ pose_b.to_homogeneous_matrix()

    result = pose_a @ pose_b

    assert np.allclose(result.to_homogeneous_matrix(), expected, atol=1e-9)
    assert Pose3D.from_homogeneous_matrix(expected).approx_equal(result, atol=1e-9)


def test_composition_is_not_commutative() -> None:
    translate = Pose3D.from_xyz_rpy(x=1.0)
    turn = Pose3D.from_xyz_rpy(yaw_rad=np.pi / 2)

    assert (translate @ turn).position.approx_equal(Point3D(1.0, 0.0, 0.0))
    assert (turn @ translate).position.approx_equal(Point3D(0.0, 1.0, 0.0))


def test_quaternion_is_normalized() -> None:
    q = UnitQuaternion(2.0, 0.0, 0.0, 0.0)

    assert q.to_array() == pytest.approx([1.0, 0.0, 0.0, 0.0])
    assert q.approx_equal(UnitQuaternion(-1.0, 0.0, 0.0, 0.0))
