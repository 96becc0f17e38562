"""Define functions that derive approach, retreat, and place poses from object poses.

A single signed vertical offset and a boolean flip parameterize the recurring approach,
    retreat, and place geometry, so no object needs special-cased pose logic.
"""

from __future__ import annotations

import numpy as np

from pick_place.kinematics import Point3D, Pose3D, UnitQuaternion


def translation(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Pose3D:
    """Construct a pure-translation transform."""
    return Pose3D(Point3D(x, y, z), UnitQuaternion.identity())


def rotation_about_x(angle_rad: float) -> Pose3D:
    """Construct a pure-rotation transform about the local x-axis."""
    return Pose3D.from_xyz_rpy(roll_rad=angle_rad)


def compute_above_pose(object_pose: Pose3D, offset_z: float, flip: bool) -> Pose3D:
    """Compute an end-effector pose offset along the object's local z-axis.

    The result is `object_pose @ translate(0, 0, offset_z) @ (rot_x(pi) if flip)`. The flip is
        applied in the already-translated frame, not at the object's origin.

    :param object_pose: Pose of the object (frame o) w.r.t. the reference frame
    :param offset_z: Signed offset (meters) along the object's z-axis
    :param flip: Whether to rotate the result by pi about its local x-axis (gripper facing down)
    :return: Target pose expressed in the object pose's reference frame
    """
    pose = object_pose @ translation(z=offset_z)
    if flip:
        pose = pose @ rotation_about_x(np.pi)
    return pose


def compute_place_pose(object_pose: Pose3D, offset_z: float) -> Pose3D:
    """Compute a placement pose offset along the object's z-axis (typically a negative offset).

    :param object_pose: Pose of the reference object on which to place
    :param offset_z: Signed offset (meters) along the object's z-axis
    :return: Target placement pose
    """
    return compute_above_pose(object_pose, offset_z, flip=False)


def translate_world(pose: Pose3D, dz: float) -> Pose3D:
    """Shift a pose vertically in its reference frame, leaving its orientation untouched.

    Unlike `compute_above_pose`, the translation is composed on the left, so the offset is
        along the reference frame's z-axis rather than the pose's own z-axis.
    """
    shifted = translation(z=dz) @ pose
    shifted.ref_frame = pose.ref_frame
    return shifted


def with_height(pose: Pose3D, z: float) -> Pose3D:
    """Construct a copy of the pose whose position lies at the given height."""
    return translate_world(pose, z - pose.position.z)


def level_pose(pose: Pose3D, z: float | None = None) -> Pose3D:
    """Discard the roll and pitch of a pose, keeping only its yaw about the z-axis.

    :param pose: Pose to be leveled
    :param z: Optional height (meters) to assign to the leveled pose
    :return: Pose with the same x/y, zero roll and pitch, and the original yaw
    """
    height = pose.position.z if z is None else z
    return Pose3D.from_xyz_rpy(
        x=pose.position.x,
        y=pose.position.y,
        z=height,
        yaw_rad=pose.yaw_rad,
        ref_frame=pose.ref_frame,
    )
