"""Define dataclasses to represent 3D positions, orientations, and rigid transforms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
from transforms3d.euler import euler2quat, quat2euler
from transforms3d.quaternions import mat2quat, qconjugate, qmult, quat2mat, rotate_vector

Configuration = Dict[str, float]  # Ordered map from joint names to positions (rad or m)

DEFAULT_FRAME = "base_link"


@dataclass
class Point3D:
    """An (x,y,z) position in 3D space."""

    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> Point3D:
        """Construct a Point3D corresponding to the identity translation."""
        return Point3D(0.0, 0.0, 0.0)

    def to_array(self) -> np.ndarray:
        """Convert the point to a NumPy array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Point3D:
        """Construct a Point3D from the given NumPy array."""
        assert arr.shape == (3,), "3D position must be a three-element vector."
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def approx_equal(self, other: Point3D, atol: float = 1e-8) -> bool:
        """Check whether another point is approximately equal to this point."""
        return bool(np.allclose(self.to_array(), other.to_array(), atol=atol))


@dataclass
class UnitQuaternion:
    """A unit quaternion representing a 3D orientation."""

    w: float  # Scalar component of the quaternion
    x: float  # x-component of the quaternion vector
    y: float  # y-component of the quaternion vector
    z: float  # z-component of the quaternion vector

    def __post_init__(self) -> None:
        """Normalize the quaternion after it is initialized."""
        self.normalize()

    def normalize(self) -> None:
        """Normalize the quaternion to ensure that it is a unit quaternion."""
        norm = float(np.linalg.norm(self.to_array()))
        assert norm > 0, f"Cannot normalize near-zero quaternion: {self}."

        self.w = float(self.w / norm)
        self.x = float(self.x / norm)
        self.y = float(self.y / norm)
        self.z = float(self.z / norm)

    @classmethod
    def identity(cls) -> UnitQuaternion:
        """Construct a quaternion corresponding to the identity rotation."""
        return UnitQuaternion(w=1.0, x=0.0, y=0.0, z=0.0)

    def to_array(self) -> np.ndarray:
        """Convert the quaternion to a NumPy array of the form [w,x,y,z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> UnitQuaternion:
        """Construct a quaternion from a NumPy array of the form [w,x,y,z]."""
        assert arr.shape == (4,), "Quaternion must be a four-element vector."
        return cls(arr[0], arr[1], arr[2], arr[3])

    def to_euler_rpy(self) -> tuple[float, float, float]:
        """Convert the quaternion to Euler roll, pitch, and yaw angles.

        :return: Tuple of (roll, pitch, yaw) angles in radians
        """
        r, p, y = quat2euler(self.to_array(), axes="sxyz")
        return (float(r), float(p), float(y))

    @classmethod
    def from_euler_rpy(cls, roll_rad: float, pitch_rad: float, yaw_rad: float) -> UnitQuaternion:
        """Construct a quaternion from three fixed-frame Euler angles.

        Note: We use the axes "sxyz", meaning roll, then pitch, then yaw, all in a fixed frame.

        :param roll_rad: Roll angle about the x-axis (radians)
        :param pitch_rad: Pitch angle about the y-axis (radians)
        :param yaw_rad: Yaw angle about the z-axis (radians)
        :return: Unit quaternion corresponding to the Euler angles
        """
        return cls.from_array(euler2quat(roll_rad, pitch_rad, yaw_rad, axes="sxyz"))

    def to_rotation_matrix(self) -> np.ndarray:
        """Convert the quaternion to a 3x3 rotation matrix."""
        return quat2mat(self.to_array())

    @classmethod
    def from_rotation_matrix(cls, r_matrix: np.ndarray) -> UnitQuaternion:
        """Construct a quaternion from a 3x3 rotation matrix."""
        assert r_matrix.shape == (3, 3), f"Expected a 3x3 matrix; received {r_matrix.shape}."
        return cls.from_array(mat2quat(r_matrix))  # transforms3d quaternions are [w, x, y, z]

    def __mul__(self, other: UnitQuaternion) -> UnitQuaternion:
        """Compose this rotation with another (Hamilton product, self applied last)."""
        return UnitQuaternion.from_array(qmult(self.to_array(), other.to_array()))

    def conjugate(self) -> UnitQuaternion:
        """Compute the inverse rotation of this unit quaternion."""
        return UnitQuaternion.from_array(qconjugate(self.to_array()))

    def rotate(self, vector: np.ndarray) -> np.ndarray:
        """Rotate a 3-vector by this quaternion."""
        return rotate_vector(vector, self.to_array())

    def approx_equal(self, other: UnitQuaternion, atol: float = 1e-8) -> bool:
        """Check whether another quaternion is approximately equal to this one.

        Note: A quaternion is considered equal to its negation, which expresses the same rotation.
        """
        self_array = self.to_array()
        other_array = other.to_array()

        pos_case = np.allclose(self_array, other_array, atol=atol)
        neg_case = np.allclose(-self_array, other_array, atol=atol)

        return bool(pos_case or neg_case)


@dataclass
class Pose3D:
    """A position and orientation in 3D space, also used as a rigid transform."""

    position: Point3D
    orientation: UnitQuaternion
    ref_frame: str = DEFAULT_FRAME  # Frame of reference for the pose

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def z(self) -> float:
        return self.position.z

    @property
    def yaw_rad(self) -> float:
        """Retrieve the Pose3D's yaw about the z-axis (in radians)."""
        _, _, yaw_rad = self.orientation.to_euler_rpy()
        return yaw_rad

    @classmethod
    def identity(cls, ref_frame: str = DEFAULT_FRAME) -> Pose3D:
        """Construct a Pose3D corresponding to the identity transformation."""
        return Pose3D(Point3D.identity(), UnitQuaternion.identity(), ref_frame)

    def __matmul__(self, other: Pose3D) -> Pose3D:
        """Compose this transform with another, where `other` is expressed in this pose's frame.

        The composition is t = t_self + R_self * t_other and q = q_self * q_other. It is not
            commutative: `a @ b` and `b @ a` generally differ.
        """
        offset = self.orientation.rotate(other.position.to_array())
        position = Point3D.from_array(self.position.to_array() + offset)
        orientation = self.orientation * other.orientation
        return Pose3D(position, orientation, self.ref_frame)  # Result keeps the leftmost frame

    def inverse(self, ref_frame: str) -> Pose3D:
        """Compute the pose corresponding to the inverse transformation of this pose.

        :param ref_frame: Reference frame used for the resulting pose
        :return: Inverse transformation of this pose w.r.t. the reference frame
        """
        inv_rotation = self.orientation.conjugate()
        inv_position = -inv_rotation.rotate(self.position.to_array())
        return Pose3D(Point3D.from_array(inv_position), inv_rotation, ref_frame)

    def to_xyz_rpy(self) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Convert the pose into the corresponding (x, y, z) and (roll, pitch, yaw) tuples.

        :return: Pair of tuples (x, y, z) and (roll, pitch, yaw) with angles in radians
        """
        xyz = (self.position.x, self.position.y, self.position.z)
        rpy = self.orientation.to_euler_rpy()
        return (xyz, rpy)

    @classmethod
    def from_xyz_rpy(
        cls,
        x: float = 0.0,
        y: float = 0.0,
        z: float = 0.0,
        roll_rad: float = 0.0,
        pitch_rad: float = 0.0,
        yaw_rad: float = 0.0,
        ref_frame: str = DEFAULT_FRAME,
    ) -> Pose3D:
        """Construct a Pose3D from the given XYZ coordinates and RPY angles.

        :param x: Translation's x-coordinate
        :param y: Translation's y-coordinate
        :param z: Translation's z-coordinate
        :param roll_rad: Fixed-frame roll angle (radians) about the x-axis
        :param pitch_rad: Fixed-frame pitch angle (radians) about the y-axis
        :param yaw_rad: Fixed-frame yaw angle (radians) about the z-axis
        :param ref_frame: Reference frame of the constructed pose
        :return: Pose3D constructed using the given values
        """
        position = Point3D(x, y, z)
        orientation = UnitQuaternion.from_euler_rpy(roll_rad, pitch_rad, yaw_rad)

        return cls(position, orientation, ref_frame)

    @classmethod
    def from_list(cls, xyz_rpy: list[float], ref_frame: str = DEFAULT_FRAME) -> Pose3D:
        """Construct a Pose3D from the given list of XYZ-RPY data.

        :param xyz_rpy: List of six floats specifying (x,y,z,roll,pitch,yaw)
        :param ref_frame: Reference frame of the constructed Pose3D
        :return: Pose3D constructed using the given values
        """
        assert len(xyz_rpy) == 6, f"Cannot construct Pose3D from list of length {len(xyz_rpy)}."
        x, y, z, roll, pitch, yaw = xyz_rpy
        return Pose3D.from_xyz_rpy(x, y, z, roll, pitch, yaw, ref_frame)

    @classmethod
    def from_yaml(cls, pose_data: list[float] | dict[str, Any], default_frame: str) -> Pose3D:
        """Construct a Pose3D from YAML data, either an XYZ-RPY list or a dictionary.

        Dictionaries must provide the key "xyz_rpy" and may provide the key "frame".

        :param pose_data: Pose data imported from YAML
        :param default_frame: Reference frame used if the data doesn't specify one
        :return: Constructed Pose3D instance
        :raises: ValueError, if the data has an unrecognized structure
        """
        if isinstance(pose_data, list):
            return Pose3D.from_list(pose_data, ref_frame=default_frame)

        if isinstance(pose_data, dict) and "xyz_rpy" in pose_data:
            ref_frame = pose_data.get("frame", default_frame)
            return Pose3D.from_list(pose_data["xyz_rpy"], ref_frame=ref_frame)

        error = f"Cannot construct a Pose3D from the YAML data: {pose_data}."
        raise ValueError(error)

    def to_homogeneous_matrix(self) -> np.ndarray:
        """Convert the Pose3D to a 4x4 homogeneous transformation matrix."""
        matrix = np.eye(4)
        matrix[:3, :3] = self.orientation.to_rotation_matrix()
        matrix[:3, 3] = [self.position.x, self.position.y, self.position.z]
        return matrix

    @classmethod
    def from_homogeneous_matrix(cls, matrix: np.ndarray, ref_frame: str = DEFAULT_FRAME) -> Pose3D:
        """Construct a Pose3D from a 4x4 homogeneous transformation matrix."""
        assert matrix.shape == (4, 4), f"Expected a 4x4 matrix; received {matrix.shape}."
        position = Point3D(matrix[0, 3], matrix[1, 3], matrix[2, 3])
        orientation = UnitQuaternion.from_rotation_matrix(matrix[:3, :3])
        return cls(position, orientation, ref_frame)

    def approx_equal(self, other: Pose3D, atol: float = 1e-8) -> bool:
        """Check whether another Pose3D is approximately equal to this one."""
        positions_approx_equal = self.position.approx_equal(other.position, atol)
        orientations_approx_equal = self.orientation.approx_equal(other.orientation, atol)
        return positions_approx_equal and orientations_approx_equal
