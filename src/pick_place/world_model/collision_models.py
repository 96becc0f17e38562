"""Define dataclasses to represent collision objects tracked in the world model."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Tuple, Union

import trimesh

from pick_place.kinematics import Pose3D
from pick_place.logging import log_info

ObjectDims = Tuple[float, float, float]  # Represents object-frame size in (x,y,z)


class ShapeType(Enum):
    """A type of primitive 3D shape.

    Note: The Enum values correspond to the shape_msgs/SolidPrimitive types.

    Reference: https://docs.ros.org/en/noetic/api/shape_msgs/html/msg/SolidPrimitive.html
    """

    BOX = 1
    SPHERE = 2
    CYLINDER = 3
    CONE = 4

    @classmethod
    def from_string(cls, shape_type: str) -> ShapeType:
        """Construct a ShapeType instance based on the given string.

        :param shape_type: String specifying a shape type
        :return: Constructed ShapeType instance
        :raises: ValueError, if the string does not match a recognized shape type
        """
        try:
            return ShapeType[shape_type.upper()]
        except KeyError:
            error = f"[ShapeType.from_string] Unrecognized shape type: '{shape_type}'."
            raise ValueError(error) from None

    @property
    def expected_dims(self) -> int:
        """Retrieve the number of dimensions that characterize this primitive shape type."""
        if self == ShapeType.BOX:
            return 3
        if self == ShapeType.SPHERE:
            return 1
        return 2  # Cylinders and cones: [height, radius]


@dataclass(frozen=True)
class CollisionPrimitive:
    """A primitive 3D shape used as an object's collision geometry."""

    shape_type: ShapeType
    shape_dimensions: tuple[float, ...]  # Numbers characterizing the shape (e.g., radius of sphere)

    def __post_init__(self) -> None:
        """Verify that the primitive has the number of dimensions its shape type expects."""
        expected = self.shape_type.expected_dims
        if len(self.shape_dimensions) != expected:
            num_dims = len(self.shape_dimensions)
            error = f"{self.shape_type} expects {expected} dimensions, not {num_dims}."
            raise ValueError(error)

    @classmethod
    def from_yaml(cls, primitive_data: dict[str, Any]) -> CollisionPrimitive:
        """Construct a CollisionPrimitive instance from a dictionary of YAML data.

        :param primitive_data: Dictionary of collision primitive data imported from YAML
        :return: Constructed CollisionPrimitive instance
        """
        shape_type = ShapeType.from_string(primitive_data["type"])
        return CollisionPrimitive(shape_type, tuple(float(d) for d in primitive_data["dims"]))

    @property
    def dimensions(self) -> ObjectDims:
        """Compute the bounding box size (meters) of the primitive in (x, y, z)."""
        dims = self.shape_dimensions
        if self.shape_type == ShapeType.BOX:  # Box dimensions: [x, y, z]
            return (dims[0], dims[1], dims[2])
        if self.shape_type == ShapeType.SPHERE:  # Sphere dimensions: [radius]
            diameter_m = 2.0 * dims[0]
            return (diameter_m, diameter_m, diameter_m)

        height_m, radius_m = dims  # Cylinder and cone dimensions: [height, radius]
        return (2.0 * radius_m, 2.0 * radius_m, height_m)


@dataclass(frozen=True)
class CollisionMesh:
    """A collision mesh referenced by resource name (e.g., "package://pkg/meshes/part.stl")."""

    resource: str
    mesh: trimesh.Trimesh | None = field(default=None, compare=False)  # Loaded geometry, if any

    @classmethod
    def from_file(cls, mesh_path: Path, resource: str | None = None) -> CollisionMesh:
        """Load a collision mesh from file.

        :param mesh_path: Absolute path to the mesh file
        :param resource: Resource name recorded for the mesh (defaults to the file path)
        :return: Constructed CollisionMesh holding the loaded geometry
        :raises: FileNotFoundError, if the mesh file doesn't exist
        """
        if not mesh_path.exists():
            raise FileNotFoundError(f"Unable to load a mesh from the path: {mesh_path}.")

        mesh = trimesh.load(mesh_path, force="mesh")
        if not isinstance(mesh, trimesh.Trimesh):
            error = f"{mesh_path} imported as unexpected type: {type(mesh)}"
            raise TypeError(error)

        log_info(f"Mesh loaded from path {mesh_path} has {len(mesh.vertices)} vertices.")
        return CollisionMesh(resource=resource or str(mesh_path), mesh=mesh)

    @property
    def dimensions(self) -> ObjectDims:
        """Compute the bounding box size (meters) of the mesh, or zeros if it isn't loaded."""
        if self.mesh is None:
            return (0.0, 0.0, 0.0)
        min_bounds, max_bounds = self.mesh.bounds
        x, y, z = (max_bounds - min_bounds).tolist()
        return (x, y, z)


Geometry = Union[CollisionPrimitive, CollisionMesh]


class ObjectOperation(Enum):
    """An operation applied to a collision object (values match moveit_msgs/CollisionObject)."""

    ADD = 0
    REMOVE = 1


@dataclass(frozen=True)
class CollisionObject:
    """A named geometric entity (obstacle or target) tracked in the world model."""

    object_id: str
    geometry: Geometry
    pose: Pose3D
    operation: ObjectOperation = ObjectOperation.ADD

    def with_operation(self, operation: ObjectOperation) -> CollisionObject:
        """Construct a copy of the object tagged with the given operation."""
        return replace(self, operation=operation)

    def with_pose(self, pose: Pose3D) -> CollisionObject:
        """Construct a copy of the object placed at the given pose."""
        return replace(self, pose=pose)


@dataclass(frozen=True)
class AttachedObject:
    """A collision object rigidly bound to a robot link, moving with the arm."""

    link_name: str
    obj: CollisionObject

    @property
    def object_id(self) -> str:
        return self.obj.object_id

    @property
    def operation(self) -> ObjectOperation:
        return self.obj.operation
