"""Define utility functions for working with ROS packages and resources."""

from __future__ import annotations

from pathlib import Path

import rospy
from rospkg import RosPack, ResourceNotFound

from pick_place.world_model.collision_models import CollisionMesh

PACKAGE_PREFIX = "package://"


def resolve_package_path(relative_path: str) -> Path | None:
    """Resolve a filepath relative to a ROS package.

    For example,
      Input (relative): lwr_pick_n_place/meshes/epingle.stl (or package://lwr_pick_n_place/...)
      Output (absolute): /home/catkin_ws/src/lwr_pick_n_place/meshes/epingle.stl

    :param relative_path: Path to a file, beginning with a ROS package
    :return: Path object containing the full absolute path (or None if path doesn't exist)
    """
    if relative_path.startswith(PACKAGE_PREFIX):
        relative_path = relative_path[len(PACKAGE_PREFIX) :]
    package_name, relative_path = relative_path.split("/", maxsplit=1)

    try:
        package_path = RosPack().get_path(package_name)
    except ResourceNotFound:
        rospy.logerr(f"Could not find the ROS package '{package_name}'.")
        return None

    full_path = Path(package_path, relative_path)

    if not full_path.exists():
        rospy.logerr(f"Could not resolve package-relative filepath: {relative_path}.")
        return None

    return full_path


def load_mesh_resource(mesh: CollisionMesh) -> CollisionMesh:
    """Load the geometry of a mesh referenced by resource name, if it isn't loaded already.

    :raises: FileNotFoundError, if the resource cannot be resolved to an existing file
    """
    if mesh.mesh is not None:
        return mesh

    mesh_path = resolve_package_path(mesh.resource)
    if mesh_path is None:
        raise FileNotFoundError(f"Unable to resolve the mesh resource: {mesh.resource}.")
    return CollisionMesh.from_file(mesh_path, resource=mesh.resource)
