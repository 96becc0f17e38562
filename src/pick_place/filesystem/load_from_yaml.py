"""Define functions for loading configuration and poses from YAML (without needing ROS)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml

from pick_place.kinematics import DEFAULT_FRAME, Pose3D
from pick_place.logging import log_error, log_info

if TYPE_CHECKING:
    from pathlib import Path


def load_yaml_into_dict(yaml_path: Path) -> dict[str, Any]:
    """Load data from a YAML file into a Python dictionary.

    :param yaml_path: Path to the YAML file to be imported
    :return: Dictionary mapping strings to values (empty if the YAML file is nonexistent/invalid)
    """
    if not yaml_path.exists():
        log_error(f"The YAML path {yaml_path} doesn't exist!")
        return {}

    try:
        with yaml_path.open() as yaml_file:
            yaml_data = yaml.safe_load(yaml_file)
            log_info(f"Loaded data from YAML file: {yaml_path}")

    except yaml.YAMLError as error:
        log_error(f"Failed to load YAML file: {yaml_path}\nError: {error}")
        return {}

    return yaml_data or {}


def load_named_poses(poses_data: dict[str, Any], default_frame: str) -> dict[str, Pose3D]:
    """Load a set of named 3D poses from data imported from YAML.

    :param poses_data: Dictionary mapping object/location names to 3D pose data
    :param default_frame: Reference frame used for any poses without a specified frame
    :return: Map from object/location names to 3D poses
    """
    return {
        name: Pose3D.from_yaml(pose_data, default_frame=default_frame)
        for name, pose_data in poses_data.items()
    }


def load_object_poses(yaml_path: Path) -> dict[str, Pose3D]:
    """Load known object poses from the given YAML file.

    :param yaml_path: Path to a YAML file containing object pose data
    :return: Dictionary mapping object names to their imported 3D poses
    """
    yaml_data = load_yaml_into_dict(yaml_path)
    default_frame = yaml_data.get("default_frame", DEFAULT_FRAME)
    object_poses_data = yaml_data.get("object_poses", {})

    if not object_poses_data:
        log_error(f"Expected to find the key 'object_poses' in YAML file: {yaml_path}")
        return {}

    return load_named_poses(object_poses_data, default_frame)
