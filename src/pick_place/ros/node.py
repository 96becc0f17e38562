"""Define the assembly of the pick-and-place system on top of a running ROS/MoveIt stack."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import moveit_commander
import rospy

from pick_place.config import OrchestratorConfig
from pick_place.ros.move_group import MoveGroupPlanningService
from pick_place.ros.scene_channel import PlanningSceneChannel
from pick_place.ros.services import MoveItCartesianPathService, MoveItKinematicsService
from pick_place.system import PickPlaceSystem, build_system
from pick_place.world_model.shape_catalog import ShapeCatalog

if TYPE_CHECKING:
    from pathlib import Path


def init_node(node_name: str = "pick_place") -> None:
    """Initialize a ROS node if this process does not yet have one.

    rospy runs subscriber callbacks on its own background threads, so blocking calls made by
        the orchestrator never starve inbound messages.
    """
    if rospy.get_name() in ["", "/unnamed"]:
        moveit_commander.roscpp_initialize(sys.argv)
        rospy.init_node(node_name)
        rospy.loginfo(f"Initialized node with name '{rospy.get_name()}'")


def load_config(config_path: Path | None) -> OrchestratorConfig:
    """Load the configuration from YAML if a path is given, otherwise from private ROS params."""
    if config_path is not None:
        return OrchestratorConfig.from_yaml(config_path)
    return OrchestratorConfig.from_dict(rospy.get_param("~", {}))


def create_ros_system(
    config_path: Path | None = None,
    objects_path: Path | None = None,
    node_name: str = "pick_place",
) -> PickPlaceSystem:
    """Create the pick-and-place system backed by the MoveIt services of a running ROS graph.

    :param config_path: Optional YAML file with "orchestrator" and "shapes" sections
    :param objects_path: Optional YAML file of "object_poses" to add to the planning scene
    :param node_name: Name of the ROS node to initialize if none exists yet
    :return: Assembled PickPlaceSystem, after all collaborators reported ready
    :raises: InitializationError, if the MoveIt services do not become available
    """
    init_node(node_name)
    config = load_config(config_path)
    catalog = ShapeCatalog() if config_path is None else ShapeCatalog.from_yaml(config_path)

    system = build_system(
        kinematics_service=MoveItKinematicsService(),
        path_service=MoveItCartesianPathService(),
        planning_service=MoveGroupPlanningService(config),
        scene_channel=PlanningSceneChannel(),
        config=config,
        catalog=catalog,
    )

    if objects_path is not None:
        added = system.lifecycle.add_known_objects(objects_path)
        if added.failure is not None:
            rospy.logerr(f"Could not add the known objects from {objects_path}: {added.failure}")

    return system
