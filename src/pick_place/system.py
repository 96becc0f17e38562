"""Define the assembly of the pick-and-place core from its remote collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pick_place.cartesian_path_client import CartesianPathClient
from pick_place.kinematics_client import KinematicsClient
from pick_place.object_lifecycle import ObjectLifecycleManager
from pick_place.orchestrator import MotionOrchestrator
from pick_place.startup import wait_with_config
from pick_place.world_model.scene_model import SceneModel

if TYPE_CHECKING:
    from pick_place.config import OrchestratorConfig
    from pick_place.interfaces import (
        CartesianPathService,
        KinematicsService,
        MotionPlanningService,
        SceneChannel,
    )
    from pick_place.world_model.shape_catalog import ShapeCatalog


@dataclass
class PickPlaceSystem:
    """The orchestrator and lifecycle manager, sharing one scene model and kinematics client."""

    config: OrchestratorConfig
    scene: SceneModel
    kinematics: KinematicsClient
    orchestrator: MotionOrchestrator
    lifecycle: ObjectLifecycleManager


def build_system(
    kinematics_service: KinematicsService,
    path_service: CartesianPathService,
    planning_service: MotionPlanningService,
    scene_channel: SceneChannel,
    config: OrchestratorConfig,
    catalog: ShapeCatalog | None = None,
    wait_for_ready: bool = True,
) -> PickPlaceSystem:
    """Assemble the pick-and-place core once its collaborators are available.

    :param kinematics_service: Forward/inverse kinematics service
    :param path_service: Cartesian path service
    :param planning_service: Motion planning and trajectory execution service
    :param scene_channel: World model synchronization channel
    :param config: Configuration held constant for the system's lifetime
    :param catalog: Catalog of named shapes (defaults to the built-in shapes)
    :param wait_for_ready: Whether to run the readiness handshake before assembling
    :return: Assembled PickPlaceSystem
    :raises: InitializationError, if collaborators remain unavailable during the handshake
    """
    if wait_for_ready:
        wait_with_config(
            {
                "kinematics": kinematics_service,
                "cartesian_path": path_service,
                "planning": planning_service,
                "scene": scene_channel,
            },
            config,
        )

    scene = SceneModel(scene_channel, config.publish_timeout_s, config.publish_poll_period_s)
    kinematics = KinematicsClient(kinematics_service, config)
    paths = CartesianPathClient(path_service, config)

    return PickPlaceSystem(
        config=config,
        scene=scene,
        kinematics=kinematics,
        orchestrator=MotionOrchestrator(planning_service, kinematics, paths, scene, config),
        lifecycle=ObjectLifecycleManager(scene, kinematics, config, catalog),
    )
