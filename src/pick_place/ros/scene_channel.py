"""Define the planning scene synchronization channel over ROS topics and services."""

from __future__ import annotations

import rospy
from moveit_msgs.msg import AttachedCollisionObject, PlanningScene, PlanningSceneComponents
from moveit_msgs.srv import GetPlanningScene, GetPlanningSceneRequest, GetPlanningSceneResponse

from pick_place.interfaces import SceneChannel
from pick_place.ros.conversions import attached_object_to_msg, snapshot_from_msg, snapshot_to_msg
from pick_place.ros.services import ServiceCaller
from pick_place.world_model.collision_models import AttachedObject
from pick_place.world_model.scene_snapshot import SceneSnapshot

SCENE_COMPONENTS = (
    PlanningSceneComponents.ROBOT_STATE
    | PlanningSceneComponents.ROBOT_STATE_ATTACHED_OBJECTS
    | PlanningSceneComponents.WORLD_OBJECT_NAMES
    | PlanningSceneComponents.WORLD_OBJECT_GEOMETRY
)


class PlanningSceneChannel(SceneChannel):
    """Pull the MoveIt planning scene on demand and publish changes to it as diffs."""

    def __init__(
        self,
        scene_service: str = "get_planning_scene",
        scene_topic: str = "planning_scene",
        attached_topic: str = "attached_collision_object",
    ) -> None:
        self._get_scene: ServiceCaller[GetPlanningSceneRequest, GetPlanningSceneResponse]
        self._get_scene = ServiceCaller(scene_service, GetPlanningScene)
        self._diff_publisher = rospy.Publisher(scene_topic, PlanningScene, queue_size=1)
        self._attached_publisher = rospy.Publisher(
            attached_topic, AttachedCollisionObject, queue_size=1
        )

    def is_available(self) -> bool:
        """Check that the scene can be pulled and that both topics have subscribers."""
        has_subscribers = (
            self._diff_publisher.get_num_connections() > 0
            and self._attached_publisher.get_num_connections() > 0
        )
        return has_subscribers and self._get_scene.is_available()

    def request_state(self) -> SceneSnapshot:
        """Pull the current planning scene.

        :raises: RuntimeError, if the planning scene service could not be called
        """
        request = GetPlanningSceneRequest()
        request.components.components = SCENE_COMPONENTS

        response = self._get_scene(request)
        if response is None:
            raise RuntimeError("Unable to retrieve the planning scene.")
        return snapshot_from_msg(response.scene)

    def publish_diff(self, diff: SceneSnapshot) -> None:
        self._diff_publisher.publish(snapshot_to_msg(diff))

    def publish_attached(self, attached: AttachedObject) -> None:
        self._attached_publisher.publish(attached_object_to_msg(attached))
