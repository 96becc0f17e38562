"""Define MoveIt service clients implementing the kinematics and cartesian path interfaces."""

from __future__ import annotations

from typing import Generic, TypeVar

import rospy
from moveit_msgs.srv import (
    GetCartesianPath,
    GetCartesianPathRequest,
    GetCartesianPathResponse,
    GetPositionFK,
    GetPositionFKRequest,
    GetPositionFKResponse,
    GetPositionIK,
    GetPositionIKRequest,
    GetPositionIKResponse,
)

from pick_place.interfaces import (
    CartesianPathRequest,
    CartesianPathResponse,
    CartesianPathService,
    ForwardKinematicsRequest,
    ForwardKinematicsResponse,
    InverseKinematicsRequest,
    InverseKinematicsResponse,
    KinematicsService,
)
from pick_place.ros.conversions import (
    configuration_from_msg,
    plan_from_msg,
    pose_from_msg,
    pose_to_msg,
    robot_state_to_msg,
)

RequestT = TypeVar("RequestT")  # Service request message type (e.g., `GetPositionIKRequest`)
ResponseT = TypeVar("ResponseT")  # Service response message type (e.g., `GetPositionIKResponse`)

FK_SERVICE = "compute_fk"
IK_SERVICE = "compute_ik"
CARTESIAN_PATH_SERVICE = "compute_cartesian_path"


class ServiceCaller(Generic[RequestT, ResponseT]):
    """Utility class to simplify ROS service calls.

    Unlike a bare service proxy, construction never blocks: availability is checked separately
        so that startup can poll with bounded backoff.
    """

    def __init__(self, service_name: str, service_type: type, check_timeout_s: float = 0.1):
        """Initialize the ServiceCaller without waiting for the service.

        :param service_name: Name of the ROS service to be called
        :param service_type: Message type used by the service
        :param check_timeout_s: Duration (seconds) each availability check may wait
        """
        self.service_name = service_name
        self.check_timeout_s = check_timeout_s
        self._service_proxy = rospy.ServiceProxy(service_name, service_type)

    def is_available(self) -> bool:
        """Check whether the service is currently advertised."""
        try:
            rospy.wait_for_service(self.service_name, timeout=self.check_timeout_s)
        except rospy.ROSException:
            return False
        return True

    def call_service(self, request: RequestT) -> ResponseT | None:
        """Call the ROS service with the provided request message.

        :param request: Service request message
        :return: Response from the service, or None if the call fails
        """
        try:
            response: ResponseT = self._service_proxy(request)
        except rospy.ServiceException as exc:
            rospy.logerr(f"[{self.service_name}] Could not call service: {exc}")
            return None

        if response is None:
            rospy.logerr(f"[{self.service_name}] Response message was None.")
        return response

    def __call__(self, request: RequestT) -> ResponseT | None:
        """Allow the service to be called using the () operator."""
        return self.call_service(request)


class MoveItKinematicsService(KinematicsService):
    """Forward/inverse kinematics using the MoveIt `compute_fk` and `compute_ik` services."""

    def __init__(self, fk_service: str = FK_SERVICE, ik_service: str = IK_SERVICE) -> None:
        self._fk: ServiceCaller[GetPositionFKRequest, GetPositionFKResponse]
        self._fk = ServiceCaller(fk_service, GetPositionFK)
        self._ik: ServiceCaller[GetPositionIKRequest, GetPositionIKResponse]
        self._ik = ServiceCaller(ik_service, GetPositionIK)

    def is_available(self) -> bool:
        return self._fk.is_available() and self._ik.is_available()

    def compute_fk(self, request: ForwardKinematicsRequest) -> ForwardKinematicsResponse | None:
        req = GetPositionFKRequest()
        req.header.frame_id = request.base_frame
        req.header.stamp = rospy.Time.now()
        req.fk_link_names = [request.ee_link]
        req.robot_state = robot_state_to_msg(request.robot_state)

        response = self._fk(req)
        if response is None:
            return None

        pose = None
        if response.pose_stamped:
            stamped = response.pose_stamped[0]
            pose = pose_from_msg(stamped.pose, stamped.header.frame_id or request.base_frame)
        return ForwardKinematicsResponse(pose, response.error_code.val)

    def compute_ik(self, request: InverseKinematicsRequest) -> InverseKinematicsResponse | None:
        req = GetPositionIKRequest()
        ik_request = req.ik_request
        ik_request.group_name = request.group_name
        ik_request.pose_stamped.header.frame_id = request.base_frame
        ik_request.pose_stamped.header.stamp = rospy.Time.now()
        ik_request.pose_stamped.pose = pose_to_msg(request.pose)
        ik_request.ik_link_name = request.ee_link
        ik_request.timeout = rospy.Duration.from_sec(request.timeout_s)
        ik_request.avoid_collisions = request.avoid_collisions
        if hasattr(ik_request, "attempts"):  # Removed from the message in recent MoveIt releases
            ik_request.attempts = request.attempts

        response = self._ik(req)
        if response is None:
            return None
        return InverseKinematicsResponse(
            configuration_from_msg(response.solution.joint_state),
            response.error_code.val,
        )


class MoveItCartesianPathService(CartesianPathService):
    """Linear path interpolation using the MoveIt `compute_cartesian_path` service."""

    def __init__(self, service_name: str = CARTESIAN_PATH_SERVICE) -> None:
        self._caller: ServiceCaller[GetCartesianPathRequest, GetCartesianPathResponse]
        self._caller = ServiceCaller(service_name, GetCartesianPath)

    def is_available(self) -> bool:
        return self._caller.is_available()

    def compute_cartesian_path(self, request: CartesianPathRequest) -> CartesianPathResponse | None:
        req = GetCartesianPathRequest()
        req.header.frame_id = request.base_frame
        req.header.stamp = rospy.Time.now()
        req.group_name = request.group_name
        req.link_name = request.ee_link
        req.start_state = robot_state_to_msg(request.start_state)
        req.waypoints = [pose_to_msg(p) for p in request.waypoints]
        req.max_step = request.max_step_m
        req.jump_threshold = request.jump_threshold
        req.avoid_collisions = request.avoid_collisions

        response = self._caller(req)
        if response is None:
            return None
        return CartesianPathResponse(
            plan_from_msg(response.solution),
            response.fraction,
            response.error_code.val,
        )
