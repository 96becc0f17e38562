"""Define a client that wraps forward/inverse kinematics requests and classifies their outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pick_place.interfaces import ForwardKinematicsRequest, InverseKinematicsRequest
from pick_place.logging import log_error, log_info
from pick_place.results import SUCCESS_CODE, FailureKind, Result
from pick_place.world_model.scene_snapshot import RobotState

if TYPE_CHECKING:
    from pick_place.config import OrchestratorConfig
    from pick_place.interfaces import KinematicsService
    from pick_place.kinematics import Configuration, Pose3D


class KinematicsClient:
    """Send kinematics requests with fixed parameters and accept only the SUCCESS code.

    The client never retries: retrying IK unchanged rarely converges, so callers decide whether
        and how to retry (e.g., after re-sensing the scene).
    """

    def __init__(self, service: KinematicsService, config: OrchestratorConfig) -> None:
        self._service = service
        self._config = config

    def compute_forward(
        self,
        joints: Configuration,
        robot_state: RobotState | None = None,
    ) -> Result[Pose3D]:
        """Compute the end-effector pose for the given joint positions.

        :param joints: Joint positions overriding those of the robot state skeleton
        :param robot_state: Full robot state used as the request skeleton (defaults to empty)
        :return: Result holding the end-effector pose in the base frame
        """
        skeleton = robot_state or RobotState()
        request = ForwardKinematicsRequest(
            robot_state=skeleton.with_joint_state(joints),
            base_frame=self._config.base_frame,
            ee_link=self._config.ee_frame,
        )

        response = self._service.compute_fk(request)
        if response is None:
            return Result.fail(FailureKind.SOLVER_ERROR, "Forward kinematics service call failed")

        if response.error_code != SUCCESS_CODE or response.pose is None:
            log_error(f"FK couldn't find a solution (error code {response.error_code})")
            error = "FK found no solution"
            return Result.fail(FailureKind.SOLVER_ERROR, error, response.error_code)

        pose = response.pose
        log_info(f"{self._config.ee_frame} has pose ({pose.x:.2f}, {pose.y:.2f}, {pose.z:.2f})")
        return Result.ok(pose)

    def compute_inverse(self, pose: Pose3D) -> Result[Configuration]:
        """Compute a collision-free joint configuration placing the end-effector at the pose.

        :param pose: Target end-effector pose in the base frame
        :return: Result holding the joint configuration solution
        """
        request = InverseKinematicsRequest(
            pose=pose,
            group_name=self._config.group_name,
            base_frame=self._config.base_frame,
            ee_link=self._config.ee_frame,
            attempts=self._config.ik_attempts,
            timeout_s=self._config.ik_timeout_s,
            avoid_collisions=self._config.ik_avoid_collisions,
        )

        response = self._service.compute_ik(request)
        if response is None:
            return Result.fail(FailureKind.SOLVER_ERROR, "Inverse kinematics service call failed")

        if response.error_code != SUCCESS_CODE:
            log_error(f"IK couldn't find a solution (error code {response.error_code})")
            error = "IK found no solution"
            return Result.fail(FailureKind.SOLVER_ERROR, error, response.error_code)

        log_info("IK returned successfully")
        return Result.ok(dict(response.solution))
