"""Define abstract interfaces for the remote subsystems consumed by the pick-and-place core.

Concrete implementations communicate with the kinematics, path, planning, and scene services
    (see `pick_place.ros` for the ROS/MoveIt implementations).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from pick_place.kinematics import Configuration, Pose3D
    from pick_place.motion_plans import JointGoal, MotionPlan, NamedGoal, RandomGoal
    from pick_place.world_model.collision_models import AttachedObject
    from pick_place.world_model.scene_snapshot import RobotState, SceneSnapshot

PlannableGoal = Union["JointGoal", "NamedGoal", "RandomGoal"]


@dataclass(frozen=True)
class ForwardKinematicsRequest:
    """A request for the pose of a link given the full state of the robot."""

    robot_state: RobotState
    base_frame: str
    ee_link: str


@dataclass(frozen=True)
class ForwardKinematicsResponse:
    pose: Pose3D | None
    error_code: int


@dataclass(frozen=True)
class InverseKinematicsRequest:
    """A request for a joint configuration placing a link at the target pose."""

    pose: Pose3D
    group_name: str
    base_frame: str
    ee_link: str
    attempts: int = 100
    timeout_s: float = 0.1
    avoid_collisions: bool = True


@dataclass(frozen=True)
class InverseKinematicsResponse:
    solution: Configuration
    error_code: int


@dataclass(frozen=True)
class CartesianPathRequest:
    """A request for a piecewise-linear end-effector path through the given waypoints."""

    group_name: str
    base_frame: str
    ee_link: str
    waypoints: list[Pose3D]
    start_state: RobotState
    max_step_m: float = 0.05  # Maximum end-effector distance (meters) between path points
    jump_threshold: float = 0.0  # Tolerated joint-space discontinuity (0 disables the check)
    avoid_collisions: bool = True


@dataclass(frozen=True)
class CartesianPathResponse:
    plan: MotionPlan
    fraction: float  # Fraction of the requested path that was achieved, in [0, 1] (-1 on error)
    error_code: int


class RemoteService(ABC):
    """A remote collaborator that may or may not be reachable yet."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the collaborator is ready to accept requests."""


class KinematicsService(RemoteService):
    """A forward/inverse kinematics solver service."""

    @abstractmethod
    def compute_fk(self, request: ForwardKinematicsRequest) -> ForwardKinematicsResponse | None:
        """Call the forward kinematics service (None if the call itself failed)."""

    @abstractmethod
    def compute_ik(self, request: InverseKinematicsRequest) -> InverseKinematicsResponse | None:
        """Call the inverse kinematics service (None if the call itself failed)."""


class CartesianPathService(RemoteService):
    """A service that interpolates straight-line end-effector paths."""

    @abstractmethod
    def compute_cartesian_path(self, request: CartesianPathRequest) -> CartesianPathResponse | None:
        """Call the cartesian path service (None if the call itself failed)."""


class MotionPlanningService(RemoteService):
    """A joint-space motion planner paired with a trajectory execution interface."""

    @abstractmethod
    def plan(self, goal: PlannableGoal, max_planning_time_s: float) -> MotionPlan | None:
        """Plan a trajectory from the current state to the goal (None if planning fails)."""

    @abstractmethod
    def execute(self, plan: MotionPlan) -> bool:
        """Execute the trajectory, blocking until it completes (True) or fails (False)."""

    @abstractmethod
    def stop(self) -> None:
        """Request an immediate halt of any in-flight execution without blocking."""


class SceneChannel(RemoteService):
    """The synchronization channel for the shared world model."""

    @abstractmethod
    def request_state(self) -> SceneSnapshot:
        """Pull the authoritative scene state, blocking until it is received."""

    @abstractmethod
    def publish_diff(self, diff: SceneSnapshot) -> None:
        """Publish an incremental scene change without waiting for acknowledgment."""

    @abstractmethod
    def publish_attached(self, attached: AttachedObject) -> None:
        """Publish an attached-object change without waiting for acknowledgment."""
