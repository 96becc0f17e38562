"""Define a client that requests straight-line interpolated end-effector paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pick_place.interfaces import CartesianPathRequest
from pick_place.logging import log_error, log_info
from pick_place.results import SUCCESS_CODE, FailureKind, Result

if TYPE_CHECKING:
    from pick_place.config import OrchestratorConfig
    from pick_place.interfaces import CartesianPathService
    from pick_place.kinematics import Pose3D
    from pick_place.motion_plans import MotionPlan
    from pick_place.world_model.scene_snapshot import RobotState


@dataclass(frozen=True)
class CartesianPath:
    """A linearly interpolated trajectory and the fraction of the requested path it achieves."""

    plan: MotionPlan
    fraction: float


class CartesianPathClient:
    """Request piecewise-linear paths with zero tolerated joint-space discontinuity."""

    def __init__(self, service: CartesianPathService, config: OrchestratorConfig) -> None:
        self._service = service
        self._config = config

    @property
    def min_fraction(self) -> float:
        return self._config.min_path_fraction

    def plan_linear(
        self,
        waypoints: list[Pose3D],
        start_state: RobotState,
    ) -> Result[CartesianPath]:
        """Plan a linear end-effector path from the start state through the waypoints.

        :param waypoints: End-effector poses (base frame) to be visited in order
        :param start_state: Robot state from which the path begins
        :return: Result holding the interpolated path and its achieved fraction
        """
        if not waypoints:
            raise ValueError("A linear path requires at least one waypoint.")

        request = CartesianPathRequest(
            group_name=self._config.group_name,
            base_frame=self._config.base_frame,
            ee_link=self._config.ee_frame,
            waypoints=list(waypoints),
            start_state=start_state,
            max_step_m=self._config.cartesian_max_step_m,
            jump_threshold=self._config.cartesian_jump_threshold,
            avoid_collisions=True,
        )

        response = self._service.compute_cartesian_path(request)
        if response is None:
            return Result.fail(FailureKind.PATH_ERROR, "Cartesian path service call failed")

        if response.error_code != SUCCESS_CODE:
            log_error(f"Cartesian path service returned with error code {response.error_code}")
            return Result.fail(FailureKind.PATH_ERROR, "Path service error", response.error_code)

        log_info(f"Cartesian path achieved fraction = {response.fraction:.3f}")
        if response.fraction < 0.0 or response.fraction < self.min_fraction - 1e-9:
            message = f"Path fraction {response.fraction:.3f} is below {self.min_fraction:.3f}"
            log_error(f"Failed to compute a complete cartesian path: {message}")
            return Result.fail(FailureKind.PATH_ERROR, message)

        if response.plan.is_empty:
            return Result.fail(FailureKind.PATH_ERROR, "Cartesian path contains no points")

        return Result.ok(CartesianPath(response.plan, response.fraction))
