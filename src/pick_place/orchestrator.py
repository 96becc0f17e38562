"""Define the state machine that turns motion goals into planned and executed trajectories."""

from __future__ import annotations

import threading
from enum import Enum, auto
from typing import TYPE_CHECKING

from pick_place.logging import log_error, log_info, log_warning
from pick_place.motion_plans import CartesianGoal, JointGoal, MotionPlan, NamedGoal, RandomGoal
from pick_place.pose_transforms import compute_above_pose, compute_place_pose, with_height
from pick_place.results import Failure, FailureKind, OrchestratorBusyError, Result

if TYPE_CHECKING:
    from pick_place.cartesian_path_client import CartesianPathClient
    from pick_place.config import OrchestratorConfig
    from pick_place.interfaces import MotionPlanningService
    from pick_place.kinematics import Configuration, Pose3D
    from pick_place.kinematics_client import KinematicsClient
    from pick_place.motion_plans import MoveGoal
    from pick_place.world_model.scene_model import SceneModel


class OrchestratorState(Enum):
    """A state of the motion orchestrator."""

    IDLE = auto()
    PLANNING = auto()
    EXECUTING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class MotionOrchestrator:
    """Execute joint, cartesian, named, and vertical moves as a blocking state machine.

    States progress IDLE -> PLANNING -> EXECUTING -> {SUCCEEDED, FAILED}. At most one motion may
        be in flight; `stop()` is the only call allowed to run concurrently with an execution.
        No operation retries internally, so callers choose their own recovery strategy.
    """

    def __init__(
        self,
        planning: MotionPlanningService,
        kinematics: KinematicsClient,
        paths: CartesianPathClient,
        scene: SceneModel,
        config: OrchestratorConfig,
    ) -> None:
        self._planning = planning
        self._kinematics = kinematics
        self._paths = paths
        self._scene = scene
        self._config = config

        self._lock = threading.Lock()  # Guards the state, failure, and busy flag
        self._cancelled = threading.Event()
        self._state = OrchestratorState.IDLE
        self._failure: Failure | None = None
        self._busy = False

    @property
    def state(self) -> OrchestratorState:
        with self._lock:
            return self._state

    @property
    def last_failure(self) -> Failure | None:
        """Retrieve the failure that ended the most recent motion (None if it didn't fail)."""
        with self._lock:
            return self._failure

    def submit(self, goal: MoveGoal) -> Result[MotionPlan]:
        """Plan and execute a motion to the given goal, blocking until it finishes.

        Cartesian goals are first converted into joint goals using inverse kinematics. An IK
            failure ends the motion immediately without entering the PLANNING state.

        :param goal: Joint, cartesian, named, or random goal
        :return: Result holding the executed motion plan
        """
        self._begin_motion()
        try:
            if isinstance(goal, CartesianGoal):
                pose = goal.pose
                log_info(f"Computing IK for position ({pose.x:.2f}, {pose.y:.2f}, {pose.z:.2f})")
                ik_result = self._kinematics.compute_inverse(pose)
                if ik_result.failure is not None:
                    return self._fail(ik_result.failure)
                goal = JointGoal(ik_result.unwrap())
            elif not isinstance(goal, (JointGoal, NamedGoal, RandomGoal)):
                raise TypeError(f"Unsupported motion goal: {goal!r}")

            self._transition(OrchestratorState.PLANNING)
            plan = self._planning.plan(goal, self._config.max_planning_time_s)
            if plan is None or plan.is_empty:
                failure = Failure(FailureKind.PLAN_ERROR, f"Motion planning to {goal} failed")
                return self._fail(failure)
            log_info(f"Motion planning to {goal} successful")

            return self._execute(plan)
        except Exception as exc:
            self._abort(exc)
            raise
        finally:
            self._end_motion()

    def vertical_move(self, target_z: float) -> Result[MotionPlan]:
        """Move the end-effector in a straight vertical line to the given height.

        This bypasses joint-space planning: the current end-effector pose is read from a fresh
            scene snapshot, a single waypoint is placed at the target height, and the linearly
            interpolated path is executed directly. A single attempt is made.

        :param target_z: Target height (meters) of the end-effector in the base frame
        :return: Result holding the executed linear trajectory
        """
        log_info(f"Vertical move to target z: {target_z:.3f}")
        self._begin_motion()
        try:
            self._transition(OrchestratorState.PLANNING)
            snapshot = self._scene.refresh()
            robot_state = snapshot.robot_state
            pose_result = self._kinematics.compute_forward(robot_state.joint_state, robot_state)
            if pose_result.failure is not None:
                return self._fail(pose_result.failure)

            waypoint = with_height(pose_result.unwrap(), target_z)
            path_result = self._paths.plan_linear([waypoint], snapshot.robot_state)
            if path_result.failure is not None:
                return self._fail(path_result.failure)

            return self._execute(path_result.unwrap().plan)
        except Exception as exc:
            self._abort(exc)
            raise
        finally:
            self._end_motion()

    def stop(self) -> bool:
        """Request an immediate halt of the in-flight execution, if any.

        :return: True if an execution was cancelled, False if nothing was executing (no-op)
        """
        with self._lock:
            if self._state != OrchestratorState.EXECUTING:
                log_info("Stop requested, but no trajectory is executing.")
                return False

            self._cancelled.set()
            self._failure = Failure(FailureKind.CANCELLED, "Execution stopped on request")
            self._set_state(OrchestratorState.FAILED)

        log_info("Stopping current joint trajectory")
        self._planning.stop()
        return True

    def move_to_named(self, name: str) -> Result[MotionPlan]:
        """Move to a stored named configuration (e.g., "start")."""
        return self.submit(NamedGoal(name))

    def move_to_random_target(self) -> Result[MotionPlan]:
        """Move to a random reachable configuration, e.g., to exercise the arm."""
        return self.submit(RandomGoal())

    def move_to_joint_positions(self, joints: Configuration) -> Result[MotionPlan]:
        return self.submit(JointGoal(dict(joints)))

    def move_to_pose(self, pose: Pose3D) -> Result[MotionPlan]:
        return self.submit(CartesianGoal(pose))

    def move_above_object(
        self,
        object_id: str,
        offset_z: float,
        flip: bool = True,
    ) -> Result[MotionPlan]:
        """Move the end-effector to a pose offset along the named object's z-axis.

        :param object_id: Id of the target object in the world model
        :param offset_z: Signed offset (meters) along the object's z-axis
        :param flip: Whether to turn the end-effector to face the object
        :return: Result holding the executed motion plan
        """
        log_info(f"Moving above '{object_id}'")
        snapshot = self._scene.refresh()
        obj = self._scene.find_object(object_id, snapshot)
        if obj is None:
            return Result.fail(FailureKind.NOT_FOUND, f"No object '{object_id}' in the scene")

        return self.move_to_pose(compute_above_pose(obj.pose, offset_z, flip))

    def move_to_place_pose(self, object_id: str, offset_z: float) -> Result[MotionPlan]:
        """Move the end-effector to a placement pose relative to the named object."""
        log_info(f"Moving to the place pose of '{object_id}'")
        snapshot = self._scene.refresh()
        obj = self._scene.find_object(object_id, snapshot)
        if obj is None:
            return Result.fail(FailureKind.NOT_FOUND, f"No object '{object_id}' in the scene")

        return self.move_to_pose(compute_place_pose(obj.pose, offset_z))

    def ascend(self, object_height_m: float) -> Result[MotionPlan]:
        """Rise vertically to the travel height above an object of the given height."""
        log_info("Ascending")
        travel_z = self._config.gripping_offset_m + object_height_m + self._config.dz_offset_m
        return self.vertical_move(travel_z)

    def descend(self, object_height_m: float) -> Result[MotionPlan]:
        """Lower vertically to the gripping height for an object of the given height."""
        log_info("Descending")
        return self.vertical_move(self._config.gripping_offset_m + object_height_m)

    def current_pose(self) -> Result[Pose3D]:
        """Compute the current end-effector pose from a freshly fetched robot state."""
        snapshot = self._scene.refresh()
        return self._kinematics.compute_forward(snapshot.joint_state, snapshot.robot_state)

    def current_joint_positions(self) -> Configuration:
        """Retrieve the current joint positions from a freshly fetched robot state."""
        return dict(self._scene.refresh().joint_state)

    def _begin_motion(self) -> None:
        """Claim the single motion slot, resetting any cancellation from a previous motion.

        :raises: OrchestratorBusyError, if another motion is in flight
        """
        with self._lock:
            if self._busy:
                raise OrchestratorBusyError(f"Cannot start a motion while {self._state.name}.")
            self._busy = True
            self._cancelled.clear()
            self._failure = None
            self._set_state(OrchestratorState.IDLE)

    def _end_motion(self) -> None:
        with self._lock:
            self._busy = False

    def _execute(self, plan: MotionPlan) -> Result[MotionPlan]:
        """Hand the plan to the execution interface and block until it finishes.

        The outcome is decided under the lock, so a `stop()` racing with the end of execution
            either cancels the motion or finds it already finished, never both.
        """
        num_knots = len(plan.points)
        log_info(f"Executing joint trajectory with {num_knots} knots over {plan.duration_s:.2f} s")
        self._transition(OrchestratorState.EXECUTING)
        succeeded = self._planning.execute(plan)

        with self._lock:
            if self._cancelled.is_set() and self._failure is not None:
                log_warning("Trajectory execution was cancelled")
                return Result(failure=self._failure)

            if not succeeded:
                failure = Failure(FailureKind.EXEC_ERROR, "Trajectory execution failed")
                self._set_failure(failure)
                return Result(failure=failure)

            self._set_state(OrchestratorState.SUCCEEDED)

        log_info("Trajectory execution successful")
        return Result.ok(plan)

    def _fail(self, failure: Failure) -> Result[MotionPlan]:
        """Record the failure, enter the FAILED state, and return the failed result."""
        with self._lock:
            self._set_failure(failure)
        return Result(failure=failure)

    def _abort(self, error: Exception) -> None:
        """Fail the in-flight motion because a collaborator raised an unexpected error."""
        with self._lock:
            if self._state == OrchestratorState.FAILED:
                return  # Already cancelled or failed; keep the recorded failure

            executing = self._state == OrchestratorState.EXECUTING
            kind = FailureKind.EXEC_ERROR if executing else FailureKind.PLAN_ERROR
            self._set_failure(Failure(kind, f"Motion aborted by {type(error).__name__}: {error}"))

    def _transition(self, new_state: OrchestratorState) -> None:
        with self._lock:
            self._set_state(new_state)

    def _set_state(self, new_state: OrchestratorState) -> None:
        """Update the state (the caller must hold the lock)."""
        if new_state != self._state:
            log_info(f"Orchestrator state: {self._state.name} -> {new_state.name}")
        self._state = new_state

    def _set_failure(self, failure: Failure) -> None:
        """Record the failure and enter the FAILED state (the caller must hold the lock)."""
        log_error(f"Motion failed: {failure}")
        self._failure = failure
        self._set_state(OrchestratorState.FAILED)
