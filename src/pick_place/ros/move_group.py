"""Define joint-space planning and trajectory execution through the MoveIt move group."""

from __future__ import annotations

import moveit_commander
import rospy

from pick_place.config import OrchestratorConfig
from pick_place.interfaces import MotionPlanningService, PlannableGoal
from pick_place.motion_plans import JointGoal, MotionPlan, NamedGoal, RandomGoal
from pick_place.ros.conversions import plan_from_msg, plan_to_msg


class MoveGroupPlanningService(MotionPlanningService):
    """Plan with the move group's configured planner and execute through its controllers."""

    def __init__(self, config: OrchestratorConfig, connect_timeout_s: float = 1.0) -> None:
        """Prepare the service; the move group is connected lazily by `is_available()`.

        :param config: Configuration specifying the planning group, frames, and tolerances
        :param connect_timeout_s: Duration (seconds) each connection attempt may wait
        """
        self._config = config
        self._connect_timeout_s = connect_timeout_s
        self._group: moveit_commander.MoveGroupCommander | None = None

    def is_available(self) -> bool:
        """Connect to the move group if not yet connected (False if it isn't up yet)."""
        if self._group is not None:
            return True

        try:
            group = moveit_commander.MoveGroupCommander(
                self._config.group_name,
                wait_for_servers=self._connect_timeout_s,
            )
        except RuntimeError as exc:
            rospy.logwarn(f"Move group '{self._config.group_name}' not available: {exc}")
            return False

        group.set_planning_time(self._config.max_planning_time_s)
        group.allow_replanning(False)
        group.set_planner_id(self._config.planner_id)
        group.set_end_effector_link(self._config.ee_frame)
        group.set_pose_reference_frame(self._config.base_frame)
        group.set_goal_position_tolerance(self._config.goal_position_tolerance_m)
        group.set_goal_orientation_tolerance(self._config.goal_orientation_tolerance_rad)
        self._group = group
        return True

    @property
    def group(self) -> moveit_commander.MoveGroupCommander:
        """Retrieve the connected move group.

        :raises: RuntimeError, if the move group hasn't been connected
        """
        if self._group is None:
            raise RuntimeError("The move group is not connected; call is_available() first.")
        return self._group

    def plan(self, goal: PlannableGoal, max_planning_time_s: float) -> MotionPlan | None:
        group = self.group
        group.set_planning_time(max_planning_time_s)

        if isinstance(goal, NamedGoal):
            group.set_named_target(goal.name)
        elif isinstance(goal, JointGoal):
            group.set_joint_value_target(dict(goal.configuration))
        elif isinstance(goal, RandomGoal):
            group.set_random_target()
        else:
            raise TypeError(f"The move group cannot plan to the goal: {goal!r}")

        success, trajectory_msg, planning_time_s, error_code = group.plan()
        if not success:
            rospy.loginfo(f"Motion planning failed (error code {error_code.val})")
            return None

        rospy.loginfo(f"Motion planning took {planning_time_s:.3f} seconds")
        return plan_from_msg(trajectory_msg)

    def execute(self, plan: MotionPlan) -> bool:
        return bool(self.group.execute(plan_to_msg(plan), wait=True))

    def stop(self) -> None:
        self.group.stop()
