"""Define dataclasses to represent motion goals and the trajectories planned to reach them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from pick_place.kinematics import Configuration, Pose3D


@dataclass(frozen=True)
class JointGoal:
    """A goal specified as a target joint configuration."""

    configuration: Configuration


@dataclass(frozen=True)
class CartesianGoal:
    """A goal specified as a target end-effector pose."""

    pose: Pose3D


@dataclass(frozen=True)
class NamedGoal:
    """A goal specified by the name of a stored configuration (e.g., "start")."""

    name: str


@dataclass(frozen=True)
class RandomGoal:
    """A goal at a random collision-free configuration chosen by the planner."""


MoveGoal = Union[JointGoal, CartesianGoal, NamedGoal, RandomGoal]


@dataclass(frozen=True)
class TrajectoryPoint:
    """A joint configuration to be reached at a time relative to the start of a trajectory."""

    time_from_start_s: float
    positions: Configuration


@dataclass
class MotionPlan:
    """A trajectory of timestamped joint configurations, created per planning call."""

    points: list[TrajectoryPoint] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def final_configuration(self) -> Configuration:
        """Retrieve the configuration at the end of the trajectory.

        :raises: ValueError, if the plan contains no points
        """
        if not self.points:
            raise ValueError("Cannot retrieve the final configuration of an empty plan.")
        return self.points[-1].positions

    @property
    def duration_s(self) -> float:
        """Retrieve the duration (seconds) of the trajectory."""
        return self.points[-1].time_from_start_s if self.points else 0.0

    @property
    def joint_names(self) -> list[str]:
        return list(self.points[0].positions) if self.points else []
