"""Define the configuration consumed once when the pick-and-place system starts up."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from pick_place.filesystem.load_from_yaml import load_yaml_into_dict
from pick_place.logging import log_warning

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class OrchestratorConfig:
    """Parameters that stay constant for the lifetime of an orchestrator."""

    base_frame: str = "base_link"  # Reference frame of all planning requests
    ee_frame: str = "link_7"  # End-effector link, also the link objects are attached to
    group_name: str = "arm"  # Name of the planning group
    max_planning_time_s: float = 8.0
    gripping_offset_m: float = 0.1  # Vertical distance between the end-effector and a grasp
    dz_offset_m: float = 0.3  # Vertical travel above an object when ascending

    planner_id: str = "RRTConnectkConfigDefault"
    goal_position_tolerance_m: float = 0.001
    goal_orientation_tolerance_rad: float = 0.001

    ik_attempts: int = 100
    ik_timeout_s: float = 0.1
    ik_avoid_collisions: bool = True

    cartesian_max_step_m: float = 0.05
    cartesian_jump_threshold: float = 0.0
    min_path_fraction: float = 1.0  # Smallest achieved path fraction accepted as success

    rest_height_m: float = 0.065  # Height assigned to an object when it is detached
    publish_timeout_s: float = 2.0  # Time to wait for a published scene change to be observed
    publish_poll_period_s: float = 0.05

    startup_attempts: int = 10
    startup_initial_backoff_s: float = 0.5
    startup_backoff_factor: float = 2.0
    startup_max_backoff_s: float = 5.0

    def __post_init__(self) -> None:
        """Validate parameters that would otherwise fail obscurely at runtime."""
        if not 0.0 <= self.min_path_fraction <= 1.0:
            raise ValueError(f"min_path_fraction must lie in [0, 1], not {self.min_path_fraction}.")
        if self.startup_attempts < 1:
            raise ValueError(f"startup_attempts must be positive, not {self.startup_attempts}.")

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> OrchestratorConfig:
        """Construct a config from a dictionary, ignoring (and reporting) unknown keys.

        :param config_data: Map from parameter names to values
        :return: Constructed OrchestratorConfig instance
        """
        known_names = {f.name for f in fields(cls)}
        unknown = sorted(set(config_data) - known_names)
        if unknown:
            log_warning(f"Ignoring unknown configuration parameters: {unknown}")

        return cls(**{k: v for k, v in config_data.items() if k in known_names})

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> OrchestratorConfig:
        """Construct a config from the "orchestrator" section of the given YAML file.

        :param yaml_path: Path to a YAML file containing configuration data
        :return: Constructed OrchestratorConfig (defaults are used for missing parameters)
        """
        yaml_data = load_yaml_into_dict(yaml_path)
        return cls.from_dict(yaml_data.get("orchestrator", {}))
