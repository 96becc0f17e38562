"""Define compound pick and place sequences built from single orchestrator steps.

A failure midway through a sequence is returned as-is. The physical world and the attachment
    record may then disagree (e.g., the object is grasped but not attached), and reconciling
    them is left to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Tuple

from pick_place.logging import log_error, log_info
from pick_place.motion_plans import CartesianGoal
from pick_place.results import Result

if TYPE_CHECKING:
    from pick_place.kinematics import Pose3D
    from pick_place.object_lifecycle import ObjectLifecycleManager
    from pick_place.orchestrator import MotionOrchestrator

Step = Tuple[str, Callable[[], Result]]  # A named step of a compound sequence


def pick(
    orchestrator: MotionOrchestrator,
    lifecycle: ObjectLifecycleManager,
    object_id: str,
    object_height_m: float,
    approach_offset_m: float,
) -> Result:
    """Approach the named object from above, descend, attach it, and ascend to travel height.

    :param orchestrator: Orchestrator executing the motions
    :param lifecycle: Lifecycle manager recording the attachment
    :param object_id: Id of the object to be picked
    :param object_height_m: Height (meters) of the object above the base frame
    :param approach_offset_m: Offset (meters) along the object's z-axis of the approach pose
    :return: Result of the first failing step, or of the final ascent
    """
    log_info(f"Picking '{object_id}'")
    steps: list[Step] = [
        ("approach", lambda: orchestrator.move_above_object(object_id, approach_offset_m)),
        ("descend", lambda: orchestrator.descend(object_height_m)),
        ("attach", lambda: lifecycle.attach(object_id)),
        ("ascend", lambda: orchestrator.ascend(object_height_m)),
    ]
    return _run_steps(steps)


def place(
    orchestrator: MotionOrchestrator,
    lifecycle: ObjectLifecycleManager,
    place_pose: Pose3D,
    object_height_m: float,
) -> Result:
    """Carry the attached object to the place pose, lower it, detach it, and ascend.

    :param orchestrator: Orchestrator executing the motions
    :param lifecycle: Lifecycle manager recording the detachment
    :param place_pose: End-effector pose above the placement location
    :param object_height_m: Height (meters) of the object above the base frame
    :return: Result of the first failing step, or of the final ascent
    """
    log_info(f"Placing at ({place_pose.x:.3f}, {place_pose.y:.3f})")
    steps: list[Step] = [
        ("carry", lambda: orchestrator.submit(CartesianGoal(place_pose))),
        ("descend", lambda: orchestrator.descend(object_height_m)),
        ("detach", lifecycle.detach),
        ("ascend", lambda: orchestrator.ascend(object_height_m)),
    ]
    return _run_steps(steps)


def _run_steps(steps: list[Step]) -> Result:
    """Run the named steps in order, stopping at the first failure."""
    result: Result = Result.ok()
    for name, step in steps:
        result = step()
        if not result.succeeded:
            log_error(f"Step '{name}' failed: {result.failure}")
            return result
    return result
