"""Define unit tests for the motion orchestrator's state machine and vertical moves."""

from __future__ import annotations

import threading

import pytest
from fakes import (
    HOME,
    FakeCartesianPathService,
    FakeKinematicsService,
    FakePlanningService,
    FakeRobot,
    FakeSceneChannel,
    point_arm_fk,
)

from pick_place.kinematics import Pose3D
from pick_place.motion_plans import CartesianGoal, JointGoal, NamedGoal, RandomGoal
from pick_place.orchestrator import OrchestratorState
from pick_place.pose_transforms import compute_above_pose
from pick_place.results import FailureKind, OrchestratorBusyError, Result
from pick_place.system import PickPlaceSystem


def test_initial_state_is_idle(system: PickPlaceSystem) -> None:
    assert system.orchestrator.state == OrchestratorState.IDLE
    assert system.orchestrator.last_failure is None


def test_joint_goal_succeeds(system: PickPlaceSystem, robot: FakeRobot) -> None:
    """Verify that a joint goal is planned, executed, and reached."""
    target = dict(HOME, z=0.3)

    result = system.orchestrator.submit(JointGoal(target))

    assert result.succeeded
    assert result.unwrap().final_configuration == target
    assert system.orchestrator.state == OrchestratorState.SUCCEEDED
    assert robot.joints["z"] == pytest.approx(0.3)


def test_named_goal(system: PickPlaceSystem, robot: FakeRobot) -> None:
    """Verify that named goals resolve through the planner's stored configurations."""
    robot.joints["x"] = -0.2

    assert system.orchestrator.move_to_named("start").succeeded
    assert robot.joints == HOME

    result = system.orchestrator.move_to_named("nowhere")
    assert result.failure is not None
    assert result.failure.kind == FailureKind.PLAN_ERROR
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert system.orchestrator.last_failure == result.failure


def test_cartesian_goal_is_solved_with_ik(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
    robot: FakeRobot,
) -> None:
    """Verify that a cartesian goal becomes the joint goal solving its IK."""
    target = Pose3D.from_xyz_rpy(0.5, 0.1, 0.35, roll_rad=3.0)

    result = system.orchestrator.move_to_pose(target)

    assert result.succeeded
    assert isinstance(planning_service.planned_goals[0], JointGoal)
    assert point_arm_fk(robot.joints).approx_equal(target, atol=1e-9)


def test_ik_failure_skips_planning(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    """Verify that an IK failure ends the motion before any planning request."""
    result = system.orchestrator.submit(CartesianGoal(Pose3D.from_xyz_rpy(x=5.0)))

    assert result.failure is not None
    assert result.failure.kind == FailureKind.SOLVER_ERROR
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert planning_service.planned_goals == []


def test_execution_failure(system: PickPlaceSystem, planning_service: FakePlanningService) -> None:
    planning_service.execute_succeeds = False

    result = system.orchestrator.submit(NamedGoal("start"))

    assert result.failure is not None
    assert result.failure.kind == FailureKind.EXEC_ERROR
    assert system.orchestrator.state == OrchestratorState.FAILED


def test_unsupported_goal_releases_motion_slot(system: PickPlaceSystem) -> None:
    """Verify that an invalid goal raises without leaving the orchestrator busy."""
    with pytest.raises(TypeError):
        system.orchestrator.submit("start")  # type: ignore[arg-type]

    assert system.orchestrator.state == OrchestratorState.FAILED
    assert system.orchestrator.submit(NamedGoal("start")).succeeded


def test_stop_when_idle_is_noop(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    """Verify that stopping with nothing executing changes nothing."""
    assert not system.orchestrator.stop()

    assert system.orchestrator.state == OrchestratorState.IDLE
    assert system.orchestrator.last_failure is None
    assert not planning_service.stop_requested.is_set()


def test_stop_cancels_execution(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
    robot: FakeRobot,
) -> None:
    """Verify that stopping mid-execution fails the motion as cancelled."""
    # Arrange: Run a motion whose execution blocks until it is stopped
    planning_service.hold_execution = True
    results: list[Result] = []
    worker = threading.Thread(
        target=lambda: results.append(system.orchestrator.submit(JointGoal(dict(HOME, z=0.2)))),
    )
    worker.start()
    assert planning_service.executing.wait(timeout=5.0), "Execution never started."
    assert system.orchestrator.state == OrchestratorState.EXECUTING

    # Act: Stop the execution from this thread
    stopped = system.orchestrator.stop()
    worker.join(timeout=5.0)

    # Assert: The motion was cancelled and the robot did not reach the goal
    assert stopped
    assert not worker.is_alive()
    assert planning_service.stop_requested.is_set()
    assert results[0].failure is not None
    assert results[0].failure.kind == FailureKind.CANCELLED
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert robot.joints["z"] == pytest.approx(HOME["z"])

    # Assert: Nothing further runs until a new motion is submitted
    assert len(planning_service.executed_plans) == 1
    planning_service.hold_execution = False
    assert system.orchestrator.submit(NamedGoal("start")).succeeded
    assert system.orchestrator.state == OrchestratorState.SUCCEEDED


def test_stop_as_execution_returns_cancels_motion(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    """Verify that a stop arriving just as execution returns still ends in a cancellation."""
    # Arrange: Request a stop immediately after the trajectory finishes executing
    stop_results: list[bool] = []
    planning_service.after_execute = lambda: stop_results.append(system.orchestrator.stop())

    # Act: Run a motion to completion
    result = system.orchestrator.submit(NamedGoal("start"))

    # Assert: The accepted stop wins, so the motion and the orchestrator both report a cancel
    assert stop_results == [True]
    assert result.failure is not None
    assert result.failure.kind == FailureKind.CANCELLED
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert system.orchestrator.last_failure == result.failure


def test_stop_after_motion_finished_is_noop(system: PickPlaceSystem) -> None:
    assert system.orchestrator.submit(NamedGoal("start")).succeeded

    assert not system.orchestrator.stop()
    assert system.orchestrator.state == OrchestratorState.SUCCEEDED
    assert system.orchestrator.last_failure is None


def test_scene_error_during_vertical_move_fails_motion(
    system: PickPlaceSystem,
    scene_channel: FakeSceneChannel,
) -> None:
    """Verify that an error raised by the scene channel fails the motion before propagating."""
    # Arrange: Make every request for the scene state raise
    scene_channel.request_error = RuntimeError("No planning scene received")

    # Act: Attempt a vertical move, which reads the current state from the scene
    with pytest.raises(RuntimeError):
        system.orchestrator.vertical_move(0.5)

    # Assert: The motion ended as a planning failure and the motion slot was released
    failure = system.orchestrator.last_failure
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert failure is not None
    assert failure.kind == FailureKind.PLAN_ERROR
    assert "No planning scene received" in failure.message

    scene_channel.request_error = None
    assert system.orchestrator.vertical_move(0.5).succeeded


def test_error_during_execution_fails_motion(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    def raise_controller_error() -> None:
        raise RuntimeError("Controller connection lost")

    planning_service.after_execute = raise_controller_error

    with pytest.raises(RuntimeError):
        system.orchestrator.submit(NamedGoal("start"))

    assert system.orchestrator.state == OrchestratorState.FAILED
    failure = system.orchestrator.last_failure
    assert failure is not None
    assert failure.kind == FailureKind.EXEC_ERROR


def test_random_target(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
    robot: FakeRobot,
) -> None:
    """Verify that the arm moves to the random configuration chosen by the planner."""
    result = system.orchestrator.move_to_random_target()

    assert result.succeeded
    assert planning_service.planned_goals == [RandomGoal()]
    assert robot.joints == result.unwrap().final_configuration
    assert robot.joints != HOME
    assert system.orchestrator.state == OrchestratorState.SUCCEEDED


def test_random_target_planning_failure(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    planning_service.plan_succeeds = False

    result = system.orchestrator.move_to_random_target()

    assert result.failure is not None
    assert result.failure.kind == FailureKind.PLAN_ERROR
    assert planning_service.executed_plans == []


def test_concurrent_motion_is_rejected(
    system: PickPlaceSystem,
    planning_service: FakePlanningService,
) -> None:
    """Verify that a second motion cannot start while one is in flight."""
    planning_service.hold_execution = True
    worker = threading.Thread(target=lambda: system.orchestrator.submit(NamedGoal("start")))
    worker.start()
    assert planning_service.executing.wait(timeout=5.0), "Execution never started."

    with pytest.raises(OrchestratorBusyError):
        system.orchestrator.vertical_move(0.5)

    planning_service.release()
    worker.join(timeout=5.0)
    assert system.orchestrator.state == OrchestratorState.SUCCEEDED


def test_vertical_move_while_holding_box(system: PickPlaceSystem) -> None:
    """Verify that the end-effector rises to the target height while carrying an object."""
    # Arrange: Add a box and attach it to the end-effector
    assert system.lifecycle.add("box", Pose3D.from_xyz_rpy(x=0.4, z=0.1)).succeeded
    assert system.lifecycle.attach("box").succeeded

    # Act: Move vertically to 0.5 m
    result = system.orchestrator.vertical_move(0.5)

    # Assert: The end-effector is at the target height, with x/y and orientation unchanged
    assert result.succeeded
    assert point_arm_fk(result.unwrap().final_configuration).z == pytest.approx(0.5, abs=0.001)
    ee_pose = system.orchestrator.current_pose().unwrap()
    assert ee_pose.z == pytest.approx(0.5, abs=0.001)
    assert ee_pose.x == pytest.approx(HOME["x"], abs=0.001)
    assert ee_pose.orientation.approx_equal(point_arm_fk(HOME).orientation, atol=1e-6)
    assert system.scene.refresh().find_attached("box") is not None


def test_descend_and_ascend_heights(system: PickPlaceSystem) -> None:
    """Verify the gripping and travel heights for an object of a given height."""
    system.orchestrator.descend(0.05)
    assert system.orchestrator.current_pose().unwrap().z == pytest.approx(0.15)

    system.orchestrator.ascend(0.05)
    assert system.orchestrator.current_pose().unwrap().z == pytest.approx(0.45)


def test_incomplete_vertical_path_fails(
    system: PickPlaceSystem,
    path_service: FakeCartesianPathService,
    planning_service: FakePlanningService,
) -> None:
    path_service.fraction = 0.4

    result = system.orchestrator.vertical_move(0.2)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.PATH_ERROR
    assert system.orchestrator.state == OrchestratorState.FAILED
    assert planning_service.executed_plans == []


def test_vertical_move_kinematics_failure(
    system: PickPlaceSystem,
    kinematics_service: FakeKinematicsService,
) -> None:
    kinematics_service.fk_error_code = -1

    result = system.orchestrator.vertical_move(0.2)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.SOLVER_ERROR


def test_move_above_object(system: PickPlaceSystem, robot: FakeRobot) -> None:
    """Verify that the end-effector reaches the flipped pose above a known object."""
    box_pose = Pose3D.from_xyz_rpy(x=0.5, y=0.2, z=0.05, yaw_rad=0.3)
    system.lifecycle.add("box", box_pose)

    result = system.orchestrator.move_above_object("box", 0.25)

    assert result.succeeded
    expected = compute_above_pose(box_pose, 0.25, flip=True)
    assert point_arm_fk(robot.joints).approx_equal(expected, atol=1e-9)


def test_move_above_missing_object(system: PickPlaceSystem) -> None:
    result = system.orchestrator.move_above_object("box", 0.25)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.NOT_FOUND


def test_move_to_place_pose_keeps_object_orientation(
    system: PickPlaceSystem,
    robot: FakeRobot,
) -> None:
    tray_pose = Pose3D.from_xyz_rpy(x=-0.3, y=0.4, z=0.5, roll_rad=3.1)
    system.lifecycle.add("box", tray_pose, object_id="tray")

    result = system.orchestrator.move_to_place_pose("tray", -0.1)

    assert result.succeeded
    expected = compute_above_pose(tray_pose, -0.1, flip=False)
    assert point_arm_fk(robot.joints).approx_equal(expected, atol=1e-9)


def test_current_joint_positions(system: PickPlaceSystem) -> None:
    assert system.orchestrator.current_joint_positions() == HOME
