"""Define unit tests for the compound pick and place sequences."""

from __future__ import annotations

import pytest
from fakes import FakeCartesianPathService, FakeRobot, FakeSceneChannel, point_arm_fk

from pick_place.kinematics import Pose3D
from pick_place.results import FailureKind
from pick_place.sequences import pick, place
from pick_place.system import PickPlaceSystem

OBJECT_HEIGHT_M = 0.05


@pytest.fixture
def cylinder_pose() -> Pose3D:
    return Pose3D.from_xyz_rpy(x=0.5, y=0.1, z=OBJECT_HEIGHT_M)


def test_pick_and_place(
    system: PickPlaceSystem,
    scene_channel: FakeSceneChannel,
    robot: FakeRobot,
    cylinder_pose: Pose3D,
) -> None:
    """Verify that a picked object is carried and released level at the place location."""
    # Arrange: Add a cylinder to the scene
    system.lifecycle.add("cylinder", cylinder_pose)
    place_pose = Pose3D.from_xyz_rpy(x=-0.2, y=0.4, z=0.4, roll_rad=3.14159)

    # Act: Pick up the cylinder
    pick_result = pick(system.orchestrator, system.lifecycle, "cylinder", OBJECT_HEIGHT_M, 0.2)

    # Assert: The cylinder is attached and the arm is at travel height
    assert pick_result.succeeded
    assert list(scene_channel.attached) == ["cylinder"]
    assert point_arm_fk(robot.joints).z == pytest.approx(0.45)

    # Act: Place the cylinder
    place_result = place(system.orchestrator, system.lifecycle, place_pose, OBJECT_HEIGHT_M)

    # Assert: The cylinder rests level below the place pose and the arm has risen again
    assert place_result.succeeded
    assert scene_channel.attached == {}
    freed_pose = scene_channel.world["cylinder"].pose
    assert freed_pose.x == pytest.approx(-0.2)
    assert freed_pose.y == pytest.approx(0.4)
    assert freed_pose.z == pytest.approx(system.config.rest_height_m)
    assert point_arm_fk(robot.joints).z == pytest.approx(0.45)


def test_pick_stops_at_first_failure(
    system: PickPlaceSystem,
    scene_channel: FakeSceneChannel,
    path_service: FakeCartesianPathService,
    cylinder_pose: Pose3D,
) -> None:
    """Verify that a failed descent leaves the object unattached."""
    system.lifecycle.add("cylinder", cylinder_pose)
    path_service.fraction = 0.5

    result = pick(system.orchestrator, system.lifecycle, "cylinder", OBJECT_HEIGHT_M, 0.2)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.PATH_ERROR
    assert scene_channel.attached == {}


def test_pick_missing_object(system: PickPlaceSystem) -> None:
    result = pick(system.orchestrator, system.lifecycle, "cylinder", OBJECT_HEIGHT_M, 0.2)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.NOT_FOUND


def test_place_without_attachment(system: PickPlaceSystem) -> None:
    place_pose = Pose3D.from_xyz_rpy(x=0.3, z=0.4, roll_rad=3.14159)

    result = place(system.orchestrator, system.lifecycle, place_pose, OBJECT_HEIGHT_M)

    assert result.failure is not None
    assert result.failure.kind == FailureKind.NOTHING_ATTACHED
