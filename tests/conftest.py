"""Define Pytest fixtures that assemble the pick-and-place core around in-memory fakes."""

from __future__ import annotations

import pytest
from fakes import (
    FakeCartesianPathService,
    FakeKinematicsService,
    FakePlanningService,
    FakeRobot,
    FakeSceneChannel,
)

from pick_place.config import OrchestratorConfig
from pick_place.system import PickPlaceSystem, build_system


@pytest.fixture
def config() -> OrchestratorConfig:
    """Return a configuration whose scene confirmation gives up quickly."""
    return OrchestratorConfig(publish_timeout_s=0.05, publish_poll_period_s=0.001)


@pytest.fixture
def robot() -> FakeRobot:
    return FakeRobot()


@pytest.fixture
def kinematics_service() -> FakeKinematicsService:
    return FakeKinematicsService()


@pytest.fixture
def path_service() -> FakeCartesianPathService:
    return FakeCartesianPathService()


@pytest.fixture
def planning_service(robot: FakeRobot) -> FakePlanningService:
    return FakePlanningService(robot)


@pytest.fixture
def scene_channel(robot: FakeRobot) -> FakeSceneChannel:
    return FakeSceneChannel(robot)


@pytest.fixture
def system(
    kinematics_service: FakeKinematicsService,
    path_service: FakeCartesianPathService,
    planning_service: FakePlanningService,
    scene_channel: FakeSceneChannel,
    config: OrchestratorConfig,
) -> PickPlaceSystem:
    """Return the pick-and-place core wired to the fake collaborators."""
    return build_system(
        kinematics_service=kinematics_service,
        path_service=path_service,
        planning_service=planning_service,
        scene_channel=scene_channel,
        config=config,
    )
