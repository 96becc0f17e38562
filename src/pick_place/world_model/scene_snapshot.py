"""Define dataclasses representing point-in-time views of the robot and its world."""

from __future__ import annotations

from dataclasses import dataclass, field

from pick_place.kinematics import Configuration
from pick_place.world_model.collision_models import (
    AttachedObject,
    CollisionObject,
    ObjectOperation,
)


@dataclass(frozen=True)
class RobotState:
    """The robot's joint state together with the objects attached to it."""

    joint_state: Configuration = field(default_factory=dict)
    attached_objects: dict[str, AttachedObject] = field(default_factory=dict)  # Keyed by object id

    def with_joint_state(self, joints: Configuration) -> RobotState:
        """Construct a robot state whose joint positions are overridden by the given joints."""
        merged = dict(self.joint_state)
        merged.update(joints)
        return RobotState(merged, dict(self.attached_objects))


@dataclass(frozen=True)
class SceneSnapshot:
    """A point-in-time view of world collision objects plus the robot state.

    A snapshot is authoritative only at the instant it was fetched. When `is_diff` is True, the
        snapshot describes an incremental change to be applied rather than the full state.
    """

    robot_state: RobotState = field(default_factory=RobotState)
    world_objects: dict[str, CollisionObject] = field(default_factory=dict)  # Keyed by object id
    is_diff: bool = False

    @classmethod
    def from_objects(
        cls,
        world_objects: list[CollisionObject],
        attached_objects: list[AttachedObject] | None = None,
        joint_state: Configuration | None = None,
        is_diff: bool = False,
    ) -> SceneSnapshot:
        """Construct a snapshot from lists of objects, verifying that their ids are unique.

        :raises: ValueError, if two world objects or two attached objects share an id
        """
        attached_objects = attached_objects or []
        world = {obj.object_id: obj for obj in world_objects}
        attached = {att.object_id: att for att in attached_objects}

        if len(world) != len(world_objects) or len(attached) != len(attached_objects):
            raise ValueError("Object ids must be unique within a scene snapshot.")

        robot_state = RobotState(dict(joint_state or {}), attached)
        return SceneSnapshot(robot_state, world, is_diff)

    @property
    def attached_objects(self) -> list[AttachedObject]:
        return list(self.robot_state.attached_objects.values())

    @property
    def joint_state(self) -> Configuration:
        return self.robot_state.joint_state

    def find_object(self, object_id: str) -> CollisionObject | None:
        """Find the named world object in this snapshot (None if it isn't present)."""
        return self.world_objects.get(object_id)

    def find_attached(self, object_id: str) -> AttachedObject | None:
        """Find the named attached object in this snapshot (None if it isn't attached)."""
        return self.robot_state.attached_objects.get(object_id)

    @property
    def live_object_count(self) -> int:
        """Count the objects (world and attached) not marked for removal."""
        world = [o for o in self.world_objects.values() if o.operation != ObjectOperation.REMOVE]
        attached = [a for a in self.attached_objects if a.operation != ObjectOperation.REMOVE]
        return len(world) + len(attached)

    def reflects(self, diff: SceneSnapshot) -> bool:
        """Check whether this full snapshot reflects every change described by the given diff.

        ADD operations must appear in this snapshot and REMOVE operations must be absent from it.
        """
        for obj_id, obj in diff.world_objects.items():
            present = obj_id in self.world_objects
            if present != (obj.operation == ObjectOperation.ADD):
                return False

        for obj_id, attached in diff.robot_state.attached_objects.items():
            present = obj_id in self.robot_state.attached_objects
            if present != (attached.operation == ObjectOperation.ADD):
                return False

        return True
