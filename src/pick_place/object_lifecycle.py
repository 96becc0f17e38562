"""Define operations that add, attach, detach, and remove objects in the shared world model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pick_place.filesystem.load_from_yaml import load_object_poses
from pick_place.logging import log_error, log_info
from pick_place.pose_transforms import level_pose
from pick_place.results import FailureKind, Result
from pick_place.world_model.collision_models import AttachedObject, CollisionObject, ObjectOperation
from pick_place.world_model.scene_snapshot import SceneSnapshot
from pick_place.world_model.shape_catalog import ShapeCatalog, ShapeDescriptor

if TYPE_CHECKING:
    from pathlib import Path

    from pick_place.config import OrchestratorConfig
    from pick_place.kinematics import Pose3D
    from pick_place.kinematics_client import KinematicsClient
    from pick_place.world_model.scene_model import SceneModel


class ObjectLifecycleManager:
    """Mutate the world model by publishing incremental scene changes.

    Objects are tracked by id: adding or removing one object never affects unrelated objects.
        Every publication waits until the change is observed in a freshly fetched snapshot.
    """

    def __init__(
        self,
        scene: SceneModel,
        kinematics: KinematicsClient,
        config: OrchestratorConfig,
        catalog: ShapeCatalog | None = None,
    ) -> None:
        self._scene = scene
        self._kinematics = kinematics
        self._config = config
        self.catalog = catalog or ShapeCatalog()

    def add(
        self,
        shape: str | ShapeDescriptor,
        pose: Pose3D,
        object_id: str | None = None,
    ) -> Result[CollisionObject]:
        """Add an object with the given shape at the given pose.

        :param shape: Shape descriptor, or the name of a shape in the catalog
        :param pose: Pose of the new object
        :param object_id: Id of the new object (defaults to the shape's name)
        :return: Result holding the added collision object
        """
        descriptor = self.catalog.get(shape) if isinstance(shape, str) else shape
        object_id = object_id or descriptor.name
        obj = CollisionObject(object_id, descriptor.geometry, pose, ObjectOperation.ADD)
        log_info(f"Adding object '{obj.object_id}' to the planning scene")

        diff = SceneSnapshot.from_objects([obj], is_diff=True)
        published = self._scene.publish_diff(diff)
        if not published.succeeded:
            return Result(failure=published.failure)
        return Result.ok(obj)

    def add_known_objects(self, yaml_path: Path) -> Result[list[CollisionObject]]:
        """Add every object listed under "object_poses" in the given YAML file.

        Each object's id doubles as the name of its shape in the catalog. Objects are added one
            at a time, stopping at the first addition that fails.

        :param yaml_path: Path to a YAML file mapping object ids to poses
        :return: Result holding the added collision objects
        :raises: KeyError, if an object id doesn't name a shape in the catalog
        """
        added: list[CollisionObject] = []
        for object_id, pose in load_object_poses(yaml_path).items():
            result = self.add(object_id, pose)
            if result.failure is not None:
                return Result(failure=result.failure)
            added.append(result.unwrap())

        log_info(f"Added {len(added)} known objects from {yaml_path}")
        return Result.ok(added)

    def remove(self, object_id: str) -> Result[CollisionObject]:
        """Remove the named world object, leaving all other objects untouched."""
        snapshot = self._scene.refresh()
        obj = self._scene.find_object(object_id, snapshot)
        if obj is None:
            return Result.fail(FailureKind.NOT_FOUND, f"No object '{object_id}' in the scene")

        removed = obj.with_operation(ObjectOperation.REMOVE)
        published = self._scene.publish_diff(SceneSnapshot.from_objects([removed], is_diff=True))
        if not published.succeeded:
            return Result(failure=published.failure)
        return Result.ok(removed)

    def attach(self, object_id: str) -> Result[AttachedObject]:
        """Attach the named world object to the end-effector.

        The object is not removed from the local world-object view; reconciling the world and
            attachment lists is the responsibility of the remote scene.

        :param object_id: Id of the world object to be attached
        :return: Result holding the published attached object
        """
        snapshot = self._scene.refresh()
        if snapshot.attached_objects:
            attached_id = snapshot.attached_objects[0].object_id
            log_error(f"Cannot attach '{object_id}' while '{attached_id}' is attached")
            return Result.fail(FailureKind.ALREADY_ATTACHED, f"'{attached_id}' is already attached")

        obj = self._scene.find_object(object_id, snapshot)
        if obj is None:
            return Result.fail(FailureKind.NOT_FOUND, f"No object '{object_id}' in the scene")

        log_info(f"Attaching object '{object_id}' to the end-effector")
        attached = AttachedObject(self._config.ee_frame, obj.with_operation(ObjectOperation.ADD))
        published = self._scene.publish_attached(attached)
        if not published.succeeded:
            return Result(failure=published.failure)
        return Result.ok(attached)

    def detach(self) -> Result[CollisionObject]:
        """Detach the attached object, leaving it level at rest below the end-effector.

        The freed object keeps the end-effector's x/y position and yaw (roll and pitch are
            discarded) and is placed at the configured rest height.

        :return: Result holding the freed world object
        """
        log_info("Detaching object from the robot")
        snapshot = self._scene.refresh()
        if not snapshot.attached_objects:
            log_error("There was no object attached to the robot")
            return Result.fail(FailureKind.NOTHING_ATTACHED, "No object is attached to the robot")

        attached = snapshot.attached_objects[0]
        ee_result = self._kinematics.compute_forward(snapshot.joint_state, snapshot.robot_state)
        if not ee_result.succeeded:
            return Result(failure=ee_result.failure)

        freed_pose = level_pose(ee_result.unwrap(), z=self._config.rest_height_m)
        freed_pose.ref_frame = self._config.base_frame
        freed = attached.obj.with_pose(freed_pose).with_operation(ObjectOperation.ADD)
        removed = attached.obj.with_operation(ObjectOperation.REMOVE)
        released = AttachedObject(attached.link_name, removed)

        diff = SceneSnapshot.from_objects([freed], [released], is_diff=True)
        published = self._scene.publish_diff(diff)
        if not published.succeeded:
            return Result(failure=published.failure)
        return Result.ok(freed)

    def clean(self) -> Result[SceneSnapshot]:
        """Remove every attached and world object in a single published diff.

        :return: Result holding the confirmed scene snapshot after the removal
        """
        snapshot = self._scene.refresh()
        removed_world = [
            o.with_operation(ObjectOperation.REMOVE) for o in snapshot.world_objects.values()
        ]
        removed_attached = [
            AttachedObject(a.link_name, a.obj.with_operation(ObjectOperation.REMOVE))
            for a in snapshot.attached_objects
        ]
        num_world, num_attached = len(removed_world), len(removed_attached)
        log_info(f"Removing {num_world} world and {num_attached} attached objects")

        diff = SceneSnapshot.from_objects(removed_world, removed_attached, is_diff=True)
        return self._scene.publish_diff(diff)
