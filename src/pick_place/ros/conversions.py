"""Define functions to convert between core data structures and ROS/MoveIt messages."""

from __future__ import annotations

import numpy as np
import rospy
import trimesh
from geometry_msgs.msg import Point, Pose
from geometry_msgs.msg import Quaternion as QuaternionMsg
from moveit_msgs.msg import (
    AttachedCollisionObject,
    CollisionObject as CollisionObjectMsg,
    PlanningScene,
    RobotState as RobotStateMsg,
    RobotTrajectory,
)
from sensor_msgs.msg import JointState
from shape_msgs.msg import Mesh, MeshTriangle, SolidPrimitive
from trajectory_msgs.msg import JointTrajectoryPoint

from pick_place.kinematics import Configuration, Point3D, Pose3D, UnitQuaternion
from pick_place.motion_plans import MotionPlan, TrajectoryPoint
from pick_place.ros.ros_utils import load_mesh_resource
from pick_place.world_model.collision_models import (
    AttachedObject,
    CollisionMesh,
    CollisionObject,
    CollisionPrimitive,
    ObjectOperation,
    ShapeType,
)
from pick_place.world_model.scene_snapshot import RobotState, SceneSnapshot


def point_to_msg(point: Point3D) -> Point:
    """Convert the given point into a geometry_msgs/Point message."""
    return Point(point.x, point.y, point.z)


def quaternion_to_msg(q: UnitQuaternion) -> QuaternionMsg:
    """Convert the given quaternion into a geometry_msgs/Quaternion message."""
    return QuaternionMsg(q.x, q.y, q.z, q.w)


def pose_to_msg(pose: Pose3D) -> Pose:
    """Convert the given pose into a geometry_msgs/Pose message."""
    return Pose(point_to_msg(pose.position), quaternion_to_msg(pose.orientation))


def pose_from_msg(pose_msg: Pose, ref_frame: str) -> Pose3D:
    """Construct a Pose3D from a geometry_msgs/Pose message expressed in the given frame."""
    p = pose_msg.position
    q = pose_msg.orientation
    if q.w == 0 and q.x == 0 and q.y == 0 and q.z == 0:  # Uninitialized orientation
        return Pose3D(Point3D(p.x, p.y, p.z), UnitQuaternion.identity(), ref_frame)
    return Pose3D(Point3D(p.x, p.y, p.z), UnitQuaternion(q.w, q.x, q.y, q.z), ref_frame)


def configuration_to_msg(joints: Configuration) -> JointState:
    """Convert a joint configuration into a sensor_msgs/JointState message."""
    msg = JointState()
    msg.name = list(joints.keys())
    msg.position = list(joints.values())
    return msg


def configuration_from_msg(msg: JointState) -> Configuration:
    """Construct a joint configuration from a sensor_msgs/JointState message."""
    return dict(zip(msg.name, msg.position))


def primitive_to_msg(primitive: CollisionPrimitive) -> SolidPrimitive:
    """Convert a CollisionPrimitive into a shape_msgs/SolidPrimitive message."""
    msg = SolidPrimitive()
    msg.type = primitive.shape_type.value
    msg.dimensions = list(primitive.shape_dimensions)
    return msg


def trimesh_to_msg(mesh: trimesh.Trimesh) -> Mesh:
    """Convert a trimesh.Trimesh into a shape_msgs/Mesh message."""
    mesh_msg = Mesh()
    mesh_msg.triangles = [MeshTriangle([int(i) for i in tri]) for tri in mesh.faces]
    mesh_msg.vertices = [Point(v[0], v[1], v[2]) for v in mesh.vertices]
    return mesh_msg


def trimesh_from_msg(mesh_msg: Mesh) -> trimesh.Trimesh:
    """Construct a trimesh.Trimesh from a shape_msgs/Mesh message."""
    vertices = np.array([[v.x, v.y, v.z] for v in mesh_msg.vertices])
    faces = np.array([list(t.vertex_indices) for t in mesh_msg.triangles])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def collision_object_to_msg(obj: CollisionObject) -> CollisionObjectMsg:
    """Convert a CollisionObject into a moveit_msgs/CollisionObject message.

    The object pose is stored as the pose of its single shape, relative to an identity object pose.
    """
    msg = CollisionObjectMsg()
    msg.header.frame_id = obj.pose.ref_frame
    msg.header.stamp = rospy.Time.now()
    msg.id = obj.object_id
    msg.operation = obj.operation.value
    if hasattr(msg, "pose"):
        msg.pose.orientation.w = 1.0

    if obj.operation == ObjectOperation.REMOVE:
        return msg  # Removal only needs the object id

    if isinstance(obj.geometry, CollisionPrimitive):
        msg.primitives.append(primitive_to_msg(obj.geometry))
        msg.primitive_poses.append(pose_to_msg(obj.pose))
    else:
        mesh = load_mesh_resource(obj.geometry)
        msg.type.key = mesh.resource  # Keep the resource name so the mesh can be identified
        msg.meshes.append(trimesh_to_msg(mesh.mesh))
        msg.mesh_poses.append(pose_to_msg(obj.pose))

    return msg


def collision_object_from_msg(msg: CollisionObjectMsg) -> CollisionObject:
    """Construct a CollisionObject from a moveit_msgs/CollisionObject message.

    :raises: ValueError, if the message contains neither a primitive nor a mesh
    """
    frame = msg.header.frame_id
    object_pose = pose_from_msg(msg.pose, frame) if hasattr(msg, "pose") else Pose3D.identity(frame)

    if msg.primitives:
        primitive_msg = msg.primitives[0]
        dims = tuple(primitive_msg.dimensions)
        geometry = CollisionPrimitive(ShapeType(primitive_msg.type), dims)
        shape_pose = pose_from_msg(msg.primitive_poses[0], frame)
    elif msg.meshes:
        mesh = trimesh_from_msg(msg.meshes[0])
        geometry = CollisionMesh(resource=msg.type.key or msg.id, mesh=mesh)
        shape_pose = pose_from_msg(msg.mesh_poses[0], frame)
    else:
        raise ValueError(f"Collision object '{msg.id}' has no primitive or mesh geometry.")

    pose = object_pose @ shape_pose
    return CollisionObject(msg.id, geometry, pose, ObjectOperation(msg.operation))


def attached_object_to_msg(attached: AttachedObject) -> AttachedCollisionObject:
    """Convert an AttachedObject into a moveit_msgs/AttachedCollisionObject message."""
    msg = AttachedCollisionObject()
    msg.link_name = attached.link_name
    msg.object = collision_object_to_msg(attached.obj)
    return msg


def attached_object_from_msg(msg: AttachedCollisionObject) -> AttachedObject:
    return AttachedObject(msg.link_name, collision_object_from_msg(msg.object))


def robot_state_to_msg(state: RobotState, is_diff: bool = False) -> RobotStateMsg:
    """Convert a RobotState into a moveit_msgs/RobotState message."""
    msg = RobotStateMsg()
    msg.joint_state = configuration_to_msg(state.joint_state)
    attached = state.attached_objects.values()
    msg.attached_collision_objects = [attached_object_to_msg(a) for a in attached]
    msg.is_diff = is_diff
    return msg


def robot_state_from_msg(msg: RobotStateMsg) -> RobotState:
    attached = [attached_object_from_msg(a) for a in msg.attached_collision_objects]
    return RobotState(configuration_from_msg(msg.joint_state), {a.object_id: a for a in attached})


def snapshot_to_msg(snapshot: SceneSnapshot) -> PlanningScene:
    """Convert a SceneSnapshot into a moveit_msgs/PlanningScene message."""
    msg = PlanningScene()
    msg.is_diff = snapshot.is_diff
    msg.robot_state = robot_state_to_msg(snapshot.robot_state, is_diff=snapshot.is_diff)
    world = snapshot.world_objects.values()
    msg.world.collision_objects = [collision_object_to_msg(o) for o in world]
    return msg


def snapshot_from_msg(msg: PlanningScene) -> SceneSnapshot:
    """Construct a SceneSnapshot from a moveit_msgs/PlanningScene message."""
    world = [collision_object_from_msg(o) for o in msg.world.collision_objects]
    robot_state = robot_state_from_msg(msg.robot_state)
    return SceneSnapshot(robot_state, {o.object_id: o for o in world}, msg.is_diff)


def plan_to_msg(plan: MotionPlan) -> RobotTrajectory:
    """Convert a MotionPlan into a moveit_msgs/RobotTrajectory message."""
    msg = RobotTrajectory()
    msg.joint_trajectory.joint_names = plan.joint_names
    for point in plan.points:
        point_msg = JointTrajectoryPoint()
        point_msg.positions = [point.positions[name] for name in plan.joint_names]
        point_msg.time_from_start = rospy.Duration.from_sec(point.time_from_start_s)
        msg.joint_trajectory.points.append(point_msg)
    return msg


def plan_from_msg(msg: RobotTrajectory) -> MotionPlan:
    """Construct a MotionPlan from the joint trajectory of a moveit_msgs/RobotTrajectory message."""
    names = list(msg.joint_trajectory.joint_names)
    points = [
        TrajectoryPoint(p.time_from_start.to_sec(), dict(zip(names, p.positions)))
        for p in msg.joint_trajectory.points
    ]
    return MotionPlan(points)
