"""
rival_node.py — ROS2 Node yang menghubungkan RivalController ke Gazebo.

Interface:
  - sub  /gazebo/model_states         (gazebo_msgs/ModelStates)
  - sub  nubotcontrol/velcmd          (nubot_common/VelCmd, cm/s & rad/s)
  - srv  BallHandle                   (nubot_common/BallHandle)
  - srv  Shoot                        (nubot_common/Shoot)
  - srv  ~/reset                      (std_srvs/Empty)
  - pub  omnivision/OmniVisionInfo    (nubot_common/OminiVisionInfo, cm)
  - cli  set_entity_state / apply_link_wrench (gazebo_ros)
"""

import sys

import numpy as np

import rclpy
from rclpy.node import Node
from rclpy.callback_groups import ReentrantCallbackGroup
from rclpy.executors import MultiThreadedExecutor
from rclpy.logging import get_logger
from rcl_interfaces.msg import SetParametersResult
from builtin_interfaces.msg import Duration
from gazebo_msgs.msg import ModelStates, EntityState
from gazebo_msgs.srv import SetEntityState, ApplyLinkWrench
from std_srvs.srv import Empty

from nubot_common.msg import VelCmd, OminiVisionInfo, RobotInfo as RobotInfoMsg, Point2d, PPoint
from nubot_common.srv import BallHandle, Shoot

from nubot_sim3d.controller import BodyActuator, RivalController
from nubot_sim3d.objects.field import BallConfig, FieldConfig
from nubot_sim3d.objects.robot import RobotConfig
from nubot_sim3d.objects.vision_info import VisionInfo
from nubot_sim3d.physics.body_state import BodyState, Pose, Twist, WorldSnapshot
from nubot_sim3d.physics.frame_transform import GaussianNoise


def _to_body_state(name: str, pose, twist) -> BodyState:
    """geometry_msgs Pose/Twist → BodyState (world frame mentah)."""
    p, q = pose.position, pose.orientation
    return BodyState(
        name,
        Pose([p.x, p.y, p.z], [q.x, q.y, q.z, q.w]),
        Twist([twist.linear.x, twist.linear.y, twist.linear.z],
              [twist.angular.x, twist.angular.y, twist.angular.z]),
    )


def _fill_vector(msg_vec, values):
    msg_vec.x, msg_vec.y, msg_vec.z = (float(v) for v in values)


# ======================================================================
# GazeboActuator — batch aksi per tick ke service gazebo_ros
# ======================================================================

class GazeboActuator(BodyActuator):
    """BodyActuator via SetEntityState & ApplyLinkWrench (async)."""

    def __init__(self, node: Node, robot_name: str, ball_name: str, ball_link: str,
                 force_duration: float,
                 set_state_service: str = '/gazebo/set_entity_state',
                 wrench_service: str = '/gazebo/apply_link_wrench'):
        self.node = node
        self.robot_name = robot_name
        self.ball_name = ball_name
        self.ball_link = ball_link
        self.force_duration = force_duration

        cb = node.callback_group
        self.state_client = node.create_client(
            SetEntityState, set_state_service, callback_group=cb)
        self.wrench_client = node.create_client(
            ApplyLinkWrench, wrench_service, callback_group=cb)

        self._latest: dict[str, BodyState] = {}
        self._pending: dict[str, EntityState] = {}
        self._force: np.ndarray | None = None

    def begin(self, snapshot: WorldSnapshot):
        """Snapshot yang dipakai tick ini; SetEntityState butuh pose + twist lengkap.

        Dipanggil controller di bawah lock-nya, jadi pose yang dikirim selalu
        berasal dari snapshot yang sama dengan hasil komputasi tick.
        """
        self._latest = {b.name: b for b in snapshot.bodies}
        self._pending = {}
        self._force = None

    def _state_for(self, name: str) -> EntityState:
        state = self._pending.get(name)
        if state is not None:
            return state
        state = EntityState()
        state.name = name
        state.reference_frame = 'world'
        body = self._latest.get(name)
        if body is not None:
            _fill_vector(state.pose.position, body.pose.position)
            q = body.pose.orientation
            state.pose.orientation.x, state.pose.orientation.y = float(q[0]), float(q[1])
            state.pose.orientation.z, state.pose.orientation.w = float(q[2]), float(q[3])
            _fill_vector(state.twist.linear, body.twist.linear)
            _fill_vector(state.twist.angular, body.twist.angular)
        else:
            state.pose.orientation.w = 1.0
        self._pending[name] = state
        return state

    def set_robot_velocity(self, linear, angular):
        state = self._state_for(self.robot_name)
        _fill_vector(state.twist.linear, linear)
        _fill_vector(state.twist.angular, angular)

    def set_ball_velocity(self, linear):
        state = self._state_for(self.ball_name)
        _fill_vector(state.twist.linear, linear)
        self._force = None

    def set_ball_pose(self, position, orientation):
        state = self._state_for(self.ball_name)
        _fill_vector(state.pose.position, position)
        o = state.pose.orientation
        o.x, o.y, o.z, o.w = (float(v) for v in orientation)

    def apply_ball_force(self, force):
        self._force = np.asarray(force, dtype=float)

    def flush(self):
        pending, self._pending = self._pending, {}
        force, self._force = self._force, None

        if pending and not self.state_client.service_is_ready():
            self.node.get_logger().warning(
                f"{self.state_client.srv_name} not available, dropping state commands",
                throttle_duration_sec=5.0)
        else:
            for state in pending.values():
                req = SetEntityState.Request()
                req.state = state
                self.state_client.call_async(req)

        if force is None:
            return
        if not self.wrench_client.service_is_ready():
            self.node.get_logger().warning(
                f"{self.wrench_client.srv_name} not available, dropping ball force",
                throttle_duration_sec=5.0)
            return
        req = ApplyLinkWrench.Request()
        req.link_name = self.ball_link
        req.reference_frame = 'world'
        _fill_vector(req.wrench.force, force)
        nanosec = int(self.force_duration * 1e9)
        req.duration = Duration(sec=nanosec // 1_000_000_000,
                                nanosec=nanosec % 1_000_000_000)
        self.wrench_client.call_async(req)


# ======================================================================
# RivalNode
# ======================================================================

class RivalNode(Node):
    """ROS2 Node untuk satu robot rival di Gazebo."""

    def __init__(self):
        super().__init__('rival_gazebo')
        self.callback_group = ReentrantCallbackGroup()

        default_name = self.get_namespace().strip('/') or 'rival1'
        self.declare_parameter('robot_name', default_name)
        self.declare_parameter('football_name', 'football')
        self.declare_parameter('football_chassis', 'football::ball')
        self.declare_parameter('cyan_prefix', 'nubot')
        self.declare_parameter('magenta_prefix', 'rival')
        self.declare_parameter('dribble_distance_thres', 0.50)
        self.declare_parameter('dribble_angle_thres', 30.0)
        self.declare_parameter('field_length', 18.0)
        self.declare_parameter('field_width', 12.0)
        self.declare_parameter('update_rate', 100.0)
        self.declare_parameter('gaussian_noise', 0.0)
        self.declare_parameter('noise_seed', -1)
        self.declare_parameter('set_state_service', '/gazebo/set_entity_state')
        self.declare_parameter('wrench_service', '/gazebo/apply_link_wrench')

        robot_cfg = RobotConfig(
            name=self._param('robot_name'),
            cyan_prefix=self._param('cyan_prefix'),
            magenta_prefix=self._param('magenta_prefix'),
            dribble_distance_thres=self._param('dribble_distance_thres'),
            dribble_angle_thres=self._param('dribble_angle_thres'))
        field_cfg = FieldConfig(length=self._param('field_length'),
                                width=self._param('field_width'))
        self.Ts = 1.0 / self._param('update_rate')
        ball_cfg = BallConfig(name=self._param('football_name'),
                              chassis_link=self._param('football_chassis'),
                              tick_period=self.Ts)

        noise = None
        if self._param('gaussian_noise') > 0.0:
            seed = self._param('noise_seed')
            noise = GaussianNoise(self._param('gaussian_noise'),
                                  seed=None if seed < 0 else seed)

        self.actuator = GazeboActuator(
            self, robot_cfg.name, ball_cfg.name, ball_cfg.chassis_link,
            force_duration=self.Ts,
            set_state_service=self._param('set_state_service'),
            wrench_service=self._param('wrench_service'))
        self.controller = RivalController(
            self.actuator, robot_cfg, field_cfg, ball_cfg,
            noise=noise, logger=self.get_logger())

        cb = self.callback_group

        self.model_states_sub = self.create_subscription(
            ModelStates, '/gazebo/model_states',
            self._model_states_callback, 100, callback_group=cb)
        self.velcmd_sub = self.create_subscription(
            VelCmd, 'nubotcontrol/velcmd',
            self._vel_callback, 100, callback_group=cb)

        self.ballhandle_srv = self.create_service(
            BallHandle, 'BallHandle', self._handle_ball_handle, callback_group=cb)
        self.shoot_srv = self.create_service(
            Shoot, 'Shoot', self._handle_shoot, callback_group=cb)
        self.reset_srv = self.create_service(
            Empty, '~/reset', self._handle_reset, callback_group=cb)

        self.vision_pub = self.create_publisher(
            OminiVisionInfo, 'omnivision/OmniVisionInfo', 10)

        self.add_on_set_parameters_callback(self._on_parameters)

        self.timer = self.create_timer(
            self.Ts, self._update, callback_group=cb)

        self.get_logger().info(
            f"RivalNode initialized — robot={robot_cfg.name} id={robot_cfg.agent_id} "
            f"ball={ball_cfg.name} rate={1.0 / self.Ts:.0f}Hz")

    # ------------------------------------------------------------------
    # Parameter
    # ------------------------------------------------------------------

    def _param(self, name: str):
        return self.get_parameter(name).value

    def _on_parameters(self, params) -> SetParametersResult:
        for p in params:
            if p.name in ('dribble_distance_thres', 'dribble_angle_thres'):
                if p.value is None or p.value <= 0:
                    return SetParametersResult(
                        successful=False, reason=f"{p.name} must be positive")
        for p in params:
            if p.name == 'dribble_distance_thres':
                self.controller.set_dribble_thresholds(distance=p.value)
            elif p.name == 'dribble_angle_thres':
                self.controller.set_dribble_thresholds(angle_deg=p.value)
        return SetParametersResult(successful=True)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _model_states_callback(self, msg: ModelStates):
        bodies = [_to_body_state(name, pose, twist)
                  for name, pose, twist in zip(msg.name, msg.pose, msg.twist)]
        stamp = self.get_clock().now().nanoseconds * 1e-9
        snapshot = WorldSnapshot(bodies, stamp)
        self.controller.update_world(snapshot)

    def _vel_callback(self, msg: VelCmd):
        self.controller.handle_velocity_command(msg.Vx, msg.Vy, msg.w)

    def _handle_ball_handle(self, req, res):
        res.BallIsHolding = self.controller.handle_ball_handle(bool(req.enable))
        self.get_logger().info(
            f"[{self.controller.name}] dribble service: enable={int(req.enable)} "
            f"holding={int(res.BallIsHolding)}")
        return res

    def _handle_shoot(self, req, res):
        res.ShootIsDone = int(self.controller.handle_shoot(req.strength, req.ShootPos))
        return res

    def _handle_reset(self, req, res):
        self.controller.reset()
        self.get_logger().info(f"[{self.controller.name}] reset")
        return res

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _update(self):
        result = self.controller.tick()
        if result.vision is not None:
            self._publish_vision(result.vision)

    def _publish_vision(self, vision: VisionInfo):
        stamp = self.get_clock().now().to_msg()
        msg = OminiVisionInfo()
        msg.header.stamp = stamp

        ball = msg.ballinfo
        ball.header.stamp = stamp
        ball.pos.x, ball.pos.y = vision.ball.pos
        ball.real_pos.angle = vision.ball.real_angle
        ball.real_pos.radius = vision.ball.real_radius
        ball.velocity.x, ball.velocity.y = vision.ball.velocity
        ball.pos_known = vision.ball.pos_known
        ball.velocity_known = vision.ball.velocity_known

        obstacles = msg.obstacleinfo
        obstacles.header.stamp = stamp
        for (x, y), (angle, radius) in zip(vision.obstacles.pos,
                                           vision.obstacles.polar_pos):
            obstacles.pos.append(Point2d(x=x, y=y))
            obstacles.polar_pos.append(PPoint(angle=angle, radius=radius))

        for robot in vision.robots:
            info = RobotInfoMsg()
            info.header.stamp = stamp
            info.AgentID = robot.agent_id
            info.pos.x, info.pos.y = robot.pos
            info.heading.theta = robot.heading
            info.vrot = robot.vrot
            info.vtrans.x, info.vtrans.y = robot.vtrans
            info.isstuck = robot.is_stuck
            info.isvalid = robot.is_valid
            msg.robotinfo.append(info)

        self.vision_pub.publish(msg)


# ======================================================================
# Entry point
# ======================================================================

def main(args=None):
    rclpy.init(args=args)
    node = None
    try:
        node = RivalNode()
        executor = MultiThreadedExecutor()
        executor.add_node(node)
        node.get_logger().info("Starting rival control...")
        executor.spin()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        get_logger('rival_gazebo').fatal(
            f"Cannot start rival control: {e}")
        return 1
    finally:
        if node is not None:
            node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()
    return 0


if __name__ == '__main__':
    sys.exit(main())
