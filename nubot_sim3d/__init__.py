"""
nubot_sim3d - Kontrol bola & robot rival di simulasi Gazebo dengan ROS2.

Package ini memisahkan 3 layer utama:
  1. Physics core     → frame transform, possession, stuck, shot, ball decay
                        (pure numpy/scipy, unit meter & radian)
  2. Controller       → tick loop dengan satu lock, aksi via BodyActuator
  3. ROS2 Interface   → model_states, velcmd, BallHandle/Shoot, omnivision
"""
