"""
Arm physics and the actuator/sensor capability boundary.

Provides the DC-motor characteristic, the single-jointed arm dynamics
model, the ``MotorActuator``/``PositionSensor`` interfaces, and the
simulated backend that implements both against the dynamics model.
"""
