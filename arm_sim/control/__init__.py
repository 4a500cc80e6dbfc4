"""
Feedback control and orchestration.

Provides the PD feedback law, the tunable-parameter stores, and the
``ArmController`` that ties sensor, controller and actuator into one
periodic cycle.
"""
