"""
Telemetry sinks and real-time rendering.

Provides the ``TelemetrySink`` interface the controller publishes to, a
NumPy canvas renderer for the arm, and a Pygame-based live display.
"""
