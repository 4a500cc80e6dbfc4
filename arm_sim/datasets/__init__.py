"""
Telemetry recording.

Provides a ``TelemetrySink`` that buffers every published frame in memory
and can export the run as NumPy arrays with a JSON metadata index.
"""
