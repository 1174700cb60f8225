"""hydractl -- Remote control service for a motorized closure.

Exposes open/close/stop commands for a gate or shutter over HTTP and
ships a simulated actuator so the whole control path can be exercised
without any hardware attached.
"""

__version__ = "0.1.0"
