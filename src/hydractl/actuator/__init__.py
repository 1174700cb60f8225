"""Actuator module for hydractl.

Public API:
    Actuator -- Abstract command interface
    SimulatedActuator -- Time-driven simulation of a closure motor
"""

from hydractl.actuator.base import Actuator
from hydractl.actuator.sim import SimulatedActuator

__all__ = ["Actuator", "SimulatedActuator"]
