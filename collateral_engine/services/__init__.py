"""Service modules"""
from .monitor import PositionMonitor, liquidatable

__all__ = ["PositionMonitor", "liquidatable"]
