"""
Workflows package - Sample flow implementations.
"""

from logicflow.workflows.countdown import create_countdown_flow, register_countdown_demo

__all__ = [
    "create_countdown_flow",
    "register_countdown_demo",
]
