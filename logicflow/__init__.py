"""
LogicFlow - A small visual logic-flow execution engine.

Build event-triggered graphs of typed computation nodes, run them with
loop protection, edit them with undo/redo and persist them as JSON.
"""

__version__ = "1.0.0"
