"""
Countdown Demo Flow.

A sample flow showing variables, arithmetic, a conditional loop and a
message:

```
start → init → read → decrement → store → check → loop ─┬─→ read (while n > 0)
                                                        │
                                                        └─→ announce
```

The start node's ``parameter`` output is the number to count down from.
The message is sent to the start node's ``source``.
"""

import logging

from logicflow.tools.manager import FlowManager
import logicflow.nodes  # noqa: F401


logger = logging.getLogger(__name__)

DEMO_FLOW_NAME = "countdown-demo"


# ============================================================
# Flow Factory
# ============================================================

def create_countdown_flow(name: str = DEMO_FLOW_NAME, message: str = "Countdown finished") -> FlowManager:
    """
    Build the countdown flow through the editing interface.

    Args:
        name: Flow name
        message: Text broadcast when the countdown reaches zero

    Returns:
        A FlowManager holding the flow, enabled for event dispatch
    """
    manager = FlowManager.create(name, "TriggerNode", "start")

    manager.create_node("SetVariableNode", "init")
    manager.create_node("GetVariableNode", "read")
    manager.create_node("BinaryArithmeticNode", "decrement")
    manager.create_node("SetVariableNode", "store")
    manager.create_node("BinaryArithmeticNode", "check")
    manager.create_node("IfConditionNode", "loop")
    manager.create_node("BroadcastMessageNode", "announce")

    # n = parameter
    manager.set_const_input("init", 0, "n")
    manager.set_reference_input("init", 1, "start", 1)
    # n = n - 1
    manager.set_const_input("read", 0, "n")
    manager.set_reference_input("decrement", 0, "read", 0)
    manager.set_const_input("decrement", 1, 1.0)
    manager.set_const_input("decrement", 2, "-")
    manager.set_const_input("store", 0, "n")
    manager.set_reference_input("store", 1, "decrement", 0)
    # while n > 0
    manager.set_reference_input("check", 0, "decrement", 0)
    manager.set_const_input("check", 1, 0.0)
    manager.set_const_input("check", 2, ">")
    manager.set_reference_input("loop", 0, "check", 0)
    # announce
    manager.set_reference_input("announce", 0, "start", 0)
    manager.set_const_input("announce", 1, "chat")
    manager.set_const_input("announce", 2, message)

    for source, target in (
        ("start", "init"),
        ("init", "read"),
        ("read", "decrement"),
        ("decrement", "store"),
        ("store", "check"),
        ("check", "loop"),
    ):
        manager.set_next_node(source, 0, target)
    manager.set_next_node("loop", 0, "read")
    manager.set_next_node("loop", 1, "announce")

    manager.enabled = True
    return manager


async def register_countdown_demo(storage=None) -> FlowManager:
    """
    Register the countdown flow in storage.

    This makes the flow available immediately via the API without
    needing to build it first. A flow already stored under the demo
    name, such as one loaded from the flow directory, is kept.
    """
    if storage is None:
        from logicflow.storage.memory import flow_storage as storage

    existing = await storage.get(DEMO_FLOW_NAME)
    if existing is not None:
        logger.info(f"Demo flow {DEMO_FLOW_NAME} already stored, keeping it")
        return existing

    manager = create_countdown_flow()
    await storage.save(manager)

    logger.info(f"Registered demo flow: {DEMO_FLOW_NAME}")
    return manager
