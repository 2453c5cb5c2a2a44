"""
Messaging nodes.
"""

from typing import List

from logicflow.engine.context import Message
from logicflow.engine.errors import NodeFaultError
from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.node import FlowNode
from logicflow.engine.values import Value, as_string
from logicflow.tools.registry import register_node


@register_node("BroadcastMessageNode")
class BroadcastMessageNode(FlowNode):
    """
    Sends a text message to the host.

    Receiver and channel default to ``all`` and ``chat``. The message
    itself is required.
    """

    metadata = (
        NodeMetadata.builder("Broadcast message", "Sends a message through the host")
        .input("receiver", "Who should get the message (default: all)", "text")
        .input("channel", "Where the message is shown (default: chat)", "text")
        .input("message", "Message text", "any")
        .branch("next", "Runs after the message is sent")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        receiver, channel, text = inputs
        if text is None:
            raise NodeFaultError(f"Node '{self.name}' has no message to send")
        context.emit(Message(
            receiver=as_string(receiver) or "all",
            channel=as_string(channel) or "chat",
            text=as_string(text),
            node_name=self.name,
        ))
