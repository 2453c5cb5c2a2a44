"""
Event nodes.

Event nodes start flows. The host fills their outputs with the event
payload before the run begins.
"""

from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.node import EventNode
from logicflow.tools.registry import register_node


@register_node("DummyNode")
class DummyNode(EventNode):
    """Starts a flow without any payload."""

    metadata = (
        NodeMetadata.builder("Dummy event", "Placeholder start node without payload")
        .branch("next", "First node to run")
        .build()
    )


@register_node("TriggerNode")
class TriggerNode(EventNode):
    """Started by an explicit trigger, carrying who triggered it and a parameter."""

    metadata = (
        NodeMetadata.builder("Trigger", "Started manually or by another system")
        .output("source", "Who or what triggered the flow", "text")
        .output("parameter", "Free-form trigger parameter", "any")
        .branch("next", "First node to run")
        .build()
    )


@register_node("EntityDamageEventNode")
class EntityDamageEventNode(EventNode):
    metadata = (
        NodeMetadata.builder("Entity damaged", "Started when an entity takes damage")
        .output("victim", "Entity that was damaged", "text")
        .output("amount", "Damage dealt", "number")
        .output("damage_type", "Kind of damage", "text")
        .output("attacker", "Entity responsible for the damage", "text")
        .output("source", "Direct source of the damage", "text")
        .output("position", "Where the victim was hit", "vec3")
        .branch("next", "First node to run")
        .build()
    )


@register_node("EntityDeathEventNode")
class EntityDeathEventNode(EventNode):
    metadata = (
        NodeMetadata.builder("Entity died", "Started when an entity dies")
        .output("victim", "Entity that died", "text")
        .output("damage_type", "Kind of the fatal damage", "text")
        .output("attacker", "Entity responsible for the death", "text")
        .output("source", "Direct source of the fatal damage", "text")
        .output("position", "Where the entity died", "vec3")
        .output("message", "Death message", "text")
        .branch("next", "First node to run")
        .build()
    )


@register_node("ProjectileHitEntityEventNode")
class ProjectileHitEntityEventNode(EventNode):
    metadata = (
        NodeMetadata.builder("Projectile hit entity", "Started when a projectile hits an entity")
        .output("projectile", "Projectile that hit", "text")
        .output("shooter", "Entity that fired the projectile", "text")
        .output("entity", "Entity that was hit", "text")
        .output("position", "Where the projectile hit", "vec3")
        .output("distance", "Distance between shooter and hit entity", "number")
        .branch("next", "First node to run")
        .build()
    )
