"""
Arithmetic nodes.

Binary and unary operators over numbers, booleans, text and vectors.
The operator is itself an input, so one node type covers every
operation; an operator that does not apply to the operand kinds is a
node fault.
"""

from typing import Callable, Dict, List
import math
import operator

from logicflow.engine.errors import NodeFaultError
from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.node import FlowNode
from logicflow.engine.values import Value, Vec2, Vec3, as_string, is_number, type_name
from logicflow.tools.registry import register_node


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise NodeFaultError("Division by zero")
    return a / b


def _modulo(a: float, b: float) -> float:
    if b == 0:
        raise NodeFaultError("Modulo by zero")
    return math.fmod(a, b)


_NUMBER_OPS: Dict[str, Callable[[float, float], Value]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "x": operator.mul,
    "/": _divide,
    "%": _modulo,
    "^": math.pow,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "max": max,
    "min": min,
    "log": math.log,
    "atan2": math.atan2,
    "hypot": math.hypot,
}

_BOOLEAN_OPS: Dict[str, Callable[[bool, bool], bool]] = {
    "and": lambda a, b: a and b,
    "&&": lambda a, b: a and b,
    "or": lambda a, b: a or b,
    "||": lambda a, b: a or b,
    "xor": operator.ne,
}

_TEXT_OPS: Dict[str, Callable[[str, str], Value]] = {
    "+": operator.add,
    "append": operator.add,
    "contains": lambda a, b: b in a,
    "startswith": lambda a, b: a.startswith(b),
    "endswith": lambda a, b: a.endswith(b),
    "indexof": lambda a, b: float(a.find(b)),
    "lastindexof": lambda a, b: float(a.rfind(b)),
}


def _unsupported(op: str, *operands: Value) -> NodeFaultError:
    kinds = ", ".join(type_name(v) for v in operands)
    return NodeFaultError(f"Unsupported operation '{op}' on {kinds}")


def _vector_binary(a: Value, b: Value, op: str) -> Value:
    a_vec = isinstance(a, (Vec2, Vec3))
    b_vec = isinstance(b, (Vec2, Vec3))
    if a_vec and b_vec and type(a) is type(b):
        if op == "+":
            return a + b
        if op == "-":
            return a - b
        if op == "@":
            return a.dot(b)
        if op == "#" and isinstance(a, Vec3):
            return a.cross(b)
    elif a_vec and is_number(b):
        if op in ("*", "x"):
            return a.scale(b)
        if op == "/":
            return a.scale(_divide(1.0, b))
    elif is_number(a) and b_vec:
        if op in ("*", "x"):
            return b.scale(a)
    raise _unsupported(op, a, b)


def binary_operation(a: Value, b: Value, op: str) -> Value:
    """
    Apply a binary operator.

    ``==`` and ``!=`` compare any two values, including absent ones. For
    every other operator an absent operand yields the other operand.
    """
    if op == "==":
        return a == b
    if op == "!=":
        return a != b
    if a is None:
        return b
    if b is None:
        return a

    if isinstance(a, (Vec2, Vec3)) or isinstance(b, (Vec2, Vec3)):
        return _vector_binary(a, b, op)
    if is_number(a) and is_number(b) and op in _NUMBER_OPS:
        return _NUMBER_OPS[op](float(a), float(b))
    if isinstance(a, bool) and isinstance(b, bool) and op in _BOOLEAN_OPS:
        return _BOOLEAN_OPS[op](a, b)
    if (isinstance(a, str) or isinstance(b, str)) and op in _TEXT_OPS:
        return _TEXT_OPS[op](as_string(a), as_string(b))
    raise _unsupported(op, a, b)


def _cbrt(a: float) -> float:
    return math.copysign(abs(a) ** (1.0 / 3.0), a)


def _sign(a: float) -> float:
    if a == 0:
        return 0.0
    return math.copysign(1.0, a)


_UNARY_NUMBER_OPS: Dict[str, Callable[[float], Value]] = {
    "-": operator.neg,
    "abs": abs,
    "sqrt": math.sqrt,
    "cbrt": _cbrt,
    "exp": math.exp,
    "ln": math.log,
    "lg": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "ceil": lambda a: float(math.ceil(a)),
    "floor": lambda a: float(math.floor(a)),
    "round": lambda a: float(math.floor(a + 0.5)),
    "rad": math.radians,
    "deg": math.degrees,
    "sgn": _sign,
}

_UNARY_TEXT_OPS: Dict[str, Callable[[str], Value]] = {
    "len": lambda a: float(len(a)),
    "lower": str.lower,
    "upper": str.upper,
    "isempty": lambda a: len(a) == 0,
    "strip": str.strip,
}


def unary_operation(a: Value, op: str) -> Value:
    """Apply a unary operator; an absent operand yields absent."""
    if a is None:
        return None
    if isinstance(a, (Vec2, Vec3)):
        if op in ("len", "length"):
            return a.length()
        if op in ("norm", "normalize"):
            return a.normalize()
        if op == "-":
            return -a
        if op == "x":
            return a.x
        if op == "y":
            return a.y
        if op == "z" and isinstance(a, Vec3):
            return a.z
        raise _unsupported(op, a)
    if isinstance(a, bool):
        if op in ("!", "not"):
            return not a
        raise _unsupported(op, a)
    if is_number(a) and op in _UNARY_NUMBER_OPS:
        return _UNARY_NUMBER_OPS[op](float(a))
    if isinstance(a, str) and op in _UNARY_TEXT_OPS:
        return _UNARY_TEXT_OPS[op](a)
    raise _unsupported(op, a)


@register_node("AdditionNode")
class AdditionNode(FlowNode):
    """Adds two numbers."""

    metadata = (
        NodeMetadata.builder("Addition", "Adds two numbers")
        .input("a", "First operand", "number")
        .input("b", "Second operand", "number")
        .output("sum", "a + b", "number")
        .branch("next", "Runs after the addition")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        a, b = inputs
        if a is None or b is None:
            raise NodeFaultError(f"Node '{self.name}' is missing an operand")
        if not (is_number(a) and is_number(b)):
            raise NodeFaultError(
                f"Node '{self.name}' cannot add {type_name(a)} and {type_name(b)}"
            )
        status.set_output(0, float(a) + float(b))


@register_node("BinaryArithmeticNode")
class BinaryArithmeticNode(FlowNode):
    """Applies an operator to two operands."""

    metadata = (
        NodeMetadata.builder("Binary operation", "Computes a <op> b")
        .input("a", "Left operand", "any")
        .input("b", "Right operand", "any")
        .input("operator", "Operator such as +, *, ==, max or contains", "text")
        .output("result", "Result of the operation", "any")
        .branch("next", "Runs after the operation")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        a, b, op = inputs
        status.set_output(0, binary_operation(a, b, as_string(op).strip().lower()))


@register_node("UnaryArithmeticNode")
class UnaryArithmeticNode(FlowNode):
    """Applies an operator to one operand."""

    metadata = (
        NodeMetadata.builder("Unary operation", "Computes <op> a")
        .input("a", "Operand", "any")
        .input("operator", "Operator such as -, abs, sqrt, not or len", "text")
        .output("result", "Result of the operation", "any")
        .branch("next", "Runs after the operation")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        a, op = inputs
        status.set_output(0, unary_operation(a, as_string(op).strip().lower()))
