"""Safety check for custom validator expressions.

A custom validator is a single Python expression over ``value`` or, when
attached to an argument, the argument's own name. A validator on a
cnv:Type is shared by every argument of that type and sees only ``value``. It is embedded verbatim in generated code, so only
side-effect-free constructs are accepted.
"""

from __future__ import annotations

import ast

SAFE_BUILTINS = frozenset({"len", "abs", "min", "max", "str", "int", "float", "bool", "round", "all", "any"})

_ALLOWED_NODES = (
    ast.Expression,
    ast.BoolOp,
    ast.BinOp,
    ast.UnaryOp,
    ast.Compare,
    ast.IfExp,
    ast.Name,
    ast.Constant,
    ast.Call,
    ast.Attribute,
    ast.Subscript,
    ast.Slice,
    ast.Tuple,
    ast.List,
    ast.Set,
    ast.Load,
    ast.boolop,
    ast.operator,
    ast.unaryop,
    ast.cmpop,
)


def check_expression(expression: str, argument: str | None = None) -> None:
    """Raise ValueError if *expression* is not a safe predicate over ``value`` (or *argument*)."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as exc:
        msg = f"expression {expression!r} is not valid Python: {exc.msg}"
        raise ValueError(msg) from exc
    allowed_names = {"value"} | SAFE_BUILTINS
    if argument:
        allowed_names.add(argument)
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            msg = f"expression {expression!r} uses unsupported syntax ({type(node).__name__})"
            raise ValueError(msg)
        if isinstance(node, ast.Name) and node.id not in allowed_names:
            msg = f"expression {expression!r} references unknown name '{node.id}'"
            raise ValueError(msg)
        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            msg = f"expression {expression!r} accesses private attribute '{node.attr}'"
            raise ValueError(msg)
