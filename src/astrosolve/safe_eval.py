# -----------------------------------------------------------------------------
# Safe mathematical evaluator (AST allow-list)
# Purpose:
#   Evaluate a small arithmetic language without handing anything to eval():
#   the text is parsed with `ast` and the tree is walked node by node, and
#   only the node types below are given a meaning.
# Grammar accepted:
#   - int/float literals (incl. scientific notation)
#   - binary + - * / and exponentiation (** or ^)
#   - unary + / -
#   - parentheses
#   - calls to the functions in _ALLOWED_FUNCS (positional args only)
#   - the names pi / π / e
# Anything else (attributes, subscripts, comprehensions, lambdas, keywords,
# strings, booleans, complex literals) raises ValueError.
# -----------------------------------------------------------------------------

from __future__ import annotations
import ast
import math
import operator
from typing import Callable, Dict

# Whitelisted math functions; matched case-insensitively
_ALLOWED_FUNCS: Dict[str, Callable[..., float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sqrt": math.sqrt,
    "exp": math.exp,
    "ln": math.log,      # natural log
    "log": math.log10,   # base-10 log
    "pow": math.pow,
}

# Whitelisted named constants; matched case-insensitively
_ALLOWED_CONSTS: Dict[str, float] = {
    "pi": math.pi,
    "π": math.pi,
    "e": math.e,
}

# math.pow raises on complex results (negative base, fractional exponent)
# instead of silently returning a complex number like `**` does.
_BINOPS: Dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: math.pow,
}
_UNARYOPS: Dict[type, Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)

    if isinstance(node, ast.Constant):
        value = node.value
        # bool is an int subclass; True/False are not numbers here
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Unsupported literal: {value!r}")
        return float(value)

    if isinstance(node, ast.BinOp):
        op = _BINOPS.get(type(node.op))
        if op is None:
            raise ValueError(f"Unsupported operator: {type(node.op).__name__}")
        return op(_eval_node(node.left), _eval_node(node.right))

    if isinstance(node, ast.UnaryOp):
        op = _UNARYOPS.get(type(node.op))
        if op is None:
            raise ValueError(f"Unsupported unary operator: {type(node.op).__name__}")
        return op(_eval_node(node.operand))

    if isinstance(node, ast.Call):
        # Only bare function names; no attribute access, no keywords, no *args
        if not isinstance(node.func, ast.Name):
            raise ValueError("Unsupported call.")
        fn = _ALLOWED_FUNCS.get(node.func.id.lower())
        if fn is None:
            raise ValueError(f"Unsupported function: {node.func.id}")
        if node.keywords:
            raise ValueError("Keyword arguments are not allowed.")
        args = [_eval_node(a) for a in node.args]
        return float(fn(*args))

    if isinstance(node, ast.Name):
        const = _ALLOWED_CONSTS.get(node.id.lower())
        if const is not None:
            return const
        raise ValueError(f"Unknown name: {node.id}")

    raise ValueError(f"Unsupported syntax: {type(node).__name__}")


def safe_eval(expr: str) -> float:
    """
    Evaluate a numeric expression under the allow-list above.

    Parameters
    ----------
    expr : str
        Expression text, e.g. "2*pi", "sqrt(2)/2", "10^3".

    Returns
    -------
    float
        The evaluated value. It may be inf for overflowing products; callers
        that need a finite number must check.

    Raises
    ------
    SyntaxError
        The text is not an expression at all.
    ValueError, TypeError, ArithmeticError
        Disallowed construct, wrong arity, math domain error, division by
        zero, overflow.
    """
    text = expr.strip().replace("^", "**")
    tree = ast.parse(text, mode="eval")
    return _eval_node(tree)
