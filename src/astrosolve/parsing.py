# -----------------------------------------------------------------------------
# Expression parser for user-typed variable values
# Purpose:
#   Turn what a user types into a value field ("1.5e11", "pi/4", "45°",
#   "sqrt(2)*3^2", "null") into a finite float, or None for "no value".
# Resolution order (first success wins):
#   1) plain numeric literal
#   2) simple fraction A/B (only when there are no parentheses)
#   3) restricted expression evaluation (safe_eval)
#   4) fraction parsing again as a last resort, parentheses allowed
# A trailing degree marker is stripped first and the final number is
# converted from degrees to radians.
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
import re
from typing import Optional

from .errors import ParseError
from .safe_eval import safe_eval

# Numeric literal: 12, -3.5, .5, 5., 6.674e-11
_NUM_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_DEGREE_RE = re.compile(r"\s*(?:°|deg(?:rees)?)\s*$", re.IGNORECASE)
_NAMED = {"pi": math.pi, "π": math.pi, "e": math.e}
_DEG_TO_RAD = math.pi / 180.0

# Everything safe_eval may raise for bad input
_EVAL_ERRORS = (SyntaxError, ValueError, TypeError, ArithmeticError, RecursionError)


def has_degree_marker(text: object) -> bool:
    if not isinstance(text, str):
        return False
    return bool(_DEGREE_RE.search(text.strip()))


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        t = value.strip()
        return t == "" or t.lower() == "null"
    return False


def _literal(text: str) -> Optional[float]:
    if _NUM_RE.match(text):
        value = float(text)
        if math.isfinite(value):
            return value
    return None


def _evaluate(text: str) -> float:
    """Rule 3: restricted expression evaluation; raises on any failure."""
    value = safe_eval(text)
    if not math.isfinite(value):
        raise ValueError(f"Result is not finite: {value}")
    return value


def _operand(text: str) -> float:
    # named constant, then literal, then nested expression
    t = text.strip()
    named = _NAMED.get(t.lower())
    if named is not None:
        return named
    lit = _literal(t)
    if lit is not None:
        return lit
    try:
        return _evaluate(t)
    except _EVAL_ERRORS as e:
        raise ParseError(t, str(e)) from e


def parse_fraction(text: str) -> float:
    """
    Parse "A/B" where each side is a constant, a literal or an expression.
    Splits at the last slash so "1/2/4" is (1/2)/4.
    """
    numerator, slash, denominator = text.rpartition("/")
    if not slash or not numerator.strip() or not denominator.strip():
        raise ParseError(text, "Not a fraction")
    num = _operand(numerator)
    den = _operand(denominator)
    if den == 0:
        raise ParseError(text, "Division by zero")
    value = num / den
    if not math.isfinite(value):
        raise ParseError(text, "Result is not finite")
    return value


def _resolve_number(body: str, original: str) -> float:
    lit = _literal(body)
    if lit is not None:
        return lit

    if "/" in body and "(" not in body and ")" not in body:
        try:
            return parse_fraction(body)
        except ParseError:
            pass  # general evaluation gets its turn

    try:
        return _evaluate(body)
    except _EVAL_ERRORS as e:
        eval_error = e

    try:
        return parse_fraction(body)
    except ParseError:
        raise ParseError(original, str(eval_error)) from eval_error


def parse_value(value: object, expected_unit: Optional[str] = None) -> Optional[float]:
    """
    Parse one user-supplied value.

    `expected_unit` is the unit of the field the text came from. It is a hint
    only: the degree marker converts to radians whether or not the field is
    an angle field.

    Returns None for "no value supplied" (None, "", whitespace, "null").
    Raises ParseError when the text cannot be reduced to a finite real.
    """
    if is_blank(value):
        return None

    if isinstance(value, bool):
        raise ParseError(value, "Booleans are not numbers")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ParseError(value, "Value is not finite")
        return float(value)
    if not isinstance(value, str):
        raise ParseError(value, f"Unsupported input type {type(value).__name__}")

    original = value.strip()
    body = original
    is_degrees = has_degree_marker(original)
    if is_degrees:
        body = _DEGREE_RE.sub("", original).strip()
        if not body:
            raise ParseError(original, "Degree marker without a number")

    result = _resolve_number(body, original)
    if is_degrees:
        result *= _DEG_TO_RAD
    return result
