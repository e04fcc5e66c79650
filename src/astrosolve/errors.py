# -----------------------------------------------------------------------------
# Error taxonomy for the resolution engine
# Purpose:
#   One exception family for everything a single resolve request can hit.
#   All of these are recoverable: the pipeline turns them into an error
#   envelope at the request boundary (see pipeline.Resolver.try_resolve).
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Sequence


class ResolutionError(Exception):
    """Base class for request-level failures (parse, count, domain, ...)."""


class ParseError(ResolutionError):
    def __init__(self, text: object, reason: str = ""):
        self.text = text
        self.reason = reason
        msg = f"Cannot parse expression: {text}"
        if reason:
            msg += f". {reason}"
        super().__init__(msg)


class InvalidInputCount(ResolutionError):
    """
    Raised when the number of unknowns is not exactly one.
    `symbols` lists the empty variables (empty list when nothing was left out).
    """
    def __init__(self, symbols: Sequence[str]):
        self.symbols = list(symbols)
        self.count = len(self.symbols)
        if self.count == 0:
            msg = "At least one variable must be left empty (unknown)"
        else:
            msg = (f"Only one variable can be unknown. Found {self.count} "
                   f"empty values: {', '.join(self.symbols)}")
        super().__init__(msg)


class DomainError(ResolutionError):
    def __init__(self, formula_id: str, symbol: str, reason: str):
        self.formula_id = formula_id
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"{formula_id}: cannot solve for {symbol}: {reason}")


class UnsupportedFormula(ResolutionError): pass


class UnderdeterminedRelation(ResolutionError): pass
