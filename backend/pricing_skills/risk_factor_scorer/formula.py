"""
Risk Factor Scorer - Formula Compiler

Compiles the scoring formulas stored on numeric risk factors into a
small expression tree. Only arithmetic, power and a fixed set of math
helpers are understood; the text is never handed to eval().

Grammar:
    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary)*
    unary      := "-" unary | "+" unary | power
    power      := atom (("^" | "**") unary)?
    atom       := NUMBER | NAME | NAME "(" arguments ")" | "(" expression ")"

Identifiers ``min_value`` and ``max_value`` bind to the factor bounds;
any other identifier binds to the raw input value, so
``clamp((days - 7) * 1.5, 0, 100)`` and ``height * 0.8`` both work.

Author: Pricing Engine Team
"""

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from .definition import FormulaEvaluationError, FormulaSyntaxError

RESERVED_BOUNDS = frozenset({"min_value", "max_value"})

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z_0-9]*(?:\.[A-Za-z_][A-Za-z_0-9]*)?)"
    r"|(?P<op>\*\*|[-+*/^(),=])"
    r")"
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# name -> (min args, max args or None for variadic, implementation)
_FUNCTIONS: Dict[str, Tuple[int, Optional[int], Callable[..., float]]] = {
    "pow": (2, 2, math.pow),
    "min": (2, None, min),
    "max": (2, None, max),
    "clamp": (3, 3, _clamp),
    "abs": (1, 1, abs),
    "sqrt": (1, 1, math.sqrt),
}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    position: int


# Expression tree

@dataclass(frozen=True)
class Number:
    value: float

    def evaluate(self, bindings: Dict[str, float]) -> float:
        return self.value


@dataclass(frozen=True)
class Variable:
    name: str

    def evaluate(self, bindings: Dict[str, float]) -> float:
        return bindings[self.name]


@dataclass(frozen=True)
class Negate:
    operand: "Expression"

    def evaluate(self, bindings: Dict[str, float]) -> float:
        return -self.operand.evaluate(bindings)


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: "Expression"
    right: "Expression"

    def evaluate(self, bindings: Dict[str, float]) -> float:
        left = self.left.evaluate(bindings)
        right = self.right.evaluate(bindings)
        if self.operator == "+":
            return left + right
        if self.operator == "-":
            return left - right
        if self.operator == "*":
            return left * right
        if self.operator == "/":
            return left / right
        return math.pow(left, right)


@dataclass(frozen=True)
class Call:
    function: str
    arguments: Tuple["Expression", ...]

    def evaluate(self, bindings: Dict[str, float]) -> float:
        _, _, impl = _FUNCTIONS[self.function]
        return impl(*(arg.evaluate(bindings) for arg in self.arguments))


Expression = Union[Number, Variable, Negate, BinaryOp, Call]


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    position = 0
    while position < len(text):
        if text[position].isspace():
            position += 1
            continue
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise FormulaSyntaxError(
                f"Unexpected character {text[position]!r}", text, position
            )
        kind = match.lastgroup or ""
        tokens.append(_Token(kind, match.group(kind), match.start(kind)))
        position = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, text: str, tokens: List[_Token]):
        self.text = text
        self.tokens = tokens
        self.index = 0
        self.variables: set = set()

    def parse(self):
        if not self.tokens:
            raise FormulaSyntaxError("Empty formula", self.text)
        # Accept an optional "score =" assignment prefix
        if (
            len(self.tokens) > 2
            and self.tokens[0].kind == "name"
            and self.tokens[0].text.lower() == "score"
            and self.tokens[1].text == "="
        ):
            self.index = 2
        node = self._expression()
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise FormulaSyntaxError(
                f"Unexpected token {token.text!r}", self.text, token.position
            )
        return node

    def _peek(self) -> Optional[_Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _advance(self) -> _Token:
        token = self._peek()
        if token is None:
            raise FormulaSyntaxError("Unexpected end of formula", self.text, len(self.text))
        self.index += 1
        return token

    def _expect(self, text: str) -> _Token:
        token = self._advance()
        if token.text != text:
            raise FormulaSyntaxError(
                f"Expected {text!r} but found {token.text!r}", self.text, token.position
            )
        return token

    def _at(self, *texts: str) -> bool:
        token = self._peek()
        return token is not None and token.text in texts

    def _expression(self) -> Expression:
        node = self._term()
        while self._at("+", "-"):
            operator = self._advance().text
            node = BinaryOp(operator, node, self._term())
        return node

    def _term(self) -> Expression:
        node = self._unary()
        while self._at("*", "/"):
            operator = self._advance().text
            node = BinaryOp(operator, node, self._unary())
        return node

    def _unary(self):
        token = self._peek()
        if token is not None and token.text == "-":
            self._advance()
            return Negate(self._unary())
        if token is not None and token.text == "+":
            self._advance()
            return self._unary()
        return self._power()

    def _power(self):
        base = self._atom()
        token = self._peek()
        if token is not None and token.text in ("^", "**"):
            self._advance()
            return BinaryOp("^", base, self._unary())
        return base

    def _atom(self):
        token = self._advance()
        if token.kind == "number":
            return Number(float(token.text))
        if token.kind == "name":
            return self._name(token)
        if token.text == "(":
            node = self._expression()
            self._expect(")")
            return node
        raise FormulaSyntaxError(
            f"Unexpected token {token.text!r}", self.text, token.position
        )

    def _name(self, token: _Token):
        name = token.text
        if "." in name:
            prefix, _, name = name.partition(".")
            if prefix != "Math":
                raise FormulaSyntaxError(
                    f"Unknown namespace {prefix!r}", self.text, token.position
                )

        following = self._peek()
        if following is not None and following.text == "(":
            return self._call(name, token)
        if "." in token.text:
            raise FormulaSyntaxError(
                f"{token.text!r} is not callable", self.text, token.position
            )
        self.variables.add(name)
        return Variable(name)

    def _call(self, name: str, token: _Token):
        if name not in _FUNCTIONS:
            raise FormulaSyntaxError(
                f"Unknown function {name!r}", self.text, token.position
            )
        self._expect("(")
        arguments = []
        if self._at(")"):
            self._advance()
        else:
            arguments.append(self._expression())
            while self._at(","):
                self._advance()
                arguments.append(self._expression())
            self._expect(")")

        min_args, max_args, _ = _FUNCTIONS[name]
        if len(arguments) < min_args or (max_args is not None and len(arguments) > max_args):
            raise FormulaSyntaxError(
                f"Function {name!r} called with {len(arguments)} argument(s)",
                self.text,
                token.position,
            )
        return Call(name, tuple(arguments))


@dataclass(frozen=True)
class CompiledFormula:
    """A parsed formula ready to be evaluated against a raw value."""

    source: str
    root: object
    variables: FrozenSet[str]

    @property
    def input_variables(self) -> FrozenSet[str]:
        return self.variables - RESERVED_BOUNDS

    def evaluate(
        self,
        value: float,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> float:
        """
        Evaluate the formula with every free identifier bound to ``value``.

        Raises:
            FormulaEvaluationError: On math domain errors, division by zero,
                a missing bound, or a non-finite result.
        """
        bindings = {name: value for name in self.input_variables}
        for name, bound in (("min_value", min_value), ("max_value", max_value)):
            if name in self.variables:
                if bound is None:
                    raise FormulaEvaluationError(f"{name} is not defined for this factor", self.source)
                bindings[name] = bound

        try:
            result = self.root.evaluate(bindings)
        except ZeroDivisionError as e:
            raise FormulaEvaluationError("Division by zero", self.source) from e
        except (ValueError, OverflowError, TypeError) as e:
            raise FormulaEvaluationError(f"Invalid arithmetic: {e}", self.source) from e

        if isinstance(result, complex) or not math.isfinite(result):
            raise FormulaEvaluationError("Formula produced a non-finite result", self.source)
        return float(result)


@lru_cache(maxsize=256)
def compile_formula(text: str) -> CompiledFormula:
    """
    Parse a formula once and cache the compiled tree.

    Raises:
        FormulaSyntaxError: If the text is not a valid formula.
    """
    parser = _Parser(text, _tokenize(text))
    root = parser.parse()
    return CompiledFormula(source=text, root=root, variables=frozenset(parser.variables))
