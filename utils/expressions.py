"""
Boolean guard evaluator for conditional blocks.

Guards are parsed into a small tagged tree over a fixed grammar and then
evaluated; nothing is handed to Python's eval. Supported forms:

    true, false, 3, 2.5          literals (non-zero numbers are true)
    1 < 2, 3 == 3.0, 2 != 1      comparisons: == != < <= > >=
    not x, !x                    negation
    a and b, a && b              conjunction
    a or b, a || b               disjunction
    ( ... )                      grouping
"""
import operator
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
from utils.errors import DiagnosticCollector, DiagnosticType


class ConditionParseError(ValueError):
    """Raised when a guard does not match the grammar."""


TOKEN_PATTERN = re.compile(
    r'\s*(?:(?P<number>-?(?:\d+(?:\.\d*)?|\.\d+))'
    r'|(?P<op>==|!=|<=|>=|<|>|&&|\|\||!|\(|\))'
    r'|(?P<word>[A-Za-z_]+))'
)

# Deepest run of nested "not" or parentheses a guard may use
MAX_NESTING = 64

COMPARISONS = {
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
}


@dataclass(frozen=True)
class Literal:
    value: Union[bool, float]


@dataclass(frozen=True)
class Not:
    operand: 'Node'


@dataclass(frozen=True)
class Compare:
    op: str
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class BoolOp:
    op: str  # 'and' or 'or'
    operands: Tuple['Node', ...]


Node = Union[Literal, Not, Compare, BoolOp]


def tokenize(text: str) -> List[Tuple[str, str]]:
    """Split a guard into (kind, text) tokens."""
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if not match or match.end() == pos:
            raise ConditionParseError(f"Unexpected character at {pos}: {text[pos:]!r}")
        kind = match.lastgroup
        value = match.group(kind)
        if kind == 'word':
            value = value.lower()
            if value not in ('true', 'false', 'and', 'or', 'not'):
                raise ConditionParseError(f"Unknown name: {match.group(kind)}")
        tokens.append((kind, value))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, tokens: List[Tuple[str, str]]):
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    def peek(self) -> Optional[str]:
        if self.index < len(self.tokens):
            return self.tokens[self.index][1]
        return None

    def advance(self) -> Tuple[str, str]:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def parse(self) -> Node:
        node = self.parse_or()
        if self.peek() is not None:
            raise ConditionParseError(f"Unexpected token: {self.peek()}")
        return node

    def parse_or(self) -> Node:
        operands = [self.parse_and()]
        while self.peek() in ('or', '||'):
            self.advance()
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else BoolOp('or', tuple(operands))

    def parse_and(self) -> Node:
        operands = [self.parse_not()]
        while self.peek() in ('and', '&&'):
            self.advance()
            operands.append(self.parse_not())
        return operands[0] if len(operands) == 1 else BoolOp('and', tuple(operands))

    def nest(self):
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise ConditionParseError(f"Condition nested deeper than {MAX_NESTING} levels")

    def parse_not(self) -> Node:
        if self.peek() in ('not', '!'):
            self.advance()
            self.nest()
            node = Not(self.parse_not())
            self.depth -= 1
            return node
        return self.parse_comparison()

    def parse_comparison(self) -> Node:
        left = self.parse_atom()
        if self.peek() in COMPARISONS:
            op = self.advance()[1]
            right = self.parse_atom()
            return Compare(op, left, right)
        return left

    def parse_atom(self) -> Node:
        if self.peek() is None:
            raise ConditionParseError("Unexpected end of condition")
        kind, value = self.advance()
        if kind == 'number':
            return Literal(float(value))
        if value == 'true':
            return Literal(True)
        if value == 'false':
            return Literal(False)
        if value == '(':
            self.nest()
            node = self.parse_or()
            self.depth -= 1
            if self.peek() != ')':
                raise ConditionParseError("Missing closing parenthesis")
            self.advance()
            return node
        raise ConditionParseError(f"Unexpected token: {value}")


def parse_condition(text: str) -> Node:
    """Parse a guard string into its expression tree."""
    tokens = tokenize(text)
    if not tokens:
        return Literal(True)
    return _Parser(tokens).parse()


def evaluate_node(node: Node) -> Union[bool, float]:
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Not):
        return not evaluate_node(node.operand)
    if isinstance(node, Compare):
        return COMPARISONS[node.op](evaluate_node(node.left), evaluate_node(node.right))
    if node.op == 'and':
        return all(evaluate_node(operand) for operand in node.operands)
    return any(evaluate_node(operand) for operand in node.operands)


class ConditionEvaluator:
    """Evaluates conditional-block guards, recording unparsable ones."""

    def __init__(self, diagnostics: DiagnosticCollector):
        self.diagnostics = diagnostics

    def evaluate(self, condition, block_id: Optional[str] = None) -> bool:
        """
        Evaluate a guard once.

        Args:
            condition: Guard text like "1 < 2 and true"; None or blank means true.
                Plain booleans and numbers are accepted as-is.
            block_id: Block id for diagnostics

        Returns:
            The guard's truth value; False when the guard cannot be parsed
        """
        if condition is None:
            return True
        if isinstance(condition, bool):
            return condition
        if isinstance(condition, (int, float)):
            return condition != 0

        text = str(condition).strip()
        if not text:
            return True

        try:
            return bool(evaluate_node(parse_condition(text)))
        except ConditionParseError as e:
            self.diagnostics.add(
                block_id,
                f"Cannot evaluate condition {text!r}: {e}; treating it as false",
                DiagnosticType.CONDITION
            )
            return False
