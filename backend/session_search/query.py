"""
Session Search Query Language
Whitespace separated terms with uppercase AND / OR operators

    error               - single term
    error bash          - implicit AND (both must match)
    error AND bash      - explicit AND
    error OR warning    - explicit OR
    error AND bash OR write  - AND binds tighter: (error AND bash) OR write

Terms are matched as case-insensitive substrings of the raw line.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)


class TokenType(Enum):
    TERM = "term"
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Optional[str] = None


@dataclass(frozen=True)
class Term:
    """Single search term, always lower-cased"""
    text: str


@dataclass(frozen=True)
class And:
    left: 'SearchExpr'
    right: 'SearchExpr'


@dataclass(frozen=True)
class Or:
    left: 'SearchExpr'
    right: 'SearchExpr'


SearchExpr = Union[Term, And, Or]


def tokenize(query: str) -> List[Token]:
    """Split a query into terms and operators. AND/OR (uppercase) are operators, everything else is a term"""
    tokens = []
    for word in query.split():
        if word == 'AND':
            tokens.append(Token(TokenType.AND))
        elif word == 'OR':
            tokens.append(Token(TokenType.OR))
        else:
            tokens.append(Token(TokenType.TERM, word.lower()))
    return tokens


class QueryParser:
    """
    Recursive descent parser over a token list

    Grammar (implicit AND between terms, explicit OR):
        expr     -> or_expr
        or_expr  -> and_expr ("OR" and_expr)*
        and_expr -> term (["AND"] term)*
        term     -> word

    Orphan operators are skipped instead of raising, so a half typed query
    such as "error OR" still searches for "error".
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def parse(self) -> Optional[SearchExpr]:
        if not self.tokens:
            return None
        return self._parse_or_expr()

    def _parse_or_expr(self) -> Optional[SearchExpr]:
        """OR expression (lowest precedence)"""
        left = self._parse_and_expr()
        if left is None:
            return None

        while True:
            token = self._peek()
            if token is None or token.type != TokenType.OR:
                break
            self.pos += 1
            right = self._parse_and_expr()
            if right is None:
                # Trailing OR
                break
            left = Or(left, right)

        return left

    def _parse_and_expr(self) -> Optional[SearchExpr]:
        """AND expression, explicit or implicit (adjacent terms)"""
        left = self._parse_term()
        if left is None:
            return None

        while True:
            token = self._peek()
            if token is None or token.type == TokenType.OR:
                break
            if token.type == TokenType.AND:
                self.pos += 1
            right = self._parse_term()
            if right is None:
                # Trailing AND
                break
            left = And(left, right)

        return left

    def _parse_term(self) -> Optional[SearchExpr]:
        # Orphan operators are consumed until a term shows up
        while True:
            token = self._peek()
            if token is None:
                return None
            self.pos += 1
            if token.type == TokenType.TERM:
                return Term(token.value)


def parse_query(query: str) -> Optional[SearchExpr]:
    """
    Parse a query string into an expression tree

    Returns None when the query holds no terms (empty, whitespace only,
    or nothing but operators).
    """
    expr = QueryParser(tokenize(query)).parse()
    logger.debug(f"Parsed query {query!r} -> {expr}")
    return expr


def matches(expr: SearchExpr, line: str) -> bool:
    """Case-insensitive evaluation of an expression against one line"""
    return _matches_lower(expr, line.lower())


def _matches_lower(expr: SearchExpr, line: str) -> bool:
    if isinstance(expr, Term):
        return expr.text in line
    if isinstance(expr, And):
        return _matches_lower(expr.left, line) and _matches_lower(expr.right, line)
    return _matches_lower(expr.left, line) or _matches_lower(expr.right, line)


def collect_terms(expr: SearchExpr) -> List[str]:
    """All literal terms of an expression, left to right"""
    if isinstance(expr, Term):
        return [expr.text]
    return collect_terms(expr.left) + collect_terms(expr.right)


def describe(expr: Optional[SearchExpr]) -> Optional[str]:
    """Fully parenthesised rendering of an expression, used by query validation"""
    if expr is None:
        return None
    if isinstance(expr, Term):
        return expr.text
    op = 'AND' if isinstance(expr, And) else 'OR'
    return f"({describe(expr.left)} {op} {describe(expr.right)})"
