from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Union as TypingUnion

from .exceptions import RegexSyntaxError

# Bytes with a meaning in the pattern language; anything else is a literal
SPECIAL_BYTES = frozenset(b'()|*.\\')


class Node(ABC):
    """Base class for regex syntax tree nodes."""

    @abstractmethod
    def to_string(self) -> str:
        """Convert node back to regex text."""
        pass


@dataclass
class Literal(Node):
    """A single byte value."""
    byte: int

    def __post_init__(self):
        if not 0 <= self.byte <= 255:
            raise ValueError(f"Literal byte out of range: {self.byte}")

    def to_string(self) -> str:
        if self.byte in SPECIAL_BYTES:
            return '\\' + chr(self.byte)
        if 0x20 <= self.byte < 0x7f:
            return chr(self.byte)
        return f"\\x{self.byte:02x}"


@dataclass
class Dot(Node):
    """Wildcard matching any one byte."""

    def to_string(self) -> str:
        return '.'


@dataclass
class Concat(Node):
    """Concatenation node (RS)."""
    left: Node
    right: Node

    def to_string(self) -> str:
        left_str = self.left.to_string()
        right_str = self.right.to_string()

        # Unions bind looser than concatenation
        if isinstance(self.left, Union):
            left_str = f"({left_str})"
        if isinstance(self.right, Union):
            right_str = f"({right_str})"

        return f"{left_str}{right_str}"


@dataclass
class Union(Node):
    """Union node (R|S)."""
    left: Node
    right: Node

    def to_string(self) -> str:
        return f"{self.left.to_string()}|{self.right.to_string()}"


@dataclass
class Star(Node):
    """Kleene star node (R*)."""
    operand: Node

    def to_string(self) -> str:
        inner_str = self.operand.to_string()

        # Add parentheses for complex expressions
        if isinstance(self.operand, (Union, Concat, Star)):
            inner_str = f"({inner_str})"

        return f"{inner_str}*"


@dataclass
class _Group:
    """An open parenthesised group (or the whole pattern) while parsing."""
    alternatives: List[Node] = field(default_factory=list)
    terms: List[Node] = field(default_factory=list)
    # The last term already carries a '*'; further stars are absorbed
    starred: bool = False


class RegexParser:
    """
    Parser turning regex text into a syntax tree.

    The pattern is read as bytes; a ``str`` pattern is UTF-8 encoded first, so
    a non-ASCII character becomes the concatenation of its byte literals.
    Supported syntax: literals, ``\\`` escapes, ``.``, grouping, implicit
    concatenation, ``|`` and ``*``.

    Open groups are kept on an explicit stack, so nesting depth is bounded
    only by the length of the pattern.
    """

    def __init__(self, regex: TypingUnion[str, bytes]):
        if isinstance(regex, str):
            regex = regex.encode('utf-8')
        elif not isinstance(regex, (bytes, bytearray)):
            raise TypeError(f"Regex must be str or bytes, not {type(regex).__name__}")
        self.regex = bytes(regex)
        self.pos = 0

    def peek(self) -> Optional[int]:
        """Look at current byte without consuming."""
        return self.regex[self.pos] if self.pos < len(self.regex) else None

    def consume(self) -> Optional[int]:
        """Consume and return current byte."""
        if self.pos < len(self.regex):
            byte = self.regex[self.pos]
            self.pos += 1
            return byte
        return None

    def parse(self) -> Node:
        """Parse the whole pattern and return the tree root."""
        if not self.regex:
            raise RegexSyntaxError("Empty regex has no syntax tree")

        groups: List[_Group] = [_Group()]

        while self.peek() is not None:
            byte = self.peek()
            group = groups[-1]

            if byte == ord('('):
                start = self.pos
                self.consume()
                if self.peek() == ord(')'):
                    raise RegexSyntaxError("Empty group", start)
                groups.append(_Group())

            elif byte == ord(')'):
                inner = self.parse_union(group)
                if len(groups) == 1:
                    raise RegexSyntaxError("Unbalanced ')'", self.pos)
                self.consume()
                groups.pop()
                self.add_term(groups[-1], inner)

            elif byte == ord('|'):
                group.alternatives.append(self.parse_concat(group))
                self.consume()

            elif byte == ord('*'):
                self.parse_star(group)

            else:
                self.add_term(group, self.parse_atom())

        result = self.parse_union(groups[-1])
        if len(groups) > 1:
            raise RegexSyntaxError("Expected ')'", self.pos)
        return result

    def parse_union(self, group: _Group) -> Node:
        """Close the group's last alternative and join all of them with '|', left associative."""
        alternatives = group.alternatives + [self.parse_concat(group)]

        node = alternatives[0]
        for alternative in alternatives[1:]:
            node = Union(node, alternative)
        return node

    def parse_concat(self, group: _Group) -> Node:
        """Join the terms read since the last '|' into a left-associative concatenation."""
        if not group.terms:
            raise RegexSyntaxError("Empty alternative", self.pos)

        node = group.terms[0]
        for term in group.terms[1:]:
            node = Concat(node, term)

        group.terms = []
        group.starred = False
        return node

    def parse_star(self, group: _Group):
        """Apply a '*' to the previous term."""
        if not group.terms:
            raise RegexSyntaxError("'*' has nothing to repeat", self.pos)
        self.consume()

        # (R*)* is R*
        if not group.starred:
            group.terms[-1] = Star(group.terms[-1])
            group.starred = True

    def add_term(self, group: _Group, node: Node):
        group.terms.append(node)
        group.starred = False

    def parse_atom(self) -> Node:
        """Parse a single-byte atom: '.', an escape or a literal."""
        byte = self.consume()

        if byte == ord('.'):
            return Dot()

        if byte == ord('\\'):
            escaped = self.consume()
            if escaped is None:
                raise RegexSyntaxError("Trailing escape", self.pos - 1)
            return Literal(escaped)

        return Literal(byte)


def parse_regex(regex: TypingUnion[str, bytes]) -> Node:
    """
    Parse regex text into a syntax tree.

    Examples:
        parse_regex("a*c")        # Concat(Star(Literal(97)), Literal(99))
        parse_regex("(a.*bc|bd)")  # Union(...)
    """
    return RegexParser(regex).parse()
