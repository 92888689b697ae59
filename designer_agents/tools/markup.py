"""JSX-like markup parser.

Supports self-closing tags, text children, nested components and props
given as quoted strings or ``{expression}`` values (numbers, booleans, JSON
objects and arrays). Anything else inside braces is kept as a raw string.

    <VStack spacing={4}>
      <Heading level={2}>Welcome</Heading>
      <Button variant="primary">Get Started</Button>
    </VStack>
"""

import json
import uuid
from typing import Any, Dict, List, Optional

from designer_agents.tools.context import ComponentNode

# 4px grid: spacing={1} = 4px, spacing={2} = 8px, ...
VALID_SPACING_VALUES = (0, 1, 2, 3, 4, 5, 6, 8, 10, 12, 16, 20, 24)


class MarkupError(ValueError):
    """Markup could not be parsed; carries the failing location."""

    def __init__(self, message: str, line: int = 1, column: int = 1):
        super().__init__(f"{message} (line {line}, column {column})")
        self.reason = message
        self.line = line
        self.column = column


def generate_node_id() -> str:
    return f"node-{uuid.uuid4().hex[:12]}"


class _Parser:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    # -- position helpers -------------------------------------------------

    def error(self, message: str) -> MarkupError:
        consumed = self.source[: self.pos]
        line = consumed.count("\n") + 1
        column = self.pos - (consumed.rfind("\n") + 1) + 1
        return MarkupError(message, line, column)

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, n: int = 1) -> str:
        return self.source[self.pos : self.pos + n]

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.source[self.pos].isspace():
            self.pos += 1

    def expect(self, text: str) -> None:
        if self.peek(len(text)) != text:
            raise self.error(f"Expected '{text}'")
        self.pos += len(text)

    def read_name(self) -> str:
        start = self.pos
        while not self.at_end() and (self.source[self.pos].isalnum() or self.source[self.pos] in "_-."):
            self.pos += 1
        if start == self.pos:
            raise self.error("Expected a name")
        return self.source[start : self.pos]

    # -- grammar ----------------------------------------------------------

    def parse_document(self) -> List[ComponentNode]:
        nodes: List[ComponentNode] = []
        while True:
            self.skip_whitespace()
            if self.at_end():
                break
            if self.peek() != "<":
                raise self.error("Text outside of a component")
            nodes.append(self.parse_element())
        return nodes

    def parse_element(self) -> ComponentNode:
        self.expect("<")
        tag = self.read_name()
        if not tag[0].isupper():
            raise self.error(f"Component names must be capitalised: '{tag}'")

        props = self.parse_props()
        node = ComponentNode(id=generate_node_id(), type=tag, props=props)
        _validate_design_tokens(self, tag, props)

        if self.peek(2) == "/>":
            self.pos += 2
            return node
        self.expect(">")

        text_parts: List[str] = []
        while True:
            if self.at_end():
                raise self.error(f"Unclosed tag <{tag}>")
            if self.peek(2) == "</":
                self.pos += 2
                closing = self.read_name()
                if closing != tag:
                    raise self.error(f"Mismatched closing tag: expected </{tag}>, got </{closing}>")
                self.skip_whitespace()
                self.expect(">")
                break
            if self.peek() == "<":
                node.children.append(self.parse_element())
                continue
            text_parts.append(self.read_text())

        text = " ".join(part for part in (" ".join(p.split()) for p in text_parts) if part)
        if text and "children" not in node.props:
            node.props["children"] = text
        return node

    def read_text(self) -> str:
        start = self.pos
        while not self.at_end() and self.source[self.pos] != "<":
            self.pos += 1
        return self.source[start : self.pos]

    def parse_props(self) -> Dict[str, Any]:
        props: Dict[str, Any] = {}
        while True:
            self.skip_whitespace()
            if self.at_end():
                raise self.error("Unexpected end of markup inside a tag")
            if self.peek() == ">" or self.peek(2) == "/>":
                return props

            name = self.read_name()
            self.skip_whitespace()
            if self.peek() != "=":
                # Bare attribute: <Button disabled />
                props[name] = True
                continue
            self.pos += 1
            self.skip_whitespace()
            props[name] = self.parse_value()

    def parse_value(self) -> Any:
        quote = self.peek()
        if quote in ("'", '"'):
            end = self.source.find(quote, self.pos + 1)
            if end == -1:
                raise self.error("Unterminated string")
            value = self.source[self.pos + 1 : end]
            self.pos = end + 1
            return value
        if quote == "{":
            return _coerce_expression(self.read_braced())
        raise self.error("Expected a quoted string or {expression}")

    def read_braced(self) -> str:
        depth = 0
        start = self.pos
        in_string: Optional[str] = None
        while not self.at_end():
            char = self.source[self.pos]
            if in_string:
                if char == "\\":
                    self.pos += 1
                elif char == in_string:
                    in_string = None
            elif char in ("'", '"'):
                in_string = char
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    self.pos += 1
                    return self.source[start + 1 : self.pos - 1].strip()
            self.pos += 1
        raise self.error("Unbalanced braces")


def _coerce_expression(expr: str) -> Any:
    if expr == "true":
        return True
    if expr == "false":
        return False
    if expr in ("null", "undefined"):
        return None
    try:
        return json.loads(expr)
    except ValueError:
        pass
    if len(expr) >= 2 and expr[0] == expr[-1] and expr[0] in ("'", "`"):
        return expr[1:-1]
    return expr


def _validate_design_tokens(parser: _Parser, tag: str, props: Dict[str, Any]) -> None:
    for key in ("spacing", "gap"):
        value = props.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value not in VALID_SPACING_VALUES:
            allowed = ", ".join(str(v) for v in VALID_SPACING_VALUES)
            raise parser.error(f"Invalid {key} value: {value}. Must be one of: {allowed}")

    span = props.get("gridColumnSpan")
    if isinstance(span, (int, float)) and not isinstance(span, bool):
        if span != int(span) or not 1 <= span <= 12:
            raise parser.error(f"Invalid gridColumnSpan value: {span}. Must be an integer between 1 and 12")

    if tag == "Grid" and "columns" in props and props["columns"] != 12:
        raise parser.error(f"Invalid Grid columns value: {props['columns']}. Grid must use columns={{12}}")


def parse_markup(markup: str) -> List[ComponentNode]:
    """Parse markup into component nodes.

    Raises:
        MarkupError: if the markup is empty or malformed.
    """
    source = (markup or "").strip()
    if not source:
        raise MarkupError("No valid components found in markup")
    nodes = _Parser(source).parse_document()
    if not nodes:
        raise MarkupError("No valid components found in markup")
    return nodes
