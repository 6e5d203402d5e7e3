"""
Placeholder Grammar

Scans the plain text of a template part into typed spans, parses the spans into a
tree of scalar, conditional and loop nodes, and expands the tree against a page
Binding.

Grammar:
    {{KEY}}                        scalar
    {?KEY} ... {/?KEY}             conditional block
    {?KEY}{#KEY} ... {/KEY}{/?KEY} loop block (always inside a conditional on the same key)

Expansion does not write values into the markup. Each resolved scalar becomes a
value slot (see VALUE_SLOT) that the run injector fills afterwards, so user values
are never rescanned for placeholder syntax and the cleanup pass cannot touch them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from longlist.contexts.templating.placeholder_patterns import TOKEN_PATTERN, TokenKind

# Values bound to placeholder keys: a scalar string or a list of flat item mappings
BindingValue = Union[str, Sequence[Mapping[str, str]]]
Binding = Dict[str, BindingValue]

# NUL cannot occur in XML text, so slots never collide with template content
VALUE_SLOT = "\x00{index}\x00"


@dataclass(frozen=True)
class LiteralSpan:
    """Run of template text containing no placeholder token."""

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class TokenSpan:
    """
    One placeholder token.

    Attributes:
        kind: TokenKind value
        key: Placeholder key (e.g., "NAME_1")
        text: Token text exactly as it appears in the part
        start: Offset of the token in the part
        end: Offset after the token
    """

    kind: str
    key: str
    text: str
    start: int
    end: int


Span = Union[LiteralSpan, TokenSpan]


@dataclass(frozen=True)
class ScalarNode:
    key: str
    text: str


@dataclass
class SectionNode:
    """
    Conditional or loop block with its parsed body.

    Attributes:
        kind: TokenKind.COND_OPEN or TokenKind.LOOP_OPEN
        key: Placeholder key shared by the open and close tokens
        open_token: Opening token span
        children: Parsed body
        close_token: Closing token span (None while still open during parsing)
    """

    kind: str
    key: str
    open_token: TokenSpan
    children: List["Node"] = field(default_factory=list)
    close_token: Optional[TokenSpan] = None

    @property
    def is_loop(self) -> bool:
        return self.kind == TokenKind.LOOP_OPEN


# Literal text, resolved scalar, block, or stray token (unbalanced marker)
Node = Union[str, ScalarNode, SectionNode, TokenSpan]


@dataclass
class ExpandedPart:
    """
    Result of expanding a part against a Binding.

    Attributes:
        text: Part text with VALUE_SLOT markers where scalar values go
        values: Raw (unescaped) values, indexed by slot number
        keys: Placeholder key of each value, indexed like values
        residuals_removed: Number of unresolved tokens deleted by cleanup
    """

    text: str
    values: List[str] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)
    residuals_removed: int = 0

    def slot(self, index: int) -> str:
        return VALUE_SLOT.format(index=index)

    def key(self, index: int) -> Optional[str]:
        return self.keys[index] if index < len(self.keys) else None


# ============================================================================
# Scanning
# ============================================================================


def scan(text: str) -> List[Span]:
    """
    Split part text into literal spans and placeholder token spans.

    Args:
        text: Part text (XML treated as plain text)

    Returns:
        Spans in document order; concatenating their text reproduces the input

    Example:
        >>> [type(s).__name__ for s in scan("<a:t>{{NAME_1}}</a:t>")]
        ['LiteralSpan', 'TokenSpan', 'LiteralSpan']
    """
    spans: List[Span] = []
    pos = 0

    for match in TOKEN_PATTERN.finditer(text):
        if match.start() > pos:
            spans.append(LiteralSpan(text[pos : match.start()], pos, match.start()))

        kind = match.lastgroup
        spans.append(
            TokenSpan(
                kind=kind,
                key=match.group(kind),
                text=match.group(0),
                start=match.start(),
                end=match.end(),
            )
        )
        pos = match.end()

    if pos < len(text):
        spans.append(LiteralSpan(text[pos:], pos, len(text)))

    return spans


def find_placeholder_keys(text: str) -> List[str]:
    """
    List the distinct keys referenced by any placeholder token, in first-seen order.

    Args:
        text: Part text

    Returns:
        Keys (e.g., ["NAME_1", "WORK_HISTORY_1", "COMPANY"])
    """
    keys: List[str] = []
    for match in TOKEN_PATTERN.finditer(text):
        key = match.group(match.lastgroup)
        if key not in keys:
            keys.append(key)
    return keys


def has_placeholders(text: str) -> bool:
    """Check whether part text contains any placeholder token."""
    return TOKEN_PATTERN.search(text) is not None


# ============================================================================
# Parsing
# ============================================================================


def _flatten_unclosed(section: SectionNode) -> List[Node]:
    """Turn a block that never closed into a stray opener followed by its body."""
    return [section.open_token, *section.children]


def parse(spans: List[Span]) -> List[Node]:
    """
    Build a node tree from scanned spans.

    Each closing token pairs with the nearest still-open block of the same kind and
    key. Blocks left open by such a pairing, blocks that never close, and closers
    with no matching opener become stray tokens so cleanup can delete them.

    Args:
        spans: Output of scan()

    Returns:
        Top-level nodes
    """
    root = SectionNode(kind="root", key="", open_token=None)
    stack: List[SectionNode] = [root]

    for span in spans:
        if isinstance(span, LiteralSpan):
            stack[-1].children.append(span.text)
            continue

        if span.kind == TokenKind.SCALAR:
            stack[-1].children.append(ScalarNode(key=span.key, text=span.text))

        elif span.kind in TokenKind.OPENERS:
            section = SectionNode(kind=span.kind, key=span.key, open_token=span)
            stack.append(section)

        else:
            opener_kind = TokenKind.CLOSERS[span.kind]
            depth = _find_open_section(stack, opener_kind, span.key)

            if depth is None:
                stack[-1].children.append(span)
                continue

            # Blocks opened after the matching one never closed inside it
            while len(stack) - 1 > depth:
                unclosed = stack.pop()
                stack[-1].children.extend(_flatten_unclosed(unclosed))

            section = stack.pop()
            section.close_token = span
            stack[-1].children.append(section)

    while len(stack) > 1:
        unclosed = stack.pop()
        stack[-1].children.extend(_flatten_unclosed(unclosed))

    return root.children


def _find_open_section(stack: List[SectionNode], kind: str, key: str) -> Optional[int]:
    """Return the stack index of the innermost open block matching kind and key."""
    for depth in range(len(stack) - 1, 0, -1):
        if stack[depth].kind == kind and stack[depth].key == key:
            return depth
    return None


def parse_part(text: str) -> List[Node]:
    """Scan and parse part text in one step."""
    return parse(scan(text))


# ============================================================================
# Expansion
# ============================================================================


def is_truthy(value: Optional[BindingValue]) -> bool:
    """A key counts as set when bound to a non-empty string or non-empty sequence."""
    if value is None:
        return False
    return len(value) > 0


def _lookup(key: str, binding: Mapping[str, BindingValue], item: Optional[Mapping[str, str]]):
    # Inside a loop repetition only the item's own mapping is visible
    scope = item if item is not None else binding
    return scope.get(key)


def _render_nodes(
    nodes: List[Node],
    binding: Mapping[str, BindingValue],
    values: List[str],
    keys: List[str],
    item: Optional[Mapping[str, str]] = None,
) -> str:
    output = []

    for node in nodes:
        if isinstance(node, str):
            output.append(node)

        elif isinstance(node, ScalarNode):
            value = _lookup(node.key, binding, item)
            if isinstance(value, str):
                output.append(VALUE_SLOT.format(index=len(values)))
                values.append(value)
                keys.append(node.key)
            else:
                # Unbound (or bound to a list): left for cleanup
                output.append(node.text)

        elif isinstance(node, TokenSpan):
            output.append(node.text)

        elif node.is_loop:
            value = _lookup(node.key, binding, item)
            if isinstance(value, str):
                if value:
                    output.append(_render_nodes(node.children, binding, values, keys, item))
            elif value:
                for entry in value:
                    output.append(_render_nodes(node.children, binding, values, keys, entry))

        else:
            if is_truthy(_lookup(node.key, binding, item)):
                output.append(_render_nodes(node.children, binding, values, keys, item))

    return "".join(output)


def strip_residual_placeholders(text: str) -> Tuple[str, int]:
    """
    Delete every placeholder token still present in the text.

    Covers unbound scalars, stray block markers, and malformed templates, so raw
    placeholder syntax never reaches the final document.

    Args:
        text: Expanded part text

    Returns:
        (cleaned_text, number_of_tokens_removed)
    """
    return TOKEN_PATTERN.subn("", text)


def expand_part(text: str, binding: Mapping[str, BindingValue]) -> ExpandedPart:
    """
    Expand loops and conditionals, resolve scalars to value slots, and clean up.

    Resolution order follows the tree: loop bodies repeat once per item with the
    item as scope, conditional bodies are kept or dropped, resolved scalars become
    value slots, and any token left over is deleted.

    Args:
        text: Template part text
        binding: Page Binding

    Returns:
        ExpandedPart with slot-marked text and the raw values to inject

    Example:
        >>> part = expand_part("<a:t>{?NAME_1}{{NAME_1}}{/?NAME_1}</a:t>", {"NAME_1": "ADA"})
        >>> part.values
        ['ADA']
    """
    values: List[str] = []
    keys: List[str] = []
    rendered = _render_nodes(parse_part(text), binding, values, keys)
    cleaned, removed = strip_residual_placeholders(rendered)
    return ExpandedPart(text=cleaned, values=values, keys=keys, residuals_removed=removed)
