"""Parse markdown bullet / todo lists into outline items.

Supported syntax::

    # Title                 heading (or any leading non-list line) -> title
    - item  /  * item       bullet
    - [ ] item / - [x] item todo (checklist) item
      free text             indented lines below an item -> that item's notes

Nesting is indentation based: two spaces or one tab per level. Plain bullets
nested under a todo item are not structural children; they stay in the todo
item's notes block.
"""

from __future__ import annotations

import enum
import re
import uuid
from dataclasses import dataclass, field

from lecturelog.config import settings
from lecturelog.models import OutlineItem

_TODO_RE = re.compile(r"^-?\s*\[([xX ])\]\s+(.+)$")
_BULLET_RE = re.compile(r"^[-*]\s+(.+)$")
_HEADING_RE = re.compile(r"^#+\s*(.+)$")
_LIST_LINE_RE = re.compile(r"^[-*]\s")
_TODO_PREFIX_RE = re.compile(r"^-\s*\[")
_LEADING_WS_RE = re.compile(r"^\s*")

INDENT_WIDTH = 2
NESTING_PREFIX = " " * INDENT_WIDTH


class ItemKind(enum.Enum):
    BULLET = "bullet"
    TODO = "todo"


@dataclass
class ParsedMarkdownItem:
    id: str
    title: str
    level: int = 0
    kind: ItemKind = ItemKind.BULLET
    completed: bool | None = None  # set only for TODO items
    notes: str | None = None
    children: list[ParsedMarkdownItem] = field(default_factory=list)

    @property
    def is_checklist(self) -> bool:
        return self.kind is ItemKind.TODO


@dataclass
class MarkdownParseResult:
    items: list[ParsedMarkdownItem] = field(default_factory=list)
    title: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str]


@dataclass
class OutlineDraft:
    """Title plus flattened items, ready to be wrapped into an ``Outline``."""

    title: str
    items: list[OutlineItem]


@dataclass
class LineParse:
    item: ParsedMarkdownItem | None = None
    error: str | None = None


def generate_item_id() -> str:
    return f"md_{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Line level helpers
# ---------------------------------------------------------------------------


def _leading_width(line: str) -> int:
    """Width of the leading whitespace run, a tab counting as two spaces."""
    return len(_LEADING_WS_RE.match(line).group(0).replace("\t", NESTING_PREFIX))


def get_indentation_level(line: str) -> int:
    return _leading_width(line) // INDENT_WIDTH


def parse_markdown_line(line: str, line_number: int) -> LineParse:
    """Classify one raw line. ``line_number`` is 0-based."""
    trimmed = line.strip()
    if not trimmed:
        return LineParse()

    level = get_indentation_level(line)

    todo = _TODO_RE.match(trimmed)
    if todo:
        return LineParse(item=ParsedMarkdownItem(
            id=generate_item_id(),
            title=todo.group(2).strip(),
            level=level,
            kind=ItemKind.TODO,
            completed=todo.group(1).lower() == "x",
        ))

    bullet = _BULLET_RE.match(trimmed)
    if bullet:
        return LineParse(item=ParsedMarkdownItem(
            id=generate_item_id(),
            title=bullet.group(1).strip(),
            level=level,
        ))

    if not trimmed.startswith(("-", "*")):
        # Title candidate or continuation text; handled elsewhere
        return LineParse()

    return LineParse(error=f'Line {line_number + 1}: Invalid list format: "{trimmed}"')


def _nearest_ancestor(
    stack: list[ParsedMarkdownItem], level: int, pop: bool = False
) -> ParsedMarkdownItem | None:
    """Closest stack entry with a level strictly below *level*.

    With ``pop=True`` every entry at or above *level* is removed from the top
    of the stack first, so the returned ancestor is also the new stack top.
    """
    if pop:
        while stack and stack[-1].level >= level:
            stack.pop()
        return stack[-1] if stack else None
    for candidate in reversed(stack):
        if candidate.level < level:
            return candidate
    return None


# ---------------------------------------------------------------------------
# Document level passes
# ---------------------------------------------------------------------------


def extract_title(lines: list[str]) -> str | None:
    """Title from the first non-blank line, unless that line is a list item."""
    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue
        heading = _HEADING_RE.match(trimmed)
        if heading:
            return heading.group(1).strip()
        if _LIST_LINE_RE.match(trimmed) or _TODO_PREFIX_RE.match(trimmed) or _TODO_RE.match(trimmed):
            break
        return trimmed
    return None


def build_nested_structure(flat_items: list[ParsedMarkdownItem]) -> list[ParsedMarkdownItem]:
    roots: list[ParsedMarkdownItem] = []
    stack: list[ParsedMarkdownItem] = []
    for item in flat_items:
        parent = _nearest_ancestor(stack, item.level, pop=True)
        if parent is None:
            roots.append(item)
        else:
            parent.children.append(item)
        stack.append(item)
    return roots


def _dedent_block(segment: list[str]) -> str:
    widths = [_leading_width(line) for line in segment if line.strip()]
    min_indent = min(widths) if widths else 0
    out = []
    for line in segment:
        if not line.strip():
            out.append("")
            continue
        ws = _LEADING_WS_RE.match(line).group(0)
        expanded = ws.replace("\t", NESTING_PREFIX) + line[len(ws):]
        out.append(expanded[min_indent:])
    return "\n".join(out).strip()


def attach_notes_to_items(
    lines: list[str], items: list[ParsedMarkdownItem], line_indices: list[int]
) -> None:
    """Give each item the dedented text between its line and the next item's."""
    for index, item in enumerate(items):
        start = line_indices[index] + 1
        end = line_indices[index + 1] if index + 1 < len(line_indices) else len(lines)
        if start >= end:
            continue
        notes = _dedent_block(lines[start:end])
        if notes:
            item.notes = notes


def parse_markdown_list(content: str) -> MarkdownParseResult:
    lines = content.replace("\r\n", "\n").split("\n")
    errors: list[str] = []
    flat_items: list[ParsedMarkdownItem] = []
    line_indices: list[int] = []
    stack: list[ParsedMarkdownItem] = []

    title = extract_title(lines)

    for i, line in enumerate(lines):
        parsed = parse_markdown_line(line, i)
        line_level = get_indentation_level(line)
        line_parent = _nearest_ancestor(stack, line_level)

        if parsed.error:
            # A malformed bullet under a todo item is notes text, not a list error
            suppress = (
                line_level > 0
                and line_parent is not None
                and line_parent.is_checklist
                and line.lstrip().startswith(("-", "*"))
            )
            if not suppress:
                errors.append(parsed.error)

        item = parsed.item
        if item is None:
            continue

        parent = _nearest_ancestor(stack, item.level, pop=True)
        if not item.is_checklist and item.level > 0 and parent is not None and parent.is_checklist:
            continue

        flat_items.append(item)
        line_indices.append(i)
        stack.append(item)

    nested = build_nested_structure(flat_items)
    # Same objects in both views, so notes show up in the tree too
    attach_notes_to_items(lines, flat_items, line_indices)

    return MarkdownParseResult(items=nested, title=title, errors=errors)


# ---------------------------------------------------------------------------
# Validation and conversion
# ---------------------------------------------------------------------------


def validate_markdown_items(items: list[ParsedMarkdownItem]) -> ValidationResult:
    errors: list[str] = []
    if not items:
        errors.append("No valid list items found")

    def _walk(item_list: list[ParsedMarkdownItem]) -> None:
        for item in item_list:
            if not item.title or not item.title.strip():
                errors.append(f"Item with ID {item.id} has empty title")
            if item.children:
                _walk(item.children)

    _walk(items)
    return ValidationResult(is_valid=not errors, errors=errors)


def flatten_markdown_items(items: list[ParsedMarkdownItem]) -> list[OutlineItem]:
    """Pre-order flatten; depth is kept both as a title prefix and as ``depth``."""
    result: list[OutlineItem] = []

    def _walk(item_list: list[ParsedMarkdownItem], depth: int) -> None:
        for item in item_list:
            result.append(OutlineItem(
                id=item.id,
                title=NESTING_PREFIX * depth + item.title,
                notes=item.notes or None,
                depth=depth,
            ))
            if item.children:
                _walk(item.children, depth + 1)

    _walk(items, 0)
    return result


def convert_to_outline_format(
    parse_result: MarkdownParseResult, custom_title: str | None = None
) -> OutlineDraft:
    title = custom_title or parse_result.title or settings.default_outline_title
    return OutlineDraft(title=title, items=flatten_markdown_items(parse_result.items))
