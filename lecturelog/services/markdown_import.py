"""Turn markdown text (or a markdown file) into an ``Outline``."""

import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from lecturelog.models import Outline
from lecturelog.services.markdown_parser import (
    MarkdownParseResult,
    OutlineDraft,
    convert_to_outline_format,
    parse_markdown_list,
    validate_markdown_items,
)

_MARKDOWN_PATTERNS = [
    re.compile(r"^[-*]\s+", re.MULTILINE),  # bullets
    re.compile(r"^-\s*\[[xX\s]\]\s+", re.MULTILINE),  # todos
    re.compile(r"^#+\s+", re.MULTILINE),  # headings
]


@dataclass
class ImportResult:
    success: bool
    outline: Outline | None = None
    errors: list[str] = field(default_factory=list)
    parse_result: MarkdownParseResult | None = None


@dataclass
class PreviewResult:
    is_valid: bool
    parse_result: MarkdownParseResult
    preview_outline: OutlineDraft | None = None
    errors: list[str] = field(default_factory=list)


def generate_outline_id() -> str:
    return str(uuid.uuid4())


def import_from_text(
    content: str, custom_title: str | None = None, validate_items: bool = True
) -> ImportResult:
    """Parse, validate and convert. Any parse error fails the import."""
    try:
        parse_result = parse_markdown_list(content)
        if parse_result.errors:
            return ImportResult(success=False, errors=parse_result.errors, parse_result=parse_result)

        if validate_items:
            validation = validate_markdown_items(parse_result.items)
            if not validation.is_valid:
                return ImportResult(success=False, errors=validation.errors, parse_result=parse_result)

        draft = convert_to_outline_format(parse_result, custom_title)
        outline = Outline(id=generate_outline_id(), title=draft.title, items=draft.items)
        return ImportResult(success=True, outline=outline, parse_result=parse_result)
    except Exception as e:
        logger.exception("Text import failed")
        return ImportResult(success=False, errors=[f"Text import failed: {e}"])


def import_from_file(
    path: str | Path, custom_title: str | None = None, validate_items: bool = True
) -> ImportResult:
    """Read a UTF-8 markdown file; the file stem is the fallback title."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except Exception as e:
        logger.error(f"Could not read {path}: {e}")
        return ImportResult(success=False, errors=[f"File import failed: {e}"])
    return import_from_text(content, custom_title=custom_title or path.stem, validate_items=validate_items)


def preview_markdown(content: str) -> PreviewResult:
    try:
        parse_result = parse_markdown_list(content)
        validation = validate_markdown_items(parse_result.items)
        preview = convert_to_outline_format(parse_result) if validation.is_valid else None
        return PreviewResult(
            is_valid=validation.is_valid and not parse_result.errors,
            parse_result=parse_result,
            preview_outline=preview,
            errors=parse_result.errors + validation.errors,
        )
    except Exception as e:
        logger.exception("Markdown preview failed")
        return PreviewResult(
            is_valid=False,
            parse_result=MarkdownParseResult(),
            errors=[f"Preview failed: {e}"],
        )


def has_markdown_patterns(text: str | None) -> bool:
    """Quick sniff for bullet, todo or heading lines."""
    if not text or not text.strip():
        return False
    return any(p.search(text) for p in _MARKDOWN_PATTERNS)
