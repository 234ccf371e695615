from dataclasses import dataclass, field

from loguru import logger

from lecturelog.config import settings
from lecturelog.models import Outline
from lecturelog.services.markdown_import import import_from_text, preview_markdown
from lecturelog.services.outline_storage import OutlineStorage


@dataclass
class OutlineCreationResult:
    success: bool
    outline: Outline | None = None
    errors: list[str] = field(default_factory=list)
    already_exists: bool = False


@dataclass
class BatchCreationResult:
    success: bool
    results: list[OutlineCreationResult]
    success_count: int
    failure_count: int


@dataclass
class CreationValidation:
    is_valid: bool
    errors: list[str]
    warnings: list[str] = field(default_factory=list)
    preview_title: str | None = None
    item_count: int | None = None


class OutlineCreationService:
    """Markdown -> Outline -> storage, with duplicate-title handling."""

    def __init__(self, storage: OutlineStorage) -> None:
        self.storage = storage

    def create_outline_from_markdown(
        self,
        content: str,
        custom_title: str | None = None,
        validate_items: bool = True,
        allow_duplicate_titles: bool = False,
        save_to_storage: bool = True,
    ) -> OutlineCreationResult:
        imported = import_from_text(content, custom_title=custom_title, validate_items=validate_items)
        if not imported.success or imported.outline is None:
            return OutlineCreationResult(success=False, errors=imported.errors)

        outline = imported.outline

        if save_to_storage and not allow_duplicate_titles:
            if any(o.title == outline.title for o in self.storage.load_outlines()):
                return OutlineCreationResult(
                    success=False,
                    outline=outline,
                    errors=[f'An outline with the title "{outline.title}" already exists'],
                    already_exists=True,
                )

        if save_to_storage and not self.storage.add_outline(outline):
            return OutlineCreationResult(
                success=False, outline=outline, errors=["Failed to save outline to storage"]
            )

        logger.info(f"Created outline {outline.title!r} with {len(outline.items)} items")
        return OutlineCreationResult(success=True, outline=outline)

    def create_outline_from_markdown_with_auto_title(
        self,
        content: str,
        base_title: str | None = None,
        validate_items: bool = True,
        allow_duplicate_titles: bool = False,
        save_to_storage: bool = True,
    ) -> OutlineCreationResult:
        """Use *base_title*, or ``base_title (n)`` for the first free n."""
        base_title = base_title or settings.default_outline_title
        title = base_title
        if not allow_duplicate_titles and save_to_storage:
            taken = {o.title for o in self.storage.load_outlines()}
            counter = 1
            while title in taken:
                title = f"{base_title} ({counter})"
                counter += 1

        return self.create_outline_from_markdown(
            content,
            custom_title=title,
            validate_items=validate_items,
            allow_duplicate_titles=allow_duplicate_titles,
            save_to_storage=save_to_storage,
        )

    def create_outlines_from_markdown_batch(
        self, entries: list[dict], **options
    ) -> BatchCreationResult:
        """``entries`` are ``{"content": str, "title": str | None}`` dicts."""
        results = [
            self.create_outline_from_markdown(
                entry["content"], custom_title=entry.get("title"), **options
            )
            for entry in entries
        ]
        ok = sum(1 for r in results if r.success)
        return BatchCreationResult(
            success=ok > 0,
            results=results,
            success_count=ok,
            failure_count=len(results) - ok,
        )


def validate_markdown_for_outline_creation(content: str) -> CreationValidation:
    preview = preview_markdown(content)
    draft = preview.preview_outline

    warnings: list[str] = []
    if draft is not None and not draft.items:
        warnings.append("No list items found in the markdown content")
    if draft is not None and len(draft.items) > settings.max_outline_items_warning:
        warnings.append("Large number of items detected - consider splitting into smaller outlines")
    if draft is None or draft.title == settings.default_outline_title:
        warnings.append("No title detected - a default title will be used")

    return CreationValidation(
        is_valid=preview.is_valid,
        errors=preview.errors,
        warnings=warnings,
        preview_title=draft.title if draft else None,
        item_count=len(draft.items) if draft else None,
    )
