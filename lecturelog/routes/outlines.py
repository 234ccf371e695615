import asyncio
import os
from dataclasses import asdict

import aiofiles
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from loguru import logger
from pydantic import BaseModel

from lecturelog.config import settings
from lecturelog.dependencies import get_outline_storage
from lecturelog.services.markdown_import import preview_markdown
from lecturelog.services.outline_creation import (
    OutlineCreationService,
    validate_markdown_for_outline_creation,
)
from lecturelog.services.outline_storage import OutlineStorage

router = APIRouter(prefix="/api", tags=["outlines"])

_MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkdn", ".txt")


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class MarkdownImport(BaseModel):
    content: str
    custom_title: str | None = None
    validate_items: bool = True
    allow_duplicate_titles: bool = False


class MarkdownBody(BaseModel):
    content: str


# ------------------------------------------------------------------
# Import / preview
# ------------------------------------------------------------------


@router.post("/outlines/import")
def import_outline(
    body: MarkdownImport, storage: OutlineStorage = Depends(get_outline_storage)
) -> dict:
    """Create and persist an outline from markdown text."""
    result = OutlineCreationService(storage).create_outline_from_markdown(
        body.content,
        custom_title=body.custom_title,
        validate_items=body.validate_items,
        allow_duplicate_titles=body.allow_duplicate_titles,
    )
    if result.already_exists:
        raise HTTPException(status_code=409, detail=result.errors)
    if not result.success:
        raise HTTPException(status_code=422, detail=result.errors)
    return result.outline.to_dict()


@router.post("/outlines/upload")
async def upload_outline(
    file: UploadFile = File(...),
    custom_title: str | None = None,
    storage: OutlineStorage = Depends(get_outline_storage),
) -> dict:
    """Upload a markdown file; a copy of each imported file is kept under ``imports_root``."""
    filename = os.path.basename(file.filename or "upload.md")
    stem, ext = os.path.splitext(filename)
    if ext.lower() not in _MARKDOWN_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {ext}. Use a markdown or text file",
        )

    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8")

    result = await asyncio.to_thread(
        OutlineCreationService(storage).create_outline_from_markdown,
        content,
        custom_title=custom_title or stem,
    )
    if result.already_exists:
        raise HTTPException(status_code=409, detail=result.errors)
    if not result.success:
        raise HTTPException(status_code=422, detail=result.errors)

    # One file per imported outline
    os.makedirs(settings.imports_root, exist_ok=True)
    saved_path = os.path.join(settings.imports_root, f"{result.outline.id}_{filename}")
    async with aiofiles.open(saved_path, "wb") as f:
        await f.write(raw)
    logger.info(f"Saved uploaded outline source to {saved_path}")

    return result.outline.to_dict()


@router.post("/outlines/preview")
def preview_outline(body: MarkdownBody) -> dict:
    preview = preview_markdown(body.content)
    draft = preview.preview_outline
    return {
        "is_valid": preview.is_valid,
        "errors": preview.errors,
        "title": draft.title if draft else preview.parse_result.title,
        "items": [i.to_dict() for i in draft.items] if draft else [],
    }


@router.post("/outlines/validate")
def validate_outline(body: MarkdownBody) -> dict:
    return asdict(validate_markdown_for_outline_creation(body.content))


# ------------------------------------------------------------------
# CRUD
# ------------------------------------------------------------------


@router.get("/outlines")
def list_outlines(storage: OutlineStorage = Depends(get_outline_storage)) -> list[dict]:
    return [o.to_dict() for o in storage.load_outlines()]


@router.get("/outlines/{outline_id}")
def get_outline(
    outline_id: str, storage: OutlineStorage = Depends(get_outline_storage)
) -> dict:
    outline = storage.get_outline_by_id(outline_id)
    if outline is None:
        raise HTTPException(status_code=404, detail=f"Outline {outline_id} not found")
    return outline.to_dict()


@router.delete("/outlines/{outline_id}")
def delete_outline(
    outline_id: str, storage: OutlineStorage = Depends(get_outline_storage)
) -> dict:
    if storage.get_outline_by_id(outline_id) is None:
        raise HTTPException(status_code=404, detail=f"Outline {outline_id} not found")
    if not storage.delete_outline(outline_id):
        raise HTTPException(status_code=500, detail="Failed to delete outline")
    return {"deleted": outline_id}
