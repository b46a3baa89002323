"""Image fit route factory."""

from typing import Annotated, ClassVar
from urllib.parse import quote

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...common.schema_fit import FitMode, FitRequest
from ...common.schema_item import ImageItemSummary, ItemStatus
from ...workspace import BatchWorkspace, SuggestionOutcome, SuggestionStatus


class IngestResponse(BaseModel):
    item_ids: list[str]


class ClearResponse(BaseModel):
    removed: int


class SuggestRequest(BaseModel):
    query: str = Field(..., description="Platform or use case, e.g. 'Instagram story'")


class FitRequestUpdate(BaseModel):
    target_width: int | None = None
    target_height: int | None = None
    fit_mode: FitMode | None = None
    background_color: str | None = None
    output_format: str | None = None
    quality: int | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


SUGGESTION_STATUS_CODES: dict[SuggestionStatus, int] = {
    SuggestionStatus.APPLIED: status.HTTP_200_OK,
    SuggestionStatus.EMPTY_QUERY: status.HTTP_400_BAD_REQUEST,
    SuggestionStatus.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    SuggestionStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}


def _attachment(file_name: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}"}


def create_router(workspace: BatchWorkspace) -> APIRouter:
    """Create router bound to a workspace.

    Args:
        workspace: BatchWorkspace holding the items and current settings

    Returns:
        Configured APIRouter with ingestion, settings, batch and export endpoints
    """
    router = APIRouter()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @router.post("/images", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
    async def upload_images(
        files: Annotated[list[UploadFile], File(description="Images to queue")],
    ) -> IngestResponse:
        batch: list[tuple[str, bytes]] = []
        for upload in files:
            data = await upload.read()
            name = upload.filename or "image"
            if not data:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"{workspace.message('empty_upload')} ({name})",
                )
            batch.append((name, data))

        return IngestResponse(item_ids=workspace.ingest(batch))

    @router.get("/images", response_model=list[ImageItemSummary])
    async def list_images() -> list[ImageItemSummary]:
        return [item.summary() for item in workspace.list_items()]

    @router.get("/images/{item_id}", response_model=ImageItemSummary)
    async def get_image(item_id: str) -> ImageItemSummary:
        item = workspace.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=workspace.message("item_not_found"))
        return item.summary()

    @router.delete("/images/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def remove_image(item_id: str) -> Response:
        if not workspace.remove(item_id):
            raise HTTPException(status_code=404, detail=workspace.message("item_not_found"))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("/images", response_model=ClearResponse)
    async def clear_images() -> ClearResponse:
        return ClearResponse(removed=workspace.clear_all())

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @router.get("/settings", response_model=FitRequest)
    async def get_fit_settings() -> FitRequest:
        return workspace.request

    @router.put("/settings", response_model=FitRequest)
    async def update_fit_settings(body: FitRequestUpdate) -> FitRequest:
        try:
            return workspace.update_request(**body.model_dump(exclude_unset=True))
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc

    @router.post("/settings/suggest", response_model=SuggestionOutcome)
    async def suggest_dimensions(body: SuggestRequest) -> JSONResponse:
        outcome = await workspace.suggest_dimensions(body.query)
        return JSONResponse(
            status_code=SUGGESTION_STATUS_CODES[outcome.status],
            content=outcome.model_dump(mode="json"),
        )

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    @router.post("/batch", response_model=list[ImageItemSummary])
    async def run_batch() -> list[ImageItemSummary]:
        items = await workspace.run_batch()
        return [item.summary() for item in items]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @router.get("/images/{item_id}/result")
    async def download_result(item_id: str) -> Response:
        item = workspace.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=workspace.message("item_not_found"))

        entry = workspace.export(item_id)
        if entry is None:
            key = "item_failed" if item.status == ItemStatus.error else "item_not_ready"
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=workspace.message(key))

        return Response(content=entry.data, media_type=entry.mime_type, headers=_attachment(entry.file_name))

    @router.get("/archive")
    async def download_archive() -> Response:
        archive = workspace.build_archive()
        if archive is None:
            raise HTTPException(status_code=404, detail=workspace.message("nothing_to_export"))

        return Response(
            content=archive,
            media_type="application/zip",
            headers=_attachment(workspace.settings.archive_name),
        )

    # Mark functions as used (accessed via FastAPI decorator)
    _ = (
        upload_images,
        list_images,
        get_image,
        remove_image,
        clear_images,
        get_fit_settings,
        update_fit_settings,
        suggest_dimensions,
        run_batch,
        download_result,
        download_archive,
    )

    return router
