"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import (
    Body,
    Depends,
    FastAPI,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import PlainTextResponse, Response

from cutboard.api.admin import router as admin_router
from cutboard.api.models import CalculatorRequest, DeletePhotoRequest
from cutboard.app_logging import configure_logging
from cutboard.containers import AppContainer
from cutboard.domain.document import AppData
from cutboard.domain.photos import PhotoInfo
from cutboard.domain.plans import DEFAULT_PLANS
from cutboard.services import analytics
from cutboard.services.migrations import DocumentError
from cutboard.services.photos import PhotoError, PhotoOwnershipError
from cutboard.services.plan_export import UnknownExportFormatError, export_plan
from cutboard.services.shopping import (
    ShoppingList,
    at_home_step,
    format_quantity,
    shopping_list,
)

EXPORT_MEDIA_TYPES = {"json": "application/json", "table": "text/markdown"}

_logger = logging.getLogger(__name__)


async def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> str:
    """Resolve the bearer token to a user id or reject the request."""
    container: AppContainer = request.app.state.container
    user_id = container.auth_service.authenticate(authorization)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )
    return user_id


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    def load_document(user_id: str, today: date | None = None) -> AppData:
        try:
            return container.sync_service.load_document(user_id, today=today)
        except DocumentError as exc:
            _logger.exception("Stored document for %s is invalid", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Stored data is invalid",
            ) from exc

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/sync")
    async def get_sync(
        user_id: str = Depends(require_user),
    ) -> dict[str, Any] | None:
        """Return the stored document, or null when nothing is stored."""
        try:
            return container.sync_service.get_document(user_id)
        except Exception as exc:
            _logger.exception("Failed to fetch document for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to fetch data",
            ) from exc

    @app.post("/api/sync")
    async def post_sync(
        document: dict[str, Any] = Body(...),
        user_id: str = Depends(require_user),
    ) -> dict[str, object]:
        """Overwrite the stored document."""
        try:
            last_sync = container.sync_service.save_document(user_id, document)
        except Exception as exc:
            _logger.exception("Failed to save document for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to save: {exc}",
            ) from exc
        return {"success": True, "lastSync": last_sync}

    @app.post("/api/migrate-to-db")
    async def migrate_to_db(
        user_id: str = Depends(require_user),
    ) -> dict[str, object]:
        """Import a legacy document from object storage."""
        try:
            result = container.sync_service.import_legacy_document(user_id)
        except Exception as exc:
            _logger.exception("Legacy import failed for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Migration failed: {exc}",
            ) from exc
        payload: dict[str, object] = {
            "success": True,
            "message": result.message,
            "source": result.source,
        }
        if result.last_sync:
            payload["lastSync"] = result.last_sync
        return payload

    @app.get("/api/photos")
    async def list_photos(
        user_id: str = Depends(require_user),
    ) -> list[dict[str, str]]:
        """List the user's progress photos, newest first."""
        try:
            photos = container.photo_service.list_photos(user_id)
        except Exception as exc:
            _logger.exception("Failed to list photos for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to fetch photos",
            ) from exc
        return [_serialize_photo(photo) for photo in photos]

    @app.post("/api/photos")
    async def upload_photo(
        file: UploadFile | None = File(default=None),
        photo_date: str | None = Form(default=None, alias="date"),
        user_id: str = Depends(require_user),
    ) -> dict[str, object]:
        """Upload a progress photo."""
        if file is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided"
            )
        content = await file.read()
        try:
            photo = container.photo_service.upload_photo(
                user_id,
                content,
                filename=file.filename or "",
                content_type=file.content_type or "application/octet-stream",
                photo_date=photo_date or None,
            )
        except PhotoError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except Exception as exc:
            _logger.exception("Failed to upload photo for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload photo",
            ) from exc
        return {"success": True, "url": photo.url, "date": photo.date}

    @app.delete("/api/photos")
    async def delete_photo(
        body: DeletePhotoRequest, user_id: str = Depends(require_user)
    ) -> dict[str, bool]:
        """Delete a progress photo by URL."""
        try:
            container.photo_service.delete_photo(user_id, body.url or "")
        except PhotoOwnershipError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized"
            ) from exc
        except PhotoError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except Exception as exc:
            _logger.exception("Failed to delete photo for %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete photo",
            ) from exc
        return {"success": True}

    @app.get("/api/progress")
    async def progress(
        today: date | None = None, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Return cut progress, trends and today's intake."""
        day = today or date.today()
        doc = load_document(user_id, today=day)
        tdee = analytics.adaptive_tdee(doc, today=day)
        return {
            "progress": asdict(analytics.cut_progress(doc.profile, today=day)),
            "moving_average": [
                asdict(point) for point in analytics.moving_average(doc.weights)
            ],
            "adaptive_tdee": asdict(tdee) if tdee else None,
            "compliance_7d": analytics.compliance(doc, today=day),
            "weigh_in_streak": analytics.weigh_in_streak(doc.weights, today=day),
            "today": {
                "date": day.isoformat(),
                "intake": asdict(analytics.day_intake(doc, day.isoformat())),
            },
        }

    @app.get("/api/shopping")
    async def shopping(user_id: str = Depends(require_user)) -> dict[str, object]:
        """Return the shopping list for the planned days."""
        return _serialize_shopping(shopping_list(load_document(user_id)))

    @app.get("/api/plans/{plan_id}/export")
    async def export(
        plan_id: str,
        export_format: str = Query(default="text", alias="format"),
        user_id: str = Depends(require_user),
    ) -> Response:
        """Export a stored or built-in plan as json, table or text."""
        doc = load_document(user_id)
        plan = doc.meal_plans.get(plan_id) or DEFAULT_PLANS.get(plan_id)
        if plan is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found"
            )
        try:
            content = export_plan(plan, export_format)
        except UnknownExportFormatError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        media_type = EXPORT_MEDIA_TYPES.get(export_format)
        if media_type is None:
            return PlainTextResponse(content)
        return Response(content=content, media_type=media_type)

    @app.post("/api/calculator")
    async def calculator(
        body: CalculatorRequest, user_id: str = Depends(require_user)
    ) -> dict[str, object]:
        """Compute BMR, TDEE and cut targets."""
        targets = analytics.energy_targets(
            weight_kg=body.weight_kg,
            height_cm=body.height_cm,
            age=body.age,
            sex=body.sex,
            activity_level=analytics.ACTIVITY_LEVELS[body.activity],
            deficit_percent=body.deficit_percent,
            goal_weight_kg=body.goal_weight_kg,
        )
        return asdict(targets)

    return app


def _serialize_photo(photo: PhotoInfo) -> dict[str, str]:
    return {
        "url": photo.url,
        "pathname": photo.key,
        "uploadedAt": photo.uploaded_at,
        "date": photo.date,
    }


def _serialize_shopping(result: ShoppingList) -> dict[str, object]:
    items = []
    for item in result.items:
        entry = asdict(item)
        entry["display_needed"] = format_quantity(item.needed, item.unit)
        entry["at_home_step"] = at_home_step(item.unit)
        items.append(entry)
    return {
        "items": items,
        "total_days": result.total_days,
        "total_calories": result.total_calories,
        "checked_count": result.checked_count,
    }
