import logging
from typing import Any, Dict

from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clipstack.config import HistorySettings
from clipstack.models.entry import ClipboardEntry, Payload
from clipstack.services.history_service import HistoryService

logger = logging.getLogger(__name__)


class AddItemBody(BaseModel):
    payload: Payload


class SettingsBody(BaseModel):
    history_limit: int = Field(..., ge=1, description="Maximum number of unpinned entries kept")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _history_view(service: HistoryService) -> Dict[str, Any]:
    hints = service.hints()
    return {
        "items": [{**e.to_dict(), "preview": e.preview()} for e in service.entries()],
        "lastInsertedId": hints.last_inserted_id,
        "pinnedScrollTargetId": hints.pinned_scroll_target_id,
    }


def create_app(service: HistoryService, settings: HistorySettings) -> FastAPI:
    """Build the HTTP surface over a service whose limit is read from ``settings``."""
    app = FastAPI(title="ClipStack")
    app.state.history_service = service
    app.state.settings = settings

    @app.get("/")
    def root():
        return "running"

    @app.get("/history")
    def get_history():
        return _history_view(service)

    @app.post("/history")
    def add_item(body: AddItemBody):
        entry = ClipboardEntry(payload=body.payload)
        added = service.add_item(entry)
        logger.info(f"Clipboard added: {entry.kind} (added={added})")
        return {"ok": True, "itemId": entry.id, "added": added}

    @app.get("/history/{item_id}")
    def get_item(item_id: str):
        entry = service.get(item_id)
        if entry is None:
            return {"error": f"no entry {item_id}"}
        return entry.to_dict()

    @app.post("/history/{item_id}/pin")
    def toggle_pin(item_id: str):
        return {"ok": True, "changed": service.toggle_pin(item_id)}

    @app.delete("/history/{item_id}")
    def delete_item(item_id: str):
        return {"ok": True, "changed": service.delete(item_id)}

    @app.delete("/history")
    def clear_history():
        service.clear_history()
        return {"ok": True}

    @app.get("/settings")
    def get_settings():
        return SettingsBody(history_limit=settings.history_limit).model_dump(by_alias=True)

    @app.put("/settings")
    def update_settings(body: SettingsBody):
        settings.history_limit = body.history_limit
        logger.info(f"History limit set to {body.history_limit}")
        return body.model_dump(by_alias=True)

    return app
