from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from clipvault.clipboard import ClipboardUnavailable
from clipvault.database.base import StorageError
from clipvault.models.clipboard_entry import ClipboardEntry, DeleteResult
from clipvault.services.history_service import HistoryService


class CopyRequest(BaseModel):
    text: str


def create_app(history: HistoryService) -> FastAPI:
    app = FastAPI(title="clipvault")

    @app.get("/")
    def root():
        return "running"

    @app.get("/history", response_model=List[ClipboardEntry])
    def get_history(limit: Optional[int] = Query(default=None, ge=0)):
        try:
            return history.get_history(limit)
        except StorageError as e:
            raise HTTPException(
                status_code=503, detail=f"Failed to get clipboard history: {e}")

    @app.delete("/history/{entry_id}", response_model=DeleteResult)
    def delete_entry(entry_id: int):
        return history.delete_entry(entry_id)

    @app.delete("/history", response_model=DeleteResult)
    def clear_all():
        return history.clear_all()

    @app.post("/clipboard")
    def copy_to_clipboard(request: CopyRequest):
        try:
            history.copy_to_clipboard(request.text)
        except ClipboardUnavailable as e:
            raise HTTPException(
                status_code=503, detail=f"Failed to copy to clipboard: {e}")
        return {"ok": True}

    return app
