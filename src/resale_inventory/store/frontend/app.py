from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...config import DEFAULT_ALLOW_ORIGINS
from ...domain.inventory import calculate_purchase_stats, filter_items, sort_items
from ...invoice import SAMPLE_INVOICE
from ...logging import get_logger
from ..db import InventoryDatabase, RecordValidationError
from ..service import InvoiceExtractionError, InvoiceImportService, NoItemsFoundError


LOG = get_logger("store-frontend")


def _normalise_direction(value: Optional[str]) -> str:
    if value and value.lower() == "desc":
        return "desc"
    return "asc"


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail="Request body must be JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload


def create_app(
    root_dir: Optional[str] = None,
    *,
    db_path: Optional[str] = None,
    allow_origins: Optional[List[str]] = None,
) -> Starlette:
    """Create a Starlette app exposing invoice parsing and the inventory store."""

    db = InventoryDatabase(root_dir=root_dir, db_path=db_path)
    importer = InvoiceImportService(db)

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "db_path": db.db_path})

    async def sample_invoice(_: Request) -> JSONResponse:
        return JSONResponse({"text": SAMPLE_INVOICE})

    def _preview(text: Any):
        try:
            return importer.preview(text)
        except InvoiceExtractionError as exc:
            raise HTTPException(status_code=400, detail=f"{exc.reason}: {exc}") from exc
        except NoItemsFoundError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    async def parse_invoice_text(request: Request) -> JSONResponse:
        body = await _json_body(request)
        result = _preview(body.get("text"))
        return JSONResponse(result.to_dict())

    async def import_invoice_text(request: Request) -> JSONResponse:
        body = await _json_body(request)
        result = _preview(body.get("text"))
        try:
            summary = importer.confirm(result)
        except RecordValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse(summary, status_code=201)

    async def purchases(request: Request) -> JSONResponse:
        if request.method == "POST":
            body = await _json_body(request)
            try:
                created = db.create_purchase(body)
            except RecordValidationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            return JSONResponse(created, status_code=201)
        return JSONResponse({"items": db.list_purchases()})

    async def purchase_detail(request: Request) -> JSONResponse:
        purchase_id = request.path_params["purchase_id"]
        if request.method == "DELETE":
            db.delete_purchase(purchase_id)
            return JSONResponse({"deleted": purchase_id})
        if request.method == "PATCH":
            body = await _json_body(request)
            try:
                payload = db.update_purchase(purchase_id, body)
            except RecordValidationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        else:
            payload = db.get_purchase(purchase_id)
        if payload is None:
            raise HTTPException(status_code=404, detail="Purchase not found")
        return JSONResponse(payload)

    async def purchase_stats(request: Request) -> JSONResponse:
        purchase = db.get_purchase(request.path_params["purchase_id"])
        if purchase is None:
            raise HTTPException(status_code=404, detail="Purchase not found")
        items = db.list_items(purchase_id=purchase["purchase_id"])
        return JSONResponse(calculate_purchase_stats(purchase, items))

    async def items(request: Request) -> JSONResponse:
        if request.method == "POST":
            body = await _json_body(request)
            try:
                created = db.create_item(body)
            except RecordValidationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            return JSONResponse(created, status_code=201)
        qp = request.query_params
        rows = filter_items(
            db.list_items(),
            {
                "purchase_id": qp.get("purchase_id"),
                "category": qp.get("category"),
                "brand": qp.get("brand"),
                "status": qp.get("status"),
                "search": qp.get("search"),
            },
        )
        sort = qp.get("sort")
        if sort:
            rows = sort_items(rows, sort, _normalise_direction(qp.get("direction")))
        return JSONResponse({"items": rows, "total": len(rows)})

    async def item_detail(request: Request) -> JSONResponse:
        item_id = request.path_params["item_id"]
        if request.method == "DELETE":
            db.delete_item(item_id)
            return JSONResponse({"deleted": item_id})
        if request.method == "PATCH":
            body = await _json_body(request)
            try:
                payload = db.update_item(item_id, body)
            except RecordValidationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        else:
            payload = db.get_item(item_id)
        if payload is None:
            raise HTTPException(status_code=404, detail="Item not found")
        return JSONResponse(payload)

    async def export_data(_: Request) -> JSONResponse:
        return JSONResponse(db.export_data())

    async def import_data(request: Request) -> JSONResponse:
        body = await _json_body(request)
        try:
            db.import_data(body)
        except RecordValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse({"imported": True})

    routes = [
        Route("/api/health", health, methods=["GET"]),
        Route("/api/invoices/sample", sample_invoice, methods=["GET"]),
        Route("/api/invoices/parse", parse_invoice_text, methods=["POST"]),
        Route("/api/invoices/import", import_invoice_text, methods=["POST"]),
        Route("/api/purchases", purchases, methods=["GET", "POST"]),
        Route("/api/purchases/{purchase_id:str}", purchase_detail, methods=["GET", "PATCH", "DELETE"]),
        Route("/api/purchases/{purchase_id:str}/stats", purchase_stats, methods=["GET"]),
        Route("/api/items", items, methods=["GET", "POST"]),
        Route("/api/items/{item_id:str}", item_detail, methods=["GET", "PATCH", "DELETE"]),
        Route("/api/export", export_data, methods=["GET"]),
        Route("/api/import", import_data, methods=["POST"]),
    ]

    app = Starlette(debug=False, routes=routes)

    origins = allow_origins or DEFAULT_ALLOW_ORIGINS
    cors_allow_origins = ["*"] if "*" in origins else origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    LOG.info(f"Inventory API ready (db={db.db_path})")
    return app


__all__ = ["create_app"]
