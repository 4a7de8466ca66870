import json
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional

import azure.functions as func

from ..shared_blob import QUESTIONS_PREFIX, QuestionBlobStore, get_question_store
from .records import (
    CorruptRecordError,
    build_record,
    missing_required_fields,
    parse_stored_record,
    question_path,
    record_id_from_path,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Content-Type": "application/json",
}

MAX_FETCH_WORKERS = 16


def _json(payload: Dict[str, Any], code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload, ensure_ascii=False),
        status_code=code,
        mimetype="application/json",
        headers=dict(CORS_HEADERS),
    )


def _bad(msg: str, code: int = 400) -> func.HttpResponse:
    logging.warning("[questions] %s -> %s", msg, code)
    return _json({"error": msg}, code)


def _load_listed(store: QuestionBlobStore, blob: Dict[str, Any]) -> Dict[str, Any]:
    data = parse_stored_record(store.fetch_text(blob["url"]), blob["pathname"])
    return {
        "id": record_id_from_path(blob["pathname"]),
        "uploadedAt": blob["uploadedAt"],
        **data,
    }


def _load_all(store: QuestionBlobStore, blobs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not blobs:
        return []
    workers = min(MAX_FETCH_WORKERS, len(blobs))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_load_listed, store, blob) for blob in blobs]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for fut in pending:
            fut.cancel()
        # Listing is all or nothing.
        for fut in done:
            error = fut.exception()
            if error is not None:
                raise error
        return [fut.result() for fut in futures]


def _get(store: QuestionBlobStore, question_id: Optional[str]) -> func.HttpResponse:
    if question_id:
        blobs = store.list_blobs(QUESTIONS_PREFIX + question_id)
        if not blobs:
            return _bad("not found", 404)
        first = blobs[0]
        question = parse_stored_record(store.fetch_text(first["url"]), first["pathname"])
        return _json({"success": True, "data": question})

    questions = _load_all(store, store.list_blobs(QUESTIONS_PREFIX))
    return _json({"success": True, "count": len(questions), "data": questions})


def _post(store: QuestionBlobStore, req: func.HttpRequest) -> func.HttpResponse:
    body = req.get_json()
    missing = missing_required_fields(body)
    if missing:
        return _bad("missing required fields")

    record = build_record(body)
    url = store.put_json(question_path(record["id"]), json.dumps(record, ensure_ascii=False))
    logging.info("[questions] saved %s", record["id"])
    return _json(
        {
            "success": True,
            "message": "question saved successfully",
            "data": {"id": record["id"], "url": url},
        },
        201,
    )


def _delete(store: QuestionBlobStore, question_id: Optional[str]) -> func.HttpResponse:
    if not question_id:
        return _bad("missing id")
    store.delete(question_path(question_id))
    logging.info("[questions] deleted %s", question_id)
    return _json({"success": True, "message": "question deleted successfully"})


def handle(req: func.HttpRequest, store: Optional[QuestionBlobStore] = None) -> func.HttpResponse:
    method = req.method.upper()
    if method == "OPTIONS":
        return func.HttpResponse(
            "",
            status_code=200,
            mimetype="application/json",
            headers=dict(CORS_HEADERS),
        )

    try:
        question_id = req.params.get("id") or None
        logging.info("[questions] %s id=%s", method, question_id)

        if method not in ("GET", "POST", "DELETE"):
            return _bad("method not supported", 405)

        if store is None:
            store = get_question_store()

        if method == "GET":
            return _get(store, question_id)
        if method == "POST":
            return _post(store, req)
        return _delete(store, question_id)
    except CorruptRecordError as ex:
        logging.exception("[questions] corrupt record")
        return _json({"error": "corrupt record", "message": str(ex)}, 500)
    except Exception as ex:  # noqa: BLE001
        logging.exception("[questions] %s failed", method)
        return _json({"error": "server error", "message": str(ex)}, 500)
