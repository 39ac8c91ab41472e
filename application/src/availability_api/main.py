"""FastAPI app: GET/POST /api/availability/{user_id} — load and save a user's weekly availability."""

from __future__ import annotations

import json
import os
import sys
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env when running locally (application/.env or repo root .env / .env.local)
_app_dir = Path(__file__).resolve().parent.parent.parent  # application/
_repo_root = _app_dir.parent
load_dotenv(_app_dir / ".env")
load_dotenv(_app_dir / ".env.local")
load_dotenv(_repo_root / ".env")
load_dotenv(_repo_root / ".env.local")

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from . import store, validation
from .availability import ScheduleFormatError, WeeklySchedule
from .errors import ProtocolError, StorageCorruptionError, StorageWriteError, ValidationError


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One DynamoDB client for the life of the process
    app.state.store = store.AvailabilityStore(store.make_client(), store.table_name())
    yield


app = FastAPI(title="Weekly Availability", version="0.1.0", lifespan=lifespan)


def get_store(request: Request) -> store.AvailabilityStore:
    return request.app.state.store


def _strict_validation() -> bool:
    return os.environ.get("AVAILABILITY_STRICT_VALIDATION", "").strip().lower() in ("1", "true", "yes", "on")


def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def _parse_body(request: Request) -> WeeklySchedule:
    """Decode the POSTed schedule. Raises ProtocolError for anything malformed."""
    raw = await request.body()
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, RecursionError, json.JSONDecodeError) as e:
        raise ProtocolError("Body is not JSON") from e
    try:
        return WeeklySchedule.from_dict(data)
    except ScheduleFormatError as e:
        raise ProtocolError(str(e)) from e


@app.get("/api/availability/{user_id}")
async def get_availability(user_id: str, availability_store: store.AvailabilityStore = Depends(get_store)):
    """Initial form data: the stored schedule, or the default if none is stored."""
    try:
        schedule = availability_store.load(user_id)
    except StorageCorruptionError as e:
        print(f"[main.get_availability] {e.message}", file=sys.stderr)
        return _message(500, "Stored availability is unreadable")
    return {"initialData": schedule.to_dict(), "userId": user_id}


@app.post("/api/availability/{user_id}")
async def save_availability(
    user_id: str,
    request: Request,
    availability_store: store.AvailabilityStore = Depends(get_store),
):
    """Replace the user's schedule with the POSTed one."""
    try:
        schedule = await _parse_body(request)
    except ProtocolError as e:
        print(f"[main.save_availability] rejected body for {user_id}: {e.message}", file=sys.stderr)
        return _message(400, "Invalid availability payload")

    if _strict_validation():
        try:
            validation.ensure_valid(schedule)
        except ValidationError as e:
            return _message(422, e.message, errors=e.errors)

    try:
        availability_store.save(user_id, schedule)
    except StorageWriteError:
        traceback.print_exc(file=sys.stderr)
        return _message(500, "Failed to save availability")
    return _message(200, "Availability saved successfully")


@app.api_route("/api/availability/{user_id}", methods=["PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"])
async def availability_method_not_allowed(user_id: str):
    return JSONResponse(status_code=405, content={"message": "Method not allowed"}, headers={"Allow": "GET, POST"})


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
