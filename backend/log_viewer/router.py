from pathlib import Path

from fastapi import APIRouter, HTTPException, Query, Request

from log_viewer.event_reader import read_event_at, read_events

log_router = APIRouter()

LOG_KINDS = ('session', 'subagent')


def _resolve_log(request: Request, kind: str, project_path: str, log_id: str) -> Path:
    locator = request.app.state.locator
    if kind == 'session':
        log_file = locator.session_file(project_path, log_id)
    elif kind == 'subagent':
        log_file = locator.subagent_file(project_path, log_id)
    else:
        raise HTTPException(404, f"Unknown log kind: {kind}")

    if log_file is None:
        raise HTTPException(404, f"Log file not found: {log_id}")
    return log_file


################
# GET requests #
################

@log_router.get("/api/events/{kind}/event")
async def get_event(request: Request, kind: str, project_path: str, log_id: str,
                    byte_offset: int = Query(..., ge=0)):
    """Load the full event behind a search match"""
    log_file = _resolve_log(request, kind, project_path, log_id)

    try:
        event = await read_event_at(log_file, byte_offset)
    except OSError as e:
        raise HTTPException(500, f"Error reading file: {str(e)}")

    if event is None:
        raise HTTPException(404, f"No event at byte offset {byte_offset}")

    return {
        "byteOffset": byte_offset,
        "event": event,
    }


@log_router.get("/api/events/{kind}/page")
async def get_event_page(request: Request, kind: str, project_path: str, log_id: str,
                         offset: int = Query(0, ge=0), lines: int = Query(100, ge=1, le=5000)):
    """Get a page of events starting at line offset"""
    log_file = _resolve_log(request, kind, project_path, log_id)

    try:
        return await read_events(log_file, offset, lines)
    except OSError as e:
        raise HTTPException(500, f"Error reading file: {str(e)}")
