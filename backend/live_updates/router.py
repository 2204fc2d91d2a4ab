import logging

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect

from watcher_registry import WatchError

logger = logging.getLogger(__name__)

watch_router = APIRouter()


def _required(body: dict, name: str) -> str:
    value = body.get(name)
    if not value or not isinstance(value, str):
        raise HTTPException(400, f"{name} required")
    return value


################
# GET requests #
################

@watch_router.get("/api/watch")
async def list_watchers(request: Request):
    """Keys of all active watchers"""
    return {"watchers": request.app.state.watchers.active_keys()}


#################
# POST requests #
#################

@watch_router.post("/api/watch/session")
async def watch_session(request: Request, body: dict):
    project_path = _required(body, 'project_path')
    session_id = _required(body, 'session_id')
    try:
        request.app.state.watchers.watch_session(project_path, session_id)
    except WatchError as e:
        raise HTTPException(404, str(e))
    return {"watching": True, "key": request.app.state.watchers.session_key(project_path, session_id)}


@watch_router.post("/api/watch/subagent")
async def watch_subagent(request: Request, body: dict):
    project_path = _required(body, 'project_path')
    agent_id = _required(body, 'agent_id')
    try:
        request.app.state.watchers.watch_subagent(project_path, agent_id)
    except WatchError as e:
        raise HTTPException(404, str(e))
    return {"watching": True, "key": request.app.state.watchers.subagent_key(project_path, agent_id)}


@watch_router.post("/api/watch/telemetry")
async def watch_telemetry(request: Request, body: dict):
    project_path = _required(body, 'project_path')
    try:
        request.app.state.watchers.watch_telemetry(project_path)
    except WatchError as e:
        raise HTTPException(404, str(e))
    return {"watching": True, "key": request.app.state.watchers.telemetry_key(project_path)}


###################
# DELETE requests #
###################

@watch_router.delete("/api/watch/session")
async def unwatch_session(request: Request, project_path: str, session_id: str):
    request.app.state.watchers.unwatch_session(project_path, session_id)
    return {"watching": False}


@watch_router.delete("/api/watch/subagent")
async def unwatch_subagent(request: Request, project_path: str, agent_id: str):
    request.app.state.watchers.unwatch_subagent(project_path, agent_id)
    return {"watching": False}


@watch_router.delete("/api/watch/telemetry")
async def unwatch_telemetry(request: Request, project_path: str):
    request.app.state.watchers.unwatch_telemetry(project_path)
    return {"watching": False}


##############
# WebSockets #
##############

@watch_router.websocket("/ws/events")
async def live_events(websocket: WebSocket):
    """
    Pushes {"event": ..., "payload": {...}} for every watched change.
    Client messages are only read to notice the disconnect.
    """
    broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message == 'ping':
                await websocket.send_json({"event": "pong", "payload": {}})
    except WebSocketDisconnect:
        logger.info("Live update client disconnected")
    finally:
        broadcaster.disconnect(websocket)
