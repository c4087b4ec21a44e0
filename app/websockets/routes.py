from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.site_settings_service import site_settings_service

router = APIRouter()


@router.websocket("/ws/site-settings")
async def websocket_site_settings(websocket: WebSocket):
    """ Pushes every site setting change as {"event", "key", "value"}. """
    await websocket.accept()
    queue = site_settings_service.subscribe()
    try:
        while True:
            event = await queue.get()
            await websocket.send_json(event)
    except WebSocketDisconnect:
        pass
    finally:
        site_settings_service.unsubscribe(queue)
