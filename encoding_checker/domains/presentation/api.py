from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from encoding_checker.dependencies import get_websocket_manager
from encoding_checker.domains.presentation.websocket_manager import WebSocketManager

websocket_router = APIRouter(prefix="/api/ws", tags=["websockets"])


@websocket_router.websocket("/live")
async def websocket_endpoint(
        websocket: WebSocket, ws_manager: WebSocketManager = Depends(get_websocket_manager)
):
    await ws_manager.connect(websocket)

    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        ws_manager.disconnect(websocket)
