"""
WebSocket endpoint for live map updates.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from geocity.services.realtime import get_connection_manager
from geocity.services.report_service import get_all_reports

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/reports")
async def reports_socket(websocket: WebSocket):
    """
    Clients get {"type": "initial"} and the current active reports on
    connect, then every report event as it happens.
    """
    manager = get_connection_manager()
    await manager.connect(websocket)
    try:
        try:
            reports = await get_all_reports()
            await websocket.send_json({"type": "reports-list", "reports": reports})
        except WebSocketDisconnect:
            raise
        except Exception as e:
            logger.warning(f"Could not send initial reports list: {e}")

        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict):
                await manager.handle_client_message(websocket, message)
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception as e:
        logger.warning(f"WebSocket closed with error: {e}")
        manager.disconnect(websocket)
