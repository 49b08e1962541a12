"""
Live map updates over WebSocket.

Connected browsers receive `reports-updated` style events:
- {"type": "initial"} right after connecting
- {"type": "new-report", "report": {...}}
- {"type": "report-expired", "reportId": "..."}
- {"type": "reports-list", "reports": [...]}
"""

import logging
from threading import Lock
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self.active: List[WebSocket] = []
        self._lock = Lock()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        with self._lock:
            self.active.append(websocket)
        logger.info(f"WebSocket client connected ({len(self.active)} active)")
        await websocket.send_json({"type": "initial"})

    def disconnect(self, websocket: WebSocket):
        with self._lock:
            self.active = [ws for ws in self.active if ws is not websocket]
        logger.info(f"WebSocket client disconnected ({len(self.active)} active)")

    async def broadcast(self, message: Dict[str, Any], exclude: Optional[WebSocket] = None):
        """Send to every client except `exclude`; sockets that fail are dropped."""
        remove_list = []
        for ws in list(self.active):
            if ws is exclude:
                continue
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping dead WebSocket client: {e}")
                remove_list.append(ws)
        for ws in remove_list:
            self.disconnect(ws)

    async def broadcast_new_report(self, report: Dict[str, Any], exclude: Optional[WebSocket] = None):
        await self.broadcast({"type": "new-report", "report": report}, exclude=exclude)

    async def broadcast_report_expired(self, report_id: str):
        await self.broadcast({"type": "report-expired", "reportId": report_id})

    async def broadcast_reports_list(self, reports: List[Dict[str, Any]]):
        await self.broadcast({"type": "reports-list", "reports": reports})

    async def handle_client_message(self, websocket: WebSocket, message: Dict[str, Any]):
        """
        Relay client events:
        - report-submitted: forwarded to the other clients as new-report
        - report-expired: forwarded to everyone
        """
        event_type = message.get("type")
        if event_type == "report-submitted":
            report = message.get("report") or {}
            logger.info(f"New report submitted by client: {report.get('id')}")
            await self.broadcast_new_report(report, exclude=websocket)
        elif event_type == "report-expired":
            report_id = message.get("reportId")
            logger.info(f"Report expired (client notice): {report_id}")
            if report_id:
                await self.broadcast_report_expired(report_id)
        else:
            logger.debug(f"Ignoring WebSocket message type: {event_type}")


manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    return manager
