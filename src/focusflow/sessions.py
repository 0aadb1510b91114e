"""
Sessions REST API — the remote session store's CRUD, stats and quote endpoints.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from focusflow.errors import RemoteReadFailed, RemoteWriteFailed
from focusflow.models.quote import Quote
from focusflow.models.session import Session, SessionMode
from focusflow.models.stats import HealthStatus, RemoteStats, WeeklyReport
from focusflow.transport.http import HttpClient

logger = logging.getLogger(__name__)


def _parse(model: Any, data: Any, what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteReadFailed(f"Malformed {what} in response: {e.error_count()} error(s)") from e


class SessionsAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def health(self) -> HealthStatus:
        """GET /api/health"""
        return _parse(HealthStatus, await self._http.get("/health"), "health status")

    async def list(
        self,
        limit: int = 50,
        mode: Optional[SessionMode] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Session]:
        """GET /api/sessions — newest first."""
        params: dict[str, Any] = {"limit": limit}
        if mode:
            params["mode"] = SessionMode(mode).value
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()
        result = await self._http.get("/sessions", params=params)
        if not isinstance(result, dict) or not isinstance(result.get("sessions"), list):
            raise RemoteReadFailed("Unexpected response shape from GET /sessions")
        return [_parse(Session, s, "session") for s in result["sessions"]]

    async def get(self, session_id: str) -> Session:
        """GET /api/sessions/:id"""
        result = await self._http.get(f"/sessions/{session_id}")
        if not isinstance(result, dict):
            raise RemoteReadFailed(f"Unexpected response shape from GET /sessions/{session_id}")
        return _parse(Session, result.get("session"), "session")

    async def create(self, session: Session) -> Session:
        """POST /api/sessions — the server assigns the id.

        A 2xx reply whose `session` cannot be parsed still means the row was
        stored; the local record is returned so it is not submitted again.
        """
        result = await self._http.post("/sessions", session.to_wire(include_id=False))
        if not isinstance(result, dict):
            raise RemoteWriteFailed("Unexpected response shape from POST /sessions")
        try:
            return Session.model_validate(result.get("session"))
        except ValidationError as e:
            logger.warning("Unparseable acknowledgement for %s: %d error(s)", session.client_id, e.error_count())
            return session

    async def delete(self, session_id: str) -> None:
        """DELETE /api/sessions/:id"""
        await self._http.delete(f"/sessions/{session_id}")

    async def stats(self) -> RemoteStats:
        """GET /api/stats — server-side aggregate."""
        return _parse(RemoteStats, await self._http.get("/stats"), "stats")

    async def weekly(self) -> WeeklyReport:
        """GET /api/weekly — trailing seven days grouped by date."""
        return _parse(WeeklyReport, await self._http.get("/weekly"), "weekly report")

    async def quote(self) -> Quote:
        """GET /api/quote — `[{q, a}]` proxied from zenquotes."""
        result = await self._http.get("/quote")
        if not isinstance(result, list) or not result:
            raise RemoteReadFailed("Empty quote response")
        return _parse(Quote, result[0], "quote")
