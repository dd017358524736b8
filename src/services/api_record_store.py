"""RecordStore over the records HTTP API"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from src.config import settings
from src.errors import RecordNotFoundError, RemoteError
from src.models.decimal_wire import decimal_to_wire
from src.services.record_store import RecordStore, Row

logger = logging.getLogger(__name__)


def _to_wire(row: Row) -> Dict[str, Any]:
    """JSON-safe copy of a row; Decimal amounts travel as plain strings"""
    return {
        key: decimal_to_wire(value) if isinstance(value, Decimal) else value
        for key, value in row.items()
    }


class ApiRecordStore(RecordStore):
    """Talks to ``api.main`` with requests; calls run in a worker thread"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.API_TIMEOUT_SECONDS

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/api{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise RemoteError(str(e)) from e

        if response.status_code == 404:
            raise RecordNotFoundError(self._error_message(response))
        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise RemoteError(message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        return str(detail) if detail else f"HTTP {response.status_code}: {response.text[:200]}"

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def insert(self, row: Row) -> str:
        data = await self._call("POST", "/records", json=_to_wire(row))
        return str(data["id"])

    async def update(self, record_id: str, partial: Row) -> None:
        await self._call("PATCH", f"/records/{record_id}", json=_to_wire(partial))

    async def list(self) -> List[Row]:
        data = await self._call("GET", "/records")
        return data.get("records", [])

    async def get(self, record_id: str) -> Optional[Row]:
        try:
            return await self._call("GET", f"/records/{record_id}")
        except RecordNotFoundError:
            return None

    async def delete(self, record_id: str) -> None:
        await self._call("DELETE", f"/records/{record_id}")

    async def upload_binary(self, content: bytes, name: str) -> str:
        data: Dict[str, Any] = await self._call(
            "POST",
            "/storage/images",
            files={"file": (name, content, "application/octet-stream")},
        )
        return data["public_url"]
