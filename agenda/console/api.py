import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter

from agenda.console.models import ClientRecord, VisitRecord

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:3001/api"

RecordT = TypeVar("RecordT", bound=BaseModel)


class APIRequestError(Exception):
    """The service answered with a non-2xx status."""

    def __init__(self, method: str, path: str, status_code: int, reason: str):
        super().__init__(f"API failure: {status_code} {reason}".strip())
        self.method = method
        self.path = path
        self.status_code = status_code
        self.reason = reason


class ResponseFormatError(ValueError):
    def __init__(self, path: str):
        super().__init__(f"API response for {path} is not in the expected format.")
        self.path = path


# Everything a call can fail with: transport, HTTP status, JSON or schema
API_ERRORS = (httpx.HTTPError, APIRequestError, ValueError)


class RecordsAPI:
    """Thin async wrapper over the record service's HTTP endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self) -> "RecordsAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Response:
        response = await self._client.request(method, path, json=payload)
        if response.is_error:
            logger.debug("%s %s failed with %s", method, path, response.status_code)
            raise APIRequestError(method, path, response.status_code, response.reason_phrase)
        return response

    async def _list(self, path: str, record_type: Type[RecordT]) -> List[RecordT]:
        data = (await self._request("GET", path)).json()
        if not isinstance(data, list):
            raise ResponseFormatError(path)
        return TypeAdapter(List[record_type]).validate_python(data)

    async def list_clients(self) -> List[ClientRecord]:
        return await self._list("/clients", ClientRecord)

    async def list_visits(self) -> List[VisitRecord]:
        return await self._list("/visits", VisitRecord)

    async def create_client(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._request("POST", "/clients", payload)).json()

    async def update_client(self, client_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._request("PUT", f"/clients/{client_id}", payload)).json()

    async def delete_client(self, client_id: int) -> None:
        await self._request("DELETE", f"/clients/{client_id}")

    async def create_visit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._request("POST", "/visits", payload)).json()

    async def update_visit(self, visit_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._request("PUT", f"/visits/{visit_id}", payload)).json()

    async def delete_visit(self, visit_id: int) -> None:
        await self._request("DELETE", f"/visits/{visit_id}")
