"""Read-only Google Sheets v4 client used by the refresh cycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from errors import ApiInitError, FetchError
from models.records import SheetMetadata
from services.range_estimator import RowRange, full_columns_range
from settings import Settings

logger = logging.getLogger(__name__)

# The key never goes in the URL: httpx logs request URLs at INFO.
API_KEY_HEADER = "X-Goog-Api-Key"
_DEFAULT_VALUES_GET_PATH = "v4/spreadsheets/{spreadsheetId}/values/{range}"


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return response.text.strip()


def _init_error_message(response: httpx.Response) -> str:
    if response.status_code == 403:
        return (
            "API Error 403 (Forbidden): Your API key may not have Google Sheets API "
            "enabled, or there may be restrictions. Check Google Cloud Console."
        )
    if response.status_code == 400:
        return "API Error 400 (Bad Request): Invalid API key format or configuration."
    detail = _error_detail(response) or "no detail provided."
    return f"Failed to initialize Google API: status {response.status_code}: {detail}"


def _values_get_path(document: Dict[str, Any]) -> str:
    try:
        method = document["resources"]["spreadsheets"]["resources"]["values"]["methods"]["get"]
    except (KeyError, TypeError):
        return _DEFAULT_VALUES_GET_PATH
    path = method.get("path") if isinstance(method, dict) else None
    return path if isinstance(path, str) and path else _DEFAULT_VALUES_GET_PATH


def _extract_values(payload: Any) -> List[List[str]]:
    if not isinstance(payload, dict):
        raise FetchError("Unexpected response payload from Sheets API.")
    values = payload.get("values")
    if values is None:
        return []
    if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
        raise FetchError("Sheets API returned malformed 'values' data.")
    return [[cell if isinstance(cell, str) else str(cell) for cell in row] for row in values]


class SheetsClient:
    """Minimal async client for ``spreadsheets.values.get``."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.request_timeout,
            transport=transport,
            headers={API_KEY_HEADER: settings.api_key},
        )
        self._values_url_template: Optional[str] = None

    @property
    def initialized(self) -> bool:
        return self._values_url_template is not None

    @property
    def sheet_name(self) -> str:
        return self._settings.sheet_name

    async def aclose(self) -> None:
        await self._client.aclose()

    async def initialize(self) -> None:
        """Load the discovery document and resolve the values endpoint."""
        if self.initialized:
            return

        last_error: Optional[ApiInitError] = None
        for url in self._settings.discovery_docs:
            try:
                document = await self._load_discovery_document(url)
            except ApiInitError as exc:
                logger.warning("Discovery document unavailable: %s", exc)
                last_error = exc
                continue

            root_url = document.get("rootUrl")
            if not isinstance(root_url, str) or not root_url:
                last_error = ApiInitError(f"Discovery document {url} does not declare a rootUrl.")
                continue
            service_path = document.get("servicePath") or ""
            if not isinstance(service_path, str):
                last_error = ApiInitError(f"Discovery document {url} has an invalid servicePath.")
                continue
            self._values_url_template = root_url + service_path + _values_get_path(document)
            logger.info("Sheets API client initialized from %s", url)
            return

        raise last_error or ApiInitError("No discovery documents configured.")

    async def get_values(self, a1_range: str) -> List[List[str]]:
        """Read ``a1_range`` and return its rows; a blank range yields ``[]``."""
        url = self._values_url(a1_range)
        timeout = self._settings.request_timeout
        try:
            response = await asyncio.wait_for(
                self._client.get(url),
                timeout=timeout,
            )
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FetchError(f"Request for {a1_range} timed out after {timeout:g}s.") from exc
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response) or "no detail provided."
            raise FetchError(
                f"Request failed with status {exc.response.status_code}: {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("Sheets API returned a response that is not valid JSON.") from exc
        return _extract_values(payload)

    async def fetch_metadata(self) -> SheetMetadata:
        """Probe every row of the data columns to learn how many rows exist."""
        sheet_range = full_columns_range(self.sheet_name)
        try:
            rows = await self.get_values(sheet_range)
        except FetchError as exc:
            raise FetchError(f"Failed to fetch sheet metadata: {exc}") from exc
        metadata = SheetMetadata.from_row_count(len(rows))
        logger.debug(
            "Fetched sheet metadata",
            extra={"sheet_range": sheet_range, "total_rows": metadata.total_rows},
        )
        return metadata

    async def fetch_range(self, row_range: RowRange) -> List[List[str]]:
        if row_range.is_empty:
            return []
        sheet_range = row_range.to_a1(self.sheet_name)
        rows = await self.get_values(sheet_range)
        logger.info("Fetched sheet rows", extra={"sheet_range": sheet_range, "row_count": len(rows)})
        return rows

    async def _load_discovery_document(self, url: str) -> Dict[str, Any]:
        try:
            response = await asyncio.wait_for(
                self._client.get(url),
                timeout=self._settings.request_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ApiInitError(f"Timed out loading discovery document {url}.") from exc
        except httpx.HTTPError as exc:
            raise ApiInitError(f"Failed to initialize Google API: {exc}") from exc

        if response.is_error:
            raise ApiInitError(_init_error_message(response))
        try:
            document = response.json()
        except ValueError as exc:
            raise ApiInitError(f"Discovery document {url} is not valid JSON.") from exc
        if not isinstance(document, dict):
            raise ApiInitError(f"Discovery document {url} has an unexpected shape.")
        return document

    def _values_url(self, a1_range: str) -> str:
        template = self._values_url_template
        if template is None:
            raise ApiInitError("Sheets API client has not been initialized.")
        return template.replace(
            "{spreadsheetId}", quote(self._settings.sheet_id, safe="")
        ).replace("{range}", quote(a1_range, safe=""))
