import logging
from typing import Any, Optional

import requests

from storefront.config import settings
from storefront.errors import ApiError, StorageUnavailable
from storefront.utils.client_storage import ClientStorage
from storefront.utils.token import TOKEN_KEY, clear_tokens

logger = logging.getLogger(__name__)


class StoreApiClient:
    """
    JSON client for the storefront backend.

    Sends the stored user token as a bearer token. The backend sometimes
    reports failures as ``{"success": false, "message": ...}`` with a 200
    status; those bodies are returned as-is and callers must check them.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        storage: Optional[ClientStorage] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.storage = storage
        self.timeout = timeout or settings.API_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.storage is None:
            return headers

        try:
            token = self.storage.get_item(TOKEN_KEY)
        except StorageUnavailable:
            token = None

        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError("Could not reach the store. Check your connection and try again.") from e

        if response.status_code == 401 and self.storage is not None:
            logger.warning(f"{method} {url} unauthorized, clearing stored tokens")
            try:
                clear_tokens(self.storage)
            except StorageUnavailable:
                logger.exception("Could not clear stored tokens")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = None
            if isinstance(body, dict):
                message = body.get("message")
            logger.error(f"{method} {url} returned {response.status_code}: {message or response.text}")
            raise ApiError(message or f"Request failed ({response.status_code})", response.status_code)

        if not isinstance(body, dict):
            raise ApiError("Unexpected response from the store", response.status_code)

        return body

    def get(self, path: str, params: Optional[dict] = None) -> dict:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> dict:
        return self.request("POST", path, json=json)

    def delete(self, path: str) -> dict:
        return self.request("DELETE", path)


def is_failure(body: dict) -> bool:
    return body.get("success") is False
