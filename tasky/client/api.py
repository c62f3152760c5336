# tasky/client/api.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from .token_store import TokenStore, MemoryTokenStore

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Ошибка вызова API: ответ не 2xx или сбой транспорта (status_code=None)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """
    Тонкая обертка над httpx для REST API Tasky.

    Если в token_store есть токен, он уходит в заголовке Authorization
    с каждым запросом.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        http: Optional[httpx.Client] = None,
    ):
        if http is None:
            if not base_url:
                raise ValueError("base_url or http client is required")
            http = httpx.Client(base_url=base_url)
        self.http = http
        self.token_store = token_store or MemoryTokenStore()

    @property
    def base_url(self) -> str:
        return str(self.http.base_url).rstrip("/")

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = token or self.token_store.load()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Any:
        try:
            response = self.http.request(method, path, json=json, params=params, headers=self._headers(token))
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(str(e) or "Network error") from e

        if response.is_success:
            return response.json() if response.content else None

        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        logger.info(f"{method} {path} -> {response.status_code}")
        raise ApiError(message or f"Request failed with status {response.status_code}", response.status_code)

    # --- Auth ---

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self.request("POST", "/auth/register", json={"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.request("POST", "/auth/login", json={"email": email, "password": password})

    def profile(self, token: Optional[str] = None) -> Dict[str, Any]:
        return self.request("GET", "/auth/profile", token=token)

    def logout(self) -> None:
        self.request("POST", "/auth/logout")

    def google_auth_url(self) -> str:
        return f"{self.base_url}/auth/google"

    # --- Tasks ---

    def list_tasks(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = {k: v for k, v in (filters or {}).items() if k in ("status", "priority") and v}
        return self.request("GET", "/tasks", params=params or None)

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/tasks/{task_id}")

    def create_task(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/tasks", json=fields)

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/tasks/{task_id}", json=fields)

    def delete_task(self, task_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/tasks/{task_id}")

    def close(self) -> None:
        self.http.close()
