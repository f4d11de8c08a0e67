"""Gmail REST API (users/me/messages): read-only access with an OAuth token."""
from __future__ import annotations

import requests

from careerdesk.config import DEFAULT_GMAIL_API_BASE, get_env, http_timeout
from careerdesk.errors import UpstreamServiceError
from careerdesk.log import get_logger
from careerdesk.mail.base import MailClient

log = get_logger(__name__)


class GmailClient(MailClient):
    def __init__(
        self,
        access_token: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base = (base_url or get_env("GMAIL_API_BASE") or DEFAULT_GMAIL_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else http_timeout()
        self._owns_session = session is None
        self.http = session or requests.Session()
        self.http.headers["Authorization"] = f"Bearer {access_token}"

    def _get(self, path: str, params: dict | None = None) -> dict:
        url = f"{self.base}/users/me/{path}"
        try:
            r = self.http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamServiceError(f"Gmail request failed: {exc}") from exc
        if not r.ok:
            log.error("Gmail API error %d: %s", r.status_code, r.text[:300])
            raise UpstreamServiceError(f"Gmail API returned {r.status_code}")
        return r.json()

    def search(self, query: str, max_results: int = 50) -> list[str]:
        data = self._get("messages", params={"q": query, "maxResults": max_results})
        return [m["id"] for m in data.get("messages") or [] if m.get("id")]

    def get_message(self, message_id: str) -> dict:
        return self._get(f"messages/{message_id}")

    def close(self) -> None:
        if self._owns_session:
            self.http.close()
