"""
HTTP client for the tracked attachments API.

Every call goes through ``_request``, which maps transport failures to
NetworkError and error envelopes (``{"success": false, "message": ...}``)
to RemoteError subclasses.
"""

from typing import Any, Dict, List, Optional

import requests

from config.settings import ConfigManager, get_config
from core.data.models import TrackedAttachment
from core.utils.exceptions import (
    NetworkError, NetworkTimeoutError, NotFoundError, RemoteError, ValidationError
)
from core.utils.logger import get_module_logger

logger = get_module_logger(__name__)

VALIDATION_STATUS_CODES = (400, 409, 422)


class TrackedAttachmentsAPI:
    """CRUD client for ``{base_url}/{resource}``."""

    def __init__(
        self,
        base_url: str,
        resource: str = "attachments",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. https://admin.example.com/api
            resource: Collection path below the root
            api_key: Sent as a bearer token when set
            timeout: Socket timeout in seconds for every request
            verify_ssl: Verify TLS certificates
            session: Preconfigured session, mainly for tests
        """
        self.base_url = base_url.rstrip('/')
        self.resource = resource.strip('/')
        self.timeout = timeout
        self.verify_ssl = verify_ssl

        self._session = session or requests.Session()
        self._session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        })
        if api_key:
            self._session.headers['Authorization'] = f"Bearer {api_key}"

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None, **kwargs) -> 'TrackedAttachmentsAPI':
        """Build a client from the ``api`` configuration section."""
        config = config or get_config()
        return cls(
            base_url=config.get('api.base_url'),
            resource=config.get('api.resource', 'attachments'),
            api_key=config.get('api.api_key') or None,
            timeout=float(config.get('api.timeout', 30.0)),
            verify_ssl=bool(config.get('api.verify_ssl', True)),
            **kwargs
        )

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/{self.resource}"

    def item_url(self, attachment_id: int) -> str:
        return f"{self.collection_url}/{attachment_id}"

    def close(self) -> None:
        self._session.close()

    def list(self) -> List[TrackedAttachment]:
        """GET the full collection."""
        url = self.collection_url
        data = self._request('GET', url)
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteError(f"Expected a list of tracked attachments from {url}")
        return [self._parse(item, url) for item in data]

    def get(self, attachment_id: int) -> TrackedAttachment:
        """GET a single attachment."""
        url = self.item_url(attachment_id)
        return self._parse(self._request('GET', url), url)

    def create(self, attachment: TrackedAttachment) -> TrackedAttachment:
        """POST a new attachment; the response carries the assigned id."""
        payload = attachment.to_dict()
        payload.pop('id', None)
        return self._parse(self._request('POST', self.collection_url, payload), self.collection_url)

    def update(self, attachment: TrackedAttachment) -> TrackedAttachment:
        """PUT every field of an existing attachment."""
        url = self.item_url(attachment.id)
        data = self._request('PUT', url, attachment.to_dict())
        return self._parse(data, url) if isinstance(data, dict) else attachment

    def delete(self, attachment_id: int) -> str:
        """DELETE an attachment, returning the server's confirmation message."""
        data = self._request('DELETE', self.item_url(attachment_id))
        if isinstance(data, dict):
            return data.get('message', '')
        return ''

    @staticmethod
    def _parse(item: Any, url: str) -> TrackedAttachment:
        if not isinstance(item, dict):
            raise RemoteError(f"Malformed tracked attachment in response from {url}")
        try:
            return TrackedAttachment.from_dict(item)
        except (AttributeError, TypeError, ValueError) as e:
            raise RemoteError(f"Malformed tracked attachment in response from {url}: {e}", original_exception=e)

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("API request", method=method, url=url)
        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkTimeoutError(
                f"Request to {url} timed out", timeout=self.timeout, original_exception=e
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach the API: {e}", url=url, original_exception=e)

        if not response.ok:
            self._raise_for_envelope(method, url, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"Invalid JSON in response from {url}", status_code=response.status_code, original_exception=e
            )

    def _raise_for_envelope(self, method: str, url: str, response: requests.Response) -> None:
        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get('message')
        except ValueError:
            pass
        message = message or response.reason or f"HTTP {response.status_code}"
        status = response.status_code

        logger.warning("API error", method=method, url=url, status=status, message=message)

        if status == 404:
            raise NotFoundError(message, status_code=status)
        if status in VALIDATION_STATUS_CODES:
            raise ValidationError(message, status_code=status)
        raise RemoteError(message, status_code=status)
