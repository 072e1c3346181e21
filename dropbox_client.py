"""Dropbox HTTP API v2 client with bearer authentication and error mapping."""

import json
import logging
import time
from typing import Any, Dict, Optional

import requests
import urllib3

from config_loader import get_nested

logger = logging.getLogger('paper_markdown_exporter.client')

API_BASE_URL = 'https://api.dropboxapi.com/2'
CONTENT_BASE_URL = 'https://content.dropboxapi.com/2'


class DropboxApiError(Exception):
    """Error returned by the Dropbox API or raised while talking to it."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_summary: Optional[str] = None,
        error: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_summary = error_summary
        self.error = error or {}

    @property
    def summary(self) -> str:
        """Human-readable summary, preferring the provider's own."""
        return self.error_summary or str(self)

    @property
    def is_not_found(self) -> bool:
        """True when the provider tagged the error as ``path/not_found``."""
        path_error = self.error.get('path')
        return isinstance(path_error, dict) and path_error.get('.tag') == 'not_found'


class AuthenticationError(DropboxApiError):
    """The access token is missing, malformed, expired or revoked."""
    pass


class DropboxClient:
    """Minimal Dropbox API client covering account, listing and export calls."""

    def __init__(
        self,
        access_token: str,
        timeout: int = 30,
        verify_ssl: bool = True,
        api_base_url: str = API_BASE_URL,
        content_base_url: str = CONTENT_BASE_URL
    ):
        """
        Initialize Dropbox client with bearer authentication.

        Args:
            access_token: Dropbox OAuth2 access token
            timeout: HTTP request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            api_base_url: Base URL for RPC endpoints
            content_base_url: Base URL for content-download endpoints
        """
        if not access_token:
            raise AuthenticationError("An access token is required")

        self.timeout = timeout
        self.api_base_url = api_base_url.rstrip('/')
        self.content_base_url = content_base_url.rstrip('/')

        self.session = requests.Session()
        self.session.headers['Authorization'] = f'Bearer {access_token}'

        self.session.verify = verify_ssl
        if not verify_ssl:
            logger.warning("SSL verification disabled - this is insecure!")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.debug(f"Client configured with timeout={timeout}s")

    def _make_request(
        self,
        base_url: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        api_arg: Optional[Dict[str, Any]] = None
    ) -> requests.Response:
        """
        POST to a Dropbox endpoint and map failures onto DropboxApiError.

        RPC endpoints take ``payload`` as the JSON body; content endpoints take
        ``api_arg`` in the ``Dropbox-API-Arg`` header and return the file as
        the response body.

        Raises:
            AuthenticationError: For HTTP 401
            DropboxApiError: For any other non-2xx response or transport error
        """
        url = f"{base_url}/{endpoint.lstrip('/')}"
        headers = {}
        if api_arg is not None:
            headers['Dropbox-API-Arg'] = json.dumps(api_arg)

        start_time = time.time()
        logger.debug(f"API Request: POST {url}")

        try:
            if payload is not None:
                response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
            else:
                response = self.session.post(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout after {self.timeout}s: POST {url}")
            raise DropboxApiError(f"Request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: POST {url} - {str(e)}")
            raise DropboxApiError(f"Request failed: {str(e)}") from e

        elapsed = time.time() - start_time
        logger.debug(f"API Response: {response.status_code} {url} ({elapsed:.3f}s)")

        if response.ok:
            return response

        error_summary = None
        error = None
        try:
            error_json = response.json()
            if isinstance(error_json, dict):
                error_summary = error_json.get('error_summary')
                error = error_json.get('error')
        except ValueError:
            # Dropbox answers malformed requests (HTTP 400) with plain text
            error_summary = response.text[:500].strip() or None

        message = f"HTTP {response.status_code} from {endpoint}"
        logger.error(f"HTTP Error {response.status_code}: POST {url} - {error_summary or 'no details'}")

        error_class = AuthenticationError if response.status_code == 401 else DropboxApiError
        raise error_class(
            message,
            status_code=response.status_code,
            error_summary=error_summary,
            error=error if isinstance(error, dict) else None
        )

    def _json_body(self, response: requests.Response, endpoint: str) -> Dict[str, Any]:
        """Decode a successful RPC response, which must be a JSON object."""
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON in response from {endpoint}: {response.text[:200]!r}")
            raise DropboxApiError(
                f"Invalid JSON response from {endpoint}",
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            raise DropboxApiError(
                f"Unexpected response from {endpoint}: expected a JSON object",
                status_code=response.status_code
            )
        return data

    def get_current_account(self) -> Dict[str, Any]:

        """
        Fetch the account owning the token.

        Used as a cheap identity check before a long run.

        Returns:
            Account dictionary (``account_id``, ``name``, ``email``...)
        """
        response = self._make_request(self.api_base_url, '/users/get_current_account')
        account = self._json_body(response, '/users/get_current_account')
        display_name = account.get('name', {}).get('display_name')
        logger.info(f"Authenticated as {display_name or account.get('account_id', 'unknown account')}")
        return account

    def list_folder(self, path: str = '', recursive: bool = True) -> Dict[str, Any]:
        """
        List the first page of a folder.

        Args:
            path: Folder path, ``''`` for the account root
            recursive: Include every descendant

        Returns:
            Page dictionary with ``entries``, ``cursor`` and ``has_more``
        """
        response = self._make_request(
            self.api_base_url,
            '/files/list_folder',
            payload={'path': path, 'recursive': recursive}
        )
        return self._json_body(response, '/files/list_folder')

    def list_folder_continue(self, cursor: str) -> Dict[str, Any]:
        """Fetch the next listing page for a cursor."""
        response = self._make_request(
            self.api_base_url,
            '/files/list_folder/continue',
            payload={'cursor': cursor}
        )
        return self._json_body(response, '/files/list_folder/continue')

    def export_file(self, path: str, export_format: str = 'markdown') -> str:
        """
        Export a non-downloadable file (such as a Paper doc) as text.

        Args:
            path: Dropbox path of the document
            export_format: Export format understood by the provider

        Returns:
            The exported document decoded as UTF-8
        """
        response = self._make_request(
            self.content_base_url,
            '/files/export',
            api_arg={'path': path, 'export_format': export_format}
        )

        result_header = response.headers.get('Dropbox-API-Result')
        if result_header:
            logger.debug(f"Export result for {path}: {result_header}")

        return response.content.decode('utf-8')

    def close(self) -> None:
        self.session.close()

    @classmethod
    def from_config(cls, config: Dict[str, Any], access_token: str) -> 'DropboxClient':
        """
        Initialize Dropbox client from configuration dictionary.

        Args:
            config: Configuration dictionary with advanced settings
            access_token: Token supplied by the user

        Returns:
            DropboxClient instance
        """
        return cls(
            access_token=access_token,
            timeout=get_nested(config, 'advanced.request_timeout', 30),
            verify_ssl=get_nested(config, 'advanced.verify_ssl', True)
        )


__all__ = ['AuthenticationError', 'DropboxApiError', 'DropboxClient']
