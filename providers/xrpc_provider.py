"""
HTTP provider for AT Protocol XRPC endpoints (requests based).

Only the pieces the console core consumes are implemented: password login
(``com.atproto.server.createSession``), token refresh
(``com.atproto.server.refreshSession``) and authenticated GETs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from base_classes import AuthenticationFailure, Credential, RequestFailed, TransportResponse, XrpcProvider

CREATE_SESSION = "com.atproto.server.createSession"
REFRESH_SESSION = "com.atproto.server.refreshSession"
DEFAULT_TIMEOUT = 10.0


class HttpXrpcProvider(XrpcProvider):
    def __init__(self, host: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.host = host.rstrip('/')
        self.timeout = timeout
        self.http = session or requests.Session()

    def _endpoint(self, method: str) -> str:
        return f"{self.host}/xrpc/{method}"

    # --- Auth -----------------------------------------------------------
    def create_session(self, identifier: str, password: str) -> Credential:
        return self._session_call(
            CREATE_SESSION,
            json={'identifier': identifier, 'password': password},
            headers={'Accept': 'application/json'},
        )

    def refresh_session(self, refresh_token: str) -> Credential:
        return self._session_call(
            REFRESH_SESSION,
            headers={'Accept': 'application/json', 'Authorization': f'Bearer {refresh_token}'},
        )

    def _session_call(self, method: str, json: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Credential:
        try:
            response = self.http.post(self._endpoint(method), json=json, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AuthenticationFailure(str(e), reason='transport')

        if response.status_code >= 400:
            raise AuthenticationFailure(
                self._error_message(response),
                reason='credentials' if response.status_code in (400, 401, 403) else 'transport',
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AuthenticationFailure(f"Invalid response: {e}", reason='response', status=response.status_code)

        access = data.get('accessJwt') if isinstance(data, dict) else None
        refresh = data.get('refreshJwt') if isinstance(data, dict) else None
        if not access or not refresh:
            raise AuthenticationFailure("Invalid response: missing session tokens", reason='response', status=response.status_code)
        return Credential(access_token=access, refresh_token=refresh)

    @staticmethod
    def _error_message(response) -> str:
        """Prefer the XRPC error envelope ({"error", "message"}) over the raw body."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get('message') or data.get('error')
            if message:
                return str(message)
        return f"HTTP {response.status_code}: {response.text}"

    # --- Transport ------------------------------------------------------
    def get(self, url: str, token: Optional[str] = None, accept: str = "application/json") -> TransportResponse:
        headers = {'Accept': accept}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        try:
            response = self.http.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RequestFailed.from_transport(str(e))
        return TransportResponse(
            status=response.status_code,
            body=response.text,
            content_type=response.headers.get('Content-Type', ''),
        )
