"""
Mock provider for exercising xrpc-console without a network or an account.
Any identifier/password pair logs in; canned responses are returned per method.
"""

import json
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from base_classes import AuthenticationFailure, Credential, TransportResponse, XrpcProvider


class MockProvider(XrpcProvider):
    """
    A mock provider that answers from a table of canned responses.
    """

    def __init__(self, responses: Optional[Dict[str, TransportResponse]] = None, reject_password: Optional[str] = None):
        self.responses = dict(responses or {})
        self.reject_password = reject_password
        self.calls: List[Tuple[str, Optional[str], str]] = []
        self.session_count = 0

    def create_session(self, identifier: str, password: str) -> Credential:
        if not identifier or not password or password == self.reject_password:
            raise AuthenticationFailure("Invalid identifier or password", reason='credentials', status=401)
        self.session_count += 1
        return Credential(access_token=f"mock-access-{self.session_count}", refresh_token=f"mock-refresh-{self.session_count}")

    def refresh_session(self, refresh_token: str) -> Credential:
        if not refresh_token.startswith("mock-refresh-"):
            raise AuthenticationFailure("Token could not be verified", reason='credentials', status=400)
        self.session_count += 1
        return Credential(access_token=f"mock-access-{self.session_count}", refresh_token=f"mock-refresh-{self.session_count}")

    def get(self, url: str, token: Optional[str] = None, accept: str = "application/json") -> TransportResponse:
        """Look the method up from the URL path; unknown methods echo the request."""
        self.calls.append((url, token, accept))
        parts = urlsplit(url)
        method = parts.path.rsplit('/', 1)[-1]
        if method in self.responses:
            return self.responses[method]
        body = {
            'mock': True,
            'method': method,
            'query': parts.query,
            'authenticated': bool(token),
        }
        return TransportResponse(status=200, body=json.dumps(body), content_type='application/json')
