"""Signed request transport protocol"""

from typing import Protocol

from ..core.types import HTTPResponse, SignedRequest


class SignedRequestTransport(Protocol):
    """Protocol for performing signed HTTP requests"""

    async def perform(self, request: SignedRequest) -> HTTPResponse:
        """
        Sign and send the request. Raises TransportError on network failure,
        non-2xx statuses are returned, not raised.
        """
        ...
