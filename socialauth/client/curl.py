"""curl_cffi transport with system-account and OAuth 1.0a signing"""

import logging
from urllib.parse import urlencode

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession
from oauthlib.oauth1 import SIGNATURE_HMAC, Client

from ..core.exceptions import TransportError
from ..core.types import (
    HTTPResponse,
    OAuth1Signing,
    SignedRequest,
    SystemAccount,
    SystemAccountSigning,
)

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
BASE_HEADERS = {
    "Accept": "*/*",
    "accept-charset": "UTF-8",
}


class CurlTransport:
    """Performs signed requests with a fresh curl_cffi session per call"""

    def __init__(self, impersonate: str | None = "chrome", timeout: float | None = None):
        self.impersonate = impersonate
        self.timeout = timeout

    async def perform(self, request: SignedRequest) -> HTTPResponse:
        """Sign and send request, network failures raise TransportError"""
        method = request.method.upper()
        url, headers, body = self._sign(request)

        kwargs = {"headers": headers}
        if body is not None:
            kwargs["data"] = body
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            async with AsyncSession(impersonate=self.impersonate) as session:
                resp = await session.request(method, url, **kwargs)
        except CurlError as e:
            logger.warning(f"[Transport] {method} {request.url} failed: {e}")
            raise TransportError(code=int(getattr(e, "code", 0) or 0), message=str(e))

        logger.debug(f"[Transport] {method} {request.url} -> {resp.status_code}")
        return HTTPResponse(
            status_code=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
        )

    def _sign(self, request: SignedRequest) -> tuple[str, dict, str | None]:
        """Returns (url, headers, body) ready to send"""
        signing = request.signing
        if isinstance(signing, OAuth1Signing):
            return self._oauth1(
                request,
                signing.consumer_key,
                signing.consumer_secret,
                signing.token,
                signing.token_secret,
            )
        if isinstance(signing, SystemAccountSigning):
            return self._system_account(request, signing.account)
        return self._unsigned(request, dict(request.params))

    def _system_account(
        self, request: SignedRequest, account: SystemAccount
    ) -> tuple[str, dict, str | None]:
        credential = account.credential
        if credential is None or credential.oauth_token is None:
            raise TransportError(code=-1, message=f"Account {account.username} has no credential")

        if credential.oauth_token_secret is not None:
            # OAuth 1.0a account, the store signs with its own client identity
            return self._oauth1(
                request,
                credential.client_key or "",
                credential.client_secret or "",
                credential.oauth_token,
                credential.oauth_token_secret,
            )

        # OAuth 2 bearer account (Graph API style)
        params = dict(request.params)
        params["access_token"] = credential.oauth_token
        return self._unsigned(request, params)

    def _unsigned(self, request: SignedRequest, params: dict) -> tuple[str, dict, str | None]:
        headers = dict(BASE_HEADERS)
        if request.method.upper() in ("GET", "DELETE"):
            return _with_query(request.url, params), headers, None
        headers["Content-Type"] = FORM_CONTENT_TYPE
        return request.url, headers, urlencode(params)

    def _oauth1(
        self,
        request: SignedRequest,
        consumer_key: str,
        consumer_secret: str,
        token: str | None,
        token_secret: str | None,
    ) -> tuple[str, dict, str | None]:
        client = Client(
            consumer_key,
            client_secret=consumer_secret,
            resource_owner_key=token,
            resource_owner_secret=token_secret,
            signature_method=SIGNATURE_HMAC,
        )
        method = request.method.upper()
        if method in ("GET", "DELETE"):
            uri, headers, _ = client.sign(
                _with_query(request.url, request.params), http_method=method
            )
            return uri, {**BASE_HEADERS, **headers}, None

        uri, headers, body = client.sign(
            request.url,
            http_method=method,
            body=urlencode(request.params),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        return uri, {**BASE_HEADERS, **headers}, body


def _with_query(url: str, params: dict) -> str:
    if not params:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urlencode(params)}"
