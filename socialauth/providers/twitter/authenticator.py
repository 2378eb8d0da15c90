"""Twitter authenticator using reverse auth with a system Twitter account"""

import asyncio
import logging

from ...account_store.base import AccountStore
from ...auth.base import BaseAuthenticator
from ...auth.delegate import TwitterDelegate
from ...client.base import SignedRequestTransport
from ...core.exceptions import ProblemDetected
from ...core.types import (
    AccountType,
    HTTPResponse,
    OAuth1Signing,
    Problem,
    SignedRequest,
    SystemAccount,
    SystemAccountSigning,
    TwitterConsumer,
    TwitterCredentials,
)
from .parser import parse_access_token, parse_verified_user

logger = logging.getLogger(__name__)

TWITTER_HOST = "api.twitter.com"
REQUEST_TOKEN_URL = f"https://{TWITTER_HOST}/oauth/request_token"
ACCESS_TOKEN_URL = f"https://{TWITTER_HOST}/oauth/access_token"
VERIFY_CREDENTIALS_URL = f"https://{TWITTER_HOST}/1.1/account/verify_credentials.json"
VERIFY_CREDENTIALS_PARAMS = {
    "include_email": "true",
    "include_entities": "true",
    "skip_status": "false",
}

# Banned accounts get a large HTML page instead of the short token query string.
# Not part of the API contract, observed behaviour only.
BANNED_RESPONSE_THRESHOLD = 3000


class TwitterAuthenticator(BaseAuthenticator):
    """Authenticates with one of the Twitter accounts registered in the system

    Runs the reverse auth exchange (request_token, then access_token through the
    system account) and verifies the obtained user token. ``run`` can only be
    called once per instance.
    """

    account_type = AccountType.TWITTER

    def __init__(
        self,
        consumer: TwitterConsumer | None,
        delegate: TwitterDelegate,
        account_store: AccountStore,
        transport: SignedRequestTransport,
        delegate_loop: asyncio.AbstractEventLoop | None = None,
    ):
        super().__init__(delegate, account_store, transport, delegate_loop)
        self.consumer = consumer
        self.chosen_account: SystemAccount | None = None

    async def _perform(self) -> TwitterCredentials:
        if self.consumer is None or not self.consumer.key or not self.consumer.secret:
            raise ProblemDetected(Problem.unconfigured(self.account_type))

        accounts = await self._require_accounts()
        account = await self._select_account(accounts)

        reverse_token = await self._request_reverse_auth_token()
        key, secret = await self._exchange_access_token(account, reverse_token)
        return await self._verify_credentials(key, secret)

    async def _select_account(self, accounts: list[SystemAccount]) -> SystemAccount:
        usernames = [a.username for a in accounts]
        choice = await self._dispatch(self.delegate.select_account, usernames)
        if choice is None:
            raise ProblemDetected(Problem.user_cancelled(self.account_type))

        for account in accounts:
            if account.username == choice:
                self.chosen_account = account
                return account

        raise ProblemDetected(
            Problem.account_store_failure(
                self.account_type, "User selected non existing account username."
            )
        )

    def _check_response(self, response: HTTPResponse) -> bytes:
        """Body of a successful response, raises for anything else"""
        if response.body is None:
            raise self._provider_failure("No data and no error.")
        if response.status_code is None:
            raise self._provider_failure("No http status code received.")
        if not response.ok:
            message = f"Twitter server returned status code: {response.status_code}"
            text = response.text()
            if text is not None:
                message += " Message: " + text
            raise self._provider_failure(message)
        return response.body

    async def _request_reverse_auth_token(self) -> str:
        """Step 1: consumer-signed request_token in reverse_auth mode"""
        request = SignedRequest(
            method="POST",
            url=REQUEST_TOKEN_URL,
            params={"x_auth_mode": "reverse_auth"},
            signing=OAuth1Signing(self.consumer.key, self.consumer.secret),
        )
        body = self._check_response(await self._send(request))
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError:
            raise self._provider_failure("Reverse auth response malformed. (not utf-8)")

    async def _exchange_access_token(
        self, account: SystemAccount, reverse_token: str
    ) -> tuple[str, str]:
        """Step 2: exchange the reverse auth blob through the system account"""
        if account.oauth_token is None:
            logger.error(f"[Twitter] System account {account.username} has no credential")
            raise ProblemDetected(
                Problem.account_store_failure(
                    self.account_type, f"System account {account.username} has no credential."
                )
            )

        request = SignedRequest(
            method="POST",
            url=ACCESS_TOKEN_URL,
            params={
                "x_reverse_auth_parameters": reverse_token,
                "x_reverse_auth_target": self.consumer.key,
            },
            signing=SystemAccountSigning(account),
        )
        body = self._check_response(await self._send(request))

        if len(body) > BANNED_RESPONSE_THRESHOLD:
            logger.warning(
                f"[Twitter] access_token response of {len(body)} bytes, account looks banned"
            )
            raise ProblemDetected(Problem.account_needs_reauth(self.account_type))

        try:
            query = body.decode("utf-8")
        except UnicodeDecodeError:
            raise self._provider_failure("Reverse auth signature malformed. (not utf-8)")

        token = parse_access_token(query)
        if token is None:
            raise self._provider_failure(
                "Twitter credential query string does not contain the requested data."
            )
        return token

    async def _verify_credentials(self, key: str, secret: str) -> TwitterCredentials:
        """Step 3: fetch the profile with the new user token"""
        request = SignedRequest(
            method="GET",
            url=VERIFY_CREDENTIALS_URL,
            params=dict(VERIFY_CREDENTIALS_PARAMS),
            signing=OAuth1Signing(
                self.consumer.key, self.consumer.secret, token=key, token_secret=secret
            ),
        )
        body = self._check_response(await self._send(request))

        data = self.parse_json(body)
        if data is None:
            raise self._provider_failure("JSON response not parsable.")

        user = parse_verified_user(data)
        if user is None:
            raise self._provider_failure(
                "Twitter verify credentials response does not contain the requested data."
            )

        return TwitterCredentials(key=key, secret=secret, **user)
