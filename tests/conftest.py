"""Shared fakes for authenticator tests"""

import json

import pytest

from socialauth.account_store.memory import InMemoryAccountStore
from socialauth.core.exceptions import TransportError
from socialauth.core.types import (
    AccountCredential,
    AccountType,
    FacebookConsumer,
    HTTPResponse,
    SignedRequest,
    SystemAccount,
    TwitterConsumer,
)


def json_response(data: dict, status_code: int = 200) -> HTTPResponse:
    return HTTPResponse(status_code=status_code, body=json.dumps(data).encode("utf-8"))


def text_response(text: str, status_code: int = 200) -> HTTPResponse:
    return HTTPResponse(status_code=status_code, body=text.encode("utf-8"))


class FakeTransport:
    """Replays scripted responses (or TransportErrors) per URL in order"""

    def __init__(self):
        self.scripts: dict[str, list] = {}
        self.requests: list[SignedRequest] = []

    def add(self, url: str, *outcomes) -> None:
        self.scripts.setdefault(url, []).extend(outcomes)

    def requests_to(self, url: str) -> list[SignedRequest]:
        return [r for r in self.requests if r.url == url]

    async def perform(self, request: SignedRequest) -> HTTPResponse:
        self.requests.append(request)
        queue = self.scripts.get(request.url)
        if not queue:
            raise AssertionError(f"Unexpected request to {request.url}")
        outcome = queue.pop(0)
        if isinstance(outcome, TransportError):
            raise outcome
        return outcome


class RecordingDelegate:
    """Delegate that answers with fixed choices and records every callback"""

    def __init__(self, confirm: bool = True, choice: str | None = None):
        self.confirm = confirm
        self.choice = choice
        self.confirmations: list[str] = []
        self.selections: list[list[str]] = []
        self.credentials: list = []
        self.problems: list = []

    async def confirm_account(self, identifier: str) -> bool:
        self.confirmations.append(identifier)
        return self.confirm

    async def select_account(self, identifiers: list[str]) -> str | None:
        self.selections.append(list(identifiers))
        return self.choice

    async def on_credentials(self, credentials) -> None:
        self.credentials.append(credentials)

    async def on_problem(self, problem) -> None:
        self.problems.append(problem)

    @property
    def outcomes(self) -> list:
        return self.credentials + self.problems


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def facebook_consumer():
    return FacebookConsumer(app_id="1234567890")


@pytest.fixture
def twitter_consumer():
    return TwitterConsumer(key="consumer-key", secret="consumer-secret")


@pytest.fixture
def facebook_account():
    return SystemAccount(
        username="jane@example.com",
        account_type=AccountType.FACEBOOK,
        credential=AccountCredential(oauth_token="fb-system-token"),
    )


@pytest.fixture
def twitter_accounts():
    return [
        SystemAccount(
            username=name,
            account_type=AccountType.TWITTER,
            credential=AccountCredential(
                oauth_token=f"{name}-token",
                oauth_token_secret=f"{name}-secret",
                client_key="system-client-key",
                client_secret="system-client-secret",
            ),
        )
        for name in ("jane", "janes_cat")
    ]


@pytest.fixture
def facebook_store(facebook_account):
    return InMemoryAccountStore(accounts=[facebook_account])


@pytest.fixture
def twitter_store(twitter_accounts):
    return InMemoryAccountStore(accounts=twitter_accounts)
