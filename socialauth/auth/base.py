"""Base authenticator shared by the Facebook and Twitter flows"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from ..account_store.base import AccountStore
from ..client.base import SignedRequestTransport
from ..core.exceptions import (
    AccountStoreError,
    AuthenticatorAlreadyRun,
    ProblemDetected,
    TransportError,
)
from ..core.types import (
    AccountType,
    FacebookCredentials,
    HTTPResponse,
    Problem,
    RenewResult,
    SignedRequest,
    SystemAccount,
    TwitterCredentials,
)

logger = logging.getLogger(__name__)

# Undocumented account store error codes, found by trial and error. They depend on
# whether the access popup is shown, whether it is the first time, and on the
# account type.
ACCESS_ERROR_NO_ACCOUNTS = 6  # Only observed for Facebook
ACCESS_ERROR_NOT_GRANTED = 7  # Only with an empty user_info


class AccessOutcome(Enum):
    """Result of asking the account store for accounts of one type"""

    GRANTED = auto()
    NO_SYSTEM_ACCOUNTS = auto()
    ACCESS_NOT_GRANTED = auto()
    STORE_ERROR = auto()


@dataclass
class AccountStoreResult:
    """Outcome of enumerate_accounts, accounts only set when GRANTED"""

    outcome: AccessOutcome
    accounts: list[SystemAccount] = field(default_factory=list)
    message: str | None = None


def classify_access_error(error: AccountStoreError) -> AccountStoreResult:
    """Map an access request error to an outcome

    Code 6 means there are no accounts, code 7 with an empty user_info means the
    popup was denied (first denial for Facebook). Everything else, including
    code 7 with details (wrong bundle identifier etc.), is a store error.
    """
    if error.code == ACCESS_ERROR_NO_ACCOUNTS:
        return AccountStoreResult(AccessOutcome.NO_SYSTEM_ACCOUNTS)
    if error.code == ACCESS_ERROR_NOT_GRANTED and not error.user_info:
        return AccountStoreResult(AccessOutcome.ACCESS_NOT_GRANTED)
    return AccountStoreResult(AccessOutcome.STORE_ERROR, message=str(error))


class BaseAuthenticator:
    """Common account store, transport and delegate handling

    Subclasses set ``account_type`` and implement ``_perform``, which returns the
    credentials or raises ProblemDetected. ``run`` may be called only once per
    instance.
    """

    account_type: AccountType

    def __init__(
        self,
        delegate: Any,
        account_store: AccountStore,
        transport: SignedRequestTransport,
        delegate_loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.delegate = delegate
        self._store = account_store
        self._transport = transport
        self._delegate_loop = delegate_loop
        self._started = False
        self._result: FacebookCredentials | TwitterCredentials | Problem | None = None

    @property
    def name(self) -> str:
        return self.account_type.display_name

    @property
    def result(self) -> FacebookCredentials | TwitterCredentials | Problem | None:
        """Outcome delivered to the delegate, None until the run finished"""
        return self._result

    async def run(self) -> FacebookCredentials | TwitterCredentials | Problem:
        """
        Run the authentication flow once. Exactly one of on_credentials or
        on_problem is called on the delegate; the same outcome is returned.
        """
        if self._started:
            raise AuthenticatorAlreadyRun(self.name)
        self._started = True

        try:
            outcome = await self._perform()
        except ProblemDetected as e:
            outcome = e.problem

        self._result = outcome
        if isinstance(outcome, Problem):
            logger.info(f"[{self.name}] Finished with problem: {outcome}")
            await self._dispatch(self.delegate.on_problem, outcome)
        else:
            logger.info(f"[{self.name}] Finished with credentials for id {outcome.id}")
            await self._dispatch(self.delegate.on_credentials, outcome)
        return outcome

    async def _perform(self) -> FacebookCredentials | TwitterCredentials:
        raise NotImplementedError

    async def _dispatch(self, func, *args):
        """Call a delegate coroutine on the delegate loop and wait for its result"""
        loop = self._delegate_loop
        if loop is None or loop is asyncio.get_running_loop():
            return await func(*args)
        future = asyncio.run_coroutine_threadsafe(func(*args), loop)
        return await asyncio.wrap_future(future)

    async def enumerate_accounts(
        self, account_type: AccountType, options: dict[str, Any] | None = None
    ) -> AccountStoreResult:
        """Request access to accounts of a type and list them"""
        try:
            granted = await self._store.request_access(account_type, options)
        except AccountStoreError as e:
            logger.warning(f"[AccountStore] Access request for {account_type.name} failed: {e}")
            return classify_access_error(e)

        if not granted:
            return AccountStoreResult(AccessOutcome.ACCESS_NOT_GRANTED)

        accounts = list(self._store.list_accounts(account_type))
        if not accounts:
            return AccountStoreResult(AccessOutcome.NO_SYSTEM_ACCOUNTS)
        return AccountStoreResult(AccessOutcome.GRANTED, accounts=accounts)

    async def _require_accounts(self, options: dict[str, Any] | None = None) -> list[SystemAccount]:
        """enumerate_accounts for this provider, non-granted outcomes raise"""
        result = await self.enumerate_accounts(self.account_type, options)

        if result.outcome == AccessOutcome.ACCESS_NOT_GRANTED:
            raise ProblemDetected(Problem.access_not_granted(self.account_type))
        if result.outcome == AccessOutcome.STORE_ERROR:
            raise ProblemDetected(
                Problem.account_store_failure(self.account_type, result.message or "")
            )
        if result.outcome == AccessOutcome.NO_SYSTEM_ACCOUNTS or not result.accounts:
            raise ProblemDetected(Problem.no_system_account(self.account_type))

        logger.info(f"[{self.name}] {len(result.accounts)} system account(s) available")
        return result.accounts

    async def renew(self, account: SystemAccount) -> SystemAccount:
        """Renew the store credential of an account, raises AccountStoreError on failure

        Needed when the system Facebook token expired; Twitter accounts do not
        seem to need it.
        """
        result = await self._store.renew_credentials(account)
        if result != RenewResult.RENEWED:
            raise AccountStoreError(code=-1, message="Account could not be renewed")
        return account

    async def _send(self, request: SignedRequest) -> HTTPResponse:
        """Perform a request, mapping transport errors to NETWORK_FAILURE"""
        try:
            return await self._transport.perform(request)
        except TransportError as e:
            logger.warning(f"[{self.name}] {request.method} {request.url} failed: {e}")
            raise ProblemDetected(
                Problem.network_failure(self.account_type, e.code, e.message)
            )

    def _provider_failure(self, message: str) -> ProblemDetected:
        logger.error(f"[{self.name}] {message}")
        return ProblemDetected(Problem.provider_failure(self.account_type, message))

    @staticmethod
    def parse_json(data: bytes | str | None) -> dict | None:
        """Parse a JSON object, None if the data is not one"""
        if data is None:
            return None
        try:
            parsed = json.loads(data)
        except (ValueError, TypeError):
            return None
        return parsed if isinstance(parsed, dict) else None
