"""In-memory account store for development and tests"""

import asyncio
import logging
from typing import Any

from ..core.exceptions import AccountStoreError
from ..core.types import AccountType, RenewResult, SystemAccount

logger = logging.getLogger(__name__)


class InMemoryAccountStore:
    """Account store backed by a list of accounts with scriptable outcomes"""

    def __init__(
        self,
        accounts: list[SystemAccount] | None = None,
        granted: bool = True,
        access_error: AccountStoreError | None = None,
        renew_result: RenewResult = RenewResult.RENEWED,
        renew_error: AccountStoreError | None = None,
    ):
        self._accounts = list(accounts or [])
        self.granted = granted
        self.access_error = access_error
        self.renew_result = renew_result
        self.renew_error = renew_error
        self._lock = asyncio.Lock()

        # Call log
        self.access_requests: list[tuple[AccountType, dict | None]] = []
        self.renewals: list[SystemAccount] = []

    def add(self, account: SystemAccount) -> None:
        self._accounts.append(account)

    async def request_access(
        self, account_type: AccountType, options: dict[str, Any] | None = None
    ) -> bool:
        """Record the request, then raise the scripted error or return granted"""
        async with self._lock:
            self.access_requests.append((account_type, options))
        logger.debug(f"[AccountStore] Access requested for {account_type.name}")
        if self.access_error is not None:
            raise self.access_error
        return self.granted

    def list_accounts(self, account_type: AccountType) -> list[SystemAccount]:
        return [a for a in self._accounts if a.account_type == account_type]

    async def renew_credentials(self, account: SystemAccount) -> RenewResult:
        async with self._lock:
            self.renewals.append(account)
        if self.renew_error is not None:
            raise self.renew_error
        return self.renew_result
