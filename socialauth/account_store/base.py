"""Account store protocol"""

from typing import Any, Protocol

from ..core.types import AccountType, RenewResult, SystemAccount


class AccountStore(Protocol):
    """Protocol for the system account store"""

    async def request_access(
        self, account_type: AccountType, options: dict[str, Any] | None = None
    ) -> bool:
        """
        Ask for permission to read accounts of a type. Returns whether access was
        granted, raises AccountStoreError when the store reports an error.
        """
        ...

    def list_accounts(self, account_type: AccountType) -> list[SystemAccount]:
        """Accounts of a type, only meaningful after access was granted"""
        ...

    async def renew_credentials(self, account: SystemAccount) -> RenewResult:
        """
        Renew the credential the store holds for an account. Returns the store's
        outcome, raises AccountStoreError when the store or its network fails.
        """
        ...
