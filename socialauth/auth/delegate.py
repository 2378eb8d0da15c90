"""Delegate protocols that receive authenticator callbacks"""

from typing import Protocol

from ..core.types import FacebookCredentials, Problem, TwitterCredentials


class FacebookDelegate(Protocol):
    """Receives the Facebook run outcome and confirms the system account"""

    async def confirm_account(self, identifier: str) -> bool:
        """
        Ask the user whether to log in with the Facebook account registered in
        the system (usually shown by its email or phone number).
        Returning False ends the run with USER_CANCELLED.
        """
        ...

    async def on_credentials(self, credentials: FacebookCredentials) -> None:
        ...

    async def on_problem(self, problem: Problem) -> None:
        ...


class TwitterDelegate(Protocol):
    """Receives the Twitter run outcome and picks one of the system accounts"""

    async def select_account(self, identifiers: list[str]) -> str | None:
        """
        Let the user pick one of the Twitter accounts registered in the system.
        None cancels the run; an identifier not in the list is a store failure.
        """
        ...

    async def on_credentials(self, credentials: TwitterCredentials) -> None:
        ...

    async def on_problem(self, problem: Problem) -> None:
        ...
