"""Custom exceptions for reverse-auth social login"""

from typing import Any

from .types import Problem


class SocialAuthError(Exception):
    """Base exception for socialauth"""

    pass


class AuthenticatorAlreadyRun(SocialAuthError):
    """run() called a second time on the same authenticator"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"{name} authenticator has already been run, create a new instance"
        )


class ConfigError(SocialAuthError):
    """Configuration file could not be read"""

    pass


class TransportError(SocialAuthError):
    """Network level failure of a signed request"""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Transport error {code}: {message}")


class AccountStoreError(SocialAuthError):
    """Error reported by the system account store"""

    def __init__(
        self, code: int, message: str = "", user_info: dict[str, Any] | None = None
    ):
        self.code = code
        self.message = message
        self.user_info = user_info or {}
        msg = f"Account store error {code}"
        if message:
            msg += f": {message}"
        if self.user_info:
            msg += f" {self.user_info}"
        super().__init__(msg)


class ProblemDetected(SocialAuthError):
    """A failure already mapped to the Problem the delegate will receive"""

    def __init__(self, problem: Problem):
        self.problem = problem
        super().__init__(str(problem))


class FacebookAPIError(SocialAuthError):
    """Structured error object returned by the Graph API"""

    def __init__(self, code: int, type: str, message: str, subcode: int | None = None):
        self.code = code
        self.type = type
        self.message = message
        self.subcode = subcode
        super().__init__(self.description)

    @property
    def description(self) -> str:
        if self.subcode is not None:
            return (
                f"Facebook Error: Code:{self.code}, SubCode:{self.subcode}, "
                f"Type:{self.type}, Message:{self.message}"
            )
        return f"Facebook Error: Code:{self.code}, Type:{self.type}, Message:{self.message}"
