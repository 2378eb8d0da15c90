"""Core data types for reverse-auth social login"""

from dataclasses import dataclass, field
from enum import Enum, auto


class AccountType(Enum):
    """Social account types known to the system account store"""

    FACEBOOK = "com.apple.facebook"
    TWITTER = "com.apple.twitter"

    @property
    def store_identifier(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class FacebookAudience(Enum):
    """Who may see content later posted with the Facebook token"""

    ONLY_ME = "me"
    FRIENDS = "friends"
    EVERYONE = "everyone"

    @property
    def store_key(self) -> str:
        return self.value


class RenewResult(Enum):
    """Outcome of a credential renewal in the account store"""

    RENEWED = auto()
    REJECTED = auto()
    FAILED = auto()


@dataclass
class AccountCredential:
    """Credential the account store holds for a system account"""

    oauth_token: str | None = None
    # OAuth 1.0a accounts (Twitter) also carry a secret and the client
    # identity the store signs with
    oauth_token_secret: str | None = None
    client_key: str | None = None
    client_secret: str | None = None


@dataclass
class SystemAccount:
    """Account handle registered in the system account store"""

    username: str  # Display identifier (email/phone/screen name)
    account_type: AccountType
    credential: AccountCredential | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def oauth_token(self) -> str | None:
        if self.credential is None:
            return None
        return self.credential.oauth_token


@dataclass(frozen=True)
class FacebookConsumer:
    """App identity issued by Facebook"""

    app_id: str


@dataclass(frozen=True)
class TwitterConsumer:
    """App identity issued by Twitter"""

    key: str
    secret: str


@dataclass(frozen=True)
class SystemAccountSigning:
    """Sign with the credential the account store holds for an account"""

    account: SystemAccount


@dataclass(frozen=True)
class OAuth1Signing:
    """Sign with OAuth 1.0a HMAC-SHA1, consumer-only when token is None"""

    consumer_key: str
    consumer_secret: str
    token: str | None = None
    token_secret: str | None = None


@dataclass
class SignedRequest:
    """HTTP request plus the way it has to be signed"""

    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    signing: SystemAccountSigning | OAuth1Signing | None = None


@dataclass
class HTTPResponse:
    """Raw transport response, fields are None when the transport got nothing"""

    status_code: int | None
    body: bytes | None
    headers: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    def text(self) -> str | None:
        """Body decoded as UTF-8, None if absent or not valid UTF-8"""
        if self.body is None:
            return None
        try:
            return self.body.decode("utf-8")
        except UnicodeDecodeError:
            return None


@dataclass(frozen=True)
class FacebookCredentials:
    """Result of a successful Facebook run"""

    id: str
    name: str
    token: str
    email: str | None
    avatar: str


@dataclass(frozen=True)
class TwitterCredentials:
    """Result of a successful Twitter run"""

    id: str
    name: str
    screen_name: str
    key: str  # User OAuth token
    secret: str  # User OAuth token secret
    email: str | None
    avatar: str


class ProblemKind(Enum):
    """Closed set of failure kinds reported to the delegate"""

    UNCONFIGURED = auto()  # Consumer credentials missing
    NO_SYSTEM_ACCOUNT = auto()  # No account of this type in the store
    ACCESS_NOT_GRANTED = auto()  # User denied account access
    USER_CANCELLED = auto()  # Confirmation/selection declined
    ACCOUNT_NEEDS_REAUTH = auto()  # Facebook: relogin needed, Twitter: banned
    NETWORK_FAILURE = auto()  # Transport error, carries code + message
    PROVIDER_FAILURE = auto()  # Opaque provider-side failure
    ACCOUNT_STORE_FAILURE = auto()  # Opaque account store failure


_REAUTH_DESCRIPTIONS = {
    AccountType.FACEBOOK: "System account relogin needed",
    AccountType.TWITTER: "Account banned",
}


@dataclass(frozen=True)
class Problem:
    """Failure outcome of a run, one variant per ProblemKind"""

    provider: AccountType
    kind: ProblemKind
    code: int | None = None  # Only for NETWORK_FAILURE
    message: str | None = None  # NETWORK_FAILURE and the two opaque failures

    def __post_init__(self):
        if self.kind == ProblemKind.NETWORK_FAILURE:
            if self.code is None or self.message is None:
                raise ValueError("NETWORK_FAILURE needs a code and a message")
        elif self.kind in (ProblemKind.PROVIDER_FAILURE, ProblemKind.ACCOUNT_STORE_FAILURE):
            if self.code is not None or self.message is None:
                raise ValueError(f"{self.kind.name} carries a message only")
        elif self.code is not None or self.message is not None:
            raise ValueError(f"{self.kind.name} carries no payload")

    @classmethod
    def unconfigured(cls, provider: AccountType) -> "Problem":
        return cls(provider, ProblemKind.UNCONFIGURED)

    @classmethod
    def no_system_account(cls, provider: AccountType) -> "Problem":
        return cls(provider, ProblemKind.NO_SYSTEM_ACCOUNT)

    @classmethod
    def access_not_granted(cls, provider: AccountType) -> "Problem":
        return cls(provider, ProblemKind.ACCESS_NOT_GRANTED)

    @classmethod
    def user_cancelled(cls, provider: AccountType) -> "Problem":
        return cls(provider, ProblemKind.USER_CANCELLED)

    @classmethod
    def account_needs_reauth(cls, provider: AccountType) -> "Problem":
        return cls(provider, ProblemKind.ACCOUNT_NEEDS_REAUTH)

    @classmethod
    def network_failure(cls, provider: AccountType, code: int, message: str) -> "Problem":
        return cls(provider, ProblemKind.NETWORK_FAILURE, code=code, message=message)

    @classmethod
    def provider_failure(cls, provider: AccountType, message: str) -> "Problem":
        return cls(provider, ProblemKind.PROVIDER_FAILURE, message=message)

    @classmethod
    def account_store_failure(cls, provider: AccountType, message: str) -> "Problem":
        return cls(provider, ProblemKind.ACCOUNT_STORE_FAILURE, message=message)

    @property
    def is_banned(self) -> bool:
        return (
            self.kind == ProblemKind.ACCOUNT_NEEDS_REAUTH
            and self.provider == AccountType.TWITTER
        )

    def __str__(self) -> str:
        name = self.provider.display_name
        if self.kind == ProblemKind.ACCOUNT_NEEDS_REAUTH:
            return f"{name}: {_REAUTH_DESCRIPTIONS[self.provider]}"
        if self.kind == ProblemKind.NETWORK_FAILURE:
            return f"{name}: network failure {self.code}: {self.message}"
        if self.message:
            return f"{name}: {self.kind.name.lower()}: {self.message}"
        return f"{name}: {self.kind.name.lower()}"
