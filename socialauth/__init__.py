"""Reverse-auth social login with system Facebook and Twitter accounts"""

from .config import SocialAuthConfig, load_config
from .core.types import (
    AccountType,
    FacebookAudience,
    FacebookCredentials,
    Problem,
    ProblemKind,
    SystemAccount,
    TwitterCredentials,
)
from .providers.facebook import FacebookAuthenticator
from .providers.twitter import TwitterAuthenticator

__all__ = [
    "AccountType",
    "FacebookAudience",
    "FacebookAuthenticator",
    "FacebookCredentials",
    "Problem",
    "ProblemKind",
    "SocialAuthConfig",
    "SystemAccount",
    "TwitterAuthenticator",
    "TwitterCredentials",
    "load_config",
]
