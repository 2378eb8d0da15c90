from .authenticator import TwitterAuthenticator

__all__ = ["TwitterAuthenticator"]
