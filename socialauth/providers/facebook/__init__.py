from .authenticator import FacebookAuthenticator

__all__ = ["FacebookAuthenticator"]
