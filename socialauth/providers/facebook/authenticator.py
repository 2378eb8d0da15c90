"""Facebook authenticator using the system Facebook account"""

import asyncio
import logging

from ...account_store.base import AccountStore
from ...auth.base import BaseAuthenticator
from ...auth.delegate import FacebookDelegate
from ...client.base import SignedRequestTransport
from ...core.exceptions import AccountStoreError, FacebookAPIError, ProblemDetected
from ...core.types import (
    AccountType,
    FacebookAudience,
    FacebookConsumer,
    FacebookCredentials,
    Problem,
    SignedRequest,
    SystemAccount,
    SystemAccountSigning,
)
from .parser import avatar_url, parse_error, parse_profile

logger = logging.getLogger(__name__)

# https://developers.facebook.com/docs/graph-api/reference/user
PROFILE_URL = "https://graph.facebook.com/v2.8/me"
PROFILE_FIELDS = "id,name,email"

# https://developers.facebook.com/docs/facebook-login/permissions
DEFAULT_PERMISSIONS = [
    "public_profile",
    "email",
    "user_birthday",
    "user_location",
    "user_friends",
]

# Expired and invalid tokens all come as code 190, told apart by the subcode.
# 458 (app permission revoked) is undocumented in the Graph error reference.
TOKEN_ERROR_CODE = 190
PERMISSION_REVOKED_SUBCODE = 458


class FacebookAuthenticator(BaseAuthenticator):
    """Authenticates with the single Facebook account registered in the system

    Create a new instance for every attempt, ``run`` can only be called once.
    A revoked app permission is retried once by restarting the flow, an expired
    system token is renewed once.
    """

    account_type = AccountType.FACEBOOK

    def __init__(
        self,
        consumer: FacebookConsumer | None,
        delegate: FacebookDelegate,
        account_store: AccountStore,
        transport: SignedRequestTransport,
        permissions: list[str] | None = None,
        audience: FacebookAudience = FacebookAudience.ONLY_ME,
        delegate_loop: asyncio.AbstractEventLoop | None = None,
    ):
        super().__init__(delegate, account_store, transport, delegate_loop)
        self.consumer = consumer
        self.permissions = list(permissions or [])
        self.audience = audience

        self.chosen_account: SystemAccount | None = None
        self._renewal_tried = False
        self._reauth_tried = False

    @property
    def renewal_tried(self) -> bool:
        return self._renewal_tried

    @property
    def reauth_tried(self) -> bool:
        return self._reauth_tried

    def store_options(self) -> dict:
        """Options for the account access request"""
        return {
            "app_id": self.consumer.app_id,
            "permissions": self.permissions or list(DEFAULT_PERMISSIONS),
            "audience": self.audience.store_key,
        }

    async def _perform(self) -> FacebookCredentials:
        if self.consumer is None:
            raise ProblemDetected(Problem.unconfigured(self.account_type))

        account = await self._choose_account()
        while True:
            try:
                return await self._fetch_credentials(account)
            except FacebookAPIError as e:
                account = await self._recover(e, account)

    async def _choose_account(self) -> SystemAccount:
        """First system account, confirmed by the delegate"""
        accounts = await self._require_accounts(self.store_options())
        # The system only allows one Facebook account
        account = accounts[0]

        proceed = await self._dispatch(self.delegate.confirm_account, account.username)
        if not proceed:
            raise ProblemDetected(Problem.user_cancelled(self.account_type))

        self.chosen_account = account
        return account

    async def _recover(self, error: FacebookAPIError, account: SystemAccount) -> SystemAccount:
        """Account to retry the profile fetch with, raises when retries are used up"""
        # https://developers.facebook.com/docs/facebook-login/access-tokens/debugging-and-error-handling
        if (
            not self._reauth_tried
            and error.code == TOKEN_ERROR_CODE
            and error.subcode == PERMISSION_REVOKED_SUBCODE
        ):
            # App permission revoked, start over so the access popup shows again
            self._reauth_tried = True
            logger.info("[Facebook] App permission revoked, requesting account access again")
            return await self._choose_account()

        if not self._renewal_tried and error.code == TOKEN_ERROR_CODE:
            # System token expired or the user changed the password
            self._renewal_tried = True
            logger.info("[Facebook] Token rejected, renewing system account credential")
            try:
                return await self.renew(account)
            except AccountStoreError as e:
                logger.warning(f"[Facebook] Renewal failed: {e.message or e}")
                raise ProblemDetected(Problem.account_needs_reauth(self.account_type))

        if error.code == TOKEN_ERROR_CODE:
            # Still rejected after renewal, only a relogin in the system settings helps
            logger.warning(f"[Facebook] Token rejected after renewal: {error.description}")
            raise ProblemDetected(Problem.account_needs_reauth(self.account_type))

        raise self._provider_failure(error.description)

    async def _fetch_credentials(self, account: SystemAccount) -> FacebookCredentials:
        if account.oauth_token is None:
            raise self._provider_failure(f"System account {account.username} has no OAuth token.")

        request = SignedRequest(
            method="GET",
            url=PROFILE_URL,
            params={"fields": PROFILE_FIELDS},
            signing=SystemAccountSigning(account),
        )
        response = await self._send(request)

        if response.status_code is None or response.body is None:
            raise self._provider_failure("No data and no error received from Facebook.")

        data = self.parse_json(response.body)
        if data is None:
            raise self._provider_failure("JSON response not parsable.")

        if not response.ok:
            error = parse_error(data)
            if error is None:
                raise self._provider_failure(
                    f"Facebook server returned status code: {response.status_code}"
                )
            logger.warning(f"[Facebook] Profile request rejected: {error.description}")
            raise error

        token = account.oauth_token
        profile = parse_profile(data)
        if token is None or profile is None:
            raise self._provider_failure("Profile response does not contain the requested data.")

        user_id, name, email = profile
        return FacebookCredentials(
            id=user_id,
            name=name,
            token=token,
            email=email,
            avatar=avatar_url(user_id),
        )
