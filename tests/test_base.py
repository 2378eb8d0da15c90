"""Tests for shared authenticator behaviour"""

import asyncio
import threading

import pytest

from conftest import RecordingDelegate, json_response
from socialauth.account_store.memory import InMemoryAccountStore
from socialauth.auth.base import (
    AccessOutcome,
    BaseAuthenticator,
    classify_access_error,
)
from socialauth.core.exceptions import AccountStoreError, ProblemDetected
from socialauth.core.types import AccountType, Problem, ProblemKind, RenewResult
from socialauth.providers.facebook import FacebookAuthenticator
from socialauth.providers.facebook.authenticator import PROFILE_URL


class TestClassifyAccessError:
    """Codes 6 and 7 are vendor-specific, may change"""

    def test_code_6_means_no_accounts(self):
        result = classify_access_error(AccountStoreError(6, user_info={"detail": "x"}))
        assert result.outcome == AccessOutcome.NO_SYSTEM_ACCOUNTS

    def test_code_7_without_details_means_denied(self):
        result = classify_access_error(AccountStoreError(7))
        assert result.outcome == AccessOutcome.ACCESS_NOT_GRANTED

    def test_code_7_with_details_is_store_error(self):
        error = AccountStoreError(7, user_info={"NSLocalizedDescription": "invalid bundle"})
        result = classify_access_error(error)
        assert result.outcome == AccessOutcome.STORE_ERROR
        assert result.message == str(error)

    def test_other_codes_are_store_errors(self):
        result = classify_access_error(AccountStoreError(1, "unknown"))
        assert result.outcome == AccessOutcome.STORE_ERROR
        assert "unknown" in result.message


class TestEnumerateAccounts:
    @pytest.mark.asyncio
    async def test_granted(self, facebook_account, transport):
        store = InMemoryAccountStore(accounts=[facebook_account])
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        result = await auth.enumerate_accounts(AccountType.FACEBOOK, {"app_id": "1"})

        assert result.outcome == AccessOutcome.GRANTED
        assert result.accounts == [facebook_account]
        assert store.access_requests == [(AccountType.FACEBOOK, {"app_id": "1"})]

    @pytest.mark.asyncio
    async def test_granted_but_other_type_only(self, facebook_account, transport):
        store = InMemoryAccountStore(accounts=[facebook_account])
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        result = await auth.enumerate_accounts(AccountType.TWITTER)

        assert result.outcome == AccessOutcome.NO_SYSTEM_ACCOUNTS

    @pytest.mark.asyncio
    async def test_denied(self, facebook_account, transport):
        store = InMemoryAccountStore(accounts=[facebook_account], granted=False)
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        result = await auth.enumerate_accounts(AccountType.FACEBOOK)

        assert result.outcome == AccessOutcome.ACCESS_NOT_GRANTED
        assert result.accounts == []


class TestRequireAccounts:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [AccountStoreError(1, "unknown"), AccountStoreError(7, user_info={"reason": "bundle"})],
    )
    async def test_store_error_is_not_reported_as_missing_account(self, facebook_consumer, transport, error):
        store = InMemoryAccountStore(access_error=error)
        auth = FacebookAuthenticator(facebook_consumer, RecordingDelegate(), store, transport)

        with pytest.raises(ProblemDetected) as exc_info:
            await auth._require_accounts()

        problem = exc_info.value.problem
        assert problem.kind == ProblemKind.ACCOUNT_STORE_FAILURE
        assert problem.message == str(error)


class TestRenew:
    @pytest.mark.asyncio
    async def test_renewed(self, facebook_account, transport):
        store = InMemoryAccountStore(accounts=[facebook_account])
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        assert await auth.renew(facebook_account) is facebook_account

    @pytest.mark.asyncio
    async def test_rejected(self, facebook_account, transport):
        store = InMemoryAccountStore(renew_result=RenewResult.REJECTED)
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        with pytest.raises(AccountStoreError, match="could not be renewed"):
            await auth.renew(facebook_account)

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, facebook_account, transport):
        store = InMemoryAccountStore(renew_error=AccountStoreError(-1, "offline"))
        auth = BaseAuthenticator(RecordingDelegate(), store, transport)

        with pytest.raises(AccountStoreError, match="offline"):
            await auth.renew(facebook_account)


class TestParseJSON:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b'{"id": "1"}', {"id": "1"}),
            ('{"a": [1, 2]}', {"a": [1, 2]}),
            (b"not json", None),
            (b"\xff\xfe\x00", None),
            (b"[1, 2]", None),
            (b"", None),
            (None, None),
        ],
    )
    def test_parse_json(self, data, expected):
        assert BaseAuthenticator.parse_json(data) == expected


class TestProblem:
    @pytest.mark.parametrize(
        "kind, code, message",
        [
            (ProblemKind.NETWORK_FAILURE, None, "timed out"),
            (ProblemKind.NETWORK_FAILURE, -1001, None),
            (ProblemKind.PROVIDER_FAILURE, None, None),
            (ProblemKind.ACCOUNT_STORE_FAILURE, 7, "store"),
            (ProblemKind.UNCONFIGURED, None, "unexpected"),
            (ProblemKind.USER_CANCELLED, 1, None),
        ],
    )
    def test_payload_must_match_kind(self, kind, code, message):
        with pytest.raises(ValueError):
            Problem(AccountType.FACEBOOK, kind, code=code, message=message)

    def test_reauth_descriptions_differ_per_provider(self):
        facebook = Problem.account_needs_reauth(AccountType.FACEBOOK)
        twitter = Problem.account_needs_reauth(AccountType.TWITTER)

        assert facebook.kind == twitter.kind == ProblemKind.ACCOUNT_NEEDS_REAUTH
        assert "relogin" in str(facebook)
        assert "banned" in str(twitter)
        assert twitter.is_banned and not facebook.is_banned

    def test_network_failure_payload(self):
        problem = Problem.network_failure(AccountType.TWITTER, -1001, "timed out")
        assert (problem.code, problem.message) == (-1001, "timed out")
        assert str(problem) == "Twitter: network failure -1001: timed out"


class TestDelegateLoop:
    @pytest.mark.asyncio
    async def test_callbacks_run_on_delegate_loop(
        self, facebook_consumer, facebook_store, transport
    ):
        class ThreadRecordingDelegate(RecordingDelegate):
            def __init__(self):
                super().__init__()
                self.threads = []

            async def confirm_account(self, identifier):
                self.threads.append(threading.get_ident())
                return await super().confirm_account(identifier)

            async def on_credentials(self, credentials):
                self.threads.append(threading.get_ident())
                await super().on_credentials(credentials)

        ui_loop = asyncio.new_event_loop()
        ui_thread = threading.Thread(target=ui_loop.run_forever, daemon=True)
        ui_thread.start()
        try:
            transport.add(PROFILE_URL, json_response({"id": "123", "name": "Jane"}))
            delegate = ThreadRecordingDelegate()
            auth = FacebookAuthenticator(
                facebook_consumer, delegate, facebook_store, transport, delegate_loop=ui_loop
            )

            await auth.run()
        finally:
            ui_loop.call_soon_threadsafe(ui_loop.stop)
            ui_thread.join()
            ui_loop.close()

        assert len(delegate.credentials) == 1
        assert delegate.threads == [ui_thread.ident, ui_thread.ident]

    @pytest.mark.asyncio
    async def test_same_loop_calls_directly(self, facebook_consumer, facebook_store, transport):
        transport.add(PROFILE_URL, json_response({"id": "123", "name": "Jane"}))
        delegate = RecordingDelegate()
        auth = FacebookAuthenticator(
            facebook_consumer,
            delegate,
            facebook_store,
            transport,
            delegate_loop=asyncio.get_running_loop(),
        )

        result = await auth.run()

        assert delegate.credentials == [result]
        assert auth.result is result
