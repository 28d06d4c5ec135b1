import unittest
from unittest.mock import Mock

from gdriveproxy.auth import (
    EXPIRY_BUFFER_MS,
    SessionStore,
    TokenManager,
    TokenSet,
    TokenState,
    UserInfo,
    is_expired,
)
from gdriveproxy.errors import (
    AuthFailedError,
    AuthNetworkError,
    NotAuthenticatedError,
    SessionExpiredError,
)

NOW_MS = 1_700_000_000_000
USER = UserInfo(id="u1", email="a@example.com", name="A")


class TestIsExpired(unittest.TestCase):
    def test_buffer_boundary(self) -> None:
        expires = NOW_MS + EXPIRY_BUFFER_MS
        self.assertTrue(is_expired(expires, NOW_MS))
        self.assertFalse(is_expired(expires + 1, NOW_MS))
        self.assertTrue(is_expired(expires - 1, NOW_MS))


class TestTokenManager(unittest.TestCase):
    def setUp(self) -> None:
        self.oauth = Mock()
        self.store = SessionStore()
        self.manager = TokenManager(
            self.oauth, self.store, "s1", clock=lambda: NOW_MS / 1000
        )

    def _store(self, *, expires_at_ms, refresh_token="rt") -> None:
        self.manager.store_tokens(
            TokenSet(access_token="at", refresh_token=refresh_token, expires_at_ms=expires_at_ms),
            USER,
        )

    def test_absent_session_has_no_token(self) -> None:
        self.assertIsNone(self.manager.current_token())
        self.assertFalse(self.manager.is_authenticated)
        with self.assertRaises(NotAuthenticatedError):
            self.manager.require_token()

    def test_valid_token_is_returned_without_refresh(self) -> None:
        self._store(expires_at_ms=NOW_MS + EXPIRY_BUFFER_MS + 1)
        self.assertEqual(self.manager.current_token(), "at")
        self.assertEqual(self.manager.require_token(), "at")
        self.oauth.refresh.assert_not_called()

    def test_non_expiring_token_is_never_refreshed(self) -> None:
        self.store.get_or_create("s1").tokens = TokenState(access_token="at")
        self.assertEqual(self.manager.current_token(), "at")
        self.oauth.refresh.assert_not_called()

    def test_token_inside_buffer_is_refreshed(self) -> None:
        self._store(expires_at_ms=NOW_MS + EXPIRY_BUFFER_MS)
        self.oauth.refresh.return_value = TokenSet(
            access_token="at2", refresh_token="rt2", expires_at_ms=NOW_MS + 3_600_000
        )

        self.assertEqual(self.manager.current_token(), "at2")

        self.oauth.refresh.assert_called_once_with("rt")
        state = self.manager.state
        self.assertEqual(
            (state.access_token, state.refresh_token, state.expires_at_ms),
            ("at2", "rt2", NOW_MS + 3_600_000),
        )
        self.assertIs(state.user, USER)

    def test_refresh_without_new_refresh_token_keeps_old_one(self) -> None:
        self._store(expires_at_ms=NOW_MS)
        self.oauth.refresh.return_value = TokenSet(
            access_token="at2", refresh_token="", expires_at_ms=NOW_MS + 3_600_000
        )
        self.manager.current_token()
        self.assertEqual(self.manager.state.refresh_token, "rt")

    def test_failed_refresh_clears_everything_and_falls_back(self) -> None:
        self._store(expires_at_ms=NOW_MS)
        self.oauth.refresh.side_effect = AuthNetworkError("down")

        self.assertIsNone(self.manager.current_token())

        self.assertTrue(self.manager.state.is_empty)
        self.assertIsNone(self.manager.current_token())

    def test_failed_refresh_raises_for_strict_callers(self) -> None:
        self._store(expires_at_ms=NOW_MS)
        self.oauth.refresh.side_effect = SessionExpiredError("bad grant")

        with self.assertRaises(SessionExpiredError):
            self.manager.require_token()
        self.assertTrue(self.manager.state.is_empty)

    def test_expired_without_refresh_token_clears(self) -> None:
        self._store(expires_at_ms=NOW_MS, refresh_token="")
        with self.assertRaises(SessionExpiredError):
            self.manager.require_token()
        self.assertTrue(self.manager.state.is_empty)
        self.oauth.refresh.assert_not_called()

    def test_forced_refresh(self) -> None:
        self._store(expires_at_ms=NOW_MS + 10 * EXPIRY_BUFFER_MS)
        self.oauth.refresh.return_value = TokenSet(
            access_token="at2", refresh_token="rt2", expires_at_ms=NOW_MS + 3_600_000
        )
        self.assertEqual(self.manager.refresh().access_token, "at2")

    def test_logout_clears_even_when_revoke_fails(self) -> None:
        self._store(expires_at_ms=NOW_MS + 3_600_000)
        self.oauth.revoke.side_effect = AuthFailedError("rejected")

        self.manager.logout()

        self.oauth.revoke.assert_called_once_with("at")
        self.assertTrue(self.manager.state.is_empty)

    def test_logout_on_empty_session_does_not_revoke(self) -> None:
        self.manager.logout()
        self.oauth.revoke.assert_not_called()
        self.assertTrue(self.manager.state.is_empty)

    def test_set_user_keeps_tokens(self) -> None:
        self._store(expires_at_ms=NOW_MS + 3_600_000)
        other = UserInfo(id="u2", email="b@example.com", name="B")
        self.manager.set_user(other)
        self.assertEqual(self.manager.state.access_token, "at")
        self.assertIs(self.manager.state.user, other)

    def test_sessions_are_independent(self) -> None:
        self._store(expires_at_ms=NOW_MS + 3_600_000)
        other = TokenManager(self.oauth, self.store, "s2", clock=lambda: NOW_MS / 1000)
        self.assertIsNone(other.current_token())
        self.assertEqual(len(self.store), 1)
        self.assertIn("s1", self.store)


if __name__ == "__main__":
    unittest.main()
