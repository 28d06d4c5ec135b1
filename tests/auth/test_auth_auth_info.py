import unittest
from dataclasses import FrozenInstanceError

from gdriveproxy.auth import TokenSet, TokenState, UserInfo


class TestTokenSet(unittest.TestCase):
    def test_requires_access_token(self) -> None:
        with self.assertRaises(ValueError):
            TokenSet(access_token="", refresh_token="r", expires_at_ms=1)


class TestTokenState(unittest.TestCase):
    def test_default_is_empty(self) -> None:
        self.assertTrue(TokenState().is_empty)

    def test_from_token_set(self) -> None:
        user = UserInfo(id="u1", email="a@example.com", name="A")
        state = TokenState.from_token_set(
            TokenSet(access_token="at", refresh_token="", expires_at_ms=123), user=user
        )
        self.assertEqual(state.access_token, "at")
        # An empty refresh token is stored as absent.
        self.assertIsNone(state.refresh_token)
        self.assertEqual(state.expires_at_ms, 123)
        self.assertIs(state.user, user)
        self.assertFalse(state.is_empty)

    def test_is_immutable(self) -> None:
        state = TokenState(access_token="at")
        with self.assertRaises(FrozenInstanceError):
            state.access_token = "other"  # type: ignore[misc]


class TestUserInfo(unittest.TestCase):
    def test_to_dict(self) -> None:
        user = UserInfo(id="u1", email="a@example.com", name="A", picture="p")
        self.assertEqual(
            user.to_dict(), {"id": "u1", "email": "a@example.com", "name": "A", "picture": "p"}
        )


if __name__ == "__main__":
    unittest.main()
