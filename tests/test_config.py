import unittest

from gdriveproxy.config import (
    DEFAULT_FRONTEND_URL,
    DEFAULT_REDIRECT_URI,
    DEFAULT_SCOPES,
    OAuthSettings,
    ProxyConfig,
)


class TestOAuthSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = OAuthSettings(client_id="id", client_secret="secret")
        self.assertEqual(settings.redirect_uri, DEFAULT_REDIRECT_URI)
        self.assertEqual(settings.scopes, DEFAULT_SCOPES)
        self.assertTrue(settings.is_configured)

    def test_unconfigured(self) -> None:
        self.assertFalse(OAuthSettings(client_id="", client_secret="").is_configured)

    def test_client_config_shape(self) -> None:
        web = OAuthSettings(client_id="id", client_secret="secret").client_config()["web"]
        self.assertEqual(web["client_id"], "id")
        self.assertEqual(web["redirect_uris"], [DEFAULT_REDIRECT_URI])

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            OAuthSettings(client_id="id", client_secret="s", redirect_uri=" ")
        with self.assertRaises(ValueError):
            OAuthSettings(client_id="id", client_secret="s", scopes=())
        with self.assertRaises(TypeError):
            OAuthSettings(client_id=None, client_secret="s")  # type: ignore[arg-type]


class TestProxyConfig(unittest.TestCase):
    def _oauth(self) -> OAuthSettings:
        return OAuthSettings(client_id="id", client_secret="secret")

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            ProxyConfig(api_key="k", oauth=self._oauth(), chunk_size=0)
        with self.assertRaises(ValueError):
            ProxyConfig(api_key="k", oauth=self._oauth(), request_timeout_sec=0)
        with self.assertRaises(TypeError):
            ProxyConfig(api_key=None, oauth=self._oauth())  # type: ignore[arg-type]

    def test_from_env(self) -> None:
        config = ProxyConfig.from_env(
            {
                "GOOGLE_API_KEY": "key",
                "GOOGLE_CLIENT_ID": "id",
                "GOOGLE_CLIENT_SECRET": "secret",
                "GOOGLE_REDIRECT_URI": "https://proxy.example/callback",
                "FRONTEND_URL": "https://app.example",
            }
        )
        self.assertEqual(config.api_key, "key")
        self.assertEqual(config.oauth.client_id, "id")
        self.assertEqual(config.oauth.redirect_uri, "https://proxy.example/callback")
        self.assertEqual(config.frontend_url, "https://app.example")

    def test_from_env_missing_values_warns(self) -> None:
        with self.assertLogs("gdriveproxy.config", level="WARNING") as logs:
            config = ProxyConfig.from_env({})
        self.assertEqual(config.api_key, "")
        self.assertFalse(config.oauth.is_configured)
        self.assertEqual(config.oauth.redirect_uri, DEFAULT_REDIRECT_URI)
        self.assertEqual(config.frontend_url, DEFAULT_FRONTEND_URL)
        self.assertEqual(len(logs.records), 2)


if __name__ == "__main__":
    unittest.main()
