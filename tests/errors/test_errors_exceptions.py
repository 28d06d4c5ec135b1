import unittest

from gdriveproxy.errors.exceptions import (
    AccessDeniedError,
    ApiError,
    AuthFailedError,
    DownloadCancelledError,
    DownloadFailedError,
    ErrorCode,
    FileNotFoundError,
    GDriveProxyError,
    HttpErrorInfo,
    InvalidLinkError,
    NetworkError,
    QuotaExceededError,
    TokenRejectedError,
    classify_error,
    is_retryable_error,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = GDriveProxyError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_subclasses_carry_codes(self) -> None:
        self.assertEqual(InvalidLinkError("x").code, ErrorCode.INVALID_LINK)
        self.assertEqual(FileNotFoundError("x").code, ErrorCode.FILE_NOT_FOUND)
        self.assertEqual(AccessDeniedError("x").code, ErrorCode.ACCESS_DENIED)
        self.assertEqual(TokenRejectedError("x").code, ErrorCode.ACCESS_DENIED)
        self.assertEqual(QuotaExceededError("x").code, ErrorCode.QUOTA_EXCEEDED)
        self.assertEqual(NetworkError("x").code, ErrorCode.NETWORK_ERROR)
        self.assertEqual(DownloadFailedError("x").code, ErrorCode.DOWNLOAD_FAILED)
        self.assertEqual(ApiError("x").code, ErrorCode.API_ERROR)
        self.assertIsNone(DownloadCancelledError("x").code)

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, FileNotFoundError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, QuotaExceededError)

        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, ApiError)

    def test_map_http_error_401_depends_on_token(self) -> None:
        anonymous = map_http_error(HttpErrorInfo(status_code=401))
        self.assertIsInstance(anonymous, AccessDeniedError)
        self.assertNotIsInstance(anonymous, TokenRejectedError)
        self.assertFalse(anonymous.requires_reauth)

        with_token = map_http_error(HttpErrorInfo(status_code=401, authenticated=True))
        self.assertIsInstance(with_token, TokenRejectedError)
        self.assertTrue(with_token.requires_reauth)
        self.assertTrue(with_token.details["authenticated"])

    def test_map_http_error_403_quota_vs_access_denied(self) -> None:
        for reason in (
            "quotaExceeded",
            "rateLimitExceeded",
            "userRateLimitExceeded",
            "dailyLimitExceeded",
            "downloadQuotaExceeded",
        ):
            with self.subTest(reason=reason):
                err = map_http_error(HttpErrorInfo(status_code=403, reason=reason))
                self.assertIsInstance(err, QuotaExceededError)

        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="insufficientPermissions", message="x")
        )
        self.assertIsInstance(err, AccessDeniedError)

        err = map_http_error(HttpErrorInfo(status_code=403))
        self.assertIsInstance(err, AccessDeniedError)

    def test_map_http_error_5xx_is_api_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503, message="unavail"))
        self.assertIsInstance(err, ApiError)
        self.assertEqual(err.details["status_code"], 503)

    def test_map_http_error_default_message(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=500))
        self.assertEqual(str(err), "HTTP error 500")

    def test_map_http_error_keeps_cause(self) -> None:
        cause = RuntimeError("x")
        err = map_http_error(HttpErrorInfo(status_code=404), cause=cause)
        self.assertIs(err.cause, cause)


class TestClassification(unittest.TestCase):
    def test_classify_error(self) -> None:
        self.assertEqual(classify_error(NetworkError("x")), ErrorCode.NETWORK_ERROR)
        self.assertEqual(classify_error(TokenRejectedError("x")), ErrorCode.ACCESS_DENIED)
        self.assertEqual(classify_error(AuthFailedError("x")), ErrorCode.ACCESS_DENIED)
        self.assertEqual(classify_error(ConnectionError()), ErrorCode.NETWORK_ERROR)
        self.assertEqual(classify_error(TimeoutError()), ErrorCode.NETWORK_ERROR)
        self.assertEqual(classify_error(KeyError("k")), ErrorCode.API_ERROR)
        self.assertEqual(classify_error(DownloadCancelledError("x")), ErrorCode.API_ERROR)

    def test_only_network_and_download_failures_are_retryable(self) -> None:
        retryable = {c for c in ErrorCode if is_retryable_error(c)}
        self.assertEqual(retryable, {ErrorCode.NETWORK_ERROR, ErrorCode.DOWNLOAD_FAILED})


if __name__ == "__main__":
    unittest.main()
