"""Public retry exports for gdriveproxy."""

from __future__ import annotations

from .controller import RetryController, RetryPolicy, RetryResult, RetryState

__all__ = ["RetryController", "RetryPolicy", "RetryResult", "RetryState"]
