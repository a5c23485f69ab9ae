from __future__ import annotations


class BenchmarkError(Exception):
    """Base class for every error raised by the benchmark harness."""


class SubmissionFailure(BenchmarkError):
    """The remote operation call itself was rejected."""


class ConfirmationFailure(BenchmarkError):
    """The operation was accepted but its confirmed effect is not a success."""


class ConfirmationTimeout(ConfirmationFailure):
    """No confirmation arrived within the configured receipt timeout."""


class ConfigurationMissing(BenchmarkError):
    """A scenario's target is not configured for the current network."""


class FatalOrchestrationError(BenchmarkError):
    """Raised when the whole run cannot proceed."""


__all__ = [
    "BenchmarkError",
    "SubmissionFailure",
    "ConfirmationFailure",
    "ConfirmationTimeout",
    "ConfigurationMissing",
    "FatalOrchestrationError",
]
