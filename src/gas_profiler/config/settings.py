"""
Profiler settings.

All tunables of a profiling run live in immutable dataclasses that are
passed explicitly to each component. ``ProfilerSettings.from_env`` builds
them from environment variables (usually loaded from a .env file by the CLI).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from ..exceptions import ConfigurationError

# Gas limit = multiplier x estimate. The limit is never reported,
# only receipt gasUsed is.
DEFAULT_GAS_MULTIPLIER = 2
DEFAULT_TOKEN_ID = 1


@dataclass(frozen=True)
class ReceiptPollConfig:
    """Bounds for receipt polling.

    Polling starts at ``interval`` seconds and multiplies the delay by
    ``backoff`` after every pending answer, capped at ``max_interval``.
    ``timeout`` is the total time allowed before giving up.
    """

    timeout: float = 120.0
    interval: float = 0.1
    max_interval: float = 2.0
    backoff: float = 2.0

    def __post_init__(self) -> None:
        for name in ("timeout", "interval", "max_interval"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.backoff < 1:
            raise ConfigurationError(f"backoff must be >= 1, got {self.backoff!r}")
        if self.max_interval < self.interval:
            raise ConfigurationError("max_interval must not be smaller than interval")

    def delays(self):
        """Yield successive sleep durations (unbounded; the caller enforces timeout)."""
        delay = self.interval
        while True:
            yield delay
            delay = min(delay * self.backoff, self.max_interval)


@dataclass(frozen=True)
class ProfilerSettings:
    gas_multiplier: int = DEFAULT_GAS_MULTIPLIER
    token_id: int = DEFAULT_TOKEN_ID
    solc_version: str | None = None
    concurrency: int = 1
    poll: ReceiptPollConfig = field(default_factory=ReceiptPollConfig)

    def __post_init__(self) -> None:
        if self.gas_multiplier < 1:
            raise ConfigurationError(f"gas_multiplier must be >= 1, got {self.gas_multiplier!r}")
        if self.token_id < 0:
            raise ConfigurationError(f"token_id must be non-negative, got {self.token_id!r}")
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {self.concurrency!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ProfilerSettings:
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = ReceiptPollConfig()
        poll = ReceiptPollConfig(
            timeout=_read(env, "RECEIPT_TIMEOUT", float, defaults.timeout),
            interval=_read(env, "RECEIPT_POLL_INTERVAL", float, defaults.interval),
            max_interval=_read(env, "RECEIPT_POLL_MAX_INTERVAL", float, defaults.max_interval),
            backoff=_read(env, "RECEIPT_POLL_BACKOFF", float, defaults.backoff),
        )
        return cls(
            gas_multiplier=_read(env, "GAS_MULTIPLIER", int, DEFAULT_GAS_MULTIPLIER),
            token_id=_read(env, "TOKEN_ID", int, DEFAULT_TOKEN_ID),
            solc_version=env.get("SOLC_VERSION") or None,
            concurrency=_read(env, "PROFILE_CONCURRENCY", int, 1),
            poll=poll,
        )

    def override(self, **changes: Any) -> ProfilerSettings:
        """Return a copy with the non-None ``changes`` applied.

        ``timeout`` is routed to the poll config.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        timeout = changes.pop("timeout", None)
        poll = replace(self.poll, timeout=timeout) if timeout is not None else self.poll
        return replace(self, poll=poll, **changes)


def _read(env: Mapping[str, str], name: str, cast: Callable[[str], Any], default: Any) -> Any:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a {cast.__name__}, got {raw!r}") from None
