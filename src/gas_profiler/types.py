"""Value types shared by the profiling pipeline."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import DuplicateOperationError

DEPLOYMENT = "deployment"


@dataclass(frozen=True)
class ContractSpec:
    """One contract to profile.

    ``selector`` is ``<source_path>:<ContractName>`` and identifies a single
    contract inside a possibly multi-contract source file.
    """

    source_path: str
    selector: str
    constructor_args: tuple[Any, ...] = ()

    @property
    def contract_name(self) -> str:
        return self.selector.rsplit(":", 1)[-1]


@dataclass(frozen=True)
class CompiledArtifact:
    bytecode: str
    interface: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.bytecode.startswith("0x"):
            object.__setattr__(self, "bytecode", "0x" + self.bytecode)


class GasReport(Mapping[str, int]):
    """Immutable, insertion-ordered mapping of operation name to gas used.

    Each pipeline stage derives a new report with exactly one extra key via
    :meth:`with_gas`; existing keys are never rewritten.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, int] | None = None):
        self._entries: dict[str, int] = {}
        for operation, gas in (entries or {}).items():
            self._entries[operation] = _validate_gas(operation, gas)

    @classmethod
    def seeded(cls, deployment_gas: int) -> GasReport:
        return cls({DEPLOYMENT: deployment_gas})

    def with_gas(self, operation: str, gas: int) -> GasReport:
        if operation in self._entries:
            raise DuplicateOperationError(
                f"Operation {operation!r} is already recorded ({self._entries[operation]} gas)"
            )
        entries = dict(self._entries)
        entries[operation] = _validate_gas(operation, gas)
        return GasReport(entries)

    def operations(self) -> list[str]:
        return list(self._entries)

    def as_dict(self) -> dict[str, int]:
        return dict(self._entries)

    def __getitem__(self, operation: str) -> int:
        return self._entries[operation]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GasReport):
            return list(self._entries.items()) == list(other._entries.items())
        if isinstance(other, Mapping):
            return dict(self._entries) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._entries.items()))

    def __repr__(self) -> str:
        return f"GasReport({self._entries!r})"


def _validate_gas(operation: str, gas: Any) -> int:
    if isinstance(gas, bool) or not isinstance(gas, int) or gas < 0:
        raise ValueError(f"Gas for {operation!r} must be a non-negative integer, got {gas!r}")
    return gas
