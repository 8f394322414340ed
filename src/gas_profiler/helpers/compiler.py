"""
Solidity compiler collaborator.

Compiles a source file with solc (through py-solc-x), resolving imports that
sit next to it, and returns the raw artifact of every contract found:

    {"<source_path>:<ContractName>": {"bytecode": "60806040...", "interface": [...abi...]}}

Entries are returned as solc produced them; checking that bytecode and ABI
are actually present is left to the deployer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from solcx import compile_files, install_solc
from solcx.exceptions import (
    SolcError,
    SolcInstallationError,
    SolcNotInstalled,
    UnsupportedVersionError,
)

from ..config.logging_config import component_logger
from ..exceptions import CompilationError, SourceNotFoundError

RawArtifacts = dict[str, dict[str, Any]]

# install_solc also raises requests/OS errors on failed downloads
_SOLC_SETUP_ERRORS = (SolcInstallationError, UnsupportedVersionError, SolcNotInstalled, ValueError, OSError)

_MISSING_SOURCE_MARKERS = ("not found", "No such file", "File outside of allowed directories")


class SolidityCompiler:
    """Compile Solidity sources into bytecode + ABI keyed by selector."""

    def __init__(
        self,
        solc_version: Optional[str] = None,
        optimize: bool = False,
        optimize_runs: int = 200,
        logger: Optional[logging.Logger] = None,
    ):
        self.solc_version = solc_version
        self.optimize = optimize
        self.optimize_runs = optimize_runs
        self.log = component_logger(logger, "compiler")
        self._installed = False

    def _ensure_solc(self) -> None:
        if self.solc_version is None or self._installed:
            return
        self.log.debug(f"Ensuring solc {self.solc_version} is installed")
        try:
            install_solc(self.solc_version)
        except _SOLC_SETUP_ERRORS as e:
            raise CompilationError(
                f"Cannot install solc {self.solc_version}: {e}", errors=[str(e)]
            ) from e
        self._installed = True

    def compile(self, source_path: str) -> RawArtifacts:
        """
        Compile ``source_path`` and return artifacts for every contract.

        Raises:
            SourceNotFoundError: The file or one of its imports is missing.
            CompilationError: solc rejected the source or is not installed.
        """
        source = Path(source_path)
        if not source.is_file():
            raise SourceNotFoundError(f"File not found: {source_path}", errors=[str(source_path)])

        self._ensure_solc()
        self.log.debug(f"Compiling {source_path}")

        kwargs: dict[str, Any] = {
            "output_values": ["abi", "bin"],
            "allow_paths": [str(source.resolve().parent)],
        }
        if self.solc_version is not None:
            kwargs["solc_version"] = self.solc_version
        if self.optimize:
            kwargs["optimize"] = True
            kwargs["optimize_runs"] = self.optimize_runs

        try:
            compiled = compile_files([str(source_path)], **kwargs)
        except SolcError as e:
            details = (getattr(e, "stderr_data", None) or str(e)).strip()
            if any(marker in details for marker in _MISSING_SOURCE_MARKERS):
                raise SourceNotFoundError(
                    f"Missing source while compiling {source_path}", errors=[details]
                ) from e
            raise CompilationError(f"Compilation of {source_path} failed", errors=[details]) from e
        except (SolcNotInstalled, UnsupportedVersionError) as e:
            raise CompilationError(f"solc is not available: {e}", errors=[str(e)]) from e

        artifacts = {
            self._selector(source, str(source_path), key): {
                "bytecode": data.get("bin") or None,
                "interface": data.get("abi"),
            }
            for key, data in compiled.items()
        }
        self.log.debug(f"Compiled {len(artifacts)} contract(s): {', '.join(artifacts)}")
        return artifacts

    @staticmethod
    def _selector(source: Path, given_path: str, key: str) -> str:
        """Re-key contracts of the main file under the path the caller used."""
        unit, _, name = key.rpartition(":")
        unit_path = Path(unit)
        target = source.resolve()
        if unit_path.resolve() == target or target.parts[-len(unit_path.parts):] == unit_path.parts:
            return f"{given_path}:{name}"
        return key
