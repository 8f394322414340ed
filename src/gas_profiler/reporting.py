"""Rendering of gas reports as a table or JSON."""

from __future__ import annotations

import json
from collections.abc import Sequence

from tabulate import tabulate

from .types import ContractSpec, GasReport

TABLE_TITLE = "Gas spent per contract method"
NO_RESULTS = "No results to display"

Results = Sequence[tuple[ContractSpec, GasReport]]


def render_table(results: Results, tablefmt: str = "grid") -> str:
    """One row per contract, one column per operation (sorted by name)."""
    if not results:
        return NO_RESULTS
    operations = sorted({op for _, report in results for op in report})
    headers = [TABLE_TITLE] + operations
    rows = [
        [spec.selector] + [report.get(op, "") for op in operations]
        for spec, report in results
    ]
    return tabulate(rows, headers=headers, tablefmt=tablefmt)


def render_json(results: Results, indent: int | None = None) -> str:
    """``{selector: {operation: gas}}``, operations in execution order."""
    payload = {spec.selector: report.as_dict() for spec, report in results}
    return json.dumps(payload, indent=indent)


RENDERERS = {
    "table": render_table,
    "json": render_json,
}
