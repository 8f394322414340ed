"""
Coercion of textual constructor arguments.

Contract specs come from the command line, so every constructor argument
arrives as a string. web3 encodes arguments strictly by ABI type, which
means "1200000" has to become 1200000 before it can feed a uint256.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any

from eth_utils import is_address, to_checksum_address
from hexbytes import HexBytes

from ..exceptions import ConstructorArgumentError

_ARRAY_SUFFIX = re.compile(r"^(?P<base>.+)\[(?P<size>\d*)\]$")
_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def constructor_inputs(abi: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    for entry in abi:
        if entry.get("type") == "constructor":
            return list(entry.get("inputs", []))
    return []


def coerce_constructor_args(abi: Sequence[dict[str, Any]], args: Sequence[Any]) -> list[Any]:
    """Convert ``args`` to the Python values the constructor ABI expects.

    Raises:
        ConstructorArgumentError: wrong number of arguments or a value that
            cannot represent its ABI type.
    """
    inputs = constructor_inputs(abi)
    if len(inputs) != len(args):
        signature = ", ".join(f"{i.get('type')} {i.get('name', '')}".strip() for i in inputs)
        raise ConstructorArgumentError(
            f"Constructor expects {len(inputs)} argument(s) ({signature}), got {len(args)}"
        )
    return [
        coerce_value(spec.get("type", ""), value, spec.get("name") or f"arg{index}")
        for index, (spec, value) in enumerate(zip(inputs, args))
    ]


def coerce_value(abi_type: str, value: Any, name: str = "value") -> Any:
    if not isinstance(value, str):
        return value

    array = _ARRAY_SUFFIX.match(abi_type)
    if array:
        try:
            items = json.loads(value)
        except json.JSONDecodeError:
            raise ConstructorArgumentError(f"{name}: expected a JSON list for {abi_type}, got {value!r}") from None
        if not isinstance(items, list):
            raise ConstructorArgumentError(f"{name}: expected a JSON list for {abi_type}, got {value!r}")
        size = array.group("size")
        if size and int(size) != len(items):
            raise ConstructorArgumentError(f"{name}: {abi_type} needs {size} items, got {len(items)}")
        base = array.group("base")
        return [coerce_value(base, item, name) for item in items]

    text = value.strip()
    try:
        if abi_type.startswith(("uint", "int")):
            return int(text, 0)
        if abi_type == "bool":
            lowered = text.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(text)
        if abi_type == "address":
            if not is_address(text):
                raise ValueError(text)
            return to_checksum_address(text)
        if abi_type.startswith("bytes"):
            return bytes(HexBytes(text))
    except ValueError:
        raise ConstructorArgumentError(f"{name}: {value!r} is not a valid {abi_type}") from None

    # string and anything web3 can take verbatim
    return value
