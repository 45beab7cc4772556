"""Solidity-style ABI for a contract class, built from its decorated methods."""

import dataclasses
import inspect
import typing
from enum import IntEnum

from lottery.primitives import Address, Bytes32, Uint256

_TYPE_NAMES = {
    Address: "address",
    Uint256: "uint256",
    Bytes32: "bytes32",
    bytes: "bytes",
    bool: "bool",
    int: "int256",
    str: "string",
}


def abi_type(tp):
    if tp in _TYPE_NAMES:
        return _TYPE_NAMES[tp]
    if isinstance(tp, type) and issubclass(tp, IntEnum):
        return "uint8"

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is list:
        return f"{abi_type(args[0])}[]"
    if origin is typing.Union and type(None) in args:
        # Optional values read back as the zero value on chain
        (inner,) = [a for a in args if a is not type(None)]
        return abi_type(inner)
    raise TypeError(f"No ABI type for {tp!r}")


def _outputs(return_type):
    if return_type is None or return_type is type(None):
        return []
    if typing.get_origin(return_type) is tuple:
        return [{"name": "", "type": abi_type(t)} for t in typing.get_args(return_type)]
    return [{"name": "", "type": abi_type(return_type)}]


def _inputs(fn, hints):
    inputs = []
    for name, param in inspect.signature(fn).parameters.items():
        if name == "self":
            continue
        if name not in hints:
            raise TypeError(f"{fn.__qualname__}: parameter {name!r} needs a type hint")
        inputs.append({"name": name, "type": abi_type(hints[name])})
    return inputs


def function_abi(fn):
    hints = typing.get_type_hints(fn)
    return {
        "type": "function",
        "name": fn.__name__,
        "inputs": _inputs(fn, hints),
        "outputs": _outputs(hints.get("return")),
        "stateMutability": fn.__abi__,
    }


def event_abi(event_cls):
    hints = typing.get_type_hints(event_cls)
    return {
        "type": "event",
        "name": event_cls.__name__,
        "anonymous": False,
        "inputs": [
            {
                "name": f.name,
                "type": abi_type(hints[f.name]),
                "indexed": bool(f.metadata.get("indexed", False)),
            }
            for f in dataclasses.fields(event_cls)
        ],
    }


def build_abi(contract_cls):
    abi = []
    if "__init__" in vars(contract_cls):
        init = contract_cls.__init__
        abi.append(
            {
                "type": "constructor",
                "inputs": _inputs(init, typing.get_type_hints(init)),
                "stateMutability": "nonpayable",
            }
        )

    seen = set()
    for klass in reversed(contract_cls.__mro__):
        for name, member in vars(klass).items():
            if callable(member) and hasattr(member, "__abi__") and name not in seen:
                seen.add(name)
                abi.append(function_abi(getattr(contract_cls, name)))

    abi.extend(event_abi(event) for event in contract_cls.EVENTS)
    return abi
