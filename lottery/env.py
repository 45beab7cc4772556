"""
Contract host on top of titanoboa.

Balances, block time, accounts and ``prank`` live in a boa environment
(``boa.env`` unless another one is passed in). This module adds what boa
otherwise leaves to the EVM: Python contract storage, the ``msg`` frames of
nested calls, all-or-nothing calls, the event log and its subscribers, and
a registry of named deployments.
"""

import copy
import functools
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable

import boa
import structlog
from eth_utils import to_checksum_address, to_wei

from lottery.exceptions import (
    ContractNotFound,
    InsufficientFunds,
    NotPayable,
    TransferRejected,
)

logger = structlog.get_logger(__name__)

DEFAULT_CHAIN_ID = 31337
DEFAULT_EOA_BALANCE = to_wei(10_000, "ether")


@dataclass(frozen=True)
class Msg:
    sender: str
    value: int = 0


def external(fn=None, *, payable=False):
    """Mark a state-changing contract method.

    The call runs inside an anchor, ``value`` is moved from the caller to the
    contract before the body runs, and nested calls see the contract as
    ``msg.sender``.
    """

    def decorate(fn):
        @functools.wraps(fn)
        def wrapper(self, *args, value=0, **kwargs):
            return self.env.call(self, fn, args, kwargs, value=value, payable=payable)

        wrapper.__abi__ = "payable" if payable else "nonpayable"
        return wrapper

    if fn is None:
        return decorate
    return decorate(fn)


def view(fn):
    fn.__abi__ = "view"
    return fn


class Contract:
    """Base class for contracts hosted by an :class:`Env`.

    ``env`` and ``address`` are assigned by :meth:`Env.deploy` before the
    subclass ``__init__`` runs. Every other instance attribute is storage and
    takes part in rollbacks.
    """

    EVENTS: tuple = ()

    env: "Env"
    address: str

    def _snapshot(self):
        return {
            name: copy.deepcopy(val)
            for name, val in vars(self).items()
            if name not in ("env", "address")
        }

    def _restore(self, storage):
        for name in [n for n in vars(self) if n not in ("env", "address")]:
            delattr(self, name)
        vars(self).update(storage)

    @property
    def balance(self) -> int:
        return self.env.get_balance(self.address)

    def emit(self, event):
        self.env.log(self.address, event)

    def get_logs(self):
        return [event for address, event in self.env.last_logs if address == self.address]

    def receive(self, sender, amount):
        raise TransferRejected(self.address)

    def __repr__(self):
        return f"<{type(self).__name__} at {self.address}>"


class Env:
    def __init__(self, boa_env=None, chain_id: int = DEFAULT_CHAIN_ID, fund_eoa: bool = True):
        self.boa = boa_env or boa.env
        self.chain_id = chain_id
        self._contracts: dict[str, Contract] = {}
        self._deployments: dict[str, str] = {}
        self._log: list[tuple[str, Any]] = []
        self._subscribers: dict[type, list[Callable]] = {}
        self._callers: list[str] = []
        self._msgs: list[Msg] = []
        # (address, previous balance) for every balance written since the outermost anchor
        self._balance_journal: list[tuple[str, int]] = []
        self._anchors = 0
        self._depth = 0
        self.last_logs: list[tuple[str, Any]] = []
        if fund_eoa:
            self.boa.set_balance(self.eoa, DEFAULT_EOA_BALANCE)

    # accounts

    @property
    def eoa(self) -> str:
        return to_checksum_address(self.boa.eoa)

    def generate_address(self, alias=None) -> str:
        return to_checksum_address(self.boa.generate_address(alias))

    def set_balance(self, address, amount: int):
        address = to_checksum_address(address)
        if self._anchors:
            self._balance_journal.append((address, self.get_balance(address)))
        self.boa.set_balance(address, amount)

    def get_balance(self, address) -> int:
        return self.boa.get_balance(to_checksum_address(address))

    def transfer(self, sender, to, amount: int):
        """Move ``amount`` wei. A contract recipient's ``receive`` hook may reject it."""
        sender = to_checksum_address(sender)
        to = to_checksum_address(to)
        with self.anchor():
            self._move(sender, to, amount)
            recipient = self._contracts.get(to)
            if recipient is not None:
                self.call(recipient, type(recipient).receive, (sender, amount))

    def _move(self, sender, to, amount):
        if amount < 0:
            raise ValueError("amount must not be negative")
        balance = self.get_balance(sender)
        if balance < amount:
            raise InsufficientFunds(sender, balance, amount)
        self.set_balance(sender, balance - amount)
        self.set_balance(to, self.get_balance(to) + amount)

    # callers and time

    def prank(self, address):
        return self.boa.prank(to_checksum_address(address))

    @property
    def msg_sender(self) -> str:
        return self._callers[-1] if self._callers else self.eoa

    @property
    def msg(self) -> Msg:
        if not self._msgs:
            raise RuntimeError("msg is only available inside an external call")
        return self._msgs[-1]

    @property
    def timestamp(self) -> int:
        return self.boa.timestamp

    def time_travel(self, seconds: int):
        if seconds < 0:
            raise ValueError("cannot travel back in time")
        self.boa.time_travel(seconds=seconds)

    # contracts

    def deploy(self, contract_cls, *args, sender=None, **kwargs):
        sender = to_checksum_address(sender) if sender else self.msg_sender
        address = self.generate_address(contract_cls.__name__)

        contract = contract_cls.__new__(contract_cls)
        contract.env = self
        contract.address = address

        def construct(instance, *a, **kw):
            contract_cls.__init__(instance, *a, **kw)
            self._contracts[address] = instance
            return instance

        with self.prank(sender):
            self.call(contract, construct, args, kwargs)
        logger.info("contract.deployed", contract=contract_cls.__name__, address=address, sender=sender)
        return contract

    def get_contract(self, address) -> Contract:
        try:
            return self._contracts[to_checksum_address(address)]
        except (KeyError, ValueError):
            raise ContractNotFound(address) from None

    def register_deployment(self, name: str, contract: Contract):
        self._deployments[name] = contract.address

    def get_deployment(self, name: str) -> Contract:
        if name not in self._deployments:
            raise ContractNotFound(name)
        return self.get_contract(self._deployments[name])

    def call(self, contract, fn, args=(), kwargs=None, value=0, payable=False):
        """Run ``fn`` as an external call on ``contract`` from the current sender."""
        sender = self.msg_sender
        top_level = self._depth == 0
        log_start = len(self._log)
        self._depth += 1
        try:
            with self.anchor():
                self._callers.append(contract.address)
                self._msgs.append(Msg(sender, value))
                try:
                    if value:
                        if not payable:
                            raise NotPayable(fn.__name__)
                        self._move(sender, contract.address, value)
                    result = fn(contract, *args, **(kwargs or {}))
                finally:
                    self._msgs.pop()
                    self._callers.pop()
        except Exception:
            if top_level:
                self.last_logs = []
            raise
        finally:
            self._depth -= 1

        if top_level:
            self.last_logs = self._log[log_start:]
            self._notify(self.last_logs)
        return result

    @contextmanager
    def anchor(self):
        """Roll back balances, storage, deployments and logs if the block raises.

        Unlike ``boa.env.anchor()`` the changes are kept when the block
        completes.
        """
        journal_length = len(self._balance_journal)
        contracts = dict(self._contracts)
        storage = {address: c._snapshot() for address, c in self._contracts.items()}
        deployments = dict(self._deployments)
        log_length = len(self._log)
        self._anchors += 1
        try:
            yield
        except Exception:
            for address, balance in reversed(self._balance_journal[journal_length:]):
                self.boa.set_balance(address, balance)
            del self._balance_journal[journal_length:]
            self._contracts = contracts
            for address, saved in storage.items():
                contracts[address]._restore(saved)
            self._deployments = deployments
            del self._log[log_length:]
            raise
        finally:
            self._anchors -= 1
            if not self._anchors:
                self._balance_journal.clear()

    # events

    def log(self, address, event):
        self._log.append((address, event))

    def get_logs(self):
        return [event for _, event in self.last_logs]

    def subscribe(self, event_type, callback):
        """Call ``callback(event)`` for each committed event of ``event_type``."""
        self._subscribers.setdefault(event_type, []).append(callback)

        def unsubscribe():
            self._subscribers[event_type].remove(callback)

        return unsubscribe

    def _notify(self, entries):
        # runs after commit; subscriber errors are logged, never raised to the caller
        for _, event in entries:
            for callback in list(self._subscribers.get(type(event), ())):
                try:
                    callback(event)
                except Exception:
                    logger.exception("event.subscriber_failed", event=type(event).__name__)
