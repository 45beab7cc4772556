"""Events emitted by the raffle and the VRF coordinator mock.

Each event is a frozen dataclass; fields marked ``indexed`` are topics in the
generated ABI.
"""

from dataclasses import dataclass, field

from lottery.primitives import Address, Bytes32, Uint256

INDEXED = {"indexed": True}


@dataclass(frozen=True)
class EnteredRaffle:
    player: Address = field(metadata=INDEXED)


@dataclass(frozen=True)
class RandomnessRequested:
    request_id: Uint256 = field(metadata=INDEXED)


@dataclass(frozen=True)
class WinnerPicked:
    winner: Address = field(metadata=INDEXED)


@dataclass(frozen=True)
class SubscriptionCreated:
    sub_id: Uint256 = field(metadata=INDEXED)
    owner: Address


@dataclass(frozen=True)
class SubscriptionFunded:
    sub_id: Uint256 = field(metadata=INDEXED)
    old_balance: Uint256
    new_balance: Uint256


@dataclass(frozen=True)
class ConsumerAdded:
    sub_id: Uint256 = field(metadata=INDEXED)
    consumer: Address


@dataclass(frozen=True)
class ConsumerRemoved:
    sub_id: Uint256 = field(metadata=INDEXED)
    consumer: Address


@dataclass(frozen=True)
class RandomWordsRequested:
    key_hash: Bytes32 = field(metadata=INDEXED)
    request_id: Uint256
    pre_seed: Uint256
    sub_id: Uint256 = field(metadata=INDEXED)
    minimum_request_confirmations: Uint256
    callback_gas_limit: Uint256
    num_words: Uint256
    sender: Address = field(metadata=INDEXED)


@dataclass(frozen=True)
class RandomWordsFulfilled:
    request_id: Uint256 = field(metadata=INDEXED)
    output_seed: Uint256
    payment: Uint256
    success: bool
