"""
Local stand-in for the VRF v2 coordinator.

Subscriptions are created and funded directly (no LINK token), requests are
only fulfilled when a test or script calls ``fulfill_random_words``.
"""

from dataclasses import dataclass, field

import structlog
from eth_utils import keccak, to_checksum_address

from lottery.env import Contract, external, view
from lottery.events import (
    ConsumerAdded,
    ConsumerRemoved,
    RandomWordsFulfilled,
    RandomWordsRequested,
    SubscriptionCreated,
    SubscriptionFunded,
)
from lottery.exceptions import (
    ContractError,
    InsufficientBalance,
    InvalidConsumer,
    InvalidRandomWords,
    InvalidSubscription,
    MustBeSubOwner,
    NonexistentRequest,
    TooManyConsumers,
)
from lottery.primitives import Address, Bytes32, Uint256

logger = structlog.get_logger(__name__)

MAX_CONSUMERS = 100


@dataclass
class Subscription:
    owner: str
    balance: int = 0
    request_count: int = 0
    consumers: list = field(default_factory=list)


@dataclass(frozen=True)
class Request:
    sub_id: int
    callback_gas_limit: int
    num_words: int


def expand_random_word(request_id, index):
    """keccak256(abi.encode(request_id, index)) as an integer."""
    encoded = request_id.to_bytes(32, "big") + index.to_bytes(32, "big")
    return int.from_bytes(keccak(encoded), "big")


class VRFCoordinatorV2Mock(Contract):
    EVENTS = (
        SubscriptionCreated,
        SubscriptionFunded,
        ConsumerAdded,
        ConsumerRemoved,
        RandomWordsRequested,
        RandomWordsFulfilled,
    )

    def __init__(self, base_fee: Uint256, gas_price_link: Uint256):
        self.base_fee = base_fee
        self.gas_price_link = gas_price_link
        self.current_sub_id = 0
        self.next_request_id = 1
        self.next_pre_seed = 100
        self.subscriptions = {}
        self.requests = {}

    def _subscription(self, sub_id):
        try:
            return self.subscriptions[sub_id]
        except KeyError:
            raise InvalidSubscription(sub_id) from None

    def _owned_subscription(self, sub_id):
        sub = self._subscription(sub_id)
        if self.env.msg.sender != sub.owner:
            raise MustBeSubOwner(sub.owner)
        return sub

    @external
    def create_subscription(self) -> Uint256:
        self.current_sub_id += 1
        sub_id = self.current_sub_id
        self.subscriptions[sub_id] = Subscription(owner=self.env.msg.sender)
        self.emit(SubscriptionCreated(sub_id, self.env.msg.sender))
        return sub_id

    @external
    def fund_subscription(self, sub_id: Uint256, amount: Uint256):
        sub = self._subscription(sub_id)
        old_balance = sub.balance
        sub.balance += amount
        self.emit(SubscriptionFunded(sub_id, old_balance, sub.balance))

    @external
    def add_consumer(self, sub_id: Uint256, consumer: Address):
        sub = self._owned_subscription(sub_id)
        consumer = to_checksum_address(consumer)
        if consumer in sub.consumers:
            return
        if len(sub.consumers) >= MAX_CONSUMERS:
            raise TooManyConsumers()
        sub.consumers.append(consumer)
        self.emit(ConsumerAdded(sub_id, consumer))

    @external
    def remove_consumer(self, sub_id: Uint256, consumer: Address):
        sub = self._owned_subscription(sub_id)
        consumer = to_checksum_address(consumer)
        if consumer not in sub.consumers:
            raise InvalidConsumer(sub_id, consumer)
        sub.consumers.remove(consumer)
        self.emit(ConsumerRemoved(sub_id, consumer))

    @view
    def get_subscription(self, sub_id: Uint256) -> tuple[Uint256, Uint256, Address, list[Address]]:
        sub = self._subscription(sub_id)
        return sub.balance, sub.request_count, sub.owner, list(sub.consumers)

    @view
    def consumer_is_added(self, sub_id: Uint256, consumer: Address) -> bool:
        return to_checksum_address(consumer) in self._subscription(sub_id).consumers

    @external
    def request_random_words(
        self,
        key_hash: Bytes32,
        sub_id: Uint256,
        minimum_request_confirmations: Uint256,
        callback_gas_limit: Uint256,
        num_words: Uint256,
    ) -> Uint256:
        sub = self._subscription(sub_id)
        sender = self.env.msg.sender
        if sender not in sub.consumers:
            raise InvalidConsumer(sub_id, sender)

        request_id = self.next_request_id
        pre_seed = self.next_pre_seed
        self.next_request_id += 1
        self.next_pre_seed += 1
        sub.request_count += 1
        self.requests[request_id] = Request(sub_id, callback_gas_limit, num_words)

        self.emit(
            RandomWordsRequested(
                key_hash,
                request_id,
                pre_seed,
                sub_id,
                minimum_request_confirmations,
                callback_gas_limit,
                num_words,
                sender,
            )
        )
        logger.info("vrf.request", coordinator=self.address, request_id=request_id, consumer=sender)
        return request_id

    @external
    def fulfill_random_words(self, request_id: Uint256, consumer: Address) -> Uint256:
        return self._fulfill(request_id, consumer, [])

    @external
    def fulfill_random_words_with_override(
        self, request_id: Uint256, consumer: Address, words: list[Uint256]
    ) -> Uint256:
        return self._fulfill(request_id, consumer, words)

    def _fulfill(self, request_id, consumer, words):
        request = self.requests.get(request_id)
        if request is None:
            raise NonexistentRequest(request_id)

        if not words:
            words = [expand_random_word(request_id, i) for i in range(request.num_words)]
        elif len(words) != request.num_words:
            raise InvalidRandomWords()

        target = self.env.get_contract(consumer)
        # A failing callback is recorded, not propagated; its effects are already rolled back.
        try:
            target.raw_fulfill_random_words(request_id, list(words))
            success = True
        except ContractError as exc:
            logger.warning("vrf.callback_failed", request_id=request_id, consumer=consumer, error=str(exc))
            success = False

        payment = self.base_fee + self.gas_price_link * request.callback_gas_limit
        sub = self._subscription(request.sub_id)
        if sub.balance < payment:
            raise InsufficientBalance()
        sub.balance -= payment
        del self.requests[request_id]

        self.emit(RandomWordsFulfilled(request_id, request_id, payment, success))
        logger.info("vrf.fulfilled", request_id=request_id, payment=payment, success=success)
        return payment
