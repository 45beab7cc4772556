"""
Raffle contract.

Players buy in with at least the entrance fee while the raffle is OPEN. Once
the interval has passed and someone has entered, an automation caller runs
``perform_upkeep``, which closes entries and asks the VRF coordinator for a
random word. The coordinator later calls back ``raw_fulfill_random_words``;
the raffle pays the whole pot to ``players[word % len(players)]`` and opens
the next round.
"""

from enum import IntEnum
from typing import Optional

import structlog
from eth_utils import to_checksum_address

from lottery.env import Contract, external, view
from lottery.events import EnteredRaffle, RandomnessRequested, WinnerPicked
from lottery.exceptions import (
    ContractError,
    InsufficientPayment,
    NoRandomWords,
    NotOpen,
    PayoutFailed,
    PlayerIndexOutOfRange,
    Unauthorized,
    UnknownRequest,
    UpkeepNotNeeded,
)
from lottery.primitives import Address, Bytes32, Uint256

logger = structlog.get_logger(__name__)


class RaffleState(IntEnum):
    OPEN = 0
    CALCULATING = 1


class Raffle(Contract):
    REQUEST_CONFIRMATIONS = 3
    NUM_WORDS = 1

    EVENTS = (EnteredRaffle, RandomnessRequested, WinnerPicked)

    def __init__(
        self,
        vrf_coordinator: Address,
        entrance_fee: Uint256,
        gas_lane: Bytes32,
        subscription_id: Uint256,
        callback_gas_limit: Uint256,
        interval: Uint256,
    ):
        self.vrf_coordinator = to_checksum_address(vrf_coordinator)
        self.entrance_fee = entrance_fee
        self.gas_lane = gas_lane
        self.subscription_id = subscription_id
        self.callback_gas_limit = callback_gas_limit
        self.interval = interval

        self.state = RaffleState.OPEN
        self.players = []
        self.last_timestamp = self.env.timestamp
        self.recent_winner = None
        self.pending_request_id = None

    @external(payable=True)
    def enter_raffle(self):
        msg = self.env.msg
        if msg.value < self.entrance_fee:
            raise InsufficientPayment(msg.value, self.entrance_fee)
        if self.state != RaffleState.OPEN:
            raise NotOpen()

        self.players.append(msg.sender)
        self.emit(EnteredRaffle(msg.sender))
        logger.info("raffle.entered", raffle=self.address, player=msg.sender, value=msg.value)

    @view
    def check_upkeep(self, check_data: bytes = b"") -> tuple[bool, bytes]:
        """Whether a round can be closed now.

        True when the raffle is open, ``interval`` seconds have passed since
        the round started, and at least one player has paid in. Reads only.
        """
        return self._upkeep_needed(), b""

    def _upkeep_needed(self):
        is_open = self.state == RaffleState.OPEN
        time_passed = self.env.timestamp - self.last_timestamp >= self.interval
        has_players = len(self.players) > 0
        has_balance = self.balance > 0
        return is_open and time_passed and has_players and has_balance

    @external
    def perform_upkeep(self, perform_data: bytes = b""):
        # re-checked here, callers may act on a stale check_upkeep
        if not self._upkeep_needed():
            raise UpkeepNotNeeded(self.balance, len(self.players), self.state)

        self.state = RaffleState.CALCULATING
        coordinator = self.env.get_contract(self.vrf_coordinator)
        request_id = coordinator.request_random_words(
            self.gas_lane,
            self.subscription_id,
            self.REQUEST_CONFIRMATIONS,
            self.callback_gas_limit,
            self.NUM_WORDS,
        )
        self.pending_request_id = request_id
        self.emit(RandomnessRequested(request_id))
        logger.info(
            "raffle.upkeep_performed",
            raffle=self.address,
            request_id=request_id,
            players=len(self.players),
            balance=self.balance,
        )

    @external
    def raw_fulfill_random_words(self, request_id: Uint256, random_words: list[Uint256]):
        caller = self.env.msg.sender
        if caller != self.vrf_coordinator:
            raise Unauthorized(caller, self.vrf_coordinator)
        self._fulfill_random_words(request_id, random_words)

    def _fulfill_random_words(self, request_id, random_words):
        if self.state != RaffleState.CALCULATING or request_id != self.pending_request_id:
            raise UnknownRequest(request_id)
        if not random_words:
            raise NoRandomWords(request_id)

        winner = self.players[random_words[0] % len(self.players)]
        prize = self.balance

        self.recent_winner = winner
        self.players = []
        self.state = RaffleState.OPEN
        self.last_timestamp = self.env.timestamp
        self.pending_request_id = None

        try:
            self.env.transfer(self.address, winner, prize)
        except ContractError as exc:
            logger.error("raffle.payout_failed", raffle=self.address, winner=winner, prize=prize)
            raise PayoutFailed(winner, prize) from exc

        self.emit(WinnerPicked(winner))
        logger.info("raffle.winner_picked", raffle=self.address, winner=winner, prize=prize)

    @view
    def get_entrance_fee(self) -> Uint256:
        return self.entrance_fee

    @view
    def get_interval(self) -> Uint256:
        return self.interval

    @view
    def get_raffle_state(self) -> RaffleState:
        return self.state

    @view
    def get_recent_winner(self) -> Optional[Address]:
        return self.recent_winner

    @view
    def get_player(self, index: Uint256) -> Address:
        if not 0 <= index < len(self.players):
            raise PlayerIndexOutOfRange(index, len(self.players))
        return self.players[index]

    @view
    def get_number_of_players(self) -> Uint256:
        return len(self.players)

    @view
    def get_latest_timestamp(self) -> Uint256:
        return self.last_timestamp

    @view
    def has_pending_request(self) -> bool:
        return self.pending_request_id is not None

    @view
    def get_pending_request_id(self) -> Optional[Uint256]:
        return self.pending_request_id

    @view
    def get_request_confirmations(self) -> Uint256:
        return self.REQUEST_CONFIRMATIONS

    @view
    def get_num_words(self) -> Uint256:
        return self.NUM_WORDS

    @view
    def get_vrf_coordinator(self) -> Address:
        return self.vrf_coordinator

    @view
    def get_balance(self) -> Uint256:
        return self.balance
