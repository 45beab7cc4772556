import pytest

from lottery.events import ConsumerAdded, RandomWordsRequested, SubscriptionCreated
from lottery.exceptions import (
    InsufficientBalance,
    InvalidConsumer,
    InvalidRandomWords,
    InvalidSubscription,
    MustBeSubOwner,
    NonexistentRequest,
)
from lottery.mocks.vrf_coordinator_v2_mock import expand_random_word
from script.deploy_mock import BASE_FEE, GAS_PRICE_LINK


def test_subscriptions_are_numbered_from_one(mock_vrf, env):
    assert mock_vrf.create_subscription() == 1
    assert mock_vrf.get_logs() == [SubscriptionCreated(1, env.eoa)]
    assert mock_vrf.create_subscription() == 2


def test_fund_subscription(mock_vrf, env):
    sub_id = mock_vrf.create_subscription()
    mock_vrf.fund_subscription(sub_id, 100)
    mock_vrf.fund_subscription(sub_id, 50)
    balance, request_count, owner, consumers = mock_vrf.get_subscription(sub_id)
    assert (balance, request_count, owner, consumers) == (150, 0, env.eoa, [])


def test_unknown_subscription(mock_vrf):
    with pytest.raises(InvalidSubscription):
        mock_vrf.fund_subscription(42, 1)
    with pytest.raises(InvalidSubscription):
        mock_vrf.get_subscription(42)


def test_add_consumer_only_owner(mock_vrf, subscription_id, env, account):
    consumer = env.generate_address()
    with env.prank(account):
        with pytest.raises(MustBeSubOwner):
            mock_vrf.add_consumer(subscription_id, consumer)

    mock_vrf.add_consumer(subscription_id, consumer)
    assert mock_vrf.get_logs() == [ConsumerAdded(subscription_id, consumer)]
    assert mock_vrf.consumer_is_added(subscription_id, consumer)


def test_add_consumer_is_idempotent(mock_vrf, subscription_id, env):
    consumer = env.generate_address()
    mock_vrf.add_consumer(subscription_id, consumer)
    mock_vrf.add_consumer(subscription_id, consumer.lower())
    assert mock_vrf.get_subscription(subscription_id)[3] == [consumer]
    assert mock_vrf.get_logs() == []


def test_remove_consumer(mock_vrf, subscription_id, env):
    consumer = env.generate_address()
    with pytest.raises(InvalidConsumer):
        mock_vrf.remove_consumer(subscription_id, consumer)
    mock_vrf.add_consumer(subscription_id, consumer)
    mock_vrf.remove_consumer(subscription_id, consumer)
    assert not mock_vrf.consumer_is_added(subscription_id, consumer)


def test_request_requires_consumer(mock_vrf, subscription_id, network, account):
    with mock_vrf.env.prank(account):
        with pytest.raises(InvalidConsumer):
            mock_vrf.request_random_words(network.gas_lane, subscription_id, 3, 100_000, 1)


def test_request_ids_increment(mock_vrf, subscription_id, network, env, account):
    mock_vrf.add_consumer(subscription_id, account)
    with env.prank(account):
        first = mock_vrf.request_random_words(network.gas_lane, subscription_id, 3, 100_000, 1)
        second = mock_vrf.request_random_words(network.gas_lane, subscription_id, 3, 100_000, 2)

    assert (first, second) == (1, 2)
    (event,) = mock_vrf.get_logs()
    assert isinstance(event, RandomWordsRequested)
    assert event.request_id == 2
    assert event.num_words == 2
    assert event.sender == account


def test_fulfill_charges_subscription(raffle_contract, mock_vrf, subscription_id, env, account, network):
    with env.prank(account):
        raffle_contract.enter_raffle(value=raffle_contract.get_entrance_fee())
    env.time_travel(raffle_contract.get_interval() + 1)
    raffle_contract.perform_upkeep(b"")
    request_id = raffle_contract.get_pending_request_id()
    starting_balance = mock_vrf.get_subscription(subscription_id)[0]

    payment = mock_vrf.fulfill_random_words(request_id, raffle_contract.address)

    assert payment == BASE_FEE + GAS_PRICE_LINK * network.callback_gas_limit
    assert mock_vrf.get_subscription(subscription_id)[0] == starting_balance - payment
    with pytest.raises(NonexistentRequest):
        mock_vrf.fulfill_random_words(request_id, raffle_contract.address)


def test_fulfill_with_underfunded_subscription_reverts(deploy_raffle, mock_vrf, env, account):
    sub_id = mock_vrf.create_subscription()
    raffle = deploy_raffle()
    raffle.subscription_id = sub_id
    mock_vrf.add_consumer(sub_id, raffle.address)

    with env.prank(account):
        raffle.enter_raffle(value=raffle.get_entrance_fee())
    env.time_travel(raffle.get_interval() + 1)
    raffle.perform_upkeep(b"")
    request_id = raffle.get_pending_request_id()

    with pytest.raises(InsufficientBalance):
        mock_vrf.fulfill_random_words(request_id, raffle.address)

    # the winner payout is rolled back with the failed fulfillment
    assert raffle.get_recent_winner() is None
    assert raffle.get_number_of_players() == 1
    assert request_id in mock_vrf.requests


def test_override_must_match_num_words(entered_raffle, mock_vrf):
    entered_raffle.perform_upkeep(b"")
    request_id = entered_raffle.get_pending_request_id()
    with pytest.raises(InvalidRandomWords):
        mock_vrf.fulfill_random_words_with_override(request_id, entered_raffle.address, [1, 2])


def test_expand_random_word_is_deterministic():
    assert expand_random_word(1, 0) == expand_random_word(1, 0)
    assert expand_random_word(1, 0) != expand_random_word(1, 1)
    assert expand_random_word(1, 0) != expand_random_word(2, 0)
    assert 0 <= expand_random_word(1, 0) < 2**256
