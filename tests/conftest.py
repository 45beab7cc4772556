from pathlib import Path

import boa
import pytest
from eth_utils import to_wei
from moccasin.config import get_or_initialize_config

from lottery.config import get_network
from lottery.env import Env
from lottery.mocks.vrf_coordinator_v2_mock import VRFCoordinatorV2Mock
from lottery.raffle import Raffle
from script.deploy import VRF_SUB_FUND_AMOUNT
from script.deploy_mock import BASE_FEE, GAS_PRICE_LINK

# plain pytest does not load moccasin.toml the way `mox test` does
get_or_initialize_config(Path(__file__).resolve().parent.parent)


@pytest.fixture(scope="session")
def network():
    """Local network settings from moccasin.toml"""
    return get_network("pyevm")


@pytest.fixture
def env(network):
    """A fresh host for each test; boa state is rolled back afterwards"""
    with boa.env.anchor():
        yield Env(chain_id=network.chain_id)


@pytest.fixture
def account(env):
    addr = env.generate_address()
    env.set_balance(addr, to_wei(1, "ether"))
    return addr


@pytest.fixture
def players(env):
    addrs = [env.generate_address() for _ in range(3)]
    for addr in addrs:
        env.set_balance(addr, to_wei(1, "ether"))
    return addrs


@pytest.fixture
def mock_vrf(env):
    """Deploy the mock VRF coordinator"""
    return env.deploy(VRFCoordinatorV2Mock, BASE_FEE, GAS_PRICE_LINK)


@pytest.fixture
def subscription_id(mock_vrf):
    sub_id = mock_vrf.create_subscription()
    mock_vrf.fund_subscription(sub_id, VRF_SUB_FUND_AMOUNT)
    return sub_id


@pytest.fixture
def deploy_raffle(env, mock_vrf, subscription_id, network):
    """Deploy a raffle wired to the mock coordinator; keyword arguments override the network config."""

    def deploy(entrance_fee=network.entrance_fee, interval=network.interval):
        raffle = env.deploy(
            Raffle,
            mock_vrf.address,
            entrance_fee,
            network.gas_lane,
            subscription_id,
            network.callback_gas_limit,
            interval,
        )
        mock_vrf.add_consumer(subscription_id, raffle.address)
        return raffle

    return deploy


@pytest.fixture
def raffle_contract(deploy_raffle):
    """Deploy the raffle contract"""
    return deploy_raffle()


@pytest.fixture
def entered_raffle(raffle_contract, env, account):
    """A raffle with one player whose interval has passed"""
    with env.prank(account):
        raffle_contract.enter_raffle(value=raffle_contract.get_entrance_fee())
    env.time_travel(raffle_contract.get_interval() + 1)
    return raffle_contract
