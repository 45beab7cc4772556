import os

from eth_utils import to_wei

from lottery.config import get_network
from lottery.env import Env
from lottery.exceptions import ConfigError, ContractNotFound
from lottery.raffle import Raffle
from script.deploy_mock import deploy_mock
from script.update_front_end import update_front_end
from script.verify import verify

VRF_SUB_FUND_AMOUNT = to_wei(2, "ether")


def deploy_raffle(env, network) -> Raffle:
    if network.development:
        mock = env.get_deployment("VRFCoordinatorV2Mock")
        vrf_coordinator = mock.address
        subscription_id = mock.create_subscription()
        mock.fund_subscription(subscription_id, VRF_SUB_FUND_AMOUNT)
        print(f"Created and funded subscription {subscription_id}")
    else:
        vrf_coordinator = network.vrf_coordinator
        subscription_id = network.subscription_id
        try:
            env.get_contract(vrf_coordinator)
        except ContractNotFound:
            raise ConfigError(f"No VRF coordinator is hosted at {vrf_coordinator} on {network.name}") from None

    args = (
        vrf_coordinator,
        network.entrance_fee,
        network.gas_lane,
        subscription_id,
        network.callback_gas_limit,
        network.interval,
    )
    raffle = env.deploy(Raffle, *args)
    env.register_deployment("Raffle", raffle)
    print(f"Raffle deployed at: {raffle.address}")

    # the mock only serves requests from registered consumers
    if network.development:
        print("Adding consumer...")
        mock.add_consumer(subscription_id, raffle.address)
        print("Consumer successfully added!")

    api_key = os.environ.get("ETHERSCAN_API_KEY")
    if not network.development and api_key:
        verify(raffle, args, network, api_key)
    return raffle


def deploy(env=None, network=None) -> Raffle:
    network = network or get_network()
    env = env or Env(chain_id=network.chain_id)

    deploy_mock(env, network)
    raffle = deploy_raffle(env, network)
    update_front_end(raffle)
    return raffle


def moccasin_main() -> Raffle:
    return deploy()
