from eth_utils import to_wei

from lottery.config import get_network
from lottery.env import Env
from lottery.mocks.vrf_coordinator_v2_mock import VRFCoordinatorV2Mock

BASE_FEE = to_wei("0.25", "ether")  # premium, 0.25 LINK per request
GAS_PRICE_LINK = 10**9  # LINK per gas


def deploy_mock(env, network) -> VRFCoordinatorV2Mock:
    if not network.development:
        print(f"{network.name} is a live network, no mocks needed")
        return None
    print("Local network detected, deploying mocks...")
    mock = env.deploy(VRFCoordinatorV2Mock, BASE_FEE, GAS_PRICE_LINK)
    env.register_deployment("VRFCoordinatorV2Mock", mock)
    print(f"Mock VRF Coordinator at: {mock.address}")
    return mock


def moccasin_main() -> VRFCoordinatorV2Mock:
    network = get_network()
    return deploy_mock(Env(chain_id=network.chain_id), network)
