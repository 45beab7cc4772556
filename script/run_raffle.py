from lottery.config import get_network
from lottery.keeper import Keeper
from script.deploy import deploy


def run_raffle(env=None, network=None):
    """Deploy on a local network and play one full round."""
    network = network or get_network()
    if not network.development:
        print(f"{network.name} is a live network, rounds there are driven by automation and VRF")
        return None

    raffle = deploy(env, network)
    env = raffle.env
    mock = env.get_deployment("VRFCoordinatorV2Mock")

    raffle.enter_raffle(value=raffle.get_entrance_fee())
    print("You entered the raffle!")

    env.time_travel(raffle.get_interval() + 1)
    if not Keeper(raffle).tick():
        print("Upkeep not needed yet")
        return None
    request_id = raffle.get_pending_request_id()
    print(f"Randomness requested: {request_id}")

    mock.fulfill_random_words(request_id, raffle.address)
    winner = raffle.get_recent_winner()
    print(f"{winner} is the new winner!")
    return winner


def moccasin_main():
    return run_raffle()
