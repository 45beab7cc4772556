from lottery.env import Env, external, view
from lottery.raffle import Raffle, RaffleState
from lottery.mocks.vrf_coordinator_v2_mock import VRFCoordinatorV2Mock

__all__ = ["Env", "Raffle", "RaffleState", "VRFCoordinatorV2Mock", "external", "view"]
