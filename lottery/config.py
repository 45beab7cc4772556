"""
Raffle settings per network.

Networks are declared in ``moccasin.toml`` and read through
``moccasin.config``. The raffle's own values sit in each network's
``extra_data`` table; local networks fall back to ``DEVELOPMENT_DEFAULTS``.
``RAFFLE_NETWORK`` picks a network when moccasin has not activated one.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from eth_utils import decode_hex, to_checksum_address, to_wei
from moccasin.config import get_config

from lottery.env import DEFAULT_CHAIN_ID
from lottery.exceptions import ConfigError

DEVELOPMENT_NETWORKS = ("pyevm", "eravm", "anvil")

DEVELOPMENT_DEFAULTS = {
    "entrance_fee": "0.01",
    "gas_lane": "0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c",
    "callback_gas_limit": 500000,
    "interval": 30,
}


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int
    development: bool
    entrance_fee: int
    gas_lane: bytes
    callback_gas_limit: int
    interval: int
    vrf_coordinator: Optional[str] = None
    subscription_id: Optional[int] = None


def network_config(network) -> NetworkConfig:
    """Build a :class:`NetworkConfig` from a moccasin ``Network``."""
    name = network.name
    development = name in DEVELOPMENT_NETWORKS
    raw = dict(DEVELOPMENT_DEFAULTS) if development else {}
    raw.update(network.extra_data or {})

    chain_id = network.chain_id or (DEFAULT_CHAIN_ID if development else None)
    if chain_id is None:
        raise ConfigError(f"Network {name!r} needs a chain_id")

    try:
        config = NetworkConfig(
            name=name,
            chain_id=int(chain_id),
            development=development,
            entrance_fee=to_wei(Decimal(str(raw["entrance_fee"])), "ether"),
            gas_lane=decode_hex(raw["gas_lane"]),
            callback_gas_limit=int(raw["callback_gas_limit"]),
            interval=int(raw["interval"]),
            vrf_coordinator=to_checksum_address(raw["vrf_coordinator"]) if "vrf_coordinator" in raw else None,
            subscription_id=int(raw["subscription_id"]) if "subscription_id" in raw else None,
        )
    except KeyError as exc:
        raise ConfigError(f"Network {name!r} is missing {exc.args[0]!r}") from None
    except ValueError as exc:
        raise ConfigError(f"Network {name!r}: {exc}") from None

    if len(config.gas_lane) != 32:
        raise ConfigError(f"Network {name!r}: gas_lane must be 32 bytes")
    if not development and (config.vrf_coordinator is None or config.subscription_id is None):
        raise ConfigError(f"Live network {name!r} needs vrf_coordinator and subscription_id")
    return config


def get_network(name=None) -> NetworkConfig:
    """Settings for ``name``, else ``RAFFLE_NETWORK``, else moccasin's active network."""
    config = get_config()
    name = name or os.environ.get("RAFFLE_NETWORK")
    network = config.networks.get_network(name) if name else config.get_active_network()
    return network_config(network)
