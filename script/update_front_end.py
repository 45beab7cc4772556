"""Push the raffle's address and ABI to the front-end project.

Only runs when ``UPDATE_FRONT_END`` is set. Addresses are kept per chain id;
an address already listed is not added twice.
"""

import json
import os
from pathlib import Path

from lottery.abi import build_abi
from lottery.raffle import Raffle

FRONT_END_ADDRESSES_FILE = Path("../nextjs-smartcontract-lottery-fcc/constants/contractAddresses.json")
FRONT_END_ABI_FILE = Path("../nextjs-smartcontract-lottery-fcc/constants/abi.json")


def update_contract_address(raffle, path):
    chain_id = str(raffle.env.chain_id)
    addresses = json.loads(path.read_text()) if path.exists() else {}
    known = addresses.setdefault(chain_id, [])
    if raffle.address not in known:
        known.append(raffle.address)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(addresses, indent=2))


def update_abi(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(build_abi(Raffle), indent=2))


def update_front_end(raffle, addresses_file=None, abi_file=None) -> bool:
    if not os.environ.get("UPDATE_FRONT_END"):
        return False
    addresses_file = Path(addresses_file or FRONT_END_ADDRESSES_FILE)
    abi_file = Path(abi_file or FRONT_END_ABI_FILE)

    print("Updating front end")
    update_contract_address(raffle, addresses_file)
    update_abi(abi_file)
    print(f"Front end updated: {addresses_file}, {abi_file}")
    return True
