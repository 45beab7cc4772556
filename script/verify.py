"""Submit a deployed contract's source and constructor arguments to Etherscan."""

import inspect
import sys

import httpx
import structlog
from eth_abi import encode

from lottery.abi import build_abi

logger = structlog.get_logger(__name__)

ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"


def constructor_arguments(contract_cls, args) -> str:
    """ABI-encoded constructor arguments as hex, without the 0x prefix."""
    (constructor,) = [entry for entry in build_abi(contract_cls) if entry["type"] == "constructor"]
    types = [param["type"] for param in constructor["inputs"]]
    return encode(types, list(args)).hex()


def verify(contract, args, network, api_key, client=None) -> bool:
    if client is None:
        with httpx.Client(timeout=30) as client:
            return verify(contract, args, network, api_key, client)

    print("Verifying contract...")
    contract_cls = type(contract)
    params = {
        "chainid": network.chain_id,
        "module": "contract",
        "action": "verifysourcecode",
        "apikey": api_key,
    }
    data = {
        "contractaddress": contract.address,
        "contractname": contract_cls.__name__,
        "sourceCode": inspect.getsource(sys.modules[contract_cls.__module__]),
        # sic, the explorer API spells it this way
        "constructorArguements": constructor_arguments(contract_cls, args),
    }
    try:
        response = client.post(ETHERSCAN_API_URL, params=params, data=data)
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPError as exc:
        logger.error("verify.request_failed", address=contract.address, error=str(exc))
        return False

    result = str(body.get("result", ""))
    if body.get("status") == "1":
        logger.info("verify.submitted", address=contract.address, guid=result)
        return True
    if "already verified" in result.lower():
        print("Already verified!")
        return True
    logger.error("verify.rejected", address=contract.address, result=result)
    return False
