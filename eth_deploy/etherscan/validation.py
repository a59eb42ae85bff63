"""Etherscan configuration validation."""

import logging

import requests

from web3 import Web3

from eth_deploy.etherscan.config import ETHERSCAN_API_URL, get_etherscan_url


logger = logging.getLogger(__name__)


class EtherscanConfigurationError(Exception):
    """Custom exception for Etherscan configuration errors."""


def check_etherscan_api_key(
    web3: Web3,
    api_key: str,
    timeout: float = 30,
):
    """Check if Etherscan API key should work.

    - Check using Etherscan v2 multichain support

    - Run before the deployment, so a bad key does not leave us
      with a deployed but unverified contract

    :raise EtherscanConfigurationError: if the API key is not valid or chain mismatch.
    """

    if not api_key:
        raise EtherscanConfigurationError("Etherscan API key is empty")

    chain_id = web3.eth.chain_id

    if get_etherscan_url(chain_id) is None:
        raise EtherscanConfigurationError(f"No Etherscan URL configured for chain ID {chain_id}")

    logger.info("Checking Etherscan API key for chain ID %s at %s...", chain_id, ETHERSCAN_API_URL)

    # https://docs.etherscan.io/etherscan-v2/api-endpoints/stats-1
    params = {
        "chainid": chain_id,
        "module": "getapilimit",
        "action": "getapilimit",
        "apikey": api_key,
    }
    resp = requests.get(ETHERSCAN_API_URL, params=params, timeout=timeout)

    if resp.status_code != 200:
        raise EtherscanConfigurationError(f"Failed to validate Etherscan API key for chain ID {chain_id}: {resp.status_code} - {resp.text}")

    data = resp.json()
    if data.get("status") != "1":
        raise EtherscanConfigurationError(f"Invalid Etherscan API key for chain ID {chain_id}: {data.get('result')}")
