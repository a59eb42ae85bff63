"""Deploy a contract, record its address and verify it.

The whole deployment is a linear run:

1. Resolve the network from the chain id
2. Get the deployer account
3. Deploy the contract with no constructor arguments and wait for the receipt
4. Save ``{name, address}`` to the deployment record file under the network name
5. On mainnet and Rinkeby, verify the source on Etherscan

There is no error handling: any failure propagates to the caller.
When run as a script, an uncaught exception makes the interpreter print
the traceback to stderr and exit with code 1.

To run:

.. code-block:: shell

    export JSON_RPC_URL=...
    export PRIVATE_KEY=...
    export ETHERSCAN_API_KEY=...
    export PROJECT_FOLDER=contracts/vault
    eth-deploy
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from web3 import HTTPProvider, Web3

from eth_deploy.abi import find_contract_artifact, get_contract
from eth_deploy.chain import Network, fetch_network, install_chain_middleware, is_verification_network
from eth_deploy.config import DeploymentConfig
from eth_deploy.deploy import deploy_contract
from eth_deploy.etherscan.config import get_etherscan_tx_link, get_etherscan_url
from eth_deploy.etherscan.validation import check_etherscan_api_key
from eth_deploy.foundry.forge import check_forge_verification_setup, verify_contract_with_forge
from eth_deploy.hotwallet import HotWallet
from eth_deploy.records import DeployInfo, save_deployed
from eth_deploy.utils import get_url_domain, setup_console_logging

logger = logging.getLogger(__name__)


#: Called with (address, contract name) after a deployment on a public network
Verifier = Callable[[str, str], object]


def create_web3(json_rpc_url: str) -> Web3:
    """Connect to a JSON-RPC node and install chain specific middleware."""
    web3 = Web3(HTTPProvider(json_rpc_url))
    install_chain_middleware(web3)
    logger.info("Connected to %s, chain id %d, block %d", get_url_domain(json_rpc_url), web3.eth.chain_id, web3.eth.block_number)
    return web3


def create_deployer(web3: Web3, private_key: str | None = None) -> Union[HotWallet, str]:
    """Get the account that pays for the deployment.

    :param private_key:
        0x prefixed hex private key.

        If not given, use the first account unlocked on the node,
        like a Hardhat or Anvil development node has.
    """
    if private_key:
        deployer = HotWallet.from_private_key(private_key)
        deployer.sync_nonce(web3)
        logger.info("Deployer %s, balance %s ETH", deployer.address, deployer.get_native_currency_balance(web3))
        return deployer

    accounts = web3.eth.accounts
    assert accounts, "PRIVATE_KEY not given and the node has no unlocked accounts"
    logger.info("Deployer is the node account %s", accounts[0])
    return accounts[0]


def create_forge_verifier(web3: Web3, config: DeploymentConfig) -> Verifier:
    """Verify with forge using the project and Etherscan settings of the config.

    Checks the forge setup right away, before anything gets deployed.
    """
    assert config.etherscan_api_key, "ETHERSCAN_API_KEY needed for the verification"
    check_forge_verification_setup(config.project_folder, config.contract_name)

    def _verify(address: str, contract_name: str):
        return verify_contract_with_forge(
            web3,
            config.project_folder,
            contract_name,
            address,
            etherscan_api_key=config.etherscan_api_key,
            verify_retries=config.verify_retries,
            verify_delay=config.verify_delay,
        )

    return _verify


def run_deployment(
    web3: Web3,
    deployer: Union[HotWallet, str],
    contract_name: str,
    project_folder: Path,
    deployment_file: Path,
    verifier: Optional[Verifier] = None,
    network: Optional[Network] = None,
    gas: int | None = None,
) -> DeployInfo:
    """Deploy a contract with no constructor arguments and record it.

    :param deployer:
        See :py:func:`create_deployer`

    :param contract_name:
        Name of the compiled contract, see :py:func:`eth_deploy.abi.find_contract_artifact`

    :param deployment_file:
        Deployment record JSON file

    :param verifier:
        Called after the record has been saved, only on mainnet and Rinkeby.

        Must be given when deploying there.

    :param network:
        Override the network resolved from the node chain id

    :param gas:
        Gas limit for the deployment transaction.

        Estimated if not given.

    :return:
        The recorded deployment
    """
    if network is None:
        network = fetch_network(web3)

    verify = is_verification_network(network.chain_id)
    if verify:
        assert verifier is not None, f"Deploying on {network.name} needs a verifier"

    artifact = find_contract_artifact(project_folder, contract_name)
    Contract = get_contract(web3, artifact)

    logger.info("Deploying %s from %s on %s", contract_name, artifact, network.name)
    contract = deploy_contract(web3, Contract, deployer, gas=gas)

    tx_hash = Web3.to_hex(contract.deployment_tx_hash)
    logger.info("%s tx: %s", contract_name, tx_hash)
    logger.info("%s deployed to: %s", contract_name, contract.address)
    if get_etherscan_url(network.chain_id):
        logger.info("See %s", get_etherscan_tx_link(network.chain_id, tx_hash))

    info = DeployInfo(name=contract_name, address=contract.address)
    logger.info("%s: %s", network.name, info.pformat())
    save_deployed(deployment_file, network.name, info)

    if verify:
        verifier(info.address, contract_name)
    else:
        logger.info("Source verification skipped on %s", network.name)

    return info


def main():
    setup_console_logging()

    config = DeploymentConfig.from_env()
    logger.info("Using %s", config)

    web3 = create_web3(config.json_rpc_url)
    network = fetch_network(web3)
    deployer = create_deployer(web3, config.private_key)

    verifier = None
    if is_verification_network(network.chain_id):
        check_etherscan_api_key(web3, config.etherscan_api_key)
        verifier = create_forge_verifier(web3, config)

    info = run_deployment(
        web3,
        deployer,
        config.contract_name,
        config.project_folder,
        config.deployment_file,
        verifier=verifier,
        network=network,
    )

    print(f"{network.name} : {info.pformat()}")
