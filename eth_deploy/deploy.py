"""Deploy any precompiled contract.

See :py:mod:`eth_deploy.abi` how compiled artifacts are located.
"""

import logging
from typing import Type, Union

from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from eth_deploy.hotwallet import HotWallet
from eth_deploy.tx import get_tx_broadcast_data

logger = logging.getLogger(__name__)


class ContractDeploymentFailed(Exception):
    """Did not get successful tx receipt from a deployment."""

    def __init__(self, tx_hash, msg):
        super().__init__(msg)
        self.tx_hash = tx_hash


def deploy_contract(
    web3: Web3,
    contract: Type[Contract],
    deployer: Union[str, LocalAccount, HotWallet],
    *constructor_args,
    gas: int = None,
    confirm=True,
) -> Contract | HexBytes:
    """Deploys a new contract from a contract factory.

    Example:

    .. code-block:: python

        RewardProgramVault = get_contract(web3, find_contract_artifact(project_folder, "RewardProgramVault"))
        vault = deploy_contract(web3, RewardProgramVault, deployer)
        print(f"Deployed at {vault.address}, tx {vault.deployment_tx_hash.hex()}")

    :param web3:
        Web3 instance

    :param contract:
        Contract proxy class, see :py:func:`eth_deploy.abi.get_contract`

    :param deployer:
        Deployer account.

        Either an address unlocked on the node, :py:class:`LocalAccount`
        or :py:class:`HotWallet`. The latter two sign locally.

    :param constructor_args:
        Other arguments to pass to the contract's constructor

    :param gas:
        Gas limit.

        If not set tries to estimate and probably may hit reverts when doing so.

    :param confirm:
        Wait for the deployment receipt.

    :raise ContractDeploymentFailed:
        In the case the deployment transaction reverted.

    :return:
        Contract proxy instance or tx_hash if confirm=false.
    """

    if isinstance(deployer, (HotWallet, LocalAccount)):
        tx_params = {
            "from": deployer.address,
            "chainId": web3.eth.chain_id,
        }
        if gas:
            tx_params["gas"] = gas
        tx_data = contract.constructor(*constructor_args).build_transaction(tx_params)

        if isinstance(deployer, HotWallet):
            signed_tx = deployer.sign_transaction_with_new_nonce(tx_data)
        else:
            tx_data["nonce"] = web3.eth.get_transaction_count(deployer.address)
            signed_tx = deployer.sign_transaction(tx_data)

        tx_hash = web3.eth.send_raw_transaction(get_tx_broadcast_data(signed_tx))
    else:
        # Delegate signing to the node
        assert type(deployer) == str, f"Unsupported deployer: {deployer}"
        tx_params = {"from": deployer}
        if gas:
            tx_params["gas"] = gas
        tx_hash = contract.constructor(*constructor_args).transact(tx_params)

    logger.info("Deployment transaction %s broadcasted", tx_hash.hex())

    if not confirm:
        return tx_hash

    tx_receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    if tx_receipt["status"] != 1:
        raise ContractDeploymentFailed(tx_hash, f"Contract deployment failed with args {constructor_args}, tx hash is {tx_hash.hex()}")

    instance = contract(address=tx_receipt["contractAddress"])
    instance.deployment_tx_hash = HexBytes(tx_hash)
    return instance
