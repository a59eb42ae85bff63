"""Shared fixtures for the deployment tests.

- On-chain tests run against py-evm through :py:class:`web3.EthereumTesterProvider`

- The contract artifacts under ``fixtures/vault-project`` are hand-assembled bytecode
"""

import secrets
import shutil
from pathlib import Path

import pytest
from web3 import EthereumTesterProvider, Web3

from eth_deploy.hotwallet import HotWallet


@pytest.fixture
def tester_provider():
    # https://web3py.readthedocs.io/en/stable/examples.html#contract-unit-tests-in-python
    return EthereumTesterProvider()


@pytest.fixture
def web3(tester_provider):
    """Set up a local unit testing blockchain."""
    return Web3(tester_provider)


@pytest.fixture()
def deployer(web3) -> str:
    """Deploy account unlocked on the test node."""
    return web3.eth.accounts[0]


@pytest.fixture()
def hot_wallet(web3, deployer) -> HotWallet:
    """A private key deployer with 10 ETH for gas."""
    wallet = HotWallet.from_private_key("0x" + secrets.token_hex(32))
    tx_hash = web3.eth.send_transaction({"from": deployer, "to": wallet.address, "value": 10 * 10**18})
    web3.eth.wait_for_transaction_receipt(tx_hash)
    wallet.sync_nonce(web3)
    return wallet


@pytest.fixture()
def project_folder(tmp_path) -> Path:
    """A compiled Foundry project.

    Copied to a temporary folder, so tests can write deployment records next to it.
    """
    source = Path(__file__).parent / "fixtures" / "vault-project"
    target = tmp_path / "vault-project"
    shutil.copytree(source, target)
    return target


@pytest.fixture()
def deployment_file(project_folder) -> Path:
    return project_folder / "deployed.json"
