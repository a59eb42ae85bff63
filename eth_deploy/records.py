"""Deployment record store.

Keep track of deployed contract addresses per network in a JSON file:

.. code-block:: json

    {
        "mainnet": {
            "RewardProgramVault": "0x5FbDB2315678afecb367f032d93F642f64180aa3"
        },
        "local": {
            "RewardProgramVault": "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
        }
    }

Deploying the same contract again on the same network overwrites its address.
"""

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from pprint import pformat

from eth_typing import HexAddress
from filelock import FileLock
from web3 import Web3

logger = logging.getLogger(__name__)


#: Default record file name within the project folder
DEFAULT_DEPLOYMENT_FILE = "deployed.json"

#: Seconds to wait for another deployment to release the record file
DEFAULT_LOCK_TIMEOUT = 60


@dataclass(slots=True, frozen=True)
class DeployInfo:
    """A deployed contract written to the record store."""

    #: Contract name, e.g. ``RewardProgramVault``
    name: str

    #: Checksummed contract address
    address: HexAddress

    def __post_init__(self):
        assert self.name, "Contract name missing"
        assert Web3.is_checksum_address(self.address), f"Not a checksummed address: {self.address}"

    def pformat(self) -> str:
        return pformat(asdict(self))


@contextmanager
def _locked(path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT):
    """Hold a lock file next to the record file while reading and writing it.

    :raise filelock.Timeout:
        If another deployment is stuck with the lock.
    """
    os.makedirs(path.parent, exist_ok=True)
    lock = FileLock(path.parent / (path.name + ".lock"), timeout=timeout)
    if lock.is_locked:
        logger.info("Deployment file %s locked for writing, waiting %f seconds", path, timeout)
    with lock:
        yield


def _read(path: Path) -> dict[str, dict[str, str]]:
    if not path.exists():
        return {}
    with open(path, "rt", encoding="utf-8") as f:
        data = json.load(f)
    assert type(data) == dict, f"Deployment file {path} is not a JSON object"
    return data


def save_deployed(path: Path | str, network_name: str, info: DeployInfo):
    """Record a deployed contract under a network section.

    - Creates the file and the network section if they do not exist

    - Overwrites the previous address of the same contract name on the same network

    - Leaves other contracts and networks untouched

    :param path:
        Deployment record JSON file

    :param network_name:
        See :py:func:`eth_deploy.chain.get_network_name`

    :param info:
        The deployed contract
    """
    path = Path(path)
    assert isinstance(info, DeployInfo), f"Expected DeployInfo, got {type(info)}"
    assert network_name, "Network name missing"

    with _locked(path.absolute()):
        data = _read(path)
        section = data.setdefault(network_name, {})
        previous = section.get(info.name)
        if previous and previous != info.address:
            logger.info("Replacing %s %s address %s with %s", network_name, info.name, previous, info.address)
        section[info.name] = info.address

        with open(path, "wt", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")

    logger.info("Saved %s deployment %s to %s", network_name, info.name, path)


def load_deployed(path: Path | str, network_name: str | None = None) -> dict:
    """Read the deployment records.

    :param network_name:
        Return only this network's contract name -> address mapping.

        Empty dict if nothing has been deployed on the network yet.

    :return:
        All records, or one network section
    """
    path = Path(path)
    if path.exists():
        with _locked(path.absolute()):
            data = _read(path)
    else:
        data = {}

    if network_name is None:
        return data

    return data.get(network_name, {})


def get_deployed_address(path: Path | str, network_name: str, contract_name: str) -> HexAddress | None:
    """Get the recorded address of a contract, or ``None`` if it has not been deployed."""
    return load_deployed(path, network_name).get(contract_name)
