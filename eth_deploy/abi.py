"""Contract artifact loading.

Find compiler artifacts produced by Forge or Hardhat by the contract name
and construct :py:class:`web3.contract.Contract` types out of them.
The loaded JSON files are cached for the speedup.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Type

from web3 import Web3
from web3.contract.contract import Contract

# How big is our artifact cache
_CACHE_SIZE = 64

#: Forge puts artifacts to ``out/<Contract>.sol/<Contract>.json``
FORGE_OUT_FOLDER = "out"

#: Hardhat puts artifacts to ``artifacts/contracts/**/<Contract>.sol/<Contract>.json``
HARDHAT_ARTIFACTS_FOLDER = "artifacts"


class ContractArtifactNotFound(Exception):
    """Could not find a compiled artifact for a contract name."""


def find_contract_artifact(project_folder: Path, contract_name: str) -> Path:
    """Look up a compiled contract artifact by its name.

    Works like Hardhat's ``getContractFactory(name)``: the caller does not need
    to know which source file the contract lives in.

    - Foundry layout is tried first: ``out/<Name>.sol/<Name>.json``,
      then any ``out/<File>.sol/<Name>.json`` when the source file is named differently

    - Then Hardhat layout: ``artifacts/**/<Name>.sol/<Name>.json``,
      skipping ``.dbg.json`` debug files

    :param project_folder:
        Foundry or Hardhat project root

    :param contract_name:
        Smart contract name, e.g. ``RewardProgramVault``

    :raise ContractArtifactNotFound:
        If the project has not been compiled or the contract name is wrong
    """
    assert isinstance(project_folder, Path), f"Got non-Path project folder: {type(project_folder)} {project_folder}"
    assert type(contract_name) == str

    forge_artifact = project_folder / FORGE_OUT_FOLDER / f"{contract_name}.sol" / f"{contract_name}.json"
    if forge_artifact.exists():
        return forge_artifact

    for folder in (FORGE_OUT_FOLDER, HARDHAT_ARTIFACTS_FOLDER):
        artifact_folder = project_folder / folder
        if artifact_folder.exists():
            candidates = sorted(artifact_folder.rglob(f"{contract_name}.json"))
            if candidates:
                return candidates[0]

    raise ContractArtifactNotFound(f"No compiled artifact for contract {contract_name} in {project_folder.resolve()}. Did you run forge build or hardhat compile?")


@lru_cache(maxsize=_CACHE_SIZE)
def read_artifact(path: Path) -> dict:
    """Read a compiler artifact JSON file.

    Any results are cached.

    :return:
        Full contract interface, including ``abi`` and ``bytecode``.
    """
    with open(path, "rt", encoding="utf-8") as f:
        return json.load(f)


def get_contract(
    web3: Web3,
    path: Path,
    bytecode: Optional[str] = None,
) -> Type[Contract]:
    """Get Contract proxy class from a compiler artifact.

    Example:

    .. code-block:: python

        artifact = find_contract_artifact(project_folder, "RewardProgramVault")
        RewardProgramVault = get_contract(web3, artifact)

    :param web3:
        Web3 instance

    :param path:
        Forge or Hardhat artifact JSON file

    :param bytecode:
        Override bytecode payload for the contract

    :return:
        Contract proxy class
    """
    contract_interface = read_artifact(path)

    abi = contract_interface["abi"]

    if bytecode is None:
        bytecode = contract_interface.get("bytecode")

    if type(bytecode) == dict:
        # Forge
        # Contains keys object, sourceMap, linkReferences
        bytecode = bytecode["object"]
    else:
        # Hardhat / solc
        # Bytecode hex is directly in the key.
        pass

    assert bytecode and bytecode != "0x", f"Artifact {path} has no deployable bytecode, is it an interface or abstract contract?"

    return web3.eth.contract(abi=abi, bytecode=bytecode)
