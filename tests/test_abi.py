"""Contract artifact lookup tests."""

import json
from pathlib import Path

import pytest
from web3 import Web3

from eth_deploy.abi import ContractArtifactNotFound, find_contract_artifact, get_contract


def test_find_forge_artifact(project_folder: Path):
    path = find_contract_artifact(project_folder, "RewardProgramVault")
    assert path == project_folder / "out" / "RewardProgramVault.sol" / "RewardProgramVault.json"


def test_find_hardhat_artifact(tmp_path: Path, project_folder: Path, web3: Web3):
    """Hardhat keeps artifacts under the source folder structure and writes debug files next to them."""
    forge_artifact = json.loads((project_folder / "out" / "RewardProgramVault.sol" / "RewardProgramVault.json").read_text())
    artifact_folder = tmp_path / "hardhat" / "artifacts" / "contracts" / "vaults" / "RewardProgramVault.sol"
    artifact_folder.mkdir(parents=True)
    hardhat_artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": "RewardProgramVault",
        "abi": forge_artifact["abi"],
        "bytecode": forge_artifact["bytecode"]["object"],
    }
    (artifact_folder / "RewardProgramVault.json").write_text(json.dumps(hardhat_artifact))
    (artifact_folder / "RewardProgramVault.dbg.json").write_text(json.dumps({"buildInfo": "../../build-info/x.json"}))

    path = find_contract_artifact(tmp_path / "hardhat", "RewardProgramVault")
    assert path.name == "RewardProgramVault.json"

    # Plain hex bytecode works as well as Forge's bytecode object
    Contract = get_contract(web3, path)
    assert Contract.bytecode == Web3.to_bytes(hexstr=forge_artifact["bytecode"]["object"])


def test_artifact_not_found(project_folder: Path):
    with pytest.raises(ContractArtifactNotFound):
        find_contract_artifact(project_folder, "NoSuchContract")


def test_get_contract_without_bytecode(tmp_path: Path, web3: Web3):
    """Interfaces cannot be deployed."""
    path = tmp_path / "IVault.json"
    path.write_text(json.dumps({"abi": [], "bytecode": {"object": "0x"}}))
    with pytest.raises(AssertionError):
        get_contract(web3, path)


def test_find_forge_artifact_in_differently_named_file(project_folder: Path):
    """Forge names the output folder after the source file, not the contract."""
    source = project_folder / "out" / "RewardProgramVault.sol" / "RewardProgramVault.json"
    artifact_folder = project_folder / "out" / "Vaults.sol"
    artifact_folder.mkdir()
    (artifact_folder / "StakingVault.json").write_text(source.read_text())

    path = find_contract_artifact(project_folder, "StakingVault")
    assert path == artifact_folder / "StakingVault.json"
