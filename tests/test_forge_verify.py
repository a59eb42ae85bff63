"""Forge verification command tests.

We do not have forge or Etherscan access in unit tests,
so the subprocess seam is patched.
"""

import subprocess
import sys
from pathlib import Path

import psutil
import pytest
from web3 import Web3

from eth_deploy.foundry import forge
from eth_deploy.foundry.forge import ForgeFailed, _exec_cmd, check_forge_verification_setup, verify_contract_with_forge

VAULT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.fixture()
def captured_commands(monkeypatch) -> list:
    """Replace forge execution with a recorder."""
    calls = []

    def _fake_exec(cmd_line, censored_command, cwd=None, timeout=None):
        calls.append({"cmd_line": cmd_line, "censored_command": censored_command, "cwd": cwd})
        return "Contract successfully verified"

    monkeypatch.setattr(forge, "which", lambda name: "/usr/local/bin/forge")
    monkeypatch.setattr(forge, "_exec_cmd", _fake_exec)
    return calls


def test_verify_command_line(web3: Web3, project_folder: Path, captured_commands: list):
    verify_contract_with_forge(
        web3,
        project_folder,
        "RewardProgramVault",
        VAULT,
        etherscan_api_key="SECRETKEY",
        verify_retries=3,
        verify_delay=5,
    )

    assert len(captured_commands) == 1
    call = captured_commands[0]
    cmd_line = call["cmd_line"]

    assert cmd_line[0:4] == ["/usr/local/bin/forge", "verify-contract", "--etherscan-api-key", "SECRETKEY"]
    assert cmd_line[-2:] == [VAULT, "src/RewardProgramVault.sol:RewardProgramVault"]
    assert "--watch" in cmd_line
    assert cmd_line[cmd_line.index("--chain-id") + 1] == str(web3.eth.chain_id)
    assert cmd_line[cmd_line.index("--retries") + 1] == "3"
    assert cmd_line[cmd_line.index("--delay") + 1] == "5"
    assert "--constructor-args" not in cmd_line
    assert call["cwd"] == project_folder

    # API key never gets logged
    assert "SECRETKEY" not in call["censored_command"]


def test_verify_constructor_args(web3: Web3, project_folder: Path, captured_commands: list):
    encoded = "0x000000000000000000000000000000000000000000000000000000000000002a"
    verify_contract_with_forge(web3, project_folder, "RewardProgramVault", VAULT, etherscan_api_key="SECRETKEY", constructor_args=encoded)
    cmd_line = captured_commands[0]["cmd_line"]
    assert cmd_line[cmd_line.index("--constructor-args") + 1] == encoded


def test_verify_missing_source(web3: Web3, project_folder: Path, captured_commands: list):
    with pytest.raises(AssertionError):
        verify_contract_with_forge(web3, project_folder, "NoSuchContract", VAULT, etherscan_api_key="SECRETKEY")
    assert captured_commands == []


def test_verify_needs_api_key(web3: Web3, project_folder: Path, captured_commands: list):
    with pytest.raises(AssertionError):
        verify_contract_with_forge(web3, project_folder, "RewardProgramVault", VAULT, etherscan_api_key="")


def test_exec_cmd_success():
    output = _exec_cmd([sys.executable, "-c", "print('Contract successfully verified')"], censored_command="forge verify-contract")
    assert "successfully verified" in output


def test_exec_cmd_already_verified():
    """Re-running verification on a verified contract is not an error."""
    script = "import sys; print('Contract [src/RewardProgramVault.sol:RewardProgramVault] is already verified. Skipping verification.'); sys.exit(1)"
    output = _exec_cmd([sys.executable, "-c", script], censored_command="forge verify-contract")
    assert "already verified" in output


def test_exec_cmd_failure():
    script = "import sys; sys.stderr.write('Error: Invalid API Key'); sys.exit(1)"
    with pytest.raises(ForgeFailed) as exc_info:
        _exec_cmd([sys.executable, "-c", script], censored_command="forge verify-contract")
    assert "Invalid API Key" in str(exc_info.value)


def test_exec_cmd_timeout_kills_forge(tmp_path: Path):
    """A hung forge is not left running after the timeout."""
    pid_file = tmp_path / "pid"
    script = f"import os, time; open({str(pid_file)!r}, 'w').write(str(os.getpid())); time.sleep(60)"
    with pytest.raises(subprocess.TimeoutExpired):
        _exec_cmd([sys.executable, "-c", script], censored_command="forge verify-contract", timeout=3)

    pid = int(pid_file.read_text())
    assert not psutil.pid_exists(pid)


def test_setup_check_without_forge(project_folder: Path, monkeypatch):
    monkeypatch.setattr(forge, "which", lambda name: None)
    with pytest.raises(AssertionError, match="No forge command"):
        check_forge_verification_setup(project_folder, "RewardProgramVault")


def test_setup_check_hardhat_project(tmp_path: Path, monkeypatch):
    """Hardhat projects cannot be verified with forge."""
    monkeypatch.setattr(forge, "which", lambda name: "/usr/local/bin/forge")
    (tmp_path / "contracts").mkdir()
    (tmp_path / "hardhat.config.js").write_text("module.exports = {};")
    with pytest.raises(AssertionError, match="foundry.toml"):
        check_forge_verification_setup(tmp_path, "RewardProgramVault")


def test_setup_check(project_folder: Path, monkeypatch):
    monkeypatch.setattr(forge, "which", lambda name: "/usr/local/bin/forge")
    forge_path, src_file = check_forge_verification_setup(project_folder, "RewardProgramVault")
    assert forge_path == "/usr/local/bin/forge"
    assert src_file == Path("src/RewardProgramVault.sol")
