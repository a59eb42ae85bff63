"""Forge smart contract development toolchain integration.

- Verify deployed smart contracts on Etherscan with ``forge verify-contract``

- See `Foundry book <https://book.getfoundry.sh/>`__ for more information.
"""

import logging
from pathlib import Path
from shutil import which
from subprocess import DEVNULL, PIPE, TimeoutExpired

import psutil
from eth_typing import HexAddress, HexStr
from web3 import Web3

from eth_deploy.etherscan.config import get_etherscan_address_link, get_etherscan_url


logger = logging.getLogger(__name__)


#: Crash unless forge completes in 4 minutes
#:
DEFAULT_TIMEOUT = 4 * 60

#: Etherscan needs a moment to index a freshly deployed contract
DEFAULT_VERIFY_DELAY = 20

DEFAULT_VERIFY_RETRIES = 9

#: Forge output when a previous run has already verified the contract
ALREADY_VERIFIED_MARKERS = (
    "is already verified",
    "Contract source code already verified",
)


class ForgeFailed(Exception):
    """Forge command failed."""


def _exec_cmd(
    cmd_line: list[str],
    censored_command: str,
    cwd: Path | None = None,
    timeout=DEFAULT_TIMEOUT,
) -> str:
    """Execute the command line.

    :param timeout:
        Timeout in seconds

    :raise ForgeFailed:
        Non-zero exit code, unless the contract was verified already

    :return:
        Combined stdout and stderr
    """

    for x in cmd_line:
        assert type(x) == str, f"Got non-string in command line: {x} in {cmd_line}"

    proc = psutil.Popen(cmd_line, stdin=DEVNULL, stdout=PIPE, stderr=PIPE, cwd=cwd)
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except TimeoutExpired:
        # Do not leave forge running in the background
        proc.kill()
        proc.communicate()
        raise
    result = proc.returncode

    output = stdout.decode("utf-8") + stderr.decode("utf-8")

    if result != 0:
        if not any(marker in output for marker in ALREADY_VERIFIED_MARKERS):
            raise ForgeFailed(f"forge return code {result} when running: {censored_command}\nOutput is:\n{output}")

    logger.debug("forge result:\n%s", output)
    return output


def check_forge_verification_setup(
    project_folder: Path,
    contract_name: str,
    contract_file: Path | str | None = None,
) -> tuple[str, Path]:
    """Check we can run ``forge verify-contract`` for a contract.

    Call before deploying, so a missing forge binary or a non-Foundry project
    does not leave us with a deployed contract we cannot verify.

    :param contract_file:
        Contract path relative to the ``src`` folder.

        Defaults to ``<contract_name>.sol``.

    :return:
        Tuple(forge binary path, source file relative to the project folder)
    """
    assert isinstance(project_folder, Path), f"Got non-Path project folder: {type(project_folder)} {project_folder}"
    assert type(contract_name) == str

    if contract_file is None:
        contract_file = Path(f"{contract_name}.sol")
    elif type(contract_file) == str:
        contract_file = Path(contract_file)

    src_contract_file = Path("src") / contract_file
    assert src_contract_file.suffix == ".sol", f"Not Solidity source file: {contract_file}"

    forge = which("forge")
    assert forge is not None, "No forge command in path, needed for the contract verification"

    assert (project_folder / "foundry.toml").exists(), f"foundry.toml missing: {project_folder}"
    assert (project_folder / src_contract_file).exists(), f"Contract does not exist: {src_contract_file} in {project_folder.resolve()}"

    return forge, src_contract_file


def verify_contract_with_forge(
    web3: Web3,
    project_folder: Path,
    contract_name: str,
    address: HexAddress | str,
    etherscan_api_key: str,
    contract_file: Path | str | None = None,
    constructor_args: HexStr | None = None,
    verify_delay=DEFAULT_VERIFY_DELAY,
    verify_retries=DEFAULT_VERIFY_RETRIES,
    timeout=DEFAULT_TIMEOUT,
) -> str:
    """Verify a deployed smart contract on Etherscan with Forge.

    - The smart contract must be developed with Foundry tool chain and its ``forge`` command

    - Forge recompiles the source with the settings in ``foundry.toml``
      and submits it to Etherscan, then polls until the verification is complete

    Example:

    .. code-block:: python

        verify_contract_with_forge(
            web3,
            Path("contracts/vault"),  # Foundry project path
            "RewardProgramVault",  # src/RewardProgramVault.sol:RewardProgramVault
            vault.address,
            etherscan_api_key=os.environ["ETHERSCAN_API_KEY"],
        )

    :param project_folder:
        Foundry project with `foundry.toml` in the root.

    :param contract_name:
        The smart contract name within the file.

    :param address:
        Deployed contract address

    :param etherscan_api_key:
        Etherscan API key used for the verification

    :param contract_file:
        Contract path relative to the ``src`` folder.

        Defaults to ``<contract_name>.sol``.

    :param constructor_args:
        ABI encoded constructor arguments as a hex string, if the contract has any

    :raise ForgeFailed:
        Etherscan did not accept the verification

    :return:
        Forge output
    """
    assert etherscan_api_key, "Etherscan API key needed for the verification"

    forge, src_contract_file = check_forge_verification_setup(project_folder, contract_name, contract_file)

    chain_id = web3.eth.chain_id

    cmd_line = [
        forge,
        "verify-contract",
        "--chain-id",
        str(chain_id),
        "--watch",
        "--retries",
        str(verify_retries),
        "--delay",
        str(verify_delay),
    ]

    if constructor_args:
        cmd_line += ["--constructor-args", constructor_args]

    cmd_line += [
        str(address),
        f"{src_contract_file}:{contract_name}",
    ]

    censored_command = " ".join(cmd_line)

    logger.info(
        "Verifying %s at %s with forge. Working directory %s, forge command: %s",
        contract_name,
        address,
        project_folder.resolve(),
        censored_command,
    )

    # Inject API key after logging
    cmd_line = cmd_line[0:2] + ["--etherscan-api-key", etherscan_api_key] + cmd_line[2:]

    output = _exec_cmd(cmd_line, censored_command=censored_command, cwd=project_folder, timeout=timeout)

    if get_etherscan_url(chain_id):
        logger.info("Verified %s: %s", contract_name, get_etherscan_address_link(chain_id, str(address)))
    else:
        logger.info("Verified %s at %s on chain %d", contract_name, address, chain_id)
    return output
