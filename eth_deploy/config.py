"""Deployment configuration from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

from eth_deploy.foundry.forge import DEFAULT_VERIFY_DELAY, DEFAULT_VERIFY_RETRIES
from eth_deploy.records import DEFAULT_DEPLOYMENT_FILE

#: The contract this project deploys unless told otherwise
DEFAULT_CONTRACT_NAME = "RewardProgramVault"


def _read_int(environ: dict, name: str, default: int) -> int:
    """Read an integer variable, empty counts as unset."""
    value = environ.get(name) or default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}") from e


@dataclass(slots=True)
class DeploymentConfig:
    """Everything a deployment run needs to know.

    See :py:meth:`from_env` for the environment variables.
    """

    #: JSON-RPC endpoint of the target network
    json_rpc_url: str

    #: 0x prefixed deployer private key.
    #:
    #: If not given, the node's first unlocked account is used.
    private_key: str | None = None

    contract_name: str = DEFAULT_CONTRACT_NAME

    #: Foundry or Hardhat project root with the compiled artifacts
    project_folder: Path = Path(".")

    #: Deployment record JSON file
    deployment_file: Path | None = None

    #: Needed on networks where the source is verified
    etherscan_api_key: str | None = None

    verify_retries: int = DEFAULT_VERIFY_RETRIES

    verify_delay: int = DEFAULT_VERIFY_DELAY

    def __post_init__(self):
        if self.deployment_file is None:
            self.deployment_file = self.project_folder / DEFAULT_DEPLOYMENT_FILE

    def __repr__(self):
        # Never print the private key or the API key
        return f"<DeploymentConfig {self.contract_name} from {self.project_folder} records {self.deployment_file}>"

    @staticmethod
    def from_env(environ: dict | None = None) -> "DeploymentConfig":
        """Read the configuration from environment variables.

        - ``JSON_RPC_URL`` (required). If it holds a space-separated list of URLs, the first one is used
        - ``PRIVATE_KEY``
        - ``CONTRACT_NAME``
        - ``PROJECT_FOLDER``
        - ``DEPLOYMENT_FILE``
        - ``ETHERSCAN_API_KEY``
        - ``VERIFY_RETRIES``, ``VERIFY_DELAY``

        :raise ValueError:
            If a required variable is not set or an integer variable is malformed
        """
        if environ is None:
            environ = os.environ

        json_rpc_url = environ.get("JSON_RPC_URL", "").strip()
        if not json_rpc_url:
            raise ValueError("Environment variable JSON_RPC_URL is not set")

        # Multi-provider URL format, take the first one
        json_rpc_url = json_rpc_url.split()[0]

        project_folder = Path(environ.get("PROJECT_FOLDER") or ".")
        deployment_file = environ.get("DEPLOYMENT_FILE")

        return DeploymentConfig(
            json_rpc_url=json_rpc_url,
            private_key=environ.get("PRIVATE_KEY") or None,
            contract_name=environ.get("CONTRACT_NAME") or DEFAULT_CONTRACT_NAME,
            project_folder=project_folder,
            deployment_file=Path(deployment_file) if deployment_file else None,
            etherscan_api_key=environ.get("ETHERSCAN_API_KEY") or None,
            verify_retries=_read_int(environ, "VERIFY_RETRIES", DEFAULT_VERIFY_RETRIES),
            verify_delay=_read_int(environ, "VERIFY_DELAY", DEFAULT_VERIFY_DELAY),
        )
