"""Deploy a contract and record its address.

- Deploys ``CONTRACT_NAME`` (default ``RewardProgramVault``) from a compiled Foundry or Hardhat project
- Saves the address to ``deployed.json`` under the network name
- Verifies the source on Etherscan when deploying on mainnet or Rinkeby

To run against a local Anvil node:

.. code-block:: shell

    anvil &
    export JSON_RPC_URL=http://localhost:8545
    export PROJECT_FOLDER=contracts/vault
    python scripts/deploy-contract.py

To run on mainnet:

.. code-block:: shell

    export JSON_RPC_URL=...
    export PRIVATE_KEY=...
    export ETHERSCAN_API_KEY=...
    export PROJECT_FOLDER=contracts/vault
    python scripts/deploy-contract.py
"""

from eth_deploy.deployment import main


if __name__ == "__main__":
    main()
