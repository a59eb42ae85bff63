"""Chain specific configuration.

Map chain ids to the network names used in the deployment records
and tune the Web3 connection for chains that need it.
"""

import logging
from typing import NamedTuple

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

logger = logging.getLogger(__name__)


#: Network name used for any chain not listed in :py:data:`NETWORK_NAMES`
LOCAL_NETWORK_NAME = "local"

#: Manually maintained names for the public networks we deploy on.
#:
#: These are the section keys in the deployment record file.
NETWORK_NAMES = {
    1: "mainnet",
    4: "rinkeby",
}

#: Chains where we publish the contract source on a block explorer
VERIFICATION_CHAIN_IDS = {
    1,  # Ethereum mainnet
    4,  # Rinkeby
}

#: List of chain ids that need to have proof-of-authority middleware installed
POA_MIDDLEWARE_NEEDED_CHAIN_IDS = {
    4,  # Rinkeby, Clique PoA
}


class Network(NamedTuple):
    """Network identity resolved from the chain id."""

    #: Numeric EVM chain id
    chain_id: int

    #: Human readable label, see :py:func:`get_network_name`
    name: str

    def __repr__(self):
        return f"<Network {self.name}, chain id {self.chain_id}>"


def get_network_name(chain_id: int) -> str:
    """Translate a chain id to the network name used in the deployment records.

    - ``1`` is ``mainnet``
    - ``4`` is ``rinkeby``
    - Anything else is ``local``
    """
    assert type(chain_id) is int, f"Chain ID must be an integer, got {type(chain_id)}"
    return NETWORK_NAMES.get(chain_id, LOCAL_NETWORK_NAME)


def is_verification_network(chain_id: int) -> bool:
    """Should we verify the contract source on this chain."""
    assert type(chain_id) is int, f"Chain ID must be an integer, got {type(chain_id)}"
    return chain_id in VERIFICATION_CHAIN_IDS


def resolve_network(chain_id: int) -> Network:
    return Network(chain_id=chain_id, name=get_network_name(chain_id))


def fetch_network(web3: Web3) -> Network:
    """Query the connected node for its chain id and resolve the network.

    :raise requests.exceptions.ConnectionError:
        If the node is not reachable.
    """
    chain_id = web3.eth.chain_id
    network = resolve_network(chain_id)
    logger.info("Connected to %s", network)
    return network


def install_chain_middleware(web3: Web3, poa_middleware: bool | None = None):
    """Install any chain-specific middleware to Web3 instance.

    Rinkeby is a Clique proof-of-authority chain and its block headers
    carry extra data web3.py refuses to parse without the middleware.

    Example:

    .. code-block:: python

        web3 = Web3(HTTPProvider(json_rpc_url))
        install_chain_middleware(web3)

    :param poa_middleware:
        If set, force the installation of proof-of-authority middleware.
    """
    if poa_middleware is None:
        poa_middleware = web3.eth.chain_id in POA_MIDDLEWARE_NEEDED_CHAIN_IDS

    if poa_middleware:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
