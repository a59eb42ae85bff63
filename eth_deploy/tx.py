"""Transaction helpers."""

from eth_account.datastructures import SignedTransaction
from hexbytes import HexBytes


def get_tx_broadcast_data(signed_tx: SignedTransaction) -> HexBytes:
    """Get raw transaction bytes with compatibility for attribute name changes.

    eth_account changed rawTransaction to raw_transaction in newer versions.
    This function handles both attribute names.

    :param signed_tx:
        Signed transaction object from SignedTransaction | SignedTransactionWithNonce

    :return:
        Raw transaction bytes ready for broadcasting to the network

    :raises AttributeError:
        If the signed transaction object has neither 'raw_transaction'
        nor 'rawTransaction' attribute
    """
    if hasattr(signed_tx, "raw_transaction"):
        return signed_tx.raw_transaction
    elif hasattr(signed_tx, "rawTransaction"):
        return signed_tx.rawTransaction
    else:
        raise AttributeError(f"SignedTransaction object has neither 'raw_transaction' nor 'rawTransaction' attribute. Available attributes: {dir(signed_tx)}")
