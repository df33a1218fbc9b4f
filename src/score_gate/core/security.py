"""Wallet signature utilities built on secp256k1 message recovery."""
from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address

CHALLENGE_PREAMBLE = "Authenticate wallet for gaming session."


def challenge_message(nonce: str, address: str) -> str:
    """Return the canonical text a wallet signs to prove control of ``address``."""
    return f"{CHALLENGE_PREAMBLE}\nNonce: {nonce}\nAddress: {address}"


def normalize_address(address: str) -> str:
    """Return the comparison form of a hex address."""
    return address.strip().lower()


def addresses_match(left: str, right: str) -> bool:
    """Compare two hex addresses ignoring checksum casing."""
    return normalize_address(left) == normalize_address(right)


def is_valid_address(address: str) -> bool:
    """Return True if ``address`` is a well-formed 20-byte hex address."""
    try:
        return bool(is_address(address))
    except (TypeError, ValueError):
        return False


def verify_signature(address: str, message: str, signature: str | bytes) -> bool:
    """Verify an EIP-191 ``personal_sign`` signature.

    Args:
        address: Hex address that allegedly signed the message.
        message: Exact text that was signed on the client.
        signature: 65-byte signature, hex encoded or raw.

    Returns:
        True if the recovered signer equals `address`; False otherwise.
    """
    try:
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception:
        return False
    return addresses_match(recovered, address)
