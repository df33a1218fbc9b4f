"""Blockchain write collaborator for committing validated scores.

The gate treats the chain as an opaque service: ``ScoreWriter`` returns a
transaction hash or raises, and ``map_write_error`` folds whatever it raised
into an ``UpstreamWriteFailureError`` with a specific cause.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from web3 import Web3
from web3.exceptions import ContractLogicError

from score_gate.core.errors import UpstreamWriteFailureError

logger = logging.getLogger(__name__)

UPDATE_PLAYER_DATA_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "updatePlayerData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "player", "type": "address"},
            {"name": "scoreAmount", "type": "uint256"},
            {"name": "transactionAmount", "type": "uint256"},
        ],
        "outputs": [],
    },
]


class ScoreWriter(Protocol):
    """Anything able to record a player's score on chain."""

    def update_player_data(
        self, player_address: str, score_amount: int, transaction_amount: int
    ) -> str: ...


class Web3ScoreWriter:
    """Sends ``updatePlayerData`` transactions signed by the game wallet."""

    def __init__(self, rpc_url: str, contract_address: str, private_key: str) -> None:
        self._w3 = Web3(Web3.HTTPProvider(rpc_url))
        self._account = self._w3.eth.account.from_key(private_key)
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=UPDATE_PLAYER_DATA_ABI,
        )

    @property
    def sender(self) -> str:
        return self._account.address

    def update_player_data(
        self, player_address: str, score_amount: int, transaction_amount: int
    ) -> str:
        """Build, sign and broadcast one transaction; no retries."""
        call = self._contract.functions.updatePlayerData(
            Web3.to_checksum_address(player_address),
            int(score_amount),
            int(transaction_amount),
        )
        tx = call.build_transaction(
            {
                "from": self._account.address,
                "nonce": self._w3.eth.get_transaction_count(self._account.address),
            }
        )
        signed = self._account.sign_transaction(tx)
        tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)


def map_write_error(exc: Exception) -> UpstreamWriteFailureError:
    """Translate a writer exception into a typed upstream failure.

    Role errors surface inside revert messages, so they are matched first.
    """
    text = str(exc)
    if "AccessControlUnauthorizedAccount" in text:
        return UpstreamWriteFailureError(
            "unauthorized_role",
            "Unauthorized: Wallet does not have GAME_ROLE permission",
        )
    if "insufficient funds" in text.lower():
        return UpstreamWriteFailureError(
            "insufficient_funds",
            "Insufficient funds to complete transaction",
        )
    if isinstance(exc, ContractLogicError) or "execution reverted" in text:
        return UpstreamWriteFailureError(
            "execution_reverted",
            "Contract execution failed - check if wallet has GAME_ROLE permission",
        )
    return UpstreamWriteFailureError("unknown")
