# distri_mirror/chain/client.py
from __future__ import annotations

from typing import List, Optional

from httpx import HTTPError
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Finalized
from solders.pubkey import Pubkey

from distri_mirror.chain.accounts import ProgramAccount
from distri_mirror.config.rpc import redacted
from distri_mirror.core.errors import TransportError
from distri_mirror.core.logging import log

_RPC_ERRORS = (SolanaRpcException, HTTPError, OSError)


class ChainClient:
    """Read-only view of the program's accounts over JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        program_id: Pubkey,
        commitment: Commitment = Finalized,
        client: Optional[Client] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.program_id = program_id
        self.commitment = commitment
        self._client = client or Client(rpc_url, commitment=commitment)

    def fetch_all_program_accounts(self, commitment: Optional[Commitment] = None) -> List[ProgramAccount]:
        commitment = commitment or self.commitment
        try:
            resp = self._client.get_program_accounts(
                self.program_id,
                commitment=commitment,
                encoding="base64",
            )
        except _RPC_ERRORS as e:
            raise TransportError(
                f"getProgramAccounts via {redacted(self.rpc_url)} failed: {e}"
            ) from e
        accounts = [ProgramAccount(str(item.pubkey), bytes(item.account.data)) for item in resp.value]
        log.debug(f"Fetched {len(accounts)} program accounts", source="ChainClient")
        return accounts

    def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Raw account data, or ``None`` when the account does not exist."""
        try:
            resp = self._client.get_account_info(
                address,
                commitment=self.commitment,
                encoding="base64",
            )
        except _RPC_ERRORS as e:
            raise TransportError(f"getAccountInfo {address} failed: {e}") from e
        if resp.value is None:
            return None
        return bytes(resp.value.data)


__all__ = ["ChainClient"]
