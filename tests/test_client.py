from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from solders.pubkey import Pubkey

from distri_mirror.chain.client import ChainClient
from distri_mirror.core.errors import TransportError
from fakes import PROGRAM_ID


def _client(rpc):
    return ChainClient("https://rpc.example.com/?api-key=secret", PROGRAM_ID, client=rpc)


def test_fetch_all_program_accounts():
    addr = Pubkey.new_unique()
    rpc = MagicMock()
    rpc.get_program_accounts.return_value = SimpleNamespace(
        value=[SimpleNamespace(pubkey=addr, account=SimpleNamespace(data=b"\x01\x02"))]
    )

    accounts = _client(rpc).fetch_all_program_accounts("finalized")
    assert [(a.address, a.data) for a in accounts] == [(str(addr), b"\x01\x02")]
    assert rpc.get_program_accounts.call_args.kwargs["encoding"] == "base64"


def test_fetch_failure_is_transport_error_without_api_key():
    rpc = MagicMock()
    rpc.get_program_accounts.side_effect = OSError("connection refused")

    with pytest.raises(TransportError) as exc:
        _client(rpc).fetch_all_program_accounts()
    assert "secret" not in str(exc.value)


def test_missing_account_returns_none():
    rpc = MagicMock()
    rpc.get_account_info.return_value = SimpleNamespace(value=None)
    assert _client(rpc).get_account_data(Pubkey.new_unique()) is None
