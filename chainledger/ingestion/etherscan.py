"""Etherscan-compatible explorer client.

Fetches the four account transfer lists (normal, internal, ERC-20, ERC-1155)
and per-transaction details/receipts through the proxy module.
"""

import logging
from typing import Any

from chainledger.context import DEFAULT_ETHERSCAN_URL
from chainledger.decimal_utils import parse_quantity
from chainledger.exceptions import FetchError
from chainledger.ingestion.base import TransactionProvider, TransferProvider
from chainledger.ingestion.http import JsonHttpClient, RetryableResponse
from chainledger.models.transfer import (
    InternalTransfer,
    MultiTokenTransfer,
    NativeTransfer,
    TokenTransfer,
    TransactionDetail,
    TransactionReceipt,
    Transfer,
)
from chainledger.normalization.accounts import normalize_address

logger = logging.getLogger(__name__)

LATEST_BLOCK = 99999999
NO_TRANSACTIONS = "No transactions found"


def _failed(row: dict) -> bool:
    return str(row.get("isError", "0")) == "1"


def _decimals(row: dict) -> int | None:
    raw = row.get("tokenDecimal")
    if raw in (None, ""):
        return None
    return int(raw)


def parse_native(row: dict) -> Transfer | None:
    if _failed(row):
        return None
    return NativeTransfer(
        hash=row["hash"],
        timestamp=int(row["timeStamp"]),
        from_address=normalize_address(row["from"]),
        to_address=normalize_address(row.get("to") or row.get("contractAddress") or ""),
        value=str(row.get("value") or "0"),
    )


def parse_internal(row: dict) -> Transfer | None:
    if _failed(row):
        return None
    return InternalTransfer(
        hash=row["hash"],
        timestamp=int(row["timeStamp"]),
        from_address=normalize_address(row["from"]),
        to_address=normalize_address(row.get("to") or row.get("contractAddress") or ""),
        value=str(row.get("value") or "0"),
        trace_id=str(row.get("traceId", "")),
    )


def parse_token(row: dict) -> Transfer | None:
    return TokenTransfer(
        hash=row["hash"],
        timestamp=int(row["timeStamp"]),
        from_address=normalize_address(row["from"]),
        to_address=normalize_address(row["to"]),
        value=str(row.get("value") or "0"),
        contract_address=normalize_address(row["contractAddress"]),
        token_symbol=row.get("tokenSymbol") or None,
        token_decimal=_decimals(row),
        token_name=row.get("tokenName") or None,
    )


def parse_multi_token(row: dict) -> Transfer | None:
    return MultiTokenTransfer(
        hash=row["hash"],
        timestamp=int(row["timeStamp"]),
        from_address=normalize_address(row["from"]),
        to_address=normalize_address(row["to"]),
        value=str(row.get("tokenValue") or row.get("value") or "0"),
        contract_address=normalize_address(row["contractAddress"]),
        token_symbol=row.get("tokenSymbol") or None,
        token_decimal=_decimals(row),
        token_id=str(row.get("tokenID", "")),
    )


ACCOUNT_ACTIONS = (
    ("txlist", parse_native),
    ("txlistinternal", parse_internal),
    ("tokentx", parse_token),
    ("token1155tx", parse_multi_token),
)


class EtherscanClient(JsonHttpClient, TransferProvider, TransactionProvider):
    source = "etherscan"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_ETHERSCAN_URL,
        end_block: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url
        self.end_block = end_block

    def check_payload(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            return
        result = payload.get("result")
        if isinstance(result, str) and "rate limit" in result.lower():
            raise RetryableResponse(result)

    def fetch(self, address: str, since_block: int = 0) -> list[Transfer]:
        transfers: list[Transfer] = []
        for action, parser in ACCOUNT_ACTIONS:
            rows = self._account_rows(action, address, since_block)
            logger.info("Fetched %d %s rows for %s", len(rows), action, address)
            for row in rows:
                transfer = parser(row)
                if transfer is not None:
                    transfers.append(transfer)
        return transfers

    def get_transaction(self, tx_hash: str) -> TransactionDetail | None:
        result = self._proxy("eth_getTransactionByHash", tx_hash)
        if not result:
            return None
        return TransactionDetail(
            hash=result["hash"],
            from_address=normalize_address(result["from"]),
            to_address=normalize_address(result["to"]) if result.get("to") else None,
            input=result.get("input") or "0x",
            gas_price=parse_quantity(result.get("gasPrice")),
        )

    def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        result = self._proxy("eth_getTransactionReceipt", tx_hash)
        if not result:
            return None
        return TransactionReceipt(
            hash=result["transactionHash"],
            from_address=normalize_address(result["from"]),
            gas_used=parse_quantity(result.get("gasUsed")),
            effective_gas_price=parse_quantity(result.get("effectiveGasPrice")),
            status=parse_quantity(result.get("status") or "0x1"),
        )

    def _account_rows(self, action: str, address: str, since_block: int) -> list[dict]:
        payload = self.get_json(
            self.base_url,
            params={
                "module": "account",
                "action": action,
                "address": address,
                "startblock": since_block,
                "endblock": self.end_block if self.end_block is not None else LATEST_BLOCK,
                "sort": "asc",
                "apikey": self.api_key,
            },
        )
        if str(payload.get("status")) == "1":
            return list(payload.get("result") or [])
        if payload.get("message", "").startswith(NO_TRANSACTIONS):
            return []
        raise FetchError(self.source, f"{action} for {address}: {payload.get('result')}")

    def _proxy(self, action: str, tx_hash: str) -> dict | None:
        payload = self.get_json(
            self.base_url,
            params={"module": "proxy", "action": action, "txhash": tx_hash, "apikey": self.api_key},
        )
        if "error" in payload:
            raise FetchError(self.source, f"{action} for {tx_hash}: {payload['error']}")
        result = payload.get("result")
        if result is not None and not isinstance(result, dict):
            raise FetchError(self.source, f"{action} for {tx_hash}: {result}")
        return result
