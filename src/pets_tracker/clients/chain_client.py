"""EVM JSON-RPC client for one chain: block height, token Transfer logs, transaction lookup."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

import structlog

from pets_tracker.exceptions import DataUnavailable, RateLimited, TransientNetworkError
from pets_tracker.models.transfer_event import TransferEvent
from pets_tracker.utils.validation import (
    address_to_topic,
    mask_address,
    normalize_address,
    parse_hex_quantity,
    topic_to_address,
)

if TYPE_CHECKING:
    from pets_tracker.clients.http import AsyncHttpClient
    from pets_tracker.config import ChainSettings

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# Node providers report throttling as JSON-RPC errors on a 200 response.
RATE_LIMIT_ERROR_CODES = frozenset({-32005, -32029, 429})
_RATE_LIMIT_MARKERS = ("rate limit", "too many requests", "limit exceeded", "exceeded the quota")


def _is_rate_limit_error(code: Any, message: str) -> bool:
    if code in RATE_LIMIT_ERROR_CODES:
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in _RATE_LIMIT_MARKERS)


class ChainClient:
    """JSON-RPC client parameterized by ChainSettings (one instance per chain)."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        chain: ChainSettings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the chain client.

        Args:
            http_client: HTTP client for POST requests (JSON-RPC).
            chain: Chain configuration (rpc_url, token_address, pool_address).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name + chain key).
        """
        self._http = http_client
        self._chain = chain
        self._ids = itertools.count(1)
        self._logger = get_logger(logger_name or f"{self.__class__.__name__}.{chain.key}")

    @property
    def chain(self) -> ChainSettings:
        return self._chain

    def _rpc_url(self) -> str:
        return self._chain.rpc_url.rstrip("/")

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call and return its result.

        Raises:
            RateLimited: HTTP 429 or a JSON-RPC rate-limit error.
            TransientNetworkError: Transport failure, RPC error or malformed response.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = await self._http.post(self._rpc_url(), json=payload)
        if not isinstance(response, dict):
            raise TransientNetworkError(
                f"Unexpected RPC response type for {method}: {type(response).__name__}",
                url=self._rpc_url(),
            )
        resp_dict = cast(dict[str, Any], response)
        if "error" in resp_dict and resp_dict["error"] is not None:
            err = resp_dict["error"]
            if isinstance(err, dict):
                err_d = cast(dict[str, Any], err)
                code = err_d.get("code")
                msg = str(err_d.get("message", err_d))
            else:
                code = None
                msg = str(err)
            if _is_rate_limit_error(code, msg):
                raise RateLimited(f"RPC rate limited on {method}: {msg}", url=self._rpc_url())
            raise TransientNetworkError(f"RPC error on {method}: {msg}", url=self._rpc_url())
        return resp_dict.get("result")

    async def current_height(self) -> int:
        """Return the latest block number."""
        result = await self._call("eth_blockNumber", [])
        try:
            return parse_hex_quantity(result)
        except ValueError as e:
            raise TransientNetworkError(
                f"Malformed eth_blockNumber result: {result!r}", url=self._rpc_url(), cause=e
            ) from e

    async def transfer_events(self, from_block: int, to_block: int) -> list[TransferEvent]:
        """Return token Transfer events sent by the pool in [from_block, to_block].

        Raises:
            ValueError: If the range is invalid.
            RateLimited, TransientNetworkError: On upstream failure.
        """
        if from_block < 0 or to_block < from_block:
            raise ValueError(f"Invalid block range: {from_block}..{to_block}")
        params = [
            {
                "address": normalize_address(self._chain.token_address),
                "topics": [TRANSFER_TOPIC, address_to_topic(self._chain.pool_address)],
                "fromBlock": hex(from_block),
                "toBlock": hex(to_block),
            }
        ]
        result = await self._call("eth_getLogs", params)
        if not isinstance(result, list):
            raise TransientNetworkError(
                f"Malformed eth_getLogs result: {type(result).__name__}", url=self._rpc_url()
            )
        events: list[TransferEvent] = []
        for raw in cast(list[Any], result):
            try:
                events.append(self._parse_log(cast(dict[str, Any], raw)))
            except DataUnavailable as e:
                self._logger.warning(
                    "chain_log_malformed",
                    chain=self._chain.key,
                    error_message=str(e),
                )
        events.sort(key=lambda ev: (ev.block_number, ev.log_index))
        self._logger.debug(
            "chain_transfer_events",
            chain=self._chain.key,
            from_block=from_block,
            to_block=to_block,
            events_count=len(events),
        )
        return events

    async def transaction_target(self, transaction_hash: str) -> str | None:
        """Return the lower-cased `to` address of a transaction, or None if unknown."""
        result = await self._call("eth_getTransactionByHash", [transaction_hash])
        if result is None:
            return None
        if not isinstance(result, dict):
            raise TransientNetworkError(
                f"Malformed eth_getTransactionByHash result: {type(result).__name__}",
                url=self._rpc_url(),
            )
        to = cast(dict[str, Any], result).get("to")
        target = normalize_address(to) if isinstance(to, str) else None
        self._logger.debug(
            "chain_transaction_target",
            chain=self._chain.key,
            transaction_hash=transaction_hash,
            target_masked=mask_address(target),
        )
        return target

    def _parse_log(self, log: dict[str, Any]) -> TransferEvent:
        """Build a TransferEvent from a raw log. Raises DataUnavailable when malformed."""
        if not isinstance(log, dict):
            raise DataUnavailable(f"log is not an object: {log!r}")
        topics = log.get("topics") or []
        tx_hash = log.get("transactionHash")
        if len(topics) < 3 or not isinstance(tx_hash, str) or not tx_hash:
            raise DataUnavailable(f"log missing topics or transactionHash: {tx_hash!r}")
        try:
            return TransferEvent(
                chain=self._chain.key,
                transaction_hash=tx_hash.lower(),
                from_address=topic_to_address(str(topics[1])),
                to_address=topic_to_address(str(topics[2])),
                raw_amount=parse_hex_quantity(log.get("data") or "0x"),
                block_number=parse_hex_quantity(log.get("blockNumber")),
                log_index=parse_hex_quantity(log.get("logIndex") or "0x0"),
            )
        except ValueError as e:
            raise DataUnavailable(f"log {tx_hash} has malformed fields: {e}") from e
