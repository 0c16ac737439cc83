"""
RPC gateway: send calldata to an address, get back a hex string or an error.

Anything with an `eth_call(to, data) -> str` method satisfies `RpcClient`;
the scanner only ever talks to that. `HttpRpcClient` is the live version,
built on web3's HTTPProvider. Tests substitute a scripted table.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from web3 import Web3

from .errors import ProtocolError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECS = 15


class RpcClient(Protocol):
    def eth_call(self, to: str, data: str) -> str:
        ...


class HttpRpcClient:
    """eth_call over HTTP JSON-RPC against the `latest` block.

    One request per call, no retries: a failed call surfaces immediately so the
    caller can record it and move on.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout_secs: float = DEFAULT_TIMEOUT_SECS,
        provider: Optional[Any] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout_secs = timeout_secs
        self.provider = provider or Web3.HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": timeout_secs},
            exception_retry_configuration=None,
        )

    def eth_call(self, to: str, data: str) -> str:
        params = [{"to": to, "data": data}, "latest"]
        logger.debug("eth_call to=%s data=%s", to, data)
        try:
            response = self.provider.make_request("eth_call", params)
        except requests.exceptions.RequestException as err:
            raise TransportError(str(err)) from err
        except ValueError as err:
            # body was not JSON
            raise ProtocolError(f"invalid rpc response: {err}") from err
        return _unwrap_result(response)


def _unwrap_result(response: Dict[str, Any]) -> str:
    if not isinstance(response, dict):
        raise ProtocolError("invalid rpc response: expected a JSON object")

    error = response.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or str(error)
        else:
            message = str(error)
        raise ProtocolError(message)

    if "result" not in response or response["result"] is None:
        raise ProtocolError("missing result field")

    result = response["result"]
    if not isinstance(result, str):
        raise ProtocolError(f"eth_call result was {type(result).__name__}, expected a hex string")
    # 0x framing is checked by the codec
    return result
