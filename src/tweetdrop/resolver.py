"""ENS name resolution over a JSON-RPC endpoint."""

from __future__ import annotations

import logging
from typing import Any

from ens.exceptions import ENSException
from requests import Session
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception


class NoResolution:
    """Resolver used when no RPC endpoint is configured; names stay unresolved."""

    enabled = False

    def resolve(self, name: str) -> str | None:
        _ = name
        return None


class EnsResolver:
    """Resolve ENS names to addresses through a web3 provider."""

    enabled = True

    def __init__(self, *, web3: Any, logger: logging.Logger) -> None:
        self._web3 = web3
        self._logger = logger

    def resolve(self, name: str) -> str | None:
        normalized = name.lower()
        try:
            address = self._web3.ens.address(normalized)
        except (RequestException, Web3Exception, ENSException, ValueError) as exc:
            self._logger.warning("ENS lookup failed for %s: %s", normalized, exc)
            return None
        if not address:
            self._logger.debug("No address registered for %s", normalized)
            return None
        return str(address)


def build_resolver(
    rpc_url: str | None,
    *,
    session: Session | None = None,
    timeout: float,
    logger: logging.Logger,
) -> NoResolution | EnsResolver:
    """Return an ENS resolver for ``rpc_url`` or a no-op one when it is unset."""
    if not rpc_url:
        logger.info("No RPC provider configured; ENS names will not be resolved.")
        return NoResolution()
    provider = Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}, session=session)
    return EnsResolver(web3=Web3(provider), logger=logger)
