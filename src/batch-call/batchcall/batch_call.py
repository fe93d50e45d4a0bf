"""
Batch read-only contract calls across many contracts into one JSON-RPC round trip.

ABIs are resolved first, serially and throttled, from the Etherscan explorer
(or taken from the request). Every call is then registered on a single
JSON-RPC batch, dispatched once, and the outcomes are folded into
`{namespace: [{address, <method>: [{value, input?, args?}]}]}`.
"""

import logging
from concurrent.futures import Future
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .aggregator import aggregate, group_by_namespace
from .cache import AbiCache
from .config import Config, validate_config
from .contract import BlockIdentifier, Contract
from .etherscan_client import EtherscanClient
from .models import AddressState, ContractRequest, MethodSpec, RawCallResult
from .rpc_client import RpcBatch, RpcClient

logger = logging.getLogger(__name__)

# Per-address placeholders: a future for a registered call, None for a missing method.
PendingCalls = List[Optional["Future[RawCallResult]"]]


class BatchCall:
    """Entry point combining configuration, ABI cache, and JSON-RPC transport."""

    def __init__(self, config: Any, cache: Optional[AbiCache] = None) -> None:
        self.config: Config = validate_config(config)
        etherscan = self.config.etherscan

        provider = self.config.provider
        if isinstance(provider, str):
            provider = RpcClient(provider, timeout=etherscan.request_timeout)
        self.provider = provider

        if cache is None:
            client = EtherscanClient(
                api_key=etherscan.api_key,
                base_url=etherscan.base_url,
                chain_id=etherscan.chain_id,
                timeout=etherscan.request_timeout,
            )
            cache = AbiCache(client, delay_time=etherscan.delay_time)
        self.cache = cache

    def execute(
        self,
        contracts: Iterable[Any],
        block_number: Optional[BlockIdentifier] = None,
    ) -> Dict[str, Any]:
        """
        Run every requested call in one batch.

        Args:
            contracts: ContractRequest objects or `{abi?, addresses, namespace?,
                methods?, allMethods?}` mappings
            block_number: Block to read at, applied to every call (latest if None)

        Returns:
            Results grouped by namespace, or `{"error": message}` when any call
            in the batch failed.

        Raises:
            ExplorerError: an ABI could not be resolved
        """
        contract_requests = [ContractRequest.from_value(contract) for contract in contracts]

        # ABIs must be known before any call can be encoded.
        for request in contract_requests:
            for address in request.addresses:
                self.cache.ensure(address, request.abi)

        batch = self.provider.batch()
        pending: List[Tuple[str, str, PendingCalls]] = []
        for request in contract_requests:
            for address in request.addresses:
                calls = self._add_address_to_batch(batch, request, address, block_number)
                pending.append((address, request.namespace, calls))

        registered = sum(1 for _, _, calls in pending for future in calls if future is not None)
        logger.debug("Registered %d calls for %d addresses", registered, len(pending))
        batch.execute()

        try:
            states = [
                AddressState(
                    address=address,
                    namespace=namespace,
                    results=[future.result() if future is not None else None for future in calls],
                )
                for address, namespace, calls in pending
            ]
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Batch call failed: %s", exc)
            return {"error": str(exc)}

        return group_by_namespace(aggregate(states))

    def readable_fields(self, address: str, abi: Optional[List[Dict[str, Any]]] = None) -> List[str]:
        self.cache.ensure(address, abi)
        return self.cache.readable_fields(address)

    def _methods_for(self, request: ContractRequest, address: str) -> List[MethodSpec]:
        methods = list(request.methods)
        if request.all_methods:
            methods.extend(MethodSpec(name=name) for name in self.cache.readable_fields(address))
        return methods

    def _add_address_to_batch(
        self,
        batch: RpcBatch,
        request: ContractRequest,
        address: str,
        block_number: Optional[BlockIdentifier],
    ) -> PendingCalls:
        contract = Contract(self.cache.get(address), address)
        return [
            self._add_method_to_batch(batch, contract, method, block_number)
            for method in self._methods_for(request, address)
        ]

    def _add_method_to_batch(
        self,
        batch: RpcBatch,
        contract: Contract,
        method: MethodSpec,
        block_number: Optional[BlockIdentifier],
    ) -> Optional["Future[RawCallResult]"]:
        arg_count = len(method.args) if method.args is not None else None
        function = contract.get_function(method.name, arg_count)
        if function is None:
            logger.debug("Method %s not found on %s; skipping", method.name, contract.address)
            return None

        future: "Future[RawCallResult]" = Future()
        try:
            data = function.encode_input(method.args)
            call_input = data if method.args is not None else None

            def on_result(error: Optional[Exception], value: Any) -> None:
                if error is not None:
                    future.set_exception(error)
                else:
                    future.set_result(
                        RawCallResult(method=method.name, value=value, input=call_input, args=method.args)
                    )

            batch.add(function.request(method.args, block_number, on_result, data=data))
        except Exception as exc:  # pylint: disable=broad-except
            # Encoding failures reject this call like any other call-level error.
            future.set_exception(exc)
        return future
