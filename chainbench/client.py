from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TimeExhausted
from web3.middleware import ExtraDataToPOAMiddleware, SignAndSendRawMiddlewareBuilder

from .benchmarks.errors import (
    ConfigurationMissing,
    ConfirmationTimeout,
    FatalOrchestrationError,
    SubmissionFailure,
)
from .benchmarks.scenarios import Confirmation

LOGGER = logging.getLogger("chainbench.client")

DEFAULT_ADDRESSES_PATH = Path("deployed_addresses.json")


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int
    rpc_template: str

    def rpc_url(self, env: Optional[dict[str, str]] = None) -> str:
        env = dict(os.environ if env is None else env)
        if "{alchemy_key}" in self.rpc_template:
            key = env.get("ALCHEMY_API_KEY")
            if not key:
                raise FatalOrchestrationError(
                    f"ALCHEMY_API_KEY is required for network {self.name!r}"
                )
            return self.rpc_template.format(alchemy_key=key)
        return self.rpc_template


NETWORKS: dict[str, NetworkConfig] = {
    "hardhat": NetworkConfig("hardhat", 1337, "http://127.0.0.1:8545"),
    "sepolia": NetworkConfig(
        "sepolia", 11155111, "https://eth-sepolia.g.alchemy.com/v2/{alchemy_key}"
    ),
    "arbitrumSepolia": NetworkConfig(
        "arbitrumSepolia", 421614, "https://arb-sepolia.g.alchemy.com/v2/{alchemy_key}"
    ),
    "polygonZkEVMTestnet": NetworkConfig(
        "polygonZkEVMTestnet",
        2442,
        "https://polygonzkevm-cardona.g.alchemy.com/v2/{alchemy_key}",
    ),
    "opSepolia": NetworkConfig(
        "opSepolia", 11155420, "https://opt-sepolia.g.alchemy.com/v2/{alchemy_key}"
    ),
    "baseSepolia": NetworkConfig(
        "baseSepolia", 84532, "https://base-sepolia.g.alchemy.com/v2/{alchemy_key}"
    ),
}

ERC20_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    }
]

STORAGE_MANIPULATOR_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "writeData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "key", "type": "uint256"},
            {"name": "value", "type": "string"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "performComplexCalculation",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "a", "type": "uint256"},
            {"name": "b", "type": "uint256"},
            {"name": "iterations", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

CONTRACT_ABIS: dict[str, list[dict[str, Any]]] = {
    "MyERC20": ERC20_ABI,
    "StorageManipulator": STORAGE_MANIPULATOR_ABI,
}


def resolve_rpc_url(network: str, override: str | None = None) -> str:
    if override:
        return override
    config = NETWORKS.get(network)
    if config is None:
        raise FatalOrchestrationError(
            f"Unknown network {network!r}; pass --rpc-url or use one of: "
            + ", ".join(sorted(NETWORKS))
        )
    return config.rpc_url()


def load_deployed_addresses(path: str | Path, network: str) -> dict[str, str]:
    """Return the contract addresses recorded for ``network``.

    The file maps network names to ``{"MyERC20": "0x..", ...}`` objects. A
    missing file or network is fatal: no scenario could run without it.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise FatalOrchestrationError(f"Deployed addresses file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise FatalOrchestrationError(f"{path}: invalid JSON") from exc

    if not isinstance(raw, dict):
        raise FatalOrchestrationError(f"{path}: top-level value must be an object")

    addresses = raw.get(network)
    if not isinstance(addresses, dict):
        raise FatalOrchestrationError(
            f"No deployed addresses found for network {network!r} in {path}"
        )
    return {str(name): str(value) for name, value in addresses.items() if value}


def create_web3(rpc_url: str, private_key: str, poa: bool = False) -> AsyncWeb3:
    account = Account.from_key(private_key)
    web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
    if poa:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    web3.eth.default_account = account.address
    LOGGER.info("Signer %s on %s", account.address, rpc_url)
    return web3


def random_address() -> str:
    return Account.create().address


class TransactionHandle:
    def __init__(self, web3: AsyncWeb3, tx_hash: Any, timeout: float | None) -> None:
        self._web3 = web3
        self.tx_hash = tx_hash
        self._timeout = timeout

    async def confirm(self) -> Confirmation:
        try:
            receipt = await self._web3.eth.wait_for_transaction_receipt(
                self.tx_hash, timeout=self._timeout
            )
        except TimeExhausted as exc:
            raise ConfirmationTimeout(
                f"no receipt for {_hex(self.tx_hash)} within {self._timeout}s"
            ) from exc

        return Confirmation(
            succeeded=receipt.get("status", 0) == 1,
            resource_used=int(receipt.get("gasUsed") or 0),
            unit_price=int(receipt.get("effectiveGasPrice") or 0),
        )


class ContractFunctionBinding:
    """One contract function bound to the web3 default (signing) account."""

    def __init__(
        self,
        web3: AsyncWeb3,
        contract: Any,
        function_name: str,
        receipt_timeout: float | None = None,
    ) -> None:
        self._web3 = web3
        self._contract = contract
        self._function_name = function_name
        self._receipt_timeout = receipt_timeout

    @property
    def function_name(self) -> str:
        return self._function_name

    async def submit(self, args: Sequence[Any], resource_limit: int) -> TransactionHandle:
        function = getattr(self._contract.functions, self._function_name)
        try:
            tx_hash = await function(*args).transact({"gas": resource_limit})
        except Exception as exc:  # noqa: BLE001
            raise SubmissionFailure(f"{self._function_name}{tuple(args)!r}: {exc}") from exc
        return TransactionHandle(self._web3, tx_hash, self._receipt_timeout)


class ContractClient:
    """Builds function bindings for the contracts deployed on one network."""

    def __init__(
        self,
        web3: AsyncWeb3,
        network: str,
        receipt_timeout: float | None = None,
    ) -> None:
        self.web3 = web3
        self.network = network
        self._receipt_timeout = receipt_timeout

    def binding(
        self, contract_name: str, address: str | None, function_name: str
    ) -> ContractFunctionBinding:
        if not address or not address.startswith("0x"):
            raise ConfigurationMissing(
                f"{contract_name} address not configured for {self.network}."
            )
        abi = CONTRACT_ABIS.get(contract_name)
        if abi is None:
            raise ConfigurationMissing(f"No ABI bundled for contract {contract_name!r}.")
        contract = self.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=abi
        )
        return ContractFunctionBinding(
            self.web3, contract, function_name, receipt_timeout=self._receipt_timeout
        )


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


__all__ = [
    "NETWORKS",
    "NetworkConfig",
    "ContractClient",
    "ContractFunctionBinding",
    "TransactionHandle",
    "create_web3",
    "load_deployed_addresses",
    "random_address",
    "resolve_rpc_url",
]
