"""Thin async wrapper over web3/eth-account for the EvenNumber contract.

This is the only module that knows about web3. Every error coming out of
the node or the transport is re-raised as ChainError so callers only see
the tool's own error types.
"""
import asyncio
import dataclasses
import functools
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from even_number.config import DEFAULT_TIMEOUT
from even_number.errors import AuthenticationError, ChainError, NotFoundError, ParseError


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EVEN_NUMBER_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_verifier", "type": "address", "internalType": "contract IUpaVerifier"}],
    },
    {
        "type": "function",
        "name": "set",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "x", "type": "uint256", "internalType": "uint256"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "get",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
    },
]

_NETWORK_ERRORS = (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)


def chain_call(fn):
    """Translate web3/transport failures raised by `fn` into ChainError."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except _NETWORK_ERRORS as e:
            raise ChainError(f"{fn.__name__} failed: {e}") from e

    return wrapper


def load_wallet(keyfile: PathLike, password: str) -> LocalAccount:
    """Decrypt a V3 keystore (as written by geth or ethers) into a local account."""
    p = Path(keyfile)
    if not p.is_file():
        raise NotFoundError(f"keyfile not found: {p}")
    try:
        keystore = json.loads(p.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise AuthenticationError(f"keyfile {p} is not a valid keystore: {e}") from e
    try:
        private_key = Account.decrypt(keystore, password)
    except (ValueError, KeyError, TypeError) as e:
        raise AuthenticationError(f"unable to decrypt keyfile {p}: {e}") from e
    account = Account.from_key(private_key)
    logger.debug("Loaded wallet %s from %s", account.address, p)
    return account


@dataclasses.dataclass(frozen=True)
class ContractArtifact:
    abi: List[Dict[str, Any]]
    bytecode: str


def load_artifact(path: PathLike) -> ContractArtifact:
    """Read a compiled contract artifact (Hardhat or Foundry layout)."""
    p = Path(path)
    if not p.is_file():
        raise NotFoundError(f"contract artifact not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"contract artifact {p} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"contract artifact {p} must contain a JSON object")
    abi = data.get("abi")
    bytecode = data.get("bytecode")
    # Foundry nests the hex under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    if not isinstance(abi, list) or not isinstance(bytecode, str) or bytecode in ("", "0x"):
        raise ParseError(f"contract artifact {p} is missing abi/bytecode")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return ContractArtifact(abi=abi, bytecode=bytecode)


class Chain:
    """Connection to a node, optionally holding a signing account."""

    def __init__(self, w3: AsyncWeb3, account: Optional[LocalAccount] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.w3 = w3
        self.account = account
        self.timeout = timeout

    @classmethod
    def connect(cls, endpoint: str, account: Optional[LocalAccount] = None,
                timeout: float = DEFAULT_TIMEOUT) -> "Chain":
        logger.debug("Using JSON-RPC endpoint %s", endpoint)
        return cls(AsyncWeb3(AsyncHTTPProvider(endpoint)), account=account, timeout=timeout)

    async def close(self) -> None:
        await self.w3.provider.disconnect()

    async def __aenter__(self) -> "Chain":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _require_account(self) -> LocalAccount:
        if self.account is None:
            raise AuthenticationError("a signing wallet is required for this operation")
        return self.account

    async def _send(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        account = self._require_account()
        signed = account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Sent transaction %s, waiting for receipt", Web3.to_hex(tx_hash))
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        if receipt["status"] != 1:
            raise ChainError(f"transaction {Web3.to_hex(tx_hash)} reverted in block {receipt['blockNumber']}")
        return receipt

    async def _tx_params(self) -> Dict[str, Any]:
        account = self._require_account()
        return {
            "from": account.address,
            "nonce": await self.w3.eth.get_transaction_count(account.address, "pending"),
        }

    @chain_call
    async def deploy_contract(self, artifact: ContractArtifact, *constructor_args: Any) -> str:
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        tx = await factory.constructor(*constructor_args).build_transaction(await self._tx_params())
        receipt = await self._send(tx)
        address = receipt.get("contractAddress")
        if not address:
            raise ChainError("deployment receipt carries no contract address")
        return Web3.to_checksum_address(address)

    def even_number(self, address: str) -> "EvenNumberContract":
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=EVEN_NUMBER_ABI)
        return EvenNumberContract(self, contract)


class EvenNumberContract:

    def __init__(self, chain: Chain, contract):
        self.chain = chain
        self.contract = contract

    @property
    def address(self) -> str:
        return self.contract.address

    @chain_call
    async def set(self, number: int) -> Dict[str, Any]:
        fn = self.contract.functions.set(number)
        tx = await fn.build_transaction(await self.chain._tx_params())
        return await self.chain._send(tx)

    @chain_call
    async def get(self) -> int:
        return await self.contract.functions.get().call()
