"""The deploy / submit / get operations.

Each operation takes a connector explicitly. The default `Web3Connector`
talks to a real node; tests hand in a fake with the same three methods.
Local inputs are always read before any connection is opened, so a bad
keyfile or instance file never results in a network call.
"""
import logging
from pathlib import Path
from typing import Union

from even_number import chain as chain_mod
from even_number.config import DEFAULT_ARTIFACT, DEFAULT_INSTANCE, DEFAULT_TIMEOUT, DEFAULT_UPA_INSTANCE
from even_number.instance import EvenNumberInstance, read_instance, read_upa_instance, write_instance


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

UINT256_MAX = 2 ** 256 - 1


class Web3Connector:

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def load_wallet(self, keyfile: PathLike, password: str):
        return chain_mod.load_wallet(keyfile, password)

    def load_artifact(self, path: PathLike) -> chain_mod.ContractArtifact:
        return chain_mod.load_artifact(path)

    def connect(self, endpoint: str, account=None) -> chain_mod.Chain:
        return chain_mod.Chain.connect(endpoint, account=account, timeout=self.timeout)


def check_number(new_number: int) -> int:
    if not isinstance(new_number, int) or isinstance(new_number, bool):
        raise ValueError(f"newNumber must be an integer, got {new_number!r}")
    if new_number < 0 or new_number > UINT256_MAX:
        raise ValueError(f"newNumber must fit in a uint256, got {new_number}")
    if new_number % 2:
        # The contract decides; we only send.
        logger.warning("%d is odd; the EvenNumber contract may reject it", new_number)
    return new_number


async def deploy(connector, *, endpoint: str, keyfile: PathLike, password: str,
                 upa_instance: PathLike = DEFAULT_UPA_INSTANCE,
                 artifact: PathLike = DEFAULT_ARTIFACT,
                 output: PathLike = DEFAULT_INSTANCE) -> EvenNumberInstance:
    """Deploy EvenNumber against the UPA verifier and record its address.

    The output file is overwritten without backup; the newest deployment
    always wins.
    """
    wallet = connector.load_wallet(keyfile, password)
    upa = read_upa_instance(upa_instance)
    compiled = connector.load_artifact(artifact)
    logger.info("Deploying EvenNumber from %s with UPA verifier %s", wallet.address, upa.verifier)

    async with connector.connect(endpoint, wallet) as chain:
        address = await chain.deploy_contract(compiled, upa.verifier)

    # If the write below fails the address only survives in this log line.
    logger.info("EvenNumber deployed at %s", address)
    instance = EvenNumberInstance(even_number=address)
    write_instance(output, instance)
    logger.debug("Wrote %s", output)
    return instance


async def submit(connector, *, endpoint: str, keyfile: PathLike, password: str,
                 new_number: int, instance: PathLike = DEFAULT_INSTANCE) -> int:
    """Set the stored number. Returns the number that was set."""
    check_number(new_number)
    wallet = connector.load_wallet(keyfile, password)
    deployed = read_instance(instance)

    async with connector.connect(endpoint, wallet) as chain:
        contract = chain.even_number(deployed.even_number)
        logger.info("Calling set(%d) on %s", new_number, deployed.even_number)
        await contract.set(new_number)
    return new_number


async def get(connector, *, endpoint: str, instance: PathLike = DEFAULT_INSTANCE) -> int:
    """Read the currently stored number; needs no wallet."""
    deployed = read_instance(instance)
    async with connector.connect(endpoint) as chain:
        return await chain.even_number(deployed.even_number).get()
