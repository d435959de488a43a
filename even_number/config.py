import os
from typing import Optional


DEFAULT_ENDPOINT = "http://127.0.0.1:8545/"
DEFAULT_UPA_INSTANCE = "upa.instance"
DEFAULT_INSTANCE = "even-number.instance"
DEFAULT_ARTIFACT = "artifacts/contracts/EvenNumber.sol/EvenNumber.json"
DEFAULT_TIMEOUT = 120.0


def endpoint() -> str:
    return os.getenv("RPC_ENDPOINT", DEFAULT_ENDPOINT)


def keyfile() -> Optional[str]:
    return os.getenv("KEYFILE")


def password() -> Optional[str]:
    return os.getenv("KEYFILE_PASSWORD")


def artifact() -> str:
    return os.getenv("EVEN_NUMBER_ARTIFACT", DEFAULT_ARTIFACT)
