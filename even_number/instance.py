"""Instance files: small JSON records of on-chain contract addresses.

`even-number.instance` is written by `deploy` and read by `submit`/`get`.
`upa.instance` is produced upstream by the UPA deployment tooling; we only
read the verifier address out of it.
"""
import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Union

from web3 import Web3

from even_number.errors import NotFoundError, ParseError


PathLike = Union[str, Path]


@dataclasses.dataclass(frozen=True)
class EvenNumberInstance:
    # Address of the even-number contract
    even_number: str

    def to_json(self) -> Dict[str, str]:
        return {"evenNumber": self.even_number}


@dataclasses.dataclass(frozen=True)
class UpaInstance:
    verifier: str
    raw: Dict[str, Any] = dataclasses.field(default_factory=dict, compare=False)


def is_address(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("0x") and Web3.is_address(value)


def _load_json_object(path: PathLike, what: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.is_file():
        raise NotFoundError(f"{what} not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"{what} {p} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"{what} {p} must contain a JSON object")
    return data


def _address_field(data: Dict[str, Any], key: str, path: PathLike, what: str) -> str:
    if key not in data:
        raise ParseError(f"{what} {path} has no '{key}' field")
    value = data[key]
    if not is_address(value):
        raise ParseError(f"{what} {path}: '{key}' is not a valid address: {value!r}")
    return value


def write_instance(path: PathLike, instance: EvenNumberInstance) -> Path:
    """Write the instance file, replacing whatever was there before."""
    p = Path(path)
    p.write_text(json.dumps(instance.to_json()), encoding="utf-8")
    return p


def read_instance(path: PathLike) -> EvenNumberInstance:
    data = _load_json_object(path, "even-number instance file")
    address = _address_field(data, "evenNumber", path, "even-number instance file")
    return EvenNumberInstance(even_number=address)


def read_upa_instance(path: PathLike) -> UpaInstance:
    data = _load_json_object(path, "UPA instance file")
    verifier = _address_field(data, "verifier", path, "UPA instance file")
    return UpaInstance(verifier=verifier, raw=data)
