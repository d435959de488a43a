import json
import os
import sys

import pytest
from eth_account import Account
from web3 import Web3

# Ensure project root is on sys.path so tests can import local package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from even_number.chain import EVEN_NUMBER_ABI
from even_number.commands import Web3Connector
from even_number.errors import ChainError


PASSWORD = "correct horse"
PRIVATE_KEY = "0x" + "11" * 32
VERIFIER = Web3.to_checksum_address("0x" + "ab" * 20)


def fake_address(i: int) -> str:
    return Web3.to_checksum_address("0x" + f"{i:040x}")


class FakeContract:

    def __init__(self, chain, address):
        self.chain = chain
        self.address = address

    async def set(self, number):
        if self.chain.fail:
            raise self.chain.fail
        self.chain.connector.sent.append(("set", self.address, number))
        self.chain.connector.stored[self.address] = number
        return {"status": 1}

    async def get(self):
        return self.chain.connector.stored.get(self.address, 0)


class FakeChain:

    def __init__(self, connector, endpoint, account):
        self.connector = connector
        self.endpoint = endpoint
        self.account = account
        self.fail = connector.fail
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True

    async def deploy_contract(self, artifact, *args):
        if self.fail:
            raise self.fail
        self.connector.deploys += 1
        address = fake_address(self.connector.deploys)
        self.connector.sent.append(("deploy", address, args))
        return address

    def even_number(self, address):
        return FakeContract(self, address)


class FakeConnector(Web3Connector):
    """Real wallet and artifact loading, in-memory chain."""

    def __init__(self):
        super().__init__()
        self.connections = []
        self.sent = []
        self.stored = {}
        self.deploys = 0
        self.fail = None

    def connect(self, endpoint, account=None):
        chain = FakeChain(self, endpoint, account)
        self.connections.append(chain)
        return chain


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def failing_connector():
    c = FakeConnector()
    c.fail = ChainError("execution reverted")
    return c


@pytest.fixture
def keyfile(tmp_path):
    # pbkdf2 with a tiny iteration count keeps the tests fast
    keystore = Account.encrypt(PRIVATE_KEY, PASSWORD, kdf="pbkdf2", iterations=2)
    p = tmp_path / "wallet.json"
    p.write_text(json.dumps(keystore))
    return p


@pytest.fixture
def upa_instance(tmp_path):
    p = tmp_path / "upa.instance"
    p.write_text(json.dumps({"verifier": VERIFIER, "deploymentBlockNumber": 7}))
    return p


@pytest.fixture
def artifact(tmp_path):
    p = tmp_path / "EvenNumber.json"
    p.write_text(json.dumps({"contractName": "EvenNumber", "abi": EVEN_NUMBER_ABI, "bytecode": "0x6080604052"}))
    return p
