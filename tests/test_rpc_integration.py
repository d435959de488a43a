import os

import pytest

from even_number import commands
from even_number.instance import read_instance


@pytest.mark.skipif(
    not (os.getenv('RPC_ENDPOINT_TEST') and os.getenv('KEYFILE') and os.getenv('UPA_INSTANCE')),
    reason='RPC_ENDPOINT_TEST, KEYFILE or UPA_INSTANCE not set',
)
@pytest.mark.asyncio
async def test_deploy_and_get_against_node(tmp_path):
    """Deploy to a dev node and read the fresh contract back.

    `set` is not exercised here: the contract only accepts numbers whose
    proof has been verified by the UPA, which a bare dev node cannot provide.

    Requires environment variables:
      - RPC_ENDPOINT_TEST (e.g. a local anvil/hardhat node)
      - KEYFILE and KEYFILE_PASSWORD for a funded account
      - UPA_INSTANCE pointing at a UPA deployment on that node
      - (optional) EVEN_NUMBER_ARTIFACT

    Skipped when not configured so it can live in CI.
    """
    connector = commands.Web3Connector(timeout=60)
    endpoint = os.environ['RPC_ENDPOINT_TEST']
    out = tmp_path / "even-number.instance"

    deployed = await commands.deploy(
        connector,
        endpoint=endpoint,
        keyfile=os.environ['KEYFILE'],
        password=os.getenv('KEYFILE_PASSWORD', ''),
        upa_instance=os.environ['UPA_INSTANCE'],
        artifact=os.getenv('EVEN_NUMBER_ARTIFACT', commands.DEFAULT_ARTIFACT),
        output=out,
    )
    assert read_instance(out).even_number == deployed.even_number

    assert await commands.get(connector, endpoint=endpoint, instance=out) == 0
