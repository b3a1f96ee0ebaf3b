"""
Test configuration and fixtures for the pixelz test suite.

Provides a fake IPFS node behind httpx.MockTransport, a sample deployment
record and a mocked contract binding.
"""

import asyncio
import json
from unittest.mock import MagicMock

import httpx
import pytest

from pixelz.config import AppConfig, IPFSConfig
from pixelz.core.context import PixelzContext
from pixelz.core.models import DeploymentRecord
from pixelz.core.nft_orchestrator import NFTOrchestrator
from pixelz.integrations.ipfs_client import IPFSClient
from pixelz.integrations.pixelz_contract import PixelzContract
from tests.test_utils import (
    CONTRACT_ADDRESS,
    GATEWAY_URL,
    SAMPLE_ABI,
    SIGNER_ADDRESS,
    FakeIPFSNode,
)


@pytest.fixture
def fake_ipfs():
    """Fake IPFS node with an empty block store."""
    return FakeIPFSNode()


@pytest.fixture
def ipfs_client(fake_ipfs):
    """IPFSClient wired to the fake node."""
    return IPFSClient(api_url="http://ipfs.test:5001", transport=httpx.MockTransport(fake_ipfs.handler))


@pytest.fixture
def settings():
    """Settings pointing at test endpoints."""
    return AppConfig(ipfs=IPFSConfig(api_url="http://ipfs.test:5001", gateway_url=GATEWAY_URL))


@pytest.fixture
def deployment_data():
    """Raw deployment info, as written by `pixelz deploy`."""
    return {
        "network": "localhost",
        "contract": {
            "name": "Pixelz",
            "address": CONTRACT_ADDRESS,
            "signerAddress": SIGNER_ADDRESS,
            "abi": SAMPLE_ABI,
        },
    }


@pytest.fixture
def deployment_record(deployment_data):
    return DeploymentRecord.model_validate(deployment_data)


@pytest.fixture
def deployment_file(tmp_path, deployment_data):
    """Deployment info written to a temporary file."""
    path = tmp_path / "pixelz-deployment.json"
    path.write_text(json.dumps(deployment_data), encoding="utf-8")
    return path


@pytest.fixture
def mock_contract():
    """Mocked contract binding; async methods are AsyncMocks."""
    contract = MagicMock(spec=PixelzContract)
    contract.has_function.return_value = False
    contract.default_signer_address.return_value = SIGNER_ADDRESS
    contract.to_eth.side_effect = PixelzContract.to_eth
    return contract


@pytest.fixture
def orchestrator(settings, deployment_record, ipfs_client, mock_contract):
    """NFTOrchestrator over the fake node and the mocked contract."""
    context = PixelzContext(
        settings=settings,
        deploy_info=deployment_record,
        ipfs=ipfs_client,
        contract=mock_contract,
    )
    return NFTOrchestrator(context)


@pytest.fixture
def resolved():
    """Build an already-resolved future, for awaitable properties like eth.accounts."""
    def make(value):
        future = asyncio.get_running_loop().create_future()
        future.set_result(value)
        return future
    return make
