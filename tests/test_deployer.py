"""
Tests for deploying the Pixelz contract.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pixelz.config import EthereumConfig
from pixelz.exceptions import ConfigurationError, TransactionFailedError
from pixelz.integrations.deployer import CONTRACT_NAME, deploy_contract, load_artifact
from tests.test_utils import CONTRACT_ADDRESS, SAMPLE_ABI, SIGNER_ADDRESS, SIGNER_PRIVATE_KEY


@pytest.fixture
def artifact_path(tmp_path):
    path = tmp_path / "Pixelz.json"
    path.write_text(json.dumps({"contractName": "Pixelz", "abi": SAMPLE_ABI, "bytecode": "0x6080"}), encoding="utf-8")
    return path


@pytest.fixture
def eth_config(artifact_path):
    return EthereumConfig(artifact_path=str(artifact_path), network="localhost", private_key=None)


@pytest.fixture
def deploy_w3():
    w3 = MagicMock()
    w3.eth.wait_for_transaction_receipt = AsyncMock(
        return_value={"status": 1, "contractAddress": CONTRACT_ADDRESS, "blockNumber": 1}
    )
    w3.eth.contract.return_value.constructor.return_value.transact = AsyncMock(return_value=b"\x01" * 32)
    return w3


class TestLoadArtifact:

    def test_load(self, artifact_path):
        artifact = load_artifact(str(artifact_path))
        assert artifact["abi"] == SAMPLE_ABI

    def test_missing_artifact(self, tmp_path):
        with pytest.raises(ConfigurationError, match="compile the contract first"):
            load_artifact(str(tmp_path / "nope.json"))

    def test_artifact_without_bytecode(self, tmp_path):
        path = tmp_path / "Pixelz.json"
        path.write_text(json.dumps({"abi": SAMPLE_ABI}), encoding="utf-8")

        with pytest.raises(ConfigurationError, match="no abi or bytecode"):
            load_artifact(str(path))


class TestDeployContract:

    @pytest.mark.asyncio
    async def test_deploy_returns_record(self, eth_config, deploy_w3, resolved):
        deploy_w3.eth.accounts = resolved([SIGNER_ADDRESS])

        record = await deploy_contract(eth_config, "Pixelz", "PXLZ", "ipfs://", w3=deploy_w3)

        assert record.network == "localhost"
        assert record.contract.name == CONTRACT_NAME
        assert record.contract.address == CONTRACT_ADDRESS
        assert record.contract.signer_address == SIGNER_ADDRESS
        assert record.contract.abi == SAMPLE_ABI
        deploy_w3.eth.contract.assert_called_once_with(abi=SAMPLE_ABI, bytecode="0x6080")
        deploy_w3.eth.contract.return_value.constructor.assert_called_once_with("ipfs://")
        deploy_w3.eth.wait_for_transaction_receipt.assert_awaited_once_with(b"\x01" * 32, timeout=None)

    @pytest.mark.asyncio
    async def test_deploy_with_private_key_uses_pending_nonce(self, eth_config, deploy_w3):
        eth_config = eth_config.model_copy(update={"private_key": SIGNER_PRIVATE_KEY})
        deploy_w3.eth.get_transaction_count = AsyncMock(return_value=3)
        deploy_w3.eth.send_raw_transaction = AsyncMock(return_value=b"\x02" * 32)
        deploy_w3.eth.contract.return_value.constructor.return_value.build_transaction = AsyncMock(return_value={
            "value": 0,
            "gas": 3000000,
            "gasPrice": 10 ** 9,
            "nonce": 3,
            "chainId": 31337,
            "data": "0x6080",
        })

        record = await deploy_contract(eth_config, "Pixelz", "PXLZ", "ipfs://", w3=deploy_w3)

        assert record.contract.signer_address == SIGNER_ADDRESS
        deploy_w3.eth.get_transaction_count.assert_awaited_once_with(SIGNER_ADDRESS, "pending")
        deploy_w3.eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reverted_deployment(self, eth_config, deploy_w3, resolved):
        deploy_w3.eth.accounts = resolved([SIGNER_ADDRESS])
        deploy_w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "contractAddress": None}

        with pytest.raises(TransactionFailedError):
            await deploy_contract(eth_config, "Pixelz", "PXLZ", "ipfs://", w3=deploy_w3)

    @pytest.mark.asyncio
    async def test_no_signing_account(self, eth_config, deploy_w3, resolved):
        deploy_w3.eth.accounts = resolved([])

        with pytest.raises(ConfigurationError, match="no signing account"):
            await deploy_contract(eth_config, "Pixelz", "PXLZ", "ipfs://", w3=deploy_w3)
