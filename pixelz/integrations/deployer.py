"""
Contract Deployer

Deploys a fresh instance of the Pixelz contract from a compiled Hardhat
artifact and describes it as a DeploymentRecord.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from eth_account import Account
from web3 import AsyncWeb3

from ..config import EthereumConfig
from ..core.models import ContractInfo, DeploymentRecord
from ..exceptions import ConfigurationError, TransactionFailedError

logger = logging.getLogger(__name__)

CONTRACT_NAME = "Pixelz"


def load_artifact(artifact_path: str) -> dict:
    """Read a Hardhat artifact and check it has an ABI and bytecode."""
    path = Path(artifact_path)
    if not path.exists():
        raise ConfigurationError(f"contract artifact not found: {path}; compile the contract first")
    try:
        artifact = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"contract artifact {path} is not valid JSON: {e}") from e
    if not artifact.get("abi") or not artifact.get("bytecode"):
        raise ConfigurationError(f"contract artifact {path} has no abi or bytecode")
    return artifact


async def deploy_contract(
    config: EthereumConfig,
    name: str,
    symbol: str,
    base_uri: str,
    w3: Optional[AsyncWeb3] = None,
) -> DeploymentRecord:
    """
    Deploy the Pixelz contract and wait for it to be mined.

    Args:
        config: Ethereum settings (RPC URL, network name, signer, artifact path)
        name: Token name, for display
        symbol: Token symbol, for display
        base_uri: Initial base URI passed to the constructor
        w3: Optional connected AsyncWeb3; one is built from config otherwise
    """
    artifact = load_artifact(config.artifact_path)
    w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))

    logger.info(
        f'deploying contract for token {name} ({symbol}) with base URI "{base_uri}" to network "{config.network}"...'
    )
    factory = w3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])
    constructor = factory.constructor(base_uri)

    if config.private_key:
        account = Account.from_key(config.private_key)
        signer = account.address
        tx = await constructor.build_transaction({
            "from": signer,
            "nonce": await w3.eth.get_transaction_count(signer, "pending"),
        })
        signed = account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
    else:
        accounts = await w3.eth.accounts
        if not accounts:
            raise ConfigurationError("no signing account: set ETH_PRIVATE_KEY or unlock an account on the node")
        signer = accounts[0]
        tx_hash = await constructor.transact({"from": signer})

    receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=None)
    if receipt["status"] == 0:
        raise TransactionFailedError("constructor", AsyncWeb3.to_hex(tx_hash))

    address = receipt["contractAddress"]
    logger.info(f"deployed contract for token {name} ({symbol}) to {address} (network: {config.network})")

    return DeploymentRecord(
        network=config.network,
        contract=ContractInfo(
            name=CONTRACT_NAME,
            address=address,
            signer_address=signer,
            abi=artifact["abi"],
        ),
    )
