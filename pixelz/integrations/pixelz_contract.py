"""
Pixelz Contract Binding

Typed wrapper around the deployed Pixelz ERC-721 contract. Method names and
argument order on the contract side come from the contract's ABI and are not
negotiable; this module only adapts them to Python.

Every state-changing call goes through the same two steps: submit the
transaction, then wait for its receipt. The receipt's logs are decoded
against the ABI so that callers can look for the Transfer event that carries
a newly minted token id.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, LogTopicError, MismatchedABI

from ..config import EthereumConfig
from ..core.models import CreationInfo, DeploymentRecord
from ..exceptions import (
    TokenNotFoundError,
    TransactionFailedError,
    UnconfirmedMintError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_PURCHASE_COUNT = 20

# ERC721 has two overloads of safeTransferFrom, so it is called by signature
SAFE_TRANSFER_SIGNATURE = "safeTransferFrom(address,address,uint256)"


def extract_token_id(events: Sequence[Dict[str, Any]], tx_hash: Optional[str] = None) -> str:
    """
    Return the token id carried by the first Transfer event.

    Args:
        events: Decoded receipt events, in emission order, each a dict with
            "event" (name or None) and "args"
        tx_hash: Transaction hash, used in the error message

    Raises:
        UnconfirmedMintError: if no Transfer event is present
    """
    for event in events:
        if event.get("event") != "Transfer":
            logger.info(f"ignoring unknown event type {event.get('event')}")
            continue
        return str(event["args"]["tokenId"])
    raise UnconfirmedMintError(tx_hash)


class PixelzContract:
    """Async binding to a deployed Pixelz contract."""

    def __init__(self, w3: AsyncWeb3, deploy_info: DeploymentRecord, private_key: Optional[str] = None):
        """
        Args:
            w3: Connected AsyncWeb3 instance
            deploy_info: Deployment record with the contract address and ABI
            private_key: Signing key. Without one, transactions are sent from
                the node's first unlocked account.
        """
        self.w3 = w3
        self.deploy_info = deploy_info
        self.abi = deploy_info.contract.abi
        self.contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(deploy_info.contract.address),
            abi=self.abi,
        )
        self.account = Account.from_key(private_key) if private_key else None
        self._event_names = [e["name"] for e in self.abi if e.get("type") == "event"]

    @classmethod
    def from_config(cls, deploy_info: DeploymentRecord, config: EthereumConfig) -> "PixelzContract":
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))
        return cls(w3, deploy_info, private_key=config.private_key)

    def has_function(self, name: str) -> bool:
        """Check whether the contract ABI exposes a function."""
        return any(e.get("type") == "function" and e.get("name") == name for e in self.abi)

    async def default_signer_address(self) -> str:
        """The address that signs transactions and owns new tokens by default."""
        if self.account:
            return self.account.address
        accounts = await self.w3.eth.accounts
        if not accounts:
            raise ValidationError("no signing account: set ETH_PRIVATE_KEY or unlock an account on the node")
        return accounts[0]

    # --- Transactions

    async def submit(self, fn, value: int = 0) -> str:
        """Submit a contract function call as a transaction and return its hash."""
        sender = await self.default_signer_address()
        tx_params: Dict[str, Any] = {"from": sender}
        if value:
            tx_params["value"] = value

        if self.account:
            tx_params["nonce"] = await self.w3.eth.get_transaction_count(sender, "pending")
            tx = await fn.build_transaction(tx_params)
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = await fn.transact(tx_params)

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"Submitted {fn.fn_name} transaction {tx_hash_hex}", extra={"tx_hash": tx_hash_hex})
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str, fn_name: str = "transaction"):
        """
        Wait until the transaction is mined.

        Raises:
            TransactionFailedError: if the receipt reports a revert
        """
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=None)
        if receipt["status"] == 0:
            raise TransactionFailedError(fn_name, tx_hash)
        logger.debug(f"{fn_name} confirmed in block {receipt['blockNumber']}", extra={"tx_hash": tx_hash})
        return receipt

    async def _transact(self, fn, value: int = 0):
        tx_hash = await self.submit(fn, value=value)
        receipt = await self.wait_for_receipt(tx_hash, fn.fn_name)
        return tx_hash, receipt

    def decode_receipt_events(self, receipt) -> List[Dict[str, Any]]:
        """Decode every log in a receipt against the ABI events, keeping order."""
        return [self._decode_log(log) for log in receipt["logs"]]

    def _decode_log(self, log) -> Dict[str, Any]:
        for name in self._event_names:
            try:
                decoded = getattr(self.contract.events, name)().process_log(log)
            except (MismatchedABI, LogTopicError):
                continue
            return {"event": decoded["event"], "args": dict(decoded["args"])}
        return {"event": None, "args": {}}

    async def _mint_transact(self, fn, value: int = 0) -> str:
        tx_hash, receipt = await self._transact(fn, value=value)
        return extract_token_id(self.decode_receipt_events(receipt), tx_hash)

    # --- Minting

    async def purchase(self, count: int, payment_wei: Optional[int] = None) -> str:
        """
        Adopt (buy) `count` Pixelz, between 1 and 20 inclusive.

        Args:
            count: Number of tokens to mint
            payment_wei: Amount to send. Defaults to the current price times count.

        Returns:
            The id of the first minted token
        """
        if count < 1 or count > MAX_PURCHASE_COUNT:
            raise ValidationError(f"Number must be between 1 to {MAX_PURCHASE_COUNT} inclusive")
        if payment_wei is None:
            payment_wei = await self.calculate_price() * count
        return await self._mint_transact(self.contract.functions.adoptPixelz(count), value=payment_wei)

    async def mint_token(self, owner_address: str, metadata_uri: str) -> str:
        """Mint one token to owner_address pointing at metadata_uri."""
        fn = self.contract.functions.mintToken(AsyncWeb3.to_checksum_address(owner_address), metadata_uri)
        return await self._mint_transact(fn)

    # --- Transfers

    async def safe_transfer_from(self, from_address: str, to_address: str, token_id) -> str:
        transfer_fn = self.contract.get_function_by_signature(SAFE_TRANSFER_SIGNATURE)
        fn = transfer_fn(
            AsyncWeb3.to_checksum_address(from_address),
            AsyncWeb3.to_checksum_address(to_address),
            int(token_id),
        )
        tx_hash, _ = await self._transact(fn)
        return tx_hash

    # --- Read-only queries

    async def owner_of(self, token_id) -> str:
        try:
            return await self.contract.functions.ownerOf(int(token_id)).call()
        except ContractLogicError as e:
            raise TokenNotFoundError(token_id, e) from e

    async def token_uri(self, token_id) -> str:
        try:
            return await self.contract.functions.tokenURI(int(token_id)).call()
        except ContractLogicError as e:
            raise TokenNotFoundError(token_id, e) from e

    async def total_supply(self) -> int:
        return await self.contract.functions.totalSupply().call()

    async def calculate_price(self) -> int:
        return await self.contract.functions.calculatePrice().call()

    async def calculate_price_for_token(self, token_id) -> int:
        return await self.contract.functions.calculatePriceForToken(int(token_id)).call()

    async def has_sale_started(self) -> bool:
        return await self.contract.functions.hasSaleStarted().call()

    async def tokens_of_owner(self, owner_address: str) -> List[int]:
        return await self.contract.functions.tokensOfOwner(
            AsyncWeb3.to_checksum_address(owner_address)
        ).call()

    async def get_creation_info(self, token_id) -> CreationInfo:
        """Block height and first recipient of the token's mint Transfer."""
        logs = await self.contract.events.Transfer().get_logs(
            argument_filters={"tokenId": int(token_id)},
            from_block=0,
        )
        if not logs:
            raise TokenNotFoundError(token_id)
        first = logs[0]
        return CreationInfo(block_number=first["blockNumber"], creator_address=first["args"]["to"])

    @staticmethod
    def to_eth(amount_wei: int) -> Decimal:
        return AsyncWeb3.from_wei(amount_wei, "ether")

    # --- Owner-only administration

    async def start_sale(self) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.startSale())
        return tx_hash

    async def pause_sale(self) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.pauseSale())
        return tx_hash

    async def set_base_uri(self, base_uri: str) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.setBaseURI(base_uri))
        return tx_hash

    async def set_provenance_hash(self, provenance_hash: str) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.setProvenanceHash(provenance_hash))
        return tx_hash

    async def withdraw_all(self) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.withdrawAll())
        return tx_hash

    async def reserve_giveaway(self, count: int) -> str:
        tx_hash, _ = await self._transact(self.contract.functions.reserveGiveaway(count))
        return tx_hash
