"""
NFT Orchestrator

Composes the IPFS client and the contract binding into the multi-step
workflows behind each command: create an NFT from an asset, read an NFT back,
transfer it, and pin its data.

Creating an NFT touches two backends with different guarantees. All IPFS
steps come first: they are content-addressed, so re-running them after a
failure is harmless. The mint transaction is the last step and the only one
that cannot be undone; it is never retried.
"""

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..config import AppConfig
from ..exceptions import MalformedDataError, PartialMintError
from ..integrations.deployment_registry import load_deployment_info
from ..integrations.ipfs_client import IPFSClient
from ..integrations.pixelz_contract import PixelzContract
from ..utils.uri_utils import (
    ensure_ipfs_uri_prefix,
    extract_cid,
    make_gateway_url,
    strip_ipfs_uri_prefix,
)
from .context import PixelzContext
from .models import CreateNFTResult, NFTInfo, NFTMetadata, PinResult

logger = logging.getLogger(__name__)


def make_pixelz(settings: AppConfig, deployment_file: Optional[str] = None) -> "NFTOrchestrator":
    """
    Load the deployment record, connect the clients and return an orchestrator.

    The contract must already be deployed, with its details written to a
    deployment info file (pixelz-deployment.json by default).

    Args:
        settings: Application settings
        deployment_file: Overrides settings.deployment_config_file
    """
    deploy_info = load_deployment_info(deployment_file or settings.deployment_config_file)
    context = PixelzContext(
        settings=settings,
        deploy_info=deploy_info,
        ipfs=IPFSClient(api_url=settings.ipfs.api_url, timeout=settings.ipfs.timeout),
        contract=PixelzContract.from_config(deploy_info, settings.ethereum),
    )
    return NFTOrchestrator(context)


class NFTOrchestrator:
    """Runs the NFT workflows against IPFS and the Pixelz contract."""

    def __init__(self, context: PixelzContext):
        self.context = context
        self.ipfs = context.ipfs
        self.contract = context.contract
        self.gateway_url = context.settings.ipfs.gateway_url

    def _gateway(self, uri: str) -> str:
        return make_gateway_url(uri, self.gateway_url)

    # ------ NFT creation

    async def create_nft_from_asset_data(
        self,
        content: bytes,
        path: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> CreateNFTResult:
        """
        Create a new NFT from the given asset data.

        Args:
            content: Asset bytes (e.g. an image)
            path: Optional file path; its basename names the asset on IPFS
            name: Name to set in the NFT metadata
            description: Description to set in the NFT metadata
            owner: Address that should own the new NFT. Defaults to the signer.
        """
        basename = os.path.basename(path or "asset.bin")

        asset_address = await self.ipfs.store(content, f"/nft/{basename}")
        asset_uri = ensure_ipfs_uri_prefix(asset_address)

        metadata = self.make_nft_metadata(asset_uri, name=name, description=description)

        # A failure here leaves the asset stored but unreferenced
        metadata_address = await self.ipfs.store_json(metadata.model_dump(), "/nft/metadata.json")
        metadata_uri = ensure_ipfs_uri_prefix(metadata_address)

        owner_address = owner or await self.contract.default_signer_address()

        token_id, metadata_linked = await self._mint(owner_address, metadata_uri)
        logger.info(f"Minted token {token_id} for {owner_address} with metadata {metadata_uri}")

        return CreateNFTResult(
            token_id=token_id,
            owner_address=owner_address,
            metadata=metadata,
            asset_uri=asset_uri,
            metadata_uri=metadata_uri,
            asset_gateway_url=self._gateway(asset_uri),
            metadata_gateway_url=self._gateway(metadata_uri),
            metadata_linked=metadata_linked,
        )

    async def create_nft_from_asset_file(self, filename: str, **options) -> CreateNFTResult:
        """Create a new NFT from an asset file on disk."""
        content = Path(filename).read_bytes()
        return await self.create_nft_from_asset_data(content, path=filename, **options)

    @staticmethod
    def make_nft_metadata(asset_uri: str, name: Optional[str] = None, description: Optional[str] = None) -> NFTMetadata:
        return NFTMetadata(
            name=name,
            description=description,
            image=ensure_ipfs_uri_prefix(asset_uri),
        )

    async def _mint(self, owner_address: str, metadata_uri: str) -> Tuple[str, bool]:
        """Mint a token for the owner and report whether its on-chain URI points at the metadata."""
        # The contract prepends its base URI, so it gets the bare address
        if self.contract.has_function("mintToken"):
            token_id = await self.contract.mint_token(owner_address, strip_ipfs_uri_prefix(metadata_uri))
            return token_id, True

        token_id = await self.contract.purchase(1)
        logger.warning(
            f"Token {token_id} was adopted; its tokenURI comes from the contract base URI "
            f"and is not linked to {metadata_uri}"
        )
        signer = await self.contract.default_signer_address()
        if owner_address.lower() != signer.lower():
            logger.info(f"Moving token {token_id} from {signer} to requested owner {owner_address}")
            try:
                await self.contract.safe_transfer_from(signer, owner_address, token_id)
            except Exception as e:
                raise PartialMintError(token_id, e, getattr(e, "tx_hash", None)) from e
        return token_id, False

    # -------- NFT retrieval

    async def get_nft(self, token_id, fetch_asset: bool = False, fetch_creation_info: bool = False) -> NFTInfo:
        """
        Read an NFT's metadata, owner and optionally its asset and mint info.

        Raises:
            TokenNotFoundError: if the contract has no such token
        """
        metadata_uri, metadata = await self.get_nft_metadata(token_id)
        owner_address = await self.contract.owner_of(token_id)

        fields = {}
        if metadata.image:
            fields["asset_uri"] = metadata.image
            fields["asset_gateway_url"] = self._gateway(metadata.image)
            if fetch_asset:
                fields["asset_data_base64"] = await self.ipfs.fetch_base64(metadata.image)

        if fetch_creation_info:
            fields["creation_info"] = await self.contract.get_creation_info(token_id)

        return NFTInfo(
            token_id=str(token_id),
            owner_address=owner_address,
            metadata=metadata,
            metadata_uri=metadata_uri,
            metadata_gateway_url=self._gateway(metadata_uri),
            **fields,
        )

    async def get_nft_metadata(self, token_id):
        """Return (metadata URI, parsed metadata) for a token."""
        metadata_uri = await self.contract.token_uri(token_id)
        raw = await self.ipfs.fetch_json(metadata_uri)
        try:
            metadata = NFTMetadata.model_validate(raw)
        except PydanticValidationError as e:
            raise MalformedDataError(metadata_uri, e) from e
        return metadata_uri, metadata

    # -------- Transfers

    async def transfer_nft(self, token_id, to_address: str) -> str:
        """Transfer a token from its current owner; returns the transaction hash."""
        from_address = await self.contract.owner_of(token_id)
        tx_hash = await self.contract.safe_transfer_from(from_address, to_address, token_id)
        logger.info(f"Transferred token {token_id} from {from_address} to {to_address}")
        return tx_hash

    # -------- Pinning

    async def pin_token_data(self, token_id) -> PinResult:
        """Pin a token's metadata and asset, remotely when a pinning service is configured."""
        metadata_uri, metadata = await self.get_nft_metadata(token_id)

        service = None
        pinning = self.context.settings.pinning
        if pinning.is_configured():
            await self.ipfs.ensure_pinning_service(pinning.service_name, pinning.endpoint, pinning.api_key)
            service = pinning.service_name

        await self.ipfs.pin(extract_cid(metadata_uri), service=service)
        if metadata.image:
            await self.ipfs.pin(extract_cid(metadata.image), service=service)

        return PinResult(asset_uri=metadata.image, metadata_uri=metadata_uri)

    # -------- Sale and administration

    async def purchase(self, count: int, payment_eth: Optional[Decimal] = None) -> str:
        payment_wei = None
        if payment_eth is not None:
            payment_wei = int(Decimal(payment_eth) * Decimal(10) ** 18)
        return await self.contract.purchase(count, payment_wei=payment_wei)

    async def sale_status(self) -> bool:
        return await self.contract.has_sale_started()

    async def start_sale(self) -> bool:
        await self.contract.start_sale()
        return await self.contract.has_sale_started()

    async def pause_sale(self) -> bool:
        await self.contract.pause_sale()
        return await self.contract.has_sale_started()

    async def price_in_eth(self, token_id=None) -> Decimal:
        """Current price, or the price of a given token id, in ether."""
        if token_id is None:
            price = await self.contract.calculate_price()
        else:
            price = await self.contract.calculate_price_for_token(token_id)
        return self.contract.to_eth(price)

    async def owned_tokens(self, owner_address: str) -> List[str]:
        return [str(t) for t in await self.contract.tokens_of_owner(owner_address)]

    async def set_base_uri(self, base_uri: str) -> str:
        return await self.contract.set_base_uri(base_uri)

    async def set_provenance_hash(self, provenance_hash: str) -> str:
        return await self.contract.set_provenance_hash(provenance_hash)

    async def withdraw_all(self) -> str:
        return await self.contract.withdraw_all()

    async def reserve_giveaway(self, count: int) -> str:
        return await self.contract.reserve_giveaway(count)
