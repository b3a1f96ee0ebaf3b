"""
Data models for NFT metadata and workflow results.

Field aliases follow the camelCase names used in the deployment file and in
the JSON printed by the command line, while Python code uses snake_case.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with camelCase keys, omitting fields that were not fetched."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ContractInfo(_CamelModel):
    """The contract section of a deployment record."""

    name: str
    address: str
    abi: List[Dict[str, Any]]
    signer_address: Optional[str] = Field(default=None, alias="signerAddress")


class DeploymentRecord(_CamelModel):
    """Where and how to reach an already-deployed Pixelz contract."""

    network: Optional[str] = None
    contract: ContractInfo


class NFTMetadata(BaseModel):
    """ERC-721 metadata JSON stored on IPFS."""

    model_config = ConfigDict(extra="allow", frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class CreationInfo(_CamelModel):
    block_number: int = Field(alias="blockNumber")
    creator_address: str = Field(alias="creatorAddress")


class CreateNFTResult(_CamelModel):
    """Result of the create-NFT workflow."""

    token_id: str = Field(alias="tokenId")
    owner_address: str = Field(alias="ownerAddress")
    metadata: NFTMetadata
    asset_uri: str = Field(alias="assetURI")
    metadata_uri: str = Field(alias="metadataURI")
    asset_gateway_url: str = Field(alias="assetGatewayURL")
    metadata_gateway_url: str = Field(alias="metadataGatewayURL")
    metadata_linked: bool = Field(default=True, alias="metadataLinked")


class NFTInfo(_CamelModel):
    """An existing NFT as read back from the contract and IPFS."""

    token_id: str = Field(alias="tokenId")
    owner_address: str = Field(alias="ownerAddress")
    metadata: NFTMetadata
    metadata_uri: str = Field(alias="metadataURI")
    metadata_gateway_url: str = Field(alias="metadataGatewayURL")
    asset_uri: Optional[str] = Field(default=None, alias="assetURI")
    asset_gateway_url: Optional[str] = Field(default=None, alias="assetGatewayURL")
    asset_data_base64: Optional[str] = Field(default=None, alias="assetDataBase64")
    creation_info: Optional[CreationInfo] = Field(default=None, alias="creationInfo")


class PinResult(_CamelModel):
    asset_uri: Optional[str] = Field(default=None, alias="assetURI")
    metadata_uri: str = Field(alias="metadataURI")
