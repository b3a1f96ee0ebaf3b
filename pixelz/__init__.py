"""
Pixelz - mint and manage Pixelz NFTs backed by IPFS.

This package provides:
- An IPFS content store client for NFT assets and metadata
- An async binding to the Pixelz ERC-721 contract
- Workflows to mint, inspect, transfer and pin NFTs
- The `pixelz` command line
"""

__version__ = "0.1.0"
