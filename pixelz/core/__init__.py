"""Models, process context and NFT workflows."""
