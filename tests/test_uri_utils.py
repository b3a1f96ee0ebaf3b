"""
Tests for ipfs:// URI helpers.
"""

import pytest

from pixelz.utils.uri_utils import (
    ensure_ipfs_uri_prefix,
    extract_cid,
    make_gateway_url,
    strip_ipfs_uri_prefix,
)


class TestEnsurePrefix:

    def test_adds_scheme(self):
        assert ensure_ipfs_uri_prefix("bafyabc/image.png") == "ipfs://bafyabc/image.png"

    def test_keeps_existing_scheme(self):
        assert ensure_ipfs_uri_prefix("ipfs://bafyabc") == "ipfs://bafyabc"

    def test_collapses_doubled_scheme(self):
        assert ensure_ipfs_uri_prefix("ipfs://ipfs/bafyabc") == "ipfs://bafyabc"

    def test_collapses_path_style_address(self):
        assert ensure_ipfs_uri_prefix("ipfs/bafyabc/metadata.json") == "ipfs://bafyabc/metadata.json"

    @pytest.mark.parametrize("value", [
        "bafyabc",
        "ipfs://bafyabc/x.png",
        "ipfs://ipfs/bafyabc",
        "ipfs/ipfs/bafyabc",
    ])
    def test_idempotent(self, value):
        once = ensure_ipfs_uri_prefix(value)
        assert ensure_ipfs_uri_prefix(once) == once


class TestStripAndGateway:

    def test_strip(self):
        assert strip_ipfs_uri_prefix("ipfs://bafyabc/metadata.json") == "bafyabc/metadata.json"

    def test_strip_bare_address_unchanged(self):
        assert strip_ipfs_uri_prefix("bafyabc") == "bafyabc"

    def test_gateway_url(self):
        url = make_gateway_url("ipfs://bafyabc/image.png", "https://gateway.test/ipfs/")
        assert url == "https://gateway.test/ipfs/bafyabc/image.png"

    def test_extract_cid(self):
        assert extract_cid("ipfs://bafyabc/nft/image.png") == "bafyabc"
        assert extract_cid("bafyabc") == "bafyabc"
