"""Helpers for ipfs:// URIs and gateway URLs."""

IPFS_SCHEME = "ipfs://"


def strip_ipfs_uri_prefix(cid_or_uri: str) -> str:
    """Return the bare content address, without the ipfs:// scheme."""
    uri = str(cid_or_uri)
    if uri.startswith(IPFS_SCHEME):
        return uri[len(IPFS_SCHEME):]
    return uri


def ensure_ipfs_uri_prefix(cid_or_uri: str) -> str:
    """
    Return the address as an ipfs:// URI.

    A doubled scheme segment ("ipfs://ipfs/<cid>") collapses to a single
    prefix. Applying this twice gives the same result as applying it once.
    """
    uri = str(cid_or_uri)
    if not uri.startswith(IPFS_SCHEME):
        uri = IPFS_SCHEME + uri
    while uri.startswith(IPFS_SCHEME + "ipfs/"):
        uri = IPFS_SCHEME + uri[len(IPFS_SCHEME + "ipfs/"):]
    return uri


def make_gateway_url(ipfs_uri: str, gateway_url: str) -> str:
    """Build an HTTP gateway URL for an ipfs:// URI."""
    return f"{gateway_url.rstrip('/')}/{strip_ipfs_uri_prefix(ipfs_uri)}"


def extract_cid(cid_or_uri: str) -> str:
    """Return the root CID of an address, dropping any path below it."""
    return strip_ipfs_uri_prefix(cid_or_uri).split("/")[0]
