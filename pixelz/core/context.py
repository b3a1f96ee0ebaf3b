"""
Process context for pixelz commands.

One PixelzContext is built per process and passed to the orchestrator. It
holds the settings, the deployment record and the two backend clients;
nothing in the package keeps module-level client handles.
"""

from dataclasses import dataclass

from ..config import AppConfig
from ..integrations.ipfs_client import IPFSClient
from ..integrations.pixelz_contract import PixelzContract
from .models import DeploymentRecord


@dataclass(frozen=True)
class PixelzContext:
    settings: AppConfig
    deploy_info: DeploymentRecord
    ipfs: IPFSClient
    contract: PixelzContract
