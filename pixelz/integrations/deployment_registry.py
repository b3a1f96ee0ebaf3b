"""
Deployment Registry

Loads and saves the deployment info file that records where the Pixelz
contract lives (network, address, ABI and signer).
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..config import DEFAULT_DEPLOYMENT_CONFIG_FILE
from ..core.models import DeploymentRecord
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_CONTRACT_FIELDS = ("name", "address", "abi")

PathLike = Union[str, Path]


def validate_deployment_info(deploy_info: dict) -> None:
    """
    Check that the raw deployment info has every required field.

    Raises:
        ConfigurationError: naming the first missing field
    """
    contract = deploy_info.get("contract") if isinstance(deploy_info, dict) else None
    if not contract:
        raise ConfigurationError('required field "contract" not found')
    for field in REQUIRED_CONTRACT_FIELDS:
        if field not in contract:
            raise ConfigurationError(f'required field "contract.{field}" not found')


def load_deployment_info(path: Optional[PathLike] = None) -> DeploymentRecord:
    """
    Read and validate a deployment info file.

    Args:
        path: File to read. Defaults to pixelz-deployment.json.

    Raises:
        ConfigurationError: if the file is missing, unreadable or incomplete
    """
    if not path:
        logger.info(
            f'no deployment config file configured, reading from default path "{DEFAULT_DEPLOYMENT_CONFIG_FILE}"'
        )
        path = DEFAULT_DEPLOYMENT_CONFIG_FILE
    path = Path(path)

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"deployment info file {path} not found; run `pixelz deploy` first"
        ) from e

    try:
        raw = json.loads(content)
        validate_deployment_info(raw)
        record = DeploymentRecord.model_validate(raw)
    except (json.JSONDecodeError, ConfigurationError, PydanticValidationError) as e:
        raise ConfigurationError(f"error reading deploy info from {path}: {e}") from e

    logger.debug(f"Loaded deployment info for {record.contract.name} at {record.contract.address}")
    return record


def save_deployment_info(
    info: DeploymentRecord,
    path: Optional[PathLike] = None,
    confirm_overwrite: Optional[Callable[[Path], bool]] = None,
) -> bool:
    """
    Write deployment info to disk.

    Args:
        info: The record to save
        path: Target file. Defaults to pixelz-deployment.json.
        confirm_overwrite: Called with the path when the file already exists;
            the file is only overwritten if it returns True.

    Returns:
        True if the file was written, False if overwriting was declined
    """
    path = Path(path or DEFAULT_DEPLOYMENT_CONFIG_FILE)
    if path.exists():
        if confirm_overwrite is None or not confirm_overwrite(path):
            logger.info(f"Not overwriting existing deployment info at {path}")
            return False

    logger.info(f"Writing deployment info to {path}")
    content = json.dumps(info.model_dump(by_alias=True), indent=2)
    path.write_text(content, encoding="utf-8")
    return True
