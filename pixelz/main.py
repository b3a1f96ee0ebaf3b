"""
Main entry point for the pixelz command line.

This module holds the argument parsing and the command actions. Each action
builds the orchestrator once, runs a single workflow to completion and
renders the result; see pixelz.core.nft_orchestrator for the workflows.
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from typing import List, Optional

import click

from pixelz.config import AppConfig, create_settings
from pixelz.core.nft_orchestrator import make_pixelz
from pixelz.exceptions import ErrorKind, PixelzBaseException
from pixelz.integrations.deployer import deploy_contract
from pixelz.integrations.deployment_registry import save_deployment_info
from pixelz.utils.console import (
    align_output,
    blue,
    colorize_json,
    confirm_overwrite,
    green,
    prompt_for_missing,
    yellow,
)
from pixelz.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


# ---- command action functions

async def create_nft(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)

    answers = prompt_for_missing(
        {"name": args.name, "description": args.description},
        {
            "name": "Enter a name for your new NFT",
            "description": "Enter a description for your new NFT",
        },
    )

    nft = await pixelz.create_nft_from_asset_file(args.image_path, owner=args.owner, **answers)
    click.echo("🌿 Minted a new NFT: ")

    align_output([
        ("Token ID:", green(nft.token_id)),
        ("Owner Address:", yellow(nft.owner_address)),
        ("Metadata Address:", blue(nft.metadata_uri)),
        ("Metadata Gateway URL:", blue(nft.metadata_gateway_url)),
        ("Asset Address:", blue(nft.asset_uri)),
        ("Asset Gateway URL:", blue(nft.asset_gateway_url)),
    ])
    click.echo("NFT Metadata:")
    click.echo(colorize_json(nft.metadata.model_dump()))
    if not nft.metadata_linked:
        click.echo(yellow(
            f"Note: the metadata is not linked on-chain. tokenURI for token {nft.token_id} "
            "comes from the contract base URI."
        ))


async def get_nft(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    nft = await pixelz.get_nft(
        args.token_id,
        fetch_asset=args.fetch_asset,
        fetch_creation_info=args.creation_info,
    )

    output = [
        ("Token ID:", green(nft.token_id)),
        ("Owner Address:", yellow(nft.owner_address)),
    ]
    if nft.creation_info:
        output.append(("Creator Address:", yellow(nft.creation_info.creator_address)))
        output.append(("Block Number:", nft.creation_info.block_number))
    output.append(("Metadata Address:", blue(nft.metadata_uri)))
    output.append(("Metadata Gateway URL:", blue(nft.metadata_gateway_url)))
    if nft.asset_uri:
        output.append(("Asset Address:", blue(nft.asset_uri)))
        output.append(("Asset Gateway URL:", blue(nft.asset_gateway_url)))
    align_output(output)

    click.echo("NFT Metadata:")
    click.echo(colorize_json(nft.metadata.model_dump()))
    if nft.asset_data_base64:
        click.echo("Asset Data (base64):")
        click.echo(nft.asset_data_base64)


async def transfer_nft(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    await pixelz.transfer_nft(args.token_id, args.to_address)
    click.echo(f"🌿 Transferred token {green(args.token_id)} to {yellow(args.to_address)}")


async def pin_nft_data(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    result = await pixelz.pin_token_data(args.token_id)
    click.echo(f"🌿 Pinned all data for token id {green(args.token_id)}")
    align_output([
        ("Metadata Address:", blue(result.metadata_uri)),
        ("Asset Address:", blue(result.asset_uri or "-")),
    ])


async def deploy(args, settings: AppConfig) -> None:
    info = await deploy_contract(settings.ethereum, args.name, args.symbol, args.baseURI)
    written = save_deployment_info(info, args.output, confirm_overwrite=confirm_overwrite)
    if written:
        click.echo(f"Deployment info written to {args.output}")


async def adopt_pixelz(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    token_id = await pixelz.purchase(args.count, payment_eth=args.pay)
    click.echo(f"🌿 Adopted {args.count} Pixelz, first token id {green(token_id)}")


async def start_sale(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    click.echo("Starting the sale...")
    status = await pixelz.start_sale()
    click.echo(f"Sale started: {green(status)}")


async def pause_sale(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    click.echo("Pausing the sale...")
    status = await pixelz.pause_sale()
    click.echo(f"Sale started: {yellow(status)}")


async def sale_status(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    status = await pixelz.sale_status()
    click.echo(f"Sale started: {green(status) if status else yellow(status)}")


async def show_price(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    price = await pixelz.price_in_eth(args.token_id)
    label = f"Price for token {args.token_id}:" if args.token_id is not None else "Current price:"
    align_output([(label, green(f"{price} ETH"))])


async def owned_tokens(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    tokens = await pixelz.owned_tokens(args.address)
    if not tokens:
        click.echo(f"{yellow(args.address)} owns no Pixelz.")
        return
    click.echo(f"{yellow(args.address)} owns: {', '.join(green(t) for t in tokens)}")


async def set_base_uri(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    tx_hash = await pixelz.set_base_uri(args.base_uri)
    click.echo(f"Base URI set to {blue(args.base_uri)} (tx {tx_hash})")


async def set_provenance(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    tx_hash = await pixelz.set_provenance_hash(args.provenance_hash)
    click.echo(f"Provenance hash set to {args.provenance_hash} (tx {tx_hash})")


async def withdraw(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    tx_hash = await pixelz.withdraw_all()
    click.echo(f"Withdrew contract balance (tx {tx_hash})")


async def reserve(args, settings: AppConfig) -> None:
    pixelz = make_pixelz(settings, args.config_file)
    tx_hash = await pixelz.reserve_giveaway(args.count)
    click.echo(f"Reserved {args.count} Pixelz for giveaways (tx {tx_hash})")


# ---- argument parsing

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pixelz", description="Mint and manage Pixelz NFTs")
    parser.add_argument("--config-file", dest="config_file", default=None,
                        help="Deployment info file (default: from settings, pixelz-deployment.json)")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("mint", help="create a new NFT from an image file")
    p.add_argument("image_path", metavar="image-path")
    p.add_argument("-n", "--name", help="The name of the NFT")
    p.add_argument("-d", "--description", help="A description of the NFT")
    p.add_argument("-o", "--owner", help="The ethereum address that should own the NFT. "
                                         "If not provided, defaults to the first signing address.")
    p.set_defaults(handler=create_nft)

    p = sub.add_parser("show", help="get info about an NFT using its token ID")
    p.add_argument("token_id", metavar="token-id")
    p.add_argument("-c", "--creation-info", dest="creation_info", action="store_true",
                   help="include the creator address and block number the NFT was minted")
    p.add_argument("-a", "--fetch-asset", dest="fetch_asset", action="store_true",
                   help="include the asset data, base64 encoded")
    p.set_defaults(handler=get_nft)

    p = sub.add_parser("transfer", help="transfer an NFT to a new owner")
    p.add_argument("token_id", metavar="token-id")
    p.add_argument("to_address", metavar="to-address")
    p.set_defaults(handler=transfer_nft)

    p = sub.add_parser("pin", help='"pin" the data for an NFT to a remote IPFS Pinning Service')
    p.add_argument("token_id", metavar="token-id")
    p.set_defaults(handler=pin_nft_data)

    p = sub.add_parser("deploy", help="deploy an instance of the Pixelz NFT contract")
    p.add_argument("-o", "--output", default=None, help="Path to write deployment info to")
    p.add_argument("-n", "--name", default="Pixelz", help="The name of the token contract")
    p.add_argument("-s", "--symbol", default="PXLZ", help="A short symbol for the tokens in this contract")
    p.add_argument("-u", "--baseURI", dest="baseURI", default="ipfs://", help="Set the initial baseURI")
    p.set_defaults(handler=deploy)

    p = sub.add_parser("adopt", help="adopt (buy) new Pixelz")
    p.add_argument("count", type=int, nargs="?", default=1, help="How many to adopt (1-20)")
    p.add_argument("-p", "--pay", type=Decimal, default=None, help="amount in eth (default: current price)")
    p.set_defaults(handler=adopt_pixelz)

    p = sub.add_parser("start-sale", help="Begin Pixelz sales")
    p.set_defaults(handler=start_sale)

    p = sub.add_parser("pause-sale", help="Pause Pixelz sales")
    p.set_defaults(handler=pause_sale)

    p = sub.add_parser("sale-status", help="Show whether the sale has started")
    p.set_defaults(handler=sale_status)

    p = sub.add_parser("price", help="Show the current price, or the price of a token id")
    p.add_argument("--token-id", dest="token_id", default=None)
    p.set_defaults(handler=show_price)

    p = sub.add_parser("owned", help="List the token ids owned by an address")
    p.add_argument("address")
    p.set_defaults(handler=owned_tokens)

    p = sub.add_parser("set-base-uri", help="Set the contract base URI")
    p.add_argument("base_uri", metavar="base-uri")
    p.set_defaults(handler=set_base_uri)

    p = sub.add_parser("set-provenance", help="Set the metadata provenance hash")
    p.add_argument("provenance_hash", metavar="hash")
    p.set_defaults(handler=set_provenance)

    p = sub.add_parser("withdraw", help="Withdraw the contract balance to the owner")
    p.set_defaults(handler=withdraw)

    p = sub.add_parser("reserve", help="Reserve Pixelz for giveaways")
    p.add_argument("count", type=int)
    p.set_defaults(handler=reserve)

    return parser


def report_error(error: Exception) -> None:
    """Print an error to stderr, with extra warnings where re-running is unsafe."""
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    if not isinstance(error, PixelzBaseException):
        return
    if error.kind == ErrorKind.PARTIAL_MINT:
        click.echo(
            click.style(
                f"WARNING: token {error.token_id} was minted and is held by the signer. "
                "Transfer it instead of running mint again, or you may mint twice.",
                fg="yellow",
                bold=True,
            ),
            err=True,
        )
    elif error.kind == ErrorKind.UNCONFIRMED_MINT:
        click.echo(
            click.style(
                "WARNING: the mint transaction was confirmed on-chain. Check the token "
                "ownership before running mint again, or you may mint twice.",
                fg="yellow",
                bold=True,
            ),
            err=True,
        )


async def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run one command and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        settings = create_settings(**overrides)
    except ValueError as e:
        report_error(e)
        return 1

    setup_logging(settings.log_level, settings.log_format, settings.log_file)
    if args.command == "deploy" and args.output is None:
        args.output = settings.deployment_config_file

    try:
        await args.handler(args, settings)
    except PixelzBaseException as e:
        logger.debug("command_failed", command=args.command, kind=e.kind.value, exc_info=True)
        report_error(e)
        return 1
    except Exception as e:
        logger.debug("command_crashed", command=args.command, exc_info=True)
        report_error(e)
        return 1
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
