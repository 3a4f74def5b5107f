"""
minty — Put NFT assets into a local IPFS node and prepare mint requests.

Contract:
  minty [--api-url URL] [--gateway-url URL] [--timeout S] [--config PATH]
        [--json] [-v] <command> ...

  minty mint <image-path> [-n NAME] [-d DESC] [-o 0x...] [-c]
      Missing name/description are asked for interactively. The image and
      its metadata JSON are added to IPFS; the prepared mint request is
      printed. The mint transaction itself is submitted elsewhere.

  minty add <file-path>
      Add a file under /nft/<basename> and print its store path and CID.

  --json stdout:
    {"status":"ok", ...}  or  {"status":"error","error":"..."}

  exit 0 on success, 1 on failure.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys

from rich.console import Console
from rich.logging import RichHandler

from minty.local_ipfs.answers import MINT_FIELDS, resolve
from minty.local_ipfs.config import load_settings
from minty.local_ipfs.errors import MintyError
from minty.local_ipfs.metadata import gateway_url, ipfs_uri, prepare_mint
from minty.local_ipfs.pipeline import AssetPipeline
from minty.local_ipfs.store import IpfsStoreClient

console = Console()


def err(msg):
    """Print to stderr."""
    print(f"[minty] {msg}", file=sys.stderr)


def _configure_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


async def _cancellable(coro):
    """Await ``coro``, cancelling it on SIGTERM."""
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        pass  # no signal support on this platform / thread
    try:
        return await coro
    finally:
        try:
            loop.remove_signal_handler(signal.SIGTERM)
        except (NotImplementedError, RuntimeError):
            pass


async def _add(settings, file_path):
    async with IpfsStoreClient(settings.api_url, settings.timeout) as store:
        return await AssetPipeline(store).ingest_file(file_path)


async def _mint(settings, image_path, answers):
    async with IpfsStoreClient(settings.api_url, settings.timeout) as store:
        pipeline = AssetPipeline(store)
        asset = await pipeline.ingest_file(image_path)
        return await prepare_mint(answers, asset, pipeline, settings.gateway_url)


def _align_output(rows):
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        console.print(label.ljust(width + 1), value, highlight=False)


def _report_add(args, settings, record):
    if args.json:
        print(json.dumps({
            "status": "ok",
            "store_path": record.store_path,
            "cid": record.content_id,
            "uri": ipfs_uri(record.content_id),
            "gateway_url": gateway_url(settings.gateway_url, record.content_id),
        }))
        return
    _align_output([
        ("Store path:", f"[blue]{record.store_path}[/blue]"),
        ("CID:", f"[green]{record.content_id}[/green]"),
        ("Gateway URL:", f"[blue]{gateway_url(settings.gateway_url, record.content_id)}[/blue]"),
    ])


def _report_mint(args, request):
    if args.json:
        print(json.dumps({"status": "ok", **request.to_dict()}))
        return
    console.print("Prepared NFT mint request:")
    _align_output([
        ("Owner:", request.owner or "(first signing address)"),
        ("Creation info:", "yes" if request.creation_info else "no"),
        ("Metadata Address:", f"[blue]{request.metadata_uri}[/blue]"),
        ("Metadata Gateway URL:", f"[blue]{request.metadata_gateway_url}[/blue]"),
        ("Asset Address:", f"[blue]{request.asset_uri}[/blue]"),
        ("Asset Gateway URL:", f"[blue]{request.asset_gateway_url}[/blue]"),
    ])
    console.print("NFT Metadata:")
    console.print_json(data=request.metadata)


def build_parser():
    parser = argparse.ArgumentParser(prog="minty", description="Add NFT assets to IPFS and prepare mint requests")
    parser.add_argument("--api-url", help="IPFS API URL (default http://localhost:5001)")
    parser.add_argument("--gateway-url", help="IPFS gateway base URL for links")
    parser.add_argument("--timeout", type=float, help="IPFS request timeout in seconds")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--json", action="store_true", help="Print a JSON result on stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    mint = sub.add_parser("mint", help="Create a new NFT from an image file")
    mint.add_argument("image_path", help="Path to the image file")
    mint.add_argument("-n", "--name", help="The name of the NFT")
    mint.add_argument("-d", "--description", help="A description of the NFT")
    mint.add_argument("-o", "--owner", help="Ethereum address that should own the NFT "
                      "(defaults to the first signing address)")
    mint.add_argument("-c", "--creation-info", action="store_true",
                      help="Include the creator address and block number the NFT was minted")

    add = sub.add_parser("add", help="Add a file to IPFS")
    add.add_argument("file_path", help="Path to the file")
    return parser


def main(argv=None, prompter=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    def fail(msg):
        if args.json:
            print(json.dumps({"status": "error", "error": msg}))
        err(msg)
        return 1

    try:
        settings = load_settings(args.config).override(
            api_url=args.api_url,
            gateway_url=args.gateway_url,
            timeout=args.timeout,
        )

        if args.command == "mint":
            cli_options = {
                "name": args.name,
                "description": args.description,
                "owner": args.owner,
                "creation_info": args.creation_info,
            }
            answers = resolve(cli_options, MINT_FIELDS, prompter)
            request = asyncio.run(_cancellable(_mint(settings, args.image_path, answers)))
            _report_mint(args, request)
        else:
            record = asyncio.run(_cancellable(_add(settings, args.file_path)))
            _report_add(args, settings, record)
    except MintyError as e:
        return fail(str(e))
    except (KeyboardInterrupt, asyncio.CancelledError):
        return fail("Interrupted")

    return 0


if __name__ == "__main__":
    sys.exit(main())
