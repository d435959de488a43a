"""even-number command line.

Usage:
  even-number deploy [--endpoint URL] [--keyfile PATH] [--password PW] [--upa-instance PATH]
  even-number submit [--endpoint URL] [--keyfile PATH] [--password PW] [--instance PATH] NEW_NUMBER
  even-number get [--endpoint URL] [--instance PATH]

--endpoint, --keyfile and --password fall back to RPC_ENDPOINT, KEYFILE and
KEYFILE_PASSWORD from the environment.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from even_number import commands, config


logger = logging.getLogger("even_number")


def _add_endpoint(p: argparse.ArgumentParser):
    p.add_argument("--endpoint", default=config.endpoint(),
                   help="JSON-RPC endpoint (env RPC_ENDPOINT)")


def _add_wallet(p: argparse.ArgumentParser):
    p.add_argument("--keyfile", default=config.keyfile(),
                   help="encrypted wallet keyfile (env KEYFILE)")
    p.add_argument("--password", default=config.password(),
                   help="keyfile password (env KEYFILE_PASSWORD)")
    p.add_argument("--timeout", type=float, default=config.DEFAULT_TIMEOUT,
                   help="seconds to wait for a transaction receipt")


class Parser(argparse.ArgumentParser):
    """Usage errors exit 1 like every other failure."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = Parser(prog="even-number")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="more logging (-vv for debug)")
    sub = parser.add_subparsers(dest="command", required=True)

    deploy = sub.add_parser("deploy", help="Deploy the even number contract.")
    _add_endpoint(deploy)
    _add_wallet(deploy)
    deploy.add_argument("--upa-instance", default=config.DEFAULT_UPA_INSTANCE,
                        help="The UPA instance used to deploy")
    deploy.add_argument("--artifact", default=config.artifact(),
                        help="compiled EvenNumber artifact (env EVEN_NUMBER_ARTIFACT)")

    submit = sub.add_parser(
        "submit",
        help="Set a new even number, whose even-ness was proven in the UPA contract",
    )
    _add_endpoint(submit)
    _add_wallet(submit)
    submit.add_argument("--instance", default=config.DEFAULT_INSTANCE,
                        help="even-number instance file")
    submit.add_argument("new_number", metavar="newNumber", type=int,
                        help="Set the stored even number to this number")

    get = sub.add_parser("get", help="Print the number currently stored in the contract.")
    _add_endpoint(get)
    get.add_argument("--instance", default=config.DEFAULT_INSTANCE,
                     help="even-number instance file")
    return parser


def setup_logging(verbose: int):
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


async def run(args: argparse.Namespace, connector) -> None:
    if args.command == "deploy":
        instance = await commands.deploy(
            connector,
            endpoint=args.endpoint,
            keyfile=args.keyfile,
            password=args.password,
            upa_instance=args.upa_instance,
            artifact=args.artifact,
        )
        print(f"EvenNumber was deployed to address {instance.even_number}")
    elif args.command == "submit":
        number = await commands.submit(
            connector,
            endpoint=args.endpoint,
            keyfile=args.keyfile,
            password=args.password,
            instance=args.instance,
            new_number=args.new_number,
        )
        print(f"Even number successfully set to {number}")
    elif args.command == "get":
        number = await commands.get(connector, endpoint=args.endpoint, instance=args.instance)
        print(f"Stored even number: {number}")


def main(argv: Optional[List[str]] = None, connector=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        if args.command in ("deploy", "submit"):
            if not args.keyfile:
                parser.error("--keyfile is required (or set KEYFILE)")
            if args.password is None:
                parser.error("--password is required (or set KEYFILE_PASSWORD)")
    except SystemExit as e:
        # --help exits 0, usage errors exit 1
        return e.code or 0
    setup_logging(args.verbose)

    if connector is None:
        connector = commands.Web3Connector(timeout=getattr(args, "timeout", config.DEFAULT_TIMEOUT))

    try:
        asyncio.run(run(args, connector))
    except KeyboardInterrupt:
        print("even-number: cancelled", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"even-number error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
