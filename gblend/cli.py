#!/usr/bin/env python3
"""
gblend command line interface: scaffold, build and deploy contracts.
"""
import argparse
import json
import logging
import os
import sys

from .chain.client import Web3ChainClient
from .chain.networks import resolve_network
from .config import load_config, load_env, require_private_key
from .contracts.artifact import BuildArtifact, ProjectKind
from .deploy.engine import DeploymentEngine
from .drivers import InitOptions, get_driver
from .errors import ConfigError, DeploymentError, GblendError
from .memory.ledger import DeploymentLedger

logger = logging.getLogger("gblend")

KINDS = [k.value for k in ProjectKind]


def _ledger_for(args, cfg, network_name: str) -> DeploymentLedger:
    if getattr(args, "ledger", None):
        return DeploymentLedger(args.ledger)
    return DeploymentLedger.for_network(cfg["LEDGER_DIR"], network_name)


def cmd_init(args, cfg):
    """Scaffold a new project"""
    driver = get_driver(args.kind)
    if args.list:
        print(f"📦 Templates for {args.kind}:")
        for name in driver.list_templates():
            print(f"  • {name}")
        return

    print(f"🔧 Initializing new {args.kind} project with {args.template} template...")
    written = driver.init(
        args.path,
        InitOptions(project_name=args.name, template=args.template, force=args.force, git=not args.no_git),
    )
    print("✅ Project initialized successfully!")
    print(f"📂 Project directory: {os.path.abspath(args.path)}")
    for path in written:
        logger.debug("wrote %s", path)
    print("📝 Next steps:")
    for i, step in enumerate(driver.next_steps, 1):
        print(f"  {i}. {step}")


def _print_build(artifact: BuildArtifact):
    print("\n✅ Build completed successfully!")
    print(f"📦 Output: {artifact.path}")
    print(f"📊 Size: {artifact.size} bytes")
    if artifact.metadata:
        md = artifact.metadata
        print(f"⚙️  Compiler: {md.compiler_version}")
        print(f"🎯 Target: {md.target}")
        print(f"⚡ Optimization: {md.optimization_level}")
        print(f"⏱️  Build time: {md.build_time:.2f}s")
    if artifact.warnings:
        print("\n⚠️  Warnings:")
        for warning in artifact.warnings:
            print(f"  {warning}")


def cmd_build(args, cfg):
    """Build a project with its native toolchain"""
    print(f"🔨 Building {args.kind} project...")
    artifact = get_driver(args.kind).build(args.path, release=not args.debug)
    if args.json:
        print(artifact.model_dump_json(indent=2))
    else:
        _print_build(artifact)


def cmd_deploy(args, cfg):
    """Deploy a compiled artifact (or build a project first with --kind)"""
    network = resolve_network(args.local, args.dev, args.rpc, args.chain_id)
    key = require_private_key(args.private_key or cfg["PRIVATE_KEY"])

    if os.path.isdir(args.path):
        if not args.kind:
            raise ConfigError(f"{args.path} is a directory; pass --kind to build it before deploying")
        artifact = get_driver(args.kind).build(args.path, release=True)
    else:
        artifact = BuildArtifact.from_file(args.path)

    gas_limit = args.gas_limit if args.gas_limit is not None else cfg["GAS_LIMIT"]
    gas_price = args.gas_price if args.gas_price is not None else cfg["GAS_PRICE"]
    confirmations = args.confirmations if args.confirmations is not None else cfg["CONFIRMATIONS"]

    client = Web3ChainClient(network, key, confirmations=confirmations)
    engine = DeploymentEngine(
        client,
        _ledger_for(args, cfg, network.name),
        gas_limit=gas_limit,
        gas_price=gas_price,
        network=network.name,
        event_log=cfg["LOG_PATH"],
    )

    if not args.json:
        print("\n🚀 Starting Deployment")
        print("====================")
        print(f"📝 Network: {network.name}")
        print(f"🔗 RPC Endpoint: {network.endpoint}")
        print(f"⛓️  Chain ID: {network.chain_id}")
        print(f"🔑 Deployer: {client.address}")
        print(f"📄 Artifact: {artifact.path}")
        print("====================\n")

    outcome = engine.deploy(artifact, artifact_name=args.name)

    if args.json:
        print(json.dumps({
            "artifact": outcome.artifact_name,
            "address": outcome.address,
            "content_hash": outcome.fingerprint.hex(),
            "tx_hash": outcome.tx_hash,
            "skipped": outcome.skipped,
            "network": network.name,
        }, indent=2))
    elif outcome.skipped:
        print("⏭️  Bytecode has not changed. Skipping deployment.")
        print(f"📍 Existing contract address: {outcome.address}")
    else:
        print("✅ Contract deployed successfully")
        print(f"📍 Contract address: {outcome.address}")
        print(f"🧾 Transaction hash: {outcome.tx_hash}")
        if outcome.receipt is not None:
            print(f"⛽ Gas used: {outcome.receipt.gas_used}")
            print(f"💰 Effective gas price: {outcome.receipt.effective_gas_price}")
            print(f"🔲 Block number: {outcome.receipt.block_number}")


def _network_name(args) -> str:
    if not (args.local or args.dev or args.rpc or args.chain_id is not None):
        return "local"
    return resolve_network(args.local, args.dev, args.rpc, args.chain_id).name


def cmd_ledger(args, cfg):
    """Show deployment records"""
    ledger = _ledger_for(args, cfg, _network_name(args))
    records = ledger.load().records()
    if args.json:
        print(json.dumps({r.artifact_name: r.to_store() for r in records}, indent=2))
        return
    if not records:
        print(f"📂 No deployments recorded in {ledger.path}")
        return
    print(f"📂 Deployments in {ledger.path}:")
    for r in records:
        print(f"  • {r.artifact_name}: {r.address} (sha256 {r.content_hash[:12]}…)")


def cmd_reconcile(args, cfg):
    """Check that every recorded address still has code on chain"""
    network = resolve_network(args.local, args.dev, args.rpc, args.chain_id)
    client = Web3ChainClient(network)
    engine = DeploymentEngine(client, _ledger_for(args, cfg, network.name), network=network.name)
    entries = engine.reconcile()
    if not entries:
        print("📂 No deployments recorded.")
        return
    for e in entries:
        status = "✅ present" if e.present else "❌ missing"
        print(f"  {status}  {e.artifact_name}: {e.address}")
    missing = [e for e in entries if not e.present]
    if missing:
        print(f"\n⚠️  {len(missing)} recorded contract(s) have no code on {network.name}")


def _add_network_args(p):
    p.add_argument("--local", action="store_true", help="Use the local network (http://localhost:8545)")
    p.add_argument("--dev", action="store_true", help="Use the development network")
    p.add_argument("--rpc", help="Custom RPC endpoint")
    p.add_argument("--chain-id", type=int, help="Custom chain ID")
    p.add_argument("--ledger", help="Ledger file (default: <ledger dir>/<network>.json)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gblend", description="Scaffold, build and deploy contracts")
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--env", help="Environment name to load .env.<env>")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Initialize a new project")
    init_parser.add_argument("kind", choices=KINDS, help="Project language")
    init_parser.add_argument("path", nargs="?", default=".", help="Project directory")
    init_parser.add_argument("--name", help="Project name (defaults to the directory name)")
    init_parser.add_argument("-t", "--template", default="greeting", help="Template to use")
    init_parser.add_argument("-l", "--list", action="store_true", help="List available templates")
    init_parser.add_argument("-f", "--force", action="store_true", help="Scaffold into a non-empty directory")
    init_parser.add_argument("--no-git", action="store_true", help="Do not run git init")
    init_parser.set_defaults(func=cmd_init)

    build_parser_ = subparsers.add_parser("build", help="Build the project")
    build_parser_.add_argument("kind", choices=KINDS, help="Project language")
    build_parser_.add_argument("path", nargs="?", default=".", help="Project directory")
    build_parser_.add_argument("--debug", action="store_true", help="Build without optimizations")
    build_parser_.add_argument("--json", action="store_true", help="Output as JSON")
    build_parser_.set_defaults(func=cmd_build)

    deploy_parser = subparsers.add_parser("deploy", help="Deploy a compiled artifact")
    deploy_parser.add_argument("path", help="Compiled artifact, or a project directory with --kind")
    deploy_parser.add_argument("--kind", choices=KINDS, help="Build the project directory first")
    deploy_parser.add_argument("--name", help="Ledger key (defaults to the artifact file name)")
    deploy_parser.add_argument("--private-key", help="Deployer key (default: $DEPLOY_PRIVATE_KEY)")
    deploy_parser.add_argument("--gas-limit", type=int, help="Gas limit (default: $DEPLOY_GAS_LIMIT or 300000000)")
    deploy_parser.add_argument("--gas-price", type=int, help="Gas price in wei; 0 fetches it from the node")
    deploy_parser.add_argument("--confirmations", type=int, help="Blocks to wait after inclusion")
    deploy_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_network_args(deploy_parser)
    deploy_parser.set_defaults(func=cmd_deploy)

    ledger_parser = subparsers.add_parser("ledger", help="Show recorded deployments")
    ledger_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_network_args(ledger_parser)
    ledger_parser.set_defaults(func=cmd_ledger)

    reconcile_parser = subparsers.add_parser("reconcile", help="Check recorded contracts against the chain")
    _add_network_args(reconcile_parser)
    reconcile_parser.set_defaults(func=cmd_reconcile)

    return parser


def _report(error: GblendError):
    if isinstance(error, DeploymentError) and error.orphaned:
        print("\n" + "!" * 72, file=sys.stderr)
        print("‼️  CONTRACT DEPLOYED BUT NOT RECORDED IN THE LEDGER", file=sys.stderr)
        print(f"📍 Address: {error.address}", file=sys.stderr)
        print(f"🧾 Transaction: {error.tx_hash}", file=sys.stderr)
        print("   Record it manually or the next deploy will create a duplicate.", file=sys.stderr)
        print("!" * 72 + "\n", file=sys.stderr)
    print(f"❌ {error}", file=sys.stderr)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    try:
        load_env(args.env_file, args.env)
        cfg = load_config()
        args.func(args, cfg)
    except GblendError as e:
        _report(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
