"""
Command line entry point.

    dao-harness check            # validate config and confirm the local node
    dao-harness run [pytest args] # run chain scenarios (exit code = pytest's)
"""

import argparse
import os
import sys
from typing import List, Optional

from .config import HarnessConfig
from .environment import ContractEnvironment
from .errors import HarnessError

DEFAULT_SCENARIOS = "tests/integration"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dao-harness",
        description="Run DAO registry contract scenarios against a local node",
    )
    parser.add_argument("--node-url", help="Override DAO_HARNESS_NODE_URL")
    parser.add_argument("--environment", help="Override DAO_HARNESS_ENVIRONMENT")
    parser.add_argument("--params-file", help="Override DAO_HARNESS_PARAMS_FILE")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Validate configuration and confirm the local node")

    run = sub.add_parser("run", help="Run chain scenarios with pytest")
    run.add_argument(
        "pytest_args",
        nargs=argparse.REMAINDER,
        help=f"Arguments passed to pytest (default: {DEFAULT_SCENARIOS})",
    )
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Command line flags win over the environment."""
    if args.node_url:
        os.environ["DAO_HARNESS_NODE_URL"] = args.node_url
    if args.environment:
        os.environ["DAO_HARNESS_ENVIRONMENT"] = args.environment
    if args.params_file:
        os.environ["DAO_HARNESS_PARAMS_FILE"] = args.params_file


def check(config: HarnessConfig) -> int:
    is_valid, errors = config.validate()
    if not is_valid:
        print("[FAIL] Configuration validation failed:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print(f"[OK] {config}")
    try:
        with ContractEnvironment(config) as env:
            env.ensure_local_node()
            info = env.rpc.get_info()
    except HarnessError as e:
        print(f"[FAIL] {e}")
        return 1

    print(f"[OK] Local node: chain_id={info.get('chain_id')} head={info.get('head_block_num')}")
    return 0


def run(pytest_args: List[str]) -> int:
    import pytest

    args = list(pytest_args)
    if args and args[0] == "--":
        args = args[1:]
    has_path = any(
        os.path.exists(a.split("::")[0]) for a in args if not a.startswith("-")
    )
    if not has_path:
        args.append(DEFAULT_SCENARIOS)
    return int(pytest.main(["-p", "daoharness.pytest_plugin", "--run-chain", *args]))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    if args.command == "check":
        return check(HarnessConfig.from_env())
    return run(args.pytest_args)


if __name__ == "__main__":
    sys.exit(main())
