"""
Action transport: submits signed contract actions to the node.

Signing is not done here. CleosTransport hands the action to the node's
``cleos`` CLI, which signs with the keys unlocked in the local wallet.
"""

import json
import logging
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from .config import HarnessConfig
from .errors import ActionError, ConfigurationError, NodeUnavailableError

logger = logging.getLogger(__name__)


class ActionTransport:
    """
    Interface for submitting actions.

    ``push_action`` returns the decoded transaction trace on success and raises
    ActionError with the node's message on failure.
    """

    def push_action(self, contract: str, action: str, params: Sequence[Any],
                    authorization: List[str]) -> Dict[str, Any]:
        raise NotImplementedError

    def create_account(self, creator: str, name: str, public_key: str) -> Dict[str, Any]:
        raise NotImplementedError


class CleosTransport(ActionTransport):
    """
    Submits actions through ``cleos push action``.

    Usage:
        transport = CleosTransport(HarnessConfig.from_env())
        transport.push_action("daoregistry1", "reset", [], ["daoregistry1@active"])
    """

    def __init__(self, config: HarnessConfig):
        self.config = config
        logger.debug(f"CleosTransport initialized: cleos={config.cleos_path}, node={config.node_url}")

    def _base_command(self) -> List[str]:
        command = [self.config.cleos_path, "-u", self.config.node_url]
        if self.config.wallet_url:
            command.extend(["--wallet-url", self.config.wallet_url])
        return command

    def _run(self, args: List[str], action: Optional[str] = None,
             authorization: Optional[str] = None) -> Dict[str, Any]:
        command = self._base_command() + args
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"cleos not found at {self.config.cleos_path!r}. "
                f"Set DAO_HARNESS_CLEOS to the cleos binary."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise NodeUnavailableError(
                f"cleos timed out after {self.config.timeout}s: {' '.join(args[:4])}"
            ) from e

        if result.returncode != 0:
            message = (result.stderr or result.stdout or "").strip()
            if not message:
                message = f"cleos exited with code {result.returncode}"
            raise ActionError(message, action=action, authorization=authorization)

        stdout = result.stdout.strip()
        if not stdout:
            return {}
        try:
            return json.loads(stdout)
        except ValueError:
            # Some cleos subcommands print plain text even with --json
            return {"output": stdout}

    def push_action(self, contract: str, action: str, params: Sequence[Any],
                    authorization: List[str]) -> Dict[str, Any]:
        """
        Push one action.

        Args:
            contract: Contract account
            action: Action name
            params: Ordered action parameters (JSON-serializable)
            authorization: Permission levels as "account@permission"

        Returns:
            Decoded transaction trace
        """
        args = ["push", "action", contract, action, json.dumps(list(params))]
        for level in authorization:
            args.extend(["-p", level])
        args.append("--json")
        return self._run(args, action=action, authorization=",".join(authorization))

    def create_account(self, creator: str, name: str, public_key: str) -> Dict[str, Any]:
        """Create ``name`` paid by ``creator`` with one key for owner and active."""
        args = ["create", "account", creator, name, public_key, public_key, "--json"]
        return self._run(args, action="newaccount", authorization=f"{creator}@active")
