"""
Contract settings parameters.

Settings are applied once per suite through the ``setparam`` action. They come
from a YAML file (DAO_HARNESS_PARAMS_FILE) of the form:

    params:
      - key: testparam
        type: uint64
        value: 20
        description: test param
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from .contract import AuthorizationLike, Contract
from .errors import ConfigurationError
from .models import ConfigParam

logger = logging.getLogger(__name__)

# Nothing is required by the contract; suites add their own through the file.
DEFAULT_PARAMS: tuple = ()


def load_params_file(path: Path) -> List[ConfigParam]:
    """
    Parse a settings YAML file.

    Accepts either a top-level ``params`` list or a bare list.

    Raises:
        ConfigurationError: File missing or entries malformed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Settings params file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    entries = data.get("params", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ConfigurationError(f"{path}: 'params' must be a list")

    params = []
    for i, entry in enumerate(entries):
        try:
            params.append(ConfigParam.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"{path}: invalid param #{i}: {e}") from e

    logger.info(f"Loaded {len(params)} settings params from {path}")
    return params


def resolve_params(params_file: Optional[Path] = None) -> List[ConfigParam]:
    """Default params followed by the ones from ``params_file`` (if any)."""
    params = list(DEFAULT_PARAMS)
    if params_file is not None:
        params.extend(load_params_file(params_file))
    return params


def set_params_value(contract: Contract, params: Iterable[ConfigParam],
                     authorization: AuthorizationLike) -> int:
    """
    Apply each param with ``setparam``.

    Returns:
        Number of params applied
    """
    count = 0
    for param in params:
        contract.invoke("setparam", param.action_params(), authorization)
        count += 1
    logger.info(f"Applied {count} settings params to {contract.account}")
    return count
