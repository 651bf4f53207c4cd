"""
Network and key configuration for the txsubmit SDK.
"""
import json
import os
import logging
import importlib.resources
from pathlib import Path
from typing import Dict, Any, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV = "TXSUBMIT_PRIVATE_KEY"
NETWORK_ENV = "TXSUBMIT_NETWORK"
DEFAULT_NETWORK = "localnet"


class NetworkConfig:
    """
    Access to the packaged network definitions.

    Networks are read once from ``networks.json`` and cached on the class.
    """

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load all network definitions.

        Returns:
            Mapping of network name to its definition
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("txsubmit_sdk").joinpath("networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get one network definition.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @staticmethod
    def _env_var_name(network: str) -> str:
        return network.upper().replace("-", "_") + "_RPC_URL"

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: explicit override, ``<NETWORK>_RPC_URL`` environment
        variable, packaged default.
        """
        if override:
            return override
        env_url = os.environ.get(cls._env_var_name(network))
        if env_url:
            logger.debug(f"Using RPC URL from {cls._env_var_name(network)}")
            return env_url
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> Optional[int]:
        chain_id = cls.get_network(network).get("chainId")
        return int(chain_id) if chain_id is not None else None


def resolve_private_key(
    private_key: Optional[str] = None,
    key_file: Optional[str] = None,
) -> str:
    """
    Find the signing key without ever hard-coding it.

    Precedence: explicit argument, key file, ``TXSUBMIT_PRIVATE_KEY``.

    Raises:
        ConfigError: If no key source is available or the key file is unreadable
    """
    if private_key:
        return private_key.strip()
    if key_file:
        path = Path(key_file).expanduser()
        try:
            key = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ConfigError(f"Cannot read key file {path}: {e.strerror}")
        if not key:
            raise ConfigError(f"Key file {path} is empty")
        return key
    env_key = os.environ.get(PRIVATE_KEY_ENV)
    if env_key:
        return env_key.strip()
    raise ConfigError(
        f"No private key configured. Pass one explicitly, use a key file, "
        f"or set {PRIVATE_KEY_ENV}"
    )
