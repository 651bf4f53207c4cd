"""
Pre-encoded contract call payloads.

The calldata below is ABI-encoded ahead of time and treated as opaque: this
package never builds or inspects it.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TransactionRequest

logger = logging.getLogger(__name__)

BANK_PRECOMPILE = "0x0000000000000000000000000000000000000804"
WITHDRAW_PRECOMPILE = "0x0000000000000000000000000000000000000808"

DEPOSIT_DATA = (
    "0x58bd9b81"
    "0000000000000000000000000000000000000000000000000000000000000065"
    "0000000000000000000000000000000000000000000000000000000000000080"
    "00000000000000000000000000000000000000000000000000000000000000c0"
    "00000000000000000000000000000000000000000000000000000000000004d2"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "dac17f958d2ee523a2206206994597c13d831ec7000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "0000000000000000000000000000000000000002000000000000000000000000"
    "00000000000000000000000000000000000000000000000000000000"
)

WITHDRAW_DATA = (
    "0xcfcd2269"
    "0000000000000000000000000000000000000000000000000000000000000065"
    "0000000000000000000000000000000000000000000000000000000000000080"
    "00000000000000000000000000000000000000000000000000000000000000c0"
    "00000000000000000000000000000000000000000000000000000000000003e8"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "dac17f958d2ee523a2206206994597c13d831ec7000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "0000000000000000000000000000000000000002000000000000000000000000"
    "00000000000000000000000000000000000000000000000000000000"
)

DELEGATE_DATA = (
    "0xedc32d0a"
    "0000000000000000000000000000000000000000000000000000000000000065"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "00000000000000000000000000000000000000000000000000000000000000c0"
    "0000000000000000000000000000000000000000000000000000000000000100"
    "0000000000000000000000000000000000000000000000000000000000000140"
    "00000000000000000000000000000000000000000000000000000000000003e8"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "dac17f958d2ee523a2206206994597c13d831ec7000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "0000000000000000000000000000000000000002000000000000000000000000"
    "000000000000000000000000000000000000000000000000000000000000002c"
    "65766d6f73317a647a6b7479666e366d72717070787337336c376b686a353638"
    "65636d393772636d6174397a0000000000000000000000000000000000000000"
    "00000000000000000000000000000000000000000000000000000000"
)

UNDELEGATE_DATA = (
    "0x81d27842"
    "0000000000000000000000000000000000000000000000000000000000000065"
    "0000000000000000000000000000000000000000000000000000000000000001"
    "00000000000000000000000000000000000000000000000000000000000000c0"
    "0000000000000000000000000000000000000000000000000000000000000100"
    "0000000000000000000000000000000000000000000000000000000000000140"
    "0000000000000000000000000000000000000000000000000000000000000063"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "dac17f958d2ee523a2206206994597c13d831ec7000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000020"
    "0000000000000000000000000000000000000002000000000000000000000000"
    "000000000000000000000000000000000000000000000000000000000000002c"
    "65766d6f73317a647a6b7479666e366d72717070787337336c376b686a353638"
    "65636d393772636d6174397a0000000000000000000000000000000000000000"
    "00000000000000000000000000000000000000000000000000000000"
)


@dataclass(frozen=True)
class PayloadPreset:
    """A named calldata blob and, when it has one, its fixed recipient"""
    name: str
    data: str
    to: Optional[str] = None
    value: int = 0

    def to_request(self, to: Optional[str] = None) -> TransactionRequest:
        """
        Turn the preset into a request.

        Args:
            to: Recipient override; required for presets without a fixed one

        Raises:
            ConfigError: If no recipient is known
        """
        recipient = to or self.to
        if recipient is None:
            raise ConfigError(f"Payload '{self.name}' has no fixed recipient; pass one explicitly")
        return TransactionRequest(to=recipient, value=self.value, data=self.data)


PRESETS: Dict[str, PayloadPreset] = {
    "deposit": PayloadPreset("deposit", DEPOSIT_DATA, BANK_PRECOMPILE),
    "withdraw": PayloadPreset("withdraw", WITHDRAW_DATA, WITHDRAW_PRECOMPILE),
    "delegate": PayloadPreset("delegate", DELEGATE_DATA),
    "undelegate": PayloadPreset("undelegate", UNDELEGATE_DATA),
}

DEFAULT_SEQUENCE: List[str] = ["deposit", "withdraw"]


def get_preset(name: str) -> PayloadPreset:
    try:
        return PRESETS[name]
    except KeyError:
        available = ", ".join(sorted(PRESETS))
        raise ConfigError(f"Unknown payload '{name}'. Available payloads: {available}") from None


def load_payload_file(path: str) -> Dict[str, TransactionRequest]:
    """
    Load named requests from a JSON file.

    The file maps names to ``{"to": ..., "data": ..., "value": 0}`` objects.

    Raises:
        ConfigError: If the file is unreadable or an entry is malformed
    """
    file_path = Path(path).expanduser()
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read payload file {file_path}: {e.strerror}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in payload file {file_path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Payload file must contain a JSON object, got {type(raw).__name__}")

    requests = {}
    for name, entry in raw.items():
        try:
            requests[name] = TransactionRequest.model_validate(entry)
        except ValidationError as e:
            raise ConfigError(f"Invalid payload '{name}': {e}")
    logger.debug(f"Loaded {len(requests)} payload(s) from {file_path}")
    return requests
