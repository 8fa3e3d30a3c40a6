__all__ = [
    # Client
    "QuestManagerClient",
    "NetworkConfig",
    # Models
    "DistributionType",
    "TradeVolume",
    "PoolPosition",
    "TokenHold",
    "QuestType",
    "Quest",
    "QuestStats",
    "UserStats",
    "Participation",
    "InvokeResult",
    "make_quest_type",
    # Errors
    "QuestError",
    "ErrorKind",
    "InvokeError",
    "QuestClientError",
    "ConfigurationError",
    "EncodingError",
    "RpcError",
    "AccountNotFoundError",
    "SimulationError",
    "ConfirmationTimeout",
    "ConfirmationCancelled",
    # Keys
    "generate_keypair",
    "get_address",
    "get_keypair",
    "load_secret",
    "save_secret",
    # Entry points
    "ENTRY_POINTS",
    "READ_ONLY_ENTRY_POINTS",
]

from .client import QuestManagerClient
from .config import NetworkConfig
from .domain.errors import (
    AccountNotFoundError,
    ConfigurationError,
    ConfirmationCancelled,
    ConfirmationTimeout,
    EncodingError,
    ErrorKind,
    InvokeError,
    QuestClientError,
    QuestError,
    RpcError,
    SimulationError,
)
from .domain.models import (
    DistributionType,
    InvokeResult,
    Participation,
    PoolPosition,
    Quest,
    QuestStats,
    QuestType,
    TokenHold,
    TradeVolume,
    UserStats,
    make_quest_type,
)
from .signer.keys import generate_keypair, get_address, get_keypair, load_secret, save_secret
from .soroban.contract import ENTRY_POINTS, READ_ONLY_ENTRY_POINTS
