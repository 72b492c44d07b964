from interband.config import (
    DEFAULT_MAX_FILES,
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_RETENTION_SECS,
    InterbandConfig,
    channel_token,
    default_max_files,
    default_retention_seconds,
    env_safe,
    max_files_env_key,
    retention_env_key,
)
from interband.envelope import (
    Envelope,
    decode_envelope,
    encode_envelope,
    utc_timestamp,
    validate_envelope,
)
from interband.errors import (
    ArgumentError,
    DecodeError,
    InterbandError,
    ValidationError,
    VersionError,
)
from interband.paths import channel_dir, path, root, safe_key
from interband.prune import PRUNE_STAMP_NAME, PruneResult, prune_channel
from interband.reader import iter_channel, read_envelope, read_payload
from interband.schema import ALLOWED_PHASES, CONTRACTS, KNOWN_CONTRACTS, validate_payload
from interband.store import InterbandStore
from interband.writer import write

__all__ = [
    "ALLOWED_PHASES",
    "ArgumentError",
    "CONTRACTS",
    "DEFAULT_MAX_FILES",
    "DEFAULT_PROTOCOL_VERSION",
    "DEFAULT_RETENTION_SECS",
    "DecodeError",
    "Envelope",
    "InterbandConfig",
    "InterbandError",
    "InterbandStore",
    "KNOWN_CONTRACTS",
    "PRUNE_STAMP_NAME",
    "PruneResult",
    "ValidationError",
    "VersionError",
    "channel_dir",
    "channel_token",
    "decode_envelope",
    "default_max_files",
    "default_retention_seconds",
    "encode_envelope",
    "env_safe",
    "iter_channel",
    "max_files_env_key",
    "path",
    "prune_channel",
    "read_envelope",
    "read_payload",
    "retention_env_key",
    "root",
    "safe_key",
    "utc_timestamp",
    "validate_envelope",
    "validate_payload",
    "write",
]
