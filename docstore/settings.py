import os
from dataclasses import dataclass, field
from typing import Any, Mapping


DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "docstore"
DEFAULT_COLLECTION = "documents"
DEFAULT_TIMEOUT_MS = 20000


@dataclass
class StoreSettings:
    """Configuration settings for a document store connection.

    Attributes:
        uri: Connection string for the cluster. It is handed to the driver as is and
            may carry credentials and transport options.
        database_name: Name of the database to bind (default: "docstore")
        collection_name: Name of the collection to bind (default: "documents")
        timeout: Server selection timeout in milliseconds (default: 20000)
        ping_on_connect: Whether connecting verifies the cluster with a ping (default: True)
        connection_options: Additional options passed to the driver client.
            Example: {"tlsAllowInvalidCertificates": True}
    """
    uri: str = DEFAULT_URI
    database_name: str = DEFAULT_DATABASE
    collection_name: str = DEFAULT_COLLECTION
    timeout: int = DEFAULT_TIMEOUT_MS
    ping_on_connect: bool = True
    connection_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, prefix: str = "DOCSTORE_", environ: Mapping[str, str] | None = None) -> "StoreSettings":
        """Builds settings from environment variables.

        Reads `<prefix>URI`, `<prefix>DATABASE`, `<prefix>COLLECTION`, `<prefix>TIMEOUT_MS`
        and `<prefix>PING`, falling back to the defaults for any that are unset.
        """
        env = os.environ if environ is None else environ
        return cls(
            uri=env.get(f"{prefix}URI", DEFAULT_URI),
            database_name=env.get(f"{prefix}DATABASE", DEFAULT_DATABASE),
            collection_name=env.get(f"{prefix}COLLECTION", DEFAULT_COLLECTION),
            timeout=int(env.get(f"{prefix}TIMEOUT_MS", DEFAULT_TIMEOUT_MS)),
            ping_on_connect=_parse_flag(env.get(f"{prefix}PING", "true")),
        )


def _parse_flag(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off", ""}
