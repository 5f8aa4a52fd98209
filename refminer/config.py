"""
Runtime configuration.

Values come from constructor arguments or from ``REFMINER_*`` environment
variables via ``ReferencerConfig.from_env()``.
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Optional

from refminer.errors import ConfigurationError

DEFAULT_API_URL = "https://www.wikidata.org/w/api.php"
DEFAULT_SPARQL_URL = "https://query.wikidata.org/sparql"
DEFAULT_USER_AGENT = "refminer - Wikidata Referencer"
LEDGER_FILENAME = "refminer-wikidatareferencer-alreadydone.txt"


def default_ledger_path() -> str:
    """Well-known ledger location in the system temp directory."""
    return os.path.join(tempfile.gettempdir(), LEDGER_FILENAME)


@dataclass
class ReferencerConfig:
    """Settings for one reference discovery run."""
    username: Optional[str] = None
    password: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    sparql_url: str = DEFAULT_SPARQL_URL
    user_agent: str = DEFAULT_USER_AGENT
    ledger_path: Optional[str] = None
    chunk_size: int = 25
    concurrency_limit: int = 25
    connect_timeout: float = 3.14
    request_timeout: float = 10.0
    citation_db_path: Optional[str] = None
    genre_vocabulary_path: Optional[str] = None
    dry_run: bool = False

    def __post_init__(self):
        if self.ledger_path is None:
            self.ledger_path = default_ledger_path()

    @classmethod
    def from_env(cls, **overrides) -> 'ReferencerConfig':
        """
        Create config from environment variables.

        Keyword overrides that are not None win over the environment.
        """
        values = dict(
            username=os.getenv('REFMINER_USERNAME'),
            password=os.getenv('REFMINER_PASSWORD'),
            api_url=os.getenv('REFMINER_API_URL', DEFAULT_API_URL),
            sparql_url=os.getenv('REFMINER_SPARQL_URL', DEFAULT_SPARQL_URL),
            user_agent=os.getenv('REFMINER_USER_AGENT', DEFAULT_USER_AGENT),
            ledger_path=os.getenv('REFMINER_LEDGER_PATH'),
            chunk_size=int(os.getenv('REFMINER_CHUNK_SIZE', '25')),
            concurrency_limit=int(os.getenv('REFMINER_CONCURRENCY', '25')),
            connect_timeout=float(os.getenv('REFMINER_CONNECT_TIMEOUT', '3.14')),
            request_timeout=float(os.getenv('REFMINER_REQUEST_TIMEOUT', '10')),
            citation_db_path=os.getenv('REFMINER_CITATION_DB'),
            genre_vocabulary_path=os.getenv('REFMINER_GENRES'),
            dry_run=os.getenv('REFMINER_DRY_RUN', '').lower() in ('1', 'true', 'yes'),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self):
        """
        Check the configuration before any processing starts.

        Raises:
            ConfigurationError: If credentials are missing (outside dry-run
                mode) or a size/timeout is not positive
        """
        if not self.dry_run and not (self.username and self.password):
            raise ConfigurationError(
                "No credentials configured: set REFMINER_USERNAME and REFMINER_PASSWORD"
            )
        for name in ("chunk_size", "concurrency_limit", "connect_timeout", "request_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
