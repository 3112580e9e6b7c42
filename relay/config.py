"""
Runtime configuration for the relay service.

Built once at process start from environment variables and handed to the
request handlers through the application state.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv


DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_UPSTREAM_URL = "http://localhost:5000"
DEFAULT_UPSTREAM_TIMEOUT = 10.0
DEFAULT_LOG_FILE = "relay_requests.log"


@dataclass(frozen=True)
class RelayConfig:
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    upstream_url: str = DEFAULT_UPSTREAM_URL
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT
    cors_origins: Tuple[str, ...] = field(default=("*",))
    log_file: str = DEFAULT_LOG_FILE

    def __post_init__(self):
        # Upstream paths are joined as f"{upstream_url}/predict"
        object.__setattr__(self, "upstream_url", self.upstream_url.rstrip("/"))
        if self.upstream_timeout <= 0:
            raise ValueError(f"upstream_timeout must be positive, got {self.upstream_timeout}")

    @classmethod
    def load(cls, dotenv_path: Optional[str] = None) -> "RelayConfig":
        """
        Load a .env file into the environment, then read the configuration.

        Variables already set in the process environment take precedence
        over the file. Without `dotenv_path`, a .env file is searched for
        from the working directory upwards; a missing file is not an error.
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)
        return cls.from_env()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Read the relay configuration from the environment.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            A RelayConfig populated from PORT, HOST, PYTHON_API_URL,
            UPSTREAM_TIMEOUT, CORS_ORIGINS and LOG_FILE.

        Raises:
            ValueError: If PORT or UPSTREAM_TIMEOUT is not numeric.
        """
        env = os.environ if environ is None else environ

        origins = tuple(
            origin.strip()
            for origin in env.get("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        )

        return cls(
            port=int(env.get("PORT", DEFAULT_PORT)),
            host=env.get("HOST", DEFAULT_HOST),
            upstream_url=env.get("PYTHON_API_URL", DEFAULT_UPSTREAM_URL),
            upstream_timeout=float(env.get("UPSTREAM_TIMEOUT", DEFAULT_UPSTREAM_TIMEOUT)),
            cors_origins=origins or ("*",),
            log_file=env.get("LOG_FILE", DEFAULT_LOG_FILE),
        )
