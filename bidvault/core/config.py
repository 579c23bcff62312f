"""
Configuration parameters for BidVault.

Defines the host chain settings, storage paths, and the defaults used when
an auction is instantiated from the command line.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "BIDVAULT_"


@dataclass
class ChainConfig:
    """Host and storage configuration"""

    # Host chain
    chain_id: str = "bidvault-local"

    # Auction defaults (used by `bidvault init` when flags are omitted)
    default_denom: str = "uvault"
    default_fee: Decimal = Decimal("0.01")  # 1%, the highest allowed rate

    # Storage
    db_name: str = "auction.db"

    # Logging
    log_to_file: bool = False

    # Paths
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    def ensure_dirs(self) -> None:
        """Create necessary directories"""
        self.data_dir.mkdir(exist_ok=True, parents=True)
        if self.log_to_file:
            self.log_dir.mkdir(exist_ok=True, parents=True)


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    return value if value not in (None, "") else None


def load_config(env_file: Optional[str] = None) -> ChainConfig:
    """
    Load configuration from the environment.

    Values come from BIDVAULT_* variables, optionally seeded from a .env
    file; anything unset keeps its default.

    Args:
        env_file: Optional path to a .env file

    Returns:
        ChainConfig instance
    """
    if env_file:
        load_dotenv(env_file, override=False)

    config = ChainConfig()

    if _env("CHAIN_ID"):
        config.chain_id = _env("CHAIN_ID")
    if _env("DEFAULT_DENOM"):
        config.default_denom = _env("DEFAULT_DENOM")
    if _env("DEFAULT_FEE"):
        config.default_fee = Decimal(_env("DEFAULT_FEE"))
    if _env("DB_NAME"):
        config.db_name = _env("DB_NAME")
    if _env("LOG_TO_FILE"):
        config.log_to_file = _env("LOG_TO_FILE").lower() in ("1", "true", "yes", "on")
    if _env("DATA_DIR"):
        config.data_dir = Path(_env("DATA_DIR")).expanduser()
    if _env("LOG_DIR"):
        config.log_dir = Path(_env("LOG_DIR")).expanduser()

    return config
