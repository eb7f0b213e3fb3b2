from pathlib import Path
import os

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent
CONFIG_DIR = PROJECT_ROOT / "config"
MIRROR_DB_PATH = Path(os.environ.get("MIRROR_DB_PATH", PROJECT_ROOT / "distri_mirror.db"))
LOGGER_NAME = "distri_mirror"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEVNET_RPC_URL = "https://api.devnet.solana.com"

__all__ = [
    "BASE_DIR",
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "MIRROR_DB_PATH",
    "LOGGER_NAME",
    "LOG_DATE_FORMAT",
    "DEVNET_RPC_URL",
]
