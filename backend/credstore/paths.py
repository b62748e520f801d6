"""Shared path constants and storage defaults."""

from pathlib import Path

# Backend root (sources live here)
BACKEND_ROOT = Path(__file__).parent.parent

# Project root (parent of backend/, where pyproject.toml lives)
PROJECT_ROOT = BACKEND_ROOT.parent

# Data directory for durable key-value backends
DATA_DIR = PROJECT_ROOT / "data"

# =============================================================================
# Storage Configuration
# =============================================================================

# Fixed slot holding the current wallet
WALLET_SLOT_KEY = "wallet"

# SQLite backend database file (inside the data directory)
SQLITE_FILENAME = "credstore.db"

# File backend directory (inside the data directory)
FILES_DIRNAME = "kv"

# Read-back verification after save/delete: attempts and pause between them.
# Some device stores (e.g. keychains on simulators) need a moment before a
# fresh write becomes visible.
VERIFY_ATTEMPTS = 3
VERIFY_DELAY_SECONDS = 0.1
