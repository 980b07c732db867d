# bisca_advisor/config.py
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from a .env file if present.
load_dotenv()

DEFAULT_RESULTS_DIR = Path(__file__).resolve().parent / "results"


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (BISCA_* variables)."""
    log_level: str = "INFO"
    results_dir: Path = DEFAULT_RESULTS_DIR
    snapshot_file: str = "session.json"
    # Seeds the shuffle for reproducible sessions; None means OS entropy.
    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        seed_raw = os.getenv("BISCA_SEED")
        seed: Optional[int] = None
        if seed_raw:
            try:
                seed = int(seed_raw)
            except ValueError:
                logger.warning("Ignoring non-integer BISCA_SEED=%r", seed_raw)
        results_raw = os.getenv("BISCA_RESULTS_DIR")
        return cls(
            log_level=os.getenv("BISCA_LOG_LEVEL", "INFO").upper(),
            results_dir=Path(results_raw) if results_raw else DEFAULT_RESULTS_DIR,
            snapshot_file=os.getenv("BISCA_SNAPSHOT_FILE", "session.json"),
            seed=seed,
        )


def load_settings() -> Settings:
    return Settings.from_env()
