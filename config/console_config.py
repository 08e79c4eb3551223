from dataclasses import dataclass, field
from pathlib import Path
import json
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "https://api.gamelayer.co/api/v0"


@dataclass
class ConsoleConfig:
    """Configuration for the player console."""
    base_url: str = DEFAULT_BASE_URL
    leaderboard_id: str = "1-test-leaderboard"
    poll_interval_seconds: float = 10.0
    streak_ids: list[str] = field(default_factory=list)
    request_timeout_seconds: float | None = None
    max_retries: int = 3
    avatar_count: int = 25
    verbose: bool = False

    def __post_init__(self):
        # GAMELAYER_BASE_URL wins over the file so deployments can point elsewhere
        self.base_url = os.getenv("GAMELAYER_BASE_URL", self.base_url).rstrip("/")

    @property
    def avatar_options(self) -> list[str]:
        """Avatar palette offered when adding a player."""
        return [
            f"https://api.dicebear.com/7.x/avataaars/svg?seed={i + 1}"
            for i in range(self.avatar_count)
        ]

    @classmethod
    def from_file(cls, path: str | Path = "config/console_config.json") -> "ConsoleConfig":
        """Load config from a JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            print(f"⚠️  Config file not found at {config_path}, using defaults")
            return cls()

        with open(config_path) as f:
            data = json.load(f)

        return cls(**data)
