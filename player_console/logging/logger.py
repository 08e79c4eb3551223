import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from config.console_config import ConsoleConfig

if TYPE_CHECKING:
    from player_console.models import PlayerProfile
    from player_console.services.history_aggregator import PlayerHistory
    from player_console.services.player_directory import Directory

_logger_instance: Optional['ConsoleLogger'] = None
_run_id: Optional[str] = None


def get_run_id() -> str:
    """Timestamp id of this process, shared by everything that logs during the run."""
    global _run_id
    if _run_id is None:
        _run_id = datetime.now().strftime("%Y_%m_%d_%H%M%S")
    return _run_id


def get_logger() -> 'ConsoleLogger':
    """Get the global logger instance. Creates one if needed."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ConsoleLogger()
    return _logger_instance


class ConsoleLogger:
    """Universal logger - no configuration needed."""

    def __init__(self, config: Optional[ConsoleConfig] = None):
        self.run_id = get_run_id()
        self.config = config or ConsoleConfig.from_file()

        self.logger = logging.getLogger(f"player_console.{self.run_id}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()

        # File handler - always logs everything
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)
        self.log_file = log_dir / f"{self.run_id}.log"
        file_handler = logging.FileHandler(self.log_file)
        if self.config.verbose:
            file_handler.setLevel(logging.DEBUG)
        else:
            file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
        self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(console_handler)

    # ─── Semantic Methods (delegate to self.logger) ────────────────

    def info(self, msg: str):
        """General info message (INFO level)."""
        self.logger.info(msg)

    def debug(self, msg: str):
        """Debug message (DEBUG level)."""
        self.logger.debug(msg)

    def warning(self, msg: str):
        """Warning message (WARNING level)."""
        self.logger.warning(f"⚠️  {msg}")

    def error(self, msg: str):
        """Error message (ERROR level)."""
        self.logger.error(f"❌ {msg}")

    def success(self, msg: str):
        """Success message (INFO level)."""
        self.logger.info(f"✅ {msg}")

    # ─── Console Events ────────────────

    def request(self, method: str, path: str, status: int):
        self.debug(f"🌐 {method} {path} -> {status}")

    def directory_loaded(self, directory: 'Directory'):
        self.info(f"📋 Found {len(directory.players)} players and {len(directory.teams)} teams.")
        for i, p in enumerate(directory.players, 1):
            self.debug(f"   {i}. {p.name} ({p.player_ref})")

    def profile_loaded(self, profile: 'PlayerProfile'):
        self.success(f"Loaded profile for {profile.name or profile.player_ref}")
        self.debug(f"   Level: {profile.level.name}")
        self.debug(f"   Team: {profile.team_name or '-'}")
        self.debug(f"   Points: {profile.points} // Credits: {profile.credits}")

    def history_summary(self, player_ref: str, history: 'PlayerHistory'):
        self.info(
            f"📜 History for {player_ref}: "
            f"{len(history.missions)} missions, {len(history.achievements)} achievements, "
            f"{len(history.prizes)} prizes, {len(history.quizzes)} quizzes"
        )
        for message in history.errors:
            self.warning(f"[{player_ref}] {message}")

    def quiz_transition(self, quiz_id: Optional[str], old: str, new: str):
        self.debug(f"🧩 Quiz {quiz_id or '-'}: {old} -> {new}")

    def stale_response(self, kind: str, player_ref: str, active_ref: Optional[str]):
        self.debug(f"🗑️  Dropped {kind} for {player_ref} (active player: {active_ref or '-'})")
