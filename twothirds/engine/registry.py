"""Registry that creates and tracks games."""

import threading
from typing import Callable, Optional

from ..communication.markdown_logger import MarkdownLogger
from .clock import system_clock
from .config import GameConfig, validate_config
from .errors import NoFunds, NotAuthorized, NotFound
from .game import Game
from .ledger import InMemoryLedger, Ledger


class GameRegistry:
    """Creates games and keeps a pointer to the current one.

    Every game created here is administered by the registry's administrator,
    whoever triggered its creation, so service fees always accrue to one
    party.
    """

    def __init__(
        self,
        admin: str,
        defaults: Optional[GameConfig] = None,
        ledger: Optional[Ledger] = None,
        clock: Optional[Callable[[], int]] = None,
        entropy: Optional[Callable[[], int]] = None,
        log_dir: Optional[str] = None,
    ):
        """Initialize the registry.

        Args:
            admin: Administrator identity.
            defaults: Parameters used by create_game() without a config.
            ledger: Fund custody shared by every game.
            clock: Clock handed to every game.
            entropy: Tie-break seed source handed to every game.
            log_dir: If set, each game writes a markdown log under it.
        """
        self.admin = admin
        self._defaults = validate_config(defaults if defaults is not None else GameConfig())
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.clock = clock or system_clock
        self.entropy = entropy
        self.log_dir = log_dir
        self._games: list[Game] = []
        self._current: Optional[Game] = None
        self._lock = threading.Lock()

    def _require_admin(self, caller: str, action: str) -> None:
        if caller != self.admin:
            raise NotAuthorized(f"only the administrator may {action}")

    @property
    def defaults(self) -> GameConfig:
        return self._defaults

    @property
    def current_game(self) -> Optional[Game]:
        return self._current

    def create_game(self, caller: str, config: Optional[GameConfig] = None) -> Game:
        """Create a new game.

        Args:
            caller: Who is creating the game.
            config: Custom parameters (administrator only). None uses the
                stored defaults and is open to anyone.

        Returns:
            The new game.

        Raises:
            NotAuthorized: A non-administrator passed a custom config.
            ConfigInvalid: The config violates its constraints.
        """
        if config is not None:
            self._require_admin(caller, "create a game with custom parameters")
        with self._lock:
            config = validate_config(config if config is not None else self._defaults)
            game_id = len(self._games) + 1

            logger = MarkdownLogger(base_dir=self.log_dir) if self.log_dir else None
            if logger:
                logger.start_game(f"game_{game_id:04d}")
                logger.log_setup(game_id, self.admin, config, created_by=caller)

            game = Game(
                config=config,
                admin=self.admin,
                ledger=self.ledger,
                clock=self.clock,
                entropy=self.entropy,
                logger=logger,
                game_id=game_id,
            )
            self._games.append(game)
            if self._current is None:
                self._current = game
            return game

    def set_defaults(self, caller: str, config: GameConfig) -> None:
        """Replace the default parameters. Existing games are unaffected."""
        self._require_admin(caller, "change the default parameters")
        config = validate_config(config)
        with self._lock:
            self._defaults = config

    def set_current(self, caller: str, game_id: int) -> Game:
        """Point the current-game pointer at an existing game."""
        self._require_admin(caller, "change the current game")
        with self._lock:
            game = self._find(game_id)
            self._current = game
            return game

    def _find(self, game_id: int) -> Game:
        if not 1 <= game_id <= len(self._games):
            raise NotFound(f"no game with id {game_id}")
        return self._games[game_id - 1]

    def get_game(self, game_id: int) -> Game:
        with self._lock:
            return self._find(game_id)

    def all_games(self) -> list[Game]:
        with self._lock:
            return list(self._games)

    def pending_withdrawals(self, identity: str) -> int:
        """Total credited to an identity across every game."""
        return sum(game.pending_withdrawal(identity) for game in self.all_games())

    def withdraw_all(self, identity: str) -> int:
        """Withdraw an identity's balance from every game that holds one.

        Returns:
            Total amount paid out.
        """
        total = 0
        for game in self.all_games():
            try:
                total += game.withdraw(identity)
            except NoFunds:
                continue
        return total
