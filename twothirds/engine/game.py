"""Main game engine for the 2/3-of-the-average game."""

import hashlib
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from pydantic import BaseModel

from ..communication.markdown_logger import MarkdownLogger
from .clock import system_clock
from .commitment import COMMITMENT_SIZE, MAX_GUESS, MIN_GUESS, verify_commitment
from .config import GameConfig
from .errors import (
    AlreadyCommitted,
    AlreadyJoined,
    AlreadyRevealed,
    GameFull,
    InvalidCommitment,
    InvalidReveal,
    NoCommitment,
    NoFunds,
    NotAPlayer,
    WrongPhase,
    WrongStake,
)
from .ledger import InMemoryLedger, Ledger
from .phases import GamePhase, PhaseSchedule, derive_phase


@dataclass
class Player:
    """A participant's record within one game."""
    identity: str
    commitment: Optional[bytes] = None
    revealed_guess: int = 0  # Only meaningful once has_revealed is set
    has_joined: bool = True
    has_committed: bool = False
    has_revealed: bool = False


@dataclass(frozen=True)
class GameResult:
    """Outcome of a finalized game."""
    average: int
    target: int
    winner: str
    winner_prize: int
    service_fee: int
    revealed_count: int
    prize_pool: int


class PlayerStatus(BaseModel):
    """Public view of a player, as stored in a snapshot."""
    identity: str
    has_committed: bool
    has_revealed: bool
    commitment: Optional[str] = None
    revealed_guess: Optional[int] = None


class GameSnapshot(BaseModel):
    """The logical persisted state of a game."""
    game_id: int
    admin: str
    phase: str
    config: GameConfig
    roster: list[str]
    players: list[PlayerStatus]
    quorum_reached_at: int
    ended: bool
    prize_pool: int
    pending_withdrawals: dict[str, int]
    average: int
    target: int
    winner: Optional[str] = None


class Game:
    """One round of the 2/3-of-the-average game.

    The phase is never stored: it is derived from the clock and the quorum
    timestamp on every read. The only stored transition is the terminal
    latch set by finalize(), because finalizing moves funds.

    All public methods run under a per-game lock, so every call is a single
    atomic step against the game's state.
    """

    def __init__(
        self,
        config: GameConfig,
        admin: str,
        ledger: Optional[Ledger] = None,
        clock: Optional[Callable[[], int]] = None,
        entropy: Optional[Callable[[], int]] = None,
        logger: Optional[MarkdownLogger] = None,
        game_id: int = 1,
    ):
        """Initialize the game.

        Args:
            config: Validated game parameters.
            admin: Identity that collects service fees and forfeited pools.
            ledger: Fund custody. Defaults to a private in-memory ledger.
            clock: Returns the current time in seconds.
            entropy: Seed source for tie-breaks, predictable by callers.
            logger: Optional markdown logger.
            game_id: Identifier assigned by the registry.
        """
        self.config = config
        self.admin = admin
        self.game_id = game_id
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.clock = clock or system_clock
        self._entropy = entropy or time.time_ns
        self.logger = logger or MarkdownLogger()
        self._lock = threading.RLock()

        self._roster: list[str] = []
        self._positions: dict[str, int] = {}
        self.players: dict[str, Player] = {}
        self.quorum_reached_at = 0
        self._schedule: Optional[PhaseSchedule] = None
        self.ended = False
        self.prize_pool = 0
        self.pending_withdrawals: dict[str, int] = {}

        self.average = 0
        self.target = 0
        self.winner: Optional[str] = None
        self._result: Optional[GameResult] = None

    # ------------------------------------------------------------------
    # Phase

    def _phase_at(self, now: int) -> GamePhase:
        return derive_phase(
            self.ended,
            len(self._roster),
            self.config.min_players,
            self._schedule,
            now,
        )

    @property
    def phase(self) -> GamePhase:
        """The phase in effect right now."""
        with self._lock:
            return self._phase_at(self.clock())

    @property
    def schedule(self) -> Optional[PhaseSchedule]:
        """Commit and reveal windows, known once quorum is reached."""
        return self._schedule

    def time_remaining(self) -> int:
        """Seconds until the current timed window closes, 0 if untimed."""
        with self._lock:
            now = self.clock()
            phase = self._phase_at(now)
            if self._schedule is None:
                return 0
            deadline = self._schedule.deadline(phase)
            return max(deadline - now, 0) if deadline else 0

    def _require_phase(self, now: int, *allowed: GamePhase) -> GamePhase:
        phase = self._phase_at(now)
        if phase not in allowed:
            expected = " or ".join(p.label for p in allowed)
            raise WrongPhase(f"{phase.label} phase, expected {expected}")
        return phase

    # ------------------------------------------------------------------
    # Roster

    def join(self, caller: str, stake: int) -> None:
        """Join the game by staking exactly the entry fee.

        Args:
            caller: Identity of the joining player.
            stake: Amount handed over with the call.

        Raises:
            WrongPhase: The commit window has already opened.
            AlreadyJoined: The caller is on the roster.
            GameFull: The roster holds max_players.
            WrongStake: The stake differs from the entry fee.
        """
        with self._lock:
            now = self.clock()
            # GAME_STARTING already implies now < commit_start
            self._require_phase(now, GamePhase.WAITING_FOR_PLAYERS, GamePhase.GAME_STARTING)
            if caller in self.players:
                raise AlreadyJoined(f"{caller} has already joined")
            if len(self._roster) >= self.config.max_players:
                raise GameFull(f"game is full ({self.config.max_players} players)")
            if stake != self.config.entry_fee:
                raise WrongStake(f"stake must be exactly {self.config.entry_fee}, got {stake}")

            self.ledger.deposit(caller, stake)
            self.players[caller] = Player(identity=caller)
            self._positions[caller] = len(self._roster)
            self._roster.append(caller)
            self.prize_pool += stake
            latched = self._schedule is None and len(self._roster) >= self.config.min_players
            if latched:
                self.quorum_reached_at = now
                self._schedule = PhaseSchedule.from_quorum(now, self.config)

            self.logger.log_join(caller, len(self._roster), self.config.max_players)
            if latched:
                self.logger.log_quorum(now, self._schedule)

    def leave(self, caller: str) -> None:
        """Leave before quorum. The stake is credited back for withdrawal.

        Raises:
            WrongPhase: Quorum has been reached.
            NotAPlayer: The caller is not on the roster.
        """
        with self._lock:
            self._require_phase(self.clock(), GamePhase.WAITING_FOR_PLAYERS)
            if caller not in self.players:
                raise NotAPlayer(f"{caller} has not joined")

            # Swap with the last entry, roster order carries no meaning
            index = self._positions.pop(caller)
            last = self._roster.pop()
            if last != caller:
                self._roster[index] = last
                self._positions[last] = index
            del self.players[caller]

            refund = self.config.entry_fee
            self.prize_pool -= refund
            self._credit(caller, refund)
            self.logger.log_leave(caller, refund)

    # ------------------------------------------------------------------
    # Commit / reveal

    def commit(self, caller: str, commitment: bytes) -> None:
        """Store the caller's commitment to a hidden guess.

        See ``engine.commitment`` for how the commitment is built.

        Raises:
            WrongPhase: Not in the commit window.
            NotAPlayer: The caller has not joined.
            AlreadyCommitted: The caller committed earlier.
            InvalidCommitment: The commitment is not a 32-byte bytes value.
        """
        with self._lock:
            self._require_phase(self.clock(), GamePhase.COMMIT)
            player = self.players.get(caller)
            if player is None:
                raise NotAPlayer(f"{caller} has not joined")
            if player.has_committed:
                raise AlreadyCommitted(f"{caller} has already committed")
            if not isinstance(commitment, (bytes, bytearray)):
                raise InvalidCommitment(
                    f"commitment must be bytes, got {type(commitment).__name__}"
                )
            commitment = bytes(commitment)
            if len(commitment) != COMMITMENT_SIZE:
                raise InvalidCommitment(
                    f"commitment must be {COMMITMENT_SIZE} bytes, got {len(commitment)}"
                )

            player.commitment = commitment
            player.has_committed = True
            self.logger.log_commit(caller, commitment)

    def reveal(self, caller: str, guess: int, salt: bytes) -> None:
        """Open the caller's commitment.

        Args:
            caller: Identity of the revealing player.
            guess: The committed number, 0 to 1000.
            salt: The 32-byte salt used to build the commitment.

        Raises:
            WrongPhase: Not in the reveal window.
            NoCommitment: The caller never joined or never committed.
            AlreadyRevealed: The caller revealed earlier.
            InvalidReveal: The guess is not an in-range integer or does not open the
                stored commitment.
        """
        with self._lock:
            self._require_phase(self.clock(), GamePhase.REVEAL)
            player = self.players.get(caller)
            if player is None or not player.has_committed:
                raise NoCommitment(f"{caller} has no commitment to reveal")
            if player.has_revealed:
                raise AlreadyRevealed(f"{caller} has already revealed")
            if not isinstance(guess, int) or isinstance(guess, bool):
                raise InvalidReveal(f"guess must be an integer, got {type(guess).__name__}")
            if not MIN_GUESS <= guess <= MAX_GUESS:
                raise InvalidReveal(f"guess {guess} outside {MIN_GUESS}-{MAX_GUESS}")
            if not verify_commitment(player.commitment, guess, salt):
                raise InvalidReveal(f"guess and salt do not match {caller}'s commitment")

            player.revealed_guess = guess
            player.has_revealed = True
            self.logger.log_reveal(caller, guess)

    # ------------------------------------------------------------------
    # Resolution

    def finalize(self, caller: Optional[str] = None) -> GameResult:
        """Compute the winner and credit the prize and the service fee.

        Anyone may call this once the reveal window is over. Calling it on
        an ended game returns the stored result and changes nothing.

        Returns:
            The game result.

        Raises:
            WrongPhase: The reveal window has not closed yet.
        """
        with self._lock:
            if self.ended:
                return self._result
            self._require_phase(self.clock(), GamePhase.EVALUATING)

            revealed = [
                self.players[identity]
                for identity in self._roster
                if self.players[identity].has_revealed
            ]
            pool = self.prize_pool

            if not revealed:
                # Nobody opened a commitment, the pool is forfeited
                result = GameResult(
                    average=0,
                    target=0,
                    winner=self.admin,
                    winner_prize=pool,
                    service_fee=0,
                    revealed_count=0,
                    prize_pool=pool,
                )
            else:
                average = sum(p.revealed_guess for p in revealed) // len(revealed)
                target = average * 2 // 3
                best = min(abs(p.revealed_guess - target) for p in revealed)
                tied = [p.identity for p in revealed if abs(p.revealed_guess - target) == best]
                service_fee = pool * self.config.service_fee_percent // 100
                result = GameResult(
                    average=average,
                    target=target,
                    winner=self._break_tie(tied),
                    winner_prize=pool - service_fee,
                    service_fee=service_fee,
                    revealed_count=len(revealed),
                    prize_pool=pool,
                )

            self._credit(self.admin, result.service_fee)
            self._credit(result.winner, result.winner_prize)
            self.average = result.average
            self.target = result.target
            self.winner = result.winner
            self._result = result
            self.ended = True

            self.logger.log_game_end(
                result,
                [self.players[identity] for identity in self._roster],
                finalized_by=caller,
            )
            return result

    def _break_tie(self, tied: list[str]) -> str:
        """Pick one of the tied players.

        The index comes from hashing a clock-derived seed with the tie
        count. Anyone who can observe or nudge the seed can predict the
        pick; that is accepted for this game's stakes.
        """
        if len(tied) == 1:
            return tied[0]
        seed = self._entropy() % 2**256
        digest = hashlib.sha3_256(
            seed.to_bytes(32, "big") + len(tied).to_bytes(32, "big")
        ).digest()
        return tied[int.from_bytes(digest, "big") % len(tied)]

    # ------------------------------------------------------------------
    # Payouts

    def _credit(self, identity: str, amount: int) -> None:
        if amount > 0:
            self.pending_withdrawals[identity] = self.pending_withdrawals.get(identity, 0) + amount

    def withdraw(self, caller: str) -> int:
        """Pay out everything credited to the caller.

        The balance is zeroed before the ledger transfer. If the transfer
        fails the balance is put back and the error propagates.

        Returns:
            The amount paid out.

        Raises:
            NoFunds: Nothing is pending for the caller.
        """
        with self._lock:
            amount = self.pending_withdrawals.get(caller, 0)
            if amount == 0:
                raise NoFunds(f"nothing to withdraw for {caller}")
            self.pending_withdrawals[caller] = 0
            try:
                self.ledger.transfer(caller, amount)
            except Exception:
                self.pending_withdrawals[caller] = amount
                raise
            self.logger.log_withdrawal(caller, amount)
            return amount

    # ------------------------------------------------------------------
    # Read-only views

    def pending_withdrawal(self, identity: str) -> int:
        """Amount currently credited to an identity."""
        with self._lock:
            return self.pending_withdrawals.get(identity, 0)

    @property
    def player_count(self) -> int:
        with self._lock:
            return len(self._roster)

    @property
    def roster(self) -> list[str]:
        """Joined identities. Order is not meaningful."""
        with self._lock:
            return list(self._roster)

    def get_player(self, identity: str) -> Optional[Player]:
        """A copy of a player's record, or None if they are not on the roster."""
        with self._lock:
            player = self.players.get(identity)
            return replace(player) if player else None

    def get_results(self) -> GameResult:
        """The final result.

        Raises:
            WrongPhase: The game has not been finalized yet.
        """
        with self._lock:
            if not self.ended:
                raise WrongPhase(
                    f"results are only available once the game has ended "
                    f"(currently {self._phase_at(self.clock()).label})"
                )
            return self._result

    def snapshot(self) -> GameSnapshot:
        """Capture the game's logical state."""
        with self._lock:
            players = []
            for identity in self._roster:
                p = self.players[identity]
                players.append(PlayerStatus(
                    identity=identity,
                    has_committed=p.has_committed,
                    has_revealed=p.has_revealed,
                    commitment=p.commitment.hex() if p.commitment else None,
                    revealed_guess=p.revealed_guess if p.has_revealed else None,
                ))
            return GameSnapshot(
                game_id=self.game_id,
                admin=self.admin,
                phase=self._phase_at(self.clock()).name,
                config=self.config,
                roster=list(self._roster),
                players=players,
                quorum_reached_at=self.quorum_reached_at,
                ended=self.ended,
                prize_pool=self.prize_pool,
                pending_withdrawals=dict(self.pending_withdrawals),
                average=self.average,
                target=self.target,
                winner=self.winner,
            )
