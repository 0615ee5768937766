"""
Snake Logic - Play Sessions

One session per board in play. A session owns the active snake set and
the processing lock: while a move is resolving (a snake sliding out, or
the short flash after a blocked move) every other selection is ignored.

Per-snake states:
    idle -> selected -> rejected (flash, back to idle)
                     -> exiting  -> removed
"""

import logging
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from .animator import CANVAS_SIZE, EXIT_MARGIN, SNAKE_SPEED, ExitAnimation
from .collision import DEFAULT_TOLERANCE, collides, find_blockers
from .events import BOARD_CLEARED, HINT_SHOWN, MOVE_ACCEPTED, MOVE_REJECTED, SNAKE_EXITED
from .geometry import Snake
from .solver import find_hintable


logger = logging.getLogger(__name__)


STATE_IDLE = "idle"
STATE_REJECTED = "rejected"
STATE_EXITING = "exiting"
STATE_REMOVED = "removed"

OUTCOME_ACCEPTED = "accepted"
OUTCOME_REJECTED = "rejected"
OUTCOME_IGNORED = "ignored"


class GameSession:
    """Active board, processing lock and the single in-flight exit."""

    def __init__(
        self,
        session_id: str,
        level: int,
        seed: int,
        tier: str,
        snakes: List[Snake],
        clock: Callable[[], float] = time.monotonic,
        tolerance: float = DEFAULT_TOLERANCE,
        speed: float = SNAKE_SPEED,
        canvas_size: float = CANVAS_SIZE,
        exit_margin: float = EXIT_MARGIN,
        reject_flash_seconds: float = 0.4,
        hint_duration_seconds: float = 2.0,
    ):
        self.id = session_id
        self.level = level
        self.seed = seed
        self.tier = tier
        self.snakes: List[Snake] = [snake.copy() for snake in snakes]
        self.clock = clock
        self.tolerance = tolerance
        self.speed = speed
        self.canvas_size = canvas_size
        self.exit_margin = exit_margin
        self.reject_flash_seconds = reject_flash_seconds
        self.hint_duration_seconds = hint_duration_seconds

        self.animation: Optional[ExitAnimation] = None
        self.rejected_id: Optional[str] = None
        self.flash_until: Optional[float] = None
        self.hinted_id: Optional[str] = None
        self.hint_until: Optional[float] = None
        self.removed: List[str] = []
        self.mistakes = 0

    # ============================================
    # STATE
    # ============================================

    def _flash_active(self) -> bool:
        return self.flash_until is not None and self.clock() < self.flash_until

    @property
    def is_processing(self) -> bool:
        return self.animation is not None or self._flash_active()

    @property
    def is_cleared(self) -> bool:
        return not self.snakes and self.animation is None

    @property
    def active_hint(self) -> Optional[str]:
        if self.hinted_id is None:
            return None
        if self.hint_until is not None and self.clock() >= self.hint_until:
            self.hinted_id = None
            self.hint_until = None
        return self.hinted_id

    def get_snake(self, snake_id: str) -> Optional[Snake]:
        for snake in self.snakes:
            if snake.id == snake_id:
                return snake
        return None

    def snake_state(self, snake_id: str) -> Optional[str]:
        if snake_id in self.removed:
            return STATE_REMOVED
        if self.get_snake(snake_id) is None:
            return None
        if self.animation is not None and self.animation.snake.id == snake_id:
            return STATE_EXITING
        if snake_id == self.rejected_id and self._flash_active():
            return STATE_REJECTED
        return STATE_IDLE

    def _others(self, snake_id: str) -> List[Snake]:
        return [s for s in self.snakes if s.id != snake_id]

    # ============================================
    # ACTIONS
    # ============================================

    def select(self, snake_id: str) -> Dict:
        """
        Try to send a snake off the board.

        Ignored while another move is resolving, once the board is
        cleared, or for an id not on the board.
        """
        result = {"outcome": OUTCOME_IGNORED, "snake_id": snake_id, "blocked_by": [], "events": []}

        if self.is_processing or self.is_cleared:
            return result

        snake = self.get_snake(snake_id)
        if snake is None:
            return result

        self.hinted_id = None
        self.hint_until = None
        others = self._others(snake_id)

        if collides(snake, others, self.tolerance):
            self.mistakes += 1
            self.rejected_id = snake_id
            self.flash_until = self.clock() + self.reject_flash_seconds
            result["outcome"] = OUTCOME_REJECTED
            result["blocked_by"] = find_blockers(snake, others, self.tolerance)
            result["events"].append(MOVE_REJECTED)
            logger.debug(f"[Session] {self.id} snake={snake_id} blocked by {result['blocked_by']}")
            return result

        self.rejected_id = None
        self.flash_until = None
        self.animation = ExitAnimation(snake, self.speed, self.canvas_size, self.exit_margin)
        result["outcome"] = OUTCOME_ACCEPTED
        result["events"].append(MOVE_ACCEPTED)
        return result

    def tick(self, frames: int = 1) -> Dict:
        """Advance the exiting snake by up to `frames` frames."""
        result = {"moving": None, "exited": None, "frames": 0, "events": []}

        if self.animation is None:
            return result

        before = self.animation.frames
        done = self.animation.run(frames)
        result["frames"] = self.animation.frames - before
        result["moving"] = self.animation.snake

        if done:
            snake_id = self.animation.snake.id
            self.snakes = self._others(snake_id)
            self.removed.append(snake_id)
            self.animation = None
            result["moving"] = None
            result["exited"] = snake_id
            result["events"].append(SNAKE_EXITED)
            logger.debug(f"[Session] {self.id} snake={snake_id} exited, {len(self.snakes)} left")

            if not self.snakes:
                result["events"].append(BOARD_CLEARED)
                logger.info(f"[Session] {self.id} level={self.level} cleared, mistakes={self.mistakes}")

        return result

    def hint(self) -> Dict:
        """Point at a snake that can leave now."""
        result = {"snake_id": None, "events": []}

        if self.is_processing or self.active_hint is not None:
            return result

        snake = find_hintable(self.snakes, self.tolerance)
        if snake is None:
            return result

        self.hinted_id = snake.id
        self.hint_until = self.clock() + self.hint_duration_seconds
        result["snake_id"] = snake.id
        result["events"].append(HINT_SHOWN)
        return result

    def to_dict(self) -> Dict:
        return {
            "session_id": self.id,
            "level": self.level,
            "seed": self.seed,
            "tier": self.tier,
            "snakes": [snake.to_dict() for snake in self.snakes],
            "moving": self.animation.snake.to_dict() if self.animation else None,
            "removed": list(self.removed),
            "mistakes": self.mistakes,
            "processing": self.is_processing,
            "hinted_snake_id": self.active_hint,
            "cleared": self.is_cleared,
        }


# ============================================
# SESSION STORE
# ============================================

class SessionStore:
    """In-process sessions, oldest evicted past `max_sessions`."""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()

    def create(self, level: int, seed: int, tier: str, snakes: List[Snake], **kwargs) -> GameSession:
        session = GameSession(uuid4().hex, level, seed, tier, snakes, **kwargs)
        self._sessions[session.id] = session

        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"[Session] evicted {evicted_id}")

        return session

    def get(self, session_id: str) -> Optional[GameSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self):
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
