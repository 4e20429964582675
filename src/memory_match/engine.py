# memory_match/engine.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, List, Optional, Tuple

from . import deck
from .deck import Card
from .scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)

MATCH_AWARD = 10
MISMATCH_PENALTY = 5
PEEK_DELAY = 1.0
TICK_INTERVAL = 1.0
GRID_COLUMNS = 4

Listener = Callable[[], None]


@dataclass
class GameState:
    cards: List[Card] = field(default_factory=list)
    round: int = 0
    # the single face-up unmatched card waiting for a second pick
    pending: Optional[Card] = None
    awaiting_resolution: bool = False
    elapsed: int = 0
    score: int = 0
    finished: bool = False
    timer: Optional[Handle] = None
    reconcile: Optional[Handle] = None


class GameEngine:
    """
    Mutable game ADT for one 4x4 memory-match table.

    Rep:
      - state.cards is a fresh deck per round; positions are grid cells
      - pending is set iff exactly one unmatched card is face up and no
        resolution is in progress
      - awaiting_resolution iff two unmatched cards are face up
      - finished iff every card is matched; then no timer is running
      - score >= 0
    Safety:
      - guarded by an internal lock; scheduler callbacks re-check their
        round before touching state, so a reset makes them inert
    """

    def __init__(
        self,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        peek_delay: float = PEEK_DELAY,
        tick_interval: float = TICK_INTERVAL,
    ):
        self._scheduler = scheduler
        self._rng = rng
        self._peek_delay = peek_delay
        self._tick_interval = tick_interval
        self._lock = RLock()
        self._listeners: List[Listener] = []
        self._state = GameState()
        self.reset()

    # ----- observers -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener() after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        # a failing listener must not leave a flip half applied
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("[notify-error] round=%d listener=%r", self._state.round, listener)

    # ----- snapshot -----

    @property
    def lock(self) -> RLock:
        """Hold while reading several values that must belong to the same moment."""
        return self._lock

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._state.cards)

    @property
    def round(self) -> int:
        return self._state.round

    @property
    def pending(self) -> Optional[Card]:
        return self._state.pending

    @property
    def awaiting_resolution(self) -> bool:
        return self._state.awaiting_resolution

    @property
    def elapsed(self) -> int:
        return self._state.elapsed

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def finished(self) -> bool:
        return self._state.finished

    @property
    def timer_running(self) -> bool:
        return self._state.timer is not None

    def snapshot(self) -> dict:
        with self._lock:
            s = self._state
            return {
                "round": s.round,
                "columns": GRID_COLUMNS,
                "cards": [card.to_dict() for card in s.cards],
                "elapsed": s.elapsed,
                "score": s.score,
                "finished": s.finished,
                "awaiting_resolution": s.awaiting_resolution,
            }

    # ----- operations -----

    def reset(self) -> None:
        """Throw away the current round and deal a new deck."""
        with self._lock:
            old = self._state
            for handle in (old.timer, old.reconcile):
                if handle is not None:
                    handle.cancel()
            self._state = GameState(cards=deck.generate(self._rng), round=old.round + 1)
            logger.info("[reset] round=%d", self._state.round)
            self._check_rep()
            self._notify()

    def flip_at(self, position: int, round_: Optional[int] = None) -> bool:
        """Flip the card at a grid cell; a round other than the active one is ignored."""
        with self._lock:
            if round_ is not None and round_ != self._state.round:
                return False
            if not 0 <= position < len(self._state.cards):
                return False
            return self.flip(self._state.cards[position])

    def flip(self, card: Card) -> bool:
        """
        Turn a card face up and apply the matching rules.

        Returns False, without notifying, when the tap is ignored: a
        mismatch is still being shown, the card is already up or matched,
        or the card does not belong to the current deck.
        """
        with self._lock:
            s = self._state
            if s.awaiting_resolution or card.face_up or card.matched:
                return False
            if not any(c is card for c in s.cards):
                logger.debug("[flip-stale] round=%d id=%d", s.round, card.id)
                return False

            if s.timer is None and not s.finished:
                self._start_timer()

            card.face_up = True
            logger.debug("[flip] round=%d id=%d content=%s", s.round, card.id, card.content)

            first = s.pending
            if first is None:
                s.pending = card
                self._check_rep()
                self._notify()
                return True

            s.awaiting_resolution = True
            self._notify()

            if first.content == card.content:
                first.matched = True
                card.matched = True
                s.score += MATCH_AWARD
                s.pending = None
                s.awaiting_resolution = False
                logger.info("[match] round=%d content=%s score=%d", s.round, card.content, s.score)
                self._check_rep()
                self._notify()
                self._check_win()
            else:
                s.score = max(s.score - MISMATCH_PENALTY, 0)
                logger.info(
                    "[mismatch] round=%d contents=%s/%s score=%d",
                    s.round, first.content, card.content, s.score,
                )
                round_ = s.round
                s.reconcile = self._scheduler.call_later(
                    self._peek_delay, lambda: self._reconcile(round_, first, card)
                )
                self._check_rep()
                self._notify()
            return True

    # ----- scheduled callbacks -----

    def _reconcile(self, round_: int, first: Card, second: Card) -> None:
        with self._lock:
            s = self._state
            if s.round != round_:
                logger.debug("[reconcile-abort] round=%d active=%d", round_, s.round)
                return
            first.face_up = False
            second.face_up = False
            s.pending = None
            s.awaiting_resolution = False
            s.reconcile = None
            logger.debug("[reconcile] round=%d ids=%d/%d", s.round, first.id, second.id)
            self._check_rep()
            self._notify()

    def _start_timer(self) -> None:
        s = self._state
        round_ = s.round
        s.timer = self._scheduler.call_every(self._tick_interval, lambda: self._tick(round_))
        logger.info("[timer-start] round=%d", round_)

    def _tick(self, round_: int) -> None:
        with self._lock:
            s = self._state
            if s.round != round_ or s.timer is None or s.finished:
                return
            s.elapsed += 1
            self._notify()

    def _check_win(self) -> None:
        s = self._state
        if not all(card.matched for card in s.cards):
            return
        if s.timer is not None:
            s.timer.cancel()
            s.timer = None
        s.finished = True
        logger.info("[win] round=%d elapsed=%ds score=%d", s.round, s.elapsed, s.score)
        self._check_rep()
        self._notify()

    def _check_rep(self) -> None:
        s = self._state
        assert s.score >= 0
        for card in s.cards:
            if card.matched:
                assert card.face_up is True
        exposed = [card for card in s.cards if card.face_up and not card.matched]
        if s.awaiting_resolution:
            assert len(exposed) == 2
        else:
            assert len(exposed) <= 1
            assert exposed == ([s.pending] if s.pending is not None else [])
        if s.finished:
            assert all(card.matched for card in s.cards)
            assert s.timer is None
