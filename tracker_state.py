# Filename: tracker_state.py

import copy
import threading
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from models import FIRST, SECOND, MilestoneState, TrackedToken


class TrackerState:
    """
    In-memory bookkeeping of the polling loop: latest token data, notified
    milestones and every mint ever seen. Shared with the status server, so
    every access goes through the lock and readers get copies.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: Dict[str, TrackedToken] = {}
        self._milestones: Dict[str, MilestoneState] = {}
        self._known_tokens: Set[str] = set()
        self.last_successful_poll: Optional[str] = None
        self.cycles_completed = 0

    def update_token(self, token: TrackedToken):
        with self._lock:
            self._tokens[token.mint] = token

    def milestone_for(self, mint: str) -> MilestoneState:
        """Return a copy of the mint's milestone flags, creating them on first sighting."""
        with self._lock:
            state = self._milestones.setdefault(mint, MilestoneState())
            return copy.copy(state)

    def mark_milestone(self, mint: str, milestone: str):
        """Set a milestone flag. Flags only ever go from False to True."""
        with self._lock:
            state = self._milestones.setdefault(mint, MilestoneState())
            if milestone == SECOND:
                state.second_crossed = True
                state.first_crossed = True
            elif milestone == FIRST:
                state.first_crossed = True
            else:
                raise ValueError(f"Unknown milestone: {milestone}")

    def remember(self, mints):
        with self._lock:
            self._known_tokens.update(mints)

    def record_poll_success(self):
        with self._lock:
            self.last_successful_poll = datetime.now(timezone.utc).isoformat()
            self.cycles_completed += 1

    def tokens_snapshot(self) -> Dict[str, TrackedToken]:
        with self._lock:
            return {mint: copy.copy(token) for mint, token in self._tokens.items()}

    def milestones_snapshot(self) -> Dict[str, MilestoneState]:
        with self._lock:
            return {mint: copy.copy(state) for mint, state in self._milestones.items()}

    def get_statistics(self) -> dict:
        with self._lock:
            return {
                "known": len(self._known_tokens),
                "tracked": len(self._tokens),
                "last_successful_poll": self.last_successful_poll,
                "cycles_completed": self.cycles_completed,
            }
