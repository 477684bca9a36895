"""
User statistics collaborator.

The core only needs two things from the statistics layer: record that a
user ran a full simulation, and bump their score when that run ended with
a single survivor. The in-memory store here also serves the read side
(paged global statistics) for tests and the command-line runner; a real
deployment would back the same methods with a database.
"""

import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List

from .constants import STATS_PAGE_SIZE_DEFAULT
from .errors import EntityNotFoundError, InvalidArgumentError


@dataclass
class UserRecord:
    """Per-user statistics row"""
    login: str
    avatar_id: int = 0
    score: int = 0  # successful runs
    simulations_run: int = 0

    @property
    def average_success_rate(self) -> float:
        if self.simulations_run == 0:
            return 0.0
        return self.score / self.simulations_run

    def to_dict(self) -> dict:
        return {
            'login': self.login,
            'avatar_id': self.avatar_id,
            'score': self.score,
            'simulations_run': self.simulations_run,
            'average_success_rate': self.average_success_rate,
        }


@dataclass
class GlobalStatistics:
    """One page of users plus totals across every user"""
    total_simulations: int
    total_score: int
    overall_success_rate: float
    users: List[UserRecord] = field(default_factory=list)
    page: int = 0
    total_pages: int = 0
    total_users: int = 0

    def to_dict(self) -> dict:
        return {
            'total_simulations': self.total_simulations,
            'total_score': self.total_score,
            'overall_success_rate': self.overall_success_rate,
            'users': [u.to_dict() for u in self.users],
            'page': self.page,
            'total_pages': self.total_pages,
            'total_users': self.total_users,
        }


class UserStats(ABC):
    """Contract the simulation service reports completed runs through."""

    @abstractmethod
    def find_by_login(self, login: str) -> UserRecord:
        """
        Look up a user.

        Raises:
            EntityNotFoundError: if no user has that login
        """
        pass

    @abstractmethod
    def register_new_user(self, login: str, avatar_id: int = 0) -> UserRecord:
        pass

    @abstractmethod
    def record_simulation(self, login: str) -> UserRecord:
        """Count one finished full run for login."""
        pass

    @abstractmethod
    def increment_score(self, login: str) -> UserRecord:
        """Count one successful run for login."""
        pass

    @abstractmethod
    def global_statistics(self, page: int = 0, size: int = STATS_PAGE_SIZE_DEFAULT) -> GlobalStatistics:
        pass


class InMemoryUserStats(UserStats):
    """Dict-backed UserStats, safe to share between threads."""

    def __init__(self):
        self._users: Dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def find_by_login(self, login: str) -> UserRecord:
        with self._lock:
            return self._get(login)

    def register_new_user(self, login: str, avatar_id: int = 0) -> UserRecord:
        if not login or not login.strip():
            raise InvalidArgumentError("Login must not be empty")
        with self._lock:
            if login in self._users:
                raise InvalidArgumentError(f"User '{login}' already exists")
            user = UserRecord(login=login, avatar_id=avatar_id)
            self._users[login] = user
            return user

    def record_simulation(self, login: str) -> UserRecord:
        with self._lock:
            user = self._get(login)
            user.simulations_run += 1
            return user

    def increment_score(self, login: str) -> UserRecord:
        with self._lock:
            user = self._get(login)
            user.score += 1
            return user

    def global_statistics(self, page: int = 0, size: int = STATS_PAGE_SIZE_DEFAULT) -> GlobalStatistics:
        """
        Aggregate statistics with one sorted page of users.

        Users are ordered by score (descending), then login (ascending).

        Args:
            page: 0-based page number
            size: Users per page

        Returns:
            GlobalStatistics with totals over all users
        """
        if page < 0:
            raise InvalidArgumentError(f"Page must be >= 0, got {page}")
        if size < 1:
            raise InvalidArgumentError(f"Page size must be >= 1, got {size}")

        with self._lock:
            ordered = sorted(self._users.values(), key=lambda u: (-u.score, u.login))
            total_simulations = sum(u.simulations_run for u in ordered)
            total_score = sum(u.score for u in ordered)
            rows = [UserRecord(**vars(u)) for u in ordered[page * size:(page + 1) * size]]

        return GlobalStatistics(
            total_simulations=total_simulations,
            total_score=total_score,
            overall_success_rate=(total_score / total_simulations) if total_simulations else 0.0,
            users=rows,
            page=page,
            total_pages=math.ceil(len(ordered) / size),
            total_users=len(ordered),
        )

    def _get(self, login: str) -> UserRecord:
        user = self._users.get(login)
        if user is None:
            raise EntityNotFoundError(f"User '{login}' not found")
        return user
