# =============================================================================
# MODULE: leaderboard.py
# Connect Four - Read-only leaderboard client
# =============================================================================

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from config import LEADERBOARD_LIMIT, LEADERBOARD_TIMEOUT

logger = logging.getLogger('Leaderboard')


class LeaderboardError(Exception):
    """The leaderboard could not be fetched or understood."""


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    username: str
    wins: int
    losses: int = 0

    def matches(self, username: Optional[str]) -> bool:
        return bool(username) and self.username.lower() == username.lower()


def parse_leaderboard(payload) -> List[LeaderboardEntry]:
    if not isinstance(payload, list):
        raise LeaderboardError("Leaderboard response is not a list")
    entries = []
    for rank, row in enumerate(payload, start=1):
        if not isinstance(row, dict) or not row.get('username'):
            raise LeaderboardError(f"Malformed leaderboard row #{rank}: {row!r}")
        try:
            entries.append(LeaderboardEntry(
                rank=rank,
                username=str(row['username']),
                wins=int(row.get('wins', 0)),
                losses=int(row.get('losses', 0)),
            ))
        except (TypeError, ValueError) as e:
            raise LeaderboardError(f"Malformed leaderboard row #{rank}: {e}") from e
    return entries


def fetch_leaderboard(server_url, limit=LEADERBOARD_LIMIT, timeout=LEADERBOARD_TIMEOUT) -> List[LeaderboardEntry]:
    """GET <server>/leaderboard?limit=N, ranked by position in the response."""
    try:
        r = requests.get(f"{server_url}/leaderboard", params={'limit': limit}, timeout=timeout)
        r.raise_for_status()
        payload = r.json()
    except requests.RequestException as e:
        logger.warning(f"Leaderboard request failed: {e}")
        raise LeaderboardError(str(e)) from e
    except ValueError as e:
        raise LeaderboardError(f"Leaderboard response is not JSON: {e}") from e
    return parse_leaderboard(payload)


def highlighted_rank(entries: List[LeaderboardEntry], username: Optional[str]) -> Optional[int]:
    """Rank of the current user in `entries`, if listed."""
    for entry in entries:
        if entry.matches(username):
            return entry.rank
    return None
