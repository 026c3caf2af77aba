"""Level table, titles and leagues for HustleQuest.

Leveling Curve
--------------
A fixed table of cumulative XP thresholds, level 1 at 0 XP up to level 25 at
16,500 XP.  Progression caps at the last entry: XP beyond it keeps counting
but the level stays at :data:`MAX_LEVEL`.

Level Titles
------------
    1-2   Beginner
    3-5   Hustler
    6-8   Sales Pro
    9-10  Elite Closer
   11-15  Business Master
   16-20  Industry Legend
   21+    Legendary Boss

Leagues
-------
Contiguous level bands; the last one is open-ended:

    Rookie 1-5, Bronze 6-10, Silver 11-15, Gold 16-25,
    Platinum 26-35, Diamond 36-45, Master 46+

Everything here is pure: no storage, no clock.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


# ── leveling table (easy to adjust) ──────────────────────────────────────

LEVEL_REQUIREMENTS: dict[int, int] = {
    1: 0, 2: 100, 3: 250, 4: 450, 5: 700,
    6: 1000, 7: 1350, 8: 1750, 9: 2200, 10: 2700,
    11: 3250, 12: 3850, 13: 4500, 14: 5200, 15: 5950,
    16: 6750, 17: 7600, 18: 8500, 19: 9450, 20: 10500,
    21: 11600, 22: 12750, 23: 13950, 24: 15200, 25: 16500,
}

MAX_LEVEL = max(LEVEL_REQUIREMENTS)

_LEVELS = sorted(LEVEL_REQUIREMENTS)
_THRESHOLDS = [LEVEL_REQUIREMENTS[lvl] for lvl in _LEVELS]


# ── level math ───────────────────────────────────────────────────────────


def xp_for_level(level: int) -> int:
    """Total cumulative XP required to *reach* the given level.

    ``xp_for_level(1)`` is 0.  Levels past the table return the last
    threshold.
    """
    if level <= 1:
        return 0
    return LEVEL_REQUIREMENTS[min(level, MAX_LEVEL)]


def level_for_xp(total_xp: int) -> int:
    """Return the highest level whose threshold *total_xp* has reached."""
    if total_xp <= 0:
        return 1
    return _LEVELS[bisect_right(_THRESHOLDS, total_xp) - 1]


def xp_to_next_level(total_xp: int) -> int:
    """XP still needed to reach the next level (0 at the cap)."""
    current = level_for_xp(total_xp)
    if current >= MAX_LEVEL:
        return 0
    return xp_for_level(current + 1) - total_xp


def xp_in_current_level(total_xp: int) -> tuple[int, int]:
    """Return ``(earned_in_level, needed_for_level)``.

    At the cap both numbers describe the final band, so a progress bar
    simply shows full.
    """
    level = level_for_xp(total_xp)
    floor = xp_for_level(level)
    if level >= MAX_LEVEL:
        span = floor - xp_for_level(MAX_LEVEL - 1)
        return span, span
    ceiling = xp_for_level(level + 1)
    return total_xp - floor, ceiling - floor


# ── level titles ─────────────────────────────────────────────────────────

# Ordered descending so the first match wins.
LEVEL_TITLES: list[tuple[int, str]] = [
    (21, "Legendary Boss"),
    (16, "Industry Legend"),
    (11, "Business Master"),
    (9,  "Elite Closer"),
    (6,  "Sales Pro"),
    (3,  "Hustler"),
    (1,  "Beginner"),
]


def title_for_level(level: int) -> str:
    for threshold, title in LEVEL_TITLES:
        if level >= threshold:
            return title
    return "Beginner"


# ── leagues ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class League:
    key: str
    title: str
    color: str
    badge: str
    min_level: int
    min_xp: int

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "color": self.color,
            "badge": self.badge,
            "min_level": self.min_level,
            "min_xp": self.min_xp,
        }


# Ascending; each band runs up to the next band's min_level - 1.
LEAGUES: list[League] = [
    League("rookie",   "Rookie League",   "text-gray-400",   "🥉", 1,  0),
    League("bronze",   "Bronze League",   "text-orange-400", "🥉", 6,  500),
    League("silver",   "Silver League",   "text-gray-300",   "🥈", 11, 1500),
    League("gold",     "Gold League",     "text-yellow-400", "🥇", 16, 3500),
    League("platinum", "Platinum League", "text-blue-400",   "💎", 26, 8000),
    League("diamond",  "Diamond League",  "text-cyan-400",   "💎", 36, 16000),
    League("master",   "Master League",   "text-purple-400", "👑", 46, 30000),
]


def league_for_level(level: int) -> League:
    """Return the league band containing *level* (Rookie below level 1)."""
    for league in reversed(LEAGUES):
        if level >= league.min_level:
            return league
    return LEAGUES[0]
