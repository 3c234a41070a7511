from __future__ import annotations

import logging
from typing import List

from triplejoy.components.achievement import Achievement, AchievementLog
from triplejoy.components.game_state import EndReason
from triplejoy.constants import HIGH_SCORE_THRESHOLD, SPEED_DEMON_SECONDS
from triplejoy.events.bus import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_GAME_OVER,
    EVENT_MATCH_CLEARED,
    EventBus,
)

logger = logging.getLogger(__name__)

FIRST_STEPS = "First Steps"
SCORE_MASTER = "Score Master"
LEVEL_HUNTER = "Level Hunter"
GEM_COLLECTOR = "Gem Collector"
SPEED_DEMON = "Speed Demon"
PERFECTIONIST = "Perfectionist"
HIGH_SCORER = "High Scorer"
DEDICATED_PLAYER = "Dedicated Player"


def default_achievements() -> List[Achievement]:
    return [
        Achievement(FIRST_STEPS, "Complete your first level", "star.fill", 1),
        Achievement(SCORE_MASTER, "Reach 1000 points in total", "trophy.fill", 1000),
        Achievement(LEVEL_HUNTER, "Complete 10 levels", "gamecontroller.fill", 10),
        Achievement(GEM_COLLECTOR, "Collect 100 gems in total", "diamond.fill", 100),
        Achievement(SPEED_DEMON, f"Complete a level in under {SPEED_DEMON_SECONDS} seconds", "bolt.fill", 1),
        Achievement(PERFECTIONIST, "Complete 5 levels without pausing", "checkmark.circle.fill", 5),
        Achievement(HIGH_SCORER, f"Score {HIGH_SCORE_THRESHOLD} points in a single level", "crown.fill", 1),
        Achievement(DEDICATED_PLAYER, "Complete 25 levels", "medal.fill", 25),
    ]


class AchievementSystem:
    """Observer that turns engine events into achievement progress.

    Only keeps progress in memory; hosts that want it to survive restarts
    read ``log`` and store it themselves.

    Logic:
      - On EVENT_MATCH_CLEARED: every cleared gem counts toward Gem Collector.
      - On EVENT_GAME_OVER: add the score to the running total and count a
        completed level; a no-moves finish within the speed window counts for
        Speed Demon, a finish without pausing for Perfectionist, and a final
        score at the threshold for High Scorer.
    """
    def __init__(self, event_bus: EventBus, log: AchievementLog | None = None):
        self.event_bus = event_bus
        self.log = log or AchievementLog(achievements=default_achievements())
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)
        self.event_bus.subscribe(EVENT_GAME_OVER, self.on_game_over)

    def on_match_cleared(self, sender, **kwargs):
        cleared = len(kwargs.get('types') or kwargs.get('positions') or [])
        if cleared:
            self._advance(GEM_COLLECTOR, cleared)

    def on_game_over(self, sender, **kwargs):
        score = kwargs.get('score', 0)
        reason = kwargs.get('reason')
        self.log.total_score += score
        self.log.levels_completed += 1
        if reason is EndReason.NO_MOVES and kwargs.get('elapsed', 0) <= SPEED_DEMON_SECONDS:
            self._advance(SPEED_DEMON, 1)
        if reason is EndReason.NO_MOVES and not kwargs.get('pause_count', 0):
            self._advance(PERFECTIONIST, 1)
        if score >= HIGH_SCORE_THRESHOLD:
            self._advance(HIGH_SCORER, 1)
        self._check_totals()

    def _check_totals(self):
        achievements = self.log.by_title()
        totals = {
            FIRST_STEPS: self.log.levels_completed,
            SCORE_MASTER: self.log.total_score,
            LEVEL_HUNTER: self.log.levels_completed,
            DEDICATED_PLAYER: self.log.levels_completed,
        }
        for title, value in totals.items():
            achievement = achievements.get(title)
            if achievement is None:
                continue
            achievement.current_value = value
            self._unlock_if_reached(achievement)

    def _advance(self, title: str, amount: int):
        achievement = self.log.by_title().get(title)
        if achievement is None:
            return
        achievement.current_value += amount
        self._unlock_if_reached(achievement)

    def _unlock_if_reached(self, achievement: Achievement):
        if achievement.unlocked or achievement.current_value < achievement.target_value:
            return
        achievement.unlocked = True
        logger.info("Achievement unlocked: %s", achievement.title)
        self.event_bus.emit(EVENT_ACHIEVEMENT_UNLOCKED, title=achievement.title)

    def reset_progress(self):
        self.log.total_score = 0
        self.log.levels_completed = 0
        for achievement in self.log.achievements:
            achievement.current_value = 0
            achievement.unlocked = False
