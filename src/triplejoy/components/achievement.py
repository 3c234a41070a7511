from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(slots=True)
class Achievement:
    title: str
    description: str
    icon: str
    target_value: int
    current_value: int = 0
    unlocked: bool = False

    @property
    def progress(self) -> float:
        if self.target_value <= 0:
            return 1.0
        return min(self.current_value / self.target_value, 1.0)


@dataclass(slots=True)
class AchievementLog:
    """Cross-session progress counters plus the achievement list."""
    achievements: List[Achievement] = field(default_factory=list)
    total_score: int = 0
    levels_completed: int = 0

    def by_title(self) -> Dict[str, Achievement]:
        return {achievement.title: achievement for achievement in self.achievements}

    @property
    def unlocked_count(self) -> int:
        return sum(1 for achievement in self.achievements if achievement.unlocked)

    @property
    def completion(self) -> float:
        if not self.achievements:
            return 0.0
        return self.unlocked_count / len(self.achievements)
