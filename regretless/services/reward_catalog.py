"""
Reward catalog: static definitions plus category/search filtering.
"""
from __future__ import annotations

from typing import Iterable, Optional

from regretless.core.errors import RewardNotFoundError
from regretless.services.domain import Reward, RewardCategory


DEFAULT_CATALOG: tuple[Reward, ...] = (
    Reward(
        id="custom-avatar",
        title="Custom Avatar",
        description="Unlock special avatar options",
        point_cost=100,
        icon_name="person.crop.circle",
    ),
    Reward(
        id="theme-colors",
        title="Theme Colors",
        description="Unlock custom app color themes",
        point_cost=250,
        icon_name="paintpalette",
    ),
    Reward(
        id="meditation-pack",
        title="Meditation Pack",
        description="Unlock premium guided meditations",
        point_cost=500,
        icon_name="brain.head.profile",
    ),
)

# First match wins; "Avatar Theme Pack" is a theme.
_TITLE_KEYWORDS: tuple[tuple[tuple[str, ...], RewardCategory], ...] = (
    (("Theme", "Color"), RewardCategory.themes),
    (("Avatar",), RewardCategory.avatars),
    (("Pack", "Premium"), RewardCategory.boosters),
)


def category_for_reward(reward: Reward) -> RewardCategory:
    if reward.category is not None and reward.category != RewardCategory.all:
        return reward.category
    for keywords, category in _TITLE_KEYWORDS:
        if any(k in reward.title for k in keywords):
            return category
    return RewardCategory.features


def filter_rewards(
    rewards: Iterable[Reward],
    category: RewardCategory = RewardCategory.all,
    search_text: str = "",
) -> list[Reward]:
    """Category match AND case-insensitive search on title or description."""
    result = list(rewards)
    if category != RewardCategory.all:
        result = [r for r in result if category_for_reward(r) == category]
    if search_text:
        needle = search_text.lower()
        result = [
            r for r in result
            if needle in r.title.lower() or needle in r.description.lower()
        ]
    return result


def find_reward(reward_id: str, rewards: Optional[Iterable[Reward]] = None) -> Reward:
    for reward in (DEFAULT_CATALOG if rewards is None else rewards):
        if reward.id == reward_id:
            return reward
    raise RewardNotFoundError(reward_id)
