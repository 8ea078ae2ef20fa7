"""
Tests for the reward catalog: categories, filtering and lookup.
"""
import pytest

from regretless.core.errors import RewardNotFoundError
from regretless.services.domain import Reward, RewardCategory
from regretless.services.reward_catalog import (
    DEFAULT_CATALOG,
    category_for_reward,
    filter_rewards,
    find_reward,
)


def _reward(title: str, category=None) -> Reward:
    return Reward(id=title.lower().replace(" ", "-"), title=title, description="", point_cost=1,
                  icon_name="star", category=category)


class TestCatalog:
    def test_default_catalog(self):
        assert [(r.id, r.point_cost) for r in DEFAULT_CATALOG] == [
            ("custom-avatar", 100),
            ("theme-colors", 250),
            ("meditation-pack", 500),
        ]

    def test_find_reward(self):
        assert find_reward("theme-colors").title == "Theme Colors"

    def test_find_unknown_reward(self):
        with pytest.raises(RewardNotFoundError) as exc:
            find_reward("golden-vape")
        assert exc.value.code == "REWARD_NOT_FOUND"


class TestCategory:
    @pytest.mark.parametrize("title,expected", [
        ("Custom Avatar", RewardCategory.avatars),
        ("Theme Colors", RewardCategory.themes),
        ("Dark Color Scheme", RewardCategory.themes),
        ("Meditation Pack", RewardCategory.boosters),
        ("Premium Sounds", RewardCategory.boosters),
        ("Offline Mode", RewardCategory.features),
    ])
    def test_title_keywords(self, title, expected):
        assert category_for_reward(_reward(title)) == expected

    def test_first_match_wins(self):
        assert category_for_reward(_reward("Avatar Theme Pack")) == RewardCategory.themes

    def test_explicit_category_overrides_title(self):
        reward = _reward("Avatar Theme Pack", category=RewardCategory.avatars)
        assert category_for_reward(reward) == RewardCategory.avatars

    def test_explicit_all_falls_back_to_title(self):
        reward = _reward("Meditation Pack", category=RewardCategory.all)
        assert category_for_reward(reward) == RewardCategory.boosters


class TestFilter:
    def test_all_returns_everything(self):
        assert filter_rewards(DEFAULT_CATALOG) == list(DEFAULT_CATALOG)

    def test_by_category(self):
        result = filter_rewards(DEFAULT_CATALOG, RewardCategory.themes)
        assert [r.id for r in result] == ["theme-colors"]

    def test_search_is_case_insensitive_on_title_and_description(self):
        assert [r.id for r in filter_rewards(DEFAULT_CATALOG, search_text="AVATAR")] == ["custom-avatar"]
        assert [r.id for r in filter_rewards(DEFAULT_CATALOG, search_text="guided")] == ["meditation-pack"]

    def test_category_and_search_combine(self):
        assert filter_rewards(DEFAULT_CATALOG, RewardCategory.features, "avatar") == []
