"""
Integration tests for API endpoints using a SQLite document store.
"""
import inspect

import pytest

from regretless.core.config import settings
from regretless.routers import profile
from regretless.schemas.documents import VAPING_SESSIONS
from regretless.services.documents import SqlDocumentStore
from regretless.services.progress import avatar_token


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestProfile:
    def test_create_profile(self, client, headers, user_id):
        r = client.post("/profile", json={
            "username": "  RecoveryJourney ",
            "weekly_spending": 20.0,
            "vaping_frequency": 12,
            "days_per_week_vaping": 5,
        }, headers=headers)
        assert r.status_code == 201
        body = r.json()
        assert body["user_id"] == user_id
        assert body["username"] == "RecoveryJourney"
        assert body["daily_vaping_goal"] == 12
        assert body["profile_image_url"] is None

    def test_create_twice_conflicts(self, client, registered):
        r = client.post("/profile", json={"username": "again"}, headers=registered)
        assert r.status_code == 409
        assert r.json()["code"] == "USER_ALREADY_EXISTS"

    def test_blank_username_rejected(self, client, headers):
        r = client.post("/profile", json={"username": "   "}, headers=headers)
        assert r.status_code == 422

    def test_days_per_week_bounded(self, client, headers):
        r = client.post("/profile", json={"username": "x", "days_per_week_vaping": 8}, headers=headers)
        assert r.status_code == 422

    def test_read_profile(self, client, registered):
        r = client.get("/profile", headers=registered)
        assert r.status_code == 200
        assert r.json()["daily_vaping_goal"] == 10

    def test_update_daily_goal(self, client, registered):
        r = client.put("/profile/daily-goal", json={"daily_vaping_goal": 3}, headers=registered)
        assert r.status_code == 200
        assert r.json()["daily_vaping_goal"] == 3
        assert client.get("/profile", headers=registered).json()["daily_vaping_goal"] == 3

    def test_upload_avatar(self, client, registered, user_id, blob_root):
        r = client.put(
            "/profile/avatar",
            content=b"\x89PNG\r\n",
            headers={**registered, "Content-Type": "image/png"},
        )
        assert r.status_code == 200
        url = r.json()["profile_image_url"]
        assert url == f"https://cdn.test/blobs/profile_images/{avatar_token(user_id)}.png"
        assert (blob_root / "profile_images" / f"{avatar_token(user_id)}.png").exists()
        assert client.get("/profile", headers=registered).json()["profile_image_url"] == url

    def test_avatar_wrong_type(self, client, registered):
        r = client.put(
            "/profile/avatar", content=b"hello",
            headers={**registered, "Content-Type": "text/plain"},
        )
        assert r.status_code == 415
        assert r.json()["code"] == "UNSUPPORTED_MEDIA_TYPE"

    def test_avatar_too_large(self, client, registered, monkeypatch):
        monkeypatch.setattr(settings, "MAX_AVATAR_BYTES", 4)
        r = client.put(
            "/profile/avatar", content=b"12345",
            headers={**registered, "Content-Type": "image/jpeg"},
        )
        assert r.status_code == 413
        assert r.json()["details"] == {"max_bytes": 4, "received": 5}

    @pytest.mark.parametrize("odd_id", ["../evil", "a/b", "..\\..\\win"])
    def test_avatar_name_independent_of_user_id(self, client, blob_root, odd_id):
        headers = {"X-User-Id": odd_id}
        assert client.post("/profile", json={"username": "odd"}, headers=headers).status_code == 201
        r = client.put(
            "/profile/avatar", content=b"\x89PNG",
            headers={**headers, "Content-Type": "image/png"},
        )
        assert r.status_code == 200
        (stored,) = (blob_root / "profile_images").iterdir()
        assert stored.name == f"{avatar_token(odd_id)}.png"
        assert not (blob_root.parent / "evil.png").exists()

    def test_avatar_route_runs_in_threadpool(self):
        assert not inspect.iscoroutinefunction(profile.upload_avatar)


class TestProgress:
    def test_initial_progress(self, client, registered):
        r = client.get("/progress", headers=registered)
        assert r.status_code == 200
        body = r.json()
        assert body["balance"] == 0
        assert body["streak_days"] == 1
        assert body["daily_count"] == 0
        assert body["milestones"] == []
        assert body["trigger_breakdown"]["Stress or anxiety"] == 0
        assert len(body["mood_breakdown"]) == 7

    def test_award_points(self, client, registered):
        r = client.post("/progress/points", json={"amount": 15}, headers=registered)
        assert r.status_code == 200
        assert r.json() == {"points_awarded": 15, "balance": 15, "milestones": []}

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_award(self, client, registered, amount):
        r = client.post("/progress/points", json={"amount": amount}, headers=registered)
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_AMOUNT"
        assert client.get("/progress", headers=registered).json()["balance"] == 0

    def test_award_earns_milestone(self, client, registered):
        r = client.post(
            "/progress/points",
            json={"amount": 100, "reason": "Goal Completed", "description": "Hit my goal"},
            headers=registered,
        )
        body = r.json()
        assert body["balance"] == 150
        (milestone,) = body["milestones"]
        assert milestone["title"] == "Century Club"
        assert milestone["points_awarded"] == 50
        assert milestone["icon_name"] == "star.circle.fill"

        progress = client.get("/progress", headers=registered).json()
        assert [m["title"] for m in progress["milestones"]] == ["Century Club"]

    def test_unknown_reason_rejected(self, client, registered):
        r = client.post("/progress/points", json={"amount": 5, "reason": "Lottery"}, headers=registered)
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("reason", [
        "Opening Balance", "Achievement Unlocked", "Reward Purchased",
        "Session Logged", "Community Engagement", "Story Shared",
    ])
    def test_ledger_only_reason_rejected(self, client, registered, reason):
        r = client.post("/progress/points", json={"amount": 500, "reason": reason}, headers=registered)
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "reason"
        assert client.get("/progress", headers=registered).json()["balance"] == 0

    @pytest.mark.parametrize("reason", ["App Usage", "Goal Completed", "Daily Streak", "Streak Milestone"])
    def test_client_reason_accepted(self, client, registered, reason):
        r = client.post("/progress/points", json={"amount": 5, "reason": reason}, headers=registered)
        assert r.status_code == 200

    def test_activity(self, client, registered):
        r = client.post("/progress/activities/breathing-exercise", headers=registered)
        assert r.status_code == 200
        assert r.json()["points_awarded"] == 15

    def test_unknown_activity(self, client, registered):
        r = client.post("/progress/activities/skydiving", headers=registered)
        assert r.status_code == 404
        assert r.json()["code"] == "UNKNOWN_ACTIVITY"

    def test_transactions_newest_first(self, client, registered):
        client.post("/progress/points", json={"amount": 5}, headers=registered)
        client.post("/progress/activities/affirmations", headers=registered)
        r = client.get("/progress/transactions?days=7", headers=registered)
        assert r.status_code == 200
        body = r.json()
        assert body["days"] == 7
        assert body["total"] == 2
        assert [t["amount"] for t in body["items"]] == [10, 5]
        assert body["items"][0]["reason"] == "App Usage"
        assert body["items"][0]["description"] == "Reading affirmations"

        total = client.get("/progress/transactions/total?days=7", headers=registered).json()
        assert total == {"days": 7, "total": 15}

    def test_negative_days_rejected(self, client, registered):
        r = client.get("/progress/transactions?days=-1", headers=registered)
        assert r.status_code == 422

    def test_milestone_progress(self, client, registered):
        client.post("/progress/points", json={"amount": 40}, headers=registered)
        r = client.get("/progress/milestones", headers=registered)
        items = {i["title"]: i for i in r.json()["items"]}
        assert len(items) == 8
        assert items["Century Club"]["current"] == 40
        assert items["Century Club"]["target"] == 100
        assert items["Century Club"]["earned"] is False

    def test_savings_first_week(self, client, headers):
        client.post("/profile", json={
            "username": "saver", "weekly_spending": 20.0,
            "vaping_frequency": 10, "days_per_week_vaping": 7,
        }, headers=headers)
        r = client.get("/progress/savings", headers=headers)
        body = r.json()
        assert body["current_savings"] == pytest.approx(20.0)
        assert body["yearly_projection"] == pytest.approx(1040.0)
        assert body["current_display"] == "$20"
        assert body["yearly_display"] == "$1,040"


class TestSessions:
    _SESSION = {
        "intensity": 3,
        "trigger": "Boredom",
        "mood": "Bored",
        "craving_level": 6,
        "notes": "waiting for the bus",
    }

    def test_log_session(self, client, registered):
        r = client.post("/sessions", json=self._SESSION, headers=registered)
        assert r.status_code == 201
        body = r.json()
        assert body["points_awarded"] == 5
        assert body["balance"] == 5
        assert body["streak_days"] == 0
        assert body["session"]["trigger"] == "Boredom"
        assert body["session"]["notes"] == "waiting for the bus"

        progress = client.get("/progress", headers=registered).json()
        assert progress["daily_count"] == 1
        assert progress["weekly_count"] == 1
        assert progress["trigger_breakdown"]["Boredom"] == 1

    def test_naive_timestamp_is_utc(self, client, registered):
        payload = {**self._SESSION, "timestamp": "2026-01-05T10:00:00"}
        r = client.post("/sessions", json=payload, headers=registered)
        assert r.json()["session"]["timestamp"] == "2026-01-05T10:00:00+00:00"

    def test_list_sessions_newest_first(self, client, registered):
        client.post("/sessions", json={**self._SESSION, "timestamp": "2026-01-05T10:00:00Z"},
                    headers=registered)
        client.post("/sessions", json={**self._SESSION, "timestamp": "2026-01-07T10:00:00Z"},
                    headers=registered)
        r = client.get("/sessions", headers=registered)
        body = r.json()
        assert body["total"] == 2
        assert body["items"][0]["timestamp"].startswith("2026-01-07")

        limited = client.get("/sessions?limit=1", headers=registered).json()
        assert limited["total"] == 1

    def test_stored_session_without_offset(self, client, db, registered, user_id):
        client.post("/sessions", json={**self._SESSION, "timestamp": "2026-01-07T10:00:00Z"},
                    headers=registered)
        SqlDocumentStore(db).append_subcollection_document(user_id, VAPING_SESSIONS, {
            "date": "2026-01-05T10:00:00",
            "intensity": 2,
            "trigger": "Boredom",
            "mood": "Bored",
            "cravingLevel": 4,
        })
        r = client.get("/sessions", headers=registered)
        assert r.status_code == 200
        stamps = [i["timestamp"][:10] for i in r.json()["items"]]
        assert stamps == ["2026-01-07", "2026-01-05"]

    def test_fifth_session_milestone(self, client, registered):
        for _ in range(4):
            client.post("/sessions", json=self._SESSION, headers=registered)
        r = client.post("/sessions", json=self._SESSION, headers=registered)
        assert [m["title"] for m in r.json()["milestones"]] == ["Track 5 Sessions"]
        assert r.json()["balance"] == 75

    def test_invalid_trigger(self, client, registered):
        r = client.post("/sessions", json={**self._SESSION, "trigger": "Because"}, headers=registered)
        assert r.status_code == 422


class TestEngagement:
    def test_like(self, client, registered):
        r = client.post("/engagement/like", headers=registered)
        assert r.status_code == 200
        assert r.json()["points_awarded"] == 5
        assert client.get("/progress", headers=registered).json()["like_count"] == 1

    def test_comment(self, client, registered):
        r = client.post("/engagement/comment", headers=registered)
        assert r.json()["points_awarded"] == 10

    def test_unknown_kind(self, client, registered):
        r = client.post("/engagement/share", headers=registered)
        assert r.status_code == 422


class TestRewards:
    def test_list_rewards(self, client, registered):
        r = client.get("/rewards", headers=registered)
        assert r.status_code == 200
        body = r.json()
        assert body["balance"] == 0
        assert [i["id"] for i in body["items"]] == ["custom-avatar", "theme-colors", "meditation-pack"]
        assert [i["category"] for i in body["items"]] == ["avatars", "themes", "boosters"]
        assert not any(i["is_unlocked"] or i["can_afford"] for i in body["items"])

    def test_filter_and_search(self, client, registered):
        themes = client.get("/rewards?category=themes", headers=registered).json()
        assert [i["id"] for i in themes["items"]] == ["theme-colors"]
        found = client.get("/rewards?search=meditation", headers=registered).json()
        assert [i["id"] for i in found["items"]] == ["meditation-pack"]

    def test_invalid_category(self, client, registered):
        r = client.get("/rewards?category=hats", headers=registered)
        assert r.status_code == 422

    def test_insufficient_points(self, client, registered):
        r = client.post("/rewards/custom-avatar/unlock", headers=registered)
        assert r.status_code == 409
        body = r.json()
        assert body["code"] == "INSUFFICIENT_POINTS"
        assert body["details"]["cost"] == 100

    def test_unlock_once(self, client, registered):
        client.post("/progress/points", json={"amount": 300}, headers=registered)  # +50 bonus
        r = client.post("/rewards/theme-colors/unlock", headers=registered)
        assert r.status_code == 200
        body = r.json()
        assert body["points_spent"] == 250
        assert body["balance"] == 100
        assert body["reward"]["is_unlocked"] is True

        again = client.post("/rewards/theme-colors/unlock", headers=registered)
        assert again.status_code == 409
        assert again.json()["code"] == "ALREADY_UNLOCKED"
        assert client.get("/progress", headers=registered).json()["balance"] == 100

        listing = client.get("/rewards", headers=registered).json()
        unlocked = {i["id"]: i["is_unlocked"] for i in listing["items"]}
        assert unlocked == {"custom-avatar": False, "theme-colors": True, "meditation-pack": False}

        history = client.get("/progress/transactions", headers=registered).json()
        assert history["items"][0]["description"] == "Purchased: Theme Colors"

    def test_unknown_reward(self, client, registered):
        r = client.post("/rewards/golden-vape/unlock", headers=registered)
        assert r.status_code == 404
        assert r.json()["code"] == "REWARD_NOT_FOUND"
