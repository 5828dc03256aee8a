"""Integration tests for user API endpoints."""

import repositories.db_models as db_models


class TestPublicProfiles:
    def test_profile_hides_email(self, client, test_user, test_question):
        response = client.get(f"/api/users/{test_user.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["username"] == test_user.username
        assert "email" not in data["user"]
        assert data["stats"]["questionsAsked"] == 1
        assert data["recentActivity"]["questions"][0]["id"] == test_question.id

    def test_profile_not_found(self, client):
        response = client.get("/api/users/31337")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_leaderboard_orders_by_reputation(self, client, make_user):
        make_user("low", reputation=5)
        make_user("high", reputation=50)

        response = client.get("/api/users/leaderboard?limit=2")

        data = response.json()["data"]
        assert [u["username"] for u in data["leaderboard"]] == ["high", "low"]
        assert data["timeframe"] == "all"
        assert data["count"] == 2

    def test_search_users(self, client, make_user):
        make_user("alice_dev", bio="<b>Python</b> person")
        make_user("bob")

        response = client.get("/api/users/search?q=ALICE")

        data = response.json()["data"]
        assert [u["username"] for u in data["users"]] == ["alice_dev"]
        assert data["totalUsers"] == 1

    def test_search_users_requires_query(self, client):
        response = client.get("/api/users/search?q=%20")

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide search query"

    def test_reputation_breakdown(
        self, client, other_auth_headers, test_user, test_question
    ):
        client.post(
            f"/api/questions/{test_question.id}/vote",
            json={"voteType": "up"},
            headers=other_auth_headers,
        )

        response = client.get(f"/api/users/{test_user.id}/reputation")

        breakdown = response.json()["data"]["reputationBreakdown"]
        assert breakdown["totalReputation"] == 5
        assert breakdown["fromQuestions"] == 5

    def test_summary_and_activity(self, client, test_answer, other_user):
        summary = client.get(f"/api/users/{other_user.id}/summary")
        activity = client.get(f"/api/users/{other_user.id}/activity")

        stats = summary.json()["data"]["statistics"]
        assert stats["answers"]["total"] == 1
        assert stats["answers"]["acceptanceRate"] == 0
        items = activity.json()["data"]["activities"]
        assert [item["type"] for item in items] == ["answer"]
        assert activity.json()["data"]["hasMore"] is False


class TestOwnAccount:
    def test_me_includes_private_fields(self, client, auth_headers, test_user):
        response = client.get("/api/users/me", headers=auth_headers)

        data = response.json()["data"]
        assert data["user"]["email"] == test_user.email
        assert data["user"]["settings"]["theme"] == "auto"
        assert data["bookmarks"] == []
        assert data["stats"]["questionsAsked"] == 0

    def test_update_profile(self, client, auth_headers):
        response = client.put(
            "/api/users/profile",
            json={
                "fullName": "Test <i>User</i>",
                "website": "https://example.org",
                "tags": ["python", " ", "sql"],
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        profile = response.json()["data"]["user"]["profile"]
        assert profile["fullName"] == "Test User"
        assert profile["website"] == "https://example.org"
        assert profile["tags"] == ["python", "sql"]

    def test_update_profile_rejects_bad_website(self, client, auth_headers):
        response = client.put(
            "/api/users/profile",
            json={"website": "javascript:alert(1)"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid website URL"

    def test_update_profile_rejects_too_many_tags(self, client, auth_headers):
        response = client.put(
            "/api/users/profile",
            json={"tags": [f"t{i}" for i in range(11)]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_settings_round_trip(self, client, auth_headers):
        updated = client.put(
            "/api/users/settings",
            json={"theme": "dark", "emailNotifications": False},
            headers=auth_headers,
        )
        fetched = client.get("/api/users/settings", headers=auth_headers)

        assert updated.status_code == 200
        settings = fetched.json()["data"]["settings"]
        assert settings["theme"] == "dark"
        assert settings["emailNotifications"] is False

    def test_invalid_theme(self, client, auth_headers):
        response = client.put(
            "/api/users/settings", json={"theme": "neon"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Invalid theme value. Must be light, dark, or auto"
        )


class TestFollowing:
    def test_follow_and_unfollow(
        self, client, db_session, auth_headers, test_user, other_user
    ):
        followed = client.post(
            f"/api/users/{other_user.id}/follow", headers=auth_headers
        )
        status = client.get(
            f"/api/users/{other_user.id}/connection-status", headers=auth_headers
        )
        following = client.get("/api/users/me/following", headers=auth_headers)

        assert followed.status_code == 200
        assert status.json()["data"] == {"isFollowing": True, "isSelf": False}
        assert [u["id"] for u in following.json()["data"]["following"]] == [
            other_user.id
        ]
        notification = db_session.query(db_models.Notification).one()
        assert notification.title == "New Follower"
        assert notification.data == {"url": f"/users/{test_user.id}"}

        unfollowed = client.delete(
            f"/api/users/{other_user.id}/follow", headers=auth_headers
        )
        assert unfollowed.status_code == 200
        assert unfollowed.json()["message"] == "User unfollowed successfully"

    def test_followers_list(
        self, client, auth_headers, other_auth_headers, test_user, other_user
    ):
        client.post(f"/api/users/{test_user.id}/follow", headers=other_auth_headers)

        response = client.get(
            f"/api/users/{test_user.id}/followers", headers=auth_headers
        )

        assert response.json()["data"]["count"] == 1
        assert response.json()["data"]["followers"][0]["id"] == other_user.id

    def test_cannot_follow_self(self, client, auth_headers, test_user):
        response = client.post(
            f"/api/users/{test_user.id}/follow", headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot follow yourself"

    def test_cannot_follow_twice(self, client, auth_headers, other_user):
        client.post(f"/api/users/{other_user.id}/follow", headers=auth_headers)

        again = client.post(f"/api/users/{other_user.id}/follow", headers=auth_headers)

        assert again.status_code == 400
        assert again.json()["message"] == "Already following this user"

    def test_unfollow_when_not_following(self, client, auth_headers, other_user):
        response = client.delete(
            f"/api/users/{other_user.id}/follow", headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Not following this user"

    def test_follow_unknown_user(self, client, auth_headers):
        response = client.post("/api/users/5555/follow", headers=auth_headers)

        assert response.status_code == 404

    def test_connection_status_for_self(self, client, auth_headers, test_user):
        response = client.get(
            f"/api/users/{test_user.id}/connection-status", headers=auth_headers
        )

        assert response.json()["data"] == {"isFollowing": False, "isSelf": True}

    def test_suggestions_skip_followed_and_unverified(
        self, client, auth_headers, other_user, unverified_user, make_user
    ):
        fresh = make_user("fresh")
        client.post(f"/api/users/{other_user.id}/follow", headers=auth_headers)

        response = client.get("/api/users/suggestions", headers=auth_headers)

        ids = [u["id"] for u in response.json()["data"]["suggestions"]]
        assert ids == [fresh.id]


class TestNotifications:
    def _seed(self, client, other_auth_headers, test_question):
        for vote in ("up", "down"):
            client.post(
                f"/api/questions/{test_question.id}/vote",
                json={"voteType": vote},
                headers=other_auth_headers,
            )

    def test_list_and_unread_count(
        self, client, auth_headers, other_auth_headers, test_question
    ):
        self._seed(client, other_auth_headers, test_question)

        response = client.get("/api/users/notifications", headers=auth_headers)

        data = response.json()["data"]
        assert len(data["notifications"]) == 2
        assert data["pagination"]["unreadCount"] == 2
        assert data["pagination"]["totalCount"] == 2
        assert data["notifications"][0]["sender"]["username"] == "otheruser"

    def test_mark_one_read(
        self, client, auth_headers, other_auth_headers, test_question
    ):
        self._seed(client, other_auth_headers, test_question)
        notification_id = client.get(
            "/api/users/notifications", headers=auth_headers
        ).json()["data"]["notifications"][0]["id"]

        response = client.put(
            f"/api/users/notifications/{notification_id}/read", headers=auth_headers
        )
        unread = client.get(
            "/api/users/notifications?unread=true", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["notification"]["isRead"] is True
        assert len(unread.json()["data"]["notifications"]) == 1

    def test_cannot_read_someone_elses_notification(
        self, client, auth_headers, other_auth_headers, test_question
    ):
        self._seed(client, other_auth_headers, test_question)
        notification_id = client.get(
            "/api/users/notifications", headers=auth_headers
        ).json()["data"]["notifications"][0]["id"]

        response = client.put(
            f"/api/users/notifications/{notification_id}/read",
            headers=other_auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Notification not found"

    def test_mark_all_read(
        self, client, auth_headers, other_auth_headers, test_question
    ):
        self._seed(client, other_auth_headers, test_question)

        response = client.put(
            "/api/users/notifications/read-all", headers=auth_headers
        )

        assert response.json()["data"] == {"markedCount": 2}
        assert response.json()["message"] == "2 notifications marked as read"
