"""Guild API 엔드포인트 테스트"""

from fastapi.testclient import TestClient


def _roster_ids(client: TestClient) -> list[str]:
    return [h["hero_id"] for h in client.get("/guild/roster").json()]


def _first_quest_id(client: TestClient) -> str:
    return client.get("/guild/quests").json()[0]["quest_id"]


class TestQueries:
    def test_summary(self, client: TestClient):
        response = client.get("/guild")
        assert response.status_code == 200
        data = response.json()
        assert data["gold"] == 500
        assert data["status"] == "active"
        assert data["roster_size"] == 3
        assert data["month"] == 1
        assert data["salary_due"] == 30

    def test_roster(self, client: TestClient):
        heroes = client.get("/guild/roster").json()
        assert len(heroes) == 3
        assert all(h["is_available"] for h in heroes)
        assert all(h["level"] == 1 for h in heroes)

    def test_quest_board(self, client: TestClient):
        quests = client.get("/guild/quests").json()
        assert len(quests) == 3
        assert all(1 <= q["difficulty"] <= 10 for q in quests)

    def test_opinions(self, client: TestClient):
        hero_id, *others = _roster_ids(client)
        response = client.get(f"/guild/heroes/{hero_id}/opinions")
        assert response.status_code == 200
        assert response.json()["opinions"] == {other: 0 for other in others}

    def test_opinions_unknown_hero(self, client: TestClient):
        response = client.get("/guild/heroes/nobody/opinions")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "hero_not_found"


class TestQuestAttempt:
    def test_attempt(self, client: TestClient):
        quest_id = _first_quest_id(client)
        response = client.post(
            f"/guild/quests/{quest_id}/attempt",
            json={"hero_ids": _roster_ids(client)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["quest_id"] == quest_id
        assert 0 <= body["data"]["success_probability"] <= 100
        assert quest_id not in [q["quest_id"] for q in client.get("/guild/quests").json()]

    def test_party_away_after_attempt(self, client: TestClient):
        client.post(
            f"/guild/quests/{_first_quest_id(client)}/attempt",
            json={"hero_ids": _roster_ids(client)},
        )
        for hero in client.get("/guild/roster").json():
            assert hero["quest_weeks_remaining"] >= 1
            assert hero["is_available"] is False

    def test_invalid_party(self, client: TestClient):
        quest_id = _first_quest_id(client)
        response = client.post(
            f"/guild/quests/{quest_id}/attempt",
            json={"hero_ids": _roster_ids(client)[:2]},
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["error"] == "invalid_party_composition"

    def test_unknown_quest(self, client: TestClient):
        response = client.post(
            "/guild/quests/quest_99999/attempt",
            json={"hero_ids": _roster_ids(client)},
        )
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "quest_not_offered"


class TestTime:
    def test_advance_week_until_month_end(self, client: TestClient):
        for week in (1, 2, 3):
            response = client.post("/guild/advance-week")
            assert response.status_code == 200
            assert response.json()["data"]["week"] == week

        response = client.post("/guild/advance-week")
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "month_end_reached"

    def test_advance_month(self, client: TestClient):
        response = client.post("/guild/advance-month", json={})
        assert response.status_code == 200
        assert response.json()["data"]["salary_total"] == 30
        summary = client.get("/guild").json()
        assert summary["month"] == 2
        assert summary["gold"] == 470

    def test_advance_month_with_dismissal(self, client: TestClient):
        hero_id = _roster_ids(client)[0]
        response = client.post("/guild/advance-month", json={"dismissals": [hero_id]})
        assert response.status_code == 200
        assert response.json()["data"]["salary_total"] == 20
        assert hero_id not in _roster_ids(client)

    def test_bankruptcy_ends_game(self, client: TestClient):
        client.app.state.guild_service.guild.gold = 0
        response = client.post("/guild/advance-month", json={})
        assert response.status_code == 200
        assert response.json()["data"]["is_lost"] is True

        response = client.post("/guild/advance-week")
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "game_over"


class TestRosterActions:
    def test_dismiss(self, client: TestClient):
        hero_id = _roster_ids(client)[0]
        response = client.post(f"/guild/heroes/{hero_id}/dismiss")
        assert response.status_code == 200
        assert response.json()["data"]["hero_id"] == hero_id
        assert len(_roster_ids(client)) == 2

    def test_dismiss_unknown(self, client: TestClient):
        response = client.post("/guild/heroes/nobody/dismiss")
        assert response.status_code == 404

    def test_accept_unknown_offer(self, client: TestClient):
        response = client.post("/guild/offers/offer_99999/accept")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "offer_not_found"

    def test_accept_offer(self, client: TestClient):
        offers = client.get("/guild/offers").json()
        if not offers:
            client.post("/guild/advance-month", json={})
            offers = client.get("/guild/offers").json()
        for offer in offers:
            response = client.post(f"/guild/offers/{offer['offer_id']}/accept")
            assert response.status_code == 200
            assert response.json()["data"]["hero_id"] == offer["hero"]["hero_id"]

    def test_equip_unknown_item(self, client: TestClient):
        hero_id = _roster_ids(client)[0]
        response = client.post(f"/guild/heroes/{hero_id}/equip", json={"item_id": "item_99999"})
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "item_not_found"

    def test_unequip_empty_hand(self, client: TestClient):
        hero_id = _roster_ids(client)[0]
        response = client.post(f"/guild/heroes/{hero_id}/unequip")
        assert response.status_code == 404


class TestNotifications:
    def test_actions_produce_notifications(self, client: TestClient):
        client.post(f"/guild/heroes/{_roster_ids(client)[0]}/dismiss")
        notifications = client.get("/guild/notifications").json()
        assert any(n["event_type"] == "hero_dismissed" for n in notifications)

        response = client.post("/guild/notifications/read")
        assert response.status_code == 200
        assert client.get("/guild/notifications", params={"unread_only": True}).json() == []


class TestSaveLoad:
    def test_save_and_load(self, client: TestClient):
        response = client.post("/guild/save", json={})
        assert response.status_code == 200

        client.post(f"/guild/heroes/{_roster_ids(client)[0]}/dismiss")
        assert len(_roster_ids(client)) == 2

        response = client.post("/guild/load/guild_main")
        assert response.status_code == 200
        assert len(_roster_ids(client)) == 3

    def test_save_wrong_guild(self, client: TestClient):
        response = client.post("/guild/save", json={"guild_id": "someone_else"})
        assert response.status_code == 400

    def test_load_missing(self, client: TestClient):
        response = client.post("/guild/load/no_such_guild")
        assert response.status_code == 404


class TestOddsPreview:
    def test_preview_leaves_board_untouched(self, client: TestClient):
        quest_id = _first_quest_id(client)
        response = client.post(
            f"/guild/quests/{quest_id}/odds",
            json={"hero_ids": _roster_ids(client)},
        )
        assert response.status_code == 200
        odds = response.json()
        assert odds["relationship_factor"] == 0.0
        assert odds["injury_avoid_probability"] == 50.0
        assert quest_id in [q["quest_id"] for q in client.get("/guild/quests").json()]
