"""Boards and cards API tests — visibility, card creation, assignment."""

import pytest

from conftest import auth_headers, register_user
from taskboard.db.models import DEFAULT_LIST_NAMES


async def make_board(client, headers, name="Sprint 1", is_private=False):
    r = await client.post(
        "/api/v1/boards", json={"name": name, "is_private": is_private}, headers=headers
    )
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Boards
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_board_with_default_lists(client):
    user, headers = await register_user(client, name="Owner")
    board = await make_board(client, headers)

    assert board["name"] == "Sprint 1"
    assert board["owner_id"] == user["id"]
    assert board["owner_name"] == "Owner"
    assert board["is_private"] is False
    assert [tl["name"] for tl in board["lists"]] == list(DEFAULT_LIST_NAMES)
    assert [tl["position"] for tl in board["lists"]] == [0, 1, 2, 3, 4]
    assert all(tl["cards"] == [] for tl in board["lists"])


@pytest.mark.asyncio
async def test_create_board_validation(client):
    _, headers = await register_user(client)
    r = await client.post("/api/v1/boards", json={"name": ""}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_boards_hides_other_peoples_private_boards(client):
    _, alice = await register_user(client, name="Alice")
    _, bob = await register_user(client, name="Bob")

    public = await make_board(client, alice, "Public")
    private = await make_board(client, alice, "Secret", is_private=True)
    bobs = await make_board(client, bob, "Bob's", is_private=True)

    alice_sees = {b["id"] for b in (await client.get("/api/v1/boards", headers=alice)).json()}
    bob_sees = {b["id"] for b in (await client.get("/api/v1/boards", headers=bob)).json()}

    assert alice_sees == {public["id"], private["id"]}
    assert bob_sees == {public["id"], bobs["id"]}


@pytest.mark.asyncio
async def test_list_my_boards(client):
    _, alice = await register_user(client)
    _, bob = await register_user(client)
    mine = await make_board(client, alice, "Mine")
    await make_board(client, bob, "Not mine")

    r = await client.get("/api/v1/boards/mine", headers=alice)
    assert r.status_code == 200
    assert [b["id"] for b in r.json()] == [mine["id"]]


@pytest.mark.asyncio
async def test_get_public_board_as_someone_else(client):
    _, alice = await register_user(client)
    _, bob = await register_user(client)
    board = await make_board(client, alice)

    r = await client.get(f"/api/v1/boards/{board['id']}", headers=bob)
    assert r.status_code == 200
    assert len(r.json()["lists"]) == len(DEFAULT_LIST_NAMES)


@pytest.mark.asyncio
async def test_get_private_board_as_someone_else(client):
    _, alice = await register_user(client)
    _, bob = await register_user(client)
    board = await make_board(client, alice, is_private=True)

    r = await client.get(f"/api/v1/boards/{board['id']}", headers=bob)
    assert r.status_code == 403

    r = await client.get(f"/api/v1/boards/{board['id']}", headers=alice)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_get_missing_board(client):
    _, headers = await register_user(client)
    r = await client.get("/api/v1/boards/99999", headers=headers)
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Cards
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_card(client):
    user, headers = await register_user(client)
    board = await make_board(client, headers)
    todo = board["lists"][0]

    r = await client.post(
        f"/api/v1/boards/{board['id']}/lists/{todo['id']}/cards",
        json={"title": "Write docs", "label": "docs", "assigned_user_id": user["id"]},
        headers=headers,
    )
    assert r.status_code == 201
    card = r.json()
    assert card["title"] == "Write docs"
    assert card["list_id"] == todo["id"]
    assert card["current_state"] == "To Do"
    assert card["assigned_user_id"] == user["id"]

    detail = (await client.get(f"/api/v1/boards/{board['id']}", headers=headers)).json()
    assert [c["id"] for c in detail["lists"][0]["cards"]] == [card["id"]]


@pytest.mark.asyncio
async def test_create_card_on_others_public_board(client):
    _, alice = await register_user(client)
    _, bob = await register_user(client)
    board = await make_board(client, alice)

    r = await client.post(
        f"/api/v1/boards/{board['id']}/lists/{board['lists'][1]['id']}/cards",
        json={"title": "Bob was here"},
        headers=bob,
    )
    assert r.status_code == 201
    assert r.json()["current_state"] == "In Progress"


@pytest.mark.asyncio
async def test_create_card_on_others_private_board(client):
    _, alice = await register_user(client)
    _, bob = await register_user(client)
    board = await make_board(client, alice, is_private=True)

    r = await client.post(
        f"/api/v1/boards/{board['id']}/lists/{board['lists'][0]['id']}/cards",
        json={"title": "Sneaky"},
        headers=bob,
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_create_card_list_from_another_board(client):
    _, headers = await register_user(client)
    board_a = await make_board(client, headers, "A")
    board_b = await make_board(client, headers, "B")

    r = await client.post(
        f"/api/v1/boards/{board_a['id']}/lists/{board_b['lists'][0]['id']}/cards",
        json={"title": "Wrong board"},
        headers=headers,
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "List not found"


@pytest.mark.asyncio
async def test_create_card_unknown_assignee(client):
    _, headers = await register_user(client)
    board = await make_board(client, headers)

    r = await client.post(
        f"/api/v1/boards/{board['id']}/lists/{board['lists'][0]['id']}/cards",
        json={"title": "Orphan", "assigned_user_id": "user_nobody"},
        headers=headers,
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Assignee not found"


@pytest.mark.asyncio
async def test_assign_and_list_assigned_cards(client):
    _, alice = await register_user(client)
    bob_user, bob = await register_user(client)
    board = await make_board(client, alice)
    card = (
        await client.post(
            f"/api/v1/boards/{board['id']}/lists/{board['lists'][0]['id']}/cards",
            json={"title": "Review PR"},
            headers=alice,
        )
    ).json()

    r = await client.patch(
        f"/api/v1/cards/{card['id']}/assignee",
        json={"user_id": bob_user["id"]},
        headers=alice,
    )
    assert r.status_code == 200
    assert r.json()["assigned_user_id"] == bob_user["id"]

    assigned = (await client.get("/api/v1/cards/assigned", headers=bob)).json()
    assert [c["id"] for c in assigned] == [card["id"]]
    assert (await client.get("/api/v1/cards/assigned", headers=alice)).json() == []

    r = await client.patch(
        f"/api/v1/cards/{card['id']}/assignee", json={"user_id": None}, headers=alice
    )
    assert r.json()["assigned_user_id"] is None


@pytest.mark.asyncio
async def test_assign_missing_card(client):
    _, headers = await register_user(client)
    r = await client.patch(
        "/api/v1/cards/424242/assignee", json={"user_id": None}, headers=headers
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_assign_on_private_board_denied(client):
    _, alice = await register_user(client)
    bob_user, bob = await register_user(client)
    board = await make_board(client, alice, is_private=True)
    card = (
        await client.post(
            f"/api/v1/boards/{board['id']}/lists/{board['lists'][0]['id']}/cards",
            json={"title": "Private work"},
            headers=alice,
        )
    ).json()

    r = await client.patch(
        f"/api/v1/cards/{card['id']}/assignee",
        json={"user_id": bob_user["id"]},
        headers=bob,
    )
    assert r.status_code == 403


# ═══════════════════════════════════════════════════════════
# Ownership across an account link
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_private_board_and_assignments_follow_link(client, idp):
    """After linking, the federated identity owns the private board and
    still has its assigned cards; nobody else gained access."""
    user, local = await register_user(client, email="carol@example.com", name="Carol")
    _, dave = await register_user(client)
    board = await make_board(client, local, "Carol's private", is_private=True)
    card = (
        await client.post(
            f"/api/v1/boards/{board['id']}/lists/{board['lists'][0]['id']}/cards",
            json={"title": "Mine", "assigned_user_id": user["id"]},
            headers=local,
        )
    ).json()

    fed = auth_headers(idp.issue("fed-carol", email="carol@example.com"))

    r = await client.get(f"/api/v1/boards/{board['id']}", headers=fed)
    assert r.status_code == 200
    assert r.json()["owner_id"] == "fed-carol"

    assigned = (await client.get("/api/v1/cards/assigned", headers=fed)).json()
    assert [(c["id"], c["assigned_user_id"]) for c in assigned] == [(card["id"], "fed-carol")]

    r = await client.get(f"/api/v1/boards/{board['id']}", headers=dave)
    assert r.status_code == 403
