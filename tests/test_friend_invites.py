import pytest

from travel_planner import db
from travel_planner.errors import (
    AlreadyFriends,
    CannotInviteSelf,
    Forbidden,
    InviteAlreadyPending,
    InviteNotFound,
    InviteNotPending,
)
from travel_planner.models import FriendInvite, UserFriend
from travel_planner.repositories import friend_invites


@pytest.fixture
def pair(make_user):
    return make_user("alice"), make_user("bob")


def test_accept_creates_both_friendship_rows(app, pair):
    alice, bob = pair
    invite = friend_invites.create_invite(alice.id, bob.id)

    assert friend_invites.accept_invite(invite.id, bob.id) == {"accepted": True}
    assert UserFriend.query.filter_by(user_id=alice.id, friend_id=bob.id).count() == 1
    assert UserFriend.query.filter_by(user_id=bob.id, friend_id=alice.id).count() == 1
    assert db.session.get(FriendInvite, invite.id).status == "accepted"


def test_only_recipient_can_accept_or_reject(app, pair):
    alice, bob = pair
    invite = friend_invites.create_invite(alice.id, bob.id)

    with pytest.raises(Forbidden):
        friend_invites.accept_invite(invite.id, alice.id)
    with pytest.raises(Forbidden):
        friend_invites.reject_invite(invite.id, alice.id)
    assert friend_invites.reject_invite(invite.id, bob.id) == {"rejected": True}


def test_only_sender_can_cancel(app, pair):
    alice, bob = pair
    invite = friend_invites.create_invite(alice.id, bob.id)

    with pytest.raises(Forbidden):
        friend_invites.cancel_invite(invite.id, bob.id)
    assert friend_invites.cancel_invite(invite.id, alice.id) == {"cancelled": True}
    with pytest.raises(InviteNotPending):
        friend_invites.accept_invite(invite.id, bob.id)


def test_missing_invite(app, pair):
    with pytest.raises(InviteNotFound):
        friend_invites.accept_invite("does-not-exist", pair[1].id)


def test_create_invite_guards(app, pair):
    alice, bob = pair
    with pytest.raises(CannotInviteSelf):
        friend_invites.create_invite(alice.id, alice.id)

    invite = friend_invites.create_invite(alice.id, bob.id)
    with pytest.raises(InviteAlreadyPending):
        friend_invites.create_invite(bob.id, alice.id)

    friend_invites.accept_invite(invite.id, bob.id)
    with pytest.raises(AlreadyFriends):
        friend_invites.create_invite(alice.id, bob.id)


def test_invite_flow_over_http(app, pair, login):
    alice, bob = pair
    alice_client = login(alice, test_client=app.test_client())
    bob_client = login(bob, test_client=app.test_client())

    response = alice_client.post("/api/friend-invites", json={"toUserId": bob.profile.public_id})
    assert response.status_code == 200
    invite_id = response.get_json()["id"]

    listed = bob_client.get("/api/friend-invites").get_json()
    assert [row["id"] for row in listed] == [invite_id]
    assert listed[0]["from_name"] == "alice"
    assert listed[0]["to_user_id"] == bob.id

    forbidden = alice_client.post(f"/api/friend-invites/{invite_id}/accept")
    assert forbidden.status_code == 403

    accepted = bob_client.post(f"/api/friend-invites/{invite_id}/accept")
    assert accepted.get_json() == {"accepted": True}

    friends = alice_client.get("/api/friends").get_json()
    assert [row["id"] for row in friends] == [bob.id]

    again = bob_client.post(f"/api/friend-invites/{invite_id}/accept")
    assert again.status_code == 409


def test_create_invite_errors_over_http(client, pair, login):
    alice, _ = pair
    assert client.post("/api/friend-invites", json={"toUserId": "x"}).status_code == 401

    login(alice)
    assert client.post("/api/friend-invites", json={}).status_code == 400
    assert client.post("/api/friend-invites", json={"toUserId": "00000000"}).status_code == 404
    assert client.post("/api/friend-invites", json={"toUserId": alice.id}).status_code == 400


def test_unknown_invite_action(client, pair, login):
    login(pair[0])
    assert client.post("/api/friend-invites/abc/approve").status_code == 404
    assert client.post("/api/friend-invites/abc/accept").status_code == 404


def test_public_invite_lookup(client, pair):
    alice, bob = pair
    friend_invites.create_invite(alice.id, bob.id)

    response = client.get(f"/api/friend-invites?publicId={bob.profile.public_id}")
    assert response.status_code == 200
    rows = response.get_json()
    assert rows[0]["from_public_id"] == alice.profile.public_id
    assert "to_user_id" not in rows[0]

    assert client.get("/api/friend-invites?publicId=12ab").status_code == 400
    assert client.get("/api/friend-invites?publicId=00000000").status_code == 404


def test_remove_friend(client, pair, login):
    alice, bob = pair
    invite = friend_invites.create_invite(alice.id, bob.id)
    friend_invites.accept_invite(invite.id, bob.id)
    login(alice)

    assert client.delete("/api/friends/not-a-uuid/remove").status_code == 400
    assert client.delete(f"/api/friends/{alice.id}/remove").status_code == 400

    response = client.delete(f"/api/friends/{bob.id}/remove")
    assert response.get_json() == {"ok": True, "removed": 2}

    missing = client.delete(f"/api/friends/{bob.id}/remove")
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Friend relation not found"
