from fastapi.testclient import TestClient
from sqlmodel import Session, select
from models import Song, Setlist, SetlistSet, SetSong, PerformanceSession

def _setup(session: Session, owner, *titles):
    setlist = Setlist(name="Gig", user_id=owner.id)
    session.add(setlist)
    songs = [Song(title=t, original_artist="Band") for t in titles]
    for s in songs:
        session.add(s)
    session.commit()
    session.refresh(setlist)
    for s in songs:
        session.refresh(s)
    return setlist, songs

def _add_set(session: Session, setlist, name, order, songs=()):
    set_ = SetlistSet(name=name, setlist_id=setlist.id, set_order=order)
    session.add(set_)
    session.commit()
    for i, song in enumerate(songs, start=1):
        session.add(SetSong(set_id=set_.id, song_id=song.id, song_order=i))
    session.commit()
    session.refresh(set_)
    return set_

def _refs(*songs):
    return [{"song_id": str(s.id), "song_order": i} for i, s in enumerate(songs, start=1)]

def test_create_set(client: TestClient, session: Session, member, auth):
    setlist, (a, b) = _setup(session, member, "A", "B")
    response = client.post(
        "/api/sets",
        json={"name": "Set 1", "setlist_id": str(setlist.id), "songs": _refs(a, b)},
        headers=auth(member),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["set_order"] == 1
    assert data["setlist_name"] == "Gig"
    assert [s["title"] for s in data["songs"]] == ["A", "B"]

def test_create_set_appends_order(client: TestClient, session: Session, member, auth):
    setlist, _ = _setup(session, member)
    _add_set(session, setlist, "First", 1)
    _add_set(session, setlist, "Second", 2)

    response = client.post(
        "/api/sets", json={"name": "Third", "setlist_id": str(setlist.id)}, headers=auth(member)
    )
    assert response.status_code == 201
    assert response.json()["set_order"] == 3

def test_create_set_requires_name_and_setlist(client: TestClient, member, auth):
    response = client.post("/api/sets", json={"name": "Lonely"}, headers=auth(member))
    assert response.status_code == 400
    assert response.json()["detail"] == "Set name and setlist_id are required."

def test_create_set_missing_setlist(client: TestClient, member, auth):
    response = client.post(
        "/api/sets",
        json={"name": "X", "setlist_id": "00000000-0000-0000-0000-000000000000"},
        headers=auth(member),
    )
    assert response.status_code == 404

def test_create_set_with_duplicate_songs(client: TestClient, session: Session, member, auth):
    setlist, (a, b) = _setup(session, member, "Shared", "Fresh")
    first = _add_set(session, setlist, "Set 1", 1, [a])

    response = client.post(
        "/api/sets",
        json={"name": "Set 2", "setlist_id": str(setlist.id), "songs": _refs(b, a)},
        headers=auth(member),
    )
    assert response.status_code == 409
    data = response.json()
    assert data["type"] == "DUPLICATES_FOUND"
    assert data["duplicates"] == [
        {
            "song": {"id": str(a.id), "title": "Shared", "original_artist": "Band"},
            "set": {"id": str(first.id), "name": "Set 1"},
        }
    ]
    # セットは作成されていない
    sets = session.exec(select(SetlistSet).where(SetlistSet.setlist_id == setlist.id)).all()
    assert len(sets) == 1

def test_same_song_in_other_setlist_is_allowed(client: TestClient, session: Session, member, auth):
    setlist, (a,) = _setup(session, member, "Anywhere")
    other = Setlist(name="Other", user_id=member.id)
    session.add(other)
    session.commit()
    _add_set(session, other, "Set 1", 1, [a])

    response = client.post(
        "/api/sets",
        json={"name": "Set 1", "setlist_id": str(setlist.id), "songs": _refs(a)},
        headers=auth(member),
    )
    assert response.status_code == 201

def test_update_set_replaces_songs(client: TestClient, session: Session, member, auth):
    setlist, (a, b, c) = _setup(session, member, "A", "B", "C")
    set_ = _add_set(session, setlist, "Set 1", 1, [a, b])

    response = client.put(
        f"/api/sets/{set_.id}",
        json={"name": "Renamed", "songs": _refs(c, a)},
        headers=auth(member),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert [s["title"] for s in data["songs"]] == ["C", "A"]

def test_update_set_duplicate_check_excludes_self(client: TestClient, session: Session, member, auth):
    setlist, (a, b) = _setup(session, member, "A", "B")
    _add_set(session, setlist, "Set 1", 1, [a])
    second = _add_set(session, setlist, "Set 2", 2, [b])

    # 自分のセットに既にある曲は重複扱いにならない
    response = client.put(f"/api/sets/{second.id}", json={"name": "Set 2", "songs": _refs(b)}, headers=auth(member))
    assert response.status_code == 200

    response = client.put(f"/api/sets/{second.id}", json={"name": "Set 2", "songs": _refs(b, a)}, headers=auth(member))
    assert response.status_code == 409
    assert response.json()["duplicates"][0]["set"]["name"] == "Set 1"

def test_update_set_requires_name(client: TestClient, session: Session, member, auth):
    setlist, _ = _setup(session, member)
    set_ = _add_set(session, setlist, "Set 1", 1)
    response = client.put(f"/api/sets/{set_.id}", json={"name": ""}, headers=auth(member))
    assert response.status_code == 400

def test_delete_set_renumbers(client: TestClient, session: Session, member, auth):
    setlist, (a,) = _setup(session, member, "A")
    _add_set(session, setlist, "One", 1)
    two = _add_set(session, setlist, "Two", 2, [a])
    _add_set(session, setlist, "Three", 3)
    perf = PerformanceSession(setlist_id=setlist.id, leader_id=member.id, current_set_id=two.id, current_song_id=a.id)
    session.add(perf)
    session.commit()
    two_id = two.id

    response = client.delete(f"/api/sets/{two_id}", headers=auth(member))
    assert response.status_code == 204

    sets = client.get(f"/api/setlists/{setlist.id}/sets").json()
    assert [(s["name"], s["set_order"]) for s in sets] == [("One", 1), ("Three", 2)]
    assert session.exec(select(SetSong).where(SetSong.set_id == two_id)).all() == []
    session.refresh(perf)
    assert perf.current_set_id is None

def test_get_set_not_found(client: TestClient):
    response = client.get("/api/sets/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Set not found"

def test_reorder_sets(client: TestClient, session: Session, member, auth):
    setlist, _ = _setup(session, member)
    one = _add_set(session, setlist, "One", 1)
    two = _add_set(session, setlist, "Two", 2)
    three = _add_set(session, setlist, "Three", 3)

    response = client.put(
        f"/api/setlists/{setlist.id}/sets/order",
        json={"set_ids": [str(three.id), str(one.id), str(two.id)]},
        headers=auth(member),
    )
    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["Three", "One", "Two"]

def test_reorder_sets_rejects_partial_list(client: TestClient, session: Session, member, auth):
    setlist, _ = _setup(session, member)
    one = _add_set(session, setlist, "One", 1)
    _add_set(session, setlist, "Two", 2)

    response = client.put(
        f"/api/setlists/{setlist.id}/sets/order", json={"set_ids": [str(one.id)]}, headers=auth(member)
    )
    assert response.status_code == 400

def test_check_collection_duplicates(client: TestClient, session: Session, member):
    setlist, (a, b, c) = _setup(session, member, "A", "B", "C")
    first = _add_set(session, setlist, "Set 1", 1, [a])
    current = _add_set(session, setlist, "Set 2", 2, [b])

    response = client.post(
        f"/api/setlists/{setlist.id}/duplicates",
        json={"song_ids": [str(a.id), str(b.id), str(c.id)], "exclude_set_id": str(current.id)},
    )
    assert response.status_code == 200
    data = response.json()
    assert set(data.keys()) == {str(first.id), str(current.id)}
    assert data[str(first.id)]["set_name"] == "Set 1"
    assert data[str(first.id)]["is_current_set"] is False
    assert [s["title"] for s in data[str(first.id)]["songs"]] == ["A"]
    assert data[str(current.id)]["is_current_set"] is True

def test_move_songs_between_sets(client: TestClient, session: Session, member, auth):
    setlist, (a, b, c, d) = _setup(session, member, "A", "B", "C", "D")
    source = _add_set(session, setlist, "Set 1", 1, [a, b, c])
    target = _add_set(session, setlist, "Set 2", 2, [d])

    response = client.post(
        f"/api/sets/{target.id}/move-songs",
        json={"song_ids": [str(a.id), str(c.id)], "from_set_id": str(source.id)},
        headers=auth(member),
    )
    assert response.status_code == 200
    assert [(s["title"], s["song_order"]) for s in response.json()["songs"]] == [("D", 1), ("A", 2), ("C", 3)]

    remaining = client.get(f"/api/sets/{source.id}").json()["songs"]
    assert [(s["title"], s["song_order"]) for s in remaining] == [("B", 1)]

def test_set_writes_forbidden_for_non_owner(client: TestClient, session: Session, member, editor, auth):
    setlist, (a, b) = _setup(session, member, "A", "B")
    one = _add_set(session, setlist, "One", 1, [a])
    two = _add_set(session, setlist, "Two", 2, [b])
    other = auth(editor)

    response = client.post("/api/sets", json={"name": "Intruder", "setlist_id": str(setlist.id)}, headers=other)
    assert response.status_code == 403
    assert client.put(f"/api/sets/{one.id}", json={"name": "Hijack"}, headers=other).status_code == 403
    assert client.delete(f"/api/sets/{one.id}", headers=other).status_code == 403
    response = client.put(
        f"/api/setlists/{setlist.id}/sets/order", json={"set_ids": [str(two.id), str(one.id)]}, headers=other
    )
    assert response.status_code == 403
    response = client.post(
        f"/api/sets/{two.id}/move-songs", json={"song_ids": [str(a.id)], "from_set_id": str(one.id)}, headers=other
    )
    assert response.status_code == 403

    # 何も変わっていない
    sets = client.get(f"/api/setlists/{setlist.id}/sets").json()
    assert [(s["name"], s["set_order"]) for s in sets] == [("One", 1), ("Two", 2)]
    assert [s["title"] for s in client.get(f"/api/sets/{one.id}").json()["songs"]] == ["A"]

def test_admin_can_edit_sets_of_any_setlist(client: TestClient, session: Session, member, admin, auth):
    setlist, _ = _setup(session, member)
    set_ = _add_set(session, setlist, "Set 1", 1)

    response = client.put(f"/api/sets/{set_.id}", json={"name": "Admin Edit"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["name"] == "Admin Edit"
    assert client.delete(f"/api/sets/{set_.id}", headers=auth(admin)).status_code == 204
