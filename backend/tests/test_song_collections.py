from fastapi.testclient import TestClient
from sqlmodel import Session, select
from models import Song, SongCollection, SongCollectionSong

def _song(session: Session, title: str) -> Song:
    song = Song(title=title, original_artist="Band")
    session.add(song)
    session.commit()
    session.refresh(song)
    return song

def test_create_collection(client: TestClient, session: Session, member, auth):
    song = _song(session, "Ballad")
    response = client.post(
        "/api/song-collections",
        json={"name": "Slow Songs", "is_public": True, "songs": [{"song_id": str(song.id)}]},
        headers=auth(member),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["is_public"] is True
    assert data["songs"][0]["title"] == "Ballad"
    assert data["songs"][0]["song_order"] == 1

def test_collection_messages(client: TestClient, session: Session, member, auth):
    response = client.post("/api/song-collections", json={}, headers=auth(member))
    assert response.status_code == 400
    assert response.json()["detail"] == "Collection name is required."

    assert client.post("/api/song-collections", json={"name": "Dup"}, headers=auth(member)).status_code == 201
    response = client.post("/api/song-collections", json={"name": "Dup"}, headers=auth(member))
    assert response.status_code == 409
    assert response.json()["detail"] == "A song collection with this name already exists."

    other = client.post("/api/song-collections", json={"name": "Other"}, headers=auth(member)).json()
    response = client.put(f"/api/song-collections/{other['id']}", json={"name": "Dup"}, headers=auth(member))
    assert response.status_code == 409
    assert response.json()["detail"] == "Another song collection with this name already exists."

    response = client.get("/api/song-collections/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Song collection not found"

def test_create_collection_requires_identity(client: TestClient):
    response = client.post("/api/song-collections", json={"name": "Anon"})
    assert response.status_code == 401

def test_admin_can_delete_any_collection(client: TestClient, session: Session, member, admin, auth):
    song = _song(session, "Tune")
    collection = SongCollection(name="Members", user_id=member.id)
    session.add(collection)
    session.commit()
    session.add(SongCollectionSong(song_collection_id=collection.id, song_id=song.id, song_order=1))
    session.commit()
    collection_id = collection.id

    response = client.delete(f"/api/song-collections/{collection_id}", headers=auth(admin))
    assert response.status_code == 204
    assert session.get(SongCollection, collection_id) is None
    rows = session.exec(
        select(SongCollectionSong).where(SongCollectionSong.song_collection_id == collection_id)
    ).all()
    assert rows == []
