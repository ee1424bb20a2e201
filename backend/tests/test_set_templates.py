from fastapi.testclient import TestClient
from sqlmodel import Session, select
from models import Song, SetTemplate, SetTemplateSong

def _songs(session: Session, *titles):
    songs = [Song(title=t, original_artist="Band") for t in titles]
    for s in songs:
        session.add(s)
    session.commit()
    for s in songs:
        session.refresh(s)
    return songs

def test_create_template_with_songs(client: TestClient, session: Session, member, auth):
    a, b = _songs(session, "A", "B")
    response = client.post(
        "/api/set-templates",
        json={"name": "Opener", "songs": [{"song_id": str(b.id), "song_order": 1}, {"song_id": str(a.id), "song_order": 2}]},
        headers=auth(member),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Opener"
    assert data["user_id"] == str(member.id)
    assert [s["title"] for s in data["songs"]] == ["B", "A"]

def test_create_template_requires_name(client: TestClient, member, auth):
    response = client.post("/api/set-templates", json={"name": ""}, headers=auth(member))
    assert response.status_code == 400
    assert response.json()["detail"] == "Template name is required."

def test_create_template_duplicate_name(client: TestClient, member, auth):
    assert client.post("/api/set-templates", json={"name": "Same"}, headers=auth(member)).status_code == 201
    response = client.post("/api/set-templates", json={"name": "Same"}, headers=auth(member))
    assert response.status_code == 409
    assert response.json()["detail"] == "A set template with this name already exists."

def test_same_template_name_for_different_owners(client: TestClient, member, editor, auth):
    assert client.post("/api/set-templates", json={"name": "Same"}, headers=auth(member)).status_code == 201
    assert client.post("/api/set-templates", json={"name": "Same"}, headers=auth(editor)).status_code == 201

def test_list_templates(client: TestClient, session: Session, member, editor, auth):
    session.add(SetTemplate(name="Zed", user_id=member.id))
    session.add(SetTemplate(name="Alpha", user_id=member.id))
    session.add(SetTemplate(name="Hidden", user_id=editor.id))
    session.add(SetTemplate(name="Shared", user_id=editor.id, is_public=True))
    session.commit()

    names = [t["name"] for t in client.get("/api/set-templates", headers=auth(member)).json()]
    assert names == ["Alpha", "Shared", "Zed"]
    assert [t["name"] for t in client.get("/api/set-templates").json()] == ["Shared"]

def test_get_template_not_found(client: TestClient):
    response = client.get("/api/set-templates/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["detail"] == "Set template not found"

def test_update_template(client: TestClient, session: Session, member, auth):
    a, b = _songs(session, "A", "B")
    template = SetTemplate(name="Old", user_id=member.id)
    session.add(template)
    session.commit()
    session.add(SetTemplateSong(set_template_id=template.id, song_id=a.id, song_order=1))
    session.commit()

    response = client.put(
        f"/api/set-templates/{template.id}",
        json={"name": "New", "songs": [{"song_id": str(b.id)}]},
        headers=auth(member),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "New"
    assert [s["title"] for s in data["songs"]] == ["B"]

def test_update_template_duplicate_name(client: TestClient, session: Session, member, auth):
    session.add(SetTemplate(name="Taken", user_id=member.id))
    template = SetTemplate(name="Mine", user_id=member.id)
    session.add(template)
    session.commit()

    response = client.put(f"/api/set-templates/{template.id}", json={"name": "Taken"}, headers=auth(member))
    assert response.status_code == 409
    assert response.json()["detail"] == "Another set template with this name already exists."

def test_update_template_forbidden_for_non_owner(client: TestClient, session: Session, member, editor, auth):
    template = SetTemplate(name="Mine", user_id=member.id)
    session.add(template)
    session.commit()

    response = client.put(f"/api/set-templates/{template.id}", json={"name": "Theirs"}, headers=auth(editor))
    assert response.status_code == 403

def test_delete_template(client: TestClient, session: Session, member, auth):
    (a,) = _songs(session, "A")
    template = SetTemplate(name="Doomed", user_id=member.id)
    session.add(template)
    session.commit()
    session.add(SetTemplateSong(set_template_id=template.id, song_id=a.id, song_order=1))
    session.commit()
    template_id = template.id

    response = client.delete(f"/api/set-templates/{template_id}", headers=auth(member))
    assert response.status_code == 204
    assert session.get(SetTemplate, template_id) is None
    assert session.exec(select(SetTemplateSong).where(SetTemplateSong.set_template_id == template_id)).all() == []
