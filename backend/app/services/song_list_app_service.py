import uuid
from typing import List, Optional, Dict, Any
from sqlmodel import Session, SQLModel

from domain.models.user import User
from domain.models.song_list import SetTemplate, SongCollection
from domain.exceptions import ValidationError, NotFoundError, ConflictError
from domain.services.access import ensure_can_manage
from domain.services.set_duplicates import order_song_refs
from infra.repositories.song_list_repository import (
    SongListRepository,
    SetTemplateRepository,
    SongCollectionRepository,
)
from api.schemas.song_lists import SongListCreate, SongListUpdate
from utils.logger import get_logger

logger = get_logger(__name__)

class NamedSongListAppService:
    """
    セットテンプレートとソングコレクションの共通処理。
    サブクラスがリポジトリ・モデル・エラーメッセージを指定する。
    """
    repository_class = SongListRepository
    model = SQLModel
    noun = "song list"
    name_required = "Name is required."
    not_found = "Song list not found"
    duplicate_name = "A song list with this name already exists."
    duplicate_name_other = "Another song list with this name already exists."

    def __init__(self, session: Session):
        self.session = session
        self.repository = self.repository_class(session)

    def get_all(self, user: Optional[User] = None) -> List[SQLModel]:
        return self.repository.find_all(user.id if user else None)

    def _get(self, list_id: uuid.UUID) -> SQLModel:
        song_list = self.repository.get_by_id(list_id)
        if not song_list:
            raise NotFoundError(self.not_found)
        return song_list

    def get_by_id(self, list_id: uuid.UUID) -> Dict[str, Any]:
        song_list = self._get(list_id)
        data = song_list.model_dump()
        songs = []
        for item, song in self.repository.get_songs(list_id):
            song_data = song.model_dump()
            song_data["song_order"] = item.song_order
            songs.append(song_data)
        data["songs"] = songs
        return data

    def create(self, data: SongListCreate, user: User) -> Dict[str, Any]:
        name = (data.name or "").strip()
        if not name:
            raise ValidationError(self.name_required)
        if self.repository.find_by_name(user.id, name):
            raise ConflictError(self.duplicate_name)

        try:
            song_list = self.repository.add(self.model(name=name, is_public=data.is_public, user_id=user.id))
            self.repository.add_songs(song_list.id, order_song_refs(data.songs))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"{self.noun} created: {name} ({song_list.id}) with {len(data.songs)} songs")
        return self.get_by_id(song_list.id)

    def update(self, list_id: uuid.UUID, data: SongListUpdate, user: User) -> Dict[str, Any]:
        song_list = self._get(list_id)
        ensure_can_manage(user, song_list.user_id, self.noun)

        name = (data.name or "").strip()
        if not name:
            raise ValidationError(self.name_required)
        if self.repository.find_by_name(song_list.user_id, name, exclude_id=list_id):
            raise ConflictError(self.duplicate_name_other)

        try:
            song_list.name = name
            if data.is_public is not None:
                song_list.is_public = data.is_public
            self.repository.add(song_list)
            if data.songs is not None:
                self.repository.clear_songs(list_id)
                self.repository.add_songs(list_id, order_song_refs(data.songs))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get_by_id(list_id)

    def delete(self, list_id: uuid.UUID, user: User):
        song_list = self._get(list_id)
        ensure_can_manage(user, song_list.user_id, self.noun)
        try:
            self.repository.delete(song_list)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"{self.noun} deleted: {list_id}")


class SetTemplateAppService(NamedSongListAppService):
    repository_class = SetTemplateRepository
    model = SetTemplate
    noun = "set template"
    name_required = "Template name is required."
    not_found = "Set template not found"
    duplicate_name = "A set template with this name already exists."
    duplicate_name_other = "Another set template with this name already exists."


class SongCollectionAppService(NamedSongListAppService):
    repository_class = SongCollectionRepository
    model = SongCollection
    noun = "song collection"
    name_required = "Collection name is required."
    not_found = "Song collection not found"
    duplicate_name = "A song collection with this name already exists."
    duplicate_name_other = "Another song collection with this name already exists."
