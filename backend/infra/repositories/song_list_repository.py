import uuid
from typing import List, Optional, Tuple, Type
from sqlmodel import Session, SQLModel, select, or_
from datetime import datetime

from domain.models.song import Song
from domain.models.song_list import SetTemplate, SetTemplateSong, SongCollection, SongCollectionSong
from utils.retry import with_retry

class SongListRepository:
    """
    名前付きの楽曲リスト (セットテンプレート / ソングコレクション) 共通のリポジトリ。
    サブクラスで親テーブル・中間テーブル・外部キー列を指定する。
    """
    model: Type[SQLModel]
    item_model: Type[SQLModel]
    parent_column: str

    def __init__(self, session: Session):
        self.session = session

    @property
    def _parent_fk(self):
        return getattr(self.item_model, self.parent_column)

    def find_all(self, user_id: Optional[uuid.UUID] = None) -> List[SQLModel]:
        query = select(self.model)
        if user_id:
            query = query.where(or_(self.model.user_id == user_id, self.model.is_public == True))  # noqa: E712
        else:
            query = query.where(self.model.is_public == True)  # noqa: E712
        query = query.order_by(self.model.name)
        return with_retry(lambda: self.session.exec(query).all())

    def get_by_id(self, list_id: uuid.UUID) -> Optional[SQLModel]:
        return self.session.get(self.model, list_id)

    def find_by_name(
        self, user_id: uuid.UUID, name: str, exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[SQLModel]:
        query = select(self.model).where(self.model.user_id == user_id).where(self.model.name == name)
        if exclude_id:
            query = query.where(self.model.id != exclude_id)
        return self.session.exec(query).first()

    def add(self, song_list: SQLModel) -> SQLModel:
        song_list.updated_at = datetime.now()
        self.session.add(song_list)
        self.session.flush()
        return song_list

    def get_songs(self, list_id: uuid.UUID) -> List[Tuple[SQLModel, Song]]:
        query = (
            select(self.item_model, Song)
            .where(self._parent_fk == list_id)
            .where(self.item_model.song_id == Song.id)
            .order_by(self.item_model.song_order)
        )
        return with_retry(lambda: self.session.exec(query).all())

    def clear_songs(self, list_id: uuid.UUID):
        for row in self.session.exec(select(self.item_model).where(self._parent_fk == list_id)).all():
            self.session.delete(row)
        self.session.flush()

    def add_songs(self, list_id: uuid.UUID, songs: List[Tuple[uuid.UUID, int]]):
        for song_id, song_order in songs:
            self.session.add(self.item_model(**{
                self.parent_column: list_id,
                "song_id": song_id,
                "song_order": song_order,
            }))
        self.session.flush()

    def delete(self, song_list: SQLModel):
        self.clear_songs(song_list.id)
        self.session.delete(song_list)
        self.session.flush()


class SetTemplateRepository(SongListRepository):
    model = SetTemplate
    item_model = SetTemplateSong
    parent_column = "set_template_id"


class SongCollectionRepository(SongListRepository):
    model = SongCollection
    item_model = SongCollectionSong
    parent_column = "song_collection_id"
