import uuid
from typing import List, Optional, Dict, Any, Tuple
from sqlmodel import Session

from domain.models.setlist import Setlist, SetlistSet
from domain.models.user import User
from domain.exceptions import ValidationError, NotFoundError, DuplicateSongsError
from domain.services.access import ensure_can_manage
from domain.services.set_duplicates import (
    order_song_refs,
    build_duplicate_entries,
    group_duplicates_by_set,
)
from infra.repositories.setlist_repository import SetlistRepository
from infra.repositories.set_repository import SetRepository
from api.schemas.setlists import SetCreate, SetUpdate
from utils.logger import get_logger

logger = get_logger(__name__)

class SetAppService:
    def __init__(self, session: Session):
        self.session = session
        self.repository = SetRepository(session)
        self.setlist_repository = SetlistRepository(session)

    def _get(self, set_id: uuid.UUID) -> SetlistSet:
        set_ = self.repository.get_by_id(set_id)
        if not set_:
            raise NotFoundError("Set not found")
        return set_

    def _ensure_setlist(self, setlist_id: uuid.UUID) -> Setlist:
        setlist = self.setlist_repository.get_by_id(setlist_id)
        if not setlist:
            raise NotFoundError("Setlist not found")
        return setlist

    def _ensure_can_edit(self, setlist_id: uuid.UUID, user: User) -> Setlist:
        """セットの編集は親セットリストの所有者か管理者のみ"""
        setlist = self._ensure_setlist(setlist_id)
        ensure_can_manage(user, setlist.user_id, "setlist")
        return setlist

    def get_sets(self, setlist_id: uuid.UUID) -> List[SetlistSet]:
        self._ensure_setlist(setlist_id)
        return self.repository.find_by_setlist(setlist_id)

    def get_set_by_id(self, set_id: uuid.UUID) -> Dict[str, Any]:
        set_ = self._get(set_id)
        setlist = self.setlist_repository.get_by_id(set_.setlist_id)

        data = set_.model_dump()
        data["setlist_name"] = setlist.name if setlist else None
        data["songs"] = [
            {
                "id": song.id,
                "original_artist": song.original_artist,
                "title": song.title,
                "key_signature": song.key_signature,
                "lyrics": song.lyrics,
                "song_order": set_song.song_order,
            }
            for set_song, song in self.repository.get_songs(set_id)
        ]
        return data

    def _check_duplicates(
        self,
        setlist_id: uuid.UUID,
        song_ids: List[uuid.UUID],
        exclude_set_id: Optional[uuid.UUID] = None,
    ):
        placements = self.repository.find_song_placements(setlist_id, song_ids, exclude_set_id)
        if placements:
            duplicates = build_duplicate_entries(placements)
            logger.info(f"Duplicate songs detected in setlist {setlist_id}: {len(duplicates)}")
            raise DuplicateSongsError(duplicates)

    def create_set_with_songs(
        self, setlist_id: uuid.UUID, name: str, songs: List[Any]
    ) -> Dict[str, Any]:
        """
        セットを作成する。songs は SongRef か song_id の配列。
        同じセットリストの他セットに既に含まれる楽曲があれば DuplicateSongsError。
        """
        self._ensure_setlist(setlist_id)
        if songs and isinstance(songs[0], uuid.UUID):
            ordered: List[Tuple[uuid.UUID, int]] = [(song_id, i) for i, song_id in enumerate(songs, start=1)]
        else:
            ordered = order_song_refs(songs)

        self._check_duplicates(setlist_id, [song_id for song_id, _ in ordered])

        try:
            new_set = self.repository.add(SetlistSet(
                name=name,
                setlist_id=setlist_id,
                set_order=self.repository.max_set_order(setlist_id) + 1,
            ))
            self.repository.add_songs(new_set.id, ordered)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Set created: {name} ({new_set.id}) in setlist {setlist_id} with {len(ordered)} songs")
        return self.get_set_by_id(new_set.id)

    def create_set(self, data: SetCreate, user: User) -> Dict[str, Any]:
        name = (data.name or "").strip()
        if not name or not data.setlist_id:
            raise ValidationError("Set name and setlist_id are required.")
        self._ensure_can_edit(data.setlist_id, user)
        return self.create_set_with_songs(data.setlist_id, name, data.songs)

    def update_set(self, set_id: uuid.UUID, data: SetUpdate, user: User) -> Dict[str, Any]:
        set_ = self._get(set_id)
        self._ensure_can_edit(set_.setlist_id, user)
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("Set name is required.")

        ordered = None
        if data.songs is not None:
            ordered = order_song_refs(data.songs)
            self._check_duplicates(set_.setlist_id, [song_id for song_id, _ in ordered], exclude_set_id=set_id)

        try:
            set_.name = name
            self.repository.add(set_)
            if ordered is not None:
                self.repository.clear_songs(set_id)
                self.repository.add_songs(set_id, ordered)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get_set_by_id(set_id)

    def delete_set(self, set_id: uuid.UUID, user: User):
        set_ = self._get(set_id)
        self._ensure_can_edit(set_.setlist_id, user)
        setlist_id = set_.setlist_id
        try:
            self.repository.delete(set_)
            self.repository.renumber_sets(setlist_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"Set deleted: {set_id} (setlist {setlist_id})")

    def reorder_sets(self, setlist_id: uuid.UUID, set_ids: List[uuid.UUID], user: User) -> List[SetlistSet]:
        self._ensure_can_edit(setlist_id, user)
        sets = {s.id: s for s in self.repository.find_by_setlist(setlist_id)}
        if len(set_ids) != len(sets) or set(set_ids) != set(sets):
            raise ValidationError("set_ids must list every set of the setlist exactly once.")

        try:
            for order, set_id in enumerate(set_ids, start=1):
                sets[set_id].set_order = order
                self.repository.add(sets[set_id])
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.repository.find_by_setlist(setlist_id)

    def check_collection_duplicates(
        self,
        setlist_id: uuid.UUID,
        song_ids: List[uuid.UUID],
        exclude_set_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """
        取り込み候補の楽曲がセットリスト内のどのセットに既にあるかを返す。
        exclude_set_id は編集中のセットで、結果では is_current_set として区別する。
        """
        self._ensure_setlist(setlist_id)
        placements = self.repository.find_song_placements(setlist_id, song_ids)
        return group_duplicates_by_set(placements, exclude_set_id)

    def move_songs_between_sets(
        self, song_ids: List[uuid.UUID], from_set_id: uuid.UUID, to_set_id: uuid.UUID, user: User
    ) -> Dict[str, Any]:
        from_set = self._get(from_set_id)
        to_set = self._get(to_set_id)
        if from_set.setlist_id != to_set.setlist_id:
            raise ValidationError("Songs can only be moved between sets of the same setlist.")
        self._ensure_can_edit(to_set.setlist_id, user)
        if from_set_id == to_set_id:
            return self.get_set_by_id(to_set_id)

        moving = set(song_ids)
        try:
            moved = []
            for row in self.repository.get_set_songs(from_set_id):
                if row.song_id in moving:
                    moved.append(row.song_id)
                    self.session.delete(row)
            self.session.flush()

            target_rows = self.repository.get_set_songs(to_set_id)
            existing = {row.song_id for row in target_rows}
            start = max((row.song_order for row in target_rows), default=0)
            to_add = [song_id for song_id in moved if song_id not in existing]
            self.repository.add_songs(to_set_id, [(song_id, start + i) for i, song_id in enumerate(to_add, start=1)])

            self.repository.renumber_songs(from_set_id)
            self.repository.renumber_songs(to_set_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Moved {len(moved)} songs from set {from_set_id} to {to_set_id}")
        return self.get_set_by_id(to_set_id)
