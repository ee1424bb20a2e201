import uuid
from typing import List, Optional, Dict, Any, Tuple
from sqlmodel import Session

from domain.models.setlist import Setlist, SetlistSet
from domain.models.user import User
from domain.exceptions import ValidationError, NotFoundError, ConflictError, DuplicateSongsError
from domain.services.access import ensure_can_manage
from domain.services.set_duplicates import order_song_refs, build_duplicate_entries
from infra.repositories.setlist_repository import SetlistRepository
from infra.repositories.set_repository import SetRepository
from infra.repositories.song_repository import SongRepository
from infra.repositories.song_list_repository import SetTemplateRepository, SongCollectionRepository
from api.schemas.setlists import SetlistCreate, SetlistUpdate, SetFromSource
from app.services.set_app_service import SetAppService
from utils.pdf import build_setlist_pdf, pdf_filename
from utils.logger import get_logger

logger = get_logger(__name__)

class SetlistAppService:
    def __init__(self, session: Session):
        self.session = session
        self.repository = SetlistRepository(session)
        self.set_repository = SetRepository(session)
        self.song_repository = SongRepository(session)

    def get_all_setlists(self, user: Optional[User] = None) -> List[Setlist]:
        return self.repository.find_all(user.id if user else None)

    def _get(self, setlist_id: uuid.UUID) -> Setlist:
        setlist = self.repository.get_by_id(setlist_id)
        if not setlist:
            raise NotFoundError("Setlist not found")
        return setlist

    def get_setlist_by_id(self, setlist_id: uuid.UUID) -> Dict[str, Any]:
        setlist = self._get(setlist_id)
        counts = self.repository.get_song_counts(setlist_id)

        data = setlist.model_dump()
        data["sets"] = [
            {
                "id": s.id,
                "name": s.name,
                "set_order": s.set_order,
                "created_at": s.created_at,
                "song_count": counts.get(s.id, 0),
            }
            for s in self.repository.get_sets(setlist_id)
        ]
        return data

    def _plan_sets(self, data: SetlistCreate) -> List[Tuple[SetlistSet, List[Tuple[uuid.UUID, int]]]]:
        """
        作成するセットと曲順を組み立てる。
        同じ曲が複数のセットに入っていれば、何も書き込む前に DuplicateSongsError。
        """
        planned = []
        first_placement: Dict[uuid.UUID, SetlistSet] = {}
        placements = []
        for order, set_data in enumerate(data.sets, start=1):
            set_name = (set_data.name or "").strip() or f"Set {order}"
            new_set = SetlistSet(name=set_name, set_order=order)
            ordered = order_song_refs(set_data.songs)
            for song_id, _ in ordered:
                placed_in = first_placement.setdefault(song_id, new_set)
                if placed_in is not new_set:
                    song = self.song_repository.get_by_id(song_id)
                    if song:
                        placements.append((song, placed_in))
            planned.append((new_set, ordered))

        if placements:
            raise DuplicateSongsError(build_duplicate_entries(placements))
        return planned

    def create_setlist(self, data: SetlistCreate, user: User) -> Dict[str, Any]:
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("Setlist name is required.")
        if self.repository.find_by_name(user.id, name):
            raise ConflictError("A setlist with this name already exists.")

        new_sets = self._plan_sets(data)

        # セットリスト本体とセット・楽曲を1トランザクションで作成
        try:
            setlist = self.repository.add(Setlist(name=name, is_public=data.is_public, user_id=user.id))
            for new_set, ordered in new_sets:
                new_set.setlist_id = setlist.id
                self.set_repository.add(new_set)
                self.set_repository.add_songs(new_set.id, ordered)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.refresh(setlist)
        logger.info(f"Setlist created: {setlist.name} ({setlist.id}) with {len(data.sets)} sets")
        return self.get_setlist_by_id(setlist.id)

    def update_setlist(self, setlist_id: uuid.UUID, data: SetlistUpdate, user: User) -> Setlist:
        setlist = self._get(setlist_id)
        ensure_can_manage(user, setlist.user_id, "setlist")

        if data.name is not None:
            name = data.name.strip()
            if not name:
                raise ValidationError("Setlist name is required.")
            if self.repository.find_by_name(setlist.user_id, name, exclude_id=setlist_id):
                raise ConflictError("Another setlist with this name already exists.")
            setlist.name = name
        if data.is_public is not None:
            setlist.is_public = data.is_public

        return self.repository.update(setlist)

    def delete_setlist(self, setlist_id: uuid.UUID, user: User):
        setlist = self._get(setlist_id)
        ensure_can_manage(user, setlist.user_id, "setlist")
        try:
            self.repository.delete_cascade(setlist)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"Setlist deleted: {setlist_id}")

    def create_set_from_source(self, setlist_id: uuid.UUID, data: SetFromSource, user: User) -> Dict[str, Any]:
        """セットテンプレート / ソングコレクションの楽曲から新しいセットを作る"""
        setlist = self._get(setlist_id)
        ensure_can_manage(user, setlist.user_id, "setlist")

        if data.source_type == "template":
            source_repo, missing = SetTemplateRepository(self.session), "Set template not found"
        else:
            source_repo, missing = SongCollectionRepository(self.session), "Song collection not found"

        source = source_repo.get_by_id(data.source_id)
        if not source:
            raise NotFoundError(missing)

        song_ids = [song.id for _, song in source_repo.get_songs(source.id)]
        name = (data.name or "").strip() or source.name
        return SetAppService(self.session).create_set_with_songs(setlist.id, name, song_ids)

    def get_setlist_for_export(self, setlist_id: uuid.UUID) -> Dict[str, Any]:
        setlist = self._get(setlist_id)
        sets = []
        for s in self.repository.get_sets(setlist_id):
            songs = []
            for set_song, song in self.set_repository.get_songs(s.id):
                song_data = song.model_dump()
                song_data["song_order"] = set_song.song_order
                songs.append(song_data)
            sets.append({"id": s.id, "name": s.name, "set_order": s.set_order, "songs": songs})

        data = setlist.model_dump()
        data["sets"] = sets
        return data

    def export_pdf(self, setlist_id: uuid.UUID) -> Tuple[str, bytes]:
        setlist = self.get_setlist_for_export(setlist_id)
        content = build_setlist_pdf(setlist)
        logger.info(f"PDF exported for setlist {setlist_id} ({len(content)} bytes)")
        return pdf_filename(setlist["name"]), content
