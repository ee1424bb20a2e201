import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from domain.models.song import Song
from domain.models.setlist import SetlistSet


def order_song_refs(refs: Sequence[Any]) -> List[Tuple[uuid.UUID, int]]:
    """
    リクエストの楽曲参照 (song_id, song_order?) を (song_id, 1..n) に正規化する。
    song_order が無いものは配列の位置を使い、同じ順位なら配列順を保つ。
    """
    indexed = []
    for position, ref in enumerate(refs, start=1):
        order = ref.song_order if ref.song_order is not None else position
        indexed.append((order, position, ref.song_id))
    indexed.sort()
    return [(song_id, i) for i, (_, _, song_id) in enumerate(indexed, start=1)]


def build_duplicate_entries(placements: List[Tuple[Song, SetlistSet]]) -> List[Dict[str, Any]]:
    """DUPLICATES_FOUND のペイロード用に (楽曲, 所属セット) の組を整形する"""
    return [
        {
            "song": {"id": song.id, "title": song.title, "original_artist": song.original_artist},
            "set": {"id": set_.id, "name": set_.name},
        }
        for song, set_ in placements
    ]


def group_duplicates_by_set(
    placements: List[Tuple[Song, SetlistSet]],
    current_set_id: Optional[uuid.UUID] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    コレクション/テンプレート取り込み時の重複チェック結果を set_id ごとにまとめる。
    { set_id: {"set_name", "is_current_set", "songs": [...]} }
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for song, set_ in placements:
        entry = grouped.setdefault(str(set_.id), {
            "set_name": set_.name,
            "is_current_set": current_set_id is not None and set_.id == current_set_id,
            "songs": [],
        })
        if any(s["id"] == song.id for s in entry["songs"]):
            continue
        entry["songs"].append({
            "id": song.id,
            "title": song.title,
            "original_artist": song.original_artist,
        })
    return grouped
