# Import moved models
from domain.models.user import User
from domain.models.song import Song
from domain.models.setlist import Setlist, SetlistSet, SetSong
from domain.models.song_list import SetTemplate, SetTemplateSong, SongCollection, SongCollectionSong
from domain.models.performance import PerformanceSession, SessionParticipant, LeadershipRequest
