"""
Presence tracker: which connection is in which room, for this process only.

Counts are per connection, not per person: one user on two tabs counts twice.
Transitions return the events they imply; the broker delivers them.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from app.chat import events
from app.chat.events import Emit, Target


@dataclass
class PresenceEntry:
    connection_id: str
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    room: Optional[str] = None
    typing: bool = False


class PresenceTracker:
    def __init__(self) -> None:
        self._entries: Dict[str, PresenceEntry] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def get(self, connection_id: str) -> Optional[PresenceEntry]:
        return self._entries.get(connection_id)

    def online_count(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    def count_event(self, room: str) -> Emit:
        return Emit(events.ONLINE_COUNT, {"count": self.online_count(room)}, Target.ROOM, room)

    def join(
        self,
        connection_id: str,
        *,
        user_id: str,
        user_name: str,
        user_avatar: Optional[str],
        room: str,
    ) -> List[Emit]:
        """Put the connection in `room`, leaving its previous room first if different."""
        emits: List[Emit] = []
        prev = self._entries.get(connection_id)
        if prev is not None and prev.room and prev.room != room:
            emits.extend(self._vacate(prev))
            emits.append(self.count_event(prev.room))

        self._entries[connection_id] = PresenceEntry(
            connection_id=connection_id,
            user_id=user_id,
            user_name=user_name,
            user_avatar=user_avatar,
            room=room,
        )
        self._rooms.setdefault(room, set()).add(connection_id)

        emits.append(Emit(events.USER_JOINED, {"userId": user_id, "userName": user_name}, Target.ROOM, room))
        emits.append(self.count_event(room))
        return emits

    def leave(self, connection_id: str) -> Tuple[Optional[PresenceEntry], List[Emit]]:
        """Drop the connection entirely. The recount is left to the caller so it can settle first."""
        entry = self._entries.pop(connection_id, None)
        if entry is None or not entry.room:
            return entry, []
        return entry, self._vacate(entry)

    def set_typing(self, connection_id: str, typing: bool) -> Optional[PresenceEntry]:
        entry = self._entries.get(connection_id)
        if entry is not None:
            entry.typing = typing
        return entry

    def reset(self) -> None:
        self._entries.clear()
        self._rooms.clear()

    def _vacate(self, entry: PresenceEntry) -> List[Emit]:
        room = entry.room
        members = self._rooms.get(room)
        if members is not None:
            members.discard(entry.connection_id)
            if not members:
                del self._rooms[room]
        emits: List[Emit] = []
        if entry.typing:
            emits.append(Emit(events.USER_STOP_TYPING, {"userId": entry.user_id}, Target.ROOM, room))
            entry.typing = False
        emits.append(Emit(events.USER_LEFT, {"userId": entry.user_id, "userName": entry.user_name}, Target.ROOM, room))
        return emits


presence_tracker = PresenceTracker()
