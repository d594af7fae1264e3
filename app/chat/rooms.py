"""
Room registry. Community rooms are fixed at deploy time: one per city with dengue hotspots, plus general.
"""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    region: str


ROOMS: Tuple[Room, ...] = (
    Room("patna", "Patna", "Bihar"),
    Room("delhi", "Delhi", "Delhi NCR"),
    Room("mumbai", "Mumbai", "Maharashtra"),
    Room("chennai", "Chennai", "Tamil Nadu"),
    Room("kolkata", "Kolkata", "West Bengal"),
    Room("bangalore", "Bengaluru", "Karnataka"),
    Room("hyderabad", "Hyderabad", "Telangana"),
    Room("lucknow", "Lucknow", "Uttar Pradesh"),
    Room("ahmedabad", "Ahmedabad", "Gujarat"),
    Room("pune", "Pune", "Maharashtra"),
    Room("jaipur", "Jaipur", "Rajasthan"),
    Room("coimbatore", "Coimbatore", "Tamil Nadu"),
    Room("general", "General", "All India"),
)

_BY_ID = {room.id: room for room in ROOMS}


def normalize_room_id(room_id: Optional[str]) -> str:
    return room_id.strip().lower() if isinstance(room_id, str) else ""


def list_rooms() -> Tuple[Room, ...]:
    return ROOMS


def get_room(room_id: Optional[str]) -> Optional[Room]:
    return _BY_ID.get(normalize_room_id(room_id))


def is_valid_room(room_id: Optional[str]) -> bool:
    return get_room(room_id) is not None
