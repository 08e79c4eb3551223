from player_console.utils.slug import player_id_from_name
from player_console.utils.time_format import format_time_remaining, format_timestamp

__all__ = [
    "player_id_from_name",
    "format_time_remaining",
    "format_timestamp",
]
