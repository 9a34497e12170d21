"""Package sources: the AUR and pacman's local and sync databases."""

from .aur import AurClient
from .pacman import PacmanDatabase, read_database_file

__all__ = [
    "AurClient",
    "PacmanDatabase",
    "read_database_file",
]
