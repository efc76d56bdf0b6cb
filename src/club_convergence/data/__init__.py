"""Data module - Convergence club containers"""

from .clubs import Club, ClubCollection, ClubMetadata, DivergentUnits, club_label

__all__ = [
    "Club",
    "ClubCollection",
    "ClubMetadata",
    "DivergentUnits",
    "club_label",
]
