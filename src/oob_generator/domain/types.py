"""Common types and enums."""

from __future__ import annotations

from enum import Enum

DIE_SIDES = 10


class Faction(str, Enum):
    NATO = "NATO"
    WP = "WP"


class HexType(str, Enum):
    LAND = "land"
    SEA = "sea"


class Tasking(str, Enum):
    """Tasking names that carry rules of their own."""

    CAP = "CAP"
    SEAD = "SEAD"
    BOMBING = "Bombing"
    CLOSE_ESCORT = "Close Escort"
    ESCORT_JAMMING = "Escort Jamming"
    RECON = "Recon"
    DEEP_STRIKE = "Deep Strike"
    NAVAL_STRIKE = "Naval Strike"
    MARITIME_PATROL = "Maritime Patrol"
    TACTICAL_RECON = "Tactical Recon"
    CSAR = "CSAR"
    RESCUE_SUPPORT = "Rescue Support"
    STANDOFF_JAMMING = "Standoff Jamming"


# Flight-level ordnance labels for flights that never roll a loadout.
AIR_TO_AIR = "Air-to-Air"
AIR_TO_AIR_ONLY = "Air-to-Air Only"
AIR_TO_GROUND = "Air-to-Ground"
JAMMING = "Jamming"
MARITIME = "Maritime"
NO_ORDNANCE = "None"
