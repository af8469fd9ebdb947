# cell states and structural tile categories used across the level package

from enum import Enum

# the two cell states a level tile can hold
AIR = 0  # open space the player can move through
WALL = 1  # blocked, solid ground

# character used for each state in the level text dump
STATE_CHARS = {AIR: '0', WALL: '1'}
START_CHAR = '@'
END_CHAR = 'X'


class TileCategory(Enum):
    """Structural pattern a tile falls into given its four cardinal neighbors."""
    # wall tiles
    LONER = 'loner'  # no blocked neighbors at all
    END = 'end'  # exactly one blocked neighbor
    PLATFORM = 'platform'  # blocked above and below
    SPIRE = 'spire'  # blocked left and right
    SOLID = 'solid'  # fully surrounded

    # air tiles
    EMPTY = 'empty'  # open on every side
    PIT = 'pit'  # walls above and below
    TUNNEL = 'tunnel'  # walls left and right
    NOOK = 'nook'  # three walls around
    HOLE = 'hole'  # enclosed on every side

