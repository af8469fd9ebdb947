"""
Level text export.

Layout (one item per line):
    H rows of W characters: '0' air, '1' wall, '@' start, 'X' end
    author
    title
    four numeric fields
    NONE
    one numeric field
    (blank)
    (blank)
    0
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from spelunkgen.config import LEVEL_FILE_NAME, get_logger
from spelunkgen.level.tile import END_CHAR, START_CHAR, STATE_CHARS
from spelunkgen.level.utils import Position

logger = get_logger(__name__)


@dataclass
class LevelMetadata:
    author: str = "spelunkgen"
    title: str = "generated"
    values: Tuple[int, int, int, int] = (0, 0, 0, 0)
    extra: int = 0

    def lines(self):
        out = [self.author, self.title]
        out.extend(str(v) for v in self.values)
        out.append("NONE")
        out.append(str(self.extra))
        out.extend(["", ""])
        out.append("0")
        return out


def render_level(grid: np.ndarray, start: Optional[Position], end: Optional[Position],
                 metadata: Optional[LevelMetadata] = None) -> str:
    """Render a grid plus its endpoints and metadata in the level text format."""
    grid = np.asarray(grid)
    height, width = grid.shape
    metadata = metadata or LevelMetadata()
    if len(metadata.values) != 4:
        raise ValueError("LevelMetadata.values must hold exactly four numbers")

    rows = []
    for y in range(height):
        chars = []
        for x in range(width):
            if (x, y) == start:
                chars.append(START_CHAR)
            elif (x, y) == end:
                chars.append(END_CHAR)
            else:
                chars.append(STATE_CHARS[int(grid[y, x])])
        rows.append("".join(chars))

    return "\n".join(rows + metadata.lines()) + "\n"


def save_level(text: str, path=None) -> Path:
    """Write rendered level text; defaults to generated.lvl in the working directory."""
    path = Path(path) if path is not None else Path.cwd() / LEVEL_FILE_NAME
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)
    logger.info(f"Level saved to {path}")
    return path
