"""Favourites file handling.

The favourites file is a small line-oriented text format:

    # comment
    BBC One=1
    BBC News=231

Lines that do not parse are skipped rather than treated as fatal.
"""

import logging
import re
from pathlib import Path

from models.types import Favourite
from models.utils import normalise_channel_number

logger = logging.getLogger('bravia.favourites')

DEFAULT_MAX_FAVOURITES = 30

STARTER_FAVOURITES = """# Format: Name=Number
BBC One=1
BBC Two=2
ITV1=3
Channel 4=4
Channel 5=5
BBC News=231
ITV2=6
ITV3=10
Film4=14
Dave=19
"""

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def parse_favourites(text: str, max_favourites: int = DEFAULT_MAX_FAVOURITES) -> list[Favourite]:
    """Parse favourites text into an ordered list.

    Args:
        text: File contents
        max_favourites: Stop after collecting this many favourites

    Returns:
        Favourites in file order, numbers normalised
    """
    favourites = []
    if max_favourites <= 0:
        return favourites

    for raw_line in _LINE_BREAK.split(text):
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue

        name, sep, number = line.partition('=')
        if not sep:
            continue

        name = name.strip()
        number = normalise_channel_number(number)
        if not name or number is None:
            continue

        favourites.append(Favourite(name=name, number=number))
        if len(favourites) >= max_favourites:
            break

    return favourites


def load_favourites(path: Path | str,
                    max_favourites: int = DEFAULT_MAX_FAVOURITES) -> tuple[list[Favourite], str | None]:
    """Read and parse a favourites file.

    Never raises: read failures are reported through the second element.

    Returns:
        Tuple of (favourites, error message or None)
    """
    try:
        text = Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        return [], f"Failed to load favourites from {path}: {e}"

    return parse_favourites(text, max_favourites), None


def ensure_favourites_file(path: Path | str) -> bool:
    """Create the favourites file with starter content if it doesn't exist.

    Returns:
        True if a new file was written, False otherwise
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            return False
        path.write_text(STARTER_FAVOURITES, encoding='utf-8')
    except OSError as e:
        logger.error("Failed to ensure favourites file %s: %s", path, e)
        return False

    logger.info("Created starter favourites file at %s", path)
    return True
