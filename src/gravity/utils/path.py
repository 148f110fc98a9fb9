import os
from pathlib import Path
from typing import Optional, Union


def expand_path(path: Union[str, Path]) -> Path:
    """Expand ``~`` and environment variable references in a path."""
    return Path(os.path.expandvars(os.path.expanduser(str(path))))


def collapse_home(path: Path, home: Optional[Path] = None) -> str:
    """Render a path relative to the home directory as ``~/...`` for display."""
    if not home:
        home = Path.home()
    try:
        return str(Path('~') / path.relative_to(home))
    except ValueError:
        # Outside of home, keep the absolute path
        return str(path)
