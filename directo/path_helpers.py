# directo/path_helpers.py
"""
Locations of the resource files shipped with the SDK.

Provides:
- Dir: resource category constants ('config', 'xsd')
- ResourcePaths: frozen, cached resolution of the resource root
- get_dir() / get_path(): category lookups that fail fast on typos

The resource root is ResourcePaths.init(root) if given, else the
DIRECTO_RESOURCES environment variable, else the package's resources/.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

CategoryType = Literal['config', 'xsd']

RESOURCES_ENV_VAR = 'DIRECTO_RESOURCES'
BUNDLED_RESOURCES = Path(__file__).resolve().parent / 'resources'


class Dir:
    """Resource categories. Use Dir.XSD rather than the bare 'xsd'."""
    CONFIG: CategoryType = 'config'
    XSD: CategoryType = 'xsd'

    ALL = frozenset({CONFIG, XSD})


@dataclass(frozen=True)
class ResourcePaths:
    root: Path
    config: Path
    xsd: Path

    @classmethod
    @lru_cache(maxsize=1)
    def init(cls, root_path: Optional[Path] = None) -> 'ResourcePaths':
        """
        Resolve the resource root once.

        Raises:
            ValueError: If the resolved root is not a directory
        """
        root = Path(root_path or os.getenv(RESOURCES_ENV_VAR) or BUNDLED_RESOURCES)
        if not root.is_dir():
            raise ValueError(f"Invalid resource root: {root} is not a directory")
        return cls(root=root, config=root / Dir.CONFIG, xsd=root / Dir.XSD)


def get_dir(category: CategoryType) -> Path:
    """
    Directory of a resource category.

    Raises:
        ValueError: If category is not one of Dir.ALL
    """
    if category not in Dir.ALL:
        raise ValueError(
            f"Invalid category '{category}'. "
            f"Must be exactly one of: {', '.join(sorted(Dir.ALL))}"
        )
    return getattr(ResourcePaths.init(), category)


def get_path(category: CategoryType, filename: str) -> Path:
    """Full path of a file in a resource category, e.g. get_path(Dir.CONFIG, 'logging-config.json')."""
    return get_dir(category) / filename
