"""
where we store the
pydantic Data Structure classes
shared by the matcher, the walker and the baseline harness

"""

import enum
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Mode(enum.Flag):
    """Flags derived from the leading/trailing markers of a pattern line."""
    NONE = 0
    MUST_BE_DIR = enum.auto()  # trailing '/'
    NO_SUB_DIR = enum.auto()   # no '/' inside the pattern, match the basename
    ABSOLUTE = enum.auto()     # leading '/'
    NEGATIVE = enum.auto()     # leading '!'


class Case(str, Enum):
    SENSITIVE = "sensitive"
    FOLD = "fold"


class NodeType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class MatchRecord(BaseModel):
    """One (pattern, path) pair of a captured transcript and what git said about it."""
    model_config = ConfigDict(frozen=True)

    pattern: bytes
    value: bytes
    is_match: bool


class FileNode(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    path: str
    rel_path: str = ""
    node_type: NodeType
    is_ignored: bool = False
    ignored_by: Optional[str] = None
    children: Optional[List['FileNode']] = None
