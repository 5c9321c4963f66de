# src/ddply/models.py
from enum import Enum
from pydantic import BaseModel
from typing import List, Optional, Tuple

class DeployConfig(BaseModel):
    """Structure of the .ddply configuration file."""
    shared: List[str] = []  # paths relative to the source root, linked instead of copied

    class Config:
        extra = 'ignore'
        frozen = True


class Outcome(str, Enum):
    """Which branch a copy or link step took."""
    COPIED = "copied"
    SKIPPED = "skipped"            # destination was a symlink, tree left alone
    LINKED = "linked"
    LINK_SKIPPED = "link_skipped"  # shared source missing, nothing linked


class DeployMode(str, Enum):
    LINK_ONLY = "link_only"
    COPY_AND_LINK = "copy_and_link"


class DeployReport(BaseModel):
    mode: DeployMode
    copy_outcome: Optional[Outcome] = None  # None in link-only mode
    links: List[Tuple[str, Outcome]] = []
