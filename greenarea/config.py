"""
Settings
========

Runtime settings come from environment variables (a local `.env` file is read
first), and CLI flags override them.

    GREENAREA_STORE_DIR       folder with one JSON document per day (default: ./data/green-area)
    GREENAREA_PRIORITY        hospitals listed first in trend tables, separated by ";"
    GREENAREA_ALLOWED         hospitals the current user may see, separated by ";" (empty = all)
    GREENAREA_HOSPITALS       every hospital in the province, separated by ";" (full access is judged against it)
    GREENAREA_NAME_PREFIX     city name dropped from the front of displayed hospital names
    GREENAREA_CAN_UPLOAD      "true" to allow uploads
    GREENAREA_USER            name recorded as uploader
    GREENAREA_PROVINCE_LABEL  label of the province total row
    GREENAREA_LOG_LEVEL       logging level name (default: WARNING)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Mapping, Optional
import logging
import os

from dotenv import load_dotenv

from .pivot import PROVINCE_LABEL


def _split(value: str) -> List[str]:
    return [p.strip() for p in value.split(";") if p.strip()]


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    store_dir: str = os.path.join("data", "green-area")
    priority: List[str] = field(default_factory=list)
    allowed: List[str] = field(default_factory=list)
    hospitals: List[str] = field(default_factory=list)
    can_upload: bool = False
    user: str = "anonymous"
    province_label: str = PROVINCE_LABEL
    name_prefix: str = ""
    log_level: str = "WARNING"


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """Build Settings from the environment (after loading `.env` unless disabled)."""
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ
    s = Settings()
    if environ.get("GREENAREA_STORE_DIR"):
        s.store_dir = environ["GREENAREA_STORE_DIR"]
    s.priority = _split(environ.get("GREENAREA_PRIORITY", ""))
    s.allowed = _split(environ.get("GREENAREA_ALLOWED", ""))
    s.hospitals = _split(environ.get("GREENAREA_HOSPITALS", ""))
    s.name_prefix = environ.get("GREENAREA_NAME_PREFIX", "").strip()
    s.can_upload = _flag(environ.get("GREENAREA_CAN_UPLOAD", ""))
    s.user = environ.get("GREENAREA_USER", s.user) or s.user
    s.province_label = environ.get("GREENAREA_PROVINCE_LABEL", s.province_label) or s.province_label
    s.log_level = (environ.get("GREENAREA_LOG_LEVEL", s.log_level) or s.log_level).upper()
    return s


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
