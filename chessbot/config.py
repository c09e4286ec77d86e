# chessbot/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import tomllib  # python >=3.11

# Material values in pawn-eighths; the king is not scored.
PIECE_VALUES = {
    "PAWN": 8.0,
    "KNIGHT": 26.0,
    "BISHOP": 26.0,
    "ROOK": 40.0,
    "QUEEN": 78.0,
    "KING": 0.0,
}

@dataclass
class SearchConfig:
    depth: int = 4
    time_limit_ms: Optional[int] = None  # None means depth-only
    node_limit: Optional[int] = None

@dataclass
class EvalConfig:
    piece_values: Dict[str, float] = field(default_factory=lambda: PIECE_VALUES.copy())
    use_positional: bool = True

@dataclass
class UIConfig:
    engine_name: str = "ChessBot"
    engine_author: str = "chessbot developers"
    api_title: str = "ChessBot API"

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging for the command line entry points."""
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("ENGINE_CONFIG_TOML", "config.toml"))
# allow env override of depth for quick debugging
override_depth = os.environ.get("ENGINE_SEARCH_DEPTH")
if override_depth and override_depth.isdigit():
    CONFIG.search.depth = int(override_depth)
