"""
OpenBibles - Configuration

Centralized configuration management for the parser, the importer and the CLI.
Uses environment variables (and an optional .env file) with sensible defaults.
"""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv

from core.errors import OpenBiblesConfigError
from data.schemas import Language, SourceConfig, Testament, OT_LAST_BOOK_NUMBER
from observability.logging import LoggingConfig

# Load environment variables from .env file
load_dotenv()


# Built-in source collections, processed in this order
DEFAULT_SOURCES: Tuple[SourceConfig, ...] = (
    SourceConfig(
        code="WLC",
        language=Language.HEBREW,
        display_name="Westminster Leningrad Codex",
        testament=Testament.OLD_TESTAMENT,
    ),
    SourceConfig(
        code="SBLGNT",
        language=Language.GREEK,
        display_name="SBL Greek New Testament",
        testament=Testament.NEW_TESTAMENT,
    ),
)


def _data_dir() -> Path:
    return Path(os.getenv("DATA_DIR", "./data_normalized"))


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "")
    return Path(value) if value else None


@dataclass
class PathsConfig:
    """Input and output locations."""
    sources_dir: Path = field(default_factory=lambda: Path(os.getenv("SOURCES_DIR", "./sources")))
    data_dir: Path = field(default_factory=_data_dir)
    book_map_path: Path = field(
        default_factory=lambda: Path(os.getenv("BOOK_MAP_PATH", str(_data_dir() / "book_map.json")))
    )
    output_path: Path = field(
        default_factory=lambda: Path(os.getenv("OUTPUT_PATH", str(_data_dir() / "original_verses.json")))
    )
    sources_file: Optional[Path] = field(default_factory=lambda: _optional_path("SOURCES_FILE"))


@dataclass
class ParsingConfig:
    """Corpus file selection and reporting thresholds."""
    extensions: Tuple[str, ...] = field(
        default_factory=lambda: tuple(
            ext.strip().lower() for ext in os.getenv("PARSE_EXTENSIONS", ".xml").split(",") if ext.strip()
        )
    )
    encoding: str = field(default_factory=lambda: os.getenv("PARSE_ENCODING", "utf-8"))
    ot_last_book_number: int = field(
        default_factory=lambda: int(os.getenv("OT_LAST_BOOK_NUMBER", str(OT_LAST_BOOK_NUMBER)))
    )
    expected_min_verses: int = field(default_factory=lambda: int(os.getenv("EXPECTED_MIN_VERSES", "31000")))


@dataclass
class ImportConfig:
    """Upload target (Supabase edge function) settings."""
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_anon_key: str = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""))
    function_name: str = field(default_factory=lambda: os.getenv("IMPORT_FUNCTION", "import-original-verses"))
    batch_size: int = field(default_factory=lambda: int(os.getenv("IMPORT_BATCH_SIZE", "100")))
    delay_ms: int = field(default_factory=lambda: int(os.getenv("IMPORT_DELAY_MS", "500")))
    max_retries: int = field(default_factory=lambda: int(os.getenv("IMPORT_MAX_RETRIES", "3")))
    timeout: float = field(default_factory=lambda: float(os.getenv("IMPORT_TIMEOUT", "30")))

    @property
    def endpoint(self) -> str:
        """Edge function URL."""
        return f"{self.supabase_url.rstrip('/')}/functions/v1/{self.function_name}"

    def validate(self) -> None:
        """Raise if the importer cannot authenticate."""
        if not self.supabase_url:
            raise OpenBiblesConfigError(
                "SUPABASE_URL environment variable not set",
                config_key="SUPABASE_URL",
                suggestions=['export SUPABASE_URL="https://your-project.supabase.co"'],
            )
        if not self.supabase_anon_key:
            raise OpenBiblesConfigError(
                "SUPABASE_ANON_KEY environment variable not set",
                config_key="SUPABASE_ANON_KEY",
                suggestions=['export SUPABASE_ANON_KEY="your-anon-key"'],
            )


def load_sources(path: Path) -> List[SourceConfig]:
    """
    Read source collections from a JSON array.

    Raises:
        OpenBiblesConfigError: The file is missing, unreadable, or an entry is
            invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise ValueError("expected a JSON array")
        return [SourceConfig.from_dict(entry) for entry in entries]
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise OpenBiblesConfigError(
            f"Invalid sources file {path}: {e}",
            config_key="SOURCES_FILE",
            path=str(path),
            cause=e,
        ) from e


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    importer: ImportConfig = field(default_factory=ImportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def sources(self) -> List[SourceConfig]:
        """Configured source collections, in processing order."""
        if self.paths.sources_file:
            return load_sources(self.paths.sources_file)
        return list(DEFAULT_SOURCES)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (excluding the API key)."""
        return {
            "sources_dir": str(self.paths.sources_dir),
            "book_map_path": str(self.paths.book_map_path),
            "output_path": str(self.paths.output_path),
            "sources_file": str(self.paths.sources_file) if self.paths.sources_file else None,
            "extensions": list(self.parsing.extensions),
            "encoding": self.parsing.encoding,
            "ot_last_book_number": self.parsing.ot_last_book_number,
            "import_endpoint": self.importer.endpoint if self.importer.supabase_url else None,
            "import_batch_size": self.importer.batch_size,
            "log_level": self.logging.level,
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config
