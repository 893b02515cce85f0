"""Configuration management for the macro indicator service."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_float(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    LOGS_DIR = Path(os.getenv("LOGS_DIR", str(ROOT_DIR / "logs")))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # HTTP server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Upstream providers
    IMF_URL: str = os.getenv("IMF_URL", "https://www.imf.org/external/datamapper/api/v1/PCPIPCH")
    WORLD_BANK_URL: str = os.getenv("WORLD_BANK_URL", "https://api.worldbank.org/v2")
    STATBUREAU_URL: str = os.getenv("STATBUREAU_URL", "https://www.statbureau.org/get-data-json")
    FRANKFURTER_URL: str = os.getenv("FRANKFURTER_URL", "https://api.frankfurter.app")
    DEFILLAMA_URL: str = os.getenv(
        "DEFILLAMA_URL", "https://stablecoins.llama.fi/stablecoincharts/all?stablecoin=1"
    )
    FEAR_GREED_URL: str = os.getenv("FEAR_GREED_URL", "https://api.alternative.me/fng/")
    USER_AGENT: str = os.getenv("USER_AGENT", "MacroIndicators/1.0")

    # Per-provider timeouts (seconds)
    IMF_TIMEOUT: float = float(os.getenv("IMF_TIMEOUT", "8"))
    WORLD_BANK_TIMEOUT: float = float(os.getenv("WORLD_BANK_TIMEOUT", "8"))
    WORLD_BANK_MACRO_TIMEOUT: float = float(os.getenv("WORLD_BANK_MACRO_TIMEOUT", "12"))
    STATBUREAU_TIMEOUT: float = float(os.getenv("STATBUREAU_TIMEOUT", "5"))
    FRANKFURTER_TIMEOUT: float = float(os.getenv("FRANKFURTER_TIMEOUT", "8"))
    FRANKFURTER_HISTORICAL_TIMEOUT: float = float(os.getenv("FRANKFURTER_HISTORICAL_TIMEOUT", "10"))
    DEFILLAMA_TIMEOUT: float = float(os.getenv("DEFILLAMA_TIMEOUT", "8"))
    FEAR_GREED_TIMEOUT: float = float(os.getenv("FEAR_GREED_TIMEOUT", "5"))

    # Cache TTLs; unset means the entry lives for the process lifetime
    MACRO_CACHE_TTL_HOURS: Optional[float] = _optional_float("MACRO_CACHE_TTL_HOURS", 24.0)
    INFLATION_CACHE_TTL_HOURS: Optional[float] = _optional_float("INFLATION_CACHE_TTL_HOURS")
    FX_CACHE_TTL_HOURS: Optional[float] = _optional_float("FX_CACHE_TTL_HOURS")
    MOMENTUM_CACHE_TTL_HOURS: Optional[float] = _optional_float("MOMENTUM_CACHE_TTL_HOURS")
    FALLBACK_CACHE_TTL_MINUTES: float = float(os.getenv("FALLBACK_CACHE_TTL_MINUTES", "5"))

    # Macro fan-out
    MACRO_MAX_WORKERS: int = int(os.getenv("MACRO_MAX_WORKERS", "5"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        timeouts = {
            "IMF_TIMEOUT": cls.IMF_TIMEOUT,
            "WORLD_BANK_TIMEOUT": cls.WORLD_BANK_TIMEOUT,
            "WORLD_BANK_MACRO_TIMEOUT": cls.WORLD_BANK_MACRO_TIMEOUT,
            "STATBUREAU_TIMEOUT": cls.STATBUREAU_TIMEOUT,
            "FRANKFURTER_TIMEOUT": cls.FRANKFURTER_TIMEOUT,
            "FRANKFURTER_HISTORICAL_TIMEOUT": cls.FRANKFURTER_HISTORICAL_TIMEOUT,
            "DEFILLAMA_TIMEOUT": cls.DEFILLAMA_TIMEOUT,
            "FEAR_GREED_TIMEOUT": cls.FEAR_GREED_TIMEOUT,
        }
        for name, value in timeouts.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        ttls = {
            "MACRO_CACHE_TTL_HOURS": cls.MACRO_CACHE_TTL_HOURS,
            "INFLATION_CACHE_TTL_HOURS": cls.INFLATION_CACHE_TTL_HOURS,
            "FX_CACHE_TTL_HOURS": cls.FX_CACHE_TTL_HOURS,
            "MOMENTUM_CACHE_TTL_HOURS": cls.MOMENTUM_CACHE_TTL_HOURS,
            "FALLBACK_CACHE_TTL_MINUTES": cls.FALLBACK_CACHE_TTL_MINUTES,
        }
        for name, value in ttls.items():
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative, got {value}")

        if cls.MACRO_MAX_WORKERS < 1:
            raise ValueError("MACRO_MAX_WORKERS must be at least 1")


config = Config()
