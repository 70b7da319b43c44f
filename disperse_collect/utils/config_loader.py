"""
Configuration loader for the disperse/collect API
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from disperse_collect.core.types import to_address

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "app_config.yml"

# env var -> AppConfig field
_ENV_FIELDS = {
    "RPC_URL": "rpc_url",
    "CONTRACT_ADDRESS": "contract_address",
    "API_HOST": "host",
    "PORT": "port",
    "REQUEST_TIMEOUT_SECONDS": "request_timeout_seconds",
    "RECEIPT_TIMEOUT_SECONDS": "receipt_timeout_seconds",
    "INTEGRATIONS_MODE": "integrations_mode",
}


class AppConfig(BaseModel):
    """Process configuration"""

    rpc_url: Optional[str] = None
    contract_address: Optional[str] = None
    tx_signers: List[SecretStr] = Field(default_factory=list)
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    receipt_timeout_seconds: float = Field(default=120.0, gt=0)
    integrations_mode: Literal["auto", "real", "mock"] = "auto"
    api_keys: List[str] = Field(default_factory=list)

    @field_validator("contract_address")
    @classmethod
    def _checksum_contract(cls, value: Optional[str]) -> Optional[str]:
        return to_address(value) if value else value

    @field_validator("integrations_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> Any:
        mode = str(value or "auto").strip().lower()
        if mode in {"real", "live"}:
            return "real"
        if mode in {"mock", "test"}:
            return "mock"
        return mode

    @property
    def use_real_chain(self) -> bool:
        if self.integrations_mode == "real":
            return True
        if self.integrations_mode == "mock":
            return False
        return bool(self.rpc_url)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value

    signers = os.getenv("TX_SIGNERS") or os.getenv("TX_SIGNER")
    if signers:
        overrides["tx_signers"] = _split_csv(signers)

    api_keys = os.getenv("API_KEYS")
    if api_keys:
        overrides["api_keys"] = _split_csv(api_keys)
    return overrides


def load_app_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load and validate process configuration

    Values come from the YAML file first, then environment variables
    (including a .env file) override them. Private keys are only read from
    the environment.

    Args:
        config_path: Path to config file. Defaults to APP_CONFIG_PATH, then
            config/app_config.yml, which may be absent.

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    if config_path is None and os.getenv("APP_CONFIG_PATH"):
        config_path = Path(os.environ["APP_CONFIG_PATH"])

    data: Dict[str, Any] = {}
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif config_path is not None:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    data.pop("tx_signers", None)
    data.update(_env_overrides())

    try:
        cfg = AppConfig(**data)
        logger.info("Loaded app config (mode=%s, signers=%d)", cfg.integrations_mode, len(cfg.tx_signers))
        return cfg
    except ValidationError as e:
        logger.error("App config validation failed: %s", e)
        raise
