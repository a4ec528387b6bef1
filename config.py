"""
Configuration Management

Central configuration for HKDF key derivation.
Supports YAML configuration files and environment variables.
"""

from dataclasses import dataclass, asdict, fields
from typing import Optional
import yaml
import os
import logging

from hkdf_engine import HashAlgorithm, HkdfEngine, UnsupportedAlgorithm
from utils import setup_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class HKDFConfig:
    """Complete HKDF configuration"""

    # Derivation
    hash_algorithm: str = "hmacsha256"  # "hmacsha1", "hmacsha256", "hmacsha384", "hmacsha512"
    output_key_length: int = 32
    info_prefix: str = "hkdf"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ConfigManager:
    """
    Configuration manager for HKDF derivation.

    Supports:
    - YAML configuration files
    - Environment variable overrides
    - Configuration validation
    """

    ENV_PREFIX = "HKDF_"

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to YAML configuration file
        """
        self.config_file = config_file
        self.config = HKDFConfig()

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

        self.load_from_env()

        logger.info("Configuration loaded")

    def load_from_file(self, config_file: str):
        """Load configuration from YAML file"""
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load configuration from {config_file}: {e}")
            return

        if not isinstance(data, dict):
            if data is not None:
                logger.error(f"Configuration in {config_file} is not a mapping")
            return

        known = {field.name for field in fields(self.config)}
        for key, value in data.items():
            if key in known:
                setattr(self.config, key, value)
            else:
                logger.warning(f"Unknown configuration key ignored: {key!r}")

        logger.info(f"Loaded configuration from {config_file}")

    def load_from_env(self):
        """Load configuration from environment variables"""
        for field in fields(self.config):
            env_var = f"{self.ENV_PREFIX}{field.name.upper()}"
            value = os.environ.get(env_var)

            if value is None:
                continue

            try:
                if field.type in (int, "int"):
                    converted_value = int(value)
                else:
                    converted_value = value

                setattr(self.config, field.name, converted_value)
                logger.debug(f"Set {field.name} from environment: {converted_value}")

            except ValueError:
                logger.warning(f"Invalid environment value for {field.name}: {value}")

    def save_to_file(self, config_file: str):
        """Save configuration to YAML file"""
        with open(config_file, 'w') as f:
            yaml.safe_dump(asdict(self.config), f, default_flow_style=False)

        logger.info(f"Saved configuration to {config_file}")

    def get_config(self) -> HKDFConfig:
        """Get HKDF configuration"""
        return self.config

    def apply_logging(self, force: bool = True) -> int:
        """
        Configure the root logger from log_level and log_file.

        Args:
            force: Replace handlers already installed on the root logger

        Returns:
            Numeric log level applied
        """
        return setup_logging(self.config.log_level, self.config.log_file, force=force)

    def validate(self) -> bool:
        """Validate configuration"""
        errors = []

        try:
            algorithm = HashAlgorithm.from_name(self.config.hash_algorithm)
        except UnsupportedAlgorithm as e:
            algorithm = None
            errors.append(str(e))

        length = self.config.output_key_length
        if not isinstance(length, int) or isinstance(length, bool) or length <= 0:
            errors.append("output_key_length must be a positive integer")
        elif algorithm is not None:
            max_length = HkdfEngine.MAX_BLOCKS * algorithm.digest_size
            if length > max_length:
                errors.append(f"output_key_length exceeds {max_length} bytes "
                              f"for {algorithm.tag}")

        if str(self.config.log_level).upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        # Log errors
        for error in errors:
            logger.error(f"Configuration validation error: {error}")

        return len(errors) == 0


def load_config(config_file: Optional[str] = None) -> HKDFConfig:
    """
    Load HKDF configuration.

    Args:
        config_file: Path to configuration file

    Returns:
        HKDFConfig instance
    """
    manager = ConfigManager(config_file)
    return manager.get_config()
