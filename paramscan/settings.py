"""Configuration for parameter-schema extraction.

Settings are loaded from environment variables (prefix ``PARAMSCAN_``) with
optional ``.env`` file support via pydantic-settings, and are frozen after
initialization.

Environment variables:
    PARAMSCAN_FUNCTION_NAME: name of the parameter-declaring function
    PARAMSCAN_TYPE_COMMENT_LOOKBACK: lines above a call searched for ``@type``
    PARAMSCAN_MAX_DEFAULT_DEPTH: recursion cap of default-value folding
    PARAMSCAN_LOG_LEVEL: log level used by the command line
"""

from __future__ import annotations

from typing import Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	model_config = SettingsConfigDict(
		env_prefix="PARAMSCAN_",
		env_file=".env",
		env_file_encoding="utf-8",
		extra="ignore",
		frozen=True,
	)

	function_name: str = "parseParams"

	# Probe order for extensionless relative specifiers
	source_extensions: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

	type_comment_lookback: int = 5
	max_default_depth: int = 5

	log_level: str = "WARNING"


settings = Settings()
