"""Configuration validators for the calculator application.

This module provides reusable field validators for the configuration models
and cross-section business rule checks.
"""

import re
import warnings
from pathlib import Path
from urllib.parse import urlparse


class ConfigurationValidators:
    """Collection of reusable configuration validators."""

    @staticmethod
    def validate_url(url: str, schemes: list[str] | None = None) -> str:
        """Validate URL format and scheme.

        Args:
            url: URL to validate
            schemes: List of allowed schemes (default: ['http', 'https'])

        Returns:
            Validated URL without trailing slash

        Raises:
            ValueError: If URL format is invalid
        """
        if not url:
            raise ValueError("URL is required")

        if schemes is None:
            schemes = ["http", "https"]

        try:
            parsed = urlparse(url)
        except Exception as e:
            raise ValueError(f"Invalid URL format: {e}")

        if not parsed.scheme:
            raise ValueError("URL must include a scheme (http:// or https://)")

        if parsed.scheme not in schemes:
            raise ValueError(f"URL scheme must be one of: {', '.join(schemes)}")

        if not parsed.netloc:
            raise ValueError("URL must include a valid domain")

        return url.rstrip("/")

    @staticmethod
    def validate_currency_code(currency: str) -> str:
        """Validate currency code format.

        Args:
            currency: Currency code to validate

        Returns:
            Validated currency code in uppercase

        Raises:
            ValueError: If currency code format is invalid
        """
        if not currency:
            raise ValueError("Currency code is required")

        currency = currency.upper().strip()

        if not re.match(r"^[A-Z]{3}$", currency):
            raise ValueError("Currency code must be 3 letters")

        # Precious metals and testing codes have no exchange-rate meaning here
        invalid_codes = {"XXX", "XTS", "XAU", "XAG", "XPD", "XPT"}
        if currency in invalid_codes:
            raise ValueError(f"Currency code '{currency}' is reserved or invalid")

        return currency

    @staticmethod
    def validate_currency_list(value: str | list[str] | tuple[str, ...]) -> list[str]:
        """Validate a list of currency codes.

        Accepts either a comma-separated string ("USD,EUR") or a sequence.
        Order is preserved and duplicates are dropped.

        Args:
            value: Currency codes to validate

        Returns:
            List of validated, unique currency codes

        Raises:
            ValueError: If the list is empty or contains an invalid code
        """
        if isinstance(value, str):
            items = [item for item in value.split(",") if item.strip()]
        else:
            items = list(value)

        codes: list[str] = []
        for item in items:
            code = ConfigurationValidators.validate_currency_code(item)
            if code not in codes:
                codes.append(code)

        if not codes:
            raise ValueError("At least one currency code is required")

        return codes

    @staticmethod
    def validate_file_path(path: str, must_exist: bool = False) -> str:
        """Validate a data or log file path.

        The path must name a file, not a directory, and may not contain
        characters that are invalid on common filesystems.

        Args:
            path: File path to validate
            must_exist: Whether the file must already exist

        Returns:
            Validated file path

        Raises:
            ValueError: If file path is invalid
        """
        if not path or not path.strip():
            raise ValueError("File path is required")

        invalid_chars = ["<", ">", '"', "|", "?", "*"]
        found = [char for char in invalid_chars if char in path]
        if found:
            raise ValueError(f"File path contains invalid characters: {''.join(found)}")

        if path.endswith(("/", "\\")):
            raise ValueError(f"File path must name a file, not a directory: {path}")

        if must_exist and not Path(path).is_file():
            raise ValueError(f"File does not exist: {path}")

        return path


class BusinessRuleValidators:
    """Validators for cross-section rules."""

    @staticmethod
    def validate_currency_consistency(
        supported: list[str],
        major: list[str],
        references: list[str],
        default_pair: tuple[str, str],
    ) -> None:
        """Validate that configured currencies agree with the supported list.

        Args:
            supported: Supported currency codes
            major: Currencies warmed up at startup
            references: Hub currencies used for cross rates
            default_pair: Default (from, to) selection

        Raises:
            ValueError: If the default pair is unusable
        """
        unknown_major = [code for code in major if code not in supported]
        if unknown_major:
            warnings.warn(
                f"Major currencies not in supported list: {', '.join(unknown_major)}",
                UserWarning,
                stacklevel=2,
            )

        unknown_references = [code for code in references if code not in supported]
        if unknown_references:
            warnings.warn(
                "Reference currencies not in supported list: "
                f"{', '.join(unknown_references)}",
                UserWarning,
                stacklevel=2,
            )

        from_code, to_code = default_pair
        for code in default_pair:
            if code not in supported:
                raise ValueError(f"Default currency {code} is not supported")

        if from_code == to_code:
            raise ValueError("Default from and to currencies must be different")

    @staticmethod
    def validate_environment_consistency(
        environment: str, debug: bool, log_level: str
    ) -> None:
        """Validate consistency between environment settings.

        Args:
            environment: Environment name
            debug: Debug mode flag
            log_level: Logging level

        Raises:
            ValueError: If settings are inconsistent
        """
        if environment == "production":
            if debug:
                raise ValueError(
                    "Debug mode should not be enabled in production environment"
                )

            if log_level.upper() == "DEBUG":
                warnings.warn(
                    "DEBUG log level in production may impact performance",
                    UserWarning,
                    stacklevel=2,
                )

        elif environment == "development":
            if log_level.upper() in ["ERROR", "CRITICAL"]:
                warnings.warn(
                    f"Log level '{log_level}' may hide important development "
                    "information. Consider using INFO or DEBUG.",
                    UserWarning,
                    stacklevel=2,
                )

