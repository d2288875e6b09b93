#!/usr/bin/env python3
"""Security validation utilities for gitolite-to-gitlab."""

import os
import re
from typing import List, Optional, Set
from urllib.parse import urlparse


class SecurityValidator:
    """Input validation and credential redaction."""

    MAX_URL_LENGTH = 2048
    MAX_USERNAME_LENGTH = 255
    MAX_PATH_LENGTH = 500

    # GitLab usernames: letters, digits, '_', '.', '-'
    SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

    # Literal values (tokens) that must never reach the terminal
    _secrets: Set[str] = set()

    @classmethod
    def register_secret(cls, secret: Optional[str]) -> None:
        """Remember a secret so sanitize_for_logging redacts it verbatim."""
        if secret:
            cls._secrets.add(secret)

    @classmethod
    def clear_secrets(cls) -> None:
        cls._secrets.clear()

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate a web URL; it must carry a protocol."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        if "//" not in url:
            raise ValueError("URL must contain a protocol (e.g. https://)")

        parsed = urlparse(url)
        if not parsed.netloc:
            raise ValueError("URL has no host")

        if allowed_schemes and parsed.scheme.lower() not in allowed_schemes:
            raise ValueError(
                f"URL scheme '{parsed.scheme}' not in allowed schemes: {allowed_schemes}"
            )

        return url.rstrip("/")

    @classmethod
    def validate_username(cls, username: str) -> str:
        """Validate a GitLab username."""
        if not username or not isinstance(username, str):
            raise ValueError("Username must be a non-empty string")

        if len(username) > cls.MAX_USERNAME_LENGTH:
            raise ValueError(
                f"Username exceeds maximum length of {cls.MAX_USERNAME_LENGTH}"
            )

        if not cls.SAFE_USERNAME_PATTERN.match(username):
            raise ValueError("Username contains invalid characters")

        return username

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate a local directory path."""
        if not path or not isinstance(path, str):
            raise ValueError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("File path contains null bytes")

        return os.path.normpath(path)

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        sanitized = str(message)
        # Longest first so a secret containing another is fully masked
        for secret in sorted(cls._secrets, key=len, reverse=True):
            sanitized = sanitized.replace(secret, "[REDACTED]")

        patterns = [
            (r"(https?://)[^:/@\s]+:[^@\s]+@", r"\1[REDACTED]@"),  # URLs with credentials
            (r"private-token[=:\s]+[^\s&]+", "PRIVATE-TOKEN: [REDACTED]"),  # API header
            (r"private_token[=:\s]+[^\s&]+", "private_token=[REDACTED]"),  # Query string
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),  # Personal access tokens
            (r"gloas-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),  # OAuth application secrets
        ]
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
