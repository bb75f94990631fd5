"""Vault password cache shared by all requests of one process."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

PasswordPrompt = Callable[[str], str]


class VaultSecret:
    """
    Lazily resolved vault password.

    The configured password wins. When it is empty the prompt is called on
    first access and its answer is kept for every later request, so the user
    is asked at most once per run.
    """

    PROMPT_TEXT = "API password: "

    def __init__(self, configured: str = "", prompt: PasswordPrompt | None = None) -> None:
        """
        Initialize the cache.

        Args:
            configured: Password from configuration, empty when absent
            prompt: Callable asking the user for the password
        """
        self._configured = configured
        self._prompt = prompt
        self._cached: str | None = None

    def get(self) -> str:
        """Return the vault password, prompting on first use if needed."""
        if self._configured:
            return self._configured

        if self._cached is None:
            if self._prompt is None:
                from syspass_cli.prompt import ask_for_password

                self._prompt = lambda text: ask_for_password(text, confirm=False)
            logger.debug("Vault password not configured, asking user")
            self._cached = self._prompt(self.PROMPT_TEXT)

        return self._cached
