"""Tests for decrypt-on-read configuration access."""

from __future__ import annotations

from pathlib import Path

import pytest

from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.security import ENV_FALLBACK_KEY, ConfigDecryptError, encrypt_value


class TestConfigAccessorGet:
    """Tests for ConfigAccessor.get()."""

    def test_plain_value(self) -> None:
        config = ConfigAccessor({"OPENAI_API_KEY": "sk-plain"})
        assert config.get("OPENAI_API_KEY") == "sk-plain"

    def test_missing_key_returns_default(self) -> None:
        config = ConfigAccessor({})
        assert config.get("OPENAI_API_KEY") == ""
        assert config.get("OPENAI_API_KEY", "fallback") == "fallback"

    def test_none_value_returns_default(self) -> None:
        """dotenv yields None for bare keys."""
        config = ConfigAccessor({"OPENAI_API_KEY": None})
        assert config.get("OPENAI_API_KEY") == ""

    def test_encrypted_value_with_explicit_key(self) -> None:
        config = ConfigAccessor(
            {"OPENAI_API_KEY": encrypt_value("sk-secret", "team-key")},
            encryption_key="team-key",
        )
        assert config.get("OPENAI_API_KEY") == "sk-secret"

    def test_encrypted_value_with_configured_key(self) -> None:
        """ENV_CRYPTO_KEY in the source is used as the passphrase."""
        config = ConfigAccessor(
            {
                "ENV_CRYPTO_KEY": "team-key",
                "OPENAI_API_KEY": encrypt_value("sk-secret", "team-key"),
            }
        )
        assert config.get("OPENAI_API_KEY") == "sk-secret"

    def test_configured_key_is_used_verbatim(self) -> None:
        """Whitespace around ENV_CRYPTO_KEY is part of the passphrase."""
        config = ConfigAccessor(
            {
                "ENV_CRYPTO_KEY": " team-key ",
                "OPENAI_API_KEY": encrypt_value("sk-secret", " team-key "),
            }
        )
        assert config.encryption_key == " team-key "
        assert config.get("OPENAI_API_KEY") == "sk-secret"

    def test_encrypted_value_with_fallback_key(self) -> None:
        config = ConfigAccessor({"OPENAI_API_KEY": encrypt_value("sk-secret", ENV_FALLBACK_KEY)})
        assert config.encryption_key == ENV_FALLBACK_KEY
        assert config.get("OPENAI_API_KEY") == "sk-secret"

    def test_undecryptable_value_raises_with_key_name(self) -> None:
        config = ConfigAccessor(
            {"OPENAI_API_KEY": encrypt_value("sk-secret", "other-key")},
            encryption_key="team-key",
        )
        with pytest.raises(ConfigDecryptError) as exc_info:
            config.get("OPENAI_API_KEY")
        assert exc_info.value.key == "OPENAI_API_KEY"
        assert "OPENAI_API_KEY" in str(exc_info.value)
        assert "sk-secret" not in str(exc_info.value)

    def test_empty_encrypted_payload_is_empty(self) -> None:
        config = ConfigAccessor({"OPENAI_API_KEY": "enc:v1:"})
        assert config.get("OPENAI_API_KEY") == ""

    def test_contains(self) -> None:
        config = ConfigAccessor({"OPENAI_API_KEY": "sk-plain"})
        assert "OPENAI_API_KEY" in config
        assert "GEMINI_API_KEY" not in config


class TestConfigAccessorFromEnv:
    """Tests for loading from .env plus the process environment."""

    def test_reads_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("DEEPGRAM_API_KEY=dg-file\n")

        config = ConfigAccessor.from_env(env_file, environ={})
        assert config.get("DEEPGRAM_API_KEY") == "dg-file"

    def test_environment_wins_over_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("DEEPGRAM_API_KEY=dg-file\n")

        config = ConfigAccessor.from_env(env_file, environ={"DEEPGRAM_API_KEY": "dg-env"})
        assert config.get("DEEPGRAM_API_KEY") == "dg-env"

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        config = ConfigAccessor.from_env(tmp_path / "absent.env", environ={"GEMINI_API_KEY": "g"})
        assert config.get("GEMINI_API_KEY") == "g"

    def test_encrypted_value_in_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            f"ENV_CRYPTO_KEY=team-key\nGEMINI_API_KEY={encrypt_value('g-secret', 'team-key')}\n"
        )

        config = ConfigAccessor.from_env(env_file, environ={})
        assert config.get("GEMINI_API_KEY") == "g-secret"
