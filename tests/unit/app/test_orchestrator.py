"""Tests for Orchestrator command dispatch."""

from __future__ import annotations

import json
from io import BytesIO, StringIO, TextIOWrapper
from typing import TYPE_CHECKING

import pytest

from fernet_codec.app.key_store import KeyNotFoundError
from fernet_codec.app.orchestrator import Orchestrator
from fernet_codec.app.token_service import TokenServiceError
from fernet_codec.core.logger import LogFormat
from fernet_codec.crypto import Fernet, FernetKey

from tests.factories import TEST_KEY_ENV_VAR, create_args, create_test_app_config, forge_token
from tests.vectors import VECTOR_KEY, VECTOR_TIMESTAMP, VECTOR_TOKEN

if TYPE_CHECKING:
    from pathlib import Path
    from unittest.mock import MagicMock

    from fernet_codec.core.models import AppConfig


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    """Config reading the key from a private env var."""
    monkeypatch.delenv(TEST_KEY_ENV_VAR, raising=False)
    return create_test_app_config()


@pytest.fixture
def stdout() -> StringIO:
    return StringIO()


def make_orchestrator(
    config: AppConfig,
    console: MagicMock,
    error: MagicMock,
    stdout: StringIO,
    stdin: str = "",
) -> Orchestrator:
    """Build an Orchestrator over in-memory streams."""
    return Orchestrator(config, console, error, stdin=StringIO(stdin), stdout=stdout)


@pytest.fixture
def orchestrator(
    config: AppConfig, mock_console_logger: MagicMock, mock_error_logger: MagicMock, stdout: StringIO
) -> Orchestrator:
    return make_orchestrator(config, mock_console_logger, mock_error_logger, stdout)


class TestGenerateKey:
    """Tests for the generate-key command."""

    def test_prints_key(self, orchestrator: Orchestrator, stdout: StringIO) -> None:
        """Should print a loadable unpadded key."""
        orchestrator.run_command(create_args("generate-key"))

        printed = stdout.getvalue().strip()
        assert "=" not in printed
        assert len(FernetKey.from_encoded(printed).raw) == 32

    def test_writes_key_file(self, orchestrator: Orchestrator, stdout: StringIO, tmp_path: Path) -> None:
        """Should write the key to --output and print nothing."""
        key_file = tmp_path / "fernet.key"

        orchestrator.run_command(create_args("genkey", output=str(key_file)))

        assert stdout.getvalue() == ""
        FernetKey.from_encoded(key_file.read_text(encoding="ascii").strip())

    def test_logs_key_file_path(
        self, orchestrator: Orchestrator, mock_console_logger: MagicMock, tmp_path: Path
    ) -> None:
        """Should log the written path with Rich file markup."""
        key_file = tmp_path / "fernet.key"

        orchestrator.run_command(create_args("generate-key", output=str(key_file)))

        mock_console_logger.info.assert_called_once_with("New key written to %s", LogFormat.file(str(key_file)))

    def test_refuses_existing_file(self, orchestrator: Orchestrator, tmp_path: Path) -> None:
        """Should not overwrite without --force."""
        key_file = tmp_path / "fernet.key"
        key_file.write_text("existing\n", encoding="ascii")

        with pytest.raises(FileExistsError):
            orchestrator.run_command(create_args("generate-key", output=str(key_file)))

        orchestrator.run_command(create_args("generate-key", output=str(key_file), force=True))
        assert key_file.read_text(encoding="ascii") != "existing\n"


class TestEncryptDecrypt:
    """Tests for the encrypt and decrypt commands."""

    def test_round_trip_with_explicit_key(self, orchestrator: Orchestrator, stdout: StringIO) -> None:
        """Should decrypt what it encrypted."""
        orchestrator.run_command(create_args("encrypt", key=VECTOR_KEY, text="hello"))
        token = stdout.getvalue().strip()
        stdout.truncate(0)
        stdout.seek(0)

        orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=token))

        assert stdout.getvalue() == "hello\n"

    def test_key_from_environment(
        self, orchestrator: Orchestrator, stdout: StringIO, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should use the configured env var when no key is given."""
        monkeypatch.setenv(TEST_KEY_ENV_VAR, VECTOR_KEY)

        orchestrator.run_command(create_args("dec", token=VECTOR_TOKEN))

        assert stdout.getvalue() == "my deep dark secret\n"

    def test_key_file_from_config(
        self, mock_console_logger: MagicMock, mock_error_logger: MagicMock, stdout: StringIO, tmp_path: Path
    ) -> None:
        """Should read the key file named in the config."""
        key_file = tmp_path / "fernet.key"
        key_file.write_text(VECTOR_KEY + "\n", encoding="ascii")
        config = create_test_app_config(key={"env_var": TEST_KEY_ENV_VAR, "file": str(key_file)})

        make_orchestrator(config, mock_console_logger, mock_error_logger, stdout).run_command(
            create_args("decrypt", token=VECTOR_TOKEN)
        )

        assert stdout.getvalue() == "my deep dark secret\n"

    def test_reads_stdin(
        self, config: AppConfig, mock_console_logger: MagicMock, mock_error_logger: MagicMock, stdout: StringIO
    ) -> None:
        """Should read the token from stdin, ignoring surrounding whitespace."""
        orchestrator = make_orchestrator(config, mock_console_logger, mock_error_logger, stdout, f"\n{VECTOR_TOKEN}\n")

        orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY))

        assert stdout.getvalue() == "my deep dark secret\n"

    def test_encrypt_stdin(
        self, config: AppConfig, mock_console_logger: MagicMock, mock_error_logger: MagicMock, stdout: StringIO
    ) -> None:
        """Should encrypt stdin verbatim."""
        orchestrator = make_orchestrator(config, mock_console_logger, mock_error_logger, stdout, "line one\nline two\n")

        orchestrator.run_command(create_args("encrypt", key=VECTOR_KEY))

        token = stdout.getvalue().strip()
        assert Fernet(VECTOR_KEY).decode_authenticated(token) == b"line one\nline two\n"

    def test_binary_file_round_trip(self, orchestrator: Orchestrator, stdout: StringIO, tmp_path: Path) -> None:
        """Should encrypt --input bytes and write them back with --output."""
        source = tmp_path / "in.bin"
        source.write_bytes(b"\x00\xff\x10binary")
        target = tmp_path / "out.bin"

        orchestrator.run_command(create_args("encrypt", key=VECTOR_KEY, input=str(source)))
        orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=stdout.getvalue(), output=str(target)))

        assert target.read_bytes() == b"\x00\xff\x10binary"

    def test_binary_to_stdout_buffer(self, config: AppConfig, mock_console_logger: MagicMock) -> None:
        """Should write non-UTF-8 plaintext to the underlying byte buffer."""
        raw = BytesIO()
        stdout = TextIOWrapper(raw, encoding="utf-8")
        token = Fernet(VECTOR_KEY).encode(b"\xff\xfe")
        orchestrator = Orchestrator(config, mock_console_logger, mock_console_logger, stdin=StringIO(), stdout=stdout)

        orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=token))

        assert raw.getvalue() == b"\xff\xfe"

    def test_binary_to_text_only_stream(self, orchestrator: Orchestrator) -> None:
        """Should raise when binary plaintext has nowhere to go."""
        token = Fernet(VECTOR_KEY).encode(b"\xff\xfe")

        with pytest.raises(UnicodeDecodeError):
            orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=token))

    def test_no_key(self, orchestrator: Orchestrator) -> None:
        """Should raise KeyNotFoundError without a key source."""
        with pytest.raises(KeyNotFoundError):
            orchestrator.run_command(create_args("encrypt", text="hello"))


class TestDecryptPolicy:
    """Tests for the decrypt authentication policy."""

    @pytest.fixture
    def forged(self) -> str:
        """Token under the vector key with a zeroed HMAC."""
        fernet = Fernet(VECTOR_KEY)
        return forge_token(fernet, fernet.encode(b"forged"))

    def test_strict_by_default(self, orchestrator: Orchestrator, forged: str) -> None:
        """Should reject a forged token."""
        with pytest.raises(TokenServiceError):
            orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=forged))

    def test_flag_allows_unauthenticated(
        self, orchestrator: Orchestrator, stdout: StringIO, mock_error_logger: MagicMock, forged: str
    ) -> None:
        """Should return the plaintext and warn with --allow-unauthenticated."""
        orchestrator.run_command(create_args("decrypt", key=VECTOR_KEY, token=forged, allow_unauthenticated=True))

        assert stdout.getvalue() == "forged\n"
        mock_error_logger.warning.assert_called_once()

    def test_config_allows_unauthenticated(
        self, mock_console_logger: MagicMock, mock_error_logger: MagicMock, stdout: StringIO, forged: str
    ) -> None:
        """Should honor decode.require_authentication from the config."""
        config = create_test_app_config(decode={"require_authentication": False})

        make_orchestrator(config, mock_console_logger, mock_error_logger, stdout).run_command(
            create_args("decrypt", key=VECTOR_KEY, token=forged)
        )

        assert stdout.getvalue() == "forged\n"


class TestInspect:
    """Tests for the inspect command."""

    def test_prints_json(self, orchestrator: Orchestrator, stdout: StringIO) -> None:
        """Should print the token fields as JSON."""
        orchestrator.run_command(create_args("inspect", key=VECTOR_KEY, token=VECTOR_TOKEN))

        details = json.loads(stdout.getvalue())
        assert details["timestamp"] == VECTOR_TIMESTAMP
        assert details["hmac_success"] is True
        assert details["version"] == 128


class TestDispatch:
    """Tests for command dispatch."""

    def test_unknown_command(self, orchestrator: Orchestrator) -> None:
        """Should raise ValueError for an unknown command."""
        with pytest.raises(ValueError, match="Unknown command"):
            orchestrator.run_command(create_args("rotate"))
