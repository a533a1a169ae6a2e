from unittest.mock import MagicMock, patch

import pytest

from tasklane.cli import main as cli_main


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    monkeypatch.setattr(cli_main, "configure_logging", lambda: None)
    monkeypatch.setattr(cli_main, "load_dotenv", lambda: None)


def test_cli_main_invokes_uvicorn_run():
    with patch("uvicorn.run") as mock_run:
        cli_main.main([])

    mock_run.assert_called_once()
    assert mock_run.call_args.args[0] == "tasklane.main:app"


def test_cli_serve_options():
    with patch("uvicorn.run") as mock_run:
        cli_main.main(["serve", "--port", "9000", "--no-reload"])

    assert mock_run.call_args.kwargs == {"host": "127.0.0.1", "port": 9000, "reload": False}


def test_cli_expire_invitations(db, monkeypatch, capsys):
    service = MagicMock()
    service.expire_overdue_invitations.return_value = 2
    monkeypatch.setattr(cli_main, "SessionLocal", lambda: db)
    monkeypatch.setattr(cli_main, "InvitationService", lambda session: service)

    cli_main.main(["expire-invitations"])

    service.expire_overdue_invitations.assert_called_once_with()
    assert "Expired 2 invitation(s)" in capsys.readouterr().out
