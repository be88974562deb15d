# src/tests/test_main.py
import pytest
import sys
from otpvault.__main__ import main


def test_main_dispatch_to_import(mocker):
    """'otpvault import' is handed to the importer CLI"""
    mocker.patch.object(sys, "argv", ["otpvault", "import", "otpauth://..."])
    mocker.patch("otpvault.__main__._display_banner")
    mock_import_cli = mocker.patch("otpvault.importer.cli.main")

    main()
    mock_import_cli.assert_called_once()


@pytest.mark.parametrize("command, target", [("codes", "codes_main"), ("verify", "verify_main")])
def test_main_dispatch_to_engine(mocker, command, target):
    mocker.patch.object(sys, "argv", ["otpvault", command, "otpauth://..."])
    mock_cli = mocker.patch(f"otpvault.engine.cli.{target}")

    main()
    mock_cli.assert_called_once()


def test_main_requires_command(mocker):
    mocker.patch.object(sys, "argv", ["otpvault"])
    with pytest.raises(SystemExit):
        main()
