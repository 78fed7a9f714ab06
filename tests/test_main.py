"""Tests for main.py CLI and Lambda entry point."""

from unittest.mock import Mock, patch

import pytest

from images_resizer import main as main_module
from images_resizer.core.exceptions import ConfigurationError, SameBucketError
from images_resizer.core.models import ProcessedDerivative, ProcessingResult
from images_resizer.main import lambda_handler, main


@pytest.fixture(autouse=True)
def reset_service():
    main_module._service = None
    yield
    main_module._service = None


class TestMainCLI:
    """Tests for the main CLI functionality."""

    def test_main_with_no_args_shows_help(self):
        with patch("argparse.ArgumentParser.print_help") as mock_help:
            assert main([]) == 1
            mock_help.assert_called_once()

    def test_main_version_command(self):
        with patch("builtins.print") as mock_print:
            assert main(["version"]) == 0
            mock_print.assert_any_call("Images Resizer CLI")
            mock_print.assert_any_call("Version 0.1.0")

    def test_main_sizes_command(self, capsys):
        assert main(["sizes"]) == 0
        out = capsys.readouterr().out
        assert "thumbnail  200x200 fill" in out
        assert "large      1400x1400 fit" in out

    def test_main_process_command(self, capsys):
        service = Mock()
        service.process_record.return_value = ProcessingResult(
            source_bucket="uploads",
            source_key="photos/beach.jpg",
            dest_bucket="processed",
            derivatives=[
                ProcessedDerivative(
                    name="small",
                    key="photos/beach_small.jpg",
                    width=500,
                    height=375,
                    content_type="image/jpeg",
                )
            ],
        )
        with patch(
            "images_resizer.main.ProcessingPipelineFactory.create_service",
            return_value=service,
        ) as mock_create:
            code = main(
                ["process", "--bucket", "uploads", "--key", "photos/beach.jpg", "--dest-bucket", "processed"]
            )

        assert code == 0
        assert mock_create.call_args.args[0].destination_bucket == "processed"
        service.process_record.assert_called_once_with("uploads", "photos/beach.jpg")
        assert "s3://processed/photos/beach_small.jpg 500x375" in capsys.readouterr().out

    def test_main_process_failure_returns_error_code(self):
        service = Mock()
        service.process_record.side_effect = SameBucketError("uploads")
        with patch(
            "images_resizer.main.ProcessingPipelineFactory.create_service",
            return_value=service,
        ):
            code = main(
                ["process", "--bucket", "uploads", "--key", "a.jpg", "--dest-bucket", "uploads"]
            )
        assert code == 1

    def test_main_process_requires_destination(self, monkeypatch):
        monkeypatch.delenv("DESTINATION_BUCKET", raising=False)
        assert main(["process", "--bucket", "uploads", "--key", "a.jpg"]) == 1


class TestLambdaHandler:
    """Tests for lambda_handler."""

    def test_builds_service_once(self, monkeypatch):
        monkeypatch.setenv("DESTINATION_BUCKET", "processed")
        service = Mock()
        service.handle_event.return_value = {"records": 0, "processed": 0, "skipped": 0}
        with patch(
            "images_resizer.main.ProcessingPipelineFactory.create_service",
            return_value=service,
        ) as mock_create:
            lambda_handler({"Records": []}, None)
            lambda_handler({"Records": []}, None)

        mock_create.assert_called_once()
        assert mock_create.call_args.args[0].destination_bucket == "processed"
        assert service.handle_event.call_count == 2

    def test_missing_configuration(self, monkeypatch):
        monkeypatch.delenv("DESTINATION_BUCKET", raising=False)
        with pytest.raises(ConfigurationError):
            lambda_handler({"Records": []}, None)
