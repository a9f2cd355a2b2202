from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from curly.errors import DocumentLoadError
from curly.parser.loader import is_remote, load_document

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadDocument:
    def test_load_yaml_file(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        assert doc["openapi"] == "3.0.0"

    def test_load_json_file(self, tmp_path):
        f = tmp_path / "api.json"
        f.write_text('{"openapi": "3.0.0", "paths": {}}')
        assert load_document(str(f))["paths"] == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="failed to load OpenAPI file"):
            load_document(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("paths: [unclosed")
        with pytest.raises(DocumentLoadError):
            load_document(f)

    def test_non_mapping_document(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(DocumentLoadError, match="not an object"):
            load_document(f)

    @patch("curly.parser.loader.requests.get")
    def test_load_from_url(self, mock_get):
        response = MagicMock()
        response.text = "openapi: 3.0.0\npaths: {}\n"
        mock_get.return_value = response

        doc = load_document("https://example.com/openapi.yaml")

        assert doc["openapi"] == "3.0.0"
        mock_get.assert_called_once()
        response.raise_for_status.assert_called_once()

    @patch("curly.parser.loader.requests.get")
    def test_url_error_is_wrapped(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(DocumentLoadError, match="unreachable"):
            load_document("http://example.com/openapi.yaml")


def test_is_remote():
    assert is_remote("https://x/api.yaml")
    assert is_remote("http://x/api.yaml")
    assert not is_remote("./http_api.yaml")
