from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from curly.cli import main
from curly.generator.collection import ENVS_EXAMPLE

FIXTURES = Path(__file__).parent / "fixtures"

SCRIPT = """# GET /test

# Variables
BASE_URL="http://localhost:8080"
TOKEN="VALUE"

curl -s -X GET "${BASE_URL}/test" -H "Authorization: ${TOKEN}"
"""


class TestCliGenerate:
    def test_generate_petstore(self, tmp_path):
        output = tmp_path / "out"
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "petstore.yaml"), "-o", str(output)])

        assert result.exit_code == 0
        assert f"Generated collection in {output}/" in result.output
        assert (output / "GET_pets.curl").exists()
        assert (output / "envs.yml").exists()

    def test_generate_with_hints(self, tmp_path):
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "swagger2.yaml"), "-o", str(tmp_path), "--hints"])
        assert result.exit_code == 0
        assert 'FIELDS="basic"' in (tmp_path / "GET_users__id.curl").read_text()

    def test_generate_default_output_dir(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, ["generate", str(FIXTURES / "petstore.yaml")])
            assert result.exit_code == 0
            assert Path("collection/GET_root.curl").exists()

    def test_generate_missing_document(self, tmp_path):
        result = CliRunner().invoke(main, ["generate", str(tmp_path / "nope.yaml"), "-o", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error: failed to load OpenAPI file" in result.output

    def test_generate_malformed_document_is_reported(self, tmp_path):
        doc = tmp_path / "api.yaml"
        doc.write_text("paths:\n  /v:\n    get:\n      parameters:\n        - name: q\n          in: [query]\n")
        result = CliRunner().invoke(main, ["generate", str(doc), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "Error: failed to parse OpenAPI document" in result.output
        assert "Traceback" not in result.output

    def test_generate_loose_document(self, tmp_path):
        doc = tmp_path / "api.yaml"
        doc.write_text(
            "paths:\n"
            "  /v:\n"
            "    post:\n"
            "      summary: 2024\n"
            "      requestBody:\n"
            "        content:\n"
            "          application/json:\n"
            "            examples:\n"
            "              - {born: 2024-01-01}\n"
        )
        result = CliRunner().invoke(main, ["generate", str(doc), "-o", str(tmp_path / "out")])
        assert result.exit_code == 0
        content = (tmp_path / "out" / "POST_v.curl").read_text()
        assert content.startswith("# POST /v\n# 2024\n")
        assert 'BORN="2024-01-01"' in content


class TestCliRun:
    @patch("curly.cli.execute")
    def test_run_file_with_env_and_insecure(self, mock_execute, tmp_path):
        script = tmp_path / "GET_test.curl"
        script.write_text(SCRIPT)
        (tmp_path / "envs.yml").write_text(ENVS_EXAMPLE)

        result = CliRunner().invoke(main, ["run", str(tmp_path), "-f", str(script), "-e", "dev", "-k", "-n", "3", "-p", "2"])

        assert result.exit_code == 0, result.output
        command = mock_execute.call_args.args[0]
        assert command.startswith('BASE_URL="http://localhost:8081"')
        assert "curl -k -s -X GET" in command
        assert mock_execute.call_args.kwargs == {"times": 3, "parallel": 2, "delay": 0, "verbose": False}

    @patch("curly.cli.execute")
    def test_env_from_environment_variable(self, mock_execute, tmp_path):
        script = tmp_path / "GET_test.curl"
        script.write_text(SCRIPT)
        (tmp_path / "envs.yml").write_text(ENVS_EXAMPLE)

        result = CliRunner().invoke(main, ["run", str(tmp_path), "-f", str(script)], env={"CURLY_ENV": "staging"})

        assert result.exit_code == 0, result.output
        assert 'BASE_URL="http://localhost:8081"' in mock_execute.call_args.args[0]

    def test_unknown_environment(self, tmp_path):
        script = tmp_path / "GET_test.curl"
        script.write_text(SCRIPT)
        (tmp_path / "envs.yml").write_text(ENVS_EXAMPLE)

        result = CliRunner().invoke(main, ["run", str(tmp_path), "-f", str(script), "-e", "prod"])

        assert result.exit_code == 1
        assert "environment 'prod' not found" in result.output

    def test_invalid_times(self, tmp_path):
        result = CliRunner().invoke(main, ["run", str(tmp_path), "-n", "0"])
        assert result.exit_code == 2
        assert "--times" in result.output

    def test_no_scripts(self, tmp_path):
        result = CliRunner().invoke(main, ["run", str(tmp_path)])
        assert result.exit_code == 1
        assert "no .curl files found" in result.output

    @patch("curly.cli.execute")
    @patch("curly.cli.edit_script")
    @patch("curly.cli.select_script")
    def test_select_and_edit(self, mock_select, mock_edit, mock_execute, tmp_path):
        script = tmp_path / "GET_test.curl"
        script.write_text(SCRIPT)
        mock_select.return_value = script
        mock_edit.side_effect = lambda path: path.read_text().replace("VALUE", "edited")

        result = CliRunner().invoke(main, ["run", str(tmp_path)])

        assert result.exit_code == 0, result.output
        mock_edit.assert_called_once_with(tmp_path / "GET_test.curl.tmp")
        assert 'TOKEN="edited"' in mock_execute.call_args.args[0]
        assert not (tmp_path / "GET_test.curl.tmp").exists()
        assert script.read_text() == SCRIPT

    @patch("curly.cli.execute")
    @patch("curly.cli.select_script")
    def test_selection_aborted(self, mock_select, mock_execute, tmp_path):
        (tmp_path / "GET_test.curl").write_text(SCRIPT)
        mock_select.return_value = None

        result = CliRunner().invoke(main, ["run", str(tmp_path)])

        assert result.exit_code == 0
        mock_execute.assert_not_called()


class TestCliCompletion:
    def test_zsh(self):
        result = CliRunner().invoke(main, ["completion", "zsh"])
        assert result.exit_code == 0
        assert "_CURLY_COMPLETE" in result.output

    def test_unsupported_shell(self):
        result = CliRunner().invoke(main, ["completion", "tcsh"])
        assert result.exit_code == 2
