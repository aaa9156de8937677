import pytest
import typer
import yaml
from typer.testing import CliRunner

from haiku.tree.cli import _parse_meta_options, cli

runner = CliRunner()


class TestParseMetaOptions:
    def test_empty_input(self):
        assert _parse_meta_options(None) == {}
        assert _parse_meta_options([]) == {}

    def test_simple_key_value(self):
        result = _parse_meta_options(["owner=alice", "kind=folder"])
        assert result == {"owner": "alice", "kind": "folder"}

    def test_missing_equals_raises(self):
        with pytest.raises(typer.BadParameter):
            _parse_meta_options(["no_equals_here"])

    def test_empty_key_raises(self):
        with pytest.raises(typer.BadParameter):
            _parse_meta_options(["=value"])

    def test_json_values(self):
        result = _parse_meta_options(["rank=3", "public=true", 'tags=["a","b"]'])
        assert result == {"rank": 3, "public": True, "tags": ["a", "b"]}

    def test_value_with_equals_sign(self):
        result = _parse_meta_options(["equation=a=b+c"])
        assert result == {"equation": "a=b+c"}


def _add(db, *args: str) -> str:
    result = runner.invoke(cli, ["add", "--db", str(db), *args])
    assert result.exit_code == 0, result.output
    return result.stdout.strip()


class TestCommands:
    def test_init_config(self, tmp_path):
        output = tmp_path / "haiku.tree.yaml"

        result = runner.invoke(cli, ["init-config", str(output)])
        assert result.exit_code == 0
        config = yaml.safe_load(output.read_text())
        assert config["tree"]["table_name"] == "nodes"

        result = runner.invoke(cli, ["init-config", str(output)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_add_and_show(self, temp_db_path):
        root_id = _add(temp_db_path, "--title", "Root")
        _add(temp_db_path, "--parent", root_id, "--title", "Child")

        result = runner.invoke(cli, ["show", "--db", str(temp_db_path)])
        assert result.exit_code == 0
        assert "Root" in result.output
        assert "Child" in result.output

    def test_add_with_missing_parent(self, temp_db_path):
        result = runner.invoke(
            cli, ["add", "--db", str(temp_db_path), "--parent", "missing"]
        )
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_move_and_list(self, temp_db_path):
        r1 = _add(temp_db_path, "--title", "R1")
        r2 = _add(temp_db_path, "--title", "R2")
        child = _add(temp_db_path, "--parent", r1, "--title", "Child")
        grandchild = _add(temp_db_path, "--parent", child, "--title", "Grandchild")

        result = runner.invoke(
            cli, ["move", child, "--parent", r2, "--db", str(temp_db_path)]
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(
            cli, ["ancestors", grandchild, "--db", str(temp_db_path)]
        )
        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert [line.split("\t")[0] for line in lines] == [r2, child]

        result = runner.invoke(cli, ["descendants", r2, "--db", str(temp_db_path)])
        assert result.exit_code == 0
        found = {line.split("\t")[0] for line in result.stdout.strip().splitlines()}
        assert found == {child, grandchild}

    def test_move_into_own_subtree_fails(self, temp_db_path):
        root = _add(temp_db_path, "--title", "Root")
        child = _add(temp_db_path, "--parent", root)

        result = runner.invoke(
            cli, ["move", root, "--parent", child, "--db", str(temp_db_path)]
        )
        assert result.exit_code == 1
        assert "own ancestor" in result.output

    def test_delete(self, temp_db_path):
        root = _add(temp_db_path, "--title", "Root")

        result = runner.invoke(cli, ["delete", root, "--db", str(temp_db_path)])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["delete", root, "--db", str(temp_db_path)])
        assert result.exit_code == 1

    def test_check_and_rebuild(self, temp_db_path):
        root = _add(temp_db_path, "--title", "Root")
        _add(temp_db_path, "--parent", root, "--title", "Child")

        result = runner.invoke(cli, ["check", "--db", str(temp_db_path)])
        assert result.exit_code == 0
        assert "consistent" in result.output

        result = runner.invoke(cli, ["rebuild", "--db", str(temp_db_path)])
        assert result.exit_code == 0
        assert "Rebuilt 1 trees" in result.output

    def test_missing_database(self, temp_db_path):
        result = runner.invoke(cli, ["show", "--db", str(temp_db_path)])
        assert result.exit_code == 1
        assert "Database does not exist" in result.output

    def test_unknown_node(self, temp_db_path):
        _add(temp_db_path, "--title", "Root")

        result = runner.invoke(cli, ["ancestors", "missing", "--db", str(temp_db_path)])
        assert result.exit_code == 1
        assert "Node not found" in result.output

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(
            cli, ["--config", str(tmp_path / "missing.yaml"), "check"]
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output
