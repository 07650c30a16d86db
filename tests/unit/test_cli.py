"""
CLI Unit Tests
Tests for fixdesc_cli/main.py and the command modules.

Commands run in-process through main(argv); output is read with capsys.
"""
import argparse
import json

import pytest

from fixtures import make_scenario_tree

from core.commitment import commit_field_tree
from core.crypto.hashing import to_hex
from core.merkle.merkle_tree import EMPTY_TREE_ROOT
from core.schemas.commitment import CommitmentRecord, ProofRecord
from fixdesc_cli.commands.codec import read_cbor_input
from fixdesc_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    parse_field_path,
)
from fixdesc_cli.main import main


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run every command from an empty directory with no FIXDESC_* overrides."""
    for name in ("LOG_LEVEL", "LOG_FILE", "OUTPUT_FORMAT", "JSON_INDENT"):
        monkeypatch.delenv(f"FIXDESC_{name}", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def scenario_root():
    return commit_field_tree(make_scenario_tree()).root_hex


def _run_json(capsys, argv):
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out)


class TestParsing:
    """Tests for argument parsing helpers."""

    def test_parse_field_path(self):
        assert parse_field_path("454,1,456") == (454, 1, 456)
        assert parse_field_path("15") == (15,)
        assert parse_field_path(" 454, 0 ,455") == (454, 0, 455)

    @pytest.mark.parametrize("text", ["", "a,b", "454,,456", "-1", "1.5"])
    def test_parse_field_path_rejects(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_field_path(text)

    def test_no_command(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_bad_path_argument_exits(self, scenario_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["prove", str(scenario_file), "--path", "abc"])
        assert exc_info.value.code == 2


class TestCommitCommand:
    """Tests for `fixdesc commit`."""

    def test_commit_json(self, capsys, scenario_file, scenario_root):
        code, data = _run_json(capsys, ["commit", str(scenario_file), "--json"])

        assert code == EXIT_SUCCESS
        assert data["root"] == scenario_root
        assert data["leaf_count"] == 5
        assert data["depth"] == 4
        assert "leaves" not in data

    def test_commit_with_leaves(self, capsys, scenario_file):
        code, data = _run_json(capsys, ["commit", str(scenario_file), "--leaves", "--json"])

        assert code == EXIT_SUCCESS
        assert [leaf["path"] for leaf in data["leaves"]][0] == [15]

    def test_commit_human(self, capsys, scenario_file, scenario_root):
        code = main(["commit", str(scenario_file)])
        out = capsys.readouterr().out

        assert code == EXIT_SUCCESS
        assert f"root: {scenario_root}" in out
        assert "leaves: 5" in out

    def test_commit_writes_record(self, capsys, tmp_path, scenario_file, scenario_root):
        out_path = tmp_path / "out" / "commitment.json"

        code = main(["commit", str(scenario_file), "--out", str(out_path)])

        assert code == EXIT_SUCCESS
        record = CommitmentRecord.model_validate_json(out_path.read_text())
        assert record.root == scenario_root
        assert len(record.leaves) == 5

    def test_commit_duplicate_tag(self, capsys, tmp_path):
        path = tmp_path / "dup.json"
        path.write_text('{"15": "USD", "15": "EUR"}')

        code = main(["commit", str(path)])

        assert code == EXIT_RUNTIME_ERROR
        assert "DUPLICATE_FIELD" in capsys.readouterr().err

    def test_commit_missing_file(self, capsys, tmp_path):
        assert main(["commit", str(tmp_path / "missing.json")]) == EXIT_RUNTIME_ERROR

    def test_configured_json_output(self, capsys, monkeypatch, scenario_file, scenario_root):
        monkeypatch.setenv("FIXDESC_OUTPUT_FORMAT", "json")

        code, data = _run_json(capsys, ["commit", str(scenario_file)])

        assert code == EXIT_SUCCESS
        assert data["root"] == scenario_root


class TestCodecCommands:
    """Tests for `fixdesc encode` and `fixdesc decode`."""

    def test_encode(self, capsys, scenario_file):
        code = main(["encode", str(scenario_file)])
        out = capsys.readouterr().out.strip()

        assert code == EXIT_SUCCESS
        assert out == to_hex(commit_field_tree(make_scenario_tree()).cbor)

    def test_encode_writes_raw_bytes(self, capsys, tmp_path, scenario_file):
        out_path = tmp_path / "tree.cbor"

        assert main(["encode", str(scenario_file), "--out", str(out_path)]) == EXIT_SUCCESS
        assert out_path.read_bytes() == commit_field_tree(make_scenario_tree()).cbor

    def test_decode_hex(self, capsys):
        code, data = _run_json(capsys, ["decode", "0xa10f63555344"])

        assert code == EXIT_SUCCESS
        assert data == {"15": "USD"}

    def test_decode_hex_without_prefix(self, capsys):
        code, data = _run_json(capsys, ["decode", "a11901c680"])

        assert code == EXIT_SUCCESS
        assert data == {"454": []}

    def test_decode_raw_file(self, capsys, tmp_path):
        path = tmp_path / "tree.cbor"
        path.write_bytes(bytes.fromhex("a10f63555344"))

        code, data = _run_json(capsys, ["decode", str(path)])

        assert code == EXIT_SUCCESS
        assert data == {"15": "USD"}

    def test_decode_non_canonical(self, capsys):
        code = main(["decode", "0xa1180f63555344"])

        assert code == EXIT_RUNTIME_ERROR
        assert "DECODING_ERROR" in capsys.readouterr().err

    def test_decode_not_hex(self, capsys):
        assert main(["decode", "zz-not-hex"]) == EXIT_RUNTIME_ERROR

    def test_read_cbor_input_hex_file(self, tmp_path):
        path = tmp_path / "tree.hex"
        path.write_text("0xa0\n")
        assert read_cbor_input(str(path)) == bytes.fromhex("a0")


class TestProveAndVerify:
    """Tests for `fixdesc prove` and `fixdesc verify`."""

    def test_prove_json(self, capsys, scenario_file, scenario_root):
        code, data = _run_json(capsys, ["prove", str(scenario_file), "--path", "454,1,456", "--json"])

        assert code == EXIT_SUCCESS
        assert data["root"] == scenario_root
        assert data["index"] == 4
        assert data["proof"]["directions"] == [True]
        assert data["proof"]["value_bytes"] == to_hex(b"4")

    def test_prove_human(self, capsys, scenario_file):
        code = main(["prove", str(scenario_file), "--path", "15"])
        out = capsys.readouterr().out

        assert code == EXIT_SUCCESS
        assert "field: 15" in out
        assert "steps (3):" in out

    def test_prove_missing_path(self, capsys, scenario_file):
        code = main(["prove", str(scenario_file), "--path", "454,5,455"])

        assert code == EXIT_RUNTIME_ERROR
        assert "PATH_NOT_FOUND" in capsys.readouterr().err

    def test_prove_then_verify(self, capsys, tmp_path, scenario_file, scenario_root):
        proof_path = tmp_path / "proof.json"
        assert main(["prove", str(scenario_file), "--path", "454,0,455", "--out", str(proof_path)]) == EXIT_SUCCESS
        ProofRecord.model_validate_json(proof_path.read_text())
        capsys.readouterr()

        code, data = _run_json(capsys, ["verify", str(proof_path), "--root", scenario_root, "--json"])

        assert code == EXIT_SUCCESS
        assert data["ok"] is True
        assert data["path"] == [454, 0, 455]

    def test_verify_wrong_root(self, capsys, tmp_path, scenario_file):
        proof_path = tmp_path / "proof.json"
        main(["prove", str(scenario_file), "--path", "15", "--out", str(proof_path)])
        capsys.readouterr()

        code = main(["verify", str(proof_path), "--root", to_hex(EMPTY_TREE_ROOT)])
        out = capsys.readouterr().out

        assert code == EXIT_VERIFICATION_FAILED
        assert "ok: false" in out

    def test_verify_malformed_root(self, capsys, tmp_path, scenario_file):
        proof_path = tmp_path / "proof.json"
        main(["prove", str(scenario_file), "--path", "15", "--out", str(proof_path)])
        capsys.readouterr()

        code, data = _run_json(capsys, ["verify", str(proof_path), "--root", "0x1234", "--json", "--debug"])

        assert code == EXIT_RUNTIME_ERROR
        assert data["checks"][0]["check_id"] == "root_format"
        assert data["checks"][0]["ok"] is False

    def test_verify_non_hex_root(self, capsys, tmp_path, scenario_file):
        proof_path = tmp_path / "proof.json"
        main(["prove", str(scenario_file), "--path", "15", "--out", str(proof_path)])
        capsys.readouterr()

        code = main(["verify", str(proof_path), "--root", "not-hex"])

        assert code == EXIT_RUNTIME_ERROR
        assert "ok: false" in capsys.readouterr().out

    def test_verify_invalid_record(self, capsys, tmp_path):
        proof_path = tmp_path / "proof.json"
        proof_path.write_text(json.dumps({"path_encoded": "0x810f", "value_bytes": "0x", "proof": [], "directions": [True]}))

        code = main(["verify", str(proof_path), "--root", to_hex(EMPTY_TREE_ROOT)])

        assert code == EXIT_RUNTIME_ERROR
        assert "Invalid proof record" in capsys.readouterr().err

    def test_verify_missing_file(self, capsys, tmp_path):
        code = main(["verify", str(tmp_path / "missing.json"), "--root", to_hex(EMPTY_TREE_ROOT)])
        assert code == EXIT_RUNTIME_ERROR


class TestTreeCommand:
    """Tests for `fixdesc tree`."""

    def test_tree_json(self, capsys, scenario_file, scenario_root):
        code, data = _run_json(capsys, ["tree", str(scenario_file), "--json"])

        assert code == EXIT_SUCCESS
        assert data["type"] == "root"
        assert data["hash"] == scenario_root
        assert data["right"]["path"] == [454, 1, 456]

    def test_tree_human(self, capsys, scenario_file, scenario_root):
        code = main(["tree", str(scenario_file)])
        lines = capsys.readouterr().out.splitlines()

        assert code == EXIT_SUCCESS
        assert lines[0] == f"root: {scenario_root}"
        assert sum(1 for line in lines if line.strip().startswith("leaf ")) == 5


class TestConfigCommand:
    """Tests for `fixdesc config`."""

    def test_init_creates_file(self, capsys, tmp_path):
        assert main(["config", "--init"]) == EXIT_SUCCESS
        assert (tmp_path / "fixdesc.json").exists()

    def test_init_refuses_overwrite(self, capsys, tmp_path):
        (tmp_path / "fixdesc.json").write_text("{}")
        assert main(["config", "--init"]) == EXIT_RUNTIME_ERROR

    def test_show(self, capsys):
        code, data = _run_json(capsys, ["config", "--show"])

        assert code == EXIT_SUCCESS
        assert data["log_level"] == "INFO"
        assert data["default_output_format"] == "human"

    def test_bad_config_file(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"default_output_format": "yaml"}))

        assert main(["--config", str(path), "config", "--show"]) == EXIT_RUNTIME_ERROR
