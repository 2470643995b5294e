"""
CLI Unit Tests
Tests for zkpool_cli/main.py and zkpool_cli/commands/
"""
import json

import pytest

from core.config.runtime import RuntimeConfig
from core.crypto.hashing import node_to_hex
from core.merkle.merkle_proofs import MembershipProof, verify_membership_proof
from core.merkle.zeros import POSEIDON2_BN254_ZEROS
from zkpool_cli.commands.tree import read_leaves_file
from zkpool_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)


LEAVES = ["0x01", "0x02", "0x03", "0x04", "0x05"]


def expected_tree(height, leaves):
    tree = RuntimeConfig.from_dict({"tree": {"height": height}}).create_tree()
    for leaf in leaves:
        tree.insert(leaf)
    return tree


def run_prove(capsys, *extra):
    code = main(["--height", "4", "prove", *extra, *LEAVES])
    return code, capsys.readouterr()


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_returns_error(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_prove_requires_target(self):
        parser = create_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["prove", "0x01"])

    def test_prove_target_is_exclusive(self):
        parser = create_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["prove", "--leaf", "0x01", "--index", "0", "0x01"])


class TestRootCommand:
    """Tests for `zkpool root`."""

    def test_prints_root(self, capsys):
        code = main(["--height", "4", "root", *LEAVES])
        out = capsys.readouterr().out.strip()

        assert code == EXIT_SUCCESS
        assert out == node_to_hex(expected_tree(4, LEAVES).root())

    def test_empty_tree_root(self, capsys):
        code = main(["--height", "3", "root"])
        out = capsys.readouterr().out.strip()

        assert code == EXIT_SUCCESS
        assert out == node_to_hex(expected_tree(3, []).root())

    def test_json_output(self, capsys):
        main(["--height", "4", "root", "--json", *LEAVES])
        data = json.loads(capsys.readouterr().out)

        assert data["leaf_count"] == 5
        assert data["height"] == 4

    def test_leaves_file(self, tmp_path, capsys):
        path = tmp_path / "leaves.txt"
        path.write_text("# deposits\n0x03\n\n0x04  # late\n0x05\n")

        main(["--height", "4", "root", "0x01", "0x02", "--leaves-file", str(path)])
        out = capsys.readouterr().out.strip()

        assert out == node_to_hex(expected_tree(4, LEAVES).root())

    def test_bad_leaf_is_runtime_error(self, capsys):
        code = main(["--height", "4", "root", "0xzz"])

        assert code == EXIT_RUNTIME_ERROR
        assert "Error" in capsys.readouterr().err

    def test_poseidon2_table_needs_poseidon2_hash(self, capsys):
        code = main(["--height", "3", "--zero-table", "poseidon2", "root", "0x01"])

        assert code == EXIT_RUNTIME_ERROR
        assert "does not match the tree hash" in capsys.readouterr().err

    def test_too_many_leaves_is_runtime_error(self, capsys):
        code = main(["--height", "1", "root", "1", "2", "3"])

        assert code == EXIT_RUNTIME_ERROR
        assert "full" in capsys.readouterr().err


class TestProveCommand:
    """Tests for `zkpool prove`."""

    def test_prove_by_leaf(self, capsys):
        code, captured = run_prove(capsys, "--leaf", "0x03")
        proof = MembershipProof.from_dict(json.loads(captured.out))

        assert code == EXIT_SUCCESS
        assert proof.index == 2
        assert proof.root == expected_tree(4, LEAVES).root()
        assert verify_membership_proof(proof)

    def test_prove_by_decimal_leaf(self, capsys):
        code, captured = run_prove(capsys, "--leaf", "3")

        assert code == EXIT_SUCCESS
        assert json.loads(captured.out)["index"] == 2

    def test_prove_by_index(self, capsys):
        code, captured = run_prove(capsys, "--index", "4")

        assert code == EXIT_SUCCESS
        assert json.loads(captured.out)["leaf"] == node_to_hex(5)

    def test_circuit_output(self, capsys):
        code, captured = run_prove(capsys, "--leaf", "0x02", "--circuit")
        data = json.loads(captured.out)

        assert code == EXIT_SUCCESS
        assert set(data) == {"root", "merkle_proof", "is_even"}
        assert data["is_even"] == [False, True, True, True]
        assert len(data["merkle_proof"]) == 4

    def test_missing_leaf(self, capsys):
        code, captured = run_prove(capsys, "--leaf", "0x99")

        assert code == EXIT_RUNTIME_ERROR
        assert "not in the tree" in captured.err

    def test_index_out_of_range(self, capsys):
        code, captured = run_prove(capsys, "--index", "5")

        assert code == EXIT_RUNTIME_ERROR
        assert "No leaf at index 5" in captured.err

    def test_write_to_file(self, tmp_path, capsys):
        out = tmp_path / "proof.json"
        code, _ = run_prove(capsys, "--leaf", "0x01", "--out", str(out))

        assert code == EXIT_SUCCESS
        assert MembershipProof.from_dict(json.loads(out.read_text())).index == 0


class TestVerifyCommand:
    """Tests for `zkpool verify`."""

    @pytest.fixture
    def proof_file(self, tmp_path, capsys):
        path = tmp_path / "proof.json"
        run_prove(capsys, "--leaf", "0x04", "--out", str(path))
        return path

    def test_valid_proof(self, proof_file, capsys):
        code = main(["verify", str(proof_file)])
        out = capsys.readouterr().out

        assert code == EXIT_SUCCESS
        assert "proof_ok: true" in out

    def test_expected_root(self, proof_file, capsys):
        root = node_to_hex(expected_tree(4, LEAVES).root())

        assert main(["verify", str(proof_file), "--root", root]) == EXIT_SUCCESS
        assert main(["verify", str(proof_file), "--root", "0x01"]) == EXIT_VERIFICATION_FAILED

    def test_tampered_proof(self, proof_file, capsys):
        data = json.loads(proof_file.read_text())
        data["leaf"] = node_to_hex(99)
        proof_file.write_text(json.dumps(data))

        code = main(["verify", "--json", str(proof_file)])
        report = json.loads(capsys.readouterr().out)

        assert code == EXIT_VERIFICATION_FAILED
        assert report["proof_ok"] is False
        assert "root_matches" not in report
        assert report["error"]["code"] == "MERKLE_PROOF_INVALID"

    def test_rejection_reason_is_printed(self, proof_file, capsys):
        data = json.loads(proof_file.read_text())
        data["root"] = node_to_hex(1)
        proof_file.write_text(json.dumps(data))

        code = main(["verify", str(proof_file)])
        out = capsys.readouterr().out

        assert code == EXIT_VERIFICATION_FAILED
        assert "reason: Path reconstructs root" in out

    def test_missing_file(self, tmp_path, capsys):
        code = main(["verify", str(tmp_path / "nope.json")])

        assert code == EXIT_RUNTIME_ERROR
        assert "Error loading proof" in capsys.readouterr().err

    def test_malformed_proof(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"root": "0x01", "leaf": "0x02", "index": 0, "pathIndices": [0]}))

        assert main(["verify", str(path)]) == EXIT_RUNTIME_ERROR

    def test_not_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("not json")

        assert main(["verify", str(path)]) == EXIT_RUNTIME_ERROR


class TestZerosCommand:
    """Tests for `zkpool zeros`."""

    def test_computed_zeros(self, capsys):
        code = main(["--height", "2", "zeros", "--json"])
        data = json.loads(capsys.readouterr().out)

        assert code == EXIT_SUCCESS
        assert data["height"] == 2
        assert data["zeros"] == [node_to_hex(z) for z in expected_tree(2, []).zeros]

    def test_poseidon2_zeros(self, capsys):
        main(["--height", "3", "--zero-table", "poseidon2", "zeros"])
        lines = capsys.readouterr().out.splitlines()

        assert len(lines) == 4
        assert lines[0].split()[1] == node_to_hex(POSEIDON2_BN254_ZEROS[0])

    def test_subcommand_height(self, capsys):
        code = main(["zeros", "--height", "4", "--json"])
        data = json.loads(capsys.readouterr().out)

        assert code == EXIT_SUCCESS
        assert data["height"] == 4
        assert len(data["zeros"]) == 5

    def test_subcommand_height_wins_over_global(self, capsys):
        main(["--height", "2", "zeros", "--height", "6", "--json"])

        assert json.loads(capsys.readouterr().out)["height"] == 6

    def test_subcommand_height_invalid(self, capsys):
        assert main(["zeros", "--height", "-3"]) == EXIT_RUNTIME_ERROR

    def test_env_height(self, monkeypatch, capsys):
        monkeypatch.setenv("ZKPOOL_TREE_HEIGHT", "5")
        main(["zeros", "--json"])

        assert len(json.loads(capsys.readouterr().out)["zeros"]) == 6


class TestConfigCommand:
    """Tests for `zkpool config` and --config."""

    def test_init_creates_template(self, tmp_path, capsys):
        path = tmp_path / "zkpool.yaml"

        assert main(["config", "--init", "--path", str(path)]) == EXIT_SUCCESS
        assert RuntimeConfig.from_yaml(path).tree.height == 20

    def test_init_refuses_overwrite(self, tmp_path, capsys):
        path = tmp_path / "zkpool.yaml"
        path.write_text("log_level: INFO\n")

        assert main(["config", "--init", "--path", str(path)]) == EXIT_RUNTIME_ERROR

    def test_show(self, capsys):
        main(["--height", "6", "config", "--show"])
        data = json.loads(capsys.readouterr().out)

        assert data["tree"]["height"] == 6

    def test_config_file_is_used(self, tmp_path, capsys):
        path = tmp_path / "zkpool.yaml"
        path.write_text("tree:\n  height: 3\n")

        main(["--config", str(path), "zeros", "--json"])

        assert json.loads(capsys.readouterr().out)["height"] == 3

    def test_bad_config_file(self, tmp_path, capsys):
        path = tmp_path / "zkpool.yaml"
        path.write_text("tree:\n  height: -1\n")

        assert main(["--config", str(path), "zeros"]) == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err


class TestReadLeavesFile:
    """Tests for the leaves file reader."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_leaves_file(tmp_path / "missing.txt")
