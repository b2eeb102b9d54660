"""End-to-end CLI tests: exact output and exit codes."""
from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[2]

_VALID = {
    "meta": {"title": "CLI Test"},
    "roles": [
        {"name": "stage", "type": "stage"},
        {"name": "music", "type": "jukebox", "tracks": {"rain": {"path": "rain.ogg"}}},
    ],
    "steps": [
        ["stage", "bookmark", "start"],
        ["music", "play", "rain"],
        ["stage", "pause"],
        ["music", "stop"],
    ],
}


def _stagecraft(*args: str):
    return subprocess.run(
        [sys.executable, "-m", "stagecraft.cli", *args],
        capture_output=True, text=True, cwd=_REPO_ROOT,
    )


def _write(tmp_path: Path, name: str, data) -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


@pytest.fixture
def valid_script_path(tmp_path: Path) -> Path:
    return _write(tmp_path, "play.json", _VALID)


class TestCLIValidateScript:

    def test_valid_script_exits_0(self, valid_script_path: Path):
        r = _stagecraft("validate-script", "--script", str(valid_script_path))
        assert r.returncode == 0
        assert r.stdout.strip() == "OK: Script is valid"

    def test_step_warnings_do_not_fail(self, tmp_path: Path):
        data = {**_VALID, "steps": [["music", "play", "thunder"]]}
        r = _stagecraft("validate-script", "--script", str(_write(tmp_path, "w.json", data)))
        assert r.returncode == 0
        assert r.stdout.splitlines() == [
            "WARNING: step 0 (music.play): No such track!",
            "OK: Script is valid",
        ]

    def test_rule_violation_exits_1_exact_message(self, tmp_path: Path):
        data = {**_VALID, "steps": [["ghost", "pause"]]}
        r = _stagecraft("validate-script", "--script", str(_write(tmp_path, "bad.json", data)))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: invalid Script"

    def test_contract_violation_exits_1_exact_message(self, tmp_path: Path):
        r = _stagecraft("validate-script", "--script", str(_write(tmp_path, "bad.json", {"roles": []})))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: invalid Script"

    def test_missing_file_exits_1_exact_message(self, tmp_path: Path):
        r = _stagecraft("validate-script", "--script", str(tmp_path / "ghost.json"))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: invalid Script"


class TestCLICompile:

    def test_compile_to_stdout(self, valid_script_path: Path):
        r = _stagecraft("compile", "--script", str(valid_script_path))
        assert r.returncode == 0
        payload = json.loads(r.stdout)
        assert payload["bookmarks"] == [[0, "start"]]
        assert [b["pause"] for b in payload["beats"]] == ["hold", "none"]
        assert payload["beats"][0]["states"]["music"] == {"track": "rain"}
        assert payload["beats"][1]["states"]["music"] == {"track": None}
        assert [b["index"] for b in payload["beats"]] == [0, 1]

    def test_compile_to_file(self, valid_script_path: Path, tmp_path: Path):
        out = tmp_path / "beats.json"
        r = _stagecraft("compile", "--script", str(valid_script_path), "--output", str(out))
        assert r.returncode == 0
        assert json.loads(out.read_text(encoding="utf-8"))["beats"][1]["first_step_index"] == 3

    def test_compile_is_deterministic(self, valid_script_path: Path):
        first = _stagecraft("compile", "--script", str(valid_script_path)).stdout
        assert _stagecraft("compile", "--script", str(valid_script_path)).stdout == first

    def test_compile_unknown_kind(self, tmp_path: Path):
        data = {**_VALID, "steps": [["stage", "dance"]]}
        r = _stagecraft("compile", "--script", str(_write(tmp_path, "bad.json", data)))
        assert r.returncode == 1
        assert r.stdout.startswith("ERROR: No such step 'dance'")

    def test_compile_missing_file(self, tmp_path: Path):
        r = _stagecraft("compile", "--script", str(tmp_path / "ghost.json"))
        assert r.returncode == 1
        assert r.stdout.startswith("ERROR: no such file")


class TestCLIConvertLegacy:

    def test_convert_then_validate(self, tmp_path: Path):
        legacy = _write(tmp_path, "legacy.json", {
            "title": "Old",
            "actors": {"kim": {"type": "character", "name": "Kim", "poses": {}}},
            "script": [{"actor": "kim", "action": "say", "text": "Hello"}],
        })
        out = tmp_path / "play.json"
        r = _stagecraft("convert-legacy", "--legacy", str(legacy), "--output", str(out))
        assert r.returncode == 0
        assert r.stdout.strip() == f"OK: wrote {out}"

        r = _stagecraft("validate-script", "--script", str(out))
        assert r.returncode == 0
        assert r.stdout.strip() == "OK: Script is valid"

    def test_convert_unknown_actor_type(self, tmp_path: Path):
        legacy = _write(tmp_path, "legacy.json", {"actors": {"x": {"type": "ghost"}}})
        r = _stagecraft("convert-legacy", "--legacy", str(legacy), "--output", str(tmp_path / "o.json"))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: No such role type: ghost"
        assert not (tmp_path / "o.json").exists()


def test_no_command_prints_help_and_exits_1():
    r = _stagecraft()
    assert r.returncode == 1
    assert "validate-script" in r.stdout


class TestCLIBrokenDocuments:

    _TRACKLESS = {"roles": [{"name": "j", "type": "jukebox", "tracks": {"t": {}}}], "steps": []}
    _STRING_LAYERS = {
        "roles": [{
            "name": "frame",
            "type": "picture-frame",
            "poses": {
                "dressed": {
                    "type": "composite",
                    "order": ["body"],
                    "layers": {"body": {"optional": False, "variants": {"coat": "coat.png"}}},
                },
            },
        }],
        "steps": [["frame", "show", "dressed", "abc"]],
    }

    def test_validate_track_without_path(self, tmp_path: Path):
        r = _stagecraft("validate-script", "--script", str(_write(tmp_path, "t.json", self._TRACKLESS)))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: invalid Script"
        assert "Traceback" not in r.stderr

    def test_compile_track_without_path(self, tmp_path: Path):
        r = _stagecraft("compile", "--script", str(_write(tmp_path, "t.json", self._TRACKLESS)))
        assert r.returncode == 1
        assert r.stdout.strip() == "ERROR: Track 't' of jukebox 'j' has no path"
        assert "Traceback" not in r.stderr

    def test_validate_non_mapping_layers_warns(self, tmp_path: Path):
        r = _stagecraft("validate-script", "--script", str(_write(tmp_path, "l.json", self._STRING_LAYERS)))
        assert r.returncode == 0
        assert r.stdout.splitlines() == [
            "WARNING: step 0 (frame.show): Layers must be a mapping!",
            "OK: Script is valid",
        ]

    def test_compile_non_mapping_layers(self, tmp_path: Path):
        r = _stagecraft("compile", "--script", str(_write(tmp_path, "l.json", self._STRING_LAYERS)))
        assert r.returncode == 0
        beat = json.loads(r.stdout)["beats"][0]
        assert beat["states"]["frame"] == {"pose": "dressed", "composites": {"dressed": {"body": False}}}
