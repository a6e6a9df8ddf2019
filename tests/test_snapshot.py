"""
Snapshot Tests
==============

Save / load round trips and every way a snapshot document can be broken.
"""

import json

import pytest

from engine import Engine
from errors import MachineNotLoaded, SnapshotError
from history import NO_HISTORY
from snapshot import SUFFIX, load, load_spec_file, spec_to_dict, with_suffix
from specs import NOT_CONFIGURED, CodeConfig


@pytest.fixture
def busy(engine):
    """Two configuration buckets and three messages."""
    engine.config_manual(CodeConfig.parse("<1,2,3><AAA><I>"))
    engine.process("HELLOWORLD")
    engine.process("ATTACK")
    engine.config_manual(CodeConfig.parse("<5,4,3><QEV><II><A|B,C|D>"))
    engine.process("RETREAT")
    return engine


def write(path, doc):
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


class TestRoundTrip:

    def test_round_trip_reproduces_engine(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "session")
        restored = Engine()
        restored.load_snapshot(path)
        assert restored.machine_data() == busy.machine_data()
        assert str(restored.machine_data()) == str(busy.machine_data())
        assert restored.history() == busy.history()

    def test_processing_resumes_from_saved_window(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "session")
        restored = Engine()
        restored.load_snapshot(path)
        assert restored.process("ONEMORE").output == busy.process("ONEMORE").output

    def test_reset_after_load_returns_to_original(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "session")
        restored = Engine()
        restored.load_snapshot(path)
        restored.reset()
        assert restored.machine_data().current == restored.machine_data().original
        assert restored.current_config() == CodeConfig.parse("<5,4,3><QEV><II><A|B,C|D>")

    def test_new_messages_join_the_restored_bucket(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "session")
        restored = Engine()
        restored.load_snapshot(path)
        restored.process("MORE")
        assert restored.history().count("=== Original Code:") == 2
        assert restored.machine_data().strings_processed == 4

    def test_unconfigured_round_trip(self, engine, tmp_path):
        path = engine.save_snapshot(tmp_path / "empty")
        restored = Engine()
        restored.load_snapshot(path)
        assert restored.is_loaded
        assert not restored.is_configured
        assert restored.history() == NO_HISTORY


class TestSaving:

    def test_suffix_is_appended_once(self, configured, tmp_path):
        assert configured.save_snapshot(tmp_path / "a").name == "a" + SUFFIX
        assert configured.save_snapshot(tmp_path / ("b" + SUFFIX)).name == "b" + SUFFIX
        assert with_suffix("c.txt").name == "c.txt" + SUFFIX

    def test_missing_folder_fails(self, configured, tmp_path):
        with pytest.raises(SnapshotError, match="does not exist"):
            configured.save_snapshot(tmp_path / "nowhere" / "snap")

    def test_unloaded_engine_cannot_save(self, tmp_path):
        with pytest.raises(MachineNotLoaded):
            Engine().save_snapshot(tmp_path / "snap")

    def test_document_sections(self, busy, tmp_path):
        doc = json.loads(busy.save_snapshot(tmp_path / "s").read_text(encoding="utf-8"))
        assert set(doc) == {"spec", "machineState", "history"}
        assert doc["machineState"]["stringsProcessed"] == 3
        assert len(doc["history"]) == 2


class TestLoadingFailures:

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="does not exist"):
            load(tmp_path / "ghost")

    def test_empty_file(self, tmp_path):
        path = tmp_path / ("empty" + SUFFIX)
        path.write_text("   ", encoding="utf-8")
        with pytest.raises(SnapshotError, match="empty"):
            load(path)

    def test_not_json(self, tmp_path):
        path = tmp_path / ("bad" + SUFFIX)
        path.write_text("{spec: ", encoding="utf-8")
        with pytest.raises(SnapshotError, match="not valid JSON"):
            load(path)

    def test_not_an_object(self, tmp_path):
        with pytest.raises(SnapshotError, match="JSON object"):
            load(write(tmp_path / ("list" + SUFFIX), [1, 2, 3]))

    def test_missing_spec(self, tmp_path):
        with pytest.raises(SnapshotError, match="no 'spec' section"):
            load(write(tmp_path / ("nospec" + SUFFIX), {"machineState": None, "history": []}))

    def test_malformed_spec_names_the_key(self, spec, tmp_path):
        doc = {"spec": spec_to_dict(spec)}
        del doc["spec"]["rotorsInUse"]
        with pytest.raises(SnapshotError, match="rotorsInUse"):
            load(write(tmp_path / ("s" + SUFFIX), doc))

    def test_broken_rotor_wiring(self, spec, tmp_path):
        doc = {"spec": spec_to_dict(spec)}
        doc["spec"]["rotors"][0]["forward"][0] = doc["spec"]["rotors"][0]["forward"][1]
        with pytest.raises(SnapshotError, match=r"spec.rotors\[0\]"):
            load(write(tmp_path / ("s" + SUFFIX), doc))

    def test_broken_history_names_the_key(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "s")
        doc = json.loads(path.read_text(encoding="utf-8"))
        del doc["history"][1]["messages"][0]["output"]
        with pytest.raises(SnapshotError, match=r"history\[1\].messages\[0\].*'output'"):
            load(write(path, doc))

    @pytest.mark.parametrize("side", ["original", "current"])
    def test_non_string_plugboard_in_machine_state(self, busy, tmp_path, side):
        path = busy.save_snapshot(tmp_path / "s")
        doc = json.loads(path.read_text(encoding="utf-8"))
        doc["machineState"][side]["plugboard"] = 5
        with pytest.raises(SnapshotError, match=rf"machineState\.{side}' key 'plugboard'"):
            Engine().load_snapshot(write(path, doc))

    def test_non_string_plugboard_in_history(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "s")
        doc = json.loads(path.read_text(encoding="utf-8"))
        doc["history"][0]["original"]["plugboard"] = ["A", "B"]
        with pytest.raises(SnapshotError, match=r"history\[0\]\.original' key 'plugboard'"):
            Engine().load_snapshot(write(path, doc))

    def test_null_plugboard_reads_as_empty(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "s")
        doc = json.loads(path.read_text(encoding="utf-8"))
        doc["history"][0]["original"]["plugboard"] = None
        snap = load(write(path, doc))
        assert snap.history[0][0].plugboard == ""

    def test_state_that_does_not_fit_the_spec(self, busy, tmp_path):
        path = busy.save_snapshot(tmp_path / "s")
        doc = json.loads(path.read_text(encoding="utf-8"))
        doc["machineState"]["current"]["positions"] = "??"
        restored = Engine()
        with pytest.raises(SnapshotError):
            restored.load_snapshot(write(path, doc))

    def test_failed_load_leaves_engine_untouched(self, busy, tmp_path):
        before = (busy.machine_data(), busy.history())
        path = tmp_path / ("broken" + SUFFIX)
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(SnapshotError):
            busy.load_snapshot(path)
        assert (busy.machine_data(), busy.history()) == before


class TestTolerance:

    def test_missing_machine_state_is_unconfigured(self, spec, tmp_path):
        path = write(tmp_path / ("s" + SUFFIX), {"spec": spec_to_dict(spec)})
        engine = Engine()
        engine.load_snapshot(path)
        data = engine.machine_data()
        assert data.strings_processed == 0
        assert data.original == NOT_CONFIGURED
        assert engine.history() == NO_HISTORY

    def test_empty_history_is_empty(self, spec, tmp_path):
        path = write(tmp_path / ("s" + SUFFIX), {"spec": spec_to_dict(spec), "history": []})
        snap = load(path)
        assert snap.history == []


class TestSpecFile:

    def test_letter_notation(self, tmp_path):
        path = write(tmp_path / "machine.json", {
            "alphabet": "ABCDEF",
            "rotorsInUse": 2,
            "rotors": [
                {"id": 1, "wiring": "FEDCBA", "notch": "C"},
                {"id": 2, "wiring": "BCDEFA", "notch": "A"},
            ],
            "reflectors": [{"id": "I", "wiring": "BADCFE"}],
        })
        spec = load_spec_file(path)
        assert spec.alphabet.letters == "ABCDEF"
        assert spec.rotor(1).notch_index == 2
        assert spec.reflector("I").mapping == (1, 0, 3, 2, 5, 4)

        engine = Engine()
        engine.load_machine(spec)
        engine.config_manual(CodeConfig.parse("<2,1><AB><I>"))
        cipher = engine.process("ABCDEF").output
        engine.reset()
        assert engine.process(cipher).output == "ABCDEF"

    def test_rotor_ids_must_be_contiguous(self, tmp_path):
        path = write(tmp_path / "machine.json", {
            "alphabet": "ABCD",
            "rotorsInUse": 1,
            "rotors": [{"id": 2, "wiring": "BCDA", "notch": "A"}],
            "reflectors": [{"id": "I", "wiring": "BADC"}],
        })
        with pytest.raises(SnapshotError, match="rotor ids"):
            load_spec_file(path)

    def test_reflector_must_be_an_involution(self, tmp_path):
        path = write(tmp_path / "machine.json", {
            "alphabet": "ABCD",
            "rotorsInUse": 1,
            "rotors": [{"id": 1, "wiring": "BCDA", "notch": "A"}],
            "reflectors": [{"id": "I", "wiring": "BCDA"}],
        })
        with pytest.raises(SnapshotError, match="involution"):
            load_spec_file(path)

    def test_two_column_notation(self, tmp_path):
        path = write(tmp_path / "machine.json", {
            "alphabet": "ABCD",
            "rotorsInUse": 1,
            "rotors": [{"id": 1, "right": "DABC", "left": "BCDA", "notchIndex": 2}],
            "reflectors": [{"id": "I", "wiring": "BADC"}],
        })
        spec = load_spec_file(path)
        assert spec.rotor(1).window == "DABC"
        assert spec.rotor(1).forward_mapping == (2, 3, 0, 1)

        engine = Engine()
        engine.load_machine(spec)
        engine.config_manual(CodeConfig.parse("<1><D><I>"))
        cipher = engine.process("ABCDDCBA").output
        engine.reset()
        assert engine.process(cipher).output == "ABCDDCBA"

    def test_two_column_notation_needs_both_columns(self, tmp_path):
        path = write(tmp_path / "machine.json", {
            "alphabet": "ABCD",
            "rotorsInUse": 1,
            "rotors": [{"id": 1, "right": "DABC", "notchIndex": 2}],
            "reflectors": [{"id": "I", "wiring": "BADC"}],
        })
        with pytest.raises(SnapshotError, match="'left'"):
            load_spec_file(path)
