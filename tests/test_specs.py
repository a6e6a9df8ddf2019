"""
Value Type Tests
================

Compact code strings, code-state rendering and the message record format.
"""

import pytest

from errors import InvalidConfiguration
from specs import (
    NOT_CONFIGURED,
    CodeConfig,
    CodeState,
    MachineState,
    MessageRecord,
    format_plugboard,
    parse_plugboard,
)


class TestCodeConfig:

    @pytest.mark.parametrize("text", [
        "<1,2,3><ODX><I>",
        "<1,2,3><ODX><I><A|B,C|D>",
        "<5,3,1,4><ZZZA><II>",
    ])
    def test_parse_reproduces_string(self, text):
        assert str(CodeConfig.parse(text)) == text

    def test_parse_fields(self):
        config = CodeConfig.parse("<1,2,3><ODX><I><A|B,C|D>")
        assert config.rotor_ids == (1, 2, 3)
        assert config.positions == ("O", "D", "X")
        assert config.reflector_id == "I"
        assert config.plugboard == "ABCD"

    def test_empty_plugboard_group_is_omitted(self):
        assert str(CodeConfig((1, 2), ("A", "B"), "II", "")) == "<1,2><AB><II>"

    @pytest.mark.parametrize("text", [
        "1,2,3 ODX I",
        "<1,2,3><ODX>",
        "<a,b,c><ODX><I>",
        "<1,2,3><ODX><I><AB>",
    ])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(InvalidConfiguration):
            CodeConfig.parse(text)


class TestPlugboardFormat:

    def test_format_and_parse(self):
        assert format_plugboard("ABCD") == "A|B,C|D"
        assert parse_plugboard("A|B,C|D") == "ABCD"
        assert parse_plugboard("") == ""


class TestCodeState:

    def test_renders_window_with_notch_distance(self):
        state = CodeState((1, 2, 3), "ODX", (5, 1, 20), "I")
        assert str(state) == "<1,2,3><O(5),D(1),X(20)><I>"

    def test_renders_plugboard_group(self):
        state = CodeState((1, 2, 3), "ODX", (5, 1, 20), "I", "AZ")
        assert str(state) == "<1,2,3><O(5),D(1),X(20)><I><A|Z>"

    def test_value_comparable_and_hashable(self):
        a = CodeState([1, 2, 3], "ODX", [5, 1, 20], "I")
        b = CodeState((1, 2, 3), "ODX", (5, 1, 20), "I")
        assert a == b
        assert len({a, b}) == 1

    def test_not_configured_sentinel(self):
        assert not NOT_CONFIGURED.is_configured
        assert str(NOT_CONFIGURED) == "<not configured>"
        with pytest.raises(InvalidConfiguration):
            NOT_CONFIGURED.to_config()

    def test_to_config(self):
        state = CodeState((1, 2, 3), "ODX", (5, 1, 20), "I", "AZ")
        assert state.to_config() == CodeConfig((1, 2, 3), ("O", "D", "X"), "I", "AZ")


class TestRecords:

    def test_message_record_string(self):
        assert str(MessageRecord("AAAAA", "BDZGO", 1234)) == "<AAAAA> --> <BDZGO> (1234 nano-seconds)"

    def test_machine_state_string(self):
        text = str(MachineState(5, 2, 0))
        assert "Rotors Defined         : 5" in text
        assert "Reflectors Defined     : 2" in text
        assert "Strings Processed      : 0" in text
        assert "Original Configuration : <not configured>" in text
