"""Shared fixtures: the built-in Enigma I catalog and engines built on it."""

import pytest

from engine import Engine
from specs import CodeConfig
from suites import legacy_spec


@pytest.fixture
def spec():
    return legacy_spec()


@pytest.fixture
def engine(spec):
    eng = Engine()
    eng.load_machine(spec)
    return eng


@pytest.fixture
def configured(engine):
    engine.config_manual(CodeConfig.parse("<1,2,3><AAA><I>"))
    return engine
