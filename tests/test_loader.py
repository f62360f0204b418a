# tests/test_loader.py

from __future__ import annotations

import pytest

from batch_migrate.errors import HooksLoadError
from batch_migrate.migration.loader import load_hooks

from . import fakes


def test_loads_instance() -> None:
    assert load_hooks("tests.fakes:DEFAULT_HOOKS") is fakes.DEFAULT_HOOKS


def test_builds_from_class_and_factory() -> None:
    from_class = load_hooks("tests.fakes:RecordingHooks", delay=0.5)
    assert isinstance(from_class, fakes.RecordingHooks)
    assert from_class.delay == 0.5

    from_factory = load_hooks("tests.fakes:make_hooks")
    assert isinstance(from_factory, fakes.RecordingHooks)


@pytest.mark.parametrize(
    ("spec", "message"),
    [
        ("tests.fakes", "Expected 'package.module:attr'"),
        ("no_such_module_xyz:hooks", "Cannot import hooks module"),
        ("tests.fakes:nope", "has no attribute"),
        ("tests.fakes:SpyTaskStore", "does not provide"),
    ],
)
def test_bad_specs(spec, message) -> None:
    with pytest.raises(HooksLoadError, match=message):
        load_hooks(spec)


def test_instance_rejects_kwargs() -> None:
    with pytest.raises(HooksLoadError, match="takes no arguments"):
        load_hooks("tests.fakes:DEFAULT_HOOKS", delay=1.0)
