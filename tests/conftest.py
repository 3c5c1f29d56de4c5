import pytest

from grain_harvest.models.cred import CredTimeSlice


@pytest.fixture
def foo():
    return "foo"


@pytest.fixture
def bar():
    return "bar"


@pytest.fixture
def cred_history(foo, bar):
    """Three intervals; foo has no cred in the last one"""
    return (
        CredTimeSlice(interval_end_ms=10, cred={foo: 9, bar: 1}),
        CredTimeSlice(interval_end_ms=20, cred={foo: 1, bar: 1}),
        CredTimeSlice(interval_end_ms=30, cred={bar: 2}),
    )
