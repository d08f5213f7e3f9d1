"""Testing utilities for lazytreelib consumers."""

from .fixtures import FakeClock, RecordingFetchProvider

__all__ = ['FakeClock', 'RecordingFetchProvider']
