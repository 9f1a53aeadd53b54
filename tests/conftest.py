import numpy as np
import pytest

from blend_api import config


@pytest.fixture
def rng():
	return np.random.default_rng(1234)


@pytest.fixture
def random_bracket(rng):
	shape = (7, 5, 4)
	return tuple(rng.integers(0, 256, size=shape, dtype=np.uint8) for _ in range(3))


@pytest.fixture
def data_dirs(tmp_path, monkeypatch):
	monkeypatch.setattr(config, "DATA_DIR", tmp_path / "data")
	monkeypatch.setattr(config, "JOBS_DIR", tmp_path / "jobs")
	return tmp_path
