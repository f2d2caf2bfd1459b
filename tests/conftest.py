import random

import pytest

from ircodec import DecodePipeline, PipelineConfig, TimingSymbol


@pytest.fixture
def pipeline():
    return DecodePipeline()


@pytest.fixture
def two_frame_pipeline():
    return DecodePipeline(config=PipelineConfig(required_frames=2))


@pytest.fixture
def codes_dir(tmp_path):
    return tmp_path / "codes"


def jitter(symbols, pct=10, seed=1):
    """Scale every duration by up to +/- pct percent, like a real receiver."""
    rng = random.Random(seed)

    def shake(value):
        if not value:
            return 0
        delta = value * pct // 100
        return value + rng.randint(-delta, delta)

    return [TimingSymbol(shake(s.mark), shake(s.space)) for s in symbols]
