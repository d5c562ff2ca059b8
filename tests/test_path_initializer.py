"""경로 기반 초기 추정 테스트"""

import sys
from pathlib import Path

import numpy as np
import cv2
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dicinit.core import FieldContext, Subset, REF_INTENSITIES, DEF_INTENSITIES
from dicinit.core.initial_guess import PathIndex, PathInitializer
from dicinit.models import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    NORMAL_STRAIN_X,
    SHEAR_STRAIN_XY,
    INITIALIZE_SUCCESSFUL,
    new_deformation,
)


class BowlSubset:
    """(u, v, theta)가 target에 가까울수록 gamma가 작은 평가기"""

    def __init__(self, target=(0.0, 0.0, 0.0), theta_weight=100.0):
        self.target = np.asarray(target, dtype=np.float64)
        self.weights = np.array([1.0, 1.0, theta_weight])
        self.calls = []
        self._current = None

    def initialize(self, image, role, deformation):
        assert role == DEF_INTENSITIES
        self._current = deformation[:3].copy()
        self.calls.append(tuple(self._current))

    def gamma(self):
        d = self._current - self.target
        return float(np.sum(self.weights * d * d))


class ConstantSubset:
    """모든 후보에 같은 gamma"""

    def __init__(self, value=1.0):
        self.value = value
        self.calls = []

    def initialize(self, image, role, deformation):
        self.calls.append(tuple(deformation[:3]))

    def gamma(self):
        return self.value


def make_speckle(size=128, seed=42):
    rng = np.random.default_rng(seed)
    ref = rng.random((size, size)) * 200 + 20
    return cv2.GaussianBlur(ref, (5, 5), 1.5)


def shift_image(image, dx, dy):
    M = np.float64([[1, 0, dx], [0, 1, dy]])
    h, w = image.shape
    return cv2.warpAffine(image, M, (w, h), flags=cv2.INTER_LINEAR,
                          borderMode=cv2.BORDER_REFLECT)


def path_rows(n=60, seed=0):
    rng = np.random.default_rng(seed)
    return np.column_stack([rng.uniform(-5, 5, n),
                            rng.uniform(-5, 5, n),
                            rng.uniform(-0.1, 0.1, n)])


DUMMY_IMAGE = np.zeros((8, 8))


def test_unseeded_search_is_global_minimum():
    index = PathIndex(path_rows(), num_neighbors=6)
    subset = BowlSubset(target=(1.3, -2.1, 0.04))
    init = PathInitializer(FieldContext([0]), subset, index)

    deformation = new_deformation()
    best = init.search_all(DUMMY_IMAGE, deformation)

    assert len(subset.calls) == index.num_triads
    scores = [BowlSubset(target=(1.3, -2.1, 0.04)).weights.dot(
        (np.array(p) - subset.target) ** 2) for p in index.points]
    assert best <= min(scores) + 1e-12
    assert tuple(deformation[:3]) in {tuple(p) for p in index.points}


def test_seeded_search_not_worse_than_seed():
    index = PathIndex(path_rows(seed=5), num_neighbors=8)
    subset = BowlSubset(target=(2.0, 2.0, 0.05))
    init = PathInitializer(FieldContext([0]), subset, index)

    seed = (1.6, 2.4, 0.02)
    seed_gamma = float(subset.weights.dot((np.array(seed) - subset.target) ** 2))

    deformation = new_deformation()
    best = init.search_from_seed(DUMMY_IMAGE, deformation, *seed)

    assert best <= seed_gamma
    # seed 1회 + 이웃 k회
    assert len(subset.calls) == 1 + index.num_neighbors
    assert subset.calls[0] == seed


def test_seeded_search_candidates_are_neighbors_of_closest():
    index = PathIndex(path_rows(seed=9), num_neighbors=4)
    subset = BowlSubset()
    init = PathInitializer(FieldContext([0]), subset, index)

    seed = (0.3, -0.2, 0.0)
    init.search_from_seed(DUMMY_IMAGE, new_deformation(), *seed)

    tid, _ = index.closest_triad(*seed)
    expected = [tuple(index.points[n]) for n in index.neighbors(tid)]
    assert subset.calls[1:] == expected


def test_tie_keeps_first_seen():
    index = PathIndex(path_rows(), num_neighbors=6)
    subset = ConstantSubset(0.5)
    init = PathInitializer(FieldContext([0]), subset, index)

    deformation = new_deformation()
    seed = (0.1, 0.1, 0.01)
    assert init.search_from_seed(DUMMY_IMAGE, deformation, *seed) == 0.5
    assert tuple(deformation[:3]) == seed

    deformation = new_deformation()
    init.search_all(DUMMY_IMAGE, deformation)
    assert tuple(deformation[:3]) == tuple(index.points[0])


def test_strain_entries_untouched():
    index = PathIndex(path_rows(), num_neighbors=3)
    init = PathInitializer(FieldContext([0]), BowlSubset(), index)

    deformation = new_deformation()
    deformation[NORMAL_STRAIN_X] = 0.01
    deformation[SHEAR_STRAIN_XY] = -0.02
    init.search_all(DUMMY_IMAGE, deformation)
    assert deformation[NORMAL_STRAIN_X] == 0.01
    assert deformation[SHEAR_STRAIN_XY] == -0.02


def test_null_image_rejected():
    index = PathIndex(path_rows(), num_neighbors=3)
    init = PathInitializer(FieldContext([0]), BowlSubset(), index)
    with pytest.raises(ValueError):
        init.search_all(None, new_deformation())
    with pytest.raises(ValueError):
        init.search_from_seed(None, new_deformation(), 0.0, 0.0, 0.0)


def test_three_triad_file_with_real_subset(tmp_path):
    """3행 경로 파일, 이웃 5 → 3, 1px x 이동 이미지에서 (1, 0, 0) 선택"""
    path = tmp_path / "path.txt"
    path.write_text("0.0 0.0 0.0\n1.0 0.0 0.0\n0.0 1.0 0.0\n", encoding='utf-8')

    ref = make_speckle()
    deformed = shift_image(ref, 1.0, 0.0)

    subset = Subset(64, 64, subset_size=21)
    subset.initialize(ref, REF_INTENSITIES, new_deformation())

    ctx = FieldContext([0])
    ctx.advance_frame(deformed)
    init = PathInitializer(ctx, subset, path, num_neighbors=5)
    assert init.num_neighbors == 3

    scores = {}
    for p in init.path_index.points:
        d = new_deformation()
        d[:3] = p
        subset.initialize(deformed, DEF_INTENSITIES, d)
        scores[tuple(p)] = subset.gamma()

    deformation = new_deformation()
    best = init.search_all(deformed, deformation)

    assert tuple(deformation[:3]) == (1.0, 0.0, 0.0)
    assert best == pytest.approx(min(scores.values()))
    assert best < 1e-6


def test_dispatch_full_search_without_prior():
    index = PathIndex(path_rows(), num_neighbors=4)
    subset = BowlSubset(target=(1.0, 1.0, 0.0))
    ctx = FieldContext([0])
    ctx.advance_frame(DUMMY_IMAGE)
    ctx.advance_frame(DUMMY_IMAGE)
    init = PathInitializer(ctx, subset, index)

    # frame 1, sigma == -1 → 전체 탐색
    status = init.initial_guess(0, new_deformation())
    assert status == INITIALIZE_SUCCESSFUL
    assert len(subset.calls) == index.num_triads


def test_dispatch_full_search_on_first_frame():
    index = PathIndex(path_rows(), num_neighbors=4)
    subset = BowlSubset()
    ctx = FieldContext([0])
    ctx.advance_frame(DUMMY_IMAGE)
    ctx.store_solution(0, new_deformation(), sigma=0.01)
    init = PathInitializer(ctx, subset, index)

    init.initial_guess(0, new_deformation())
    assert len(subset.calls) == index.num_triads


def test_dispatch_seeded_search_with_prior():
    index = PathIndex(path_rows(), num_neighbors=4)
    subset = BowlSubset(target=(1.0, 1.0, 0.0))
    ctx = FieldContext([0])
    ctx.advance_frame(DUMMY_IMAGE)
    prior = new_deformation()
    prior[DISPLACEMENT_X], prior[DISPLACEMENT_Y], prior[ROTATION_Z] = 0.8, 1.2, 0.01
    ctx.store_solution(0, prior, sigma=0.02)
    ctx.advance_frame(DUMMY_IMAGE)
    init = PathInitializer(ctx, subset, index)

    deformation = new_deformation()
    status = init.initial_guess(0, deformation)

    assert status == INITIALIZE_SUCCESSFUL
    assert subset.calls[0] == (0.8, 1.2, 0.01)
    assert len(subset.calls) == 1 + index.num_neighbors
    assert init.last_gamma <= subset.weights.dot((prior[:3] - subset.target) ** 2)


def test_subset_mapping_per_id():
    index = PathIndex(path_rows(), num_neighbors=4)
    subsets = {0: BowlSubset(), 1: BowlSubset()}
    ctx = FieldContext([0, 1])
    ctx.advance_frame(DUMMY_IMAGE)
    init = PathInitializer(ctx, subsets, index)

    init.initial_guess(1, new_deformation())
    assert len(subsets[0].calls) == 0
    assert len(subsets[1].calls) == index.num_triads


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
