"""경로 triad 인덱스 테스트"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dicinit.core.initial_guess import PathIndex, build_triads
from dicinit.io.loader import load_path_file, count_lines


def write_path_file(path, rows):
    with open(path, 'w', encoding='utf-8') as f:
        for u, v, t in rows:
            f.write(f"{u} {v} {t}\n")
    return path


def random_rows(n, seed=0):
    rng = np.random.default_rng(seed)
    rows = np.empty((n, 3))
    rows[:, 0] = rng.uniform(-10, 10, n)
    rows[:, 1] = rng.uniform(-10, 10, n)
    rows[:, 2] = rng.uniform(-0.3, 0.3, n)
    return rows


def test_large_input_is_quantized():
    """7행 이상: u, v는 0.5 배수, theta는 0.01 배수"""
    rows = random_rows(200)
    index = PathIndex(rows, num_neighbors=6)

    pts = index.points
    assert np.allclose(pts[:, 0] * 2, np.round(pts[:, 0] * 2), atol=1e-9)
    assert np.allclose(pts[:, 1] * 2, np.round(pts[:, 1] * 2), atol=1e-9)
    assert np.allclose(pts[:, 2] * 100, np.round(pts[:, 2] * 100), atol=1e-9)
    assert 1 <= index.num_triads <= len(rows)


def test_quantization_rounds_half_up():
    rows = [(0.24, 0.25, 0.004), (0.74, -0.26, 0.006)] + [(5.0, 5.0, 0.0)] * 5
    triads = build_triads(rows)
    coords = {tr.as_tuple() for tr in triads}
    assert (0.0, 0.5, 0.0) in coords
    assert (0.5, -0.5, 0.01) in coords
    assert (5.0, 5.0, 0.0) in coords
    assert len(triads) == 3


def test_small_input_kept_verbatim():
    """6행 이하: 정밀도 유지, 완전 중복만 제거"""
    rows = [(0.123, 4.567, 0.0012),
            (0.123, 4.567, 0.0012),
            (1.9, -2.2, 0.031),
            (0.123, 4.567, 0.0013)]
    index = PathIndex(rows, num_neighbors=2)

    assert index.num_triads == 3
    stored = {tuple(p) for p in index.points.tolist()}
    assert stored == {(0.123, 4.567, 0.0012), (1.9, -2.2, 0.031), (0.123, 4.567, 0.0013)}


def test_same_uv_different_theta_kept():
    """(u, v)가 같고 theta만 다른 triad도 별개로 저장"""
    rows = [(1.0, 1.0, 0.0), (1.0, 1.0, 0.1), (1.0, 1.0, 0.2)]
    index = PathIndex(rows, num_neighbors=3)
    assert index.num_triads == 3
    assert [tr.t for tr in index.triads] == [0.0, 0.1, 0.2]


def test_triads_sorted_lexicographically():
    rows = random_rows(50, seed=3)
    index = PathIndex(rows)
    tuples = [tr.as_tuple() for tr in index.triads]
    assert tuples == sorted(tuples)


def test_closest_triad_exact_point():
    rows = random_rows(100, seed=1)
    index = PathIndex(rows, num_neighbors=4)

    for tid in (0, index.num_triads // 2, index.num_triads - 1):
        u, v, t = index.points[tid]
        found, dist_sqr = index.closest_triad(u, v, t)
        assert found == tid
        assert dist_sqr == 0.0


def test_closest_triad_distance_squared():
    index = PathIndex([(0.0, 0.0, 0.0), (3.0, 0.0, 0.0)], num_neighbors=1)
    tid, dist_sqr = index.closest_triad(0.0, 2.0, 0.0)
    assert tid == 0
    assert dist_sqr == pytest.approx(4.0)


def test_closest_triad_distance_squared_is_exact():
    rows = random_rows(40, seed=6)
    index = PathIndex(rows, num_neighbors=3)
    rng = np.random.default_rng(11)
    for u, v, t in zip(rng.uniform(-10, 10, 20), rng.uniform(-10, 10, 20),
                       rng.uniform(-0.3, 0.3, 20)):
        tid, dist_sqr = index.closest_triad(u, v, t)
        d = index.points[tid] - np.array([u, v, t])
        assert dist_sqr == float(np.sum(d * d))
        # 모든 triad 중 최소
        all_d = index.points - np.array([u, v, t])
        assert dist_sqr <= np.min(np.sum(all_d * all_d, axis=1)) + 1e-12


def test_neighbor_count_clamped(tmp_path):
    path = write_path_file(tmp_path / "path.txt",
                           [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)])
    index = PathIndex.from_file(path, num_neighbors=5)
    assert index.num_triads == 3
    assert index.num_neighbors == 3
    assert index.neighbors(0).shape == (3,)


def test_neighbor_table_includes_self_first():
    rows = random_rows(80, seed=2)
    index = PathIndex(rows, num_neighbors=5)
    for tid in range(index.num_triads):
        nbrs = index.neighbors(tid)
        assert len(set(nbrs.tolist())) == 5
        assert index.neighbor(tid, 0) == tid


def test_index_is_read_only():
    index = PathIndex(random_rows(20))
    with pytest.raises(ValueError):
        index.points[0, 0] = 99.0


def test_invalid_construction(tmp_path):
    with pytest.raises(FileNotFoundError):
        PathIndex.from_file(tmp_path / "missing.txt")

    empty = tmp_path / "empty.txt"
    empty.write_text("\n\n", encoding='utf-8')
    with pytest.raises(ValueError):
        PathIndex.from_file(empty)

    bad = tmp_path / "bad.txt"
    bad.write_text("0.0 1.0\n", encoding='utf-8')
    with pytest.raises(ValueError):
        PathIndex.from_file(bad)

    with pytest.raises(ValueError):
        PathIndex([(0.0, 0.0, 0.0)], num_neighbors=0)


def test_load_path_file_prescan(tmp_path):
    path = tmp_path / "path.txt"
    path.write_text("0 0 0\n\n1.5   2.5\t0.01\n-1 -1 -0.02\n", encoding='utf-8')
    assert count_lines(path) == 3
    rows = load_path_file(path)
    assert rows.shape == (3, 3)
    assert rows[1].tolist() == [1.5, 2.5, 0.01]


def test_write_to_text_file(tmp_path):
    index = PathIndex(random_rows(30, seed=4))
    out = index.write_to_text_file(tmp_path / "dump" / "triads.txt")

    lines = out.read_text(encoding='utf-8').strip().splitlines()
    assert len(lines) == index.num_triads
    dumped = np.array([[float(x) for x in line.split()] for line in lines])
    assert np.array_equal(dumped, index.points)


def test_triad_dump_rows_are_plain_numbers(tmp_path):
    index = PathIndex([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)], num_neighbors=5)
    out = index.write_to_text_file(tmp_path / "triads.txt")

    lines = out.read_text(encoding='utf-8').splitlines()
    assert lines == ["0.0 0.0 0.0", "0.0 1.0 0.0", "1.0 0.0 0.0"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
