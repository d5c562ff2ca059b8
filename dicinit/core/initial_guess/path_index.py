"""
경로 triad 공간 인덱스 모듈

과거에 관측되었거나 예상되는 변형 경로 (u, v, theta) 샘플을
양자화/중복 제거한 뒤 3D point cloud와 KD-tree로 색인한다.

- 입력 행 수 > 6: u, v는 0.5 px, theta는 0.01 rad 단위로 반올림
- 입력 행 수 <= 6: 원본 정밀도 유지 (완전 중복만 제거)
- triad id = (u, v, t) 사전식 정렬 순서
- 각 triad의 k-최근접 이웃 표를 생성 시 1회 계산 (자기 자신 포함)

생성 후에는 읽기 전용이므로 여러 워커가 동시에 질의해도 안전하다.
"""

import logging
from pathlib import Path
from typing import Iterable, Tuple, Union

import numpy as np
from scipy.spatial import cKDTree

from ...models.deformation import Triad, QUANTIZE_MIN_ROWS
from ...io.loader import load_path_file, write_points

_logger = logging.getLogger(__name__)

# KD-tree leaf 크기
_LEAF_SIZE = 10


def build_triads(rows: Union[np.ndarray, Iterable]) -> Tuple[Triad, ...]:
    """
    (u, v, theta) 행 → 양자화/중복 제거/정렬된 triad 튜플
    """
    rows = np.asarray(rows, dtype=np.float64).reshape(-1, 3)
    num_lines = len(rows)
    quantize = num_lines > QUANTIZE_MIN_ROWS

    triads = set()
    for u, v, t in rows:
        if quantize:
            triads.add(Triad.quantized(float(u), float(v), float(t)))
        else:
            triads.add(Triad(float(u), float(v), float(t)))

    _logger.debug(f"triad 필터링: {num_lines} → {len(triads)} "
                  f"(양자화 {'적용' if quantize else '미적용'})")
    return tuple(sorted(triads))


class PathIndex:
    """
    triad point cloud + KD-tree + 이웃 표

    Usage:
        index = PathIndex.from_file("path.txt", num_neighbors=6)
        tid, dist_sqr = index.closest_triad(1.2, -0.4, 0.03)
        for nid in index.neighbors(tid):
            u, v, t = index.points[nid]
    """

    def __init__(self, rows, num_neighbors: int = 6):
        """
        Args:
            rows: (n, 3) 'u v theta' 배열 또는 행 시퀀스
            num_neighbors: triad당 이웃 수 (triad 수보다 크면 triad 수로 제한)

        Raises:
            ValueError: 이웃 수 <= 0 또는 triad 없음
        """
        if num_neighbors <= 0:
            raise ValueError(f"이웃 수는 양수여야 합니다: {num_neighbors}")

        rows = np.asarray(rows, dtype=np.float64)
        if rows.size == 0:
            raise ValueError("경로 triad가 없습니다")
        if rows.ndim != 2 or rows.shape[1] != 3:
            raise ValueError(f"경로 데이터는 (n, 3) 형상이어야 합니다: {rows.shape}")

        self._triads = build_triads(rows)
        self.num_input_rows = len(rows)

        num_triads = len(self._triads)
        if num_triads == 0:
            raise ValueError("필터링 후 triad가 없습니다")

        if num_neighbors > num_triads:
            _logger.debug(f"이웃 수 {num_neighbors} → {num_triads} (triad 수로 제한)")
            num_neighbors = num_triads
        self._num_neighbors = int(num_neighbors)

        points = np.array([tr.as_tuple() for tr in self._triads], dtype=np.float64)
        points.setflags(write=False)
        self._points = points

        _logger.debug("KD-tree 생성")
        self._tree = cKDTree(points, leafsize=_LEAF_SIZE)

        # 이웃 표: 각 triad 좌표로 k-NN 질의 (거리 0인 자기 자신이 보통 첫 번째)
        _, idx = self._tree.query(points, k=self._num_neighbors)
        neighbors = np.asarray(idx, dtype=np.int64).reshape(num_triads, self._num_neighbors)
        neighbors.setflags(write=False)
        self._neighbors = neighbors

        _logger.info(f"경로 인덱스 생성: 입력 {self.num_input_rows}행 → "
                     f"triad {num_triads}개, 이웃 {self._num_neighbors}개")

    @classmethod
    def from_file(cls, file_name: Union[str, Path], num_neighbors: int = 6) -> 'PathIndex':
        _logger.debug(f"경로 파일 로드: {file_name}")
        return cls(load_path_file(file_name), num_neighbors=num_neighbors)

    @property
    def num_triads(self) -> int:
        return len(self._triads)

    @property
    def num_neighbors(self) -> int:
        return self._num_neighbors

    @property
    def points(self) -> np.ndarray:
        """(num_triads, 3) 읽기 전용 좌표 배열"""
        return self._points

    @property
    def triads(self) -> Tuple[Triad, ...]:
        return self._triads

    def triad(self, triad_id: int) -> Triad:
        return self._triads[triad_id]

    def closest_triad(self, u: float, v: float, t: float) -> Tuple[int, float]:
        """
        가장 가까운 triad

        Returns:
            (triad id, 유클리드 거리 제곱)
        """
        _, idx = self._tree.query([u, v, t], k=1)
        idx = int(idx)
        d = self._points[idx] - np.array([u, v, t], dtype=np.float64)
        return idx, float(np.sum(d * d))

    def neighbor(self, triad_id: int, i: int) -> int:
        return int(self._neighbors[triad_id, i])

    def neighbors(self, triad_id: int) -> np.ndarray:
        return self._neighbors[triad_id]

    def write_to_text_file(self, file_name: Union[str, Path]) -> Path:
        """triad 집합을 'x y z' 행으로 저장 (점검/디버깅용)"""
        path = write_points(self._points, file_name)
        _logger.debug(f"triad {self.num_triads}개 저장: {path}")
        return path
