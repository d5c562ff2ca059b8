"""
경로 기반 초기 추정 모듈

변형 궤적이 사전에 파악된 유한한 경로(반복 운동, 구동 경로 등) 위에
있다고 가정하고, 경로 triad 중 변형 이미지와 가장 잘 맞는 것을 고른다.

    - 이전 해 없음 또는 첫 프레임: 전체 triad 탐색  O(N)
    - 이전 해 있음: 이전 (u, v, theta)에 가장 가까운 triad의 이웃만 탐색  O(k)

참조 서브셋은 호출부에서 미리 initialize 되어 있어야 한다.
변위/회전 항목만 기록하고 변형률 항목은 건드리지 않는다.
"""

import logging
from pathlib import Path
from collections.abc import Mapping
from typing import Optional, Union

import numpy as np

from ...models.deformation import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    SIGMA,
    NO_SOLUTION,
    check_deformation,
)
from ...models.status import INITIALIZE_SUCCESSFUL
from ..context import FieldContext
from ..subset import DEF_INTENSITIES
from .base import Initializer
from .path_index import PathIndex

_logger = logging.getLogger(__name__)


class PathInitializer(Initializer):
    """
    경로 triad 탐색 초기 추정기

    Usage:
        init = PathInitializer(ctx, subset, "path.txt", num_neighbors=6)
        status = init.initial_guess(subset_id, deformation)
    """

    name = 'path'

    def __init__(self,
                 context: FieldContext,
                 subset,
                 path: Union[str, Path, PathIndex],
                 num_neighbors: int = 6):
        """
        Args:
            context: 필드 컨텍스트
            subset: 서브셋 평가기 (initialize/gamma) 또는 {subset_id: 평가기}
            path: 경로 파일 경로 또는 생성된 PathIndex
            num_neighbors: 국소 탐색 이웃 수 (PathIndex를 넘기면 무시)
        """
        super().__init__(context)
        self.subset = subset
        if isinstance(path, PathIndex):
            self.path_index = path
        else:
            _logger.debug(f"PathInitializer 생성: {path}")
            self.path_index = PathIndex.from_file(path, num_neighbors=num_neighbors)
        self.last_gamma: Optional[float] = None

    @property
    def num_triads(self) -> int:
        return self.path_index.num_triads

    @property
    def num_neighbors(self) -> int:
        return self.path_index.num_neighbors

    def closest_triad(self, u: float, v: float, t: float):
        return self.path_index.closest_triad(u, v, t)

    def write_to_text_file(self, file_name: Union[str, Path]) -> Path:
        return self.path_index.write_to_text_file(file_name)

    def _evaluator(self, subset_id: Optional[int]):
        if isinstance(self.subset, Mapping):
            return self.subset[subset_id]
        return self.subset

    def _evaluate(self, subset, def_image, deformation, u, v, t) -> float:
        deformation[DISPLACEMENT_X] = u
        deformation[DISPLACEMENT_Y] = v
        deformation[ROTATION_Z] = t
        subset.initialize(def_image, DEF_INTENSITIES, deformation)
        return subset.gamma()

    def search_from_seed(self,
                         def_image: np.ndarray,
                         deformation: np.ndarray,
                         u: float,
                         v: float,
                         t: float,
                         subset_id: Optional[int] = None) -> float:
        """
        seed (u, v, t)와 그 최근접 triad의 이웃들 중 최적 후보 선택

        Returns:
            최적 gamma (seed 자체의 gamma 이하)
        """
        if def_image is None:
            raise ValueError("변형 이미지가 None입니다")
        check_deformation(deformation)
        subset = self._evaluator(subset_id)
        index = self.path_index

        best_gamma = self._evaluate(subset, def_image, deformation, u, v, t)
        best_u, best_v, best_t = u, v, t
        _logger.debug(f"seed u={u} v={v} theta={t} gamma={best_gamma}")

        tid, dist_sqr = index.closest_triad(u, v, t)
        _logger.debug(f"최근접 triad id={tid}, 거리제곱={dist_sqr}")

        for nid in index.neighbors(tid):
            cu, cv, ct = index.points[nid]
            gamma = self._evaluate(subset, def_image, deformation, cu, cv, ct)
            _logger.debug(f"triad {nid}: ({cu}, {cv}, {ct}) gamma={gamma:.6f}")
            if gamma < best_gamma:
                best_gamma = gamma
                best_u, best_v, best_t = cu, cv, ct

        deformation[DISPLACEMENT_X] = best_u
        deformation[DISPLACEMENT_Y] = best_v
        deformation[ROTATION_Z] = best_t
        return float(best_gamma)

    def search_all(self,
                   def_image: np.ndarray,
                   deformation: np.ndarray,
                   subset_id: Optional[int] = None) -> float:
        """
        전체 triad 탐색 (seed 없음)

        Returns:
            전역 최소 gamma
        """
        if def_image is None:
            raise ValueError("변형 이미지가 None입니다")
        check_deformation(deformation)
        subset = self._evaluator(subset_id)
        points = self.path_index.points

        _logger.debug(f"전체 triad 탐색: {len(points)}개")
        best_gamma = np.inf
        best_u, best_v, best_t = points[0]

        for tid in range(len(points)):
            cu, cv, ct = points[tid]
            gamma = self._evaluate(subset, def_image, deformation, cu, cv, ct)
            _logger.debug(f"triad {tid}: ({cu}, {cv}, {ct}) gamma={gamma:.6f}")
            if gamma < best_gamma:
                best_gamma = gamma
                best_u, best_v, best_t = cu, cv, ct

        deformation[DISPLACEMENT_X] = best_u
        deformation[DISPLACEMENT_Y] = best_v
        deformation[ROTATION_Z] = best_t
        return float(best_gamma)

    def initial_guess(self, subset_id: int, deformation: np.ndarray) -> int:
        ctx = self.context
        global_search = (ctx.local_field_value(subset_id, SIGMA) == NO_SOLUTION
                         or ctx.image_frame == 0)
        if global_search:
            self.last_gamma = self.search_all(ctx.def_img, deformation, subset_id=subset_id)
        else:
            prev_u = ctx.local_field_value(subset_id, DISPLACEMENT_X)
            prev_v = ctx.local_field_value(subset_id, DISPLACEMENT_Y)
            prev_t = ctx.local_field_value(subset_id, ROTATION_Z)
            self.last_gamma = self.search_from_seed(
                ctx.def_img, deformation, prev_u, prev_v, prev_t, subset_id=subset_id)
        _logger.debug(f"subset {subset_id}: 경로 {'전체' if global_search else '국소'} 탐색, "
                      f"gamma={self.last_gamma:.6f}")
        return INITIALIZE_SUCCESSFUL
