"""
필드 컨텍스트 모듈

초기 추정기가 읽는 프레임/필드/설정 정보를 명시적으로 전달하는 객체.
서브셋별로 현재(직전 수렴) 값과 n-1 프레임 값을 보관한다.

    frame k 처리 중:
        local_field_value      → frame k-1 해
        local_field_value_nm1  → frame k-2 해
"""

import logging
import threading
from typing import Dict, Iterable, Optional

import numpy as np

from ..models.deformation import (
    DEFORMATION_SIZE,
    SIGMA,
    GAMMA,
    NEIGHBOR_ID,
    NUM_FIELDS,
    FIELD_NAMES,
    NO_SOLUTION,
    NO_NEIGHBOR,
    check_deformation,
)

_logger = logging.getLogger(__name__)

# 초기화 방식
USE_FIELD_VALUES = 'use_field_values'
USE_NEIGHBOR_VALUES = 'use_neighbor_values'
USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY = 'use_neighbor_values_first_step_only'

INITIALIZATION_METHODS = (
    USE_FIELD_VALUES,
    USE_NEIGHBOR_VALUES,
    USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY,
)

# 투영 방식
DISPLACEMENT_BASED = 'displacement_based'
VELOCITY_BASED = 'velocity_based'

PROJECTION_METHODS = (DISPLACEMENT_BASED, VELOCITY_BASED)


def _empty_fields() -> np.ndarray:
    fields = np.zeros(NUM_FIELDS, dtype=np.float64)
    fields[SIGMA] = NO_SOLUTION
    fields[NEIGHBOR_ID] = NO_NEIGHBOR
    return fields


class FieldContext:
    """
    서브셋 필드 저장소 + 프레임 상태

    Usage:
        ctx = FieldContext(subset_ids=[0, 1, 2])
        ctx.set_neighbor(1, 0)
        ctx.advance_frame(image_0)            # frame 0
        ...
        ctx.store_solution(0, deformation, sigma=0.01)
        ctx.advance_frame(image_1)            # frame 1
    """

    def __init__(self,
                 subset_ids: Iterable[int] = (),
                 initialization_method: str = USE_FIELD_VALUES,
                 projection_method: str = DISPLACEMENT_BASED,
                 translation_enabled: bool = True,
                 rotation_enabled: bool = True,
                 normal_strain_enabled: bool = False,
                 shear_strain_enabled: bool = False):
        """
        Args:
            subset_ids: 이 컨텍스트(처리 단위)가 소유하는 서브셋 id
            initialization_method: 'use_field_values' | 'use_neighbor_values'
                | 'use_neighbor_values_first_step_only'
            projection_method: 'displacement_based' | 'velocity_based'
        """
        self._lock = threading.Lock()
        self._local_ids: Dict[int, int] = {}
        self._values: Dict[int, np.ndarray] = {}
        self._values_nm1: Dict[int, np.ndarray] = {}
        self._stored_frame: Dict[int, int] = {}

        for sid in subset_ids:
            self.add_subset(sid)

        self.initialization_method = initialization_method
        self.projection_method = projection_method
        self.translation_enabled = translation_enabled
        self.rotation_enabled = rotation_enabled
        self.normal_strain_enabled = normal_strain_enabled
        self.shear_strain_enabled = shear_strain_enabled

        # advance_frame 첫 호출 시 0이 됨
        self._image_frame = -1
        self._def_img: Optional[np.ndarray] = None
        self._prev_img: Optional[np.ndarray] = None

    # ── 설정 ──

    @property
    def initialization_method(self) -> str:
        return self._initialization_method

    @initialization_method.setter
    def initialization_method(self, method: str):
        if method not in INITIALIZATION_METHODS:
            raise ValueError(f"알 수 없는 초기화 방식: {method}")
        self._initialization_method = method

    @property
    def projection_method(self) -> str:
        return self._projection_method

    @projection_method.setter
    def projection_method(self, method: str):
        if method not in PROJECTION_METHODS:
            raise ValueError(f"알 수 없는 투영 방식: {method}")
        self._projection_method = method

    # ── 서브셋 소유 ──

    def add_subset(self, subset_id: int, neighbor_id: int = NO_NEIGHBOR):
        subset_id = int(subset_id)
        if subset_id in self._local_ids:
            raise ValueError(f"서브셋 {subset_id} 이미 등록됨")
        self._local_ids[subset_id] = len(self._local_ids)
        self._values[subset_id] = _empty_fields()
        self._values_nm1[subset_id] = _empty_fields()
        self._values[subset_id][NEIGHBOR_ID] = neighbor_id
        self._values_nm1[subset_id][NEIGHBOR_ID] = neighbor_id

    @property
    def subset_ids(self):
        return list(self._local_ids.keys())

    def get_local_id(self, subset_id: int) -> int:
        """소유하지 않은 서브셋이면 -1"""
        return self._local_ids.get(int(subset_id), -1)

    def is_owned(self, subset_id: int) -> bool:
        return self.get_local_id(subset_id) >= 0

    def set_neighbor(self, subset_id: int, neighbor_id: int):
        self.set_local_field_value(subset_id, NEIGHBOR_ID, neighbor_id)
        self._fields(subset_id, self._values_nm1)[NEIGHBOR_ID] = neighbor_id

    def neighbor_id(self, subset_id: int) -> int:
        return int(self.local_field_value(subset_id, NEIGHBOR_ID))

    # ── 필드 접근 ──

    def _fields(self, subset_id: int, store: Dict[int, np.ndarray]) -> np.ndarray:
        try:
            return store[int(subset_id)]
        except KeyError:
            raise RuntimeError(
                f"서브셋 {subset_id}은(는) 이 처리 단위 소유가 아닙니다") from None

    def local_field_value(self, subset_id: int, field: int) -> float:
        return float(self._fields(subset_id, self._values)[field])

    def local_field_value_nm1(self, subset_id: int, field: int) -> float:
        return float(self._fields(subset_id, self._values_nm1)[field])

    def set_local_field_value(self, subset_id: int, field: int, value: float):
        self._fields(subset_id, self._values)[field] = value

    def set_local_field_value_nm1(self, subset_id: int, field: int, value: float):
        self._fields(subset_id, self._values_nm1)[field] = value

    def store_solution(self, subset_id: int, deformation: np.ndarray,
                       sigma: float, gamma: float = 0.0):
        """
        현재 프레임의 수렴 해 기록 (다음 프레임에서 '직전 값'이 됨)

        프레임당 첫 기록 시 기존 값을 n-1 슬롯으로 옮긴다.
        같은 프레임 안의 재기록은 현재 슬롯만 덮어쓴다.
        """
        check_deformation(deformation)
        sid = int(subset_id)
        fields = self._fields(sid, self._values)
        with self._lock:
            if self._stored_frame.get(sid) != self._image_frame:
                self._values_nm1[sid] = fields.copy()
                self._stored_frame[sid] = self._image_frame
            fields[:DEFORMATION_SIZE] = deformation
            fields[SIGMA] = sigma
            fields[GAMMA] = gamma

    def field_summary(self, subset_id: int) -> Dict[str, float]:
        fields = self._fields(subset_id, self._values)
        return {FIELD_NAMES[i]: float(fields[i]) for i in range(NUM_FIELDS)}

    # ── 프레임 ──

    @property
    def image_frame(self) -> int:
        return self._image_frame

    @property
    def def_img(self) -> Optional[np.ndarray]:
        return self._def_img

    @property
    def prev_img(self) -> Optional[np.ndarray]:
        return self._prev_img

    def advance_frame(self, def_image: np.ndarray) -> int:
        """새 변형 이미지로 프레임 전진. 필드 값은 store_solution 전까지 유지."""
        if def_image is None:
            raise ValueError("변형 이미지가 None입니다")
        with self._lock:
            self._prev_img = self._def_img
            self._def_img = def_image
            self._image_frame += 1
            frame = self._image_frame
        _logger.debug(f"frame {frame} 시작 (서브셋 {len(self._values)}개)")
        return frame
