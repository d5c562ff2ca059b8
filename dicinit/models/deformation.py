"""
변형 벡터 / 필드 인덱스 / triad 데이터 모델

변형 벡터는 길이 6의 float64 배열이며 아래 상수로 인덱싱한다.
필드 저장소는 같은 인덱스 뒤에 SIGMA, GAMMA, NEIGHBOR_ID 를 추가로 둔다.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np


# 변형 자유도 인덱스
DISPLACEMENT_X = 0
DISPLACEMENT_Y = 1
ROTATION_Z = 2
NORMAL_STRAIN_X = 3
NORMAL_STRAIN_Y = 4
SHEAR_STRAIN_XY = 5

DEFORMATION_SIZE = 6

# 필드 저장소 전용 인덱스
SIGMA = 6
GAMMA = 7
NEIGHBOR_ID = 8

NUM_FIELDS = 9

FIELD_NAMES = {
    DISPLACEMENT_X: 'displacement_x',
    DISPLACEMENT_Y: 'displacement_y',
    ROTATION_Z: 'rotation_z',
    NORMAL_STRAIN_X: 'normal_strain_x',
    NORMAL_STRAIN_Y: 'normal_strain_y',
    SHEAR_STRAIN_XY: 'shear_strain_xy',
    SIGMA: 'sigma',
    GAMMA: 'gamma',
    NEIGHBOR_ID: 'neighbor_id',
}

# sigma == -1.0 이면 이전 해 없음
NO_SOLUTION = -1.0
NO_NEIGHBOR = -1

# 입력 행 수가 이 값보다 크면 triad를 양자화
QUANTIZE_MIN_ROWS = 6


def new_deformation() -> np.ndarray:
    """0으로 초기화된 변형 벡터"""
    return np.zeros(DEFORMATION_SIZE, dtype=np.float64)


def check_deformation(deformation: np.ndarray) -> np.ndarray:
    """변형 벡터 형상 검사 (in-place 수정 대상이므로 복사하지 않음)"""
    if not isinstance(deformation, np.ndarray):
        raise ValueError(f"변형 벡터는 numpy 배열이어야 합니다: {type(deformation)}")
    if deformation.shape != (DEFORMATION_SIZE,):
        raise ValueError(
            f"변형 벡터 크기 오류: {deformation.shape} (필요: ({DEFORMATION_SIZE},))")
    return deformation


@dataclass(frozen=True, order=True)
class Triad:
    """경로 상의 (u, v, theta) 샘플. 정렬은 (u, v, t) 사전식."""
    u: float
    v: float
    t: float

    @classmethod
    def quantized(cls, u: float, v: float, t: float) -> 'Triad':
        """u, v는 0.5 px, theta는 0.01 rad 단위로 반올림"""
        return cls(
            math.floor(u * 2 + 0.5) / 2,
            math.floor(v * 2 + 0.5) / 2,
            math.floor(t * 100 + 0.5) / 100,
        )

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.u, self.v, self.t)
