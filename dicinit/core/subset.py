"""
서브셋 평가기 모듈

초기 추정기가 후보 변형을 평가할 때 쓰는 최소 계약:
    initialize(image, role, deformation)  - 후보 변형으로 서브셋 샘플링
    gamma()                               - 마지막 샘플링의 매칭 점수 (낮을수록 좋음)

Subset은 이 계약의 기본 구현이며 ZNSSD를 gamma로 사용한다.

    ZNSSD = sum( (f - f_mean)/||f - f_mean|| - (g - g_mean)/||g - g_mean|| )^2
          = 2 - 2 * ZNCC,  범위 [0, 4]
"""

from typing import Optional

import numpy as np

from ..models.deformation import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    NORMAL_STRAIN_X,
    NORMAL_STRAIN_Y,
    SHEAR_STRAIN_XY,
    check_deformation,
)
from .image import to_gray
from .interpolation import InterpolatorCache


REF_INTENSITIES = 'ref'
DEF_INTENSITIES = 'def'

# 텍스처 없는 서브셋의 gamma (ZNSSD 최댓값)
MAX_GAMMA = 4.0


def map_local_coordinates(dx: np.ndarray, dy: np.ndarray,
                          deformation: np.ndarray):
    """
    서브셋 로컬 좌표 → 변형 후 오프셋

        Dx = (1 + ex) dx + gxy dy
        Dy = (1 + ey) dy + gxy dx
        x' = cos(t) Dx - sin(t) Dy + u
        y' = sin(t) Dx + cos(t) Dy + v
    """
    u = deformation[DISPLACEMENT_X]
    v = deformation[DISPLACEMENT_Y]
    t = deformation[ROTATION_Z]
    ex = deformation[NORMAL_STRAIN_X]
    ey = deformation[NORMAL_STRAIN_Y]
    gxy = deformation[SHEAR_STRAIN_XY]

    Dx = (1.0 + ex) * dx + gxy * dy
    Dy = (1.0 + ey) * dy + gxy * dx
    cos_t = np.cos(t)
    sin_t = np.sin(t)
    x = cos_t * Dx - sin_t * Dy + u
    y = sin_t * Dx + cos_t * Dy + v
    return x, y


class Subset:
    """
    정사각 서브셋 (중심 centroid, 한 변 subset_size)

    Usage:
        subset = Subset(100, 120, subset_size=21)
        subset.initialize(ref_image, REF_INTENSITIES, new_deformation())
        subset.initialize(def_image, DEF_INTENSITIES, deformation)
        score = subset.gamma()
    """

    def __init__(self, centroid_x: int, centroid_y: int,
                 subset_size: int = 21, interpolation_order: int = 3):
        if subset_size < 3 or subset_size % 2 == 0:
            raise ValueError(f"subset_size는 3 이상 홀수여야 합니다: {subset_size}")
        self.centroid_x = int(centroid_x)
        self.centroid_y = int(centroid_y)
        self.subset_size = subset_size
        half = subset_size // 2
        self._dy, self._dx = np.mgrid[-half:half + 1, -half:half + 1].astype(np.float64)

        self._interp_cache = InterpolatorCache(order=interpolation_order)
        self._ref: Optional[np.ndarray] = None
        self._def: Optional[np.ndarray] = None

    @property
    def num_pixels(self) -> int:
        return self.subset_size * self.subset_size

    @property
    def ref_intensities(self) -> Optional[np.ndarray]:
        return self._ref

    @property
    def def_intensities(self) -> Optional[np.ndarray]:
        return self._def

    def initialize(self, image: np.ndarray, role: str, deformation: np.ndarray):
        if image is None:
            raise ValueError("이미지가 None입니다")
        check_deformation(deformation)

        if role == REF_INTENSITIES:
            self._ref = self._sample_reference(to_gray(image))
        elif role == DEF_INTENSITIES:
            x, y = map_local_coordinates(self._dx, self._dy, deformation)
            # 캐시는 호출부 이미지 객체 기준 (컬러 변환은 캐시 miss 시 1회)
            interp = self._interp_cache.get(image)
            self._def = interp(y + self.centroid_y, x + self.centroid_x)
        else:
            raise ValueError(f"알 수 없는 이미지 역할: {role}")

    def _sample_reference(self, gray: np.ndarray) -> np.ndarray:
        half = self.subset_size // 2
        h, w = gray.shape
        y0, x0 = self.centroid_y - half, self.centroid_x - half
        if y0 < 0 or x0 < 0 or y0 + self.subset_size > h or x0 + self.subset_size > w:
            raise ValueError(
                f"서브셋 ({self.centroid_x}, {self.centroid_y})이(가) 참조 이미지 밖에 있습니다")
        return gray[y0:y0 + self.subset_size,
                    x0:x0 + self.subset_size].astype(np.float64)

    def gamma(self) -> float:
        """ZNSSD 매칭 점수. 참조/변형 샘플링이 먼저 되어 있어야 한다."""
        if self._ref is None or self._def is None:
            raise RuntimeError("gamma() 전에 참조/변형 서브셋을 initialize 해야 합니다")

        f = self._ref - self._ref.mean()
        g = self._def - self._def.mean()
        f_norm = np.sqrt(np.sum(f * f))
        g_norm = np.sqrt(np.sum(g * g))
        if f_norm < 1e-10 or g_norm < 1e-10:
            return MAX_GAMMA
        d = f / f_norm - g / g_norm
        return float(np.sum(d * d))
