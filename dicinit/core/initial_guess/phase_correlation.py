"""
위상 상관 (Phase Correlation) 초기 추정 모듈

이전 프레임과 현재 프레임 전체의 정규화 교차 파워 스펙트럼으로
전역 강체 이동 (ux, uy)을 프레임당 1회 추정하고,
각 서브셋의 직전 변위에 더해 초기값으로 사용한다.

    R = G · conj(F) / |G · conj(F)|
    r = IFFT(R)  →  피크 위치 = (uy, ux)

def(x) = prev(x - d) 이면 피크는 +d 에 위치한다.

References:
    - Kuglin, C. D., Hines, D. C. "The phase correlation image alignment
      method." IEEE Conference on Cybernetics and Society, 1975.
"""

import logging
import threading
import time
from typing import Optional, Tuple

import numpy as np
from scipy.fft import fft2, ifft2

from ...models.deformation import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    check_deformation,
)
from ...models.status import INITIALIZE_SUCCESSFUL
from ..context import FieldContext
from ..image import to_gray
from .base import Initializer

_logger = logging.getLogger(__name__)

# 스펙트럼 크기가 이 값 이하인 성분은 0으로 처리
_SPECTRUM_EPS = 1e-10


def _wrap_shift(peak: int, size: int) -> int:
    """순환 피크 인덱스 → 부호 있는 이동량"""
    return peak - size if peak > size // 2 else peak


def _parabolic_offset(left: float, center: float, right: float) -> float:
    denom = left - 2.0 * center + right
    if abs(denom) < _SPECTRUM_EPS:
        return 0.0
    return 0.5 * (left - right) / denom


def phase_correlate_x_y(prev_image: np.ndarray,
                        def_image: np.ndarray,
                        subpixel: bool = False,
                        n_workers: int = -1) -> Tuple[float, float]:
    """
    두 전체 프레임 사이의 전역 이동 추정

    Args:
        prev_image: 이전 프레임
        def_image: 현재(변형) 프레임
        subpixel: 피크 주변 3점 포물선 보정 여부
        n_workers: scipy.fft 워커 수 (-1 = 전체 코어)

    Returns:
        (ux, uy) - 텍스처가 없어 스펙트럼이 0이면 (0.0, 0.0)
    """
    a = to_gray(prev_image).astype(np.float64)
    b = to_gray(def_image).astype(np.float64)
    if a.shape != b.shape:
        raise ValueError(f"프레임 크기 불일치: {a.shape} vs {b.shape}")
    h, w = a.shape

    F = fft2(a - a.mean(), workers=n_workers)
    G = fft2(b - b.mean(), workers=n_workers)
    cross = G * np.conj(F)
    mag = np.abs(cross)
    valid = mag > _SPECTRUM_EPS
    if not np.any(valid):
        _logger.warning("위상 상관: 텍스처 없는 프레임, 이동량 0으로 처리")
        return 0.0, 0.0

    R = np.zeros_like(cross)
    R[valid] = cross[valid] / mag[valid]
    r = ifft2(R, workers=n_workers).real
    del F, G, cross, R

    py, px = np.unravel_index(int(np.argmax(r)), r.shape)
    uy = float(_wrap_shift(int(py), h))
    ux = float(_wrap_shift(int(px), w))

    if subpixel:
        ux += _parabolic_offset(r[py, (px - 1) % w], r[py, px], r[py, (px + 1) % w])
        uy += _parabolic_offset(r[(py - 1) % h, px], r[py, px], r[(py + 1) % h, px])

    return ux, uy


class PhaseCorrelationInitializer(Initializer):
    """
    전역 위상 상관 이동 + 서브셋 직전 변위

    pre_execution_tasks()는 프레임당 1회만 계산한다. 같은 프레임에서
    여러 번 불려도 (여러 워커) 잠금 아래 첫 호출만 계산하고 나머지는 무시.
    """

    name = 'phase_correlation'

    def __init__(self, context: FieldContext, subpixel: bool = False):
        super().__init__(context)
        self.subpixel = subpixel
        self.phase_cor_u_x = 0.0
        self.phase_cor_u_y = 0.0
        self._frame: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def global_shift(self) -> Tuple[float, float]:
        return self.phase_cor_u_x, self.phase_cor_u_y

    def pre_execution_tasks(self):
        ctx = self.context
        with self._lock:
            frame = ctx.image_frame
            if self._frame == frame:
                return

            if ctx.prev_img is None or ctx.def_img is None:
                _logger.debug(f"frame {frame}: 이전 프레임 없음, 전역 이동 (0, 0)")
                ux, uy = 0.0, 0.0
            else:
                start_time = time.time()
                ux, uy = phase_correlate_x_y(ctx.prev_img, ctx.def_img,
                                             subpixel=self.subpixel)
                _logger.debug(f"frame {frame}: 위상 상관 ux={ux:.3f} uy={uy:.3f} "
                              f"({time.time() - start_time:.3f}s)")

            self.phase_cor_u_x, self.phase_cor_u_y = ux, uy
            self._frame = frame

    def initial_guess(self, subset_id: int, deformation: np.ndarray) -> int:
        check_deformation(deformation)
        ctx = self.context
        if self._frame != ctx.image_frame:
            raise RuntimeError(
                f"frame {ctx.image_frame}: pre_execution_tasks()가 먼저 호출되어야 합니다")

        deformation[DISPLACEMENT_X] = (self.phase_cor_u_x
                                       + ctx.local_field_value(subset_id, DISPLACEMENT_X))
        deformation[DISPLACEMENT_Y] = (self.phase_cor_u_y
                                       + ctx.local_field_value(subset_id, DISPLACEMENT_Y))
        deformation[ROTATION_Z] = ctx.local_field_value(subset_id, ROTATION_Z)
        return INITIALIZE_SUCCESSFUL
