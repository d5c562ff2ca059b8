"""
움직임 검사 모듈

관심 영역 창을 이전 프레임 창과 비교해 최적화를 돌릴 만큼 변화가
있었는지 판정한다. 상태는 {frame_index, window, decision} 하나로 보관하며
호출부가 넘긴 frame_index가 증가할 때만 다시 계산한다.

    - 첫 호출: 기준 창 저장, 무조건 움직임 있음(True)
    - 같은 frame_index 재호출: 저장된 판정 반환
    - 새 frame_index: sqrt(SSD) 계산 후 허용값과 비교

허용값 -1.0 (미지정)이면 첫 비교에서 diff + 5.0으로 자동 설정 후 고정.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .image import crop_window, image_diff, interior_diff

_logger = logging.getLogger(__name__)

MOTION_NOT_SET = 0
MOTION_TRUE = 1
MOTION_FALSE = 2

MOTION_STATE_NAMES = {
    MOTION_NOT_SET: 'not_set',
    MOTION_TRUE: 'motion',
    MOTION_FALSE: 'no_motion',
}

AUTO_TOLERANCE = -1.0
AUTO_TOLERANCE_MARGIN = 5.0


@dataclass(frozen=True)
class MotionState:
    """마지막 판정 (프레임 번호, 평활화된 창, 판정)"""
    frame_index: int
    window: np.ndarray
    decision: int


class MotionTestUtility:
    """
    창 단위 움직임 판정기

    Usage:
        motion = MotionTestUtility(100, 100, 64, 64)
        if motion.motion_detected(image, frame_index):
            ...  # 최적화 수행
    """

    def __init__(self,
                 origin_x: int,
                 origin_y: int,
                 width: int,
                 height: int,
                 tol: float = AUTO_TOLERANCE,
                 gauss_filter_mask_size: int = 7):
        """
        Args:
            origin_x, origin_y: 창 좌상단
            width, height: 창 크기
            tol: 움직임 허용값 (-1.0 이면 자동 설정)
            gauss_filter_mask_size: 평활화 커널 크기 (홀수)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"창 크기 오류: {width}x{height}")
        if gauss_filter_mask_size < 3 or gauss_filter_mask_size % 2 == 0:
            raise ValueError(
                f"Gaussian mask 크기는 3 이상 홀수여야 합니다: {gauss_filter_mask_size}")
        self.origin_x = origin_x
        self.origin_y = origin_y
        self.width = width
        self.height = height
        self.tol = tol
        self.gauss_filter_mask_size = gauss_filter_mask_size

        self.last_diff: Optional[float] = None
        self._state: Optional[MotionState] = None
        self._lock = threading.Lock()

        _logger.debug(f"MotionTestUtility 생성: origin=({origin_x}, {origin_y}) "
                      f"size={width}x{height} tol={tol}")

    @property
    def motion_state(self) -> int:
        state = self._state
        return MOTION_NOT_SET if state is None else state.decision

    @property
    def frame_index(self) -> Optional[int]:
        state = self._state
        return None if state is None else state.frame_index

    def reset(self):
        """판정 상태 초기화 (허용값은 유지)"""
        with self._lock:
            self._state = None
            self.last_diff = None

    def _window_difference(self, window: np.ndarray, prev: np.ndarray) -> float:
        half = self.gauss_filter_mask_size // 2
        if self.width > half and self.height > half:
            # 평활화되지 않는 가장자리 제외
            return interior_diff(window, prev, half + 1)
        return image_diff(window, prev)

    def motion_detected(self, def_image: np.ndarray, frame_index: int) -> bool:
        """
        Args:
            def_image: 현재 프레임 이미지
            frame_index: 현재 프레임 번호 (같은 번호 재호출은 캐시 반환)

        Raises:
            ValueError: frame_index가 이전 호출보다 작을 때, 창이 이미지 밖일 때
        """
        with self._lock:
            state = self._state
            if state is not None:
                if frame_index == state.frame_index:
                    _logger.debug(f"frame {frame_index}: 재호출, 판정 "
                                  f"{MOTION_STATE_NAMES[state.decision]}")
                    return state.decision == MOTION_TRUE
                if frame_index < state.frame_index:
                    raise ValueError(f"프레임 번호가 감소했습니다: "
                                     f"{state.frame_index} → {frame_index}")

            window = crop_window(def_image, self.origin_x, self.origin_y,
                                 self.width, self.height,
                                 gauss_filter=True,
                                 mask_size=self.gauss_filter_mask_size)

            if state is None:
                _logger.debug(f"frame {frame_index}: 첫 호출, 움직임 있음으로 처리")
                self._state = MotionState(frame_index, window, MOTION_TRUE)
                return True

            diff = self._window_difference(window, state.window)
            self.last_diff = diff

            if self.tol == AUTO_TOLERANCE:
                self.tol = diff + AUTO_TOLERANCE_MARGIN
                _logger.info(f"움직임 허용값 자동 설정: {self.tol:.4f}")

            decision = MOTION_TRUE if diff > self.tol else MOTION_FALSE
            self._state = MotionState(frame_index, window, decision)
            _logger.debug(f"frame {frame_index}: diff={diff:.4f} tol={self.tol:.4f} "
                          f"→ {MOTION_STATE_NAMES[decision]}")
            return decision == MOTION_TRUE
