"""
이미지 보간 모듈

Bilinear (1차), Bicubic (3차), Biquintic (5차) B-spline 보간.
초기 추정 탐색은 같은 변형 이미지를 후보마다 반복 샘플링하므로
spline 계수를 이미지당 1회만 계산하도록 캐시를 둔다.
"""

import threading

import numpy as np
from scipy.ndimage import map_coordinates, spline_filter

from .image import to_gray


class ImageInterpolator:
    """
    B-spline 보간기. 생성 시 spline 계수를 사전 계산하여
    이후 보간 호출에서는 prefilter=False로 중복 계산을 제거한다.
    """

    def __init__(self, image, order=3):
        if order not in (1, 3, 5):
            raise ValueError("order must be 1, 3 or 5")
        self.order = order
        self.image = np.asarray(image, dtype=np.float64)
        if self.image.ndim != 2:
            raise ValueError(f"2D 그레이스케일 이미지가 필요합니다: {self.image.shape}")
        self.height, self.width = self.image.shape

        if order > 1:
            self._coeffs = spline_filter(self.image, order=self.order,
                                         mode='constant')
        else:
            self._coeffs = self.image

    def __call__(self, y, x):
        coords = np.array([np.ravel(y), np.ravel(x)])
        result = map_coordinates(self._coeffs, coords,
                                 order=self.order,
                                 mode='constant', cval=0.0,
                                 prefilter=False)
        return result.reshape(np.asarray(y).shape)


class InterpolatorCache:
    """이미지 객체 단위 보간기 캐시 (가장 최근 이미지 1개만 보관)"""

    def __init__(self, order=3):
        self.order = order
        self._lock = threading.Lock()
        self._image = None
        self._interp = None

    def get(self, image: np.ndarray) -> ImageInterpolator:
        """image 객체가 바뀔 때만 그레이스케일 변환 + spline 계수 계산"""
        with self._lock:
            if self._image is not image:
                self._interp = ImageInterpolator(to_gray(image), order=self.order)
                self._image = image
            return self._interp
