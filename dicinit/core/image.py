"""
이미지 창(window) 추출 / 평활화 / 차이 계산 모듈
"""

import numpy as np
import cv2
from numba import jit


def to_gray(img: np.ndarray) -> np.ndarray:
    if img is None:
        raise ValueError("이미지가 None입니다")
    if len(img.shape) == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return img


def gaussian_smooth(image: np.ndarray, mask_size: int = 7) -> np.ndarray:
    """Gaussian 평활화 (mask_size: 홀수 커널 크기)"""
    if mask_size < 3 or mask_size % 2 == 0:
        raise ValueError(f"Gaussian mask 크기는 3 이상 홀수여야 합니다: {mask_size}")
    return cv2.GaussianBlur(image, (mask_size, mask_size), 0)


def crop_window(image: np.ndarray,
                origin_x: int,
                origin_y: int,
                width: int,
                height: int,
                gauss_filter: bool = True,
                mask_size: int = 7) -> np.ndarray:
    """
    이미지에서 (origin_x, origin_y, width, height) 창을 잘라 float64로 반환

    gauss_filter=True이면 잘라낸 창에 Gaussian 평활화를 적용한다.
    창이 이미지를 벗어나면 ValueError.
    """
    gray = to_gray(image)
    h, w = gray.shape
    if width <= 0 or height <= 0:
        raise ValueError(f"창 크기 오류: {width}x{height}")
    if origin_x < 0 or origin_y < 0 or origin_x + width > w or origin_y + height > h:
        raise ValueError(
            f"창 ({origin_x}, {origin_y}, {width}, {height})이(가) "
            f"이미지 {w}x{h} 범위를 벗어납니다")

    window = gray[origin_y:origin_y + height,
                  origin_x:origin_x + width].astype(np.float64)
    if gauss_filter:
        window = gaussian_smooth(window, mask_size)
    return window


def image_diff(a: np.ndarray, b: np.ndarray) -> float:
    """두 창의 전체 차이: sqrt(sum((a - b)^2))"""
    if a.shape != b.shape:
        raise ValueError(f"창 크기 불일치: {a.shape} vs {b.shape}")
    d = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.sum(d * d)))


@jit(nopython=True, cache=True)
def _interior_ssd(a: np.ndarray, b: np.ndarray, border: int) -> float:
    """가장자리 border 픽셀을 제외한 제곱 차이 합"""
    h, w = a.shape
    total = 0.0
    for y in range(border, h - border):
        for x in range(border, w - border):
            d = a[y, x] - b[y, x]
            total += d * d
    return total


def interior_diff(a: np.ndarray, b: np.ndarray, border: int) -> float:
    """평활화가 유효한 내부 영역만의 차이: sqrt(sum((a - b)^2))"""
    if a.shape != b.shape:
        raise ValueError(f"창 크기 불일치: {a.shape} vs {b.shape}")
    return float(np.sqrt(_interior_ssd(
        np.ascontiguousarray(a, dtype=np.float64),
        np.ascontiguousarray(b, dtype=np.float64),
        border)))
