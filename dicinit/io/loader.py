"""
입력 파일 로드 모듈

- 경로(path) 파일: 공백 구분 'u v theta' 행, 헤더 없음
- 이미지: 유니코드 경로 지원 그레이스케일 로드
"""

import logging
import numpy as np
import cv2
from pathlib import Path
from typing import Optional, List, Tuple, Union

_logger = logging.getLogger(__name__)


def count_lines(path: Union[str, Path]) -> int:
    """파일 전체를 먼저 훑어 데이터 행 수를 센다 (빈 줄 제외)"""
    n = 0
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            if line.strip():
                n += 1
    return n


def load_path_file(path: Union[str, Path]) -> np.ndarray:
    """
    경로 파일 로드

    Args:
        path: 'u v theta' 행으로 된 텍스트 파일

    Returns:
        (n_rows, 3) float64 배열

    Raises:
        FileNotFoundError: 파일이 없을 때
        ValueError: 행 형식 오류 또는 데이터 없음
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"경로 파일을 찾을 수 없습니다: {path}")

    num_lines = count_lines(path)
    _logger.debug(f"경로 파일 triad 수: {num_lines} ({path.name})")
    if num_lines == 0:
        raise ValueError(f"경로 파일에 데이터가 없습니다: {path}")

    rows = np.empty((num_lines, 3), dtype=np.float64)
    idx = 0
    with open(path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) != 3:
                raise ValueError(
                    f"{path.name}:{line_no}: 'u v theta' 3개 값이 필요합니다 "
                    f"(읽은 값 {len(tokens)}개)")
            try:
                rows[idx] = [float(t) for t in tokens]
            except ValueError:
                raise ValueError(f"{path.name}:{line_no}: 숫자가 아닌 값: {line.strip()}") from None
            idx += 1

    return rows


def write_points(points: np.ndarray, path: Union[str, Path]) -> Path:
    """(n, 3) 점 배열을 'x y z' 행으로 저장"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        for x, y, z in np.asarray(points, dtype=np.float64):
            f.write(f"{float(x)!r} {float(y)!r} {float(z)!r}\n")
    return path


def load_image(path: Union[str, Path]) -> Optional[np.ndarray]:
    """
    그레이스케일 이미지 로드 (유니코드 경로 지원)

    Returns:
        이미지 배열 또는 None (실패 시)
    """
    path = Path(path)

    if not path.exists():
        return None

    try:
        with open(path, 'rb') as f:
            data = np.frombuffer(f.read(), dtype=np.uint8)
        return cv2.imdecode(data, cv2.IMREAD_GRAYSCALE)
    except OSError as e:
        _logger.warning(f"이미지 로드 실패 '{path}': {e}")
        return None


def get_image_files(folder_path: Union[str, Path],
                    extensions: Tuple[str, ...] = ('.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff')
                    ) -> List[Path]:
    """폴더 내 이미지 파일 경로 목록 반환 (이름순 = 프레임 순서)"""
    folder = Path(folder_path)

    if not folder.exists():
        return []

    return sorted([
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    ])
