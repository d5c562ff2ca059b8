"""
초기 추정 전략 생성

이름 → 전략 클래스 매핑으로 생성한다.
    'path'              → PathInitializer (서브셋 평가기, 경로 파일 필요)
    'phase_correlation' → PhaseCorrelationInitializer
    'field_values'      → FieldValueInitializer

서브셋 평가기와 움직임 검사기도 같은 설정에서 만든다.
"""

import logging
from typing import Optional

from ..context import FieldContext
from ..motion import MotionTestUtility
from ..subset import Subset
from .base import Initializer
from .path import PathInitializer
from .phase_correlation import PhaseCorrelationInitializer
from .field_value import FieldValueInitializer

_logger = logging.getLogger(__name__)

INITIALIZERS = {
    PathInitializer.name: PathInitializer,
    PhaseCorrelationInitializer.name: PhaseCorrelationInitializer,
    FieldValueInitializer.name: FieldValueInitializer,
}


def create_initializer(name: str,
                       context: FieldContext,
                       subset=None,
                       **params) -> Initializer:
    """
    Args:
        name: 전략 이름
        context: 필드 컨텍스트
        subset: 서브셋 평가기 ('path' 전용)
        **params: 전략별 파라미터
            path: file_name (또는 path), num_neighbors
            phase_correlation: subpixel

    Raises:
        ValueError: 알 수 없는 이름 / 필수 파라미터 누락
    """
    if name not in INITIALIZERS:
        raise ValueError(f"알 수 없는 초기 추정 전략: {name} "
                         f"(가능: {', '.join(INITIALIZERS)})")

    if name == PathInitializer.name:
        if subset is None:
            raise ValueError("'path' 초기 추정에는 서브셋 평가기가 필요합니다")
        path = params.get('path') or params.get('file_name')
        if not path:
            raise ValueError("'path' 초기 추정에는 경로 파일이 필요합니다")
        initializer = PathInitializer(context, subset, path,
                                      num_neighbors=params.get('num_neighbors', 6))
    elif name == PhaseCorrelationInitializer.name:
        initializer = PhaseCorrelationInitializer(
            context, subpixel=bool(params.get('subpixel', False)))
    else:
        initializer = FieldValueInitializer(context)

    _logger.info(f"초기 추정 전략: {name}")
    return initializer


def configure_context(context: FieldContext, settings) -> FieldContext:
    """SettingsManager의 방식/자유도 설정을 컨텍스트에 적용"""
    for key, value in settings.get_context_params().items():
        if value is not None:
            setattr(context, key, value)
    return context


def create_initializer_from_settings(settings,
                                     context: FieldContext,
                                     subset=None,
                                     fallback: bool = False) -> Optional[Initializer]:
    """
    SettingsManager 설정으로 전략 생성

    fallback=True이면 'fallback_initializer' 설정을 사용하며, 없으면 None.
    """
    if fallback:
        name = settings.get('fallback_initializer')
        if not name:
            return None
    else:
        name = settings.get('initializer')

    params = settings.get_initializer_params(name)
    return create_initializer(name, context, subset=subset, **params)


def create_subset(settings, centroid_x: int, centroid_y: int) -> Subset:
    """설정의 subset_size / interpolation_order로 서브셋 평가기 생성"""
    return Subset(centroid_x, centroid_y,
                  subset_size=settings.get('subset_size', 21),
                  interpolation_order=settings.get('interpolation_order', 3))


def create_motion_utility(settings) -> Optional[MotionTestUtility]:
    """움직임 검사기 생성 (motion_window 크기가 0이면 None)"""
    params = settings.get_motion_params()
    if params is None:
        return None
    _logger.info(f"움직임 검사 창: ({params['origin_x']}, {params['origin_y']}) "
                 f"{params['width']}x{params['height']}")
    return MotionTestUtility(**params)
