"""
필드 값 전파 초기 추정 모듈

서브셋(또는 지정된 이웃 서브셋)의 직전 수렴 해를 다음 프레임 초기값으로 쓴다.
velocity_based 투영이고 frame > 2 이면 변위/회전은 선형 외삽:

    new = last + (last - nm1) = 2 * last - nm1

변형률 성분은 외삽하지 않고 복사만 한다.
"""

import logging

import numpy as np

from ...models.deformation import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    NORMAL_STRAIN_X,
    NORMAL_STRAIN_Y,
    SHEAR_STRAIN_XY,
    SIGMA,
    NEIGHBOR_ID,
    NO_SOLUTION,
    NO_NEIGHBOR,
    check_deformation,
)
from ...models.status import (
    INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL,
    INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL,
    INITIALIZE_FAILED,
)
from ..context import (
    USE_NEIGHBOR_VALUES,
    USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY,
    VELOCITY_BASED,
)
from .base import Initializer

_logger = logging.getLogger(__name__)

# 외삽에 필요한 최소 프레임 (이 값보다 커야 함)
_MIN_EXTRAPOLATION_FRAME = 2


class FieldValueInitializer(Initializer):
    """직전 프레임 / 이웃 서브셋 필드 값 초기 추정기"""

    name = 'field_values'

    def source_id(self, subset_id: int) -> int:
        """초기값을 가져올 서브셋 id (이웃 지정이 없으면 자기 자신)"""
        ctx = self.context
        sid = subset_id
        method = ctx.initialization_method
        if (method == USE_NEIGHBOR_VALUES or
                (method == USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY and ctx.image_frame == 0)):
            sid = int(ctx.local_field_value(subset_id, NEIGHBOR_ID))
        if sid == NO_NEIGHBOR:
            sid = subset_id
        return sid

    def _project(self, sid: int, field: int, extrapolate: bool) -> float:
        ctx = self.context
        last = ctx.local_field_value(sid, field)
        if extrapolate:
            return last + (last - ctx.local_field_value_nm1(sid, field))
        return last

    def initial_guess(self, subset_id: int, deformation: np.ndarray) -> int:
        check_deformation(deformation)
        ctx = self.context
        sid = self.source_id(subset_id)

        if not ctx.is_owned(sid):
            raise RuntimeError(
                f"서브셋 {subset_id}: 초기화 원본 서브셋 {sid}이(가) 이 처리 단위에 없습니다")

        if ctx.local_field_value(sid, SIGMA) == NO_SOLUTION:
            _logger.debug(f"subset {subset_id}: 원본 {sid}에 이전 해 없음")
            return INITIALIZE_FAILED

        extrapolate = (ctx.projection_method == VELOCITY_BASED
                       and ctx.image_frame > _MIN_EXTRAPOLATION_FRAME)

        if ctx.translation_enabled:
            deformation[DISPLACEMENT_X] = self._project(sid, DISPLACEMENT_X, extrapolate)
            deformation[DISPLACEMENT_Y] = self._project(sid, DISPLACEMENT_Y, extrapolate)
        if ctx.rotation_enabled:
            deformation[ROTATION_Z] = self._project(sid, ROTATION_Z, extrapolate)
        if ctx.normal_strain_enabled:
            deformation[NORMAL_STRAIN_X] = ctx.local_field_value(sid, NORMAL_STRAIN_X)
            deformation[NORMAL_STRAIN_Y] = ctx.local_field_value(sid, NORMAL_STRAIN_Y)
        if ctx.shear_strain_enabled:
            deformation[SHEAR_STRAIN_XY] = ctx.local_field_value(sid, SHEAR_STRAIN_XY)

        _logger.debug(
            f"subset {subset_id} 초기값 (원본 {sid}, 투영 {ctx.projection_method}, "
            f"외삽 {extrapolate}): u={deformation[DISPLACEMENT_X]:.4f} "
            f"v={deformation[DISPLACEMENT_Y]:.4f} theta={deformation[ROTATION_Z]:.5f} "
            f"e_x={deformation[NORMAL_STRAIN_X]:.5f} e_y={deformation[NORMAL_STRAIN_Y]:.5f} "
            f"g_xy={deformation[SHEAR_STRAIN_XY]:.5f}")

        if sid == subset_id:
            return INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL
        return INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL
