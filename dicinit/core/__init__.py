"""초기 추정 핵심 모듈"""

from .context import (
    FieldContext,
    USE_FIELD_VALUES,
    USE_NEIGHBOR_VALUES,
    USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY,
    DISPLACEMENT_BASED,
    VELOCITY_BASED,
)
from .subset import Subset, REF_INTENSITIES, DEF_INTENSITIES
from .interpolation import ImageInterpolator, InterpolatorCache
from .image import crop_window, image_diff, gaussian_smooth
from .motion import (
    MotionTestUtility,
    MOTION_NOT_SET,
    MOTION_TRUE,
    MOTION_FALSE,
)
from .initial_guess import (
    Initializer,
    PathIndex,
    PathInitializer,
    PhaseCorrelationInitializer,
    FieldValueInitializer,
    phase_correlate_x_y,
    create_initializer,
    create_initializer_from_settings,
    configure_context,
    create_subset,
    create_motion_utility,
)

__all__ = [
    'FieldContext',
    'USE_FIELD_VALUES',
    'USE_NEIGHBOR_VALUES',
    'USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY',
    'DISPLACEMENT_BASED',
    'VELOCITY_BASED',
    'Subset',
    'REF_INTENSITIES',
    'DEF_INTENSITIES',
    'ImageInterpolator',
    'InterpolatorCache',
    'crop_window',
    'image_diff',
    'gaussian_smooth',
    'MotionTestUtility',
    'MOTION_NOT_SET',
    'MOTION_TRUE',
    'MOTION_FALSE',
    'Initializer',
    'PathIndex',
    'PathInitializer',
    'PhaseCorrelationInitializer',
    'FieldValueInitializer',
    'phase_correlate_x_y',
    'create_initializer',
    'create_initializer_from_settings',
    'configure_context',
    'create_subset',
    'create_motion_utility',
]
