"""초기 추정 모듈"""

from .base import Initializer
from .path_index import PathIndex, build_triads
from .path import PathInitializer
from .phase_correlation import PhaseCorrelationInitializer, phase_correlate_x_y
from .field_value import FieldValueInitializer
from .factory import (
    INITIALIZERS,
    create_initializer,
    create_initializer_from_settings,
    configure_context,
    create_subset,
    create_motion_utility,
)

__all__ = [
    # Interface
    'Initializer',

    # Path
    'PathIndex',
    'build_triads',
    'PathInitializer',

    # Phase correlation
    'PhaseCorrelationInitializer',
    'phase_correlate_x_y',

    # Field values
    'FieldValueInitializer',

    # Factory
    'INITIALIZERS',
    'create_initializer',
    'create_initializer_from_settings',
    'configure_context',
    'create_subset',
    'create_motion_utility',
]
