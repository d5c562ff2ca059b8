"""DIC 서브셋 초기 추정 패키지"""

from .models import (
    Triad,
    SubsetInitResult,
    FrameReport,
    SequenceReport,
    new_deformation,
    INITIALIZE_SUCCESSFUL,
    INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL,
    INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL,
    INITIALIZE_FAILED,
)
from .core import (
    FieldContext,
    Subset,
    MotionTestUtility,
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
from .io import load_path_file, load_image, get_image_files, ResultExporter
from .batch import SequenceRunner
from .utils import SettingsManager, setup_logger

__version__ = "1.0.0"

__all__ = [
    # Models
    'Triad',
    'SubsetInitResult',
    'FrameReport',
    'SequenceReport',
    'new_deformation',
    'INITIALIZE_SUCCESSFUL',
    'INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL',
    'INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL',
    'INITIALIZE_FAILED',

    # Core
    'FieldContext',
    'Subset',
    'MotionTestUtility',

    # Initializers
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

    # IO
    'load_path_file',
    'load_image',
    'get_image_files',
    'ResultExporter',

    # Batch
    'SequenceRunner',

    # Utils
    'SettingsManager',
    'setup_logger',
]
