"""IO 모듈"""

from .loader import load_path_file, write_points, load_image, get_image_files
from .exporter import ResultExporter

__all__ = [
    'load_path_file',
    'write_points',
    'load_image',
    'get_image_files',
    'ResultExporter'
]
