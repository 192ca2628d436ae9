from .trc_file import TrcFile, read_level, KNOWN_VERSIONS, TR4_VERSION, TR4_DEMO_VERSION
from .trc_types import Level, LevelData, Room, Mesh, MeshComponent, Normals, Lights, Sample

try:
    from .trc_handler import TrcHandler
except ImportError:
    TrcHandler = None

__all__ = [
    'TrcFile',
    'read_level',
    'KNOWN_VERSIONS',
    'TR4_VERSION',
    'TR4_DEMO_VERSION',
    'Level',
    'LevelData',
    'Room',
    'Mesh',
    'MeshComponent',
    'Normals',
    'Lights',
    'Sample',
    'TrcHandler',
]
