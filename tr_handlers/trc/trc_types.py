"""
Record layouts of a Tomb Raider 4 (TRC) level.

Field order is the on-disk order.  Ids stored in these records are plain
integers indexing (or matching) other records; nothing here resolves them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .trc_codecs import (
    Array, Blob, F32, Grid, I8, I16, I32, List, MeshPool, Packed, Prefix, RawBytes,
    SavedScaled, SignSwitch, Struct, SumOf, U8, U16, U32, Zlib, fld,
)


IMG_DIM = 256
NUM_PIXELS = IMG_DIM * IMG_DIM
NUM_MISC_IMAGES = 2
NUM_SOUND_MAP = 370
ZONES_PER_BOX = 10
NO_ROOM = 255
NO_FLIP_ROOM = 0xFFFF
USE_MESH_LIGHT = 0xFFFF


@dataclass(frozen=True)
class Vertex:
    """Integer for the 3h/3i layouts, float for 3f."""
    x: Union[int, float]
    y: Union[int, float]
    z: Union[int, float]


VERTEX_I16 = Packed(Vertex, "3h")
VERTEX_I32 = Packed(Vertex, "3i")
VERTEX_F32 = Packed(Vertex, "3f")


@dataclass(frozen=True)
class RoomVertex:
    vertex: Vertex = fld(VERTEX_I16)  # relative to the room
    flags: int = fld(U16, skip=2)
    color: int = fld(U16)


class _TexturedFace:
    texture_and_flag: int

    @property
    def texture_id(self) -> int:
        return self.texture_and_flag & 0x7FFF

    @property
    def double_sided(self) -> bool:
        return bool(self.texture_and_flag & 0x8000)


@dataclass(frozen=True)
class RoomQuad(_TexturedFace):
    vertex_ids: Tuple[int, ...] = fld(Array(U16, 4))
    texture_and_flag: int = fld(U16)


@dataclass(frozen=True)
class RoomTriangle(_TexturedFace):
    vertex_ids: Tuple[int, ...] = fld(Array(U16, 3))
    texture_and_flag: int = fld(U16)


@dataclass(frozen=True)
class Sprite:
    vertex_id: int = fld(U16)
    texture_id: int = fld(U16)


@dataclass(frozen=True)
class Portal:
    adjoining_room_id: int = fld(U16)
    normal: Vertex = fld(VERTEX_I16)
    vertices: Tuple[Vertex, ...] = fld(Array(VERTEX_I16, 4))


@dataclass(frozen=True)
class Sector:
    floor_data_id: int = fld(U16)
    bitfields: int = fld(U16)
    room_below_id: int = fld(U8)
    floor: int = fld(I8)
    room_above_id: int = fld(U8)
    ceiling: int = fld(I8)

    @property
    def room_below(self) -> Optional[int]:
        return None if self.room_below_id == NO_ROOM else self.room_below_id

    @property
    def room_above(self) -> Optional[int]:
        return None if self.room_above_id == NO_ROOM else self.room_above_id


@dataclass(frozen=True)
class Light:
    pos: Vertex = fld(VERTEX_I32)
    r: int = fld(U8)
    g: int = fld(U8)
    b: int = fld(U8)
    light_type: int = fld(U8)
    intensity: int = fld(U8, skip=1)
    hotspot: float = fld(F32)
    falloff: float = fld(F32)
    length: float = fld(F32)
    cutoff: float = fld(F32)
    direction: Vertex = fld(VERTEX_F32)


@dataclass(frozen=True)
class RoomStaticMesh:
    pos: Vertex = fld(VERTEX_I32)
    rotation: int = fld(U16)
    color: int = fld(U16)
    static_mesh_id: int = fld(U16, skip=2)


@dataclass(frozen=True)
class Room:
    x: int = fld(I32)
    z: int = fld(I32)
    y_bottom: int = fld(I32)
    y_top: int = fld(I32)
    vertices: Tuple[RoomVertex, ...] = fld(List(Struct(RoomVertex), Prefix(16)), skip=4)
    quads: Tuple[RoomQuad, ...] = fld(List(Struct(RoomQuad), Prefix(16)))
    triangles: Tuple[RoomTriangle, ...] = fld(List(Struct(RoomTriangle), Prefix(16)))
    sprites: Tuple[Sprite, ...] = fld(List(Struct(Sprite), Prefix(16)))
    portals: Tuple[Portal, ...] = fld(List(Struct(Portal), Prefix(16)))
    sectors: Tuple[Tuple[Sector, ...], ...] = fld(Grid(Struct(Sector)))
    color: int = fld(U32)  # argb
    lights: Tuple[Light, ...] = fld(List(Struct(Light), Prefix(16)))
    room_static_meshes: Tuple[RoomStaticMesh, ...] = fld(List(Struct(RoomStaticMesh), Prefix(16)))
    flip_room_id: int = fld(U16)
    flags: int = fld(U16)
    water_effect: int = fld(U8)
    reverb: int = fld(U8)
    flip_group: int = fld(U8)

    @property
    def flip_room(self) -> Optional[int]:
        return None if self.flip_room_id == NO_FLIP_ROOM else self.flip_room_id


class MeshComponent:
    """Per-vertex shading data of a mesh: either normals or light values."""

    def __init__(self, values: Tuple):
        self.values = values

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __eq__(self, other):
        return type(self) is type(other) and self.values == other.values

    def __hash__(self):
        return hash((type(self).__name__, self.values))

    def __repr__(self):
        return f"{type(self).__name__}({len(self.values)})"


class Normals(MeshComponent):
    pass


class Lights(MeshComponent):
    pass


@dataclass(frozen=True)
class MeshQuad:
    vertex_ids: Tuple[int, ...] = fld(Array(U16, 4))
    texture_id: int = fld(U16)
    light_effects: int = fld(U16)


@dataclass(frozen=True)
class MeshTriangle:
    vertex_ids: Tuple[int, ...] = fld(Array(U16, 3))
    texture_id: int = fld(U16)
    light_effects: int = fld(U16)


@dataclass(frozen=True)
class Mesh:
    center: Vertex = fld(VERTEX_I16)
    radius: int = fld(I32)
    vertices: Tuple[Vertex, ...] = fld(List(VERTEX_I16, Prefix(16)))
    component: MeshComponent = fld(SignSwitch((VERTEX_I16, Normals), (U16, Lights)))
    quads: Tuple[MeshQuad, ...] = fld(List(Struct(MeshQuad), Prefix(16)))
    triangles: Tuple[MeshTriangle, ...] = fld(List(Struct(MeshTriangle), Prefix(16)))


# center, radius and the four counts of an empty mesh
MESH_HEADER_SIZE = 6 + 4 + 2 * 4


@dataclass(frozen=True)
class Anim:
    frame_offset: int = fld(U32)  # byte offset into frames
    frame_duration: int = fld(U8)  # 30ths of a second
    num_frames: int = fld(U8)
    state: int = fld(U16)
    speed: int = fld(U32)  # fixed-point
    accel: int = fld(U32)
    lateral_speed: int = fld(U32)
    lateral_accel: int = fld(U32)
    frame_start: int = fld(U16)
    frame_end: int = fld(U16)
    next_anim: int = fld(U16)
    next_frame: int = fld(U16)
    num_state_changes: int = fld(U16)
    state_change_id: int = fld(U16)
    num_anim_commands: int = fld(U16)
    anim_command_id: int = fld(U16)


@dataclass(frozen=True)
class StateChange:
    state: int = fld(U16)
    num_anim_dispatches: int = fld(U16)
    anim_dispatch_id: int = fld(U16)


@dataclass(frozen=True)
class AnimDispatch:
    low_frame: int = fld(U16)
    high_frame: int = fld(U16)
    next_anim_id: int = fld(U16)
    next_frame_id: int = fld(U16)


@dataclass(frozen=True)
class MeshNode:
    flags: int = fld(U8)
    x: int = fld(I8)  # relative to parent
    y: int = fld(I8)
    z: int = fld(I8)


@dataclass(frozen=True)
class Model:
    id: int = fld(U32)
    num_meshes: int = fld(U16)
    mesh_id: int = fld(U16)
    mesh_node_id: int = fld(U32)
    frame_offset: int = fld(U32)
    anim_id: int = fld(U16)


@dataclass(frozen=True)
class BoundBox:
    x_min: int = fld(I16)
    x_max: int = fld(I16)
    y_min: int = fld(I16)
    y_max: int = fld(I16)
    z_min: int = fld(I16)
    z_max: int = fld(I16)


@dataclass(frozen=True)
class StaticMesh:
    id: int = fld(U32)
    mesh_id: int = fld(U16)
    visibility: BoundBox = fld(Struct(BoundBox))
    collision: BoundBox = fld(Struct(BoundBox))
    flags: int = fld(U16)


@dataclass(frozen=True)
class SpriteTexture:
    atlas: int = fld(U16)
    width: int = fld(U16, skip=2)
    height: int = fld(U16)
    left: int = fld(I16)
    top: int = fld(I16)
    right: int = fld(I16)
    bottom: int = fld(I16)


@dataclass(frozen=True)
class SpriteSequence:
    sprite_id: int = fld(U32)
    neg_length: int = fld(I16)
    offset: int = fld(U16)

    @property
    def length(self) -> int:
        return -self.neg_length


@dataclass(frozen=True)
class Camera:
    pos: Vertex = fld(VERTEX_I32)
    room_id: int = fld(U16)
    flags: int = fld(U16)


@dataclass(frozen=True)
class FlybyCamera:
    pos: Vertex = fld(VERTEX_I32)
    direction: Vertex = fld(VERTEX_I32)
    chain: int = fld(U8)
    index: int = fld(U8)
    fov: int = fld(U16)
    roll: int = fld(I16)
    timer: int = fld(U16)
    speed: int = fld(U16)
    flags: int = fld(U16)
    room_id: int = fld(U32)


@dataclass(frozen=True)
class SoundSource:
    pos: Vertex = fld(VERTEX_I32)
    sound_id: int = fld(U16)
    flags: int = fld(U16)


@dataclass(frozen=True)
class TRBox:
    z_min: int = fld(U8)  # in sectors
    z_max: int = fld(U8)
    x_min: int = fld(U8)
    x_max: int = fld(U8)
    y: int = fld(I16)
    overlap: int = fld(U16)


@dataclass(frozen=True)
class ObjectTextureVertex:
    x: int = fld(U16)  # fixed-point
    y: int = fld(U16)


@dataclass(frozen=True)
class ObjectTexture:
    blend_mode: int = fld(U16)
    atlas_and_flag: int = fld(U16)
    flags: int = fld(U16)
    vertices: Tuple[ObjectTextureVertex, ...] = fld(Array(Struct(ObjectTextureVertex), 4))
    width: int = fld(U32, skip=8)
    height: int = fld(U32)

    @property
    def atlas_id(self) -> int:
        return self.atlas_and_flag & 0x7FFF

    @property
    def is_triangle(self) -> bool:
        return bool(self.atlas_and_flag & 0x8000)


@dataclass(frozen=True)
class Entity:
    model_id: int = fld(U16)  # matched against Model.id
    room_id: int = fld(U16)
    pos: Vertex = fld(VERTEX_I32)
    angle: int = fld(I16)
    light_intensity: int = fld(U16)
    ocb: int = fld(U16)
    flags: int = fld(U16)

    @property
    def uses_mesh_light(self) -> bool:
        return self.light_intensity == USE_MESH_LIGHT


@dataclass(frozen=True)
class Ai:
    model_id: int = fld(U16)
    room_id: int = fld(U16)
    pos: Vertex = fld(VERTEX_I32)
    ocb: int = fld(U16)
    flags: int = fld(U16)
    angle: int = fld(I32)


@dataclass(frozen=True)
class SoundDetail:
    volume: int = fld(U8, skip=2)
    range: int = fld(U8)  # in sectors
    chance: int = fld(U8)
    pitch: int = fld(U8)
    flags: int = fld(U16)


@dataclass(frozen=True)
class LevelData:
    rooms: Tuple[Room, ...] = fld(List(Struct(Room), Prefix(16)), skip=4)
    floor_data: Tuple[int, ...] = fld(List(U16, Prefix(32)))
    meshes: Tuple[Mesh, ...] = fld(MeshPool(Struct(Mesh), alignment=4, min_size=MESH_HEADER_SIZE))
    mesh_pointers: Tuple[int, ...] = fld(List(U32, Prefix(32)))
    animations: Tuple[Anim, ...] = fld(List(Struct(Anim), Prefix(32)))
    state_changes: Tuple[StateChange, ...] = fld(List(Struct(StateChange), Prefix(32)))
    anim_dispatches: Tuple[AnimDispatch, ...] = fld(List(Struct(AnimDispatch), Prefix(32)))
    anim_commands: Tuple[int, ...] = fld(List(U16, Prefix(32)))
    mesh_nodes: Tuple[MeshNode, ...] = fld(List(Struct(MeshNode), Prefix(32)))
    frames: Tuple[int, ...] = fld(List(U16, Prefix(32)))
    models: Tuple[Model, ...] = fld(List(Struct(Model), Prefix(32)))
    static_meshes: Tuple[StaticMesh, ...] = fld(List(Struct(StaticMesh), Prefix(32)))
    spr: bytes = fld(RawBytes(3))
    sprite_textures: Tuple[SpriteTexture, ...] = fld(List(Struct(SpriteTexture), Prefix(32)))
    sprite_sequences: Tuple[SpriteSequence, ...] = fld(List(Struct(SpriteSequence), Prefix(32)))
    cameras: Tuple[Camera, ...] = fld(List(Struct(Camera), Prefix(32)))
    flyby_cameras: Tuple[FlybyCamera, ...] = fld(List(Struct(FlybyCamera), Prefix(32)))
    sound_sources: Tuple[SoundSource, ...] = fld(List(Struct(SoundSource), Prefix(32)))
    boxes: Tuple[TRBox, ...] = fld(List(Struct(TRBox), Prefix(32)), save_len=True)
    overlaps: Tuple[int, ...] = fld(List(U16, Prefix(32)))
    zones: Tuple[int, ...] = fld(List(U16, SavedScaled("boxes", ZONES_PER_BOX)))
    animated_textures: Tuple[int, ...] = fld(List(U16, Prefix(32)))
    animated_textures_uv_count: int = fld(U8)
    tex: bytes = fld(RawBytes(3))
    object_textures: Tuple[ObjectTexture, ...] = fld(List(Struct(ObjectTexture), Prefix(32)))
    entities: Tuple[Entity, ...] = fld(List(Struct(Entity), Prefix(32)))
    ais: Tuple[Ai, ...] = fld(List(Struct(Ai), Prefix(32)))
    demo_data: bytes = fld(Blob(Prefix(16)))
    sound_map: Tuple[int, ...] = fld(Array(U16, NUM_SOUND_MAP))
    sound_details: Tuple[SoundDetail, ...] = fld(List(Struct(SoundDetail), Prefix(32)))
    sample_indices: Tuple[int, ...] = fld(List(U32, Prefix(32)))
    zero: bytes = fld(RawBytes(6))


@dataclass(frozen=True)
class Sample:
    uncompressed: int = fld(U32)
    data: bytes = fld(Blob(Prefix(32)))


_IMAGE_COUNT = SumOf("num_room_images", "num_obj_images", "num_bump_maps")


@dataclass(frozen=True)
class Level:
    version: int = fld(U32)
    num_room_images: int = fld(U16)
    num_obj_images: int = fld(U16)
    num_bump_maps: int = fld(U16)
    images_32: Tuple[bytes, ...] = fld(Zlib(List(RawBytes(4 * NUM_PIXELS), _IMAGE_COUNT)))
    images_16: Tuple[bytes, ...] = fld(Zlib(List(RawBytes(2 * NUM_PIXELS), _IMAGE_COUNT)))
    misc_images: Tuple[bytes, ...] = fld(Zlib(Array(RawBytes(4 * NUM_PIXELS), NUM_MISC_IMAGES)))
    level_data: LevelData = fld(Zlib(Struct(LevelData)))
    samples: Tuple[Sample, ...] = fld(List(Struct(Sample), Prefix(32)))

    @property
    def num_images(self) -> int:
        return self.num_room_images + self.num_obj_images + self.num_bump_maps
