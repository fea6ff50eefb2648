import struct

import numpy as np
import pytest

from sparkium.entity import Entity, EntityMetadata, EnvMap, EnvMapSettings
from sparkium.material import Material


def test_metadata_pack_size_is_16_byte_aligned():
    data = EntityMetadata().pack()
    assert len(data) % 16 == 0
    assert len(data) == 112


def test_metadata_pack_transform_is_column_major():
    transform = np.identity(4)
    transform[0, 3] = 5.0
    data = EntityMetadata(transform=transform).pack()
    columns = np.frombuffer(data[:64], dtype="<f4").reshape(4, 4)
    assert np.array_equal(columns.T, transform.astype(np.float32))


def test_metadata_pack_scalars_round_trip():
    metadata = EntityMetadata(
        entity_id=3, mesh_id=7, albedo_texture_id=11, roughness_texture_id=13,
        normal_texture_id=17, albedo_detail_texture_id=19, emission_cdf=0.5,
        detail_scale_offset=(2.0, 4.0, 0.25, 0.75),
    )
    values = struct.unpack_from("<6I2f4f", metadata.pack(), 64)
    assert values[:6] == (3, 7, 11, 13, 17, 19)
    assert values[6] == 0.5
    assert values[8:] == (2.0, 4.0, 0.25, 0.75)


def test_metadata_default_detail_scale_offset_in_pack():
    values = struct.unpack_from("<4f", EntityMetadata().pack(), 96)
    assert values == (10.0, 10.0, 0.0, 0.0)


def test_metadata_pack_rejects_bad_matrix():
    with pytest.raises(ValueError):
        EntityMetadata(transform=np.identity(3)).pack()


def test_entity_defaults():
    entity = Entity(4)
    assert entity.entity_id == 4
    assert entity.mesh_id == 0
    assert np.array_equal(entity.transform, np.identity(4))
    assert entity.material == Material()


def test_entity_emission_cdf_round_trip():
    entity = Entity(0)
    entity.emission_cdf = 0.25
    assert entity.emission_cdf == 0.25
    assert entity.metadata.emission_cdf == 0.25


def test_translated_metadata_with_mappings():
    entity = Entity(1)
    entity.metadata.mesh_id = 2
    entity.metadata.albedo_texture_id = 3
    entity.metadata.albedo_detail_texture_id = 4
    entity.metadata.roughness_texture_id = 5
    translated = entity.translated_metadata({3: 30, 4: 40}, {2: 20})
    assert translated.mesh_id == 20
    assert translated.albedo_texture_id == 30
    assert translated.albedo_detail_texture_id == 40
    assert translated.roughness_texture_id == 5
    assert translated.entity_id == 1


def test_translated_metadata_leaves_original_untouched():
    entity = Entity(1)
    entity.metadata.mesh_id = 2
    translated = entity.translated_metadata(lambda i: i + 100, lambda i: i + 200)
    translated.transform[0, 0] = 9.0
    assert entity.mesh_id == 2
    assert entity.transform[0, 0] == 1.0
    assert translated.mesh_id == 202


def test_translated_metadata_missing_binding_raises():
    entity = Entity(0)
    with pytest.raises(KeyError):
        entity.translated_metadata({}, {0: 0})


def test_translated_metadata_bad_binding_type():
    with pytest.raises(TypeError):
        Entity(0).translated_metadata(5, {0: 0})


def test_envmap_settings_pack_round_trip():
    settings = EnvMapSettings(offset=0.5, scale=2.0, envmap_id=9, reflect=-1)
    data = settings.pack()
    assert len(data) == 16
    assert struct.unpack("<2fIi", data) == (0.5, 2.0, 9, -1)


def test_envmap_set_texture_and_translate():
    envmap = EnvMap()
    envmap.set_envmap_texture(6)
    translated = envmap.translated_settings({6: 60})
    assert translated.envmap_id == 60
    assert envmap.settings.envmap_id == 6
    assert translated.scale == envmap.settings.scale


def test_envmap_default_settings():
    assert EnvMap().settings == EnvMapSettings(offset=0.0, scale=1.0, envmap_id=0, reflect=0)