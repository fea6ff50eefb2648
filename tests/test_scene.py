import numpy as np
import pytest

from sparkium.material import Material
from sparkium.scene import Scene


def _emissive(strength=1.0):
    return Material(emission=(1.0, 1.0, 1.0), emission_strength=strength)


def test_entity_ids_are_sequential():
    scene = Scene(8)
    ids = [scene.create_entity().entity_id for _ in range(3)]
    assert ids == [0, 1, 2]
    assert [e.entity_id for e in scene.entities()] == [0, 1, 2]
    assert len(scene) == 3


def test_entity_lookup():
    scene = Scene(4)
    created = scene.create_entity()
    assert scene.entity(0) is created
    assert scene.get_entity(0) is created
    assert scene.get_entity(5) is None
    with pytest.raises(KeyError):
        scene.entity(5)


def test_capacity_and_bad_size():
    scene = Scene(1)
    scene.create_entity()
    with pytest.raises(RuntimeError):
        scene.create_entity()
    with pytest.raises(ValueError):
        Scene(0)


def test_update_callback_respects_persistence():
    scene = Scene(2)
    calls = []
    scene.set_update_callback(lambda s, dt: calls.append((s, dt)))
    scene.update(0.5)
    assert calls == [(scene, 0.5)]
    scene.settings.persistence = 1.0
    scene.update(0.25)
    assert len(calls) == 1


def test_emission_cdf_without_emitters():
    scene = Scene(4)
    scene.create_entity()
    scene.create_entity()
    total = scene.update_emission({0: 1.0})
    assert total == 0.0
    assert [e.emission_cdf for e in scene.entities()] == [0.0, 0.0]
    assert scene.settings.num_entity == 2
    assert scene.settings.total_emission_energy == 0.0


def test_emission_cdf_is_monotone_and_ends_at_one():
    scene = Scene(4)
    for strength in (1.0, 0.0, 3.0):
        scene.create_entity().material = _emissive(strength)
    total = scene.update_emission(lambda mesh_id: 2.0)
    cdfs = [e.emission_cdf for e in scene.entities()]
    assert total > 0.0
    assert cdfs == sorted(cdfs)
    assert cdfs[-1] == pytest.approx(1.0)
    assert cdfs[0] == pytest.approx(cdfs[1])
    assert scene.settings.total_emission_energy == total


def test_emission_scales_with_transform_area():
    plain = Scene(1)
    plain.create_entity().material = _emissive()
    base = plain.update_emission({0: 1.0})

    scaled = Scene(1)
    entity = scaled.create_entity()
    entity.material = _emissive()
    entity.metadata.transform = np.diag([2.0, 2.0, 2.0, 1.0])
    assert scaled.update_emission({0: 1.0}) == pytest.approx(base * 4)


def test_emission_mesh_area_lookup_missing():
    scene = Scene(1)
    scene.create_entity().material = _emissive()
    with pytest.raises(KeyError):
        scene.update_emission({})


def test_camera_settings_matrices():
    scene = Scene(1)
    scene.camera.position = (1.0, 2.0, 3.0)
    near, far = scene.camera_settings(1.5)
    np.testing.assert_allclose(near.projection, scene.camera.projection(1.5))
    np.testing.assert_allclose(far.projection, scene.camera.projection_far(1.5))
    np.testing.assert_allclose(near.view, scene.camera.view())
    np.testing.assert_allclose(near.inv_view @ near.view, np.identity(4), atol=1e-9)
    np.testing.assert_allclose(far.inv_projection @ far.projection, np.identity(4), atol=1e-9)
    assert near.gamma == scene.settings.gamma


def test_camera_settings_rejects_zero_aspect():
    with pytest.raises(ValueError):
        Scene(1).camera_settings(0.0)


def test_finish_frame_accumulates_samples():
    scene = Scene(1)
    scene.settings.num_sample = 7
    scene.finish_frame()
    scene.finish_frame()
    assert scene.settings.accumulated_sample == 14