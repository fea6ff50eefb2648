import struct

import numpy as np
import pytest

from sparkium.settings import SceneSettings


def test_pack_size_is_multiple_of_64():
    data = SceneSettings().pack()
    assert len(data) % 64 == 0
    assert len(data) == 4 * 64 + 64


def test_pack_defaults_round_trip():
    data = SceneSettings().pack()
    values = struct.unpack_from("<3f3I2f2I", data, 256)
    assert values[0] == pytest.approx(2.2)
    assert values[1] == pytest.approx(1.0)
    assert values[2] == pytest.approx(0.9)
    assert values[3:6] == (0, 10, 32)
    assert values[6] == pytest.approx(100.0)
    assert values[8:10] == (0, 1)


def test_pack_matrices_are_column_major():
    view = np.identity(4)
    view[0, 3] = 7.0
    data = SceneSettings(view=view).pack()
    floats = np.frombuffer(data[128:192], dtype="<f4")
    assert floats[12] == 7.0
    assert floats[3] == 0.0


def test_pack_preserves_fields():
    settings = SceneSettings(num_entity=5, accumulated_sample=40, exposure=2.0)
    values = struct.unpack_from("<3f3I2f2I", settings.pack(), 256)
    assert values[8] == 5
    assert values[3] == 40
    assert values[1] == 2.0


def test_default_matrices_are_identity_and_independent():
    a = SceneSettings()
    b = SceneSettings()
    a.view[0, 0] = 3.0
    assert np.array_equal(b.view, np.identity(4))