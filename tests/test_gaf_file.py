import numpy as np
import pytest
from PIL import Image

from gafkit import decode
from gafkit.colors import PixelFormat
from gafkit.gaf_file import ColorLayer, CompositeFrame, GafEntry, GafFrame, PaletteLayer
from gafkit.palette import Palette, load_palette


def _leaf(pixels, x_offset=0, y_offset=0, transparency_index=0):
    array = np.array(pixels, dtype=np.uint8)
    return GafFrame(
        width=array.shape[1],
        height=array.shape[0],
        x_offset=x_offset,
        y_offset=y_offset,
        transparency_index=transparency_index,
        compression=0,
        layer=PaletteLayer(array),
    )


# ============================================================================
# PALETTES
# ============================================================================

def test_palette_from_rgbx_quads():
    data = bytes(b for i in range(256) for b in (i, 255 - i, 7, 0xEE))
    palette = Palette.from_bytes(data)
    assert palette[0] == (0, 255, 7)
    assert palette[255] == (255, 0, 7)


def test_palette_from_rgb_triplets(tmp_path):
    data = bytes(b for i in range(256) for b in (i, i, 0))
    path = tmp_path / "game.pal"
    path.write_bytes(data)
    assert load_palette(str(path))[10] == (10, 10, 0)


def test_palette_rejects_other_sizes():
    with pytest.raises(ValueError):
        Palette.from_bytes(bytes(100))


# ============================================================================
# LAYERS AND FRAMES
# ============================================================================

def test_palette_layer_to_rgba_applies_transparency():
    layer = PaletteLayer(np.array([[0, 5], [9, 5]], dtype=np.uint8))
    rgba = layer.to_rgba(Palette.grayscale(), transparency_index=9)

    assert rgba.shape == (2, 2, 4)
    assert tuple(rgba[0, 1]) == (5, 5, 5, 255)
    assert rgba[1, 0, 3] == 0


def test_color_layer_to_rgba():
    layer = ColorLayer(np.array([[0x8000, 0x7FFF]], dtype=np.uint16), PixelFormat.ARGB1555)
    rgba = layer.to_rgba()
    assert tuple(rgba[0, 0]) == (0, 0, 0, 255)
    assert tuple(rgba[0, 1]) == (255, 255, 255, 0)


def test_composite_frame_aligns_layers_on_hotspot():
    base = _leaf([[1, 1], [1, 1]], x_offset=2, y_offset=2)
    turret = _leaf([[7]])
    frame = CompositeFrame(width=4, height=4, x_offset=2, y_offset=2, transparency_index=0,
                           layers=[base, turret])

    rgba = frame.to_rgba(Palette.grayscale())

    assert rgba.shape == (4, 4, 4)
    assert tuple(rgba[0, 0]) == (1, 1, 1, 255)
    assert tuple(rgba[2, 2]) == (7, 7, 7, 255)
    assert rgba[3, 3, 3] == 0


def test_later_layers_draw_over_earlier_ones():
    bottom = _leaf([[3, 3]])
    top = _leaf([[0, 8]], transparency_index=0)
    frame = CompositeFrame(width=2, height=1, x_offset=0, y_offset=0, transparency_index=0,
                           layers=[bottom, top])

    rgba = frame.to_rgba(Palette.grayscale())

    assert rgba[0, :, 0].tolist() == [3, 8]


# ============================================================================
# ENTRIES
# ============================================================================

def test_get_frame_image(sample_gaf):
    walk = decode(sample_gaf).get_entry("walk")

    img = walk.get_frame_image(1)
    assert img.size == (3, 2)
    assert img.mode == 'RGBA'
    assert img.getpixel((0, 1))[3] == 0

    scaled = walk.get_frame_image(1, scale=2)
    assert scaled.size == (6, 4)
    assert walk.get_frame_image(1, target_width=9).size == (9, 6)


def test_get_frame_image_out_of_range(sample_gaf):
    walk = decode(sample_gaf).get_entry("walk")
    with pytest.raises(IndexError):
        walk.get_frame_image(0)
    with pytest.raises(IndexError):
        walk.get_frame_image(3)


def test_animation_frames_share_a_canvas():
    entry = GafEntry(name="anim", frames=[
        _leaf([[1, 1]], x_offset=0, y_offset=0),
        _leaf([[2], [2]], x_offset=1, y_offset=1),
    ])

    images = entry.get_animation_images(Palette.grayscale())

    # left=1, top=1, right=max(2-0, 1-1)=2, bottom=max(1-0, 2-1)=1
    assert [img.size for img in images] == [(3, 2), (3, 2)]
    assert images[0].getpixel((1, 1))[:3] == (1, 1, 1)
    assert images[1].getpixel((0, 0))[:3] == (2, 2, 2)


def test_animation_of_empty_entry_fails():
    with pytest.raises(ValueError):
        GafEntry(name="empty").get_animation_images()


def test_save_to_webp(tmp_path, sample_gaf):
    walk = decode(sample_gaf).get_entry("walk")
    out = tmp_path / "walk.webp"

    walk.save_to_webp(str(out), scale=2)

    with Image.open(out) as img:
        assert img.size == (6, 4)
        assert getattr(img, 'n_frames', 1) == 2


def test_save_frames(tmp_path, sample_gaf):
    tower = decode(sample_gaf).get_entry("tower")

    paths = tower.save_frames(str(tmp_path), "tower")

    assert len(paths) == 1
    with Image.open(paths[0]) as img:
        assert img.size == (4, 4)
