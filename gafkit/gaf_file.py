import os
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .colors import PixelFormat, packed_to_rgba
from .config import Config
from .errors import RowWidthAnomaly
from .palette import Palette


# ============================================================================
# LAYERS
# ============================================================================

class PaletteLayer(object):
    """Decoded palette indices of one single-layer frame."""

    def __init__(self, pixels: np.ndarray):
        self._pixels = pixels

    @property
    def pixels(self) -> np.ndarray:
        """uint8 array of shape (height, width)."""
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def to_list(self) -> List[int]:
        """Row-major palette indices."""
        return self._pixels.reshape(-1).tolist()

    def to_rgba(self, palette: Optional[Palette] = None, transparency_index: Optional[int] = None) -> np.ndarray:
        """
        Look up every index in the palette.

        Args:
            palette: Color table (default: grayscale ramp)
            transparency_index: Index rendered fully transparent, if any

        Returns:
            uint8 array of shape (height, width, 4)
        """
        if palette is None:
            palette = Palette.grayscale()
        rgb = palette.colors[self._pixels]
        alpha = np.full(self._pixels.shape, 255, dtype=np.uint8)
        if transparency_index is not None:
            alpha[self._pixels == transparency_index] = 0
        return np.dstack([rgb, alpha])

    def __repr__(self):
        return f"PaletteLayer({self.width}x{self.height})"


class ColorLayer(object):
    """Packed 16-bit colors of one single-layer frame, left unconverted."""

    def __init__(self, pixels: np.ndarray, pixel_format: PixelFormat):
        self._pixels = pixels
        self._pixel_format = pixel_format

    @property
    def pixels(self) -> np.ndarray:
        """uint16 array of shape (height, width)."""
        return self._pixels

    @property
    def pixel_format(self) -> PixelFormat:
        return self._pixel_format

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def to_list(self) -> List[int]:
        return self._pixels.reshape(-1).tolist()

    def to_rgba(self) -> np.ndarray:
        return packed_to_rgba(self._pixels, self._pixel_format)

    def __repr__(self):
        return f"ColorLayer({self.width}x{self.height}, {self._pixel_format.value})"


Layer = Union[PaletteLayer, ColorLayer]


# ============================================================================
# FRAMES
# ============================================================================

@dataclass
class GafFrame:
    """A single-layer frame: one image plus its hotspot offsets."""
    width: int
    height: int
    x_offset: int
    y_offset: int
    transparency_index: int
    compression: int
    layer: Layer
    offset: Optional[int] = None
    duration: int = 0

    @property
    def is_composite(self) -> bool:
        return False

    def to_rgba(self, palette: Optional[Palette] = None) -> np.ndarray:
        if isinstance(self.layer, ColorLayer):
            return self.layer.to_rgba()
        return self.layer.to_rgba(palette, self.transparency_index)


@dataclass
class CompositeFrame:
    """A multi-layer frame assembled from single-layer sub-frames."""
    width: int
    height: int
    x_offset: int
    y_offset: int
    transparency_index: int
    layers: List[GafFrame] = field(default_factory=list)
    offset: Optional[int] = None
    duration: int = 0

    @property
    def is_composite(self) -> bool:
        return True

    def to_rgba(self, palette: Optional[Palette] = None) -> np.ndarray:
        """
        Stack the sub-frames in order on a canvas of this frame's size.

        Each sub-frame is placed so that its hotspot lines up with the
        composite frame's hotspot.
        """
        canvas = Image.new('RGBA', (self.width, self.height), Config.DEFAULT_TRANSPARENT_COLOR)
        for leaf in self.layers:
            rgba = leaf.to_rgba(palette)
            if rgba.size == 0:
                continue
            img = Image.fromarray(rgba)
            position = (self.x_offset - leaf.x_offset, self.y_offset - leaf.y_offset)
            canvas.paste(img, position, img)
        return np.asarray(canvas)


Frame = Union[GafFrame, CompositeFrame]


# ============================================================================
# ENTRIES
# ============================================================================

def _resize(
    img: Image.Image,
    scale: Union[int, float] = 1,
    target_width: int = None,
    target_height: int = None,
) -> Image.Image:
    """
    Resize image based on scale or target dimensions.

    Args:
        img: PIL Image to resize
        scale: Scale factor (default 1, no scaling)
        target_width: Optional explicit target width
        target_height: Optional explicit target height

    Returns:
        Resized PIL Image
    """
    if target_width is not None and target_height is not None:
        return img.resize((target_width, target_height), Image.NEAREST)
    elif target_width is not None:
        new_height = max(1, int(img.height * target_width / img.width))
        return img.resize((target_width, new_height), Image.NEAREST)
    elif target_height is not None:
        new_width = max(1, int(img.width * target_height / img.height))
        return img.resize((new_width, target_height), Image.NEAREST)
    elif scale != 1:
        new_width = max(1, int(img.width * scale))
        new_height = max(1, int(img.height * scale))
        return img.resize((new_width, new_height), Image.NEAREST)
    return img


@dataclass
class GafEntry:
    """A named sequence of animation frames."""
    name: str
    frames: List[Frame] = field(default_factory=list)
    offset: Optional[int] = None

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def _frame(self, frame_number: int) -> Frame:
        if frame_number <= 0 or frame_number > self.frame_count:
            raise IndexError(f"Frame number {frame_number} out of range (1-{self.frame_count})")
        return self.frames[frame_number - 1]

    def get_frame_image(
        self,
        frame_number: int,
        palette: Optional[Palette] = None,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> Image.Image:
        """
        Get Pillow Image of a frame.

        Args:
            frame_number: Frame number (1-indexed)
            palette: Palette for palette-index layers (default: grayscale)
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height

        Returns:
            RGBA PIL Image

        Raises:
            IndexError: If the frame number is out of range
        """
        frame = self._frame(frame_number)
        rgba = frame.to_rgba(palette)
        if rgba.size == 0:
            img = Image.new('RGBA', (1, 1), Config.DEFAULT_TRANSPARENT_COLOR)
        else:
            img = Image.fromarray(rgba)
        return _resize(img, scale=scale, target_width=target_width, target_height=target_height)

    def _canvas_layout(self, images: List[Image.Image]) -> Tuple[Tuple[int, int], List[Tuple[int, int]]]:
        # Align every frame on its hotspot inside one shared canvas
        left = max(frame.x_offset for frame in self.frames)
        top = max(frame.y_offset for frame in self.frames)
        right = max(img.width - frame.x_offset for frame, img in zip(self.frames, images))
        bottom = max(img.height - frame.y_offset for frame, img in zip(self.frames, images))
        size = (max(1, left + right), max(1, top + bottom))
        positions = [(left - frame.x_offset, top - frame.y_offset) for frame in self.frames]
        return size, positions

    def get_animation_images(self, palette: Optional[Palette] = None) -> List[Image.Image]:
        """All frames drawn on a common canvas, aligned on their hotspots."""
        if not self.frames:
            raise ValueError(f"Entry '{self.name}' has no frames")

        images = [self.get_frame_image(i + 1, palette=palette) for i in range(self.frame_count)]
        size, positions = self._canvas_layout(images)

        aligned = []
        for img, position in zip(images, positions):
            canvas = Image.new('RGBA', size, Config.DEFAULT_TRANSPARENT_COLOR)
            canvas.paste(img, position, img)
            aligned.append(canvas)
        return aligned

    def save_to_webp(
        self,
        output_path: str,
        palette: Optional[Palette] = None,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
        duration: int = None,
    ) -> None:
        """
        Convert the entry's animation to a WebP file.

        Args:
            output_path: Path to save WebP file
            palette: Palette for palette-index layers
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height
            duration: Frame delay in milliseconds (default: Config.FRAME_DELAY_MS)
        """
        webp_frames = [
            _resize(img, scale=scale, target_width=target_width, target_height=target_height)
            for img in self.get_animation_images(palette)
        ]

        webp_frames[0].save(
            output_path,
            append_images=webp_frames[1:],
            duration=duration or Config.FRAME_DELAY_MS,
            save_all=True,
            loop=0,
            lossless=True
        )

    def save_frames(
        self,
        output_dir: str,
        base_name: str,
        palette: Optional[Palette] = None,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> List[str]:
        """Save every frame as a separate PNG, returning the written paths."""
        paths = []
        for number in range(1, self.frame_count + 1):
            img = self.get_frame_image(
                number,
                palette=palette,
                scale=scale,
                target_width=target_width,
                target_height=target_height,
            )
            path = os.path.join(output_dir, f"{base_name}_{number:03d}.png")
            img.save(path)
            paths.append(path)
        return paths


# ============================================================================
# CONTAINER
# ============================================================================

class GafFile(object):
    """
    A decoded GAF container.

    Behaves as a read-only sequence of entries in pointer-table order.
    """

    @property
    def version_id(self) -> int:
        return self._version_id

    @property
    def entries(self) -> List[GafEntry]:
        return list(self._entries)

    @property
    def anomalies(self) -> List[RowWidthAnomaly]:
        """Non-fatal row width anomalies found while decoding."""
        return list(self._anomalies)

    @property
    def entry_names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def __init__(
        self,
        version_id: int,
        entries: List[GafEntry],
        anomalies: Optional[List[RowWidthAnomaly]] = None,
    ):
        self._version_id = version_id
        self._entries = list(entries)
        self._anomalies = list(anomalies or [])

    def get_entry(self, name: str) -> GafEntry:
        """
        Find an entry by name.

        Raises:
            KeyError: If no entry has that name
        """
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GafEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> GafEntry:
        return self._entries[index]

    def __repr__(self):
        return f"GafFile(version_id=0x{self._version_id:08X}, entries={len(self._entries)})"
