# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Print-size arithmetic and paper-format presets

Pure functions over already-decoded values. Nothing here reads
or writes image data.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass
from typing import Dict, List, Union

from dpichanger.results import DpiValue

CM_PER_INCH = 2.54


@dataclass(frozen=True)
class PrintSize:
    """Physical size of an image when printed at a given DPI."""
    width_in: float
    height_in: float

    @property
    def width_cm(self) -> float:
        return self.width_in * CM_PER_INCH

    @property
    def height_cm(self) -> float:
        return self.height_in * CM_PER_INCH

    def as_dict(self) -> Dict[str, float]:
        return {
            'WidthInches': round(self.width_in, 2),
            'HeightInches': round(self.height_in, 2),
            'WidthCm': round(self.width_cm, 2),
            'HeightCm': round(self.height_cm, 2),
        }


@dataclass(frozen=True)
class PaperFormat:
    name: str
    width_in: float
    height_in: float
    recommended_dpi: int
    description: str


PAPER_FORMATS: List[PaperFormat] = [
    PaperFormat("A4 Document", 8.27, 11.69, 150, "Standard document printing"),
    PaperFormat("A4 Photo", 8.27, 11.69, 300, "High-quality photo printing"),
    PaperFormat("US Letter Document", 8.5, 11, 150, "Standard document printing"),
    PaperFormat("US Letter Photo", 8.5, 11, 300, "High-quality photo printing"),
    PaperFormat("4×6 Photo", 6, 4, 300, "Standard photo print"),
    PaperFormat("5×7 Photo", 7, 5, 300, "Standard photo print"),
    PaperFormat("8×10 Photo", 10, 8, 300, "Large photo print"),
    PaperFormat("Business Card", 3.5, 2, 600, "High-quality business printing"),
    PaperFormat("Instagram Post", 5, 5, 150, "Social media printing"),
    PaperFormat("Poster (11×17)", 17, 11, 150, "Large format printing"),
]


def _normalize_name(name: str) -> str:
    return name.lower().replace('×', 'x').replace('_', ' ').strip()


def find_paper_format(name: str) -> PaperFormat:
    """
    Look up a paper format by name.

    Matching ignores case, and accepts "x" for "×" and "_" for spaces,
    so "4x6_photo" finds "4×6 Photo".

    Raises:
        KeyError: If no preset has that name
    """
    wanted = _normalize_name(name)
    for paper in PAPER_FORMATS:
        if _normalize_name(paper.name) == wanted:
            return paper
    raise KeyError(name)


def print_dimensions(width_px: int, height_px: int, dpi: Union[DpiValue, int]) -> PrintSize:
    """
    Compute the printed size of an image.

    Args:
        width_px: Image width in pixels
        height_px: Image height in pixels
        dpi: Resolution, scalar or per-axis

    Returns:
        PrintSize in inches (centimeters available as properties)
    """
    dpi = DpiValue.coerce(dpi)
    return PrintSize(width_px / dpi.x, height_px / dpi.y)


def fits_on_paper(size: PrintSize, paper: PaperFormat) -> bool:
    """True if the print fits the paper in portrait or landscape orientation."""
    return (
        (size.width_in <= paper.width_in and size.height_in <= paper.height_in)
        or (size.width_in <= paper.height_in and size.height_in <= paper.width_in)
    )


def might_appear_pixelated(dpi: Union[DpiValue, int], threshold: int = 150) -> bool:
    dpi = DpiValue.coerce(dpi)
    return min(dpi.x, dpi.y) < threshold
