# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Configuration for DPI reading and reporting

Copyright 2025 DNAi inc.
"""

from typing import List, Optional


class DPIChangerConfig:
    """
    Settings used by the file helpers and the command-line interface.

    The fallback DPI is a display policy only: it is reported when a file
    carries no resolution metadata and is never written into a file.
    """

    DEFAULT_FALLBACK_DPI = 72
    DEFAULT_PRESETS = [72, 150, 300, 600]
    DEFAULT_PIXELATION_THRESHOLD = 150

    def __init__(
        self,
        fallback_dpi: int = DEFAULT_FALLBACK_DPI,
        presets: Optional[List[int]] = None,
        pixelation_threshold: int = DEFAULT_PIXELATION_THRESHOLD,
        verify_crc: bool = False,
    ):
        """
        Initialize configuration.

        Args:
            fallback_dpi: DPI shown when a file has no density metadata
            presets: Common DPI values offered to the user
            pixelation_threshold: DPI below which prints may look pixelated
            verify_crc: Ignore PNG pHYs chunks whose CRC does not match
        """
        if fallback_dpi < 1:
            raise ValueError(f"fallback_dpi must be at least 1, got {fallback_dpi}")
        self.fallback_dpi = fallback_dpi
        self.presets = list(presets) if presets is not None else list(self.DEFAULT_PRESETS)
        self.pixelation_threshold = pixelation_threshold
        self.verify_crc = verify_crc

    def __repr__(self) -> str:
        return (
            f"DPIChangerConfig(fallback_dpi={self.fallback_dpi}, presets={self.presets}, "
            f"pixelation_threshold={self.pixelation_threshold}, verify_crc={self.verify_crc})"
        )
