"""
Core package init for the bitmap channel Fourier project.
Exposes public modules for import in tests and scripts.
"""
__all__ = ["errors", "raster", "fft_engine", "color_processing", "pipeline"]
