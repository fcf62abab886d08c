"""Tests for project layout and packaging metadata."""

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def test_package_directory_exists():
    assert (PROJECT_ROOT / "nifti2png").is_dir()


def test_package_init_exists():
    assert (PROJECT_ROOT / "nifti2png" / "__init__.py").is_file()


def test_tests_init_exists():
    assert (PROJECT_ROOT / "tests" / "__init__.py").is_file()


def test_runtime_dependencies_in_pyproject():
    """nibabel, numpy, Pillow and tqdm should be declared dependencies."""
    pyproject_content = (PROJECT_ROOT / "pyproject.toml").read_text()

    for name in ("nibabel", "numpy", "pillow", "tqdm"):
        assert name in pyproject_content.lower(), f"{name} should be in pyproject.toml"


def test_console_script_declared():
    pyproject_content = (PROJECT_ROOT / "pyproject.toml").read_text()

    assert 'nifti2png = "nifti2png.cli:main"' in pyproject_content
    assert 'nifti-slice = "nifti2png.cli:slice_main"' in pyproject_content


def test_packages_importable():
    import nifti2png
    import nifti2png.cli

    assert nifti2png.convert is not None
    assert "rasterize" in nifti2png.__all__
    assert "raster_to_array" in nifti2png.__all__
