from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("projcfg")
except PackageNotFoundError:
    # Source checkout without an installed distribution: keep in sync with pyproject.toml
    __version__ = "0.3.0"
