try:
    from importlib.metadata import version as _pkg_version
    VERSION = _pkg_version("regpush")
except Exception:
    VERSION = "dev"
