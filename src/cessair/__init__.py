"""Cessair — incremental build orchestrator for component-based static sites.

Turns a tree of page components into a deployable bundle: a generated
route module, rendered HTML pages, compiled stylesheets and a bundled
script payload.

Quick start::

    import cessair

    cessair.build("my-site/")

Two modes::

    cessair.build("my-site/")               # One-shot full build
    cessair.build("my-site/", watch=True)   # Full build, then incremental rebuilds

"""

__version__ = "0.1.0"
__all__ = [
    "CessairConfig",
    "__version__",
    "build",
    "yarnpm",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import cessair`` fast while providing a clean top-level API.
    """
    if name == "CessairConfig":
        from cessair.config import CessairConfig

        return CessairConfig

    if name in ("build", "yarnpm"):
        from cessair import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
