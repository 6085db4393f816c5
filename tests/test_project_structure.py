"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import salvo

    assert salvo.__version__


def test_submodules_exist() -> None:
    modules = [
        "salvo.engine.coordinates",
        "salvo.engine.ship",
        "salvo.engine.fleet",
        "salvo.engine.shots",
        "salvo.engine.game",
        "salvo.engine.instrumented_game",
        "salvo.ai",
        "salvo.telemetry",
        "salvo.cli",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None
