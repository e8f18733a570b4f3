"""Import smoke tests."""


def test_import_app():
    """Test that we can import the app module."""
    from tours_api.main import create_app
    app = create_app()
    assert app is not None
    assert any(getattr(route, "path", None) == "/api/v1/tours" for route in app.routes)


def test_import_seed_commands():
    from tours_api.seed import COMMANDS

    assert set(COMMANDS) == {"import", "delete"}
