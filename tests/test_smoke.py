"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import chatbridge

    assert chatbridge.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from chatbridge.cli import main

    assert callable(main)


def test_interface_imports() -> None:
    from chatbridge.core.interface import (
        CanonicalRequest,
        CanonicalResponse,
        ConverterRegistry,
        EngineConfig,
        FormatConverter,
        build_default_registry,
    )

    assert FormatConverter is not None
    assert ConverterRegistry is not None
    assert EngineConfig is not None
    assert CanonicalRequest is not None
    assert CanonicalResponse is not None
    assert callable(build_default_registry)


def test_lazy_import_from_chatbridge() -> None:
    import chatbridge

    assert chatbridge.FormatConverter is not None
    assert callable(chatbridge.convert_request)
    assert chatbridge.detect_request_format({"prompt": "x"}) == "ollama"
