"""
Tests for package import verification

These tests verify that the s3lite package:
1. Can be imported successfully
2. Only imports the boto3 SDK from its optional backend
3. Has proper entry point registration
"""

import ast
from pathlib import Path


def test_package_imports_successfully():
    """Test that the s3lite package can be imported"""
    import s3lite

    assert s3lite is not None
    assert hasattr(s3lite, "__version__")
    assert s3lite.__version__ == "1.0.0"


def test_public_names():
    """Test that every name in __all__ is exported"""
    import s3lite

    for name in s3lite.__all__:
        assert hasattr(s3lite, name), f"s3lite.{name} is not exported"


def test_submodules_import_successfully():
    """Test that all submodules can be imported"""
    import s3lite.auth
    import s3lite.cli.main
    import s3lite.client
    import s3lite.config
    import s3lite.connection
    import s3lite.response
    import s3lite.sdk
    import s3lite.status
    import s3lite.storage
    import s3lite.utilities

    assert s3lite.storage.S3 is not None
    assert s3lite.sdk.Boto3S3 is not None


def test_sdk_imports_confined_to_backend():
    """Test that boto3/botocore are only imported by the boto3 backend"""
    import s3lite
    package_dir = Path(s3lite.__file__).parent

    sdk_imports_found = []

    for py_file in package_dir.rglob("*.py"):
        relative = py_file.relative_to(package_dir)
        if relative.parts[0] == "tests" or relative.name == "sdk.py":
            continue
        tree = ast.parse(py_file.read_text())
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.split(".")[0] in ("boto3", "botocore"):
                        sdk_imports_found.append(f"{relative}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module and node.module.split(".")[0] in ("boto3", "botocore"):
                    sdk_imports_found.append(f"{relative}: from {node.module} import ...")

    assert len(sdk_imports_found) == 0, (
        "Found SDK imports outside s3lite/sdk.py:\n" + "\n".join(sdk_imports_found)
    )


def test_entry_point_registration():
    """Test that the CLI entry point is properly configured"""
    from s3lite.cli.main import cli
    import click

    assert isinstance(cli, click.core.Group)

    expected_commands = [
        "bucket-exists",
        "create-bucket",
        "delete-bucket",
        "exists",
        "put",
        "put-dir",
        "get",
        "delete",
    ]

    for cmd in expected_commands:
        assert cmd in cli.commands, f"Command '{cmd}' not found in CLI"
