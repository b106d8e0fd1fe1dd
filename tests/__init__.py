"""
make-babel test suite
=====================

Test Modules
------------
- test_naming.py: Tests for package-name validation and template resolution
- test_directory.py: Tests for target-directory checks and cleanup
- test_manifest.py: Tests for package.json merging
- test_installer.py: Tests for npm/Yarn command construction
- test_template.py: Tests for applying a template package
- test_generator.py: End-to-end tests of the creation pipeline
- test_models.py: Tests for Pydantic configuration models
- test_cli.py: Tests for command-line interface

No test touches the network or a real package manager; see
``FakePackageManager`` in conftest.py.

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_naming.py

    # Run specific test class
    pytest tests/test_models.py::TestScaffoldConfig
"""
