"""
Test suite for the MongoDB plugin.

Test Structure:
    - conftest.py: Shared fixtures and driver doubles
    - test_config.py: Settings, defaults and URI resolution
    - test_validators.py: Duration parsing
    - test_client.py: Client construction and operations
    - test_indexes.py: Baseline collection and index bootstrap
    - test_cli.py: Command-line interface

Running Tests:
    pytest                          # Run all tests
    pytest -v                       # Verbose output
    pytest --cov=mongo_plugin       # With coverage
    pytest tests/test_config.py     # Run specific test file
"""
