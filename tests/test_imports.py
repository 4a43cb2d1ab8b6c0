"""
Smoke tests to verify all modules can be imported.
"""

def test_import_auditor_core():
    import auditor_core
    assert hasattr(auditor_core, '__version__')


def test_import_store():
    import store
    assert hasattr(store, '__version__')


def test_import_registry():
    import registry
    assert hasattr(registry, '__version__')


def test_import_reporting():
    import reporting
    assert hasattr(reporting, '__version__')
